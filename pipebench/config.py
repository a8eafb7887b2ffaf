"""
pipebench -- Configuration System

All configuration is Pydantic-validated and loaded from:
1. default.yaml (defaults)
2. Environment variables (overrides)

Every tunable parameter of the benchmark lives here.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ─── Sub-configs ──────────────────────────────────────────────────


class CheckerConfig(BaseModel):
    binary_path: str = "NuSMV"
    # Batch command files and generated models are written here
    work_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    # None = wait for NuSMV indefinitely
    timeout_s: float | None = None
    keep_model_files: bool = False

    @field_validator("timeout_s")
    @classmethod
    def _positive_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            return None
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


# ─── Root Config ──────────────────────────────────────────────────


class PipeBenchConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="PIPEBENCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    checker: CheckerConfig = Field(default_factory=CheckerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path | None = None) -> PipeBenchConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}

    if nusmv_path := os.environ.get("PIPEBENCH_NUSMV_PATH"):
        raw.setdefault("checker", {})["binary_path"] = nusmv_path
    if work_dir := os.environ.get("PIPEBENCH_WORK_DIR"):
        raw.setdefault("checker", {})["work_dir"] = work_dir
    if timeout := os.environ.get("PIPEBENCH_CHECKER__TIMEOUT_S"):
        raw.setdefault("checker", {})["timeout_s"] = float(timeout)
    if level := os.environ.get("PIPEBENCH_LOGGING__LEVEL"):
        raw.setdefault("logging", {})["level"] = level

    return PipeBenchConfig(**raw)
