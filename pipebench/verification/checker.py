"""
pipebench -- NuSMV Bridge

Subprocess wrapper for the NuSMV model checker. The bridge owns the two
batch command files shared by every experiment of a run, writes each
experiment's model to its own file, and invokes

    <binary> -source <batch-file> <model-file>

with stdout and stderr combined. NuSMV cannot reliably read a model from
stdin, so the model always goes through a file.

The binary must be available at the configured path or on $PATH.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from pathlib import Path

import structlog

from pipebench.errors import CheckerError, PrerequisiteError
from pipebench.primitives.common import new_id
from pipebench.verification.types import CheckerRun

logger = structlog.get_logger().bind(system="pipebench.verification.checker")

CHECK_BATCH_NAME = "check.smv"
STATS_BATCH_NAME = "stats.smv"
CHECK_BATCH = "go; check_property; quit;"
STATS_BATCH = "go; print_bdd_stats; print_reachable_states; quit;"


class NuSMVBridge:
    def __init__(
        self,
        binary_path: str = "NuSMV",
        work_dir: Path | str = ".",
        timeout_s: float | None = None,
    ) -> None:
        self._binary_path = binary_path
        self._work_dir = Path(work_dir)
        self._timeout_s = timeout_s
        self._log = logger

    @property
    def check_batch(self) -> Path:
        return self._work_dir / CHECK_BATCH_NAME

    @property
    def stats_batch(self) -> Path:
        return self._work_dir / STATS_BATCH_NAME

    # ─── Batch files ─────────────────────────────────────────────

    def prerequisites_fulfilled(self) -> bool:
        return self.check_batch.is_file() and self.stats_batch.is_file()

    def write_batch_files(self) -> None:
        """Write both batch files. Their content never changes, so rewriting is harmless."""
        try:
            self._work_dir.mkdir(parents=True, exist_ok=True)
            self.check_batch.write_text(CHECK_BATCH, encoding="utf-8")
            self.stats_batch.write_text(STATS_BATCH, encoding="utf-8")
        except OSError as exc:
            raise PrerequisiteError(f"Cannot write NuSMV batch files in {self._work_dir}: {exc}") from exc
        self._log.debug("batch_files_written", work_dir=str(self._work_dir))

    def clean_batch_files(self) -> None:
        self.check_batch.unlink(missing_ok=True)
        self.stats_batch.unlink(missing_ok=True)

    # ─── Models ──────────────────────────────────────────────────

    def write_model(self, text: str) -> Path:
        """Write model text to a file unique to the calling experiment."""
        path = self._work_dir / f"model-{new_id()}.smv"
        try:
            self._work_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise CheckerError(f"Cannot write model file {path}: {exc}") from exc
        return path

    # ─── Invocation ──────────────────────────────────────────────

    async def check_available(self) -> bool:
        """Check if the NuSMV binary can be started."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self._binary_path, "-h",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError:
            self._log.warning("nusmv_not_available", path=self._binary_path)
            return False
        try:
            await asyncio.wait_for(proc.communicate(), timeout=10.0)
        except TimeoutError:
            proc.kill()
            await proc.communicate()
            self._log.warning("nusmv_not_available", path=self._binary_path, reason="timeout")
            return False
        self._log.info("nusmv_available", path=self._binary_path)
        return True

    async def run(self, batch_file: Path, model_file: Path) -> CheckerRun:
        """
        Run NuSMV once and return its combined output.

        Raises CheckerError if the binary cannot be started, times out,
        exits with a non-zero code, or prints nothing. The process is
        killed if the caller cancels the run.
        """
        run = CheckerRun(batch_file=str(batch_file), model_file=str(model_file))
        start = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                self._binary_path, "-source", str(batch_file), str(model_file),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError as exc:
            raise CheckerError(f"NuSMV binary not found: {self._binary_path}") from exc
        except OSError as exc:
            raise CheckerError(f"Cannot start NuSMV at {self._binary_path}: {exc}") from exc

        try:
            stdout_bytes, _ = await asyncio.wait_for(proc.communicate(), timeout=self._timeout_s)
        except TimeoutError as exc:
            proc.kill()
            await proc.communicate()
            raise CheckerError(f"NuSMV timed out after {self._timeout_s}s") from exc
        except asyncio.CancelledError:
            self._log.warning("nusmv_run_cancelled", batch=batch_file.name)
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            raise

        run.elapsed_ms = (time.monotonic() - start) * 1000
        run.exit_code = proc.returncode if proc.returncode is not None else -1
        run.output = stdout_bytes.decode("utf-8", errors="replace") if stdout_bytes else ""

        self._log.debug(
            "nusmv_run_result",
            batch=batch_file.name,
            exit_code=run.exit_code,
            output_len=len(run.output),
            elapsed_ms=round(run.elapsed_ms, 1),
        )
        if run.exit_code != 0:
            raise CheckerError(
                f"NuSMV exited with code {run.exit_code}",
                exit_code=run.exit_code,
                output=run.output,
            )
        if not run.output:
            raise CheckerError("NuSMV returned no output", exit_code=run.exit_code)
        return run
