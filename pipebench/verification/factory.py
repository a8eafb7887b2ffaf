"""
pipebench -- Experiment Factory

Turns configurations into verification experiments and runs batches of
them. Configurations whose pipeline or property does not apply yield no
experiment; a failing experiment never aborts the batch.
"""

from __future__ import annotations

from typing import Iterable

import structlog

from pipebench.config import PipeBenchConfig
from pipebench.models.library import ModelLibrary
from pipebench.pipelines.types import Configuration
from pipebench.properties.catalog import PropertyCatalog
from pipebench.verification.checker import NuSMVBridge
from pipebench.verification.experiment import VerificationExperiment
from pipebench.verification.types import ResultRecord

logger = structlog.get_logger().bind(system="pipebench.verification.factory")


class ExperimentFactory:
    def __init__(
        self,
        models: ModelLibrary,
        properties: PropertyCatalog,
        bridge: NuSMVBridge,
        keep_model_files: bool = False,
    ) -> None:
        self._models = models
        self._properties = properties
        self._bridge = bridge
        self._keep_model_files = keep_model_files
        self._log = logger

    @classmethod
    def from_config(cls, config: PipeBenchConfig) -> ExperimentFactory:
        bridge = NuSMVBridge(
            binary_path=config.checker.binary_path,
            work_dir=config.checker.work_dir,
            timeout_s=config.checker.timeout_s,
        )
        return cls(
            ModelLibrary(),
            PropertyCatalog(),
            bridge,
            keep_model_files=config.checker.keep_model_files,
        )

    @property
    def bridge(self) -> NuSMVBridge:
        return self._bridge

    def get(self, config: Configuration) -> VerificationExperiment | None:
        model = self._models.get(config)
        if model is None:
            return None
        prop = self._properties.build(config.property_name, model)
        if prop is None:
            return None
        return VerificationExperiment(model, prop, self._bridge, self._keep_model_files)

    async def run_all(self, configs: Iterable[Configuration]) -> list[ResultRecord]:
        """Run one experiment per applicable configuration, one after another."""
        records: list[ResultRecord] = []
        skipped = 0
        for config in configs:
            experiment = self.get(config)
            if experiment is None:
                skipped += 1
                self._log.debug(
                    "experiment_skipped",
                    query=config.query,
                    property=config.property_name,
                    domain_size=config.domain_size,
                )
                continue
            records.append(await experiment.run())

        self._log.info(
            "experiments_complete",
            total=len(records),
            failed=sum(1 for r in records if r.failure_reason),
            skipped=skipped,
        )
        return records
