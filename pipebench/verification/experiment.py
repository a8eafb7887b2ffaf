"""
pipebench -- Verification Experiment

Verifies one property against one model:

  constructed -> prerequisites_missing | prerequisites_ready
              -> executing -> done | failed

Execution writes the model plus its SPEC section to a file of its own,
runs NuSMV on the check batch (timed), then on the stats batch (untimed),
and parses each output into the result record independently.
"""

from __future__ import annotations

import time
from pathlib import Path

import structlog

from pipebench.errors import PipeBenchError
from pipebench.models.provider import ModelProvider
from pipebench.primitives.common import utc_now
from pipebench.properties.formulas import PropertyFormula
from pipebench.verification.checker import NuSMVBridge
from pipebench.verification.parser import ResultParser
from pipebench.verification.types import ExperimentStatus, ResultRecord

logger = structlog.get_logger().bind(system="pipebench.verification.experiment")


class VerificationExperiment:
    def __init__(
        self,
        model: ModelProvider,
        prop: PropertyFormula,
        bridge: NuSMVBridge,
        keep_model_file: bool = False,
    ) -> None:
        self.model = model
        self.property = prop
        self._bridge = bridge
        self._keep_model_file = keep_model_file
        self._parser = ResultParser()
        facts = model.describe()
        self.record = ResultRecord(
            **facts.model_dump(),
            property_name=prop.name,
            logic=prop.logic.value,
            formula=prop.render(),
        )
        self._log = logger.bind(experiment_id=self.record.id)

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def status(self) -> ExperimentStatus:
        return self.record.status

    def render_model(self) -> str:
        """Model body, a blank line, the SPEC keyword, then the formula."""
        body = self.model.serialize().rstrip("\n")
        return f"{body}\n\n{self.property.logic.keyword}\n{self.property.render()}\n"

    def check_prerequisites(self) -> bool:
        ready = self._bridge.prerequisites_fulfilled()
        self.record.status = (
            ExperimentStatus.PREREQUISITES_READY if ready else ExperimentStatus.PREREQUISITES_MISSING
        )
        return ready

    def fulfill_prerequisites(self) -> None:
        self._bridge.write_batch_files()
        self.record.status = ExperimentStatus.PREREQUISITES_READY

    async def execute(self) -> ResultRecord:
        """
        Run both checker phases.

        Raises PipeBenchError on failure, leaving the record partially
        populated; marking the experiment failed is up to the caller.
        """
        if not self.check_prerequisites():
            self.fulfill_prerequisites()
        self.record.status = ExperimentStatus.EXECUTING
        model_file = self._bridge.write_model(self.render_model())
        try:
            start = time.monotonic()
            check = await self._bridge.run(self._bridge.check_batch, model_file)
            self.record.time_ms = (time.monotonic() - start) * 1000
            self._parser.parse_check(check.output, self.record)

            stats = await self._bridge.run(self._bridge.stats_batch, model_file)
            self._parser.parse_stats(stats.output, self.record)
        finally:
            self._discard(model_file)

        self.record.status = ExperimentStatus.DONE
        self.record.completed_at = utc_now()
        self._log.info(
            "experiment_done",
            query=self.record.query,
            property=self.record.property_name,
            verdict=self.record.verdict,
            time_ms=round(self.record.time_ms, 1),
        )
        return self.record

    async def run(self) -> ResultRecord:
        """Execute, marking the experiment failed instead of raising."""
        try:
            return await self.execute()
        except PipeBenchError as exc:
            self.record.status = ExperimentStatus.FAILED
            self.record.failure_reason = str(exc)
            self.record.completed_at = utc_now()
            self._log.warning(
                "experiment_failed",
                query=self.record.query,
                property=self.record.property_name,
                error=str(exc),
            )
            return self.record

    def _discard(self, model_file: Path) -> None:
        if self._keep_model_file:
            return
        try:
            model_file.unlink(missing_ok=True)
        except OSError as exc:
            self._log.warning("model_file_not_removed", path=str(model_file), error=str(exc))
