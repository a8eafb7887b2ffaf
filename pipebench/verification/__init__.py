"""
pipebench -- Verification

Drives NuSMV over generated models and turns its output into result
records.
"""

from pipebench.verification.checker import NuSMVBridge
from pipebench.verification.experiment import VerificationExperiment
from pipebench.verification.factory import ExperimentFactory
from pipebench.verification.parser import ResultParser
from pipebench.verification.stats import (
    ModelSummary,
    TimeSummary,
    summarize_models,
    summarize_times,
)
from pipebench.verification.types import (
    UNAVAILABLE,
    CheckerRun,
    ExperimentStatus,
    ResultRecord,
    Verdict,
)

__all__ = [
    "CheckerRun",
    "ExperimentFactory",
    "ExperimentStatus",
    "ModelSummary",
    "NuSMVBridge",
    "ResultParser",
    "ResultRecord",
    "TimeSummary",
    "UNAVAILABLE",
    "Verdict",
    "VerificationExperiment",
    "summarize_models",
    "summarize_times",
]
