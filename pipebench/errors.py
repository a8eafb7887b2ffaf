"""
pipebench -- Error Hierarchy

All exceptions raised by the benchmark core.

Infeasible configurations are NOT errors: catalogs return None and the
caller skips the experiment. Parse misses are NOT errors either: the
result parser falls back to sentinel values.

Severity guide:
  GraphError         BUG    -- a pipeline creator wired the graph incorrectly
  PrerequisiteError  FATAL  -- batch command files could not be written
  CheckerError       FATAL  -- one NuSMV invocation failed; only that experiment aborts
"""

from __future__ import annotations


class PipeBenchError(RuntimeError):
    """Base for all benchmark errors."""


class GraphError(PipeBenchError):
    """Structural misuse of a module graph (bad port, arity mismatch, frozen graph)."""


class PrerequisiteError(PipeBenchError):
    """The NuSMV batch command files could not be written."""


class CheckerError(PipeBenchError):
    """
    A NuSMV invocation exited with a non-zero code, produced no output,
    timed out, or could not be started.

    Never retried. The experiment that raised it is marked FAILED and its
    result record stays partially populated.
    """

    def __init__(self, message: str, exit_code: int = -1, output: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.output = output
