"""
Error taxonomy for the query pipeline.

Every stage raises exactly one `PipelineError` subclass. Arbitrary failures
from third-party code (prqlc, DuckDB, the OS) are converted at the stage
boundary with `stage_errors`, so callers only ever see this hierarchy.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Type


class PipelineError(Exception):
    """
    Base class for any failure that aborts a request.

    Attributes
    ----------
    stage : str
        Short identifier of the pipeline stage that failed.
    user_facing : bool
        True when the cause is almost certainly the submitted query rather
        than the environment.
    """

    stage: str = "pipeline"
    user_facing: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def describe(self) -> str:
        """Message suitable for a plain-text error response."""
        return f"[{self.stage}] {self.message}"


class SnapshotAcquisitionFailed(PipelineError):
    stage = "snapshot"


class CompileError(PipelineError):
    stage = "compile"
    user_facing = True


class EngineOpenFailed(PipelineError):
    stage = "engine_open"


class SnapshotLoadFailed(PipelineError):
    stage = "load"


class SandboxHardenFailed(PipelineError):
    stage = "harden"


class QueryExecutionFailed(PipelineError):
    stage = "execute"
    user_facing = True


@contextmanager
def stage_errors(error_cls: Type[PipelineError], context: str) -> Generator[None, None, None]:
    """
    Re-raise any exception escaping the block as `error_cls`.

    Pipeline errors raised inside the block pass through untouched so the most
    specific stage wins.
    """
    try:
        yield
    except PipelineError:
        raise
    except Exception as exc:  # noqa: BLE001 - stage boundary converts every failure
        raise error_cls(f"{context}: {exc}") from exc


__all__ = [
    "CompileError",
    "EngineOpenFailed",
    "PipelineError",
    "QueryExecutionFailed",
    "SandboxHardenFailed",
    "SnapshotAcquisitionFailed",
    "SnapshotLoadFailed",
    "stage_errors",
]
