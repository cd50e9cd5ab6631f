"""
Request orchestrator: drives one query through the pipeline.

Usage (from the HTTP layer or the CLI):
    from slurm_query.orchestrator import handle

    fragment = await handle("from queue | take 10")

Stages, strictly in order:
    compile -> snapshot -> execute (load, harden, run, materialize) -> render

Any stage failure raises the matching PipelineError and nothing is rendered.
Blocking work (prqlc, DuckDB) runs in worker threads so concurrent requests
keep making progress; each request owns its temporary directory and its
DuckDB session.
"""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from slurm_query.config import Settings, get_settings
from slurm_query.domain.examples import EXAMPLES
from slurm_query.domain.models import ResultTable, materialize
from slurm_query.errors import PipelineError
from slurm_query.infrastructure.compiler import compile_query
from slurm_query.infrastructure.sandbox import run_query
from slurm_query.infrastructure.snapshot import acquire_snapshot
from slurm_query.renderer import render_examples, render_result
from slurm_query.utils.logging import get_logger
from slurm_query.utils.profiler import StageTiming, stage_timer

log = get_logger(__name__)


@dataclass
class QueryOutcome:
    """Everything one successful pipeline run produced."""

    sql: str
    result: ResultTable
    timings: List[StageTiming] = field(default_factory=list)

    def timings_ms(self) -> dict[str, float]:
        return {timing.label: timing.duration_ms for timing in self.timings}


def _execute(sql: str, snapshot_path: str, batch_size: int) -> ResultTable:
    return materialize(run_query(sql, snapshot_path, batch_size=batch_size))


def _log_failure(exc: PipelineError) -> None:
    extra = {"stage": exc.stage, "error_type": type(exc).__name__}
    if exc.user_facing:
        log.warning(f"[QUERY REJECTED] {exc.describe()}", extra=extra)
    else:
        log.error(f"[QUERY FAILED] {exc.describe()}", extra=extra, exc_info=exc)


async def run_pipeline(
    query: str,
    *,
    settings: Optional[Settings] = None,
    snapshot_command: Optional[Sequence[str]] = None,
) -> QueryOutcome:
    """
    Compile, snapshot and execute `query`, returning the materialized result.

    Parameters
    ----------
    query : str
        Raw PRQL source.
    settings : Settings, optional
        Settings override; defaults to the cached settings.
    snapshot_command : sequence of str, optional
        Argv override for the snapshot source.

    Raises
    ------
    PipelineError
        The subclass identifies the failing stage.
    """
    settings = settings or get_settings()
    timings: List[StageTiming] = []

    try:
        with stage_timer("compile", timings):
            sql = await asyncio.to_thread(compile_query, query)
        log.debug("Compiled query", extra={"stage": "compile", "sql": sql})

        async with AsyncExitStack() as stack:
            with stage_timer("snapshot", timings) as snapshot_timing:
                snapshot = await stack.enter_async_context(
                    acquire_snapshot(snapshot_command, settings=settings)
                )
                snapshot_timing.extra["size_bytes"] = snapshot.size_bytes

            with stage_timer("execute", timings) as execute_timing:
                result = await asyncio.to_thread(
                    _execute, sql, str(snapshot.path), settings.batch_size
                )
                execute_timing.extra["rows"] = result.row_count
    except PipelineError as exc:
        _log_failure(exc)
        raise

    outcome = QueryOutcome(sql=sql, result=result, timings=timings)
    log.info(
        f"[QUERY OK] {result.row_count} rows",
        extra={"rows": result.row_count, "timings_ms": outcome.timings_ms()},
    )
    return outcome


def render_landing(settings: Optional[Settings] = None) -> str:
    """Fragment shown when no query was submitted: the example list."""
    settings = settings or get_settings()
    return render_examples(EXAMPLES, settings.query_param)


async def handle(
    query: Optional[str],
    *,
    settings: Optional[Settings] = None,
    snapshot_command: Optional[Sequence[str]] = None,
) -> str:
    """
    Boundary called by the HTTP layer.

    Returns the example list when `query` is None, otherwise the rendered
    results table. Raises PipelineError on any failure.
    """
    if query is None:
        return render_landing(settings)

    outcome = await run_pipeline(query, settings=settings, snapshot_command=snapshot_command)
    with stage_timer("render", outcome.timings):
        return render_result(outcome.result)


__all__ = ["QueryOutcome", "handle", "render_landing", "run_pipeline"]
