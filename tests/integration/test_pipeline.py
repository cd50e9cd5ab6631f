"""
End-to-end pipeline tests.

These run the real compiler, a real snapshot subprocess and a real DuckDB
sandbox. The snapshot source is a small Python command that prints a JSON
fixture, so no SLURM installation is needed.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from slurm_query.config import Settings
from slurm_query.domain.examples import EXAMPLES
from slurm_query.errors import CompileError, QueryExecutionFailed, SnapshotAcquisitionFailed
from slurm_query.orchestrator import handle, run_pipeline
from slurm_query.utils.text import escape_query_component

pytestmark = pytest.mark.integration

SMALL_QUEUE = 2
LARGE_QUEUE = 5
SNAPSHOT_DELAY_SECONDS = 0.3


def _body_rows(fragment: str) -> int:
    body = fragment.split("<tbody>", 1)[1]
    return body.count("<tr>")


@pytest.mark.asyncio
async def test_select_everything_renders_every_job(
    test_settings: Settings, snapshot_command, make_jobs, isolated_tmp: Path
):
    command = snapshot_command(make_jobs(SMALL_QUEUE))

    fragment = await handle("from queue", settings=test_settings, snapshot_command=command)

    assert fragment.startswith('<table id="results"><thead><tr>')
    for column in ("job_id", "user_name", "job_state", "cpus"):
        assert f"<th>{column}</th>" in fragment
    assert _body_rows(fragment) == SMALL_QUEUE
    assert "<td>tim.hutt</td>" in fragment
    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_filter_and_sort_are_applied_by_the_engine(
    test_settings: Settings, snapshot_command, make_jobs
):
    command = snapshot_command(make_jobs(LARGE_QUEUE))
    source = "from queue\nfilter cpus > 2\nsort {-cpus}\nselect {job_id, cpus}"

    outcome = await run_pipeline(source, settings=test_settings, snapshot_command=command)

    assert outcome.result.column_names == ["job_id", "cpus"]
    assert [row[1] for row in outcome.result.rows] == ["5", "4", "3"]


@pytest.mark.asyncio
async def test_empty_result_renders_table_without_header(
    test_settings: Settings, snapshot_command, make_jobs
):
    command = snapshot_command(make_jobs(SMALL_QUEUE))

    fragment = await handle(
        "from queue\nfilter cpus > 100", settings=test_settings, snapshot_command=command
    )

    assert fragment == '<table id="results"><tbody></tbody></table>'


@pytest.mark.asyncio
async def test_unknown_column_fails_at_execution(
    test_settings: Settings, snapshot_command, make_jobs, isolated_tmp: Path
):
    command = snapshot_command(make_jobs(SMALL_QUEUE))

    with pytest.raises(QueryExecutionFailed) as excinfo:
        await handle(
            "from queue\nselect {nonexistent}", settings=test_settings, snapshot_command=command
        )

    assert excinfo.value.describe().startswith("[execute]")
    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_unbalanced_brace_fails_to_compile(test_settings: Settings, isolated_tmp: Path):
    with pytest.raises(CompileError) as excinfo:
        await handle("from queue\nselect {job_id", settings=test_settings)

    assert "\x1b" not in excinfo.value.message
    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_failing_snapshot_command_is_reported(
    test_settings: Settings, failing_snapshot_command, isolated_tmp: Path
):
    with pytest.raises(SnapshotAcquisitionFailed):
        await handle(
            "from queue", settings=test_settings, snapshot_command=failing_snapshot_command
        )

    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_concurrent_requests_see_only_their_own_snapshot(
    test_settings: Settings, snapshot_command, make_jobs, isolated_tmp: Path
):
    small = snapshot_command(make_jobs(SMALL_QUEUE, user="small"), delay=SNAPSHOT_DELAY_SECONDS)
    large = snapshot_command(make_jobs(LARGE_QUEUE, user="large"), delay=SNAPSHOT_DELAY_SECONDS)

    small_fragment, large_fragment = await asyncio.gather(
        handle("from queue", settings=test_settings, snapshot_command=small),
        handle("from queue", settings=test_settings, snapshot_command=large),
    )

    assert _body_rows(small_fragment) == SMALL_QUEUE
    assert "<td>large</td>" not in small_fragment
    assert _body_rows(large_fragment) == LARGE_QUEUE
    assert "<td>small</td>" not in large_fragment
    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_missing_query_lists_examples_with_encoded_links(test_settings: Settings):
    fragment = await handle(None, settings=test_settings)

    assert fragment.startswith('<ul class="examples">')
    for example in EXAMPLES:
        encoded = escape_query_component(example.source)
        assert f'href="?prql={encoded}"' in fragment
        assert "\n" not in encoded
