from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, cast

import pytest

from slurm_query.config import Settings
from slurm_query.errors import SnapshotAcquisitionFailed
from slurm_query.infrastructure.snapshot import _copy_stdout, acquire_snapshot

RECORD_COUNT = 3


@pytest.mark.asyncio
async def test_acquire_snapshot_captures_stdout_into_private_dir(
    test_settings: Settings, snapshot_command, make_jobs, isolated_tmp: Path
):
    command = snapshot_command(make_jobs(RECORD_COUNT))

    async with acquire_snapshot(command, settings=test_settings) as snapshot:
        assert snapshot.path.parent == snapshot.directory
        assert snapshot.path.name == test_settings.snapshot_filename
        assert snapshot.directory.parent == isolated_tmp
        assert snapshot.directory.name.startswith(test_settings.snapshot_tmp_prefix)
        records = json.loads(snapshot.path.read_text(encoding="utf-8"))
        assert len(records) == RECORD_COUNT
        assert snapshot.size_bytes == snapshot.path.stat().st_size

    assert not snapshot.directory.exists()
    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_acquire_snapshot_uses_configured_command(test_settings: Settings):
    async with acquire_snapshot(settings=test_settings) as snapshot:
        assert snapshot.path.read_text(encoding="utf-8") == "[]"


@pytest.mark.asyncio
async def test_non_zero_exit_fails_and_cleans_up(
    test_settings: Settings, failing_snapshot_command, isolated_tmp: Path
):
    with pytest.raises(SnapshotAcquisitionFailed, match="exited with status 3"):
        async with acquire_snapshot(failing_snapshot_command, settings=test_settings):
            pytest.fail("body must not run")

    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_missing_executable_fails(test_settings: Settings, isolated_tmp: Path):
    with pytest.raises(SnapshotAcquisitionFailed, match="Could not start"):
        async with acquire_snapshot(["definitely-not-a-real-squeue"], settings=test_settings):
            pass

    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_empty_command_fails(test_settings: Settings):
    with pytest.raises(SnapshotAcquisitionFailed, match="empty"):
        async with acquire_snapshot([], settings=test_settings):
            pass


@pytest.mark.asyncio
async def test_body_failure_still_removes_directory(
    test_settings: Settings, snapshot_command, make_jobs, isolated_tmp: Path
):
    with pytest.raises(RuntimeError, match="downstream"):
        async with acquire_snapshot(snapshot_command(make_jobs(1)), settings=test_settings):
            raise RuntimeError("downstream stage failed")

    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_cancellation_removes_directory(test_settings: Settings, isolated_tmp: Path):
    slow = [sys.executable, "-c", "import time; time.sleep(30)"]

    async def acquire() -> None:
        async with acquire_snapshot(slow, settings=test_settings):
            pass

    task = asyncio.create_task(acquire())
    for _ in range(100):
        await asyncio.sleep(0.05)
        if list(isolated_tmp.iterdir()):
            break
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert list(isolated_tmp.iterdir()) == []


@pytest.mark.asyncio
async def test_copy_without_stdout_pipe_fails(tmp_path: Path):
    process = cast(Any, SimpleNamespace(stdout=None))

    with pytest.raises(SnapshotAcquisitionFailed, match="no stdout pipe"):
        await _copy_stdout(process, tmp_path / "squeue.json")

    assert not (tmp_path / "squeue.json").exists()
