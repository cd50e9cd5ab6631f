"""
Snapshot acquisition: run the snapshot source and capture its JSON output.

The output is written to a file inside a fresh temporary directory rather than
a NamedTemporaryFile, so the file can be closed and reopened by DuckDB without
being deleted and without tripping exclusive file locks on Windows. The
directory is removed when the `acquire_snapshot` scope exits, whatever the
outcome.
"""

from __future__ import annotations

import asyncio
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional, Sequence

from slurm_query.config import Settings, get_settings
from slurm_query.errors import SnapshotAcquisitionFailed
from slurm_query.utils.logging import get_logger

log = get_logger(__name__)

_READ_CHUNK_BYTES = 64 * 1024


@dataclass(frozen=True)
class Snapshot:
    """Handle to a captured snapshot; valid only inside its acquisition scope."""

    directory: Path
    path: Path
    size_bytes: int


async def _spawn(argv: Sequence[str]) -> asyncio.subprocess.Process:
    if not argv:
        raise SnapshotAcquisitionFailed("Snapshot command is empty")
    try:
        return await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise SnapshotAcquisitionFailed(f"Could not start {argv[0]!r}: {exc}") from exc


async def _copy_stdout(process: asyncio.subprocess.Process, path: Path) -> int:
    """
    Stream the child's stdout into `path` and return the number of bytes written.
    """
    if process.stdout is None:
        raise SnapshotAcquisitionFailed("Snapshot command has no stdout pipe")
    written = 0
    with path.open("wb") as fh:
        while True:
            chunk = await process.stdout.read(_READ_CHUNK_BYTES)
            if not chunk:
                break
            await asyncio.to_thread(fh.write, chunk)
            written += len(chunk)
    return written


async def _reap(process: asyncio.subprocess.Process) -> None:
    """Kill and wait for a child that is still running."""
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


@asynccontextmanager
async def acquire_snapshot(
    command: Optional[Sequence[str]] = None,
    settings: Optional[Settings] = None,
) -> AsyncIterator[Snapshot]:
    """
    Run the snapshot source and yield a handle to its captured output.

    Parameters
    ----------
    command : sequence of str, optional
        Explicit argv; defaults to the configured `SNAPSHOT_COMMAND`.
    settings : Settings, optional
        Settings override (tests); defaults to the cached settings.

    Raises
    ------
    SnapshotAcquisitionFailed
        If the command cannot be started, its output cannot be stored, or it
        exits with a non-zero status.
    """
    settings = settings or get_settings()
    argv = list(command) if command is not None else settings.snapshot_argv()

    tmpdir = tempfile.TemporaryDirectory(prefix=settings.snapshot_tmp_prefix)
    directory = Path(tmpdir.name)
    path = directory / settings.snapshot_filename
    process: Optional[asyncio.subprocess.Process] = None
    try:
        process = await _spawn(argv)
        try:
            size_bytes = await _copy_stdout(process, path)
        except OSError as exc:
            raise SnapshotAcquisitionFailed(f"Could not store snapshot output: {exc}") from exc

        status = await process.wait()
        if status != 0:
            raise SnapshotAcquisitionFailed(
                f"Snapshot command {' '.join(argv)!r} exited with status {status}"
            )

        log.debug(
            "Snapshot captured",
            extra={"stage": "snapshot", "path": str(path), "size_bytes": size_bytes},
        )
        yield Snapshot(directory=directory, path=path, size_bytes=size_bytes)
    finally:
        try:
            if process is not None:
                await _reap(process)
        finally:
            tmpdir.cleanup()


__all__ = ["Snapshot", "acquire_snapshot"]
