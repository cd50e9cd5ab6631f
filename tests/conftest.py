"""
Pytest configuration for SLURM Query.

Provides fixtures for:
- Settings overrides for tests
- Snapshot source commands backed by JSON fixture files
- An isolated temporary root so tests can assert snapshot cleanup
"""

from __future__ import annotations

import json
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable, List

import pytest

from slurm_query.config import Settings

# Writes the file named in argv[1] to stdout, optionally after a delay (argv[2]).
_CAT_SCRIPT = (
    "import pathlib, sys, time\n"
    "time.sleep(float(sys.argv[2]) if len(sys.argv) > 2 else 0)\n"
    "sys.stdout.write(pathlib.Path(sys.argv[1]).read_text(encoding='utf-8'))\n"
)

SnapshotCommandFactory = Callable[..., List[str]]


def _jobs(count: int, user: str = "tim.hutt") -> list[dict[str, Any]]:
    return [
        {"job_id": 10_700_000 + i, "user_name": user, "job_state": "RUNNING", "cpus": i + 1}
        for i in range(count)
    ]


@pytest.fixture
def make_jobs() -> Callable[..., list[dict[str, Any]]]:
    """
    Factory for minimal squeue-like job records: make_jobs(count, user=...).
    """
    return _jobs


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.
    """
    return Settings(
        snapshot_command=f"{sys.executable} -c 'import sys; sys.stdout.write(\"[]\")'",
        snapshot_tmp_prefix="slurm-query-test-",
        batch_size=2,
        log_level="DEBUG",
    )


@pytest.fixture
def isolated_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Point `tempfile` at an empty directory so leftover snapshot dirs are visible.
    """
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def snapshot_command(tmp_path: Path) -> SnapshotCommandFactory:
    """
    Factory returning an argv that prints a JSON document to stdout.

    Usage: snapshot_command(records, delay=0.0)
    """
    counter = 0

    def factory(records: Any, delay: float = 0.0) -> List[str]:
        nonlocal counter
        counter += 1
        path = tmp_path / f"fixture-{counter}.json"
        path.write_text(json.dumps(records), encoding="utf-8")
        return [sys.executable, "-c", _CAT_SCRIPT, str(path), str(delay)]

    return factory


@pytest.fixture
def failing_snapshot_command() -> List[str]:
    return [sys.executable, "-c", "import sys; sys.stdout.write('[]'); sys.exit(3)"]


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Callable[[Any], Path]:
    """
    Factory writing records to a JSON file and returning its path.
    """

    def factory(records: Any) -> Path:
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(records), encoding="utf-8")
        return path

    return factory
