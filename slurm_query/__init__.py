"""
SLURM Query - query the SLURM job queue with PRQL.

Each request compiles a PRQL query to DuckDB SQL, captures a fresh snapshot of
the queue (`squeue --json`), loads it into a hardened in-memory DuckDB
session, and renders the result as an HTML table:

- PRQL compilation pinned to the DuckDB dialect
- Per-request snapshot in a private temporary directory
- Single-use sandboxed DuckDB session
- Escaped HTML rendering
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from slurm_query.config import Settings, get_settings
from slurm_query.errors import (
    CompileError,
    EngineOpenFailed,
    PipelineError,
    QueryExecutionFailed,
    SandboxHardenFailed,
    SnapshotAcquisitionFailed,
    SnapshotLoadFailed,
)
from slurm_query.orchestrator import QueryOutcome, handle, run_pipeline
from slurm_query.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Orchestration
    "QueryOutcome",
    "handle",
    "run_pipeline",
    # Errors
    "PipelineError",
    "CompileError",
    "EngineOpenFailed",
    "QueryExecutionFailed",
    "SandboxHardenFailed",
    "SnapshotAcquisitionFailed",
    "SnapshotLoadFailed",
    # Logging
    "configure_logging",
    "get_logger",
]
