"""
Infrastructure package for SLURM Query.

Centralizes the I/O-bound pipeline stages: running the snapshot source,
compiling PRQL, and executing SQL in a hardened DuckDB session. Keep this
layer focused on I/O and resource management, decoupled from rendering and
orchestration.
"""

from slurm_query.infrastructure.compiler import compile_query
from slurm_query.infrastructure.sandbox import SandboxSession, run_query
from slurm_query.infrastructure.snapshot import Snapshot, acquire_snapshot

__all__ = [
    "SandboxSession",
    "Snapshot",
    "acquire_snapshot",
    "compile_query",
    "run_query",
]
