"""
Execution sandbox: a single-use, in-memory DuckDB session.

Lifecycle of one session:

1. open an in-memory connection;
2. load the snapshot file into the `queue` table (needs filesystem access);
3. harden the session: disable external access and the filesystem/network
   providers, stop extension auto-loading, then lock the configuration;
4. execute the untrusted compiled statement;
5. fetch result batches lazily with `fetchmany`.

Hardening happens strictly after the trusted load and strictly before the
untrusted statement. Each session holds one table and runs one statement.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence

import duckdb

from slurm_query.config import get_settings
from slurm_query.domain.models import ResultBatch
from slurm_query.errors import (
    EngineOpenFailed,
    QueryExecutionFailed,
    SandboxHardenFailed,
    SnapshotLoadFailed,
    stage_errors,
)
from slurm_query.utils.logging import get_logger

log = get_logger(__name__)

TABLE_NAME = "queue"

# enable_external_access must precede disabled_filesystems; lock_configuration
# must come last.
HARDENING_STATEMENTS: tuple[str, ...] = (
    "SET enable_external_access=false",
    "SET disabled_filesystems='LocalFileSystem,HTTPFileSystem'",
    "SET autoinstall_known_extensions=false",
    "SET autoload_known_extensions=false",
    "SET lock_configuration=true",
)


def _sql_string_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def cell_text(value: Any) -> str:
    """
    Stringify one typed cell value.

    Nested values are rendered recursively: STRUCTs as `{key: value, ...}` and
    LISTs as `[item, ...]`, with the same scalar rules at every level.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, dict):
        fields = ", ".join(f"{key}: {cell_text(item)}" for key, item in value.items())
        return "{" + fields + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(cell_text(item) for item in value) + "]"
    return str(value)


def _batched_fetch(conn: duckdb.DuckDBPyConnection, batch_size: int) -> Iterator[list]:
    """
    Yield batches from the pending result using fetchmany.
    """
    while True:
        batch = conn.fetchmany(batch_size)
        if not batch:
            break
        yield batch


class SandboxSession:
    """
    One hardened DuckDB session.

    Use as a context manager; the connection is closed on exit.

    Example
    -------
        with SandboxSession() as session:
            session.load_snapshot(snapshot.path)
            session.harden()
            for batch in session.execute(sql):
                ...
    """

    def __init__(self, batch_size: Optional[int] = None) -> None:
        self.batch_size = batch_size or get_settings().batch_size
        self._conn: Optional[duckdb.DuckDBPyConnection] = None
        self._loaded = False
        self._hardened = False

    @property
    def hardened(self) -> bool:
        return self._hardened

    def open(self) -> "SandboxSession":
        with stage_errors(EngineOpenFailed, "Opening in-memory DuckDB session"):
            self._conn = duckdb.connect(":memory:")
        return self

    def _connection(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise EngineOpenFailed("Session is not open")
        return self._conn

    def load_snapshot(self, path: Path | str) -> None:
        """Create the `queue` table from a JSON file, inferring its schema."""
        if self._hardened:
            raise SnapshotLoadFailed("Session is already hardened; the snapshot must load first")
        conn = self._connection()
        with stage_errors(SnapshotLoadFailed, "Reading JSON snapshot"):
            conn.execute(
                f"CREATE TABLE {TABLE_NAME} AS "
                f"SELECT * FROM read_json_auto({_sql_string_literal(str(path))})"
            )
        self._loaded = True

    def harden(self) -> None:
        """Apply HARDENING_STATEMENTS in order."""
        conn = self._connection()
        for statement in HARDENING_STATEMENTS:
            with stage_errors(SandboxHardenFailed, f"Applying {statement!r}"):
                conn.execute(statement)
        self._hardened = True

    def execute(self, sql: str) -> Iterator[ResultBatch]:
        """
        Run `sql` and lazily yield its result batches.

        The column names of the first batch are authoritative; any later batch
        with a different width raises QueryExecutionFailed.
        """
        if not self._hardened:
            raise SandboxHardenFailed("Refusing to run a statement in an unhardened session")
        conn = self._connection()
        with stage_errors(QueryExecutionFailed, "Executing query"):
            conn.execute(sql)
            description = conn.description or []

        column_names: Optional[List[str]] = None
        with stage_errors(QueryExecutionFailed, "Fetching results"):
            for raw_batch in _batched_fetch(conn, self.batch_size):
                if column_names is None:
                    column_names = [column[0] for column in description]
                yield ResultBatch(
                    column_names=column_names,
                    rows=[_row_text(row, len(column_names)) for row in raw_batch],
                )

    def close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.close()
            finally:
                self._conn = None

    def __enter__(self) -> "SandboxSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _row_text(row: Sequence[Any], width: int) -> List[str]:
    if len(row) != width:
        raise QueryExecutionFailed(
            f"Result row has {len(row)} columns but the stream started with {width}"
        )
    return [cell_text(value) for value in row]


def run_query(
    sql: str,
    snapshot_path: Path | str,
    batch_size: Optional[int] = None,
) -> Iterator[ResultBatch]:
    """
    Load `snapshot_path` into a fresh sandbox, run `sql` and yield result batches.

    The session is torn down when the iterator is exhausted, fails, or is
    closed early.
    """
    with SandboxSession(batch_size=batch_size) as session:
        session.load_snapshot(snapshot_path)
        session.harden()
        log.debug("Sandbox ready", extra={"stage": "harden", "table": TABLE_NAME})
        yield from session.execute(sql)


__all__ = [
    "HARDENING_STATEMENTS",
    "SandboxSession",
    "TABLE_NAME",
    "cell_text",
    "run_query",
]
