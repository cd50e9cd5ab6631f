"""
PRQL to SQL compilation, pinned to the DuckDB dialect.
"""

from __future__ import annotations

import prqlc

from slurm_query.errors import CompileError
from slurm_query.utils.text import strip_control_sequences

SQL_TARGET = "sql.duckdb"


def compile_options() -> prqlc.CompileOptions:
    """Fixed compiler options: DuckDB dialect, formatted output, no signature comment."""
    return prqlc.CompileOptions(
        format=True,
        target=SQL_TARGET,
        signature_comment=False,
    )


def compile_query(source: str) -> str:
    """
    Compile PRQL `source` to DuckDB SQL.

    prqlc colours its diagnostics regardless of the options it is given, so
    the message is stripped of terminal escape sequences before it surfaces.

    Raises
    ------
    CompileError
        If the compiler rejects the source.
    """
    try:
        return prqlc.compile(source, compile_options())
    except Exception as exc:  # noqa: BLE001 - prqlc raises builtin exception types
        raise CompileError(strip_control_sequences(str(exc)).strip()) from exc


__all__ = ["SQL_TARGET", "compile_options", "compile_query"]
