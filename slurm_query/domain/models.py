"""
Domain models for SLURM Query.

Result data flows through the pipeline as frozen Pydantic models: the sandbox
yields `ResultBatch` chunks, `materialize` folds them into a `ResultTable`,
and both renderers (HTML and terminal) consume that.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "arbitrary_types_allowed": False,
}


class ExampleQuery(BaseModel):
    """
    A named PRQL query offered on the landing page.
    """

    name: str = Field(..., description="Human-readable title.")
    source: str = Field(..., description="PRQL source text.")

    model_config = _FROZEN


class ResultBatch(BaseModel):
    """
    One chunk of a result stream. Cells are already stringified.
    """

    column_names: List[str] = Field(..., description="Column names as reported by the engine.")
    rows: List[List[str]] = Field(default_factory=list, description="Row-major cell text.")

    model_config = _FROZEN

    def __len__(self) -> int:
        return len(self.rows)


class ResultTable(BaseModel):
    """
    A fully materialized result.

    `column_names` is None when the stream produced no batch at all, which is
    distinct from a batch with zero rows.
    """

    column_names: Optional[List[str]] = Field(None, description="Columns of the first batch.")
    rows: List[List[str]] = Field(default_factory=list, description="Row-major cell text.")

    model_config = _FROZEN

    @property
    def row_count(self) -> int:
        return len(self.rows)


def materialize(batches: Iterable[ResultBatch]) -> ResultTable:
    """
    Collect a batch stream into a ResultTable.

    Column names come from the first batch only.
    """
    column_names: Optional[List[str]] = None
    rows: List[List[str]] = []
    for batch in batches:
        if column_names is None:
            column_names = list(batch.column_names)
        rows.extend(batch.rows)
    return ResultTable(column_names=column_names, rows=rows)


__all__ = ["ExampleQuery", "ResultBatch", "ResultTable", "materialize"]
