"""
HTML fragments for query results and the example list.

Every header, cell, name and attribute value is escaped, including cells from
numeric columns: they are stringified generically and carry no guarantee of
an HTML-safe character set.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from slurm_query.domain.models import ExampleQuery, ResultTable
from slurm_query.utils.text import escape_html, escape_query_component

RESULTS_TABLE_ID = "results"


def render_table(
    column_names: Optional[Sequence[str]],
    rows: Iterable[Sequence[str]],
) -> str:
    """
    Render rows as `<table id="results">`.

    A `<thead>` is emitted only when `column_names` is not None, i.e. when the
    result stream produced at least one batch.
    """
    parts: List[str] = [f'<table id="{RESULTS_TABLE_ID}">']
    if column_names is not None:
        parts.append("<thead><tr>")
        parts.extend(f"<th>{escape_html(name)}</th>" for name in column_names)
        parts.append("</tr></thead>")
    parts.append("<tbody>")
    for row in rows:
        parts.append("<tr>")
        parts.extend(f"<td>{escape_html(cell)}</td>" for cell in row)
        parts.append("</tr>")
    parts.append("</tbody></table>")
    return "".join(parts)


def render_result(result: ResultTable) -> str:
    return render_table(result.column_names, result.rows)


def render_examples(examples: Iterable[ExampleQuery], param: str) -> str:
    """Render examples as a list of links that pre-fill the query parameter."""
    items = "".join(
        f'<li><a href="?{escape_html(param)}={escape_query_component(example.source)}">'
        f"{escape_html(example.name)}</a></li>"
        for example in examples
    )
    return f'<ul class="examples">{items}</ul>'


def render_schema_help(columns: Iterable[Tuple[str, str]]) -> str:
    entries = "".join(
        f"<dt>{escape_html(name)}</dt><dd>{escape_html(description)}</dd>"
        for name, description in columns
    )
    return (
        '<details class="schema"><summary>Schema</summary>'
        "<p>These are the most useful columns.</p>"
        f"<dl>{entries}</dl></details>"
    )


__all__ = [
    "RESULTS_TABLE_ID",
    "render_examples",
    "render_result",
    "render_schema_help",
    "render_table",
]
