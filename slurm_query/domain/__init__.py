"""
Domain package for SLURM Query.

Exports the result models and the static landing-page content.
"""

from slurm_query.domain.examples import EXAMPLES, SCHEMA_COLUMNS
from slurm_query.domain.models import ExampleQuery, ResultBatch, ResultTable, materialize

__all__ = [
    "EXAMPLES",
    "SCHEMA_COLUMNS",
    "ExampleQuery",
    "ResultBatch",
    "ResultTable",
    "materialize",
]
