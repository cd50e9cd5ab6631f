"""
Utilities package for SLURM Query.

Exports shared helpers for logging, timing and text escaping. Keep this
package lightweight and free of pipeline logic.
"""

from slurm_query.utils.logging import configure_logging, get_logger
from slurm_query.utils.profiler import StageTiming, stage_timer
from slurm_query.utils.text import escape_html, escape_query_component, strip_control_sequences

__all__ = [
    "configure_logging",
    "get_logger",
    "StageTiming",
    "stage_timer",
    "escape_html",
    "escape_query_component",
    "strip_control_sequences",
]
