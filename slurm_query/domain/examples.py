"""
Static content shown on the landing page: example queries and a short guide to
the most useful columns of the `queue` relation.
"""

from __future__ import annotations

from typing import Tuple

from slurm_query.domain.models import ExampleQuery

EXAMPLES: Tuple[ExampleQuery, ...] = (
    ExampleQuery(
        name="All data",
        source="""
from queue
""",
    ),
    ExampleQuery(
        name="Aggregate CPU and memory use by user and job state",
        source="""
from queue
derive {
  mem_gb = node_count * memory_per_node / 1024,
}
group {user_name, job_state} (
  aggregate {
    total_cpus = sum cpus,
    total_mem_gb = sum mem_gb,
  }
)
sort { -total_mem_gb }
""",
    ),
    ExampleQuery(
        name="Number of jobs by user",
        source="""
from queue
group user_name (
  aggregate {
    num_jobs = count user_name,
  }
)
sort (-num_jobs)
""",
    ),
    ExampleQuery(
        name="Number of jobs by user/account",
        source="""
from queue
group {user_name, account} (
  aggregate {
    num_jobs = count 1,
  }
)
sort (-num_jobs)
""",
    ),
    ExampleQuery(
        name="Number of jobs by user with no account",
        source="""
from queue
filter account == "none"
group user_name (
  aggregate {
    num_jobs = count 1,
  }
)
sort (-num_jobs)
""",
    ),
)

# (column, description) pairs for the schema help block.
SCHEMA_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("account", 'e.g. "aspall/formal"'),
    ("command", 'e.g. "bash"'),
    ("eligible_time", "e.g. 1707412088"),
    ("end_time", "e.g. 1738948088"),
    ("exit_code", "e.g. 0"),
    ("job_id", "e.g. 10700559"),
    ("job_state", 'e.g. "RUNNING"'),
    ("licenses", 'e.g. ""'),
    ("max_cpus", "e.g. 0"),
    ("max_nodes", "e.g. 0"),
    ("name", 'e.g. "qfm_aspall"'),
    ("nodes", 'e.g. "slurm3.example.com"'),
    ("tasks_per_node", "e.g. 0"),
    ("cpus", "e.g. 1"),
    ("node_count", "e.g. 1"),
    ("tasks", "e.g. 1"),
    ("partition", 'e.g. "all"'),
    ("memory_per_node", "In MB, e.g. 4096"),
    ("qos", 'Quality of Service, e.g. "normal"'),
    ("start_time", "e.g. 1707412088"),
    ("standard_error", 'Path to file containing stderr, e.g. ""'),
    ("standard_input", 'Path to file containing stdin, e.g. ""'),
    ("standard_output", 'Path to file containing stdout, e.g. ""'),
    ("submit_time", "e.g. 1707412087"),
    ("time_limit", "e.g. null"),
    ("user_id", "e.g. 529202496"),
    ("user_name", 'e.g. "tim.hutt"'),
    ("current_working_directory", 'e.g. "/opt/work/foo"'),
)


__all__ = ["EXAMPLES", "SCHEMA_COLUMNS"]
