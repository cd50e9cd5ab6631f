"""
Synthetic snapshot source for SLURM Query.

Emits a deterministic, seeded JSON array of `squeue`-shaped job records so the
app can run without a SLURM cluster:

    SNAPSHOT_COMMAND="python scripts/generate_snapshot.py --jobs 200" slurm-query serve
"""

from __future__ import annotations

import json
import random
import sys
import time
from pathlib import Path
from typing import Any

import typer

app = typer.Typer(help="Generate a synthetic squeue-style JSON snapshot.")

USERS = ["tim.hutt", "ada.l", "grace.h", "alan.t", "edsger.d"]
ACCOUNTS = ["aspall/formal", "hw/verif", "ml/train", "none"]
PARTITIONS = ["all", "gpu", "short"]
STATES = ["RUNNING", "PENDING", "COMPLETING", "SUSPENDED"]
COMMANDS = ["bash", "python train.py", "make regress", "./sim --seed 7"]


def _generate_jobs(jobs: int, seed: int, now: int) -> list[dict[str, Any]]:
    rng = random.Random(seed)
    records: list[dict[str, Any]] = []
    for i in range(jobs):
        user = rng.choice(USERS)
        state = rng.choice(STATES)
        submit_time = now - rng.randint(60, 7 * 24 * 3600)
        start_time = submit_time + rng.randint(0, 3600) if state != "PENDING" else 0
        cpus = rng.choice([1, 2, 4, 8, 16])
        node_count = rng.choice([1, 1, 1, 2, 4])
        records.append(
            {
                "account": rng.choice(ACCOUNTS),
                "command": rng.choice(COMMANDS),
                "eligible_time": submit_time,
                "end_time": start_time + rng.randint(3600, 30 * 24 * 3600) if start_time else 0,
                "exit_code": 0,
                "job_id": 10_700_000 + i,
                "job_state": state,
                "licenses": "",
                "max_cpus": 0,
                "max_nodes": 0,
                "name": f"job_{user.split('.')[0]}_{i}",
                "nodes": f"slurm{rng.randint(1, 8)}.example.com" if start_time else "",
                "tasks_per_node": 0,
                "cpus": cpus,
                "node_count": node_count,
                "tasks": cpus,
                "partition": rng.choice(PARTITIONS),
                "memory_per_node": rng.choice([1024, 4096, 16384, 65536]),
                "qos": "normal",
                "start_time": start_time,
                "standard_error": "",
                "standard_input": "",
                "standard_output": "",
                "submit_time": submit_time,
                "time_limit": None,
                "user_id": 529_202_000 + USERS.index(user),
                "user_name": user,
                "current_working_directory": f"/opt/work/{user.split('.')[0]}",
            }
        )
    return records


@app.command()
def main(
    jobs: int = typer.Option(
        50,
        "--jobs",
        "-n",
        help="Number of job records to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    now: int | None = typer.Option(
        None,
        "--now",
        help="Reference UNIX timestamp (defaults to the current time).",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write to this file instead of stdout.",
    ),
) -> None:
    """
    Generate job records and write them as a JSON array.
    """
    records = _generate_jobs(jobs, seed=seed, now=now if now is not None else int(time.time()))
    payload = json.dumps(records, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        typer.echo(f"Wrote {jobs:,} jobs -> {output}", err=True)
    else:
        sys.stdout.write(payload)
        sys.stdout.write("\n")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
