from __future__ import annotations

import asyncio
import sys

import typer

from slurm_query.config import get_settings
from slurm_query.domain.examples import EXAMPLES
from slurm_query.errors import PipelineError
from slurm_query.infrastructure.compiler import compile_query
from slurm_query.orchestrator import run_pipeline
from slurm_query.renderer import render_result
from slurm_query.reporter import print_result
from slurm_query.utils.logging import configure_logging

app = typer.Typer(help="SLURM Query CLI: query the job queue with PRQL.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"snapshot_command={settings.snapshot_command!r} | "
        f"listen={settings.host}:{settings.port} param={settings.query_param} "
        f"batch={settings.batch_size} log_level={settings.log_level}"
    )


@app.command()
def examples() -> None:
    """
    List the example queries shown on the landing page.
    """
    for example in EXAMPLES:
        typer.secho(f"# {example.name}", bold=True)
        typer.echo(example.source.strip())
        typer.echo()


@app.command(name="compile")
def compile_command(
    query: str = typer.Argument(..., help="PRQL source to compile."),
) -> None:
    """
    Print the DuckDB SQL a PRQL query compiles to.
    """
    try:
        typer.echo(compile_query(query))
    except PipelineError as exc:
        typer.echo(exc.describe(), err=True)
        raise typer.Exit(code=1)


@app.command()
def query(
    query_text: str = typer.Argument(..., metavar="QUERY", help="PRQL source to run."),
    html: bool = typer.Option(False, "--html", help="Print the HTML fragment instead of a table."),
) -> None:
    """
    Run one query against a fresh snapshot and print the result.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    try:
        outcome = asyncio.run(run_pipeline(query_text, settings=settings))
    except PipelineError as exc:
        typer.echo(exc.describe(), err=True)
        raise typer.Exit(code=1)

    if html:
        typer.echo(render_result(outcome.result))
    else:
        print_result(outcome.result, timings_ms=outcome.timings_ms())


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default from settings)."),
) -> None:
    """
    Serve the web interface.
    """
    import uvicorn

    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    bind_host = host or settings.host
    bind_port = port or settings.port
    typer.echo(f"listening on http://{bind_host}:{bind_port}")
    uvicorn.run(
        "slurm_query.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
