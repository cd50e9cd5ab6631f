"""SLURM Query web app.

FastAPI front end for the query pipeline.

Routes:
    GET /        - Query form; with ?prql=<source> also the results table
    GET /health  - Health check

Run with `slurm-query serve`, or directly:
    uvicorn slurm_query.app:create_app --factory
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from slurm_query import __version__
from slurm_query.config import Settings, get_settings
from slurm_query.domain.examples import SCHEMA_COLUMNS
from slurm_query.errors import PipelineError
from slurm_query.orchestrator import handle
from slurm_query.renderer import render_schema_help
from slurm_query.utils.logging import get_logger
from slurm_query.utils.text import escape_html

log = get_logger(__name__)

_DATATABLES_CDN = "https://cdn.jsdelivr.net/npm/simple-datatables@latest"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>SLURM Query</title>
<link href="{cdn}/dist/style.css" rel="stylesheet" type="text/css">
<script src="{cdn}" type="text/javascript"></script>
<style>
  #query_form {{ text-align: center; }}
  #query_text {{ width: 80%; height: 195px; vertical-align: bottom; }}
  #query_submit {{ height: 200px; }}
  details.schema {{ margin: 10px 0 0 8%; }}
  ul.examples {{ margin-left: 5%; }}
</style>
</head>
<body>

<form id="query_form" action="/" method="GET">
  <textarea id="query_text" name="{param}" rows="15" spellcheck="false" placeholder="from queue">{query}</textarea>
  <input id="query_submit" type="submit" value="Submit">
</form>

{schema_help}

{fragment}

<script>
document.getElementById("query_text").addEventListener("keydown", event => {{
  if (event.ctrlKey && event.key === "Enter") {{
    event.preventDefault();
    document.getElementById("query_form").submit();
  }}
}});
if (document.getElementById("results")) {{
  new simpleDatatables.DataTable("#results", {{ perPageSelect: false, searchable: false }});
}}
</script>

</body>
</html>
"""


def render_page(query: Optional[str], fragment: str, settings: Settings) -> str:
    """Embed a pipeline fragment in the full page."""
    return PAGE_TEMPLATE.format(
        cdn=_DATATABLES_CDN,
        param=escape_html(settings.query_param),
        query=escape_html(query or ""),
        schema_help=render_schema_help(SCHEMA_COLUMNS),
        fragment=fragment,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters
    ----------
    settings : Settings, optional
        Settings override (tests); defaults to the cached settings.
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="SLURM Query",
        description="Query the SLURM job queue with PRQL",
        version=__version__,
    )

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> Response:
        query = request.query_params.get(settings.query_param)
        try:
            fragment = await handle(query, settings=settings)
        except PipelineError as exc:
            return PlainTextResponse(exc.describe(), status_code=500)
        return HTMLResponse(render_page(query, fragment, settings))

    log.debug("App created", extra={"query_param": settings.query_param})
    return app


__all__ = ["PAGE_TEMPLATE", "create_app", "render_page"]
