"""Static report server for the output directory."""

import logging
from datetime import datetime
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from jinja2 import BaseLoader, Environment
from pydantic import BaseModel

from feedscore.ledger import LEDGER_FILENAME

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000
REPORT_EXTENSIONS = (".html", ".csv", ".xlsx", ".json", ".md")
NO_REPORTS_MESSAGE = "No HTML reports found. Run the analyzer first."

LISTING_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Feedscore Reports</title>
  <style>
    body {
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Arial, sans-serif;
      max-width: 1000px; margin: 0 auto; padding: 20px; line-height: 1.6;
    }
    h1 { border-bottom: 1px solid #eee; padding-bottom: 10px; }
    table { width: 100%; border-collapse: collapse; }
    th, td { padding: 10px; border-bottom: 1px solid #eee; text-align: left; }
    th { background-color: #f5f5f5; }
    tr:hover { background-color: #f9f9f9; }
    a { color: #0366d6; text-decoration: none; }
    a:hover { text-decoration: underline; }
    .file-size { color: #666; }
  </style>
</head>
<body>
  <h1>Available Reports</h1>
  <table>
    <thead><tr><th>Filename</th><th>Created</th><th>Size</th></tr></thead>
    <tbody>
    {% for report in reports %}
      <tr>
        <td><a href="{{ report.path }}">{{ report.filename }}</a></td>
        <td>{{ report.created.strftime("%Y-%m-%d %H:%M:%S") }}</td>
        <td class="file-size">{{ report.size | file_size }}</td>
      </tr>
    {% endfor %}
    </tbody>
  </table>
</body>
</html>
"""


class ReportFile(BaseModel):
    """A report in the output directory."""

    filename: str
    path: str
    created: datetime
    size: int

    model_config = {"frozen": True}


def format_file_size(size: int) -> str:
    """Human-readable size: bytes, KB, MB or GB with two decimals."""
    if size < 1024:
        return f"{size} bytes"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} GB"


def list_reports(output_dir: Path) -> list[ReportFile]:
    """List report files, most recently created first.

    The cost ledger and in-progress temp files are not reports and are skipped.
    """
    if not output_dir.is_dir():
        return []
    reports = []
    for path in output_dir.iterdir():
        if (
            not path.is_file()
            or path.suffix not in REPORT_EXTENSIONS
            or path.name.startswith(".")
            or path.name == LEDGER_FILENAME
        ):
            continue
        stat = path.stat()
        reports.append(
            ReportFile(
                filename=path.name,
                path=f"/{path.name}",
                created=datetime.fromtimestamp(stat.st_ctime),
                size=stat.st_size,
            )
        )
    reports.sort(key=lambda r: r.created, reverse=True)
    return reports


def create_app(output_dir: Path) -> FastAPI:
    """Build the report server app for ``output_dir``.

    Routes:
        ``GET /``: redirect to the newest HTML report.
        ``GET /reports``: HTML listing of all reports.
        ``GET /api/reports``: the same listing as JSON.
        Anything else is served as a static file from ``output_dir``.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    app = FastAPI(title="feedscore reports")

    env = Environment(loader=BaseLoader(), autoescape=True)
    env.filters["file_size"] = format_file_size
    listing = env.from_string(LISTING_TEMPLATE)

    @app.get("/", response_model=None)
    def latest_report() -> Response:
        html_reports = [r for r in list_reports(output_dir) if r.filename.endswith(".html")]
        if not html_reports:
            return PlainTextResponse(NO_REPORTS_MESSAGE)
        return RedirectResponse(url=html_reports[0].path, status_code=302)

    @app.get("/reports", response_class=HTMLResponse)
    def reports_page() -> str:
        return listing.render(reports=list_reports(output_dir))

    @app.get("/api/reports")
    def reports_api() -> list[ReportFile]:
        return list_reports(output_dir)

    # Mounted last so the routes above take precedence.
    app.mount("/", StaticFiles(directory=output_dir), name="reports")
    return app


def serve(output_dir: Path, *, host: str = "127.0.0.1", port: int = DEFAULT_PORT) -> None:
    """Serve ``output_dir`` until interrupted."""
    app = create_app(output_dir)
    logger.info("Server running at http://%s:%d", host, port)
    logger.info("View all reports at http://%s:%d/reports", host, port)
    uvicorn.run(app, host=host, port=port, log_level="info")
