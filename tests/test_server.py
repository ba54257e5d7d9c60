"""Tests for the static report server."""

import pytest
from fastapi.testclient import TestClient

from feedscore.ledger import LEDGER_FILENAME
from feedscore.server import NO_REPORTS_MESSAGE, create_app, format_file_size, list_reports


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "output"


def test_format_file_size() -> None:
    assert format_file_size(0) == "0 bytes"
    assert format_file_size(1023) == "1023 bytes"
    assert format_file_size(1536) == "1.50 KB"
    assert format_file_size(5 * 1024 * 1024) == "5.00 MB"
    assert format_file_size(3 * 1024**3) == "3.00 GB"


def test_list_reports_skips_non_reports(output_dir) -> None:
    output_dir.mkdir()
    (output_dir / "analyzed-articles-1.html").write_text("<html></html>")
    (output_dir / "analyzed-articles-1.csv").write_text("a,b\n")
    (output_dir / LEDGER_FILENAME).write_text("{}")
    (output_dir / ".analyzed-articles-2.html.tmp").write_text("")
    (output_dir / "notes.txt").write_text("x")
    (output_dir / "subdir").mkdir()

    names = sorted(r.filename for r in list_reports(output_dir))
    assert names == ["analyzed-articles-1.csv", "analyzed-articles-1.html"]


def test_list_reports_missing_dir(tmp_path) -> None:
    assert list_reports(tmp_path / "absent") == []


def test_root_without_reports(output_dir) -> None:
    client = TestClient(create_app(output_dir))
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == NO_REPORTS_MESSAGE
    assert output_dir.is_dir()


def test_root_redirects_to_html_report(output_dir) -> None:
    output_dir.mkdir()
    (output_dir / "analyzed-articles-1.csv").write_text("a,b\n")
    (output_dir / "analyzed-articles-1.html").write_text("<html>report</html>")
    client = TestClient(create_app(output_dir))

    response = client.get("/", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/analyzed-articles-1.html"


def test_static_report_is_served(output_dir) -> None:
    output_dir.mkdir()
    (output_dir / "analyzed-articles-1.html").write_text("<html>report</html>")
    client = TestClient(create_app(output_dir))

    response = client.get("/analyzed-articles-1.html")
    assert response.status_code == 200
    assert "report" in response.text


def test_missing_file_is_404(output_dir) -> None:
    client = TestClient(create_app(output_dir))
    assert client.get("/nope.html").status_code == 404


def test_reports_listing(output_dir) -> None:
    output_dir.mkdir()
    (output_dir / "analyzed-articles-1.json").write_text("[]")
    client = TestClient(create_app(output_dir))

    page = client.get("/reports")
    assert page.status_code == 200
    assert '<a href="/analyzed-articles-1.json">analyzed-articles-1.json</a>' in page.text
    assert "2 bytes" in page.text

    data = client.get("/api/reports").json()
    assert len(data) == 1
    assert data[0]["filename"] == "analyzed-articles-1.json"
    assert data[0]["path"] == "/analyzed-articles-1.json"
    assert data[0]["size"] == 2
