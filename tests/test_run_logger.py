"""Tests for RunLogger and serialization helpers."""

import json
from pathlib import Path

from feedscore.data import AnalyzedArticle, APICallUsage, FeedSource, ScrapedArticle, Usage
from feedscore.ledger import LedgerState
from feedscore.run_logger import RunLogger, _serialize

# -- _serialize tests --


def test_serialize_none() -> None:
    assert _serialize(None) is None


def test_serialize_primitive() -> None:
    assert _serialize(42) == 42
    assert _serialize("hello") == "hello"
    assert _serialize(True) is True


def test_serialize_list_and_tuple() -> None:
    assert _serialize([1, "two", None]) == [1, "two", None]
    assert _serialize((1, 2)) == [1, 2]


def test_serialize_dict_with_path() -> None:
    assert _serialize({"dir": Path("/out"), "n": 1}) == {"dir": "/out", "n": 1}


def test_serialize_dataclass() -> None:
    result = _serialize(FeedSource(url="https://feeds.example.com/a", source_label="Transit"))
    assert result == {"url": "https://feeds.example.com/a", "source_label": "Transit"}


def test_serialize_pydantic_model() -> None:
    result = _serialize(LedgerState(request_count=3))
    assert isinstance(result, dict)
    assert result["request_count"] == 3
    assert isinstance(result["last_updated"], str)


def test_serialize_usage_includes_computed_properties() -> None:
    usage = Usage(
        api_calls=[
            APICallUsage(model="m1", input_tokens=100, output_tokens=50),
            APICallUsage(model="m2", input_tokens=200, output_tokens=75, estimated=True),
        ],
        estimated_cost=0.25,
    )
    result = _serialize(usage)
    assert result["input_tokens"] == 300
    assert result["output_tokens"] == 125
    assert result["estimated_cost"] == 0.25
    assert len(result["api_calls"]) == 2
    assert result["api_calls"][1]["estimated"] is True


# -- RunLogger disabled tests --


def test_run_logger_disabled_is_noop(tmp_path: Path) -> None:
    logger = RunLogger(log_dir=tmp_path, enabled=False)
    assert not logger.enabled

    logger.start_run("links", {"input_count": 1})
    logger.log_stage("fetch", "HttpContentFetcher", "input", "output", None, 1.0)
    result = logger.finish_run([], None)

    assert result is None
    assert logger.last_log_path is None
    assert list(tmp_path.iterdir()) == []


# -- RunLogger enabled tests --


def test_run_logger_start_and_finish(tmp_path: Path) -> None:
    logger = RunLogger(log_dir=tmp_path, enabled=True)
    logger.start_run("feeds", {"input_count": 2, "rubric": "transit"})
    path = logger.finish_run([], None)

    assert path is not None
    assert path.exists()
    assert logger.last_log_path == path

    data = json.loads(path.read_text())
    assert data["pipeline_type"] == "feeds"
    assert data["inputs"] == {"input_count": 2, "rubric": "transit"}
    assert data["final_article_count"] == 0
    assert data["completed_at"] is not None
    assert data["total_usage"] is None


def test_run_logger_records_stages(tmp_path: Path) -> None:
    logger = RunLogger(log_dir=tmp_path, enabled=True)
    logger.start_run("scraped", {"input_count": 1})

    article = ScrapedArticle(source_label="a", title="t", url="https://a.com", content="c")
    logger.log_stage(
        stage="deduplication",
        component="url_and_content_dedupe",
        input_data={"article_count": 1},
        output_data={"article_count": 1},
        usage=None,
        duration_seconds=0.00012,
    )
    usage = Usage(
        api_calls=[APICallUsage(model="claude-haiku-4-5", input_tokens=100, output_tokens=50)],
        estimated_cost=0.00035,
    )
    logger.log_stage("analysis", "ClaudeRelevanceAnalyzer", [article], [], usage, 1.5)

    analyzed = [AnalyzedArticle.from_scraped(article, 70, "ok")]
    path = logger.finish_run(analyzed, usage)

    assert path is not None
    data = json.loads(path.read_text())
    assert [s["stage"] for s in data["stages"]] == ["deduplication", "analysis"]
    assert data["stages"][0]["usage"] is None
    assert data["stages"][0]["cost_usd"] is None
    assert data["stages"][0]["duration_seconds"] == 0.0001
    assert data["stages"][1]["input"][0]["url"] == "https://a.com"
    assert data["stages"][1]["usage"]["input_tokens"] == 100
    assert data["stages"][1]["cost_usd"] == 0.00035
    assert data["final_article_count"] == 1
    assert data["total_cost_usd"] == 0.00035


def test_run_logger_creates_log_dir(tmp_path: Path) -> None:
    log_dir = tmp_path / "nested" / "logs"
    logger = RunLogger(log_dir=log_dir, enabled=True)
    logger.start_run("links", {})
    assert logger.finish_run([], None) is not None
    assert log_dir.exists()


def test_run_logger_filename_format(tmp_path: Path) -> None:
    logger = RunLogger(log_dir=tmp_path, enabled=True)
    logger.start_run("links", {})
    path = logger.finish_run([], None)

    assert path is not None
    assert path.name.startswith("run_")
    assert path.name.endswith(".json")
    assert ":" not in path.name


def test_run_logger_log_stage_without_start(tmp_path: Path) -> None:
    """log_stage before start_run should be a no-op."""
    logger = RunLogger(log_dir=tmp_path, enabled=True)
    logger.log_stage("fetch", "HttpContentFetcher", "input", "output", None, 1.0)


def test_run_logger_finish_without_start(tmp_path: Path) -> None:
    """finish_run before start_run should return None."""
    logger = RunLogger(log_dir=tmp_path, enabled=True)
    assert logger.finish_run([], None) is None
