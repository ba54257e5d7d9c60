"""Tests for rubric loading."""

from feedscore.criteria import FALLBACK_RUBRIC, load_rubric


def test_explicit_path_wins(tmp_path) -> None:
    explicit = tmp_path / "explicit.txt"
    explicit.write_text("  Transit funding news.  \n")
    configured = tmp_path / "configured.txt"
    configured.write_text("Configured rubric")
    assert load_rubric(explicit, configured_path=configured) == "Transit funding news."


def test_falls_through_missing_and_empty_files(tmp_path) -> None:
    empty = tmp_path / "empty.txt"
    empty.write_text("   \n")
    default = tmp_path / "promptCriteria.txt"
    default.write_text("Default rubric")
    rubric = load_rubric(tmp_path / "missing.txt", configured_path=empty, default_path=default)
    assert rubric == "Default rubric"


def test_fallback_rubric(tmp_path, caplog) -> None:
    assert load_rubric(default_path=tmp_path / "absent.txt") == FALLBACK_RUBRIC
    assert "fallback rubric" in caplog.text
