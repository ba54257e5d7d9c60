"""Human-readable outline report."""

from pathlib import Path

from feedscore.atomic import write_text_atomic
from feedscore.data import AnalyzedArticle
from feedscore.export.base import ReportSummary, display_time


def render_markdown(
    articles: list[AnalyzedArticle], summary: ReportSummary, include_full_content: bool
) -> str:
    lines = [
        "# Analyzed Articles",
        "",
        f"*Generated on {display_time(summary.generated_at)}*",
        "",
        "## Summary",
        "",
        f"- **Total Articles**: {summary.total}",
        f"- **Average Relevance Score**: {summary.average_score:.2f}",
        "",
        "## Articles by Relevance",
        "",
    ]
    for article in articles:
        lines += [
            f"### {article.title or 'Untitled'} (Score: {article.relevance_score})",
            "",
            f"- **Alert Source**: {article.source_label}",
            f"- **Link**: [{article.url}]({article.url})",
            f"- **Relevance**: {article.relevance_explanation}",
            "",
        ]
        if include_full_content:
            lines += ["#### Content", "", article.content, "", "---", ""]
    return "\n".join(lines)


def write_markdown(
    articles: list[AnalyzedArticle],
    path: Path,
    summary: ReportSummary,
    include_full_content: bool,
) -> Path:
    return write_text_atomic(path, render_markdown(articles, summary, include_full_content))
