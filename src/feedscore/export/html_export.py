"""Self-contained interactive HTML report.

Filtering, sorting and pagination run client-side over the rendered
article cards; the page needs no server.
"""

from pathlib import Path

from jinja2 import BaseLoader, Environment

from feedscore.atomic import write_text_atomic
from feedscore.data import AnalyzedArticle
from feedscore.export.base import HIGH_SCORE, MEDIUM_SCORE, ReportSummary, display_time

ARTICLES_PER_PAGE = 20

REPORT_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Analyzed Articles Report</title>
  <style>
    body {
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
      line-height: 1.6; color: #333; max-width: 1200px; margin: 0 auto; padding: 20px;
    }
    .header {
      display: flex; justify-content: space-between; align-items: center;
      margin-bottom: 20px; padding-bottom: 20px; border-bottom: 1px solid #eee;
    }
    .summary { background: #e8f4fd; padding: 15px; border-radius: 5px; margin-bottom: 20px; }
    .controls { background: #f5f5f5; padding: 15px; border-radius: 5px; margin-bottom: 20px; }
    .article {
      margin-bottom: 30px; padding: 20px; border: 1px solid #ddd; border-radius: 5px;
      transition: all .3s ease;
    }
    .article:hover { box-shadow: 0 5px 15px rgba(0,0,0,.1); }
    .score {
      display: inline-block; padding: 5px 10px; color: white; border-radius: 15px;
      font-weight: bold; margin-right: 10px;
    }
    .score-high { background-color: #4CAF50; }
    .score-medium { background-color: #FF9800; }
    .score-low { background-color: #F44336; }
    .article-content {
      max-height: 300px; overflow-y: auto; padding: 15px; background: #f9f9f9;
      border-radius: 5px; margin-top: 15px; display: none; white-space: pre-wrap;
    }
    button {
      background: #2196F3; color: white; border: none; padding: 8px 16px;
      border-radius: 4px; cursor: pointer; font-size: 14px;
    }
    button:hover { background: #0b7dda; }
    .pagination { display: flex; justify-content: center; align-items: center; gap: 10px; margin: 20px 0; }
    #minScore { width: 80px; }
    .hidden { display: none; }
  </style>
</head>
<body>
  <div class="header">
    <h1>Analyzed Articles Report</h1>
    <p>Generated: {{ generated_at }}</p>
  </div>

  <div class="summary">
    <h2>Summary</h2>
    <p>Total Articles: <strong>{{ summary.total }}</strong></p>
    <p>Average Relevance Score: <strong>{{ "%.2f" | format(summary.average_score) }}</strong></p>
    <p>High Relevance (&gt;{{ high_score }}): <strong>{{ summary.high }}</strong></p>
    <p>Medium Relevance ({{ medium_score }}-{{ high_score }}): <strong>{{ summary.medium }}</strong></p>
    <p>Low Relevance (&lt;{{ medium_score }}): <strong>{{ summary.low }}</strong></p>
  </div>

  <div class="controls">
    <h3>Filter &amp; Sort</h3>
    <label for="minScore">Minimum Score:</label>
    <input type="number" id="minScore" min="0" max="100" value="0">
    <label for="sortBy">Sort By:</label>
    <select id="sortBy">
      <option value="score">Relevance Score</option>
      <option value="title">Title</option>
      <option value="alertName">Alert Name</option>
    </select>
    <button onclick="applyFilters()">Apply</button>
    <button onclick="resetFilters()">Reset</button>
  </div>

  <div id="articleContainer">
  {% for article in articles %}
    <div class="article" data-score="{{ article.relevance_score }}"
         data-title="{{ article.title }}" data-alert="{{ article.source_label }}">
      <h3>
        <span class="score {{ article.relevance_score | score_class }}">{{ article.relevance_score }}</span>
        {{ article.title or "Untitled" }}
      </h3>
      <p><strong>Alert:</strong> {{ article.source_label }}</p>
      <p><strong>Link:</strong>
        <a href="{{ article.url }}" target="_blank" rel="noopener noreferrer">{{ article.url }}</a></p>
      <p><strong>Relevance:</strong> {{ article.relevance_explanation }}</p>
      {% if include_full_content %}
      <button onclick="toggleContent({{ loop.index0 }})">Show/Hide Content</button>
      <div id="content-{{ loop.index0 }}" class="article-content">{{ article.content }}</div>
      {% endif %}
    </div>
  {% endfor %}
  </div>

  <div class="pagination">
    <button onclick="prevPage()">Previous</button>
    <span id="pageInfo">Page 1 of 1</span>
    <button onclick="nextPage()">Next</button>
  </div>

  <script>
    const articlesPerPage = {{ per_page }};
    let currentPage = 1;
    const allArticles = Array.from(document.querySelectorAll('.article'));
    let filteredArticles = allArticles;

    function totalPages() {
      return Math.max(1, Math.ceil(filteredArticles.length / articlesPerPage));
    }

    function showPage(page) {
      const start = (page - 1) * articlesPerPage;
      const end = start + articlesPerPage;
      allArticles.forEach(a => a.classList.add('hidden'));
      filteredArticles.forEach((a, idx) => {
        if (idx >= start && idx < end) a.classList.remove('hidden');
      });
      currentPage = page;
      document.getElementById('pageInfo').textContent = `Page ${currentPage} of ${totalPages()}`;
    }

    function nextPage() { if (currentPage < totalPages()) showPage(currentPage + 1); }
    function prevPage() { if (currentPage > 1) showPage(currentPage - 1); }

    function toggleContent(index) {
      const content = document.getElementById(`content-${index}`);
      content.style.display = content.style.display === 'block' ? 'none' : 'block';
    }

    function applyFilters() {
      const minScore = parseInt(document.getElementById('minScore').value) || 0;
      const sortBy = document.getElementById('sortBy').value;
      filteredArticles = allArticles.filter(a => parseInt(a.dataset.score) >= minScore);
      filteredArticles.sort((a, b) => {
        if (sortBy === 'title') return a.dataset.title.localeCompare(b.dataset.title);
        if (sortBy === 'alertName') return a.dataset.alert.localeCompare(b.dataset.alert);
        return parseInt(b.dataset.score) - parseInt(a.dataset.score);
      });
      const container = document.getElementById('articleContainer');
      filteredArticles.forEach(a => container.appendChild(a));
      showPage(1);
    }

    function resetFilters() {
      document.getElementById('minScore').value = '0';
      document.getElementById('sortBy').value = 'score';
      applyFilters();
    }

    window.onload = () => showPage(1);
  </script>
</body>
</html>
"""


def score_class(score: int) -> str:
    if score > HIGH_SCORE:
        return "score-high"
    if score >= MEDIUM_SCORE:
        return "score-medium"
    return "score-low"


def render_html(
    articles: list[AnalyzedArticle], summary: ReportSummary, include_full_content: bool
) -> str:
    env = Environment(loader=BaseLoader(), autoescape=True)
    env.filters["score_class"] = score_class
    template = env.from_string(REPORT_TEMPLATE)
    return template.render(
        articles=articles,
        summary=summary,
        generated_at=display_time(summary.generated_at),
        include_full_content=include_full_content,
        high_score=HIGH_SCORE,
        medium_score=MEDIUM_SCORE,
        per_page=ARTICLES_PER_PAGE,
    )


def write_html(
    articles: list[AnalyzedArticle],
    path: Path,
    summary: ReportSummary,
    include_full_content: bool,
) -> Path:
    return write_text_atomic(path, render_html(articles, summary, include_full_content))
