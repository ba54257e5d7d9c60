"""Readable-text extraction from article HTML.

The main body is located by trying a ranked list of content selectors, then
the container with the most paragraphs, then long body paragraphs, then the
whole ``<body>``. Metadata fields are filled from ordered extractor chains in
``METADATA_SOURCES``; the first non-empty value wins.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from bs4 import BeautifulSoup, Comment, Tag

from feedscore.url import extract_domain

logger = logging.getLogger(__name__)

NON_CONTENT_SELECTORS = (
    "script, style, meta, link, noscript, iframe, form, nav, footer, aside, "
    '[role="complementary"], .comment, .comments, .ad, .ads, .advertisement'
)

CONTENT_SELECTORS = (
    "article",
    "main",
    ".article-content",
    ".post-content",
    ".entry-content",
    ".content",
    ".article-body",
    ".story-content",
    ".story-body",
    ".news-content",
    "#article-content",
    "#content-main",
    '[itemprop="articleBody"]',
    'div[data-component="text-block"]',
)

ALLOWED_TAGS = frozenset(
    {
        "a", "abbr", "b", "blockquote", "br", "caption", "code", "div", "em",
        "figcaption", "figure", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i",
        "img", "li", "ol", "p", "pre", "section", "span", "strong", "table",
        "tbody", "td", "th", "thead", "tr", "ul",
    }
)
ALLOWED_ATTRIBUTES: dict[str, frozenset[str]] = {
    "a": frozenset({"href", "name", "target"}),
    "img": frozenset({"src", "alt", "title"}),
}

MIN_SELECTOR_HTML = 500
MIN_PARAGRAPHS = 3
MIN_PARAGRAPH_CHARS = 80
MIN_CONTENT_HTML = 300
SHORT_TEXT_WARNING = 300
EXCERPT_CHARS = 200

_BLANK_LINES = re.compile(r"\n\s*\n+")
_SPACES = re.compile(r"[ \t\r\f\v]+")

Extractor = Callable[[BeautifulSoup], str]


@dataclass(frozen=True)
class ExtractedArticle:
    """Text and metadata pulled from one HTML document."""

    title: str
    html: str
    text: str
    byline: str = ""
    site_name: str = ""
    published_at: str = ""
    excerpt: str = ""
    language: str = ""


def meta(attr: str, value: str) -> Extractor:
    """Extractor reading ``<meta {attr}="{value}" content="...">``."""

    def extract(soup: BeautifulSoup) -> str:
        tag = soup.find("meta", attrs={attr: value})
        if isinstance(tag, Tag):
            content = tag.get("content")
            if isinstance(content, str):
                return content.strip()
        return ""

    return extract


def text_of(selector: str) -> Extractor:
    """Extractor returning the text of the first element matching ``selector``."""

    def extract(soup: BeautifulSoup) -> str:
        tag = soup.select_one(selector)
        return tag.get_text(" ", strip=True) if tag else ""

    return extract


def attr_of(selector: str, attr: str) -> Extractor:
    """Extractor returning an attribute of the first element matching ``selector``."""

    def extract(soup: BeautifulSoup) -> str:
        tag = soup.select_one(selector)
        if tag is None:
            return ""
        value = tag.get(attr)
        return value.strip() if isinstance(value, str) else ""

    return extract


METADATA_SOURCES: dict[str, tuple[Extractor, ...]] = {
    "title": (
        meta("property", "og:title"),
        meta("name", "twitter:title"),
        text_of("title"),
        text_of("h1"),
    ),
    "byline": (
        meta("name", "author"),
        meta("property", "article:author"),
        text_of(".author, .byline"),
    ),
    "site_name": (
        meta("property", "og:site_name"),
        meta("name", "application-name"),
        text_of(".site-name, .site-title"),
    ),
    "published_at": (
        meta("property", "article:published_time"),
        attr_of("time[datetime]", "datetime"),
        meta("name", "date"),
    ),
    "excerpt": (
        meta("name", "description"),
        meta("property", "og:description"),
        meta("name", "twitter:description"),
        text_of(".excerpt, .description, .summary"),
    ),
}


def first_non_empty(soup: BeautifulSoup, extractors: tuple[Extractor, ...]) -> str:
    """Run ``extractors`` in order and return the first non-empty result."""
    for extractor in extractors:
        value = extractor(soup)
        if value:
            return value
    return ""


def _remove_non_content(soup: BeautifulSoup) -> None:
    for tag in soup.select(NON_CONTENT_SELECTORS):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()


def _find_main_html(soup: BeautifulSoup) -> str:
    for selector in CONTENT_SELECTORS:
        tag = soup.select_one(selector)
        if tag is not None:
            html = tag.decode_contents()
            if len(html) > MIN_SELECTOR_HTML:
                return html

    best: Tag | None = None
    most_paragraphs = 0
    for container in soup.find_all(["div", "section"]):
        count = len(container.find_all("p"))
        if count >= MIN_PARAGRAPHS and count > most_paragraphs:
            best, most_paragraphs = container, count
    if best is not None:
        html = best.decode_contents()
    else:
        body = soup.body or soup
        html = "\n".join(
            str(p)
            for p in body.find_all("p")
            if len(p.get_text(strip=True)) > MIN_PARAGRAPH_CHARS
        )

    if len(html) < MIN_CONTENT_HTML:
        body = soup.body
        html = body.decode_contents() if body is not None else str(soup)
    return html


def sanitize_html(html: str) -> str:
    """Reduce markup to ``ALLOWED_TAGS`` with ``ALLOWED_ATTRIBUTES``.

    Disallowed tags are unwrapped (their text is kept); non-content tags
    such as scripts are dropped with their contents.
    """
    soup = BeautifulSoup(html, "html.parser")
    _remove_non_content(soup)
    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        allowed = ALLOWED_ATTRIBUTES.get(tag.name, frozenset())
        tag.attrs = {k: v for k, v in tag.attrs.items() if k in allowed}
    return str(soup)


def html_to_text(html: str) -> str:
    """Strip all tags, keeping paragraph breaks and collapsing blank runs."""
    text = BeautifulSoup(html, "html.parser").get_text("\n")
    lines = (_SPACES.sub(" ", line).strip() for line in text.splitlines())
    return _BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()


def extract_article(html: str, url: str = "") -> ExtractedArticle:
    """Extract readable text and metadata from an HTML document.

    Args:
        html: Raw page markup.
        url: Page URL, used as the site-name fallback and for log messages.

    Returns:
        The extracted article. ``text`` may be empty for pages without body text.
    """
    soup = BeautifulSoup(html, "html.parser")

    metadata = {field: first_non_empty(soup, sources) for field, sources in METADATA_SOURCES.items()}
    html_tag = soup.find("html")
    language = html_tag.get("lang", "") if isinstance(html_tag, Tag) else ""

    _remove_non_content(soup)
    clean_html = sanitize_html(_find_main_html(soup))
    text = html_to_text(clean_html)

    if 0 < len(text) < SHORT_TEXT_WARNING:
        logger.warning("Extracted text from %s is suspiciously short (%d chars)", url, len(text))

    excerpt = metadata["excerpt"]
    if not excerpt and text:
        excerpt = text[:EXCERPT_CHARS] + ("..." if len(text) > EXCERPT_CHARS else "")

    return ExtractedArticle(
        title=metadata["title"],
        html=clean_html,
        text=text,
        byline=metadata["byline"],
        site_name=metadata["site_name"] or (extract_domain(url) if url else ""),
        published_at=metadata["published_at"],
        excerpt=excerpt,
        language=language if isinstance(language, str) else "",
    )
