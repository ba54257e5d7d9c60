"""Feed ingestion module."""

from feedscore.csv_io import read_feed_sources
from feedscore.feeds.reader import FeedParseError, FeedReader, process_feeds

__all__ = [
    "FeedParseError",
    "FeedReader",
    "process_feeds",
    "read_feed_sources",
]
