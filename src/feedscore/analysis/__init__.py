"""Relevance analysis module."""

from feedscore.analysis.base import RelevanceAnalyzer
from feedscore.analysis.claude import BatchStatus, ClaudeRelevanceAnalyzer
from feedscore.analysis.parser import (
    ParsedScore,
    parse_batch_response,
    parse_fallback,
    parse_primary,
)
from feedscore.analysis.prompts import AnalysisBatch, build_batch_prompt, build_system_prompt
from feedscore.analysis.queue import RequestQueue

__all__ = [
    "AnalysisBatch",
    "BatchStatus",
    "ClaudeRelevanceAnalyzer",
    "ParsedScore",
    "RelevanceAnalyzer",
    "RequestQueue",
    "build_batch_prompt",
    "build_system_prompt",
    "parse_batch_response",
    "parse_fallback",
    "parse_primary",
]
