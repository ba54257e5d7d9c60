"""Pipeline orchestration module."""

from feedscore.pipeline.orchestrator import FeedScorePipeline, PipelineResult

__all__ = ["FeedScorePipeline", "PipelineResult"]
