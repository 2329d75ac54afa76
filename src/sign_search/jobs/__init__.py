"""Maintenance jobs."""

from .backfill import EmbeddingBackfillJob, VideoIndexer

__all__ = ["EmbeddingBackfillJob", "VideoIndexer"]
