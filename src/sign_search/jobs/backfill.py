"""Embedding backfill for videos stored without a usable vector."""

import logging

from ..exceptions import EmbeddingUnavailable
from ..interfaces import BackfillResult, Candidate
from ..search.embeddings import EmbeddingClient
from ..storage.repository import VideoRepository

logger = logging.getLogger(__name__)


def embedding_text(video: Candidate) -> str:
    """Text that represents a video in embedding space."""
    parts = [video.title, video.description]
    if video.tags:
        parts.append("Tags: " + ", ".join(video.tags))
    return "\n".join(p for p in parts if p)


class VideoIndexer:
    """Embeds a single video and stores the vector."""

    def __init__(self, repository: VideoRepository, embeddings: EmbeddingClient):
        self.repository = repository
        self.embeddings = embeddings

    def index(self, video: Candidate) -> list[float]:
        vector = self.embeddings.embed(embedding_text(video))
        if vector is None:
            raise EmbeddingUnavailable(f"No embedding produced for video {video.id}")
        self.repository.save_embedding(video.id, vector)
        return vector


class EmbeddingBackfillJob:
    """Fills in missing embeddings, one video at a time.

    Only videos whose embedding is currently missing or malformed are
    touched, so an interrupted run resumes on the next invocation and a
    repeated run is a no-op. A failure on one video is logged and the run
    moves on. Run it from a single scheduler; concurrent runs only repeat
    work.
    """

    def __init__(self, repository: VideoRepository, indexer: VideoIndexer):
        self.repository = repository
        self.indexer = indexer

    def run(self) -> BackfillResult:
        videos = self.repository.videos_without_embedding()
        result = BackfillResult(total=len(videos))

        if not videos:
            logger.info("No videos need embeddings")
            return result

        logger.info("Found %d videos without embeddings", len(videos))
        for video in videos:
            try:
                self.indexer.index(video)
            except Exception as e:
                logger.error("Error generating embedding for video %s: %s", video.id, e)
                result.failed += 1
                result.failed_ids.append(video.id)
                continue
            result.embedded += 1
            logger.info("Generated embedding for video %s", video.id)

        logger.info(
            "Finished backfill: %d embedded, %d failed", result.embedded, result.failed
        )
        return result
