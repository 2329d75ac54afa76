"""Fail-soft boundary around the embedding service."""

import logging

from ..interfaces import Embedder

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Converts text into a fixed-dimension vector, or None.

    Any provider error, a reply without values, or a vector of the wrong
    length yields None. Callers treat None as "vector path unavailable".
    """

    def __init__(self, embedder: Embedder, dimension: int = 768):
        self.embedder = embedder
        self.dimension = dimension

    def embed(self, text: str) -> list[float] | None:
        if not text or not text.strip():
            return None

        try:
            values = self.embedder.embed(text)
        except Exception as e:
            logger.warning("Embedding unavailable: %s", e)
            return None

        if values is None:
            logger.warning("Embedding service returned no values")
            return None

        try:
            vector = [float(v) for v in values]
        except (TypeError, ValueError) as e:
            logger.warning("Embedding service returned non-numeric values: %s", e)
            return None

        if len(vector) != self.dimension:
            logger.warning(
                "Discarding %d-d embedding, expected %d", len(vector), self.dimension
            )
            return None

        return vector
