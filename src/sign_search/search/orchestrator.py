"""Search entry point: browse, vector path, then keyword + rerank fallback."""

import logging

from ..exceptions import CandidateFetchFailed
from ..interfaces import RankedResult, SearchQuery
from ..storage.repository import VideoRepository
from .candidates import TextCandidateSource, VectorCandidateSource
from .embeddings import EmbeddingClient
from .normalizer import QueryNormalizer
from .reranker import SemanticReranker

logger = logging.getLogger(__name__)


class SearchOrchestrator:
    """Sequences the search stages into one fail-soft chain.

    The chain runs from cheapest and most precise to most flexible:

    1. Empty query: newest searchable videos (browse mode, no similarity).
    2. Embed the query and take vector neighbours. A non-empty result ends
       the search here.
    3. Otherwise match keywords (extracted from the sentence when the query
       is conversational) and let the reranker score those candidates.

    Stage failures are logged and degrade to the next stage or to an empty
    list. Results never exceed ``query.limit``.
    """

    def __init__(
        self,
        repository: VideoRepository,
        embeddings: EmbeddingClient,
        vector_source: VectorCandidateSource,
        text_source: TextCandidateSource,
        reranker: SemanticReranker,
        normalizer: QueryNormalizer | None = None,
        candidate_multiplier: int = 2,
        enhanced_candidate_multiplier: int = 3,
    ):
        self.repository = repository
        self.embeddings = embeddings
        self.vector_source = vector_source
        self.text_source = text_source
        self.reranker = reranker
        self.normalizer = normalizer
        self.candidate_multiplier = candidate_multiplier
        self.enhanced_candidate_multiplier = enhanced_candidate_multiplier

    def search(self, query: SearchQuery) -> list[RankedResult]:
        if not query.raw_text:
            return self.browse(query)

        embedding = self.embeddings.embed(query.raw_text)
        if embedding is not None:
            results = self.vector_source.retrieve(
                embedding, query.region, query.limit * self.candidate_multiplier
            )
            if results:
                logger.info(
                    "Vector search for %r returned %d results", query.raw_text, len(results)
                )
                return results[: query.limit]
            logger.info("Vector search for %r found nothing, falling back", query.raw_text)
        else:
            logger.info("No embedding for %r, using keyword search", query.raw_text)

        return self._text_and_rerank(query, self.candidate_multiplier)

    def enhanced_search(self, query: SearchQuery) -> list[RankedResult]:
        """Keyword candidates scored by the reranker, skipping the vector path."""
        if not query.raw_text:
            return self.browse(query)
        return self._text_and_rerank(query, self.enhanced_candidate_multiplier)

    def browse(self, query: SearchQuery) -> list[RankedResult]:
        """Newest searchable videos in the query's region."""
        try:
            candidates = self.repository.list_recent(query.region, query.limit)
        except CandidateFetchFailed as e:
            logger.warning("Browse unavailable: %s", e)
            return []
        return [RankedResult(candidate=c) for c in candidates[: query.limit]]

    def _keyword(self, query: SearchQuery) -> str:
        if query.conversational and self.normalizer is not None:
            return self.normalizer.normalize(query.raw_text)
        return query.raw_text

    def _text_and_rerank(self, query: SearchQuery, multiplier: int) -> list[RankedResult]:
        keyword = self._keyword(query)
        candidates = self.text_source.retrieve(
            keyword, query.region, query.limit * multiplier
        )
        if not candidates:
            logger.info("No keyword candidates for %r", keyword)
            return []

        results = self.reranker.rerank(query.raw_text, candidates)
        logger.info(
            "Reranker kept %d of %d candidates for %r",
            len(results),
            len(candidates),
            query.raw_text,
        )
        return results[: query.limit]
