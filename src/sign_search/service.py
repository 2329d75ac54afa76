"""Sign Search Service - wires the search pipeline together."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from .config import Settings, settings
from .exceptions import EmbeddingUnavailable
from .interfaces import BackfillResult, RankedResult, SearchQuery
from .jobs.backfill import EmbeddingBackfillJob, VideoIndexer
from .providers.provider import AIProvider
from .search.candidates import TextCandidateSource, VectorCandidateSource
from .search.embeddings import EmbeddingClient
from .search.normalizer import QueryNormalizer
from .search.orchestrator import SearchOrchestrator
from .search.reranker import SemanticReranker
from .search.tagging import TagSuggester
from .storage.repository import VideoRepository

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Result of importing video records."""

    imported: int = 0
    embedded: int = 0


class SignSearchService:
    """Service layer for search, query parsing, tagging and indexing.

    One instance is assembled at startup around a single provider and
    repository and shared by every request.
    """

    def __init__(
        self,
        repository: VideoRepository,
        provider: AIProvider,
        config: Settings | None = None,
    ):
        self.config = config or settings
        self.repository = repository
        self.provider = provider

        self.embeddings = EmbeddingClient(provider, dimension=self.config.embedding_dimension)
        self.normalizer = QueryNormalizer(provider)
        self.reranker = SemanticReranker(provider, min_score=self.config.min_relevance_score)
        self.tagger = TagSuggester(provider)
        self.orchestrator = SearchOrchestrator(
            repository=repository,
            embeddings=self.embeddings,
            vector_source=VectorCandidateSource(
                repository, max_distance=self.config.max_vector_distance
            ),
            text_source=TextCandidateSource(repository),
            reranker=self.reranker,
            normalizer=self.normalizer,
            candidate_multiplier=self.config.rerank_candidate_multiplier,
            enhanced_candidate_multiplier=self.config.enhanced_candidate_multiplier,
        )
        self.indexer = VideoIndexer(repository, self.embeddings)

    def search(
        self,
        query: str,
        region: str | None = None,
        limit: int | None = None,
        conversational: bool = False,
        enhanced: bool = False,
    ) -> list[RankedResult]:
        """Search searchable videos. An empty query lists the newest ones."""
        search_query = SearchQuery(
            raw_text=query,
            region=region,
            limit=limit or self.config.default_search_limit,
            conversational=conversational,
        )
        if enhanced:
            return self.orchestrator.enhanced_search(search_query)
        return self.orchestrator.search(search_query)

    def parse_query(self, query: str) -> str:
        """Extract the keyword from a conversational query."""
        return self.normalizer.normalize(query)

    def suggest_tags(self, title: str, description: str) -> list[str]:
        return self.tagger.suggest(title, description)

    def backfill_embeddings(self) -> BackfillResult:
        job = EmbeddingBackfillJob(self.repository, self.indexer)
        return job.run()

    def import_videos(
        self, records: Iterable[dict[str, Any]], embed: bool = True
    ) -> ImportResult:
        return import_videos(self.repository, records, self.indexer if embed else None)


def import_videos(
    repository: VideoRepository,
    records: Iterable[dict[str, Any]],
    indexer: VideoIndexer | None = None,
) -> ImportResult:
    """Insert or update videos from plain records, embedding them if possible.

    Each record needs ``video_url`` and ``title``; ``uploader`` may be a
    mapping with ``username``/``display_name``/``avatar_url``/``role``.
    Videos that cannot be embedded now are left for the backfill job.
    """
    result = ImportResult()
    for record in records:
        user_id = None
        uploader = record.get("uploader")
        if isinstance(uploader, dict) and uploader.get("username"):
            user_id = repository.get_or_create_user(
                username=uploader["username"],
                display_name=uploader.get("display_name"),
                avatar_url=uploader.get("avatar_url"),
                role=uploader.get("role", "user"),
            )

        created_at = record.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)

        video = repository.add_video(
            video_url=record["video_url"],
            title=record["title"],
            description=record.get("description", ""),
            region=record.get("region", ""),
            language=record.get("language", ""),
            tags=record.get("tags") or [],
            status=record.get("status", "pending"),
            user_id=user_id,
            created_at=created_at,
        )
        result.imported += 1

        if indexer is not None:
            try:
                indexer.index(video)
                result.embedded += 1
            except EmbeddingUnavailable as e:
                logger.warning("%s; left for backfill", e)

    return result
