"""Search module: vector retrieval with keyword + AI re-ranking fallback."""

from .candidates import TextCandidateSource, VectorCandidateSource
from .embeddings import EmbeddingClient
from .normalizer import QueryNormalizer
from .orchestrator import SearchOrchestrator
from .reranker import SemanticReranker
from .tagging import TagSuggester

__all__ = [
    "EmbeddingClient",
    "QueryNormalizer",
    "SearchOrchestrator",
    "SemanticReranker",
    "TagSuggester",
    "TextCandidateSource",
    "VectorCandidateSource",
]
