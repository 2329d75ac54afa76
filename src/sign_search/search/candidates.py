"""Candidate sources: vector similarity and keyword matching.

Both sources scope results to searchable videos in the requested region and
never raise. A store failure is logged and reported as an empty list so the
orchestrator can move on to the next stage.
"""

import logging
import re

from ..exceptions import CandidateFetchFailed
from ..interfaces import Candidate, RankedResult
from ..storage.repository import VideoRepository

logger = logging.getLogger(__name__)

# Mirrors the stop words dropped by an English full-text configuration
STOP_WORDS = frozenset(
    """
    a an and are as at be by can do does for from how i in is it me my of on
    or the this to what whats when where which who why with you your
    """.split()
)

# Whitespace and punctuation only: \w misses Thai vowel and tone marks
_SEPARATOR_RE = re.compile(
    r"[\s!-/:-@\[-`{-~\u00a1-\u00bf\u2000-\u206f\u3000-\u303f\u0e4f\u0e5a\u0e5b]+"
)


def extract_terms(keyword: str) -> list[str]:
    """Lowercase search terms, deduplicated, without stop words.

    Single ASCII characters are dropped; a one-letter Thai word is kept.
    """
    terms: list[str] = []
    for term in _SEPARATOR_RE.split(keyword.lower()):
        if not term or (term.isascii() and len(term) < 2):
            continue
        if term not in STOP_WORDS and term not in terms:
            terms.append(term)
    return terms


class VectorCandidateSource:
    """Nearest-neighbour retrieval over stored video embeddings."""

    def __init__(self, repository: VideoRepository, max_distance: float = 0.7):
        self.repository = repository
        self.max_distance = max_distance

    @property
    def min_similarity(self) -> float:
        return 1.0 - self.max_distance

    def retrieve(
        self, embedding: list[float], region: str | None, max_candidates: int
    ) -> list[RankedResult]:
        try:
            neighbours = self.repository.nearest(embedding, region, max_candidates)
        except CandidateFetchFailed as e:
            logger.warning("Vector candidates unavailable: %s", e)
            return []

        results = []
        for candidate, distance in neighbours:
            similarity = 1.0 - distance
            if similarity >= self.min_similarity:
                results.append(RankedResult(candidate=candidate, similarity=similarity))

        logger.debug(
            "Vector search kept %d of %d neighbours", len(results), len(neighbours)
        )
        return results


class TextCandidateSource:
    """Keyword matching across title, description and tags (any term)."""

    def __init__(self, repository: VideoRepository):
        self.repository = repository

    def retrieve(
        self, keyword: str, region: str | None, max_candidates: int
    ) -> list[Candidate]:
        terms = extract_terms(keyword)
        if not terms:
            logger.debug("No searchable terms in %r", keyword)
            return []

        try:
            return self.repository.text_match(terms, region, max_candidates)
        except CandidateFetchFailed as e:
            logger.warning("Text candidates unavailable: %s", e)
            return []
