"""Keyword extraction for conversational search queries."""

import logging

from ..interfaces import TextGenerator
from . import prompts

logger = logging.getLogger(__name__)

_QUOTES = {'"': '"', "'": "'", "“": "”", "‘": "’"}


class QueryNormalizer:
    """Turns "How do you say sorry in Thai Sign Language?" into "sorry"."""

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    def normalize(self, raw_text: str) -> str:
        """Extract a search keyword, falling back to ``raw_text`` on any failure."""
        if not raw_text.strip():
            return raw_text

        try:
            response = self.generator.generate(
                prompts.QUERY_PARSING.format(query=raw_text),
                system=prompts.SYSTEM_QUERY_PARSING,
            )
        except Exception as e:
            logger.warning("Query parsing failed, using raw query: %s", e)
            return raw_text

        keyword = _strip_quotes((response or "").strip())
        if not keyword:
            logger.warning("Query parsing returned no text, using raw query")
            return raw_text

        logger.debug("Parsed query %r -> %r", raw_text, keyword)
        return keyword


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and _QUOTES.get(text[0]) == text[-1]:
        return text[1:-1].strip()
    return text
