"""Tag suggestions for new uploads.

Tags feed the keyword matching of the text candidate source, so better tags
mean better recall when the vector path is unavailable.
"""

import json
import logging
import re

from ..exceptions import TagGenerationError
from ..interfaces import TextGenerator
from . import prompts

logger = logging.getLogger(__name__)


class TagSuggester:
    """Asks a text model for search tags describing a video."""

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    def suggest(self, title: str, description: str) -> list[str]:
        if not title.strip() or not description.strip():
            raise ValueError("Title and description are required")

        try:
            response = self.generator.generate(
                prompts.TAG_GENERATION.format(title=title, description=description),
                system=prompts.SYSTEM_TAG_GENERATION,
            )
        except Exception as e:
            raise TagGenerationError(f"Failed to generate tags: {e}") from e

        match = re.search(r"\[.*\]", response or "", re.DOTALL)
        if not match:
            raise TagGenerationError("Model reply contains no JSON array")
        try:
            data = json.loads(match.group())
        except json.JSONDecodeError as e:
            raise TagGenerationError(f"Failed to parse generated tags: {e}") from e

        tags: list[str] = []
        for item in data:
            if isinstance(item, str) and item.strip() and item.strip() not in tags:
                tags.append(item.strip())
        logger.debug("Suggested %d tags for %r", len(tags), title)
        return tags
