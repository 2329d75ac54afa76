"""Semantic re-ranking of keyword candidates with a generative model."""

import json
import logging
import re
from typing import Annotated, Union

from pydantic import AliasChoices, BaseModel, Field, StrictFloat, StrictInt, StrictStr, ValidationError

from ..exceptions import RerankParseFailed
from ..interfaces import Candidate, RankedResult, TextGenerator
from . import prompts

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_CHARS = 500

_FENCE_RE = re.compile(r"^```[\w-]*\s*(.*?)\s*```$", re.DOTALL)


class RelevanceScore(BaseModel):
    """One entry of the model's ranking, keyed by video URL (or ``identity``)."""

    identity: StrictStr = Field(
        min_length=1, validation_alias=AliasChoices("video_url", "identity")
    )
    relevance_score: Annotated[Union[StrictInt, StrictFloat], Field(ge=1, le=10)]


def parse_rerank_response(response: str) -> list[RelevanceScore]:
    """Parse a rerank response into validated scores.

    Raises RerankParseFailed when the text is not a JSON array. Individual
    entries that fail validation are dropped.
    """
    text = (response or "").strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RerankParseFailed(f"Rerank response is not JSON: {e}") from e

    if not isinstance(data, list):
        raise RerankParseFailed(
            f"Rerank response is a JSON {type(data).__name__}, expected an array"
        )

    scores = []
    for entry in data:
        try:
            scores.append(RelevanceScore.model_validate(entry))
        except ValidationError as e:
            logger.debug("Dropping malformed rerank entry %r: %s", entry, e)
    return scores


class SemanticReranker:
    """Scores a bounded candidate set against a query using a text model.

    Only scores of at least ``min_score`` (on the model's 1-10 scale) survive;
    they become ``similarity = score / 10``. Any failure of the model call or
    of parsing its reply yields an empty list.
    """

    def __init__(self, generator: TextGenerator, min_score: int = 7):
        self.generator = generator
        self.min_score = min_score

    def build_prompt(self, query: str, candidates: list[Candidate]) -> str:
        """Prompt listing every candidate in input order."""
        entries = "\n\n".join(
            prompts.RERANK_CANDIDATE.format(
                index=i + 1,
                video_url=c.video_url,
                title=c.title,
                description=c.description[:MAX_DESCRIPTION_CHARS],
                tags=", ".join(c.tags) if c.tags else "No tags",
            )
            for i, c in enumerate(candidates)
        )
        return prompts.RERANK.format(
            query=query, candidates=entries, min_score=self.min_score
        )

    def rerank(self, query: str, candidates: list[Candidate]) -> list[RankedResult]:
        if not candidates:
            return []

        try:
            response = self.generator.generate(
                self.build_prompt(query, candidates),
                system=prompts.SYSTEM_SEARCH_RERANK,
            )
        except Exception as e:
            logger.warning("Rerank request failed: %s", e)
            return []

        try:
            scores = parse_rerank_response(response)
        except RerankParseFailed as e:
            logger.warning("%s", e)
            return []

        positions: dict[str, int] = {}
        for i, c in enumerate(candidates):
            positions.setdefault(c.video_url, i)
            positions.setdefault(c.id, i)

        ranked: list[tuple[int, RankedResult]] = []
        seen: set[int] = set()
        for score in scores:
            if score.relevance_score < self.min_score:
                continue
            position = positions.get(score.identity)
            if position is None:
                logger.debug("Rerank named unknown candidate %r", score.identity)
                continue
            if position in seen:
                continue
            seen.add(position)
            ranked.append(
                (
                    position,
                    RankedResult(
                        candidate=candidates[position],
                        similarity=score.relevance_score / 10,
                    ),
                )
            )

        # Ties keep the candidates' input order
        ranked.sort(key=lambda item: (-item[1].similarity, item[0]))
        return [result for _, result in ranked]
