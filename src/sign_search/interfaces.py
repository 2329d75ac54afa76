"""Search data types and Protocols for dependency injection and testing."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class UploaderSummary:
    """Public profile of the user who uploaded a video."""

    display_name: str
    role: str = "user"
    avatar_url: str | None = None


@dataclass(frozen=True)
class Candidate:
    """Ranking-relevant projection of a stored video."""

    id: str
    video_url: str
    title: str
    description: str
    tags: list[str]
    region: str
    created_at: datetime
    language: str = ""
    status: str = "verified"
    uploader: UploaderSummary | None = None


@dataclass(frozen=True)
class RankedResult:
    """A candidate with an optional similarity in [0, 1]."""

    candidate: Candidate
    similarity: float | None = None

    @property
    def video_url(self) -> str:
        return self.candidate.video_url

    @property
    def title(self) -> str:
        return self.candidate.title


@dataclass
class SearchQuery:
    """A search request.

    ``limit`` is the hard upper bound on returned results. ``conversational``
    asks the orchestrator to extract a keyword from a full sentence before
    falling back to text matching.
    """

    raw_text: str
    region: str | None = None
    limit: int = 20
    conversational: bool = False

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")
        self.raw_text = (self.raw_text or "").strip()
        self.region = self.region or None


@dataclass
class BackfillResult:
    """Outcome of one embedding backfill run."""

    total: int = 0
    embedded: int = 0
    failed: int = 0
    failed_ids: list[str] = field(default_factory=list)


class TextGenerator(Protocol):
    """Protocol for generative text models."""

    def generate(self, prompt: str, system: str | None = None) -> str:
        """Generate text from a prompt."""
        ...


class Embedder(Protocol):
    """Protocol for embedding models."""

    def embed(self, text: str) -> list[float] | None:
        """Return the embedding values for a text."""
        ...
