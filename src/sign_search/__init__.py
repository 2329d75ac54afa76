"""Sign Search - sign language video discovery using Gemini/Groq AI."""

__version__ = "0.1.0"

from .interfaces import Candidate, RankedResult, SearchQuery, UploaderSummary
from .service import SignSearchService

__all__ = [
    "Candidate",
    "RankedResult",
    "SearchQuery",
    "UploaderSummary",
    "SignSearchService",
]
