class QuotaExceeded(Exception):
    """Raised when daily quota is exceeded."""

    pass


class GeminiAPIError(Exception):
    """Raised when Gemini API returns an error."""

    pass


class GroqAPIError(Exception):
    """Raised when Groq API returns an error."""

    pass


class EmbeddingNotSupported(Exception):
    """Raised by providers that have no embedding endpoint."""

    pass


class EmbeddingUnavailable(Exception):
    """Raised when no valid embedding could be produced for a text."""

    pass


class CandidateFetchFailed(Exception):
    """Raised when the video store cannot answer a candidate query."""

    pass


class RerankParseFailed(Exception):
    """Raised when a rerank response is not a JSON array."""

    pass


class TagGenerationError(Exception):
    """Raised when tag suggestions cannot be generated."""

    pass
