"""Groq API provider for text generation."""

import time

from groq import Groq
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from ..config import Settings, settings
from ..exceptions import EmbeddingNotSupported, GroqAPIError
from ..storage.database import increment_quota
from .provider import AIProvider


def _should_retry(exception: Exception) -> bool:
    """Determine if we should retry based on exception type."""
    if isinstance(exception, GroqAPIError):
        return False

    error_str = str(exception).lower()
    # Common Groq error messages/types that shouldn't be retried
    non_retryable = [
        "api_key",
        "invalid",
        "unauthorized",
        "forbidden",
        "quota",
        "not found",
        "bad request",
        "400",
        "401",
        "403",
    ]
    return not any(term in error_str for term in non_retryable)


class GroqProvider(AIProvider):
    """Groq API provider using hosted chat models.

    Groq serves no embedding models, so searches made with this provider
    always take the text + rerank path.
    """

    def __init__(self, config: Settings | None = None):
        self.config = config or settings
        if not self.config.groq_api_key:
            raise ValueError("GROQ_API_KEY environment variable not set")

        self.client = Groq(
            api_key=self.config.groq_api_key,
            timeout=self.config.request_timeout_seconds,
        )
        self._last_request_time: float = 0

    def _wait_for_rate_limit(self) -> None:
        """Wait if necessary to respect rate limits."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self.config.groq_request_interval:
            time.sleep(self.config.groq_request_interval - elapsed)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception(_should_retry),
        reraise=True,
    )
    def generate(self, prompt: str, system: str | None = None) -> str:
        """Generate text using a Groq chat model."""
        self._wait_for_rate_limit()

        try:
            messages = []
            if system:
                messages.append({"role": "system", "content": system})
            messages.append({"role": "user", "content": prompt})

            response = self.client.chat.completions.create(
                model=self.config.groq_text_model,
                messages=messages,
                max_tokens=4096,
            )

            self._last_request_time = time.time()
            increment_quota()

            return response.choices[0].message.content or ""

        except Exception as e:
            if not _should_retry(e):
                raise GroqAPIError(f"Groq generation error: {e}") from e
            raise

    def embed(self, text: str) -> list[float] | None:
        raise EmbeddingNotSupported("Groq does not provide embedding models")
