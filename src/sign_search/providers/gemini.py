"""Gemini API provider with rate limiting and retry logic."""

import logging
import time

from google import genai
from google.genai import types
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from ..config import Settings, settings
from ..exceptions import GeminiAPIError, QuotaExceeded
from ..storage.database import get_today_quota, increment_quota
from .provider import AIProvider

logger = logging.getLogger(__name__)


def _should_retry(exception: Exception) -> bool:
    """Determine if we should retry based on exception type."""
    if isinstance(exception, (GeminiAPIError, QuotaExceeded)):
        return False
    error_str = str(exception).lower()
    non_retryable = ["api_key", "invalid", "unauthorized", "forbidden", "quota"]
    return not any(term in error_str for term in non_retryable)


class GeminiProvider(AIProvider):
    """Gemini API provider with rate limiting."""

    def __init__(self, config: Settings | None = None):
        self.config = config or settings
        if not self.config.gemini_api_key:
            raise ValueError("GEMINI_API_KEY environment variable not set")

        self.client = genai.Client(
            api_key=self.config.gemini_api_key,
            http_options=types.HttpOptions(
                timeout=int(self.config.request_timeout_seconds * 1000)
            ),
        )
        self.model = self.config.gemini_model
        self.embedding_model = self.config.gemini_embedding_model
        self._last_request_time: float = 0

    def _wait_for_rate_limit(self) -> None:
        """Wait if necessary to respect rate limits."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self.config.gemini_request_interval:
            time.sleep(self.config.gemini_request_interval - elapsed)

    def _check_quota(self) -> None:
        """Check if daily quota is exceeded."""
        quota = get_today_quota()
        if quota.request_count >= self.config.gemini_daily_limit:
            raise QuotaExceeded(
                f"Daily quota exceeded: {quota.request_count}/{self.config.gemini_daily_limit} requests"
            )

        if quota.request_count >= self.config.gemini_daily_limit * 0.8:
            remaining = self.config.gemini_daily_limit - quota.request_count
            logger.warning("Only %d Gemini requests remaining today", remaining)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=60),
        retry=retry_if_exception(_should_retry),
        reraise=True,
    )
    def generate(self, prompt: str, system: str | None = None) -> str:
        """Generate text from a prompt."""
        self._check_quota()
        self._wait_for_rate_limit()

        try:
            config = types.GenerateContentConfig(
                system_instruction=system,
            ) if system else None

            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )

            self._last_request_time = time.time()
            increment_quota()

            return response.text or ""

        except Exception as e:
            if not _should_retry(e):
                raise GeminiAPIError(f"Gemini generation error: {e}") from e
            raise

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=60),
        retry=retry_if_exception(_should_retry),
        reraise=True,
    )
    def embed(self, text: str) -> list[float] | None:
        """Embed text with the Gemini embedding model."""
        self._check_quota()
        self._wait_for_rate_limit()

        try:
            response = self.client.models.embed_content(
                model=self.embedding_model,
                contents=text,
                config=types.EmbedContentConfig(
                    output_dimensionality=self.config.embedding_dimension,
                ),
            )

            self._last_request_time = time.time()
            increment_quota()

            if not response.embeddings:
                return None
            values = response.embeddings[0].values
            return list(values) if values is not None else None

        except Exception as e:
            if not _should_retry(e):
                raise GeminiAPIError(f"Gemini embedding error: {e}") from e
            raise
