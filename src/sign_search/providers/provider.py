"""AI provider abstraction layer."""

from abc import ABC, abstractmethod

from ..config import Settings, settings


class AIProvider(ABC):
    """Abstract base class for AI providers."""

    @abstractmethod
    def generate(self, prompt: str, system: str | None = None) -> str:
        """Generate text from a prompt."""
        pass

    @abstractmethod
    def embed(self, text: str) -> list[float] | None:
        """Embed text and return the raw vector values.

        Returns None when the service answers without values. Dimension
        checks are left to the caller.
        """
        pass


def create_provider(config: Settings | None = None) -> AIProvider:
    """Build the configured AI provider.

    Raises ValueError when the selected provider has no API key.
    """
    config = config or settings
    if config.ai_provider == "groq":
        from .groq import GroqProvider
        return GroqProvider(config)

    from .gemini import GeminiProvider
    return GeminiProvider(config)


# Process-wide provider, assembled once at startup
_provider: AIProvider | None = None


def get_provider() -> AIProvider:
    """Get or create the configured AI provider."""
    global _provider

    if _provider is None:
        _provider = create_provider()

    return _provider


def reset_provider() -> None:
    """Reset the provider (useful when switching providers)."""
    global _provider
    _provider = None
