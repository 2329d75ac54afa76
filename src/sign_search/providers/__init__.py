"""AI providers for text generation and embeddings."""

from .provider import AIProvider, create_provider, get_provider, reset_provider

__all__ = [
    "AIProvider",
    "create_provider",
    "get_provider",
    "reset_provider",
]
