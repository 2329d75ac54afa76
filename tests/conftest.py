"""Pytest configuration and fixtures for sign search tests."""

import itertools
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.pool import StaticPool

from sign_search.config import Settings
from sign_search.providers.provider import AIProvider, reset_provider
from sign_search.storage.database import build_engine, init_db, set_engine
from sign_search.storage.repository import VideoRepository

from helpers import DIM


@pytest.fixture
def engine():
    """In-memory database, also installed as the process engine."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    set_engine(engine)
    yield engine
    set_engine(None)
    reset_provider()


@pytest.fixture
def repository(engine) -> VideoRepository:
    return VideoRepository(engine, embedding_dimension=DIM)


@pytest.fixture
def add_video(repository):
    """Insert a video; each call is one minute newer than the previous one."""
    counter = itertools.count()
    base = datetime(2024, 1, 1)

    def _add(
        title: str,
        region: str = "TH",
        status: str = "verified",
        tags: list[str] | None = None,
        description: str = "",
        embedding: list[float] | None = None,
        uploader: str | None = None,
    ):
        n = next(counter)
        user_id = None
        if uploader:
            user_id = repository.get_or_create_user(
                uploader, display_name=uploader.title(), avatar_url=f"https://a.example/{uploader}.png"
            )
        video = repository.add_video(
            video_url=f"https://videos.example/{n}.mp4",
            title=title,
            description=description,
            region=region,
            tags=tags or [],
            status=status,
            user_id=user_id,
            created_at=base + timedelta(minutes=n),
        )
        if embedding is not None:
            repository.save_embedding(video.id, embedding)
        return video

    return _add


@pytest.fixture
def provider() -> MagicMock:
    """AI provider double; embeddings fail unless a test configures them."""
    provider = MagicMock(spec=AIProvider)
    provider.embed.side_effect = ConnectionError("embedding service down")
    provider.generate.return_value = "[]"
    return provider


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        gemini_api_key="test-key",
        groq_api_key="test-key",
        gemini_request_interval=0,
        groq_request_interval=0,
        embedding_dimension=DIM,
    )
