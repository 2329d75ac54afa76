"""Tests for the embedding backfill job."""

from unittest.mock import MagicMock

import pytest

from sign_search.exceptions import EmbeddingUnavailable
from sign_search.jobs.backfill import EmbeddingBackfillJob, VideoIndexer, embedding_text
from sign_search.search.embeddings import EmbeddingClient

from helpers import DIM, make_candidate, one_hot


@pytest.fixture
def embedder() -> MagicMock:
    embedder = MagicMock()
    embedder.embed.return_value = one_hot(0)
    return embedder


@pytest.fixture
def job(repository, embedder) -> EmbeddingBackfillJob:
    indexer = VideoIndexer(repository, EmbeddingClient(embedder, dimension=DIM))
    return EmbeddingBackfillJob(repository, indexer)


def test_embedding_text():
    video = make_candidate(1, tags=["apology", "emotion"])
    assert embedding_text(video) == "Video 1\nDescription 1\nTags: apology, emotion"


def test_embedding_text_skips_empty_parts():
    video = make_candidate(1, tags=[])
    assert embedding_text(video) == "Video 1\nDescription 1"


def test_fills_missing_embeddings(job, repository, add_video, embedder):
    add_video("done", embedding=one_hot(1))
    add_video("pending", status="pending")
    add_video("verified")

    result = job.run()

    assert (result.total, result.embedded, result.failed) == (2, 2, 0)
    assert repository.videos_without_embedding() == []
    assert embedder.embed.call_count == 2


def test_second_run_is_a_no_op(job, add_video, embedder):
    add_video("a")
    add_video("b")
    job.run()
    embedder.embed.reset_mock()

    result = job.run()

    assert (result.total, result.embedded, result.failed) == (0, 0, 0)
    embedder.embed.assert_not_called()


def test_failure_on_one_video_does_not_stop_the_run(job, repository, add_video, embedder):
    add_video("first")
    broken = add_video("second")
    add_video("third")
    embedder.embed.side_effect = [one_hot(0), RuntimeError("rate limited"), one_hot(0)]

    result = job.run()

    assert (result.total, result.embedded, result.failed) == (3, 2, 1)
    assert result.failed_ids == [broken.id]
    assert [c.title for c in repository.videos_without_embedding()] == ["second"]


def test_wrong_dimension_counts_as_failure(job, add_video, embedder):
    add_video("v")
    embedder.embed.return_value = [0.1] * 1536

    result = job.run()

    assert (result.embedded, result.failed) == (0, 1)


def test_empty_store(job):
    result = job.run()
    assert (result.total, result.embedded, result.failed, result.failed_ids) == (0, 0, 0, [])


def test_indexer_raises_when_no_embedding(repository, add_video):
    video = add_video("v")
    embedder = MagicMock()
    embedder.embed.return_value = None
    indexer = VideoIndexer(repository, EmbeddingClient(embedder, dimension=DIM))

    with pytest.raises(EmbeddingUnavailable):
        indexer.index(video)
