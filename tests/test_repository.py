"""Tests for the video store queries."""

import pytest
from sqlalchemy import text

from sign_search.exceptions import CandidateFetchFailed
from sign_search.interfaces import UploaderSummary
from sign_search.storage.database import get_session
from sign_search.storage.models import User, Video
from sign_search.storage.repository import to_uploader_summary

from helpers import DIM, near, one_hot


# ---------------------------------------------------------------------------
# Uploader normalization
# ---------------------------------------------------------------------------

class TestToUploaderSummary:
    def test_single_user_object(self):
        user = User(username="ann", display_name="Ann", role="moderator", avatar_url="a.png")
        assert to_uploader_summary(user) == UploaderSummary(
            display_name="Ann", role="moderator", avatar_url="a.png"
        )

    def test_one_element_list(self):
        raw = [{"display_name": "Ann", "role": "admin", "avatar_url": None}]
        assert to_uploader_summary(raw) == UploaderSummary(display_name="Ann", role="admin")

    def test_empty_list_and_none(self):
        assert to_uploader_summary([]) is None
        assert to_uploader_summary(None) is None


# ---------------------------------------------------------------------------
# Browse
# ---------------------------------------------------------------------------

class TestListRecent:
    def test_newest_first_verified_only(self, repository, add_video):
        add_video("old")
        add_video("pending", status="pending")
        add_video("flagged", status="flagged")
        add_video("new")

        titles = [c.title for c in repository.list_recent(None, 10)]
        assert titles == ["new", "old"]

    def test_region_scope_and_limit(self, repository, add_video):
        for i in range(4):
            add_video(f"th-{i}", region="TH")
        add_video("us", region="US")

        results = repository.list_recent("TH", 3)
        assert [c.title for c in results] == ["th-3", "th-2", "th-1"]

    def test_uploader_is_attached(self, repository, add_video):
        add_video("hello", uploader="ann")
        [candidate] = repository.list_recent(None, 1)
        assert candidate.uploader.display_name == "Ann"
        assert candidate.uploader.avatar_url == "https://a.example/ann.png"


# ---------------------------------------------------------------------------
# Text match
# ---------------------------------------------------------------------------

class TestTextMatch:
    def test_any_term_in_title_description_or_tags(self, repository, add_video):
        add_video("Sorry in Thai")
        add_video("Greetings", description="How to say hello politely")
        add_video("Feelings", tags=["apology", "emotion"])
        add_video("Numbers")

        titles = {c.title for c in repository.text_match(["sorry", "hello", "apology"], None, 10)}
        assert titles == {"Sorry in Thai", "Greetings", "Feelings"}

    def test_case_insensitive(self, repository, add_video):
        add_video("THANK YOU")
        assert len(repository.text_match(["thank"], None, 10)) == 1

    def test_scoped_to_region_and_status(self, repository, add_video):
        add_video("sorry TH")
        add_video("sorry US", region="US")
        add_video("sorry pending", status="pending")

        assert [c.title for c in repository.text_match(["sorry"], "TH", 10)] == ["sorry TH"]

    def test_capped_and_newest_first(self, repository, add_video):
        for i in range(5):
            add_video(f"sorry {i}")
        results = repository.text_match(["sorry"], None, 2)
        assert [c.title for c in results] == ["sorry 4", "sorry 3"]

    def test_like_wildcards_are_literal(self, repository, add_video):
        add_video("hello")
        assert repository.text_match(["%"], None, 10) == []
        assert repository.text_match(["_"], None, 10) == []

    def test_no_terms(self, repository, add_video):
        add_video("hello")
        assert repository.text_match([], None, 10) == []

    def test_non_ascii_tags_and_description(self, repository, add_video):
        add_video("Apology", tags=["ขอโทษ", "emotion"])
        add_video("Coffee", description="Ordering a café au lait")
        add_video("Hello")

        titles = {c.title for c in repository.text_match(["ขอโทษ", "café"], "TH", 10)}
        assert titles == {"Apology", "Coffee"}

    def test_tags_are_stored_unescaped(self, engine, add_video):
        add_video("Apology", tags=["ขอโทษ"])
        with engine.connect() as conn:
            stored = conn.execute(text("SELECT tags FROM video")).scalar_one()
        assert "ขอโทษ" in stored


# ---------------------------------------------------------------------------
# Nearest neighbours
# ---------------------------------------------------------------------------

class TestNearest:
    def test_ordered_by_cosine_distance(self, repository, add_video):
        add_video("far", embedding=one_hot(1))
        add_video("close", embedding=near(0.9))
        add_video("middle", embedding=near(0.5))

        results = repository.nearest(one_hot(0), None, 10)

        assert [c.title for c, _ in results] == ["close", "middle", "far"]
        assert [d for _, d in results] == pytest.approx([0.1, 0.5, 1.0])

    def test_limit(self, repository, add_video):
        for i in range(5):
            add_video(f"v{i}", embedding=near(0.9))
        assert len(repository.nearest(one_hot(0), None, 2)) == 2

    def test_skips_unsearchable_and_other_regions(self, repository, add_video):
        add_video("match", embedding=near(0.9))
        add_video("pending", status="pending", embedding=near(0.9))
        add_video("elsewhere", region="US", embedding=near(0.9))
        add_video("no embedding")

        assert [c.title for c, _ in repository.nearest(one_hot(0), "TH", 10)] == ["match"]

    def test_skips_malformed_stored_vectors(self, engine, repository, add_video):
        video = add_video("broken")
        with get_session(engine) as session:
            row = session.get(Video, video.id)
            row.embedding = [1.0, 0.0]
            session.add(row)
            session.commit()

        assert repository.nearest(one_hot(0), None, 10) == []

    def test_rejects_query_of_wrong_dimension(self, repository):
        with pytest.raises(CandidateFetchFailed):
            repository.nearest([1.0, 0.0], None, 10)

    def test_zero_query_vector(self, repository, add_video):
        add_video("v", embedding=near(0.9))
        assert repository.nearest([0.0] * DIM, None, 10) == []


# ---------------------------------------------------------------------------
# Embedding bookkeeping
# ---------------------------------------------------------------------------

class TestEmbeddings:
    def test_videos_without_embedding_any_status(self, engine, repository, add_video):
        add_video("done", embedding=one_hot(0))
        add_video("missing", status="pending")
        broken = add_video("broken")
        with get_session(engine) as session:
            row = session.get(Video, broken.id)
            row.embedding = [0.5] * (DIM - 1)
            session.add(row)
            session.commit()

        titles = [c.title for c in repository.videos_without_embedding()]
        assert titles == ["missing", "broken"]

    def test_save_embedding_validates_dimension(self, repository, add_video):
        video = add_video("v")
        with pytest.raises(ValueError):
            repository.save_embedding(video.id, [1.0] * 10)

    def test_save_embedding_unknown_video(self, repository):
        with pytest.raises(KeyError):
            repository.save_embedding("nope", one_hot(0))

    def test_changing_text_clears_embedding(self, repository, add_video):
        video = add_video("hello", embedding=one_hot(0))

        repository.add_video(video_url=video.video_url, title="hello", region="TH", status="verified")
        assert repository.videos_without_embedding() == []

        repository.add_video(video_url=video.video_url, title="hello again", region="TH", status="verified")
        assert [c.title for c in repository.videos_without_embedding()] == ["hello again"]

    def test_count_videos(self, repository, add_video):
        add_video("a", embedding=one_hot(0))
        add_video("b", status="pending")
        assert repository.count_videos() == {"total": 2, "searchable": 1, "missing_embedding": 1}
