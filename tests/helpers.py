"""Builders shared by the test modules."""

import math
from datetime import datetime, timedelta

from sign_search.interfaces import Candidate, UploaderSummary

DIM = 768


def one_hot(index: int, dim: int = DIM) -> list[float]:
    vector = [0.0] * dim
    vector[index] = 1.0
    return vector


def near(similarity: float, dim: int = DIM) -> list[float]:
    """Unit vector whose cosine similarity to ``one_hot(0)`` is ``similarity``."""
    vector = [0.0] * dim
    vector[0] = similarity
    vector[1] = math.sqrt(1.0 - similarity**2)
    return vector


def make_candidate(n: int, tags: list[str] | None = None) -> Candidate:
    return Candidate(
        id=f"id-{n}",
        video_url=f"https://videos.example/{n}.mp4",
        title=f"Video {n}",
        description=f"Description {n}",
        tags=["sorry"] if tags is None else tags,
        region="TH",
        created_at=datetime(2024, 1, 1) + timedelta(minutes=n),
        uploader=UploaderSummary(display_name=f"User {n}"),
    )
