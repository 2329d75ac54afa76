"""Video store queries used by the search pipeline and the backfill job.

Every read returns detached :class:`Candidate` projections so callers never
hold an open session. Store errors surface as :class:`CandidateFetchFailed`.
"""

import logging
from datetime import datetime
from typing import Any, Iterable

import numpy as np
from sqlalchemy import String, cast, func, or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import col, select

from ..exceptions import CandidateFetchFailed
from ..interfaces import Candidate, UploaderSummary
from .database import get_session
from .models import User, Video

logger = logging.getLogger(__name__)

SEARCHABLE_STATUS = "verified"


def to_uploader_summary(raw: Any) -> UploaderSummary | None:
    """Normalize a joined uploader into a single summary.

    Depending on the query shape the uploader arrives as a ``User``, a plain
    mapping, or a one-element list of either.
    """
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if raw is None:
        return None
    if isinstance(raw, dict):
        return UploaderSummary(
            display_name=raw.get("display_name", ""),
            role=raw.get("role", "user"),
            avatar_url=raw.get("avatar_url"),
        )
    return UploaderSummary(
        display_name=raw.display_name,
        role=raw.role,
        avatar_url=raw.avatar_url,
    )


def to_candidate(video: Video) -> Candidate:
    """Project a stored video onto the fields needed for ranking."""
    return Candidate(
        id=video.id,
        video_url=video.video_url,
        title=video.title,
        description=video.description or "",
        tags=list(video.tags or []),
        region=video.region,
        created_at=video.created_at,
        language=video.language,
        status=video.status,
        uploader=to_uploader_summary(video.user),
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class VideoRepository:
    """Read/write access to videos and their embeddings."""

    def __init__(self, engine: Engine | None = None, embedding_dimension: int = 768):
        self.engine = engine
        self.embedding_dimension = embedding_dimension

    def _searchable(self, region: str | None):
        statement = (
            select(Video)
            .where(Video.status == SEARCHABLE_STATUS)
            .options(selectinload(Video.user))
        )
        if region:
            statement = statement.where(Video.region == region)
        return statement

    def list_recent(self, region: str | None, limit: int) -> list[Candidate]:
        """Newest searchable videos, optionally scoped to a region."""
        statement = (
            self._searchable(region)
            .order_by(col(Video.created_at).desc())
            .limit(limit)
        )
        try:
            with get_session(self.engine) as session:
                return [to_candidate(v) for v in session.exec(statement).all()]
        except SQLAlchemyError as e:
            raise CandidateFetchFailed(f"Browse query failed: {e}") from e

    def text_match(
        self, terms: Iterable[str], region: str | None, limit: int
    ) -> list[Candidate]:
        """Searchable videos whose title, description or tags contain any term."""
        clauses = []
        for term in terms:
            pattern = f"%{_escape_like(term)}%"
            clauses.extend(
                [
                    col(Video.title).ilike(pattern, escape="\\"),
                    col(Video.description).ilike(pattern, escape="\\"),
                    cast(Video.tags, String).ilike(pattern, escape="\\"),
                ]
            )
        if not clauses:
            return []

        statement = (
            self._searchable(region)
            .where(or_(*clauses))
            .order_by(col(Video.created_at).desc())
            .limit(limit)
        )
        try:
            with get_session(self.engine) as session:
                return [to_candidate(v) for v in session.exec(statement).all()]
        except SQLAlchemyError as e:
            raise CandidateFetchFailed(f"Text search failed: {e}") from e

    def nearest(
        self, embedding: list[float], region: str | None, limit: int
    ) -> list[tuple[Candidate, float]]:
        """Searchable videos ordered by cosine distance to ``embedding``.

        Returns ``(candidate, distance)`` pairs, closest first. Videos with a
        missing or malformed embedding are never returned.
        """
        query = np.asarray(embedding, dtype=np.float64)
        if query.shape != (self.embedding_dimension,):
            raise CandidateFetchFailed(
                f"Query vector has {query.size} values, expected {self.embedding_dimension}"
            )
        query_norm = np.linalg.norm(query)
        if query_norm == 0:
            return []

        statement = (
            self._searchable(region)
            .where(col(Video.embedding).is_not(None))
            .order_by(col(Video.created_at).desc())
        )
        try:
            with get_session(self.engine) as session:
                rows = [
                    (to_candidate(v), v.embedding)
                    for v in session.exec(statement).all()
                    if self._is_valid(v.embedding)
                ]
        except SQLAlchemyError as e:
            raise CandidateFetchFailed(f"Vector search failed: {e}") from e

        if not rows:
            return []

        matrix = np.asarray([vector for _, vector in rows], dtype=np.float64)
        norms = np.linalg.norm(matrix, axis=1)
        norms[norms == 0] = np.inf  # zero vectors end up at distance 1
        distances = 1.0 - (matrix @ query) / (norms * query_norm)

        # stable sort keeps newer-first store order on equal distances
        order = np.argsort(distances, kind="stable")[:limit]
        return [(rows[i][0], float(distances[i])) for i in order]

    def _is_valid(self, vector: list[float] | None) -> bool:
        return isinstance(vector, list) and len(vector) == self.embedding_dimension

    def videos_without_embedding(self) -> list[Candidate]:
        """All videos, any status, whose embedding is missing or malformed."""
        statement = (
            select(Video)
            .options(selectinload(Video.user))
            .order_by(col(Video.created_at))
        )
        try:
            with get_session(self.engine) as session:
                return [
                    to_candidate(v)
                    for v in session.exec(statement).all()
                    if not self._is_valid(v.embedding)
                ]
        except SQLAlchemyError as e:
            raise CandidateFetchFailed(f"Backfill query failed: {e}") from e

    def save_embedding(self, video_id: str, vector: list[float]) -> None:
        """Store a validated embedding on a video."""
        if not self._is_valid(vector):
            raise ValueError(
                f"Refusing to store a {len(vector)}-d embedding, expected {self.embedding_dimension}"
            )
        with get_session(self.engine) as session:
            video = session.get(Video, video_id)
            if video is None:
                raise KeyError(f"Video not found: {video_id}")
            video.embedding = [float(x) for x in vector]
            video.updated_at = datetime.utcnow()
            session.add(video)
            session.commit()

    def get_or_create_user(
        self,
        username: str,
        display_name: str | None = None,
        avatar_url: str | None = None,
        role: str = "user",
    ) -> str:
        """Return the id of the user with ``username``, creating it if needed."""
        with get_session(self.engine) as session:
            user = session.exec(select(User).where(User.username == username)).first()
            if not user:
                user = User(
                    username=username,
                    display_name=display_name or username,
                    avatar_url=avatar_url,
                    role=role,
                )
                session.add(user)
                session.commit()
                session.refresh(user)
            return user.id

    def add_video(
        self,
        video_url: str,
        title: str,
        description: str = "",
        region: str = "",
        language: str = "",
        tags: list[str] | None = None,
        status: str = "pending",
        user_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Candidate:
        """Insert a video, or update the one already stored at ``video_url``.

        Changing a video's text clears its embedding so the backfill job
        picks it up again.
        """
        with get_session(self.engine) as session:
            video = session.exec(select(Video).where(Video.video_url == video_url)).first()
            if not video:
                video = Video(video_url=video_url, title=title)
                if created_at:
                    video.created_at = created_at
            text_changed = (video.title, video.description, video.tags) != (
                title,
                description,
                tags or [],
            )
            video.title = title
            video.description = description
            video.region = region
            video.language = language
            video.tags = list(tags or [])
            video.status = status
            video.user_id = user_id
            video.updated_at = datetime.utcnow()
            if text_changed:
                video.embedding = None
            session.add(video)
            session.commit()
            session.refresh(video)
            return to_candidate(video)

    def count_videos(self) -> dict[str, int]:
        """Video counts: total, searchable and missing an embedding."""
        with get_session(self.engine) as session:
            total = session.exec(select(func.count()).select_from(Video)).one()
            searchable = session.exec(
                select(func.count())
                .select_from(Video)
                .where(Video.status == SEARCHABLE_STATUS)
            ).one()
        return {
            "total": total,
            "searchable": searchable,
            "missing_embedding": len(self.videos_without_embedding()),
        }
