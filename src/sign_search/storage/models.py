"""SQLModel data models for sign search."""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field, Relationship


def _new_id() -> str:
    return str(uuid.uuid4())


class User(SQLModel, table=True):
    """Uploader account (owned by the profile subsystem)."""

    id: str = Field(default_factory=_new_id, primary_key=True)
    username: str = Field(unique=True, index=True)
    display_name: str
    avatar_url: Optional[str] = None
    role: str = Field(default="user")  # user, moderator, admin
    created_at: datetime = Field(default_factory=datetime.utcnow)

    videos: list["Video"] = Relationship(back_populates="user")


class Video(SQLModel, table=True):
    """An uploaded sign language video."""

    id: str = Field(default_factory=_new_id, primary_key=True)
    video_url: str = Field(unique=True, index=True)
    title: str
    description: str = ""
    language: str = ""
    region: str = Field(default="", index=True)  # ISO country code, e.g. TH
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    status: str = Field(default="pending", index=True)  # pending, verified, flagged
    user_id: Optional[str] = Field(default=None, foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # 768-d text embedding of title/description/tags, filled by backfill or import
    embedding: Optional[list[float]] = Field(
        default=None, sa_column=Column(JSON(none_as_null=True))
    )

    user: Optional[User] = Relationship(back_populates="videos")


class QuotaUsage(SQLModel, table=True):
    """Track API quota usage."""

    id: Optional[int] = Field(default=None, primary_key=True)
    date: str = Field(index=True)  # YYYY-MM-DD
    request_count: int = Field(default=0)
    token_count: int = Field(default=0)
    last_request_at: Optional[datetime] = None
