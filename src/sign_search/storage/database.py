"""Engine lifecycle, sessions and daily quota bookkeeping."""

import json
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Generator

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine, select

from ..config import settings
from .models import QuotaUsage

# Built on first use from settings.database_path
_engine: Engine | None = None


def _json_dumps(value: Any) -> str:
    # Non-ASCII tags stay literal so keyword LIKE matches can see them
    return json.dumps(value, ensure_ascii=False)


def build_engine(url: str, **kwargs: Any) -> Engine:
    """SQLite engine that stores JSON columns as readable UTF-8."""
    return create_engine(
        url,
        echo=False,
        connect_args={"check_same_thread": False},
        json_serializer=_json_dumps,
        **kwargs,
    )


def get_engine() -> Engine:
    """Return the process engine, creating the SQLite file on first use."""
    global _engine
    if _engine is None:
        path = settings.database_path
        path.parent.mkdir(parents=True, exist_ok=True)
        _engine = build_engine(f"sqlite:///{path}")
    return _engine


def set_engine(engine: Engine | None) -> None:
    """Install a different process engine, or None to rebuild from settings."""
    global _engine
    _engine = engine


def init_db(engine: Engine | None = None) -> None:
    """Create any missing tables."""
    SQLModel.metadata.create_all(engine or get_engine())


@contextmanager
def get_session(engine: Engine | None = None) -> Generator[Session, None, None]:
    with Session(engine or get_engine()) as session:
        yield session


def _today_row(session: Session) -> QuotaUsage:
    today = date.today().isoformat()
    quota = session.exec(select(QuotaUsage).where(QuotaUsage.date == today)).first()
    if quota is None:
        quota = QuotaUsage(date=today)
        session.add(quota)
    return quota


def get_today_quota(engine: Engine | None = None) -> QuotaUsage:
    """Today's usage row, created empty if no call was made yet today."""
    with get_session(engine) as session:
        quota = _today_row(session)
        session.commit()
        session.refresh(quota)
        return quota


def increment_quota(tokens: int = 0, engine: Engine | None = None) -> QuotaUsage:
    """Count one provider request (and its tokens) against today's quota."""
    with get_session(engine) as session:
        quota = _today_row(session)
        quota.request_count += 1
        quota.token_count += tokens
        quota.last_request_at = datetime.utcnow()
        session.add(quota)
        session.commit()
        session.refresh(quota)
        return quota
