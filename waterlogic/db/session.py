# waterlogic/db/session.py
from __future__ import annotations

from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from waterlogic.core.config import settings
from waterlogic.db.models import ProposalRun  # noqa: F401  (metadata 등록)
from waterlogic.db.models.base import Base


def _sqlite_file(url: str) -> Path | None:
    """sqlite 파일 DB 이면 경로, 아니면 (다른 드라이버 / :memory:) None"""
    parsed = make_url(url)
    if not parsed.drivername.startswith("sqlite"):
        return None
    if not parsed.database or parsed.database == ":memory:":
        return None
    return Path(parsed.database)


_db_file = _sqlite_file(settings.DB_URL)
if _db_file is not None:
    _db_file.parent.mkdir(parents=True, exist_ok=True)

engine = create_engine(
    settings.DB_URL,
    connect_args={"check_same_thread": False} if settings.DB_URL.startswith("sqlite") else {},
)

# 실행 결과는 커밋 직후 응답 직렬화에 쓰이므로 expire 하지 않음
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_all() -> None:
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
