# waterlogic/db/models/proposal_run.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin, UUIDMixin


class ProposalRun(UUIDMixin, TimestampMixin, Base):
    """평가 1회 실행 기록 (감사용). 엔진 계산 경계 밖에서만 기록한다."""

    __tablename__ = "proposal_run"

    fingerprint: Mapped[str] = mapped_column(String(24), index=True)
    sector: Mapped[str] = mapped_column(String(60), index=True)
    status: Mapped[str] = mapped_column(String(40))
    best_solution: Mapped[Optional[str]] = mapped_column(String(120))
    feasible_count: Mapped[int] = mapped_column(Integer, default=0)
    confidence_score: Mapped[Optional[float]] = mapped_column(Float)
    input_json: Mapped[dict] = mapped_column(JSON, default=dict)
    result_json: Mapped[dict] = mapped_column(JSON, default=dict)
