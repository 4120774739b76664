# ./waterlogic/api/v1/endpoints/health.py
from __future__ import annotations
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from waterlogic.core.config import settings
from waterlogic.db.session import get_db
from waterlogic.services.engine.registry import list_chains, list_technologies

router = APIRouter(prefix="/health", tags=["health"])

class HealthOut(BaseModel):
    status: str
    env: str
    db_ok: bool | None = None
    technologies: int | None = None
    chains: int | None = None

@router.get("", response_model=dict)
def health_simple():
    return {"status": "ok", "env": getattr(settings, "APP_ENV", "local")}

@router.get("/extended", response_model=HealthOut)
def health_extended(db: Session = Depends(get_db)):
    env = getattr(settings, "APP_ENV", "local")
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        db_ok = False
    return HealthOut(
        status="ok" if db_ok else "degraded",
        env=env,
        db_ok=db_ok,
        technologies=len(list_technologies()),
        chains=len(list_chains()),
    )
