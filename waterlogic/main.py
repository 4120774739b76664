# waterlogic/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from waterlogic import __version__
from waterlogic.api.v1.api import api_router
from waterlogic.core.config import settings
from waterlogic.core.errors import register_exception_handlers
from waterlogic.core.logger import setup_logging
from waterlogic.db.session import create_all
from waterlogic.services.engine.registry import list_chains, list_technologies


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_file = setup_logging()
    create_all()
    logger.info(
        f"🚀 WaterLogic API starting (env={settings.APP_ENV}, "
        f"technologies={len(list_technologies())}, chains={len(list_chains())}, log={log_file})"
    )
    yield
    logger.info("🛑 WaterLogic API shutting down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=__version__,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# 출처 미설정 시 전체 허용 (로컬 개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(o).rstrip("/") for o in settings.BACKEND_CORS_ORIGINS] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/", include_in_schema=False)
def root() -> Dict[str, Any]:
    return {
        "service": settings.PROJECT_NAME,
        "version": __version__,
        "evaluate": f"{settings.API_V1_STR}/proposals/evaluate",
        "docs_url": "/docs",
    }


@app.get("/health", include_in_schema=False)
def health_check():
    """로드밸런서용 단순 헬스 체크"""
    return {"status": "ok"}
