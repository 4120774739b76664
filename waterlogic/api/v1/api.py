from fastapi import APIRouter

from waterlogic.api.v1.endpoints import (
    proposals,
    technologies,
    health,
)

api_router = APIRouter()

# ==============================================================================
# 1. Core Engine (제안 평가)
# ==============================================================================
api_router.include_router(proposals.router, prefix="/proposals", tags=["Proposals"])

# ==============================================================================
# 2. Data & Resources (기술/체인/섹터 프리셋 조회)
# ==============================================================================
api_router.include_router(technologies.router, prefix="/technologies", tags=["Technologies"])

# ==============================================================================
# 3. System (헬스 체크)
# ==============================================================================
api_router.include_router(health.router, tags=["Health"])
