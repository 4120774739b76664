# waterlogic/api/v1/endpoints/proposals.py
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from loguru import logger
from sqlalchemy.orm import Session

from waterlogic.core.config import settings
from waterlogic.db.models import ProposalRun
from waterlogic.db.session import get_db
from waterlogic.schemas.evaluation import EvaluationResultOut, ProposalRunOut, evaluation_out
from waterlogic.schemas.specification import CustomerSpecification, ValidationResult
from waterlogic.services.engine import intake
from waterlogic.services.engine.orchestrator import ProposalEngine

router = APIRouter(tags=["proposals"])


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------
@router.post("/validate", response_model=ValidationResult)
def validate_specification(spec: CustomerSpecification):
    """위반 사항 전체를 반환 (항상 200)"""
    return intake.validate(spec)


@router.post("/evaluate", response_model=EvaluationResultOut)
def evaluate_proposal(
    spec: CustomerSpecification,
    response: Response,
    strict: bool = Query(False, description="실현 가능한 체인이 없으면 409 반환"),
    refine: bool = Query(False, description="grid 최적점 주변 golden-section 가격 보정"),
    db: Session = Depends(get_db),
):
    logger.info(f"🚀 [Evaluation Start] sector={spec.sector} flow={spec.flow_rate}")

    # SpecValidationError / NumericGuardError 는 전역 핸들러에서 problem+json 으로 변환
    cfg = settings.engine_config()
    result = ProposalEngine(config=cfg, refine_pricing=refine).run(spec)
    if strict:
        result.require_best_solution()

    out = evaluation_out(result, cfg)

    run = ProposalRun(
        id=uuid.uuid4(),
        fingerprint=result.fingerprint,
        sector=result.inputs.sector,
        status=result.status,
        best_solution=result.best_solution.name if result.best_solution else None,
        feasible_count=result.diagnostics.feasible_count,
        confidence_score=result.confidence.score if result.confidence else None,
        input_json=spec.model_dump(mode="json", by_alias=True),
        result_json=out.model_dump(mode="json", by_alias=True),
    )
    db.add(run)
    db.commit()

    response.headers["X-Run-Id"] = str(run.id)
    logger.info(f"✅ [Evaluation Done] run={run.id} status={result.status} fp={result.fingerprint}")
    return out


@router.get("/runs/{run_id}", response_model=ProposalRunOut)
def read_run(run_id: uuid.UUID, db: Session = Depends(get_db)):
    run = db.get(ProposalRun, run_id)
    if run is None:
        raise HTTPException(status_code=404, detail=f"Proposal run not found: {run_id}")
    return ProposalRunOut.model_validate(run)
