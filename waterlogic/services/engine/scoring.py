# waterlogic/services/engine/scoring.py
# Multi-Objective Scorer
#
# 최적화 관점에서는 손실 F (낮을수록 좋음)를 계산하고,
#   F = w_cost*(1-cost) + w_tech*(1-tech) + w_esg*(1-esg) + w_risk*risk
# 랭킹/출력은 OverallScore = 1 - F (높을수록 좋음) 하나의 규약으로 통일한다.
from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Mapping, Optional

from waterlogic.schemas.common import REGULATED_PARAMETERS
from waterlogic.schemas.specification import CustomerSpecification
from waterlogic.services.engine.constants import DEFAULT_CONFIG, EngineConfig
from waterlogic.services.engine.intake import required_removal
from waterlogic.services.engine.models import (
    Candidate,
    CombinedPerformance,
    ObjectiveBreakdown,
)
from waterlogic.services.engine.utils import clamp, safe_div


def tech_fit(perf: CombinedPerformance, required: Mapping[str, float]) -> float:
    """파라미터별 min(achieved/required, 1)의 곱. required=0 이면 1."""
    fit = 1.0
    for p in REGULATED_PARAMETERS:
        req = float(required.get(p.value, 0.0))
        if req <= 0:
            continue
        fit *= min(perf.removal(p.value) / req, 1.0)
    return clamp(fit, 0.0, 1.0)


def cost_score(
    spec: CustomerSpecification,
    capex: float,
    opex: float,
    cfg: EngineConfig = DEFAULT_CONFIG,
) -> float:
    """비용 점수 (0~1, 높을수록 저렴). 예산이 있으면 예산 대비, 없으면 기준 규모 대비."""
    budget = spec.constraints.max_capex
    if budget is not None and budget > 0:
        return clamp(1.0 - min(capex / budget, 1.0), 0.0, 1.0)
    ratio = (
        safe_div(capex, cfg.cost_reference_capex) + safe_div(opex, cfg.cost_reference_opex)
    ) / 2.0
    return clamp(1.0 - min(ratio, 1.0), 0.0, 1.0)


def objectives(candidate: Candidate, cfg: EngineConfig = DEFAULT_CONFIG) -> ObjectiveBreakdown:
    w = cfg.objective_weights
    esg = (candidate.esg.composite / 100.0) if candidate.esg else 0.0

    f_cost = 1.0 - candidate.cost_score
    f_tech = 1.0 - candidate.tech_fit
    f_esg = 1.0 - clamp(esg, 0.0, 1.0)
    f_risk = cfg.risk_penalty_feasible if candidate.feasible else cfg.risk_penalty_infeasible

    total = w.cost * f_cost + w.tech * f_tech + w.esg * f_esg + w.risk * f_risk
    return ObjectiveBreakdown(cost=f_cost, tech=f_tech, esg=f_esg, risk=f_risk, total=total)


def score(candidate: Candidate, cfg: EngineConfig = DEFAULT_CONFIG) -> float:
    """OverallScore (높을수록 좋음) = 1 - F."""
    return objectives(candidate, cfg).overall_score


def apply_scores(
    spec: CustomerSpecification,
    candidate: Candidate,
    cfg: EngineConfig = DEFAULT_CONFIG,
    required: Optional[Dict[str, float]] = None,
) -> Candidate:
    """tech fit / cost score / objective 값을 채운 새 Candidate 반환 (ESG는 미리 계산되어 있어야 함)."""
    req = required if required is not None else required_removal(spec)
    scored = replace(
        candidate,
        tech_fit=tech_fit(candidate.performance, req),
        cost_score=cost_score(spec, candidate.economics.capex, candidate.economics.opex, cfg),
    )
    return replace(scored, objectives=objectives(scored, cfg))


def rank(candidates: List[Candidate]) -> List[Candidate]:
    """OverallScore 내림차순 stable sort (동점이면 열거 순서 유지)."""
    return sorted(candidates, key=lambda c: -c.overall_score)


def is_pareto_candidate(candidate: Candidate, cfg: EngineConfig = DEFAULT_CONFIG) -> bool:
    return bool(candidate.objectives and candidate.objectives.total < cfg.pareto_threshold)
