# waterlogic/services/engine/sustainability.py
# Sustainability (ESG) & Confidence Evaluator
# - 각 하위 점수는 고정 기준값 대비 정규화 후 0~100 으로 clamp
# - confidence 라벨은 설명용 출력일 뿐, 엔진은 이를 근거로 실행을 막지 않는다.
from __future__ import annotations

from typing import Tuple

from waterlogic.schemas.common import ConfidenceLevel
from waterlogic.schemas.specification import CustomerSpecification, EsgPriorities
from waterlogic.services.engine.constants import DEFAULT_CONFIG, EngineConfig
from waterlogic.services.engine.intake import annual_volume, data_completeness
from waterlogic.services.engine.models import (
    Candidate,
    CombinedPerformance,
    ConfidenceAssessment,
    ConstraintCheck,
    EsgMetrics,
)
from waterlogic.services.engine.utils import clamp, safe_div

AUTO_APPROVE = "auto-approve recommended"
HUMAN_REVIEW = "human review recommended"
MANUAL_OVERRIDE = "manual override required"


# =============================================================================
# ESG
# =============================================================================
def esg_metrics(
    spec: CustomerSpecification,
    perf: CombinedPerformance,
    recovery: float,
    weights: EsgPriorities,
    cfg: EngineConfig = DEFAULT_CONFIG,
) -> EsgMetrics:
    """weights는 정규화된(합=1) 우선순위여야 한다."""
    volume = annual_volume(spec)

    water_score = clamp(recovery * 100.0, 0.0, 100.0)

    energy_eff = 1.0 - safe_div(perf.energy, cfg.energy_efficiency_reference)
    energy_score = clamp(energy_eff * 100.0, 0.0, 100.0)

    # 탄소: 연간 배출(t) vs 기준 공정(4.5 kWh/m³) 배출
    annual_carbon_t = perf.energy * volume * cfg.grid_carbon_factor / 1000.0
    baseline_carbon_t = cfg.baseline_specific_energy * volume * cfg.grid_carbon_factor / 1000.0
    ratio = safe_div(
        annual_carbon_t,
        baseline_carbon_t,
        default=safe_div(perf.energy, cfg.baseline_specific_energy),
    )
    carbon_score = clamp((1.0 - ratio) * 100.0, 0.0, 100.0)

    composite = (
        water_score * weights.water
        + carbon_score * weights.carbon
        + energy_score * weights.energy
    )

    return EsgMetrics(
        water_recovery=recovery,
        water_score=water_score,
        energy_score=energy_score,
        carbon_score=carbon_score,
        annual_carbon_tonnes=annual_carbon_t,
        baseline_carbon_tonnes=baseline_carbon_t,
        specific_energy=perf.energy,
        composite=clamp(composite, 0.0, 100.0),
    )


# =============================================================================
# Confidence
# =============================================================================
def classify(score: float, cfg: EngineConfig = DEFAULT_CONFIG) -> Tuple[str, str]:
    if score >= cfg.auto_approve_threshold:
        return ConfidenceLevel.HIGH.value, AUTO_APPROVE
    if score >= cfg.human_review_threshold:
        return ConfidenceLevel.MEDIUM.value, HUMAN_REVIEW
    return ConfidenceLevel.LOW.value, MANUAL_OVERRIDE


def margin_term(
    feasible: bool, checks: Tuple[ConstraintCheck, ...], cfg: EngineConfig = DEFAULT_CONFIG
) -> float:
    if not feasible:
        return cfg.margin_term_infeasible
    tightest = min((c.relative_margin for c in checks), default=1.0)
    return clamp(
        cfg.margin_term_floor + cfg.margin_term_gain * tightest,
        cfg.margin_term_floor,
        1.0,
    )


def confidence(
    spec: CustomerSpecification,
    candidate: Candidate,
    cfg: EngineConfig = DEFAULT_CONFIG,
) -> ConfidenceAssessment:
    w = cfg.confidence_weights
    completeness = clamp(data_completeness(spec), 0.0, 1.0)
    certainty = clamp(candidate.tech_fit, 0.0, 1.0)
    margin = margin_term(candidate.feasible, candidate.checks, cfg)

    raw = 100.0 * (
        w.data_completeness * completeness
        + w.model_certainty * certainty
        + w.constraint_margin * margin
    )
    score = clamp(raw, 0.0, 100.0)
    level, decision = classify(score, cfg)

    return ConfidenceAssessment(
        score=score,
        level=level,
        decision=decision,
        data_completeness=completeness,
        model_certainty=certainty,
        constraint_margin=margin,
    )
