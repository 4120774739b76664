# waterlogic/services/engine/orchestrator.py
# Proposal Engine (orchestrator)
#   validate → normalize → enumerate → feasibility/economics → ESG/scoring
#   → rank → best → mass balance/energy → pricing → confidence → trail → fingerprint
# - 순수 동기 계산. I/O 없음 (저장/로그 sink 는 호출 측 책임)
from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from loguru import logger

from waterlogic.core.exceptions import SpecValidationError
from waterlogic.schemas.common import REGULATED_PARAMETERS, EvaluationStatus
from waterlogic.schemas.specification import CustomerSpecification
from waterlogic.services.engine.constants import DEFAULT_CONFIG, EngineConfig
from waterlogic.services.engine.feasibility import enumerate_chains, filter_feasible
from waterlogic.services.engine.intake import (
    normalize_specification,
    parse_specification,
    required_removal,
    validate,
)
from waterlogic.services.engine.models import (
    Candidate,
    Diagnostics,
    EnergySummary,
    EvaluationResult,
    MassBalance,
    PricingResult,
)
from waterlogic.services.engine.pricing import price
from waterlogic.services.engine.registry import list_chains
from waterlogic.services.engine.scoring import apply_scores, rank
from waterlogic.services.engine.sustainability import confidence, esg_metrics
from waterlogic.services.engine.trail import Clock, DecisionTrail, fingerprint, utcnow
from waterlogic.services.engine.utils import ensure_finite, pct

_Q_EPS = 1e-9


# =============================================================================
# Mass balance / energy
# =============================================================================
def mass_balance(spec: CustomerSpecification, candidate: Candidate) -> MassBalance:
    """Qin*Cin = Qout*Cout + Qreject*Creject (Qreject ≈ 0 이면 Creject = 0)."""
    q_in = float(spec.flow_rate)
    q_out = q_in * candidate.recovery
    q_reject = q_in - q_out

    c_in: Dict[str, float] = {}
    c_out: Dict[str, float] = {}
    c_reject: Dict[str, float] = {}
    for p in REGULATED_PARAMETERS:
        key = p.value
        cin = float(getattr(spec.feed_water, key))
        cout = cin * (1.0 - candidate.performance.removal(key))
        c_in[key] = cin
        c_out[key] = cout
        if q_reject <= _Q_EPS:
            c_reject[key] = 0.0
        else:
            c_reject[key] = max(0.0, (q_in * cin - q_out * cout) / q_reject)

    return MassBalance(
        q_in=q_in,
        q_out=q_out,
        q_reject=q_reject,
        recovery=candidate.recovery,
        concentrations={"in": c_in, "out": c_out, "reject": c_reject},
    )


def energy_summary(
    spec: CustomerSpecification, candidate: Candidate, cfg: EngineConfig = DEFAULT_CONFIG
) -> EnergySummary:
    specific = candidate.performance.energy
    total_power = specific * float(spec.flow_rate)
    annual_energy = total_power * float(spec.operating_hours)
    return EnergySummary(
        specific_energy=specific,
        total_power=total_power,
        annual_energy=annual_energy,
        carbon_factor=cfg.grid_carbon_factor,
        annual_carbon=annual_energy * cfg.grid_carbon_factor / 1000.0,
    )


# =============================================================================
# Diagnostics
# =============================================================================
def _unsatisfied(candidates: Iterable[Candidate]) -> List[str]:
    """모든 후보가 공통으로 실패한 제약 이름 (첫 후보의 검사 순서 유지)."""
    common: Optional[List[str]] = None
    for c in candidates:
        failed = {chk.name for chk in c.failed_checks}
        if common is None:
            common = [chk.name for chk in c.failed_checks]
        else:
            common = [name for name in common if name in failed]
    return common or []


def _per_chain_failures(candidates: Iterable[Candidate]) -> List[str]:
    """공통 실패 제약이 없을 때: 체인별 실패 목록 ("UF + RO: TDS Removal, Budget (CAPEX)")."""
    return [
        f"{c.name}: " + ", ".join(chk.name for chk in c.failed_checks)
        for c in candidates
    ]


def _diagnostics(candidates: List[Candidate], best: Optional[Candidate]) -> Diagnostics:
    feasible = [c for c in candidates if c.feasible]
    if best is not None:
        return Diagnostics(
            feasible_count=len(feasible),
            unsatisfied_constraints=(),
            message=f"{len(feasible)} of {len(candidates)} chains meet all constraints",
        )
    if not candidates:
        return Diagnostics(
            feasible_count=0,
            unsatisfied_constraints=(),
            message="No technology chains left after applying vendor preferences",
        )
    unsatisfied = _unsatisfied(candidates)
    if unsatisfied:
        message = "No chain satisfies all constraints. Relax: " + ", ".join(unsatisfied)
    else:
        # 공통 실패 제약 없음: 체인별로 보고
        unsatisfied = _per_chain_failures(candidates)
        message = "No constraint is failed by every chain. Per chain: " + "; ".join(unsatisfied)
    return Diagnostics(
        feasible_count=0,
        unsatisfied_constraints=tuple(unsatisfied),
        message=message,
    )


# =============================================================================
# Numeric guard
# =============================================================================
def _guard_candidate(c: Candidate) -> None:
    prefix = c.name
    econ = c.economics
    for label, value in (
        ("capex", econ.capex),
        ("opex", econ.opex),
        ("npv", econ.npv),
        ("footprint", c.footprint_m2),
        ("power", c.power_kw),
        ("recovery", c.recovery),
        ("techFit", c.tech_fit),
        ("costScore", c.cost_score),
        ("overallScore", c.overall_score),
    ):
        ensure_finite(f"{prefix}.{label}", value)
    if c.esg is not None:
        ensure_finite(f"{prefix}.esg", c.esg.composite)
    if c.confidence is not None:
        ensure_finite(f"{prefix}.confidence", c.confidence.score)


def _guard_outputs(
    candidates: List[Candidate],
    mb: Optional[MassBalance],
    en: Optional[EnergySummary],
    pricing: Optional[PricingResult],
) -> None:
    for c in candidates:
        _guard_candidate(c)
    if mb is not None:
        for label, value in (("Qin", mb.q_in), ("Qout", mb.q_out), ("Qreject", mb.q_reject)):
            ensure_finite(f"massBalance.{label}", value)
        for stream, conc in mb.concentrations.items():
            for key, value in conc.items():
                ensure_finite(f"massBalance.{stream}.{key}", value)
    if en is not None:
        ensure_finite("energy.annualEnergy", en.annual_energy)
        ensure_finite("energy.annualCarbon", en.annual_carbon)
    if pricing is not None:
        for label, value in (
            ("costPlus", pricing.cost_plus),
            ("valueBased", pricing.value_based),
            ("competitive", pricing.competitive),
            ("optimalPrice", pricing.optimal.price),
            ("winProbability", pricing.optimal.win_probability),
            ("expectedValue", pricing.optimal.expected_value),
        ):
            ensure_finite(f"pricing.{label}", value)


# =============================================================================
# Engine
# =============================================================================
class ProposalEngine:
    def __init__(
        self,
        config: EngineConfig = DEFAULT_CONFIG,
        clock: Optional[Clock] = None,
        refine_pricing: bool = False,
    ) -> None:
        self.config = config
        self.clock: Clock = clock or utcnow
        self.refine_pricing = refine_pricing

    def run(
        self, data: Union[CustomerSpecification, Mapping[str, Any], None]
    ) -> EvaluationResult:
        cfg = self.config
        raw = parse_specification(data)

        result = validate(raw)
        if not result.valid:
            raise SpecValidationError(result.errors)

        spec = normalize_specification(raw)
        trail = DecisionTrail(clock=self.clock)
        evaluated_at = self.clock()

        w = spec.esg_priorities
        trail.log_decision(
            "Specification accepted",
            f"Sector {spec.sector}, flow {spec.flow_rate:g} m3/h, "
            f"{spec.operating_hours:g} h/yr; ESG weights water={w.water:.2f} "
            f"carbon={w.carbon:.2f} energy={w.energy:.2f}",
        )

        chains = enumerate_chains(spec, list_chains(), trail)
        candidates = filter_feasible(spec, chains, cfg, trail)

        required = required_removal(spec)
        scored: List[Candidate] = []
        for cand in candidates:
            cand = replace(
                cand,
                esg=esg_metrics(spec, cand.performance, cand.recovery, w, cfg),
            )
            cand = apply_scores(spec, cand, cfg, required)
            cand = replace(cand, confidence=confidence(spec, cand, cfg))
            scored.append(cand)

        ranked = rank(scored)
        best = next((c for c in ranked if c.feasible), None)

        mb: Optional[MassBalance] = None
        en: Optional[EnergySummary] = None
        pricing: Optional[PricingResult] = None
        if best is not None:
            trail.log_decision(
                f"Selected {best.name}",
                f"Highest overall score {best.overall_score:.3f} among "
                f"{sum(1 for c in ranked if c.feasible)} feasible chains "
                f"(CAPEX {best.economics.capex:,.0f}, ESG {best.esg.composite:.1f})",
            )
            mb = mass_balance(spec, best)
            en = energy_summary(spec, best, cfg)
            pricing = price(best, cfg, refine=self.refine_pricing)
            trail.log_decision(
                "Pricing optimized",
                f"Margin {pct(pricing.optimal.margin)} at price "
                f"{pricing.optimal.price:,.0f} (win probability "
                f"{pct(pricing.optimal.win_probability)}, expected value "
                f"{pricing.optimal.expected_value:,.0f})",
            )

        diagnostics = _diagnostics(ranked, best)
        if best is None:
            trail.log_decision("No feasible solution", diagnostics.message)
            logger.warning(f"No feasible chain for sector={spec.sector}: {diagnostics.message}")

        _guard_outputs(ranked, mb, en, pricing)

        fp = fingerprint(spec, best, evaluated_at)
        conf = best.confidence if best is not None else None
        trail.log_decision(
            "Evaluation complete",
            (
                f"Confidence {conf.score:.1f} ({conf.level}): {conf.decision}"
                if conf is not None
                else "No recommendation issued"
            ),
            fingerprint=fp,
        )

        status = EvaluationStatus.OK if best is not None else EvaluationStatus.NO_FEASIBLE_SOLUTION
        logger.info(
            f"Evaluated {len(ranked)} chains for sector={spec.sector}: "
            f"status={status.value} best={best.name if best else None} fingerprint={fp}"
        )

        return EvaluationResult(
            status=status.value,
            inputs=spec,
            solutions=tuple(ranked),
            best_solution=best,
            mass_balance=mb,
            energy=en,
            pricing=pricing,
            confidence=conf,
            diagnostics=diagnostics,
            decision_trail=trail.entries,
            fingerprint=fp,
            evaluated_at=evaluated_at,
        )


def evaluate(
    spec: Union[CustomerSpecification, Mapping[str, Any], None],
    config: EngineConfig = DEFAULT_CONFIG,
    clock: Optional[Clock] = None,
    refine_pricing: bool = False,
) -> EvaluationResult:
    return ProposalEngine(config=config, clock=clock, refine_pricing=refine_pricing).run(spec)
