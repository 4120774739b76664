# waterlogic/services/engine/feasibility.py
# Feasibility Filter
# - 불가능 후보도 버리지 않고 ConstraintCheck 전체를 유지 (진단용)
# - feasible ⇔ 모든 check 통과
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from waterlogic.schemas.common import REGULATED_PARAMETERS, ConstraintKind
from waterlogic.schemas.specification import CustomerSpecification
from waterlogic.services.engine.composer import compose_chain, estimate_recovery
from waterlogic.services.engine.constants import DEFAULT_CONFIG, EngineConfig
from waterlogic.services.engine.economics import economics
from waterlogic.services.engine.intake import required_removal
from waterlogic.services.engine.models import (
    Candidate,
    CombinedPerformance,
    ConstraintCheck,
    TechnologyChain,
)
from waterlogic.services.engine.registry import is_sector_preferred, resolve_id
from waterlogic.services.engine.trail import DecisionTrail
from waterlogic.services.engine.utils import pct


def _removal_check(parameter: str, required: float, achieved: float) -> ConstraintCheck:
    return ConstraintCheck(
        name=f"{parameter.upper()} Removal",
        kind=ConstraintKind.REMOVAL,
        required=required,
        achieved=achieved,
        passed=achieved >= required,
        margin=achieved - required,
        parameter=parameter,
    )


def _limit_check(name: str, kind: ConstraintKind, limit: float, achieved: float) -> ConstraintCheck:
    return ConstraintCheck(
        name=name,
        kind=kind,
        required=float(limit),
        achieved=float(achieved),
        passed=achieved <= limit,
        margin=float(limit) - float(achieved),
    )


def constraint_checks(
    spec: CustomerSpecification,
    perf: CombinedPerformance,
    capex: float,
    required: Optional[Dict[str, float]] = None,
) -> Tuple[ConstraintCheck, ...]:
    req = required if required is not None else required_removal(spec)
    checks: List[ConstraintCheck] = [
        _removal_check(p.value, req[p.value], perf.removal(p.value))
        for p in REGULATED_PARAMETERS
    ]

    c = spec.constraints
    flow = float(spec.flow_rate)
    if c.max_footprint is not None:
        checks.append(
            _limit_check("Footprint", ConstraintKind.FOOTPRINT, c.max_footprint, perf.footprint * flow)
        )
    if c.max_power is not None:
        checks.append(
            _limit_check("Power", ConstraintKind.POWER, c.max_power, perf.energy * flow)
        )
    if c.max_capex is not None:
        checks.append(
            _limit_check("Budget (CAPEX)", ConstraintKind.BUDGET, c.max_capex, capex)
        )
    if not c.chemicals_unrestricted and not c.allowed_chemicals:
        # 약품 사용 불가: 약품 소비량 0 이어야 함
        checks.append(
            _limit_check("Chemical use", ConstraintKind.CHEMICALS, 0.0, perf.chemicals)
        )
    return tuple(checks)


def enumerate_chains(
    spec: CustomerSpecification,
    chains: Iterable[TechnologyChain],
    trail: Optional[DecisionTrail] = None,
) -> List[TechnologyChain]:
    """
    벤더 선호를 적용한 평가 대상 체인 목록.

    exclude 기술이 하나라도 있으면 제외, include 는 나열된 기술을 모두 포함해야 통과.
    """
    prefs = spec.vendor_preferences
    exclude = {resolve_id(t) for t in prefs.exclude}
    include = {resolve_id(t) for t in prefs.include}

    out: List[TechnologyChain] = []
    for chain in chains:
        banned = [t.value for t in chain.techs if t in exclude]
        if banned:
            if trail is not None:
                trail.log_decision(
                    f"Skipped {chain.name}",
                    f"Contains excluded technology: {', '.join(banned)}",
                )
            continue
        missing = [t.value for t in sorted(include, key=lambda x: x.value) if t not in chain.techs]
        if missing:
            if trail is not None:
                trail.log_decision(
                    f"Skipped {chain.name}",
                    f"Missing required technology: {', '.join(missing)}",
                )
            continue
        out.append(chain)
    return out


def _describe(checks: Iterable[ConstraintCheck]) -> str:
    parts = []
    for c in checks:
        if c.kind == ConstraintKind.REMOVAL:
            parts.append(f"{c.name}: {pct(c.achieved)} vs {pct(c.required)} required")
        else:
            parts.append(f"{c.name}: {c.achieved:,.1f} vs limit {c.required:,.1f}")
    return "; ".join(parts)


def filter_feasible(
    spec: CustomerSpecification,
    chains: Iterable[TechnologyChain],
    config: EngineConfig = DEFAULT_CONFIG,
    trail: Optional[DecisionTrail] = None,
) -> List[Candidate]:
    required = required_removal(spec)
    flow = float(spec.flow_rate)
    candidates: List[Candidate] = []

    for idx, chain in enumerate(chains):
        perf = compose_chain(chain)
        econ = economics(spec, chain, perf, config)
        checks = constraint_checks(spec, perf, econ.capex, required)

        cand = Candidate(
            index=idx,
            chain=chain,
            performance=perf,
            footprint_m2=perf.footprint * flow,
            power_kw=perf.energy * flow,
            economics=econ,
            recovery=estimate_recovery(chain, config),
            checks=checks,
            sector_preferred=is_sector_preferred(spec.sector, chain),
        )
        candidates.append(cand)

        if trail is not None:
            if cand.feasible:
                trail.log_decision(
                    f"Included {chain.name}",
                    "Meets all constraints ("
                    + _describe(c for c in checks if c.kind == ConstraintKind.REMOVAL)
                    + ")",
                )
            else:
                trail.log_decision(
                    f"Excluded {chain.name}",
                    "Fails " + _describe(cand.failed_checks),
                )

    logger.debug(
        f"Feasibility: {sum(1 for c in candidates if c.feasible)}/{len(candidates)} chains feasible"
    )
    return candidates
