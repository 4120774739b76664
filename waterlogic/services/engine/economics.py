# waterlogic/services/engine/economics.py
# Economic Model: CAPEX / OPEX / NPV
from __future__ import annotations

from typing import Dict, Iterable, Optional

from loguru import logger

from waterlogic.schemas.specification import CustomerSpecification
from waterlogic.services.engine.constants import DEFAULT_CONFIG, EngineConfig
from waterlogic.services.engine.intake import annual_volume
from waterlogic.services.engine.models import (
    CombinedPerformance,
    Economics,
    OpexBreakdown,
    TechnologyChain,
)


def _base_capex(spec: CustomerSpecification, perf: CombinedPerformance, cfg: EngineConfig) -> float:
    """설치계수/옵션 적용 전 장비 기준 CAPEX (유지보수 산정 기준값)."""
    return float(spec.flow_rate) * cfg.base_equipment_cost_per_m3h * perf.capex_factor


def installation_factor(spec: CustomerSpecification, cfg: EngineConfig = DEFAULT_CONFIG) -> float:
    if spec.constraints.containerized:
        return cfg.installation_factor_containerized
    return cfg.installation_factor_site_built


def optional_module_surcharge(
    spec: CustomerSpecification,
    chain_techs: Iterable[str],
    cfg: EngineConfig = DEFAULT_CONFIG,
) -> float:
    """옵션 모듈 추가 비용. 체인에 이미 포함된 기술은 중복 과금하지 않음."""
    in_chain = {str(getattr(t, "value", t)).upper() for t in chain_techs}
    rates = {k.upper(): v for k, v in cfg.surcharges.items()}
    total = 0.0
    for module in spec.optional_modules:
        key = str(module).strip().upper()
        rate = rates.get(key)
        if rate is None:
            logger.debug(f"Optional module '{module}' has no CAPEX surcharge")
            continue
        if key in in_chain:
            continue
        total += float(spec.flow_rate) * rate
    return total


def capital_cost(
    spec: CustomerSpecification,
    chain: TechnologyChain,
    perf: CombinedPerformance,
    cfg: EngineConfig = DEFAULT_CONFIG,
) -> float:
    capex = _base_capex(spec, perf, cfg) * installation_factor(spec, cfg)
    capex += optional_module_surcharge(spec, chain.techs, cfg)
    return capex


def operating_cost(
    spec: CustomerSpecification,
    perf: CombinedPerformance,
    cfg: EngineConfig = DEFAULT_CONFIG,
) -> OpexBreakdown:
    volume = annual_volume(spec)
    return OpexBreakdown(
        energy=perf.energy * volume * cfg.electricity_rate,
        chemicals=perf.chemicals * volume,
        maintenance=_base_capex(spec, perf, cfg) * perf.maintenance,
        labor=cfg.labor_hours_per_year * cfg.labor_cost_per_hour,
    )


def net_present_value(
    capex: float,
    annual_opex: float,
    cfg: EngineConfig = DEFAULT_CONFIG,
    years: Optional[int] = None,
) -> float:
    """
    비용 관점 NPV: year 0 CAPEX + 연도별 OPEX(물가상승 반영)의 할인 합.
    OPEX_y = opex * (1 + escalation)^(y-1),  할인 1/(1 + r)^y
    """
    horizon = cfg.project_lifespan_years if years is None else int(years)
    npv = float(capex)
    for year in range(1, horizon + 1):
        opex_y = annual_opex * (1.0 + cfg.opex_escalation_rate) ** (year - 1)
        npv += opex_y / (1.0 + cfg.discount_rate) ** year
    return npv


def capex_breakdown(capex: float, cfg: EngineConfig = DEFAULT_CONFIG) -> Dict[str, float]:
    return {name: capex * share for name, share in cfg.capex_breakdown_shares}


def economics(
    spec: CustomerSpecification,
    chain: TechnologyChain,
    perf: CombinedPerformance,
    cfg: EngineConfig = DEFAULT_CONFIG,
) -> Economics:
    capex = capital_cost(spec, chain, perf, cfg)
    opex = operating_cost(spec, perf, cfg)
    return Economics(
        capex=capex,
        opex=opex.total,
        npv=net_present_value(capex, opex.total, cfg),
        opex_breakdown=opex,
        capex_breakdown=capex_breakdown(capex, cfg),
    )
