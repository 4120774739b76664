# waterlogic/services/engine/pricing.py
# Pricing Engine
# - 고정 logistic 수주확률 모델 + 마진 grid search (EV = P × (price − capex))
# - grid는 정수 step 으로 생성 (float 누적 오차 방지), 동점이면 낮은 마진 유지
from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple

from loguru import logger

from waterlogic.services.engine.constants import DEFAULT_CONFIG, EngineConfig
from waterlogic.services.engine.models import (
    Candidate,
    CommercialOption,
    PricePoint,
    PricingResult,
)
from waterlogic.services.engine.utils import clamp, safe_div
from waterlogic.services.solver import golden_section_max

SALE = "sale"
BOO = "ownBuildOperate"
BOT = "buildOperateTransfer"


def win_probability(
    margin: float, tech_fit: float, esg: float, cfg: EngineConfig = DEFAULT_CONFIG
) -> float:
    """esg는 0~1 스케일."""
    b = cfg.win_model
    z = b.intercept + b.price_ratio * (1.0 + margin) + b.tech_fit * tech_fit + b.esg * esg
    # overflow 방지
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    ez = math.exp(z)
    return ez / (1.0 + ez)


def price_point(
    capex: float, margin: float, tech_fit: float, esg: float, cfg: EngineConfig = DEFAULT_CONFIG
) -> PricePoint:
    price = capex * (1.0 + margin)
    p = win_probability(margin, tech_fit, esg, cfg)
    return PricePoint(
        margin=margin,
        price=price,
        win_probability=p,
        expected_value=p * (price - capex),
    )


def margin_grid(cfg: EngineConfig = DEFAULT_CONFIG) -> List[float]:
    n = int(math.floor((cfg.margin_max - cfg.margin_min) / cfg.margin_step + 1e-9))
    return [round(cfg.margin_min + i * cfg.margin_step, 10) for i in range(n + 1)]


def _margin_pct(price: float, capex: float) -> float:
    return safe_div(price - capex, price) * 100.0


def commercial_options(
    capex: float, opex: float, npv: float, cfg: EngineConfig = DEFAULT_CONFIG
) -> Dict[str, CommercialOption]:
    sale_price = capex * (1.0 + cfg.default_margin)
    years = cfg.project_lifespan_years
    return {
        SALE: CommercialOption(
            type=SALE,
            upfront=sale_price,
            annual=0.0,
            description="Outright equipment sale with installation",
        ),
        BOO: CommercialOption(
            type=BOO,
            upfront=0.0,
            annual=safe_div(npv * cfg.boo_npv_multiplier, years),
            description=f"Build-own-operate service contract over {years} years",
        ),
        BOT: CommercialOption(
            type=BOT,
            upfront=sale_price * cfg.bot_upfront_share,
            annual=opex * cfg.bot_opex_multiplier,
            description=f"Build-operate-transfer with handover in year {cfg.bot_transfer_year}",
            transfer_year=cfg.bot_transfer_year,
        ),
    }


def _refine(
    capex: float, best: PricePoint, tech_fit: float, esg: float, cfg: EngineConfig
) -> Optional[PricePoint]:
    lo = max(cfg.margin_min, best.margin - cfg.margin_step)
    hi = min(cfg.margin_max, best.margin + cfg.margin_step)
    if hi <= lo:
        return None

    def ev(m: float) -> float:
        return price_point(capex, m, tech_fit, esg, cfg).expected_value

    m, _ = golden_section_max(ev, lo, hi, tol=1e-6)
    m = clamp(m, lo, hi)
    point = price_point(capex, m, tech_fit, esg, cfg)
    if point.expected_value < best.expected_value:
        return None
    return point


def price(
    candidate: Candidate, cfg: EngineConfig = DEFAULT_CONFIG, refine: bool = False
) -> PricingResult:
    econ = candidate.economics
    capex = econ.capex
    esg = (candidate.esg.composite / 100.0) if candidate.esg else 0.0

    cost_plus = capex * (1.0 + cfg.cost_plus_margin)
    value_based = capex * (1.0 + cfg.value_based_margin)
    competitive = capex * (1.0 + cfg.competitive_margin)

    grid: Tuple[PricePoint, ...] = tuple(
        price_point(capex, m, candidate.tech_fit, esg, cfg) for m in margin_grid(cfg)
    )
    best = grid[0]
    for point in grid[1:]:
        if point.expected_value > best.expected_value:
            best = point

    refined = False
    if refine:
        better = _refine(capex, best, candidate.tech_fit, esg, cfg)
        if better is not None:
            best, refined = better, True

    logger.debug(
        f"Pricing {candidate.name}: margin={best.margin:.4f} "
        f"P(win)={best.win_probability:.3f} EV={best.expected_value:,.0f}"
    )

    return PricingResult(
        capex=capex,
        cost_plus=cost_plus,
        value_based=value_based,
        competitive=competitive,
        margins={
            "costPlus": _margin_pct(cost_plus, capex),
            "valueBased": _margin_pct(value_based, capex),
            "competitive": _margin_pct(competitive, capex),
        },
        optimal=best,
        grid=grid,
        options=commercial_options(capex, econ.opex, econ.npv, cfg),
        refined=refined,
    )
