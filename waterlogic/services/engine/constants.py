# waterlogic/services/engine/constants.py
# =============================================================================
# Engine constants (fixed coefficients, not learned)
# - 모든 단가/할인율/가중치는 여기서만 정의하고, 엔진 함수는 EngineConfig를 인자로 받는다.
# - 환경변수 오버라이드는 core.config.Settings.engine_config() 에서 처리.
# =============================================================================
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class ObjectiveWeights:
    cost: float = 0.30
    tech: float = 0.30
    esg: float = 0.25
    risk: float = 0.15


@dataclass(frozen=True)
class WinModelCoefficients:
    # z = b0 + b1*priceRatio + b2*techFit + b3*esg  (esg in 0..1)
    intercept: float = 7.4
    price_ratio: float = -10.0
    tech_fit: float = 5.0
    esg: float = 3.0


@dataclass(frozen=True)
class ConfidenceWeights:
    data_completeness: float = 0.40
    model_certainty: float = 0.35
    constraint_margin: float = 0.25


@dataclass(frozen=True)
class EngineConfig:
    # --- Economics ---
    base_equipment_cost_per_m3h: float = 5000.0  # £ per m3/h capacity
    installation_factor_containerized: float = 1.15
    installation_factor_site_built: float = 1.25
    optional_module_surcharge_per_m3h: Tuple[Tuple[str, float], ...] = (("UV", 200.0),)
    electricity_rate: float = 0.15  # £/kWh
    labor_hours_per_year: float = 2000.0
    labor_cost_per_hour: float = 45.0  # £/h
    discount_rate: float = 0.08
    opex_escalation_rate: float = 0.03
    project_lifespan_years: int = 10
    capex_breakdown_shares: Tuple[Tuple[str, float], ...] = (
        ("equipment", 0.45),
        ("installation", 0.25),
        ("controls", 0.15),
        ("commissioning", 0.08),
        ("contingency", 0.07),
    )

    # --- Recovery model (simplified) ---
    recovery_with_ro: float = 0.82
    recovery_without_ro: float = 0.95

    # --- Scoring ---
    objective_weights: ObjectiveWeights = field(default_factory=ObjectiveWeights)
    cost_reference_capex: float = 3_000_000.0
    cost_reference_opex: float = 500_000.0
    risk_penalty_infeasible: float = 0.9
    risk_penalty_feasible: float = 0.1
    pareto_threshold: float = 0.3

    # --- ESG ---
    grid_carbon_factor: float = 0.233  # kgCO2/kWh (UK grid average)
    baseline_specific_energy: float = 4.5  # kWh/m3, carbon baseline
    energy_efficiency_reference: float = 5.0  # kWh/m3, 0-score point

    # --- Pricing ---
    default_margin: float = 0.20
    cost_plus_margin: float = 0.25
    value_based_margin: float = 0.40
    competitive_margin: float = 0.15
    margin_min: float = 0.10
    margin_max: float = 0.40
    margin_step: float = 0.01
    win_model: WinModelCoefficients = field(default_factory=WinModelCoefficients)
    boo_npv_multiplier: float = 1.3
    bot_upfront_share: float = 0.3
    bot_opex_multiplier: float = 1.4
    bot_transfer_year: int = 5

    # --- Confidence ---
    confidence_weights: ConfidenceWeights = field(default_factory=ConfidenceWeights)
    margin_term_infeasible: float = 0.3
    margin_term_floor: float = 0.7
    margin_term_gain: float = 2.0
    auto_approve_threshold: float = 80.0
    human_review_threshold: float = 50.0

    def __post_init__(self) -> None:
        # 음수 마진이면 가격 < CAPEX 가 되므로 생성 시점에 차단
        if self.margin_min < 0 or self.margin_max < self.margin_min:
            raise ValueError(
                f"Invalid margin bounds: min={self.margin_min}, max={self.margin_max}"
            )
        if self.margin_step <= 0:
            raise ValueError(f"margin_step must be positive: {self.margin_step}")

    @property
    def surcharges(self) -> Dict[str, float]:
        return dict(self.optional_module_surcharge_per_m3h)

    def with_overrides(self, **kwargs: Any) -> "EngineConfig":
        return replace(self, **kwargs)


DEFAULT_CONFIG = EngineConfig()
