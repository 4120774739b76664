# waterlogic/services/engine/models.py
# 엔진 내부 값 객체 (불변). API 출력 스키마는 schemas/evaluation.py 참고.
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from waterlogic.core.exceptions import NoFeasibleSolutionError
from waterlogic.schemas.common import ConstraintKind, TechnologyId

if TYPE_CHECKING:
    from waterlogic.schemas.specification import CustomerSpecification


@dataclass(frozen=True)
class Technology:
    id: TechnologyId
    name: str
    full_name: str
    description: str
    tss_removal: float
    tds_removal: float
    bod_removal: float
    cod_removal: float
    energy: float  # kWh/m3
    footprint: float  # m2 per m3/h
    capex_factor: float  # base multiplier
    maintenance: float  # annual fraction of base CAPEX
    chemical_consumption: float  # £/m3
    lifespan: int  # years
    applications: Tuple[str, ...] = ()

    def removal(self, parameter: str) -> float:
        return float(getattr(self, f"{parameter}_removal"))


@dataclass(frozen=True)
class TechnologyChain:
    techs: Tuple[TechnologyId, ...]
    name: str
    description: str = ""

    def contains(self, tech: TechnologyId) -> bool:
        return tech in self.techs


@dataclass(frozen=True)
class CombinedPerformance:
    tss_removal: float = 0.0
    tds_removal: float = 0.0
    bod_removal: float = 0.0
    cod_removal: float = 0.0
    energy: float = 0.0
    footprint: float = 0.0
    capex_factor: float = 0.0
    maintenance: float = 0.0
    chemicals: float = 0.0

    def removal(self, parameter: str) -> float:
        return float(getattr(self, f"{parameter}_removal"))


@dataclass(frozen=True)
class ConstraintCheck:
    name: str
    kind: ConstraintKind
    required: float
    achieved: float
    passed: bool
    # 양수 = 여유(slack). removal: achieved - required, 상한 제약: limit - achieved
    margin: float
    parameter: Optional[str] = None

    @property
    def relative_margin(self) -> float:
        if abs(self.required) <= 1e-12:
            return 1.0 if self.passed else -1.0
        return self.margin / abs(self.required)


@dataclass(frozen=True)
class OpexBreakdown:
    energy: float
    chemicals: float
    maintenance: float
    labor: float

    @property
    def total(self) -> float:
        return self.energy + self.chemicals + self.maintenance + self.labor


@dataclass(frozen=True)
class Economics:
    capex: float
    opex: float
    npv: float
    opex_breakdown: OpexBreakdown
    capex_breakdown: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class EsgMetrics:
    water_recovery: float
    water_score: float
    energy_score: float
    carbon_score: float
    annual_carbon_tonnes: float
    baseline_carbon_tonnes: float
    specific_energy: float
    composite: float


@dataclass(frozen=True)
class ObjectiveBreakdown:
    # 최소화 관점의 손실값 (0 = 최선)
    cost: float
    tech: float
    esg: float
    risk: float
    total: float

    @property
    def overall_score(self) -> float:
        return 1.0 - self.total


@dataclass(frozen=True)
class ConfidenceAssessment:
    score: float
    level: str
    decision: str
    data_completeness: float
    model_certainty: float
    constraint_margin: float


@dataclass(frozen=True)
class Candidate:
    index: int
    chain: TechnologyChain
    performance: CombinedPerformance
    footprint_m2: float
    power_kw: float
    economics: Economics
    recovery: float
    checks: Tuple[ConstraintCheck, ...]
    tech_fit: float = 0.0
    cost_score: float = 0.0
    esg: Optional[EsgMetrics] = None
    objectives: Optional[ObjectiveBreakdown] = None
    confidence: Optional[ConfidenceAssessment] = None
    sector_preferred: bool = False  # 표시용. 점수/신뢰도/가격에 반영하지 않음

    @property
    def feasible(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failed_checks(self) -> Tuple[ConstraintCheck, ...]:
        return tuple(c for c in self.checks if not c.passed)

    @property
    def overall_score(self) -> float:
        return self.objectives.overall_score if self.objectives else 0.0

    @property
    def name(self) -> str:
        return self.chain.name


@dataclass(frozen=True)
class PricePoint:
    margin: float
    price: float
    win_probability: float
    expected_value: float


@dataclass(frozen=True)
class CommercialOption:
    type: str
    upfront: float
    annual: float
    description: str
    transfer_year: Optional[int] = None


@dataclass(frozen=True)
class PricingResult:
    capex: float
    cost_plus: float
    value_based: float
    competitive: float
    margins: Dict[str, float]
    optimal: PricePoint
    grid: Tuple[PricePoint, ...]
    options: Dict[str, CommercialOption]
    refined: bool = False


@dataclass(frozen=True)
class DecisionTrailEntry:
    timestamp: datetime
    action: str
    rationale: str
    fingerprint: Optional[str] = None


@dataclass(frozen=True)
class SectorPreset:
    id: str
    name: str
    required_quality: Dict[str, float]
    preferred_chains: Tuple[str, ...]
    esg_priority: str


# =============================================================================
# Evaluation result (orchestrator output)
# =============================================================================
@dataclass(frozen=True)
class MassBalance:
    q_in: float
    q_out: float
    q_reject: float
    recovery: float
    # {"in": {...}, "out": {...}, "reject": {...}} mg/L
    concentrations: Dict[str, Dict[str, float]]


@dataclass(frozen=True)
class EnergySummary:
    specific_energy: float  # kWh/m3
    total_power: float  # kW
    annual_energy: float  # kWh/yr
    carbon_factor: float  # kgCO2/kWh
    annual_carbon: float  # tCO2/yr


@dataclass(frozen=True)
class Diagnostics:
    feasible_count: int
    unsatisfied_constraints: Tuple[str, ...]
    message: str


@dataclass(frozen=True)
class EvaluationResult:
    status: str
    inputs: CustomerSpecification
    solutions: Tuple[Candidate, ...]
    best_solution: Optional[Candidate]
    mass_balance: Optional[MassBalance]
    energy: Optional[EnergySummary]
    pricing: Optional[PricingResult]
    confidence: Optional[ConfidenceAssessment]
    diagnostics: Diagnostics
    decision_trail: Tuple[DecisionTrailEntry, ...]
    fingerprint: str
    evaluated_at: datetime

    def require_best_solution(self) -> Candidate:
        if self.best_solution is None:
            raise NoFeasibleSolutionError(self.diagnostics.unsatisfied_constraints)
        return self.best_solution
