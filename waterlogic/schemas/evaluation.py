# waterlogic/schemas/evaluation.py
# =============================================================================
# Evaluation Output Schemas (Pydantic v2)
#
# - 엔진 내부 dataclass → camelCase 와이어 포맷 변환 전용
# - Qin/Qout/Qreject 처럼 대문자 키는 alias 를 명시 (to_camel 이 소문자화하므로)
# =============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import Field

from waterlogic.services.engine.constants import DEFAULT_CONFIG, EngineConfig
from waterlogic.services.engine.models import (
    Candidate,
    CommercialOption,
    ConfidenceAssessment,
    ConstraintCheck,
    DecisionTrailEntry,
    EvaluationResult,
    MassBalance,
    PricePoint,
    PricingResult,
    SectorPreset,
    Technology,
    TechnologyChain,
)

from .common import AppBaseModel, ConstraintKind, EvaluationStatus, TechnologyId
from .specification import CustomerSpecification

SCHEMA_VERSION = "1.0"


# =============================================================================
# Solution (candidate)
# =============================================================================
class ConstraintCheckOut(AppBaseModel):
    name: str
    kind: ConstraintKind
    required: float
    achieved: float
    passed: bool
    margin: float
    parameter: Optional[str] = None


class OpexBreakdownOut(AppBaseModel):
    energy: float
    chemicals: float
    maintenance: float
    labor: float
    total: float


class EsgOut(AppBaseModel):
    composite: float
    water_score: float
    energy_score: float
    carbon_score: float
    water_recovery: float
    annual_carbon_tonnes: float
    baseline_carbon_tonnes: float


class ObjectivesOut(AppBaseModel):
    cost: float
    tech: float
    esg: float
    risk: float
    total: float


class ConfidenceOut(AppBaseModel):
    score: float
    level: str
    decision: str
    factors: Dict[str, float] = Field(default_factory=dict)


class PerformanceOut(AppBaseModel):
    """체인 합성 성능 (직렬 제거율 + 가산 속성, 유량 무관 단위)"""

    tss_removal: float
    tds_removal: float
    bod_removal: float
    cod_removal: float
    energy: float = Field(..., description="kWh/m3")
    footprint: float = Field(..., description="m2 per m3/h")
    capex_factor: float
    maintenance: float
    chemicals: float = Field(..., description="currency/m3")


class SolutionOut(AppBaseModel):
    index: int
    name: str
    techs: List[TechnologyId]
    description: str = ""
    feasible: bool
    overall_score: float
    pareto_candidate: bool = False
    sector_preferred: bool = Field(False, description="Listed in the sector preset (informational)")

    performance: PerformanceOut
    footprint: float = Field(..., description="m2")
    power: float = Field(..., description="kW")

    capex: float
    opex: float
    npv: float
    opex_breakdown: OpexBreakdownOut
    capex_breakdown: Dict[str, float] = Field(default_factory=dict)
    recovery: float

    tech_fit: float
    cost_score: float
    esg_score: Optional[float] = Field(None, description="ESG composite (0-100)")
    esg: Optional[EsgOut] = None
    objectives: Optional[ObjectivesOut] = None
    confidence: Optional[ConfidenceOut] = None
    constraints: List[ConstraintCheckOut] = Field(default_factory=list)


# =============================================================================
# System-level blocks
# =============================================================================
class ConcentrationsOut(AppBaseModel):
    in_: Dict[str, float] = Field(default_factory=dict, alias="in")
    out: Dict[str, float] = Field(default_factory=dict)
    reject: Dict[str, float] = Field(default_factory=dict)


class MassBalanceOut(AppBaseModel):
    q_in: float = Field(..., alias="Qin")
    q_out: float = Field(..., alias="Qout")
    q_reject: float = Field(..., alias="Qreject")
    recovery: float
    concentrations: ConcentrationsOut


class EnergyOut(AppBaseModel):
    specific_energy: float
    total_power: float
    annual_energy: float
    carbon_factor: float
    annual_carbon: float


class PricePointOut(AppBaseModel):
    margin: float
    price: float
    win_probability: float
    expected_value: float


class CommercialOptionOut(AppBaseModel):
    type: str
    upfront: float
    annual: float
    description: str
    transfer_year: Optional[int] = None


class PricingOut(AppBaseModel):
    capex: float
    cost_plus: float
    value_based: float
    competitive: float
    margins: Dict[str, float] = Field(default_factory=dict)
    optimal_price: float
    optimal_margin: float
    win_probability: float
    expected_value: float
    refined: bool = False
    grid: List[PricePointOut] = Field(default_factory=list)
    options: Dict[str, CommercialOptionOut] = Field(default_factory=dict)


class DiagnosticsOut(AppBaseModel):
    feasible_count: int
    unsatisfied_constraints: List[str] = Field(default_factory=list)
    message: str = ""


class DecisionTrailEntryOut(AppBaseModel):
    timestamp: datetime
    action: str
    rationale: str
    fingerprint: Optional[str] = None


class EvaluationResultOut(AppBaseModel):
    status: EvaluationStatus
    inputs: CustomerSpecification
    solutions: List[SolutionOut] = Field(default_factory=list)
    best_solution: Optional[SolutionOut] = None
    mass_balance: Optional[MassBalanceOut] = None
    energy: Optional[EnergyOut] = None
    pricing: Optional[PricingOut] = None
    confidence: Optional[ConfidenceOut] = None
    diagnostics: DiagnosticsOut
    decision_trail: List[DecisionTrailEntryOut] = Field(default_factory=list)
    fingerprint: str
    evaluated_at: datetime
    schema_version: str = SCHEMA_VERSION


# =============================================================================
# Registry views
# =============================================================================
class TechnologyOut(AppBaseModel):
    id: TechnologyId
    name: str
    full_name: str
    description: str
    tss_removal: float
    tds_removal: float
    bod_removal: float
    cod_removal: float
    energy: float
    footprint: float
    capex_factor: float
    maintenance: float
    chemical_consumption: float
    lifespan: int
    applications: List[str] = Field(default_factory=list)


class TechnologyChainOut(AppBaseModel):
    name: str
    techs: List[TechnologyId]
    description: str = ""


class SectorPresetOut(AppBaseModel):
    id: str
    name: str
    required_quality: Dict[str, float]
    preferred_chains: List[str]
    esg_priority: str


# =============================================================================
# Converters (engine dataclass → wire model)
# =============================================================================
def _check_out(c: ConstraintCheck) -> ConstraintCheckOut:
    return ConstraintCheckOut(
        name=c.name,
        kind=c.kind,
        required=c.required,
        achieved=c.achieved,
        passed=c.passed,
        margin=c.margin,
        parameter=c.parameter,
    )


def confidence_out(a: Optional[ConfidenceAssessment]) -> Optional[ConfidenceOut]:
    if a is None:
        return None
    return ConfidenceOut(
        score=a.score,
        level=a.level,
        decision=a.decision,
        factors={
            "dataCompleteness": a.data_completeness,
            "modelCertainty": a.model_certainty,
            "constraintMargin": a.constraint_margin,
        },
    )


def solution_out(c: Candidate, cfg: EngineConfig = DEFAULT_CONFIG) -> SolutionOut:
    perf = c.performance
    econ = c.economics
    ob = econ.opex_breakdown
    return SolutionOut(
        index=c.index,
        name=c.name,
        techs=list(c.chain.techs),
        description=c.chain.description,
        feasible=c.feasible,
        overall_score=c.overall_score,
        pareto_candidate=bool(c.objectives and c.objectives.total < cfg.pareto_threshold),
        sector_preferred=c.sector_preferred,
        performance=PerformanceOut(
            tss_removal=perf.tss_removal,
            tds_removal=perf.tds_removal,
            bod_removal=perf.bod_removal,
            cod_removal=perf.cod_removal,
            energy=perf.energy,
            footprint=perf.footprint,
            capex_factor=perf.capex_factor,
            maintenance=perf.maintenance,
            chemicals=perf.chemicals,
        ),
        footprint=c.footprint_m2,
        power=c.power_kw,
        capex=econ.capex,
        opex=econ.opex,
        npv=econ.npv,
        opex_breakdown=OpexBreakdownOut(
            energy=ob.energy,
            chemicals=ob.chemicals,
            maintenance=ob.maintenance,
            labor=ob.labor,
            total=ob.total,
        ),
        capex_breakdown=dict(econ.capex_breakdown),
        recovery=c.recovery,
        tech_fit=c.tech_fit,
        cost_score=c.cost_score,
        esg_score=c.esg.composite if c.esg else None,
        esg=(
            EsgOut(
                composite=c.esg.composite,
                water_score=c.esg.water_score,
                energy_score=c.esg.energy_score,
                carbon_score=c.esg.carbon_score,
                water_recovery=c.esg.water_recovery,
                annual_carbon_tonnes=c.esg.annual_carbon_tonnes,
                baseline_carbon_tonnes=c.esg.baseline_carbon_tonnes,
            )
            if c.esg
            else None
        ),
        objectives=(
            ObjectivesOut(
                cost=c.objectives.cost,
                tech=c.objectives.tech,
                esg=c.objectives.esg,
                risk=c.objectives.risk,
                total=c.objectives.total,
            )
            if c.objectives
            else None
        ),
        confidence=confidence_out(c.confidence),
        constraints=[_check_out(x) for x in c.checks],
    )


def mass_balance_out(mb: Optional[MassBalance]) -> Optional[MassBalanceOut]:
    if mb is None:
        return None
    conc = mb.concentrations
    return MassBalanceOut(
        q_in=mb.q_in,
        q_out=mb.q_out,
        q_reject=mb.q_reject,
        recovery=mb.recovery,
        concentrations=ConcentrationsOut(
            in_=dict(conc.get("in", {})),
            out=dict(conc.get("out", {})),
            reject=dict(conc.get("reject", {})),
        ),
    )


def _point_out(p: PricePoint) -> PricePointOut:
    return PricePointOut(
        margin=p.margin,
        price=p.price,
        win_probability=p.win_probability,
        expected_value=p.expected_value,
    )


def _option_out(o: CommercialOption) -> CommercialOptionOut:
    return CommercialOptionOut(
        type=o.type,
        upfront=o.upfront,
        annual=o.annual,
        description=o.description,
        transfer_year=o.transfer_year,
    )


def pricing_out(p: Optional[PricingResult]) -> Optional[PricingOut]:
    if p is None:
        return None
    return PricingOut(
        capex=p.capex,
        cost_plus=p.cost_plus,
        value_based=p.value_based,
        competitive=p.competitive,
        margins=dict(p.margins),
        optimal_price=p.optimal.price,
        optimal_margin=p.optimal.margin,
        win_probability=p.optimal.win_probability,
        expected_value=p.optimal.expected_value,
        refined=p.refined,
        grid=[_point_out(x) for x in p.grid],
        options={k: _option_out(v) for k, v in p.options.items()},
    )


def _trail_out(e: DecisionTrailEntry) -> DecisionTrailEntryOut:
    return DecisionTrailEntryOut(
        timestamp=e.timestamp,
        action=e.action,
        rationale=e.rationale,
        fingerprint=e.fingerprint,
    )


def evaluation_out(
    result: EvaluationResult, cfg: EngineConfig = DEFAULT_CONFIG
) -> EvaluationResultOut:
    en = result.energy
    d = result.diagnostics
    return EvaluationResultOut(
        status=EvaluationStatus(result.status),
        inputs=result.inputs,
        solutions=[solution_out(c, cfg) for c in result.solutions],
        best_solution=solution_out(result.best_solution, cfg) if result.best_solution else None,
        mass_balance=mass_balance_out(result.mass_balance),
        energy=(
            EnergyOut(
                specific_energy=en.specific_energy,
                total_power=en.total_power,
                annual_energy=en.annual_energy,
                carbon_factor=en.carbon_factor,
                annual_carbon=en.annual_carbon,
            )
            if en
            else None
        ),
        pricing=pricing_out(result.pricing),
        confidence=confidence_out(result.confidence),
        diagnostics=DiagnosticsOut(
            feasible_count=d.feasible_count,
            unsatisfied_constraints=list(d.unsatisfied_constraints),
            message=d.message,
        ),
        decision_trail=[_trail_out(e) for e in result.decision_trail],
        fingerprint=result.fingerprint,
        evaluated_at=result.evaluated_at,
    )


def technology_out(t: Technology) -> TechnologyOut:
    return TechnologyOut(
        id=t.id,
        name=t.name,
        full_name=t.full_name,
        description=t.description,
        tss_removal=t.tss_removal,
        tds_removal=t.tds_removal,
        bod_removal=t.bod_removal,
        cod_removal=t.cod_removal,
        energy=t.energy,
        footprint=t.footprint,
        capex_factor=t.capex_factor,
        maintenance=t.maintenance,
        chemical_consumption=t.chemical_consumption,
        lifespan=t.lifespan,
        applications=list(t.applications),
    )


def chain_out(c: TechnologyChain) -> TechnologyChainOut:
    return TechnologyChainOut(name=c.name, techs=list(c.techs), description=c.description)


def preset_out(p: SectorPreset) -> SectorPresetOut:
    return SectorPresetOut(
        id=p.id,
        name=p.name,
        required_quality=dict(p.required_quality),
        preferred_chains=list(p.preferred_chains),
        esg_priority=p.esg_priority,
    )


# =============================================================================
# Persisted runs
# =============================================================================
class ProposalRunOut(AppBaseModel):
    id: UUID
    fingerprint: str
    sector: str
    status: EvaluationStatus
    best_solution: Optional[str] = None
    feasible_count: int = 0
    confidence_score: Optional[float] = None
    created_at: datetime
    input: Dict[str, Any] = Field(default_factory=dict, validation_alias="input_json")
    result: Dict[str, Any] = Field(default_factory=dict, validation_alias="result_json")
