# tests/test_engine.py
from __future__ import annotations

import math

import pytest

from waterlogic.core.exceptions import (
    NoFeasibleSolutionError,
    NumericGuardError,
    SpecValidationError,
)
from waterlogic.schemas.evaluation import evaluation_out
from waterlogic.services.engine import evaluate
from waterlogic.services.engine.constants import DEFAULT_CONFIG, EngineConfig
from waterlogic.services.engine.utils import ensure_finite, safe_div

from conftest import FIXED_TIME, relaxed_payload


# -----------------------------------------------------------------------------
# 1) happy path
# -----------------------------------------------------------------------------
def test_evaluate_selects_best_feasible(relaxed_spec, fixed_clock):
    result = evaluate(relaxed_spec, clock=fixed_clock)

    assert result.status == "ok"
    best = result.require_best_solution()
    assert best.feasible
    assert best is result.best_solution
    assert len(result.solutions) == 8

    scores = [c.overall_score for c in result.solutions]
    assert scores == sorted(scores, reverse=True)
    assert best.overall_score == max(c.overall_score for c in result.solutions if c.feasible)
    assert result.diagnostics.feasible_count == 5
    assert result.diagnostics.unsatisfied_constraints == ()
    assert result.evaluated_at == FIXED_TIME


def test_every_candidate_is_fully_scored(relaxed_spec, fixed_clock):
    result = evaluate(relaxed_spec, clock=fixed_clock)
    for c in result.solutions:
        assert c.esg is not None
        assert c.objectives is not None
        assert c.confidence is not None
        assert 0.0 <= c.confidence.score <= 100.0
        assert 0.0 <= c.esg.composite <= 100.0


def test_mass_balance_closes(relaxed_spec, fixed_clock):
    result = evaluate(relaxed_spec, clock=fixed_clock)
    mb = result.mass_balance
    best = result.best_solution

    assert mb.q_in == pytest.approx(100.0)
    assert mb.q_out == pytest.approx(100.0 * best.recovery)
    assert mb.q_in == pytest.approx(mb.q_out + mb.q_reject)
    conc = mb.concentrations
    for p in ("tss", "tds", "bod", "cod"):
        assert conc["out"][p] == pytest.approx(conc["in"][p] * (1 - best.performance.removal(p)))
        load_in = mb.q_in * conc["in"][p]
        load_out = mb.q_out * conc["out"][p] + mb.q_reject * conc["reject"][p]
        assert load_out == pytest.approx(load_in)


def test_energy_summary(relaxed_spec, fixed_clock):
    result = evaluate(relaxed_spec, clock=fixed_clock)
    e = result.energy
    sec = result.best_solution.performance.energy
    assert e.specific_energy == pytest.approx(sec)
    assert e.total_power == pytest.approx(sec * 100)
    assert e.annual_energy == pytest.approx(sec * 100 * 8000)
    assert e.annual_carbon == pytest.approx(e.annual_energy * 0.233 / 1000)


def test_pricing_attached_to_best(relaxed_spec, fixed_clock):
    result = evaluate(relaxed_spec, clock=fixed_clock)
    assert result.pricing is not None
    assert result.pricing.capex == pytest.approx(result.best_solution.economics.capex)
    assert result.pricing.optimal.price >= result.pricing.capex
    assert result.confidence == result.best_solution.confidence


def test_decision_trail_and_fingerprint(relaxed_spec, fixed_clock):
    result = evaluate(relaxed_spec, clock=fixed_clock)
    actions = [e.action for e in result.decision_trail]
    assert actions[0] == "Specification accepted"
    assert f"Selected {result.best_solution.name}" in actions
    assert "Pricing optimized" in actions
    last = result.decision_trail[-1]
    assert last.action == "Evaluation complete"
    assert last.fingerprint == result.fingerprint
    assert all(e.timestamp == FIXED_TIME for e in result.decision_trail)


def test_same_input_same_fingerprint(fixed_clock):
    a = evaluate(relaxed_payload(), clock=fixed_clock)
    b = evaluate(relaxed_payload(), clock=fixed_clock)
    assert a.fingerprint == b.fingerprint
    c = evaluate(relaxed_payload(flowRate=120), clock=fixed_clock)
    assert c.fingerprint != a.fingerprint


def test_esg_weights_are_normalized_before_use(fixed_clock):
    result = evaluate(
        relaxed_payload(esgPriorities={"water": 4, "carbon": 3.5, "energy": 2.5}),
        clock=fixed_clock,
    )
    w = result.inputs.esg_priorities
    assert w.total == pytest.approx(1.0)
    assert w.water == pytest.approx(0.4)


# -----------------------------------------------------------------------------
# 2) failure modes (Scenario C / D)
# -----------------------------------------------------------------------------
def test_invalid_specification_raises_with_all_errors():
    with pytest.raises(SpecValidationError) as exc:
        evaluate({"flowRate": 0, "feedWater": {"tds": 500}, "targetQuality": {"tds": 600}})
    errors = exc.value.errors
    assert len(errors) == 2
    assert "Target TDS (600) exceeds feed TDS (500)" in errors


def test_over_constrained_budget_reports_diagnostics(over_budget_spec, fixed_clock):
    result = evaluate(over_budget_spec, clock=fixed_clock)
    assert result.status == "no_feasible_solution"
    assert result.best_solution is None
    assert result.pricing is None
    assert result.mass_balance is None
    assert result.diagnostics.feasible_count == 0
    # 제거율은 RO 체인들이 충족하므로 예산만 보고되어야 함
    assert list(result.diagnostics.unsatisfied_constraints) == ["Budget (CAPEX)"]
    assert result.diagnostics.message.endswith("Relax: Budget (CAPEX)")
    assert len(result.solutions) == 8
    assert result.decision_trail[-1].action == "Evaluation complete"

    with pytest.raises(NoFeasibleSolutionError) as exc:
        result.require_best_solution()
    assert "Budget (CAPEX)" in exc.value.unsatisfied


def test_default_specification_has_no_feasible_chain(fixed_clock):
    # 기본 TDS 목표 (1500 → 10) 는 어떤 체인도 달성 불가
    result = evaluate({}, clock=fixed_clock)
    assert result.best_solution is None
    assert "TDS Removal" in result.diagnostics.unsatisfied_constraints


def test_diagnostics_fall_back_to_per_chain_failures(fixed_clock):
    # RO 체인은 전력 초과, 비-RO 체인은 TDS 미달: 공통 실패 제약 없음
    result = evaluate(relaxed_payload(constraints={"maxPower": 200}), clock=fixed_clock)
    diag = result.diagnostics
    assert result.best_solution is None
    assert diag.message.startswith("No constraint is failed by every chain")
    assert "UF + RO: Power" in diag.unsatisfied_constraints
    uf_only = next(u for u in diag.unsatisfied_constraints if u.startswith("UF Only: "))
    assert "TDS Removal" in uf_only
    assert "Power" not in uf_only


def test_sector_preference_does_not_move_confidence(fixed_clock):
    pharma = evaluate(relaxed_payload(), clock=fixed_clock)
    oil = evaluate(relaxed_payload(sector="oilGas"), clock=fixed_clock)

    by_name = {c.name: c for c in oil.solutions}
    uf_ro = next(c for c in pharma.solutions if c.name == "UF + RO")
    assert uf_ro.sector_preferred
    assert not by_name["UF + RO"].sector_preferred
    assert uf_ro.confidence.score == pytest.approx(by_name["UF + RO"].confidence.score)
    assert uf_ro.overall_score == pytest.approx(by_name["UF + RO"].overall_score)


def test_vendor_preferences_can_leave_nothing(fixed_clock):
    result = evaluate(
        relaxed_payload(vendorPreferences={"include": ["UV", "DAF"]}), clock=fixed_clock
    )
    assert result.solutions == ()
    assert result.best_solution is None
    assert "vendor" in result.diagnostics.message


# -----------------------------------------------------------------------------
# 3) guards / config
# -----------------------------------------------------------------------------
def test_numeric_guard():
    assert ensure_finite("x", 1.5) == 1.5
    with pytest.raises(NumericGuardError):
        ensure_finite("capex", math.nan)
    with pytest.raises(NumericGuardError):
        ensure_finite("npv", math.inf)
    assert safe_div(1.0, 0.0) == 0.0


def test_error_codes_map_to_http_status():
    spec_err = SpecValidationError(["a", "b"])
    assert (spec_err.code, spec_err.status_code, spec_err.detail) == ("INVALID_SPECIFICATION", 422, ["a", "b"])
    nf = NoFeasibleSolutionError(["Budget (CAPEX)"])
    assert (nf.code, nf.status_code) == ("NO_FEASIBLE_SOLUTION", 409)
    guard = NumericGuardError("npv", math.nan)
    assert (guard.code, guard.status_code, guard.detail) == ("NUMERIC_GUARD", 500, {"label": "npv"})


def test_invalid_margin_bounds_rejected():
    with pytest.raises(ValueError):
        DEFAULT_CONFIG.with_overrides(margin_min=-0.1)
    with pytest.raises(ValueError):
        DEFAULT_CONFIG.with_overrides(margin_min=0.5, margin_max=0.4)
    with pytest.raises(ValueError):
        DEFAULT_CONFIG.with_overrides(margin_step=0)


def test_config_rejects_negative_margins_at_construction(relaxed_spec):
    with pytest.raises(ValueError):
        EngineConfig(margin_min=-0.3, margin_max=-0.2)
    with pytest.raises(ValueError):
        EngineConfig(margin_min=0.3, margin_max=0.2)
    with pytest.raises(ValueError):
        EngineConfig(margin_step=-0.01)
    # 하한 0 은 허용: 가격 == CAPEX
    cfg = EngineConfig(margin_min=0.0, margin_max=0.0)
    result = evaluate(relaxed_spec, config=cfg)
    assert result.pricing.optimal.price == pytest.approx(result.pricing.capex)


def test_custom_config_flows_through(relaxed_spec, fixed_clock):
    cfg = DEFAULT_CONFIG.with_overrides(margin_min=0.05, margin_max=0.05)
    result = evaluate(relaxed_spec, config=cfg, clock=fixed_clock)
    assert result.pricing.optimal.margin == pytest.approx(0.05)


# -----------------------------------------------------------------------------
# 4) wire format
# -----------------------------------------------------------------------------
def test_wire_format_is_camel_case(relaxed_spec, fixed_clock):
    out = evaluation_out(evaluate(relaxed_spec, clock=fixed_clock))
    data = out.model_dump(mode="json", by_alias=True)

    for key in ("status", "inputs", "solutions", "bestSolution", "massBalance", "energy",
                "pricing", "confidence", "diagnostics", "decisionTrail", "fingerprint",
                "evaluatedAt", "schemaVersion"):
        assert key in data
    assert set(data["massBalance"]) >= {"Qin", "Qout", "Qreject", "recovery", "concentrations"}
    assert set(data["massBalance"]["concentrations"]) == {"in", "out", "reject"}
    assert set(data["energy"]) == {
        "specificEnergy", "totalPower", "annualEnergy", "carbonFactor", "annualCarbon"
    }
    assert set(data["pricing"]["options"]) == {"sale", "ownBuildOperate", "buildOperateTransfer"}
    assert data["confidence"]["factors"]["dataCompleteness"] == pytest.approx(1.0)
    assert data["diagnostics"]["feasibleCount"] == 5
    assert data["inputs"]["flowRate"] == pytest.approx(100.0)
    assert data["schemaVersion"] == "1.0"
    assert data["bestSolution"]["overallScore"] == pytest.approx(data["solutions"][0]["overallScore"])

    sol = data["solutions"][0]
    assert set(sol["performance"]) == {
        "tssRemoval", "tdsRemoval", "bodRemoval", "codRemoval",
        "energy", "footprint", "capexFactor", "maintenance", "chemicals",
    }
    assert "tssRemoval" not in sol
    assert sol["esgScore"] == pytest.approx(sol["esg"]["composite"])
    # 최적 체인은 RO 포함 (TDS 목표 100 mg/L)
    assert out.best_solution.performance.tds_removal > 0.9


def test_settings_fold_env_overrides_into_engine_config():
    from waterlogic.core.config import Settings

    cfg = Settings(MARGIN_MIN=0.2, MARGIN_MAX=0.3, DISCOUNT_RATE=0.1).engine_config()
    assert cfg.margin_min == pytest.approx(0.2)
    assert cfg.margin_max == pytest.approx(0.3)
    assert cfg.discount_rate == pytest.approx(0.1)
    assert cfg.grid_carbon_factor == DEFAULT_CONFIG.grid_carbon_factor
