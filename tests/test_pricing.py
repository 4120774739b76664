# tests/test_pricing.py
from __future__ import annotations

import math
from dataclasses import replace

import pytest

from waterlogic.services.engine.constants import DEFAULT_CONFIG
from waterlogic.services.engine.feasibility import filter_feasible
from waterlogic.services.engine.intake import parse_specification
from waterlogic.services.engine.models import EsgMetrics
from waterlogic.services.engine.pricing import (
    BOO,
    BOT,
    SALE,
    commercial_options,
    margin_grid,
    price,
    price_point,
    win_probability,
)
from waterlogic.services.engine.registry import get_chain
from waterlogic.services.solver import golden_section_max

from conftest import relaxed_payload


def _candidate(tech_fit=1.0, esg=60.0):
    spec = parse_specification(relaxed_payload())
    cand = filter_feasible(spec, [get_chain("UF + RO")])[0]
    metrics = EsgMetrics(
        water_recovery=0.82, water_score=82.0, energy_score=44.0, carbon_score=37.8,
        annual_carbon_tonnes=0.0, baseline_carbon_tonnes=0.0, specific_energy=2.8,
        composite=esg,
    )
    return replace(cand, tech_fit=tech_fit, esg=metrics)


# -----------------------------------------------------------------------------
# 1) win model
# -----------------------------------------------------------------------------
def test_win_probability_logistic():
    z = 7.4 - 10 * 1.10 + 5 * 1.0 + 3 * 0.6
    assert win_probability(0.10, 1.0, 0.6) == pytest.approx(1 / (1 + math.exp(-z)))


def test_win_probability_decreases_with_margin():
    ps = [win_probability(m, 0.8, 0.5) for m in margin_grid()]
    assert all(a > b for a, b in zip(ps, ps[1:]))
    assert all(0.0 < p < 1.0 for p in ps)


def test_win_probability_extreme_z_does_not_overflow():
    assert win_probability(500.0, 0.0, 0.0) == pytest.approx(0.0, abs=1e-12)
    assert win_probability(-500.0, 1.0, 1.0) == pytest.approx(1.0)


# -----------------------------------------------------------------------------
# 2) grid search
# -----------------------------------------------------------------------------
def test_margin_grid_inclusive_without_float_drift():
    grid = margin_grid()
    assert len(grid) == 31
    assert grid[0] == pytest.approx(0.10)
    assert grid[-1] == pytest.approx(0.40)
    assert grid[20] == 0.30


def test_optimal_price_maximizes_expected_value_on_grid():
    cand = _candidate()
    result = price(cand)
    capex = cand.economics.capex

    assert result.optimal.price >= capex
    assert DEFAULT_CONFIG.margin_min <= result.optimal.margin <= DEFAULT_CONFIG.margin_max
    best_ev = max(p.expected_value for p in result.grid)
    assert result.optimal.expected_value == pytest.approx(best_ev)
    # 동점 시 가장 낮은 마진
    first_best = next(p for p in result.grid if p.expected_value == best_ev)
    assert result.optimal.margin == first_best.margin


def test_degenerate_margin_bounds_give_single_point():
    cfg = DEFAULT_CONFIG.with_overrides(margin_min=0.2, margin_max=0.2)
    result = price(_candidate(), cfg)
    assert len(result.grid) == 1
    assert result.optimal.margin == pytest.approx(0.2)


def test_reference_price_points():
    cand = _candidate()
    result = price(cand)
    capex = cand.economics.capex
    assert result.cost_plus == pytest.approx(capex * 1.25)
    assert result.value_based == pytest.approx(capex * 1.40)
    assert result.competitive == pytest.approx(capex * 1.15)
    assert result.margins["costPlus"] == pytest.approx(0.25 / 1.25 * 100)
    assert result.margins["valueBased"] == pytest.approx(0.40 / 1.40 * 100)


def test_refinement_never_worse_and_within_one_step():
    cand = _candidate(tech_fit=0.9, esg=55.0)
    grid_only = price(cand)
    refined = price(cand, refine=True)
    assert refined.optimal.expected_value >= grid_only.optimal.expected_value - 1e-9
    assert abs(refined.optimal.margin - grid_only.optimal.margin) <= DEFAULT_CONFIG.margin_step + 1e-12
    assert refined.optimal.price >= cand.economics.capex


def test_golden_section_finds_parabola_peak():
    x, fx = golden_section_max(lambda v: -(v - 0.237) ** 2, 0.0, 1.0, tol=1e-8)
    assert x == pytest.approx(0.237, abs=1e-6)
    assert fx == pytest.approx(0.0, abs=1e-10)


def test_price_point_expected_value():
    p = price_point(1000.0, 0.2, 1.0, 0.5)
    assert p.price == pytest.approx(1200.0)
    assert p.expected_value == pytest.approx(p.win_probability * 200.0)


# -----------------------------------------------------------------------------
# 3) commercial options
# -----------------------------------------------------------------------------
def test_commercial_options():
    opts = commercial_options(capex=1_000_000.0, opex=200_000.0, npv=2_500_000.0)
    assert opts[SALE].upfront == pytest.approx(1_200_000.0)
    assert opts[SALE].annual == 0.0
    assert opts[BOO].upfront == 0.0
    assert opts[BOO].annual == pytest.approx(2_500_000.0 * 1.3 / 10)
    assert opts[BOT].upfront == pytest.approx(1_200_000.0 * 0.3)
    assert opts[BOT].annual == pytest.approx(200_000.0 * 1.4)
    assert opts[BOT].transfer_year == 5
