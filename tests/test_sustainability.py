# tests/test_sustainability.py
from __future__ import annotations

from dataclasses import replace

import pytest

from waterlogic.schemas.specification import EsgPriorities
from waterlogic.services.engine.composer import compose_chain
from waterlogic.services.engine.feasibility import filter_feasible
from waterlogic.services.engine.intake import parse_specification
from waterlogic.services.engine.models import ConstraintCheck
from waterlogic.schemas.common import ConstraintKind
from waterlogic.services.engine.registry import get_chain
from waterlogic.services.engine.sustainability import (
    AUTO_APPROVE,
    HUMAN_REVIEW,
    MANUAL_OVERRIDE,
    classify,
    confidence,
    esg_metrics,
    margin_term,
)

from conftest import relaxed_payload

NORMALIZED = EsgPriorities(water=0.40, carbon=0.35, energy=0.25)


# -----------------------------------------------------------------------------
# 1) ESG
# -----------------------------------------------------------------------------
def test_esg_subscores_uf_ro():
    spec = parse_specification(relaxed_payload())
    esg = esg_metrics(spec, compose_chain(get_chain("UF + RO")), 0.82, NORMALIZED)
    assert esg.water_score == pytest.approx(82.0)
    assert esg.energy_score == pytest.approx((1 - 2.8 / 5.0) * 100)
    assert esg.carbon_score == pytest.approx((1 - 2.8 / 4.5) * 100)
    expected = 82.0 * 0.40 + esg.carbon_score * 0.35 + esg.energy_score * 0.25
    assert esg.composite == pytest.approx(expected)
    assert esg.annual_carbon_tonnes == pytest.approx(2.8 * 800_000 * 0.233 / 1000)


def test_esg_scores_are_clamped():
    spec = parse_specification(relaxed_payload())
    # 에너지 > 기준값 → 음수 점수는 0으로
    heavy = compose_chain(get_chain("UF + AOP + RO"))  # 4.0 kWh/m3
    esg = esg_metrics(spec, heavy, 1.5, NORMALIZED)
    assert esg.water_score == pytest.approx(100.0)
    for v in (esg.energy_score, esg.carbon_score, esg.composite):
        assert 0.0 <= v <= 100.0


def test_zero_volume_carbon_is_guarded():
    spec = parse_specification(relaxed_payload(operatingHours=0))
    esg = esg_metrics(spec, compose_chain(get_chain("UF + RO")), 0.82, NORMALIZED)
    assert esg.annual_carbon_tonnes == 0.0
    assert esg.carbon_score == pytest.approx((1 - 2.8 / 4.5) * 100)


# -----------------------------------------------------------------------------
# 2) confidence
# -----------------------------------------------------------------------------
@pytest.mark.parametrize(
    "value, level, decision",
    [
        (95.0, "high", AUTO_APPROVE),
        (80.0, "high", AUTO_APPROVE),
        (79.99, "medium", HUMAN_REVIEW),
        (50.0, "medium", HUMAN_REVIEW),
        (49.9, "low", MANUAL_OVERRIDE),
        (0.0, "low", MANUAL_OVERRIDE),
    ],
)
def test_classify_thresholds(value, level, decision):
    assert classify(value) == (level, decision)


def test_margin_term():
    tight = ConstraintCheck("TDS Removal", ConstraintKind.REMOVAL, 0.9, 0.918, True, 0.018)
    loose = ConstraintCheck("TSS Removal", ConstraintKind.REMOVAL, 0.5, 0.99, True, 0.49)
    # min relative margin 0.02 → 0.7 + 0.04
    assert margin_term(True, (tight, loose)) == pytest.approx(0.74)
    assert margin_term(True, (loose,)) == pytest.approx(1.0)
    assert margin_term(False, (tight,)) == pytest.approx(0.3)


def test_confidence_feasible_complete_spec_is_high():
    spec = parse_specification(relaxed_payload())
    cand = next(c for c in filter_feasible(spec, [get_chain("MBR + RO")]))
    cand = replace(cand, tech_fit=1.0)
    conf = confidence(spec, cand)
    rel = min(c.relative_margin for c in cand.checks)
    expected = 100 * (0.40 * 1.0 + 0.35 * 1.0 + 0.25 * min(max(0.7 + 2 * rel, 0.7), 1.0))
    assert conf.score == pytest.approx(expected)
    assert conf.score >= 80
    assert conf.level == "high"
    assert conf.decision == AUTO_APPROVE


def test_confidence_is_clamped_and_low_for_infeasible_defaults():
    spec = parse_specification({})
    cand = next(c for c in filter_feasible(spec, [get_chain("UF Only")]))
    conf = confidence(spec, replace(cand, tech_fit=0.0))
    assert 0.0 <= conf.score <= 100.0
    assert conf.score == pytest.approx(100 * 0.25 * 0.3)
    assert conf.decision == MANUAL_OVERRIDE
