# tests/test_economics.py
from __future__ import annotations

import pytest

from waterlogic.services.engine.composer import compose_chain
from waterlogic.services.engine.constants import DEFAULT_CONFIG
from waterlogic.services.engine.economics import (
    capex_breakdown,
    capital_cost,
    economics,
    net_present_value,
    operating_cost,
    optional_module_surcharge,
)
from waterlogic.services.engine.intake import parse_specification
from waterlogic.services.engine.registry import get_chain

from conftest import relaxed_payload


# -----------------------------------------------------------------------------
# 1) CAPEX (Scenario B)
# -----------------------------------------------------------------------------
def test_capex_site_built_unit_multiplier():
    spec = parse_specification({"flowRate": 100, "optionalModules": []})
    chain = get_chain("UF Only")
    assert capital_cost(spec, chain, compose_chain(chain)) == pytest.approx(625_000.0)


def test_capex_containerized():
    spec = parse_specification(
        {"flowRate": 100, "optionalModules": [], "constraints": {"containerized": True}}
    )
    chain = get_chain("UF Only")
    assert capital_cost(spec, chain, compose_chain(chain)) == pytest.approx(575_000.0)


def test_uv_surcharge_only_when_not_in_chain():
    spec = parse_specification({"flowRate": 100, "optionalModules": ["UV", "chemicalDosing"]})
    assert optional_module_surcharge(spec, get_chain("UF Only").techs) == pytest.approx(20_000.0)
    assert optional_module_surcharge(spec, get_chain("UF + RO + UV").techs) == pytest.approx(0.0)


# -----------------------------------------------------------------------------
# 2) OPEX / NPV
# -----------------------------------------------------------------------------
def test_opex_breakdown_uf_ro():
    spec = parse_specification(relaxed_payload())
    opex = operating_cost(spec, compose_chain(get_chain("UF + RO")))
    assert opex.energy == pytest.approx(2.8 * 800_000 * 0.15)
    assert opex.chemicals == pytest.approx(0.06 * 800_000)
    assert opex.maintenance == pytest.approx(500_000 * 3.2 * 0.05)
    assert opex.labor == pytest.approx(90_000.0)
    assert opex.total == pytest.approx(554_000.0)


def test_npv_one_year():
    assert net_present_value(1000.0, 108.0, years=1) == pytest.approx(1100.0)


def test_npv_escalates_and_discounts():
    expected = 2_000_000.0 + sum(
        554_000.0 * 1.03 ** (y - 1) / 1.08 ** y for y in range(1, 11)
    )
    assert net_present_value(2_000_000.0, 554_000.0) == pytest.approx(expected)


def test_npv_respects_config_override():
    cfg = DEFAULT_CONFIG.with_overrides(discount_rate=0.0, opex_escalation_rate=0.0)
    assert net_present_value(100.0, 10.0, cfg) == pytest.approx(200.0)


# -----------------------------------------------------------------------------
# 3) aggregate
# -----------------------------------------------------------------------------
def test_economics_bundle():
    spec = parse_specification(relaxed_payload())
    chain = get_chain("UF + RO")
    econ = economics(spec, chain, compose_chain(chain))
    assert econ.capex == pytest.approx(2_000_000.0)
    assert econ.opex == pytest.approx(econ.opex_breakdown.total)
    assert econ.npv > econ.capex
    assert sum(econ.capex_breakdown.values()) == pytest.approx(econ.capex)


def test_capex_breakdown_shares():
    parts = capex_breakdown(1000.0)
    assert parts == pytest.approx(
        {"equipment": 450.0, "installation": 250.0, "controls": 150.0,
         "commissioning": 80.0, "contingency": 70.0}
    )
