# tests/conftest.py
from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict

import pytest

# Settings 는 import 시점에 캐시되므로, app import 전에 테스트용 DB/로그 경로를 지정
_TMP_DIR = tempfile.mkdtemp(prefix="waterlogic-tests-")
os.environ["DB_URL"] = f"sqlite:///{_TMP_DIR}/waterlogic_test.db"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["APP_ENV"] = "test"

from waterlogic.schemas.specification import CustomerSpecification  # noqa: E402

FIXED_TIME = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


# -----------------------------------------------------------------------------
# helpers
# -----------------------------------------------------------------------------
def relaxed_payload(**overrides: Any) -> Dict[str, Any]:
    """UF+RO 계열 체인 여러 개가 통과하는 사양 (camelCase 와이어 포맷)."""
    payload: Dict[str, Any] = {
        "sector": "pharmaceutical",
        "flowRate": 100,
        "operatingHours": 8000,
        "feedWater": {"tss": 150, "tds": 1500, "bod": 120, "cod": 200, "ph": 7.2},
        "targetQuality": {"tss": 5, "tds": 100, "bod": 10, "cod": 20},
        "constraints": {"containerized": False, "allowedChemicals": ["all"]},
        "esgPriorities": {"water": 0.4, "carbon": 0.35, "energy": 0.25},
        "optionalModules": [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def fixed_clock():
    return lambda: FIXED_TIME


@pytest.fixture()
def relaxed_spec() -> CustomerSpecification:
    return CustomerSpecification.model_validate(relaxed_payload())


@pytest.fixture()
def over_budget_spec() -> CustomerSpecification:
    return CustomerSpecification.model_validate(
        relaxed_payload(constraints={"maxCapex": 1000})
    )


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient

    from waterlogic.main import app

    with TestClient(app) as c:
        yield c
