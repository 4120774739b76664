# waterlogic/services/engine/intake.py
# Specification Intake & Validation
# - validate()는 예외를 던지지 않고 모든 위반 사항을 모아서 반환한다.
# - ESG 가중치 정규화는 호출 측(엔진)이 사용 전에 수행한다.
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union

from loguru import logger

from waterlogic.schemas.common import REGULATED_PARAMETERS, TechnologyId
from waterlogic.schemas.specification import (
    CustomerSpecification,
    EsgPriorities,
    ValidationResult,
)
from waterlogic.services.engine.utils import clamp

# data completeness 평가 대상 필드 (feed 5 + target 4 + flow + hours)
_FEED_FIELDS = ("tss", "tds", "bod", "cod", "ph")
_TARGET_FIELDS = ("tss", "tds", "bod", "cod")
_TOP_FIELDS = ("flow_rate", "operating_hours")
_COMPLETENESS_TOTAL = len(_FEED_FIELDS) + len(_TARGET_FIELDS) + len(_TOP_FIELDS)


def parse_specification(
    data: Union[CustomerSpecification, Mapping[str, Any], None],
) -> CustomerSpecification:
    if isinstance(data, CustomerSpecification):
        return data
    return CustomerSpecification.model_validate(dict(data or {}))


def _fmt(v: float) -> str:
    return f"{v:g}"


def validate(spec: CustomerSpecification) -> ValidationResult:
    errors: List[str] = []

    if not spec.flow_rate > 0:
        errors.append(f"Flow rate must be positive (got {_fmt(spec.flow_rate)})")
    if not spec.operating_hours > 0:
        errors.append(
            f"Operating hours must be positive (got {_fmt(spec.operating_hours)})"
        )

    for p in REGULATED_PARAMETERS:
        feed = float(getattr(spec.feed_water, p.value))
        target = float(getattr(spec.target_quality, p.value))
        label = p.value.upper()
        if target > feed:
            errors.append(
                f"Target {label} ({_fmt(target)}) exceeds feed {label} ({_fmt(feed)})"
            )

    w = spec.esg_priorities
    for name in ("water", "carbon", "energy"):
        if getattr(w, name) < 0:
            errors.append(f"ESG priority '{name}' must be non-negative")

    known = {t.value for t in TechnologyId}
    prefs = spec.vendor_preferences
    for list_name, values in (("include", prefs.include), ("exclude", prefs.exclude)):
        for v in values:
            if str(v).strip().upper() not in known:
                errors.append(f"Unknown technology '{v}' in vendor {list_name} list")

    if errors:
        logger.debug(f"Specification rejected with {len(errors)} violation(s): {errors}")
    return ValidationResult(valid=not errors, errors=errors)


def normalize_esg_weights(priorities: EsgPriorities) -> EsgPriorities:
    """합이 1이 되도록 정규화. 전부 0이면 균등 분배."""
    total = priorities.total
    if total <= 0:
        third = 1.0 / 3.0
        return EsgPriorities(water=third, carbon=third, energy=third)
    return EsgPriorities(
        water=priorities.water / total,
        carbon=priorities.carbon / total,
        energy=priorities.energy / total,
    )


def normalize_specification(spec: CustomerSpecification) -> CustomerSpecification:
    return spec.model_copy(
        update={"esg_priorities": normalize_esg_weights(spec.esg_priorities)}
    )


def required_removal(spec: CustomerSpecification) -> Dict[str, float]:
    """파라미터별 필요 제거율 1 - target/feed. feed <= 0 이면 0."""
    out: Dict[str, float] = {}
    for p in REGULATED_PARAMETERS:
        feed = float(getattr(spec.feed_water, p.value))
        target = float(getattr(spec.target_quality, p.value))
        out[p.value] = clamp(1.0 - target / feed, 0.0, 1.0) if feed > 0 else 0.0
    return out


def annual_volume(spec: CustomerSpecification) -> float:
    """연간 처리 수량 (m³/year)."""
    return float(spec.flow_rate) * float(spec.operating_hours)


def data_completeness(spec: CustomerSpecification) -> float:
    """고객이 명시적으로 제공한 핵심 수질/운전 입력의 비율 (0~1)."""
    provided = 0
    if "feed_water" in spec.model_fields_set:
        provided += sum(1 for f in _FEED_FIELDS if f in spec.feed_water.model_fields_set)
    if "target_quality" in spec.model_fields_set:
        provided += sum(
            1 for f in _TARGET_FIELDS if f in spec.target_quality.model_fields_set
        )
    provided += sum(1 for f in _TOP_FIELDS if f in spec.model_fields_set)
    return provided / _COMPLETENESS_TOTAL
