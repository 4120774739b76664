# waterlogic/schemas/specification.py
# =============================================================================
# Customer Specification Schemas (Pydantic v2)
#
# Key Policies:
# - Recursively drop explicit "None" keys so that defaults are applied.
# - Accept both camelCase (wire) and snake_case keys.
# - Range checks (flow > 0, target <= feed ...) are NOT enforced here:
#   intake.validate() collects every violation so callers get the full list.
# - Specifications are frozen; normalization returns a new instance.
# =============================================================================

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, model_validator

from .common import AppBaseModel


def _drop_none_recursive(obj: Any) -> Any:
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for k, v in obj.items():
            if v is None:
                continue
            out[k] = _drop_none_recursive(v)
        return out
    if isinstance(obj, list):
        return [_drop_none_recursive(v) for v in obj]
    return obj


class FrozenSpecModel(AppBaseModel):
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _strip_nulls(cls, data: Any) -> Any:
        return _drop_none_recursive(data) if isinstance(data, dict) else data


# =============================================================================
# Sub-Models
# =============================================================================
class FeedWater(FrozenSpecModel):
    tss: float = Field(default=50.0, description="Total suspended solids (mg/L)")
    tds: float = Field(default=1500.0, description="Total dissolved solids (mg/L)")
    bod: float = Field(default=120.0, description="Biochemical oxygen demand (mg/L)")
    cod: float = Field(default=200.0, description="Chemical oxygen demand (mg/L)")
    ph: float = Field(default=7.2)


class TargetQuality(FrozenSpecModel):
    tss: float = Field(default=0.1)
    tds: float = Field(default=10.0)
    bod: float = Field(default=1.0)
    cod: float = Field(default=5.0)


class Constraints(FrozenSpecModel):
    max_footprint: Optional[float] = Field(default=None, description="m²")
    max_power: Optional[float] = Field(default=None, description="kW")
    max_capex: Optional[float] = Field(default=None, description="£")
    containerized: bool = False
    # ["all"] = 제한 없음, [] = 약품 사용 불가
    allowed_chemicals: List[str] = Field(default_factory=lambda: ["all"])

    @property
    def chemicals_unrestricted(self) -> bool:
        return any(str(c).strip().lower() == "all" for c in self.allowed_chemicals)


class EsgPriorities(FrozenSpecModel):
    water: float = 0.40
    carbon: float = 0.35
    energy: float = 0.25

    @property
    def total(self) -> float:
        return self.water + self.carbon + self.energy


class VendorPreferences(FrozenSpecModel):
    include: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)


# =============================================================================
# Main Input Model
# =============================================================================
class CustomerSpecification(FrozenSpecModel):
    sector: str = "pharmaceutical"
    flow_rate: float = Field(default=100.0, description="Design flow (m³/h)")
    operating_hours: float = Field(default=8000.0, description="Operating hours per year")

    feed_water: FeedWater = Field(default_factory=FeedWater)
    target_quality: TargetQuality = Field(default_factory=TargetQuality)
    constraints: Constraints = Field(default_factory=Constraints)
    esg_priorities: EsgPriorities = Field(default_factory=EsgPriorities)

    optional_modules: List[str] = Field(default_factory=lambda: ["UV", "chemicalDosing"])
    vendor_preferences: VendorPreferences = Field(default_factory=VendorPreferences)


class ValidationResult(AppBaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
