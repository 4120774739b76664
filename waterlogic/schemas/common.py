# waterlogic/schemas/common.py
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AppBaseModel(BaseModel):
    """모든 모델의 부모 클래스: V2 설정 + camelCase 와이어 포맷"""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        from_attributes=True,
        alias_generator=to_camel,
    )


class TechnologyId(str, Enum):
    UF = "UF"
    MBR = "MBR"
    RO = "RO"
    UV = "UV"
    AOP = "AOP"
    NF = "NF"
    DAF = "DAF"


class QualityParameter(str, Enum):
    TSS = "tss"
    TDS = "tds"
    BOD = "bod"
    COD = "cod"


# 제거율 규제 대상 (feed/target 모두 존재하는 수질 항목)
REGULATED_PARAMETERS = (
    QualityParameter.TSS,
    QualityParameter.TDS,
    QualityParameter.BOD,
    QualityParameter.COD,
)


class ConstraintKind(str, Enum):
    REMOVAL = "removal"
    FOOTPRINT = "footprint"
    POWER = "power"
    BUDGET = "budget"
    CHEMICALS = "chemicals"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EvaluationStatus(str, Enum):
    OK = "ok"
    NO_FEASIBLE_SOLUTION = "no_feasible_solution"
