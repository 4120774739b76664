# waterlogic/core/exceptions.py
from __future__ import annotations

from typing import Any, List, Sequence


class WaterLogicError(Exception):
    """엔진 공통 예외 베이스. HTTP 계층은 code/status_code/detail 만 본다."""

    code: str = "WATERLOGIC_ERROR"
    status_code: int = 500

    @property
    def detail(self) -> Any:
        return None


class SpecValidationError(WaterLogicError):
    """고객 사양이 intake 검증을 통과하지 못함. 위반 사항 전체를 보관."""

    code = "INVALID_SPECIFICATION"
    status_code = 422

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("Invalid specification: " + "; ".join(self.errors))

    @property
    def detail(self) -> List[str]:
        return self.errors


class NoFeasibleSolutionError(WaterLogicError):
    """모든 후보 체인이 제약 조건을 만족하지 못함."""

    code = "NO_FEASIBLE_SOLUTION"
    status_code = 409

    def __init__(self, unsatisfied: Sequence[str]) -> None:
        self.unsatisfied: List[str] = list(unsatisfied)
        detail = ", ".join(self.unsatisfied) if self.unsatisfied else "unknown"
        super().__init__(f"No feasible solution (unsatisfied constraints: {detail})")

    @property
    def detail(self) -> List[str]:
        return self.unsatisfied


class NumericGuardError(WaterLogicError):
    """가드 이후에도 NaN/Infinity가 남은 경우 (결함)."""

    code = "NUMERIC_GUARD"

    def __init__(self, label: str, value: float) -> None:
        self.label = label
        self.value = value
        super().__init__(f"Non-finite value for '{label}': {value!r}")

    @property
    def detail(self) -> dict:
        return {"label": self.label}
