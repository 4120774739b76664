# waterlogic/services/engine/utils.py
from __future__ import annotations

import math
from typing import Any

from waterlogic.core.exceptions import NumericGuardError

EPS = 1e-12


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp x to [lo, hi]."""
    return max(lo, min(hi, x))


def safe_div(num: float, den: float, default: float = 0.0) -> float:
    """den ~ 0 이면 default (NaN/Infinity 방지)."""
    if abs(den) <= EPS:
        return float(default)
    return float(num) / float(den)


def ensure_finite(label: str, value: Any) -> float:
    """가드 이후에도 비유한 값이 남아 있으면 결함으로 간주하고 즉시 실패."""
    x = float(value)
    if not math.isfinite(x):
        raise NumericGuardError(label, x)
    return x


def pct(x: float, ndigits: int = 1) -> str:
    return f"{x * 100.0:.{ndigits}f}%"
