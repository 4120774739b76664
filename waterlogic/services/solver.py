# waterlogic/services/solver.py
from __future__ import annotations
from typing import Callable, Tuple

_INV_PHI = (5 ** 0.5 - 1) / 2  # 0.618...

def golden_section_max(func: Callable[[float], float], lo: float, hi: float, tol: float = 1e-4, maxit: int = 60) -> Tuple[float, float]:
    """[lo, hi] 구간에서 단봉(unimodal) 함수의 최대점 (x, f(x))."""
    if hi < lo:
        lo, hi = hi, lo
    a, b = lo, hi
    c = b - _INV_PHI * (b - a)
    d = a + _INV_PHI * (b - a)
    fc, fd = func(c), func(d)
    for _ in range(maxit):
        if abs(b - a) < tol:
            break
        if fc >= fd:
            b, d, fd = d, c, fc
            c = b - _INV_PHI * (b - a)
            fc = func(c)
        else:
            a, c, fc = c, d, fd
            d = a + _INV_PHI * (b - a)
            fd = func(d)
    x = (a + b) / 2
    return x, func(x)
