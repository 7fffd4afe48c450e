"""Root-finding helpers for refining alignment and return timestamps.

Two independent primitives live here:

* :func:`golden_section_minimize` narrows a bracket around the minimum of a
  non-negative deviation curve.  It assumes the curve is unimodal inside the
  bracket and never raises; if the assumption is violated the returned
  instant is simply less precise.
* :func:`bisect_crossing` narrows a bracket known to contain the instant a
  circular quantity passes a target value.  :func:`bracket_crossing` finds
  such a bracket by stepping through a coarse window, and
  :func:`find_crossing` combines the two into a :class:`CrossingSearch`
  that reports ``"not_found"`` as a value rather than an exception.

All times are Julian days in whatever scale the caller's provider uses.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, Literal

from .angles import is_between

__all__ = [
    "SECONDS_PER_DAY",
    "RefineResult",
    "CrossingSearch",
    "golden_section_minimize",
    "bracket_crossing",
    "bisect_crossing",
    "find_crossing",
]

SECONDS_PER_DAY: Final[float] = 86_400.0

_INV_PHI: Final[float] = (math.sqrt(5.0) - 1.0) / 2.0

Betweenness = Callable[[float, float, float], bool]


@dataclass(frozen=True, slots=True)
class RefineResult:
    """Result metadata returned by the refinement routines.

    Attributes
    ----------
    t_exact_jd:
        Julian day of the refined estimate.
    iterations:
        Number of narrowing steps executed.
    method:
        ``"golden-section"`` or ``"bisection"``.
    achieved_tol_sec:
        Width of the final bracket expressed in seconds.
    status:
        ``"ok"`` when the requested tolerance was reached, ``"max_iter"``
        when the iteration ceiling stopped the search first.
    """

    t_exact_jd: float
    iterations: int
    method: str
    achieved_tol_sec: float
    status: str


@dataclass(frozen=True, slots=True)
class CrossingSearch:
    """Tagged outcome of :func:`find_crossing`."""

    status: Literal["found", "not_found"]
    refined: RefineResult | None = None
    bracket: tuple[float, float] | None = None

    @property
    def found(self) -> bool:
        return self.status == "found"

    @property
    def t_exact_jd(self) -> float | None:
        return self.refined.t_exact_jd if self.refined is not None else None

    @classmethod
    def not_found(cls) -> "CrossingSearch":
        return cls(status="not_found")


def golden_section_minimize(
    f: Callable[[float], float],
    lo: float,
    hi: float,
    *,
    tol_days: float = 1e-4,
    max_iter: int = 30,
) -> RefineResult:
    """Return the instant minimising ``f`` inside ``[lo, hi]``.

    Two interior points are kept at the golden ratio; each step discards the
    sub-interval beyond the point with the larger value.  The loop stops when
    the bracket is narrower than ``tol_days`` or after ``max_iter`` steps and
    returns the bracket midpoint.
    """

    a, b = (lo, hi) if lo <= hi else (hi, lo)
    c = b - (b - a) * _INV_PHI
    d = a + (b - a) * _INV_PHI
    fc = f(c)
    fd = f(d)

    iterations = 0
    while iterations < max_iter and abs(b - a) >= tol_days:
        if fc < fd:
            b, d, fd = d, c, fc
            c = b - (b - a) * _INV_PHI
            fc = f(c)
        else:
            a, c, fc = c, d, fd
            d = a + (b - a) * _INV_PHI
            fd = f(d)
        iterations += 1

    width = abs(b - a)
    return RefineResult(
        t_exact_jd=0.5 * (a + b),
        iterations=iterations,
        method="golden-section",
        achieved_tol_sec=width * SECONDS_PER_DAY,
        status="ok" if width < tol_days else "max_iter",
    )


def bracket_crossing(
    f: Callable[[float], float],
    target: float,
    estimate: float,
    *,
    half_window: float = 5.0,
    step: float = 0.5,
    between: Betweenness = is_between,
) -> tuple[float, float] | None:
    """Step through ``estimate ± half_window`` looking for a crossing bracket.

    Returns the first pair of consecutive sample times whose values satisfy
    ``between(f(t0), f(t1), target)``, or ``None`` when the window holds no
    crossing.
    """

    if step <= 0.0:
        raise ValueError("step must be positive")
    if half_window <= 0.0:
        raise ValueError("half_window must be positive")

    lo = estimate - half_window
    count = int(round((2.0 * half_window) / step))
    prev_t = lo
    prev_v = f(prev_t)
    for index in range(1, count + 1):
        t = lo + index * step
        v = f(t)
        if between(prev_v, v, target):
            return (prev_t, t)
        prev_t, prev_v = t, v
    return None


def bisect_crossing(
    f: Callable[[float], float],
    target: float,
    lo: float,
    hi: float,
    *,
    iterations: int = 25,
    between: Betweenness = is_between,
) -> RefineResult:
    """Halve ``[lo, hi]`` ``iterations`` times keeping the crossing inside."""

    f_lo = f(lo)
    for _ in range(iterations):
        mid = 0.5 * (lo + hi)
        f_mid = f(mid)
        if between(f_lo, f_mid, target):
            hi = mid
        else:
            lo, f_lo = mid, f_mid

    return RefineResult(
        t_exact_jd=0.5 * (lo + hi),
        iterations=iterations,
        method="bisection",
        achieved_tol_sec=abs(hi - lo) * SECONDS_PER_DAY,
        status="ok",
    )


def find_crossing(
    f: Callable[[float], float],
    target: float,
    estimate: float,
    *,
    half_window: float = 5.0,
    step: float = 0.5,
    iterations: int = 25,
    between: Betweenness = is_between,
) -> CrossingSearch:
    """Bracket then bisect the crossing of ``target`` near ``estimate``."""

    bracket = bracket_crossing(
        f,
        target,
        estimate,
        half_window=half_window,
        step=step,
        between=between,
    )
    if bracket is None:
        return CrossingSearch.not_found()
    refined = bisect_crossing(
        f,
        target,
        bracket[0],
        bracket[1],
        iterations=iterations,
        between=between,
    )
    return CrossingSearch(status="found", refined=refined, bracket=bracket)
