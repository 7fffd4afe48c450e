"""Periodic-return finder: the instant a body comes back to a longitude."""

from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Literal

from .ephemeris.base import EphemerisProvider
from .errors import ScanConfigError
from .events import ReturnEvent
from .refine import find_crossing

__all__ = [
    "ReturnSearch",
    "find_return",
    "estimate_anniversary",
    "solar_return",
]

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReturnSearch:
    """Tagged outcome of a return search; ``event`` is set only when found."""

    status: Literal["found", "not_found"]
    body: str
    target_longitude: float
    estimate_jd: float
    event: ReturnEvent | None = None

    @property
    def found(self) -> bool:
        return self.status == "found"


def find_return(
    provider: EphemerisProvider,
    body: str,
    target_longitude: float,
    estimate_jd: float,
    *,
    half_window: float = 5.0,
    step: float = 0.5,
    iterations: int = 25,
) -> ReturnSearch:
    """Locate the instant ``body`` crosses ``target_longitude`` near ``estimate_jd``.

    The window ``estimate_jd ± half_window`` is stepped through coarsely to
    bracket the crossing and the bracket is then bisected ``iterations``
    times.  A window without a crossing yields ``status="not_found"``.
    """

    if half_window <= 0.0 or step <= 0.0:
        raise ScanConfigError("half_window and step must be positive")
    if iterations < 1:
        raise ScanConfigError("iterations must be at least 1")

    target = target_longitude % 360.0

    def longitude(jd: float) -> float:
        return provider.position(jd, body).longitude

    search = find_crossing(
        longitude,
        target,
        estimate_jd,
        half_window=half_window,
        step=step,
        iterations=iterations,
    )
    if not search.found or search.refined is None:
        LOG.info(
            "no %s return to %.4f within %.1f days of jd=%.3f",
            body,
            target,
            half_window,
            estimate_jd,
        )
        return ReturnSearch("not_found", body, target, estimate_jd)

    refined = search.refined
    event = ReturnEvent(
        jd=refined.t_exact_jd,
        body=body,
        target_longitude=target,
        longitude=longitude(refined.t_exact_jd),
        iterations=refined.iterations,
        achieved_tol_sec=refined.achieved_tol_sec,
    )
    return ReturnSearch("found", body, target, estimate_jd, event)


def estimate_anniversary(birth_moment: _dt.datetime, year: int) -> _dt.datetime:
    """Return ``birth_moment`` moved to ``year`` (29 February maps to the 28th)."""

    try:
        return birth_moment.replace(year=year)
    except ValueError:
        return birth_moment.replace(year=year, day=28)


def solar_return(
    provider: EphemerisProvider,
    birth_moment: _dt.datetime,
    year: int,
    *,
    body: str = "Sun",
    half_window: float = 5.0,
    step: float = 0.5,
    iterations: int = 25,
) -> ReturnSearch:
    """Find the return of ``body`` to its natal longitude around the ``year`` birthday."""

    natal_jd = provider.julian_day(birth_moment)
    target = provider.position(natal_jd, body).longitude
    estimate_jd = provider.julian_day(estimate_anniversary(birth_moment, year))
    return find_return(
        provider,
        body,
        target,
        estimate_jd,
        half_window=half_window,
        step=step,
        iterations=iterations,
    )
