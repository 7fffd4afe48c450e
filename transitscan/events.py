"""Alignment and return records produced by the scanner."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NamedTuple

__all__ = [
    "AlignmentKey",
    "ActiveAlignment",
    "AlignmentEvent",
    "ReturnEvent",
]


class AlignmentKey(NamedTuple):
    """Identity of one tracked combination."""

    moving_body: str
    reference_point: str
    relationship: str


@dataclass(slots=True)
class ActiveAlignment:
    """In-orb state for one key while the scan is running."""

    key: AlignmentKey
    exact_angle: float
    reference_longitude: float
    orb_limit: float
    entry_jd: float
    best_deviation: float
    best_jd: float

    def tighten(self, deviation: float, jd: float) -> bool:
        """Record ``deviation`` at ``jd`` if it is closer than the best so far."""

        if deviation < self.best_deviation:
            self.best_deviation = deviation
            self.best_jd = jd
            return True
        return False


@dataclass(frozen=True, slots=True)
class AlignmentEvent:
    """Finalised alignment between a moving body and a reference point.

    ``end_jd`` is ``None`` when the alignment was still in orb at the last
    scan sample.  ``sampled_deviation`` is the tightest deviation observed on
    the sample grid; ``deviation_at_exact`` is re-evaluated at ``exact_jd``.
    """

    moving_body: str
    reference_point: str
    relationship: str
    exact_angle: float
    start_jd: float
    exact_jd: float
    end_jd: float | None
    deviation_at_exact: float
    sampled_deviation: float
    orb_limit: float
    strength: int

    @property
    def key(self) -> AlignmentKey:
        return AlignmentKey(self.moving_body, self.reference_point, self.relationship)

    @property
    def is_censored(self) -> bool:
        return self.end_jd is None

    @property
    def duration_days(self) -> float | None:
        if self.end_jd is None:
            return None
        return self.end_jd - self.start_jd

    def as_dict(self, to_iso: Callable[[float], str] | None = None) -> dict[str, Any]:
        """Return a JSON-ready mapping, rendering times with ``to_iso`` when given."""

        def render(jd: float | None) -> Any:
            if jd is None or to_iso is None:
                return jd
            return to_iso(jd)

        return {
            "moving_body": self.moving_body,
            "reference_point": self.reference_point,
            "relationship": self.relationship,
            "exact_angle": self.exact_angle,
            "orb": round(self.deviation_at_exact, 3),
            "sampled_orb": round(self.sampled_deviation, 3),
            "max_orb": round(self.orb_limit, 2),
            "strength": self.strength,
            "start_time": render(self.start_jd),
            "exact_time": render(self.exact_jd),
            "end_time": render(self.end_jd),
        }


@dataclass(frozen=True, slots=True)
class ReturnEvent:
    """Instant a moving body returns to a target longitude."""

    jd: float
    body: str
    target_longitude: float
    longitude: float
    iterations: int
    achieved_tol_sec: float
