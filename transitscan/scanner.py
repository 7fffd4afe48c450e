"""Time-axis sweep that detects alignments and refines their exact instants.

The scan samples every moving body at ``start + i * step`` (end inclusive),
compares each body against every reference point through the ordered
relationship list and drives an :class:`~transitscan.state.AlignmentTracker`.
Cost is proportional to ``samples × bodies × references × relationships``;
the per-pair orb table is computed once before sampling so the inner loop
only does a separation, a subtraction and a comparison.

A step that is large relative to a body's speed can miss short alignments
entirely; the scanner does not adapt the step.
"""

from __future__ import annotations

import datetime as _dt
import logging
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass

from .angles import separation
from .chart import ReferencePoint, reference_points
from .constants import DEFAULT_RELATIONSHIPS, RelationshipDefinition
from .ephemeris.base import EphemerisProvider
from .errors import ScanCancelled, ScanConfigError
from .events import ActiveAlignment, AlignmentEvent, AlignmentKey
from .orbs import OrbPolicy, transit_orb_policy
from .refine import golden_section_minimize
from .state import AlignmentTracker, Window

__all__ = [
    "ScanRequest",
    "AlignmentScanner",
    "scan_alignments",
]

LOG = logging.getLogger(__name__)

_STEP_EPSILON = 1e-9

_Combo = tuple[RelationshipDefinition, float, AlignmentKey]


@dataclass(frozen=True)
class ScanRequest:
    """Validated description of one scan window."""

    moving_bodies: tuple[str, ...]
    reference_points: tuple[ReferencePoint, ...]
    start_jd: float
    end_jd: float
    step_days: float = 0.5
    relationships: tuple[RelationshipDefinition, ...] = DEFAULT_RELATIONSHIPS

    def __post_init__(self) -> None:
        object.__setattr__(self, "moving_bodies", tuple(self.moving_bodies))
        object.__setattr__(self, "reference_points", tuple(self.reference_points))
        object.__setattr__(self, "relationships", tuple(self.relationships))

        if not self.moving_bodies:
            raise ScanConfigError("at least one moving body is required")
        if len(set(self.moving_bodies)) != len(self.moving_bodies):
            raise ScanConfigError("moving bodies must be unique")
        if not self.reference_points:
            raise ScanConfigError("at least one reference point is required")
        names = [point.name for point in self.reference_points]
        if len(set(names)) != len(names):
            raise ScanConfigError("reference point names must be unique")
        if not self.relationships:
            raise ScanConfigError("at least one relationship definition is required")
        if not (math.isfinite(self.start_jd) and math.isfinite(self.end_jd)):
            raise ScanConfigError("scan window bounds must be finite")
        if self.end_jd < self.start_jd:
            raise ScanConfigError("scan window requires start <= end")
        if not math.isfinite(self.step_days) or self.step_days <= 0.0:
            raise ScanConfigError("step_days must be positive")

    @property
    def sample_count(self) -> int:
        return int(math.floor((self.end_jd - self.start_jd) / self.step_days + _STEP_EPSILON)) + 1

    def sample_times(self) -> Iterable[float]:
        for index in range(self.sample_count):
            yield self.start_jd + index * self.step_days


class AlignmentScanner:
    """Drive the alignment state machine across a scan window.

    Parameters
    ----------
    provider:
        Ephemeris provider queried once per body per sample and again by
        the golden-section refinement.  Its exceptions propagate unchanged.
    orb_policy:
        Callable resolving the effective orb per pair; defaults to the
        half-orb transit policy.
    refine_window_days:
        Half-width of the refinement bracket around the best sample.
    refine_tol_days:
        Target bracket width for the golden-section search.
    refine_max_iter:
        Iteration ceiling for the golden-section search.
    """

    def __init__(
        self,
        provider: EphemerisProvider,
        orb_policy: OrbPolicy | None = None,
        *,
        refine_window_days: float = 1.0,
        refine_tol_days: float = 1e-4,
        refine_max_iter: int = 30,
    ) -> None:
        if refine_window_days <= 0.0:
            raise ScanConfigError("refine_window_days must be positive")
        if refine_tol_days <= 0.0:
            raise ScanConfigError("refine_tol_days must be positive")
        self.provider = provider
        self.orb_policy = orb_policy or transit_orb_policy()
        self.refine_window_days = float(refine_window_days)
        self.refine_tol_days = float(refine_tol_days)
        self.refine_max_iter = int(refine_max_iter)

    def _combinations(self, request: ScanRequest) -> dict[str, list[tuple[ReferencePoint, list[_Combo]]]]:
        """Return per-body reference lists with relationship/orb/key triples."""

        table: dict[str, list[tuple[ReferencePoint, list[_Combo]]]] = {}
        for body in request.moving_bodies:
            rows: list[tuple[ReferencePoint, list[_Combo]]] = []
            for ref in request.reference_points:
                combos: list[_Combo] = []
                for rel in request.relationships:
                    # A body always sits on its own natal position at 0°.
                    if body == ref.name and rel.angle == 0.0:
                        continue
                    orb = self.orb_policy(rel, body, ref.name)
                    combos.append((rel, orb, AlignmentKey(body, ref.name, rel.name)))
                rows.append((ref, combos))
            table[body] = rows
        return table

    def refine(self, active: ActiveAlignment, window: Window | None = None) -> tuple[float, float]:
        """Return ``(exact_jd, deviation_at_exact)`` for ``active``.

        With ``window`` set, the bracket is clipped to it so the exact instant
        of a right-censored alignment stays inside the scan.
        """

        body = active.key.moving_body
        target = active.reference_longitude
        angle = active.exact_angle

        def deviation(jd: float) -> float:
            lon = self.provider.position(jd, body).longitude
            return abs(separation(lon, target) - angle)

        lo = active.best_jd - self.refine_window_days
        hi = active.best_jd + self.refine_window_days
        if window is not None:
            lo = min(max(lo, window[0]), active.best_jd)
            hi = max(min(hi, window[1]), active.best_jd)
        result = golden_section_minimize(
            deviation,
            lo,
            hi,
            tol_days=self.refine_tol_days,
            max_iter=self.refine_max_iter,
        )
        if result.status != "ok":
            LOG.debug(
                "golden-section stopped at iteration ceiling for %s (%.1fs bracket)",
                active.key,
                result.achieved_tol_sec,
            )
        return result.t_exact_jd, deviation(result.t_exact_jd)

    def scan(
        self,
        request: ScanRequest,
        *,
        should_cancel: Callable[[], bool] | None = None,
    ) -> list[AlignmentEvent]:
        """Sweep ``request`` and return finalised events in emission order."""

        tracker = AlignmentTracker(self.refine)
        table = self._combinations(request)
        provider = self.provider
        samples = 0

        for jd in request.sample_times():
            if should_cancel is not None and should_cancel():
                LOG.info("scan cancelled at jd=%.5f after %d samples", jd, samples)
                raise ScanCancelled(f"scan cancelled at jd={jd}")
            samples += 1
            for body in request.moving_bodies:
                lon = provider.position(jd, body).longitude
                for ref, combos in table[body]:
                    sep = separation(lon, ref.longitude)
                    for rel, orb, key in combos:
                        deviation = abs(sep - rel.angle)
                        if deviation <= orb:
                            tracker.observe(
                                key,
                                deviation=deviation,
                                orb_limit=orb,
                                jd=jd,
                                exact_angle=rel.angle,
                                reference_longitude=ref.longitude,
                            )
                            break
                        if tracker.is_active(key):
                            tracker.exit(key, jd)
                            break

        censored = tracker.close(request.start_jd, request.end_jd)
        LOG.info(
            "scan complete: %d samples, %d bodies x %d references, %d events (%d open)",
            samples,
            len(request.moving_bodies),
            len(request.reference_points),
            len(tracker.events),
            len(censored),
        )
        return tracker.events


def _as_jd(provider: EphemerisProvider, value: float | _dt.datetime) -> float:
    if isinstance(value, _dt.datetime):
        return provider.julian_day(value)
    return float(value)


def scan_alignments(
    provider: EphemerisProvider,
    moving_bodies: Sequence[str],
    references: Mapping[str, float] | Iterable[ReferencePoint],
    start: float | _dt.datetime,
    end: float | _dt.datetime,
    *,
    step_days: float = 0.5,
    relationships: Sequence[RelationshipDefinition] = DEFAULT_RELATIONSHIPS,
    orb_policy: OrbPolicy | None = None,
    should_cancel: Callable[[], bool] | None = None,
    **scanner_options: float,
) -> list[AlignmentEvent]:
    """Convenience wrapper building a :class:`ScanRequest` and scanning it.

    ``start``/``end`` accept Julian days in the provider's scale or
    ``datetime`` values; ``references`` accepts reference points or a
    ``{name: longitude}`` mapping.
    """

    points = (
        reference_points(references)
        if isinstance(references, Mapping)
        else tuple(references)
    )
    request = ScanRequest(
        moving_bodies=tuple(moving_bodies),
        reference_points=points,
        start_jd=_as_jd(provider, start),
        end_jd=_as_jd(provider, end),
        step_days=step_days,
        relationships=tuple(relationships),
    )
    scanner = AlignmentScanner(provider, orb_policy, **scanner_options)
    return scanner.scan(request, should_cancel=should_cancel)
