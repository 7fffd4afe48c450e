"""Per-combination alignment state machine.

The tracker owns the map of active alignments for exactly one scan.  Each
key moves through three states: absent, active (entered and possibly
tightened), and finalised (removed from the map, appended to
:attr:`AlignmentTracker.events`).  Finalisation asks the ``refiner`` for
the exact instant; the tracker itself never touches the ephemeris.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from .events import ActiveAlignment, AlignmentEvent, AlignmentKey
from .orbs import strength

__all__ = ["AlignmentTracker", "Refiner", "Window"]

LOG = logging.getLogger(__name__)

Window = tuple[float, float]

Refiner = Callable[[ActiveAlignment, Window | None], tuple[float, float]]
"""``refiner(active, window) -> (exact_jd, deviation_at_exact)``.

``window`` is the scan's ``(start_jd, end_jd)`` for right-censored
alignments, whose exact instant must stay inside it, and ``None`` otherwise.
"""


class AlignmentTracker:
    """Scan-scoped owner of :class:`ActiveAlignment` records."""

    def __init__(self, refiner: Refiner) -> None:
        self._refiner = refiner
        self._active: dict[AlignmentKey, ActiveAlignment] = {}
        self.events: list[AlignmentEvent] = []

    def __len__(self) -> int:
        return len(self._active)

    def __iter__(self) -> Iterator[ActiveAlignment]:
        return iter(list(self._active.values()))

    def is_active(self, key: AlignmentKey) -> bool:
        return key in self._active

    def get(self, key: AlignmentKey) -> ActiveAlignment | None:
        return self._active.get(key)

    def observe(
        self,
        key: AlignmentKey,
        *,
        deviation: float,
        orb_limit: float,
        jd: float,
        exact_angle: float,
        reference_longitude: float,
    ) -> ActiveAlignment:
        """Enter ``key`` at ``jd`` or tighten its best sample."""

        active = self._active.get(key)
        if active is None:
            active = ActiveAlignment(
                key=key,
                exact_angle=exact_angle,
                reference_longitude=reference_longitude,
                orb_limit=orb_limit,
                entry_jd=jd,
                best_deviation=deviation,
                best_jd=jd,
            )
            self._active[key] = active
            LOG.debug("enter %s at jd=%.5f deviation=%.4f", key, jd, deviation)
        else:
            active.tighten(deviation, jd)
        return active

    def exit(self, key: AlignmentKey, jd: float) -> AlignmentEvent | None:
        """Finalise ``key`` with ``end_jd=jd``; no-op when it is not active."""

        active = self._active.pop(key, None)
        if active is None:
            return None
        return self._finalize(active, end_jd=jd, window=None)

    def close(self, scan_start_jd: float, scan_end_jd: float) -> list[AlignmentEvent]:
        """Finalise everything still active as right-censored events."""

        closed: list[AlignmentEvent] = []
        for key in list(self._active):
            active = self._active.pop(key)
            closed.append(self._finalize(active, end_jd=None, window=(scan_start_jd, scan_end_jd)))
        return closed

    def _finalize(
        self,
        active: ActiveAlignment,
        *,
        end_jd: float | None,
        window: Window | None,
    ) -> AlignmentEvent:
        exact_jd, deviation = self._refiner(active, window)
        event = AlignmentEvent(
            moving_body=active.key.moving_body,
            reference_point=active.key.reference_point,
            relationship=active.key.relationship,
            exact_angle=active.exact_angle,
            start_jd=min(active.entry_jd, exact_jd),
            exact_jd=exact_jd,
            end_jd=end_jd,
            deviation_at_exact=deviation,
            sampled_deviation=active.best_deviation,
            orb_limit=active.orb_limit,
            strength=strength(deviation, active.orb_limit),
        )
        self.events.append(event)
        LOG.debug(
            "finalize %s exact=%.5f end=%s deviation=%.4f",
            active.key,
            exact_jd,
            "open" if end_jd is None else f"{end_jd:.5f}",
            deviation,
        )
        return event
