"""Aggregation and presentation helpers for finalised alignment events."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from .angles import norm360, sign_index
from .constants import (
    LILITH,
    MOON_APOGEE_AU,
    MOON_PERIGEE_AU,
    SOUTH_NODE,
    TRUE_NODE,
    ZODIAC_SIGNS,
)
from .ephemeris.base import BodyPosition, EphemerisProvider
from .ephemeris.time import jd_to_date_str, jd_to_iso
from .events import AlignmentEvent, AlignmentKey

__all__ = [
    "best_per_combination",
    "within",
    "most_exact",
    "chronological",
    "retrogrades",
    "MoonPhase",
    "moon_phase",
    "lunar_snapshot",
    "TransitReport",
    "build_transit_report",
]

SYNODIC_MONTH_DAYS = 29.53

_PHASES: tuple[tuple[float, str], ...] = (
    (22.5, "New Moon"),
    (67.5, "Waxing Crescent"),
    (112.5, "First Quarter"),
    (157.5, "Waxing Gibbous"),
    (202.5, "Full Moon"),
    (247.5, "Waning Gibbous"),
    (292.5, "Last Quarter"),
    (337.5, "Waning Crescent"),
)

_NO_RETROGRADE = frozenset({TRUE_NODE, SOUTH_NODE, LILITH})
_SUPER_MOON_PHASES = frozenset({"New Moon", "Full Moon"})


def best_per_combination(events: Iterable[AlignmentEvent]) -> list[AlignmentEvent]:
    """Keep the tightest event per key, ordered by deviation."""

    best: dict[AlignmentKey, AlignmentEvent] = {}
    for event in events:
        current = best.get(event.key)
        if current is None or event.deviation_at_exact < current.deviation_at_exact:
            best[event.key] = event
    return sorted(best.values(), key=lambda ev: ev.deviation_at_exact)


def within(events: Iterable[AlignmentEvent], start_jd: float, end_jd: float) -> list[AlignmentEvent]:
    """Events whose exact instant falls in ``[start_jd, end_jd)``."""

    return [ev for ev in events if start_jd <= ev.exact_jd < end_jd]


def chronological(events: Iterable[AlignmentEvent]) -> list[AlignmentEvent]:
    return sorted(events, key=lambda ev: ev.exact_jd)


def most_exact(events: Iterable[AlignmentEvent], top_n: int = 10) -> list[AlignmentEvent]:
    """The ``top_n`` tightest events, re-ordered by exact instant."""

    ranked = sorted(events, key=lambda ev: ev.deviation_at_exact)[: max(top_n, 0)]
    return chronological(ranked)


def retrogrades(positions: Mapping[str, BodyPosition]) -> list[str]:
    """Names of bodies moving backwards; nodes and Lilith are never reported."""

    return [
        name
        for name, pos in positions.items()
        if pos.speed < 0.0 and name not in _NO_RETROGRADE
    ]


@dataclass(frozen=True, slots=True)
class MoonPhase:
    name: str
    angle: float
    illumination: float
    age_days: float

    @property
    def day(self) -> int:
        return min(int(math.floor(self.age_days)) + 1, 30)


def moon_phase(sun_lon: float, moon_lon: float) -> MoonPhase:
    """Classify the Sun-Moon elongation into one of eight phases."""

    angle = norm360(moon_lon - sun_lon)
    name = "New Moon"
    for limit, label in _PHASES:
        if angle < limit:
            name = label
            break
    illumination = round((1.0 - math.cos(math.radians(angle))) / 2.0 * 100.0, 1)
    age = round(angle * SYNODIC_MONTH_DAYS / 360.0, 1)
    return MoonPhase(name=name, angle=round(angle, 2), illumination=illumination, age_days=age)


def lunar_snapshot(provider: EphemerisProvider, jd: float) -> dict[str, Any]:
    """Moon sign, phase and distance flags at ``jd``.

    ``distance`` is read in AU; a super moon is a new or full Moon inside
    the perigee bound.
    """

    sun = provider.position(jd, "Sun")
    moon = provider.position(jd, "Moon")
    phase = moon_phase(sun.longitude, moon.longitude)
    within_perigee = moon.distance < MOON_PERIGEE_AU
    payload = asdict(phase)
    payload["day"] = phase.day
    payload["sign"] = ZODIAC_SIGNS[sign_index(moon.longitude)]
    payload["within_perigee"] = within_perigee
    payload["within_apogee"] = moon.distance > MOON_APOGEE_AU
    payload["is_super_moon"] = within_perigee and phase.name in _SUPER_MOON_PHASES
    return payload


@dataclass
class TransitReport:
    """JSON-ready summary of one scan."""

    all_transits: list[dict[str, Any]] = field(default_factory=list)
    today: list[dict[str, Any]] = field(default_factory=list)
    week: list[dict[str, Any]] = field(default_factory=list)
    important: list[dict[str, Any]] = field(default_factory=list)
    all_events: list[dict[str, Any]] = field(default_factory=list)
    retrogrades: list[str] = field(default_factory=list)
    lunar: dict[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _by_orb(rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(rows, key=lambda row: row["orb"])


def _snapshot(event: AlignmentEvent, to_date: Callable[[float], str]) -> dict[str, Any]:
    return {
        "date": to_date(event.exact_jd),
        "moving_body": event.moving_body,
        "reference_point": event.reference_point,
        "relationship": event.relationship,
        "orb": round(event.deviation_at_exact, 2),
        "max_orb": round(event.orb_limit, 2),
        "strength": event.strength,
    }


def build_transit_report(
    events: Sequence[AlignmentEvent],
    *,
    now_jd: float,
    top_n: int = 10,
    to_iso: Callable[[float], str] = jd_to_iso,
    to_date: Callable[[float], str] = jd_to_date_str,
) -> TransitReport:
    """Group ``events`` into the today/week/important views used by callers."""

    return TransitReport(
        all_transits=[_snapshot(ev, to_date) for ev in best_per_combination(events)],
        today=_by_orb(_snapshot(ev, to_date) for ev in within(events, now_jd, now_jd + 1.0)),
        week=_by_orb(ev.as_dict(to_iso) for ev in within(events, now_jd, now_jd + 7.0)),
        important=[ev.as_dict(to_iso) for ev in most_exact(events, top_n)],
        all_events=[ev.as_dict(to_iso) for ev in chronological(events)],
    )
