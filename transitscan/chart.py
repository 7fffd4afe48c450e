"""Reference-chart builder: fixed natal points for one birth event."""

from __future__ import annotations

import datetime as _dt
import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .angles import norm360
from .constants import ASCENDANT, DEFAULT_NATAL_BODIES, MIDHEAVEN
from .ephemeris.base import EphemerisProvider
from .ephemeris.swiss import HOUSE_CODE_BY_NAME
from .errors import ScanConfigError

__all__ = [
    "BirthData",
    "ReferencePoint",
    "ReferenceChart",
    "build_reference_chart",
    "reference_points",
]

LOG = logging.getLogger(__name__)

_POLAR_SENSITIVE = {"placidus", "koch"}


@dataclass(frozen=True, slots=True)
class ReferencePoint:
    """A fixed longitude established once per scan."""

    name: str
    longitude: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.longitude):
            raise ScanConfigError(f"reference point '{self.name}' has a non-finite longitude")
        object.__setattr__(self, "longitude", norm360(self.longitude))


@dataclass(frozen=True)
class BirthData:
    """Birth event used to build the reference chart.

    ``moment`` may be naive when ``timezone`` names an IANA zone; otherwise
    naive values are taken as UTC.
    """

    moment: _dt.datetime
    latitude: float
    longitude: float
    house_system: str = "placidus"
    timezone: str | None = None

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ScanConfigError(f"invalid latitude {self.latitude}: expected -90..90")
        if not -180.0 <= self.longitude <= 180.0:
            raise ScanConfigError(f"invalid longitude {self.longitude}: expected -180..180")
        if self.house_system.lower() not in HOUSE_CODE_BY_NAME:
            raise ScanConfigError(
                f"unsupported house system '{self.house_system}'; "
                f"choose one of {', '.join(sorted(HOUSE_CODE_BY_NAME))}"
            )
        if self.timezone is not None and self.moment.tzinfo is None:
            try:
                zone = ZoneInfo(self.timezone)
            except ZoneInfoNotFoundError as exc:
                raise ScanConfigError(f"unknown timezone '{self.timezone}'") from exc
            object.__setattr__(self, "moment", self.moment.replace(tzinfo=zone))


@dataclass(frozen=True)
class ReferenceChart:
    """Natal reference points plus the house data they were derived with."""

    jd: float
    points: tuple[ReferencePoint, ...]
    house_system: str | None = None
    cusps: tuple[float, ...] = field(default_factory=tuple)

    def point(self, name: str) -> ReferencePoint:
        for candidate in self.points:
            if candidate.name == name:
                return candidate
        raise KeyError(name)

    def longitudes(self) -> dict[str, float]:
        return {point.name: point.longitude for point in self.points}


def reference_points(longitudes: Mapping[str, float]) -> tuple[ReferencePoint, ...]:
    """Build reference points from a ``{name: longitude}`` mapping."""

    return tuple(ReferencePoint(name, float(lon)) for name, lon in longitudes.items())


def build_reference_chart(
    provider: EphemerisProvider,
    birth: BirthData,
    bodies: Iterable[str] = DEFAULT_NATAL_BODIES,
) -> ReferenceChart:
    """Return natal body longitudes plus Ascendant and Midheaven.

    The angles need a provider exposing ``houses(jd, lat, lon, system)``;
    providers without one yield a chart of body positions only.
    """

    jd = provider.julian_day(birth.moment)
    points = [ReferencePoint(name, provider.position(jd, name).longitude) for name in bodies]

    houses = getattr(provider, "houses", None)
    if houses is None:
        LOG.debug("provider %s has no house support; skipping chart angles", type(provider).__name__)
        return ReferenceChart(jd=jd, points=tuple(points))

    system = birth.house_system.lower()
    if system in _POLAR_SENSITIVE and abs(birth.latitude) > 66.0:
        LOG.warning(
            "%s houses are unreliable at latitude %.2f; Whole Sign is recommended",
            system,
            birth.latitude,
        )
    cusps, ascendant, midheaven, used = houses(jd, birth.latitude, birth.longitude, system)
    points.append(ReferencePoint(ASCENDANT, ascendant))
    points.append(ReferencePoint(MIDHEAVEN, midheaven))
    return ReferenceChart(jd=jd, points=tuple(points), house_system=used, cusps=tuple(cusps))
