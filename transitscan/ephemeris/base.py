"""Provider contract consumed by the scanner and return finder."""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

__all__ = ["BodyPosition", "EphemerisProvider"]


@dataclass(frozen=True, slots=True)
class BodyPosition:
    """Instantaneous geocentric ecliptic position of one body.

    ``longitude`` is reduced to ``[0, 360)``; ``speed`` is the signed
    longitudinal speed in degrees per day (negative while retrograde).
    """

    longitude: float
    latitude: float
    distance: float
    speed: float

    @property
    def retrograde(self) -> bool:
        return self.speed < 0.0


@runtime_checkable
class EphemerisProvider(Protocol):
    """Deterministic position source, continuous in time for a fixed body.

    Julian days passed to :meth:`position` are in :attr:`time_scale`;
    :meth:`julian_day` and :meth:`to_datetime` convert between that scale
    and UTC ``datetime`` values.
    """

    time_scale: str

    def position(self, jd: float, body: str) -> BodyPosition:
        ...

    def julian_day(self, moment: _dt.datetime) -> float:
        ...

    def to_datetime(self, jd: float) -> _dt.datetime:
        ...
