"""Straight-line motion provider for demonstrations and tests."""

from __future__ import annotations

import datetime as _dt
from collections.abc import Mapping

from ..angles import norm360
from .base import BodyPosition
from .time import jd_to_datetime, julian_day

__all__ = ["LinearMotionProvider"]


class LinearMotionProvider:
    """Bodies moving at constant speed from a longitude at ``epoch_jd``.

    ``bodies`` maps a name to ``(longitude_at_epoch, speed_deg_per_day)``.
    Unknown bodies raise :class:`KeyError`, mirroring a real backend that
    cannot resolve a body id.
    """

    time_scale = "UT"

    def __init__(self, bodies: Mapping[str, tuple[float, float]], epoch_jd: float) -> None:
        self.bodies = {name: (float(lon), float(speed)) for name, (lon, speed) in bodies.items()}
        self.epoch_jd = float(epoch_jd)
        self.calls = 0

    def position(self, jd: float, body: str) -> BodyPosition:
        lon0, speed = self.bodies[body]
        self.calls += 1
        return BodyPosition(
            longitude=norm360(lon0 + speed * (jd - self.epoch_jd)),
            latitude=0.0,
            distance=1.0,
            speed=speed,
        )

    def julian_day(self, moment: _dt.datetime) -> float:
        return julian_day(moment)

    def to_datetime(self, jd: float) -> _dt.datetime:
        return jd_to_datetime(jd)
