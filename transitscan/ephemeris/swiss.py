"""Swiss Ephemeris backed position provider."""

from __future__ import annotations

import datetime as _dt
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Final

from ..angles import norm360
from ..constants import CELESTIAL_BODIES, SOUTH_NODE, TRUE_NODE, BodyDefinition
from ..errors import EphemerisError
from .base import BodyPosition
from .swe import swe
from .time import ensure_utc, jd_to_datetime

__all__ = [
    "DEFAULT_ENV_KEYS",
    "HOUSE_CODE_BY_NAME",
    "SwissEphemerisProvider",
    "resolve_ephemeris_path",
]

LOG = logging.getLogger(__name__)

DEFAULT_ENV_KEYS: Final[tuple[str, ...]] = (
    "TRANSITSCAN_EPHEMERIS_PATH",
    "SE_EPHE_PATH",
    "SWE_EPH_PATH",
)
"""Environment variables checked (in order) for Swiss ephemeris paths."""

HOUSE_CODE_BY_NAME: Final[Mapping[str, bytes]] = {
    "placidus": b"P",
    "koch": b"K",
    "whole_sign": b"W",
    "equal": b"E",
    "alcabitius": b"B",
    "regiomontanus": b"R",
    "porphyry": b"O",
    "campanus": b"C",
}


def resolve_ephemeris_path(explicit: str | os.PathLike[str] | None = None) -> str | None:
    """Return the first existing directory among ``explicit`` and the env keys."""

    candidates: list[str | os.PathLike[str] | None] = [explicit]
    candidates.extend(os.environ.get(key) for key in DEFAULT_ENV_KEYS)
    for candidate in candidates:
        if not candidate:
            continue
        path = Path(candidate).expanduser()
        if path.is_dir():
            return str(path)
        LOG.debug("ignoring missing ephemeris directory %s", path)
    return None


class SwissEphemerisProvider:
    """Position provider wrapping :mod:`swisseph`.

    ``time_scale`` selects the Julian day scale accepted by :meth:`position`:
    ``"UT"`` routes through ``calc_ut`` while ``"TT"`` uses ``calc`` on
    dynamical time.  ``South Node`` is derived from the true node.
    """

    def __init__(
        self,
        ephemeris_path: str | os.PathLike[str] | None = None,
        *,
        time_scale: str = "UT",
        bodies: Iterable[BodyDefinition] = CELESTIAL_BODIES,
    ) -> None:
        scale = time_scale.upper()
        if scale not in {"UT", "TT"}:
            raise ValueError(f"unsupported ephemeris time scale: {time_scale}")
        self.time_scale = scale
        self.ephemeris_path = resolve_ephemeris_path(ephemeris_path)
        self._codes = {body.name: body.swe_id for body in bodies}
        self._configured = False

    def _ensure_configured(self) -> None:
        if self._configured:
            return
        swe.set_ephe_path(self.ephemeris_path)
        LOG.info(
            "swiss ephemeris configured path=%s scale=%s",
            self.ephemeris_path or "<moshier>",
            self.time_scale,
        )
        self._configured = True

    @property
    def flags(self) -> int:
        return int(swe.FLG_SWIEPH | swe.FLG_SPEED)

    def position(self, jd: float, body: str) -> BodyPosition:
        if body == SOUTH_NODE:
            node = self.position(jd, TRUE_NODE)
            return BodyPosition(
                longitude=norm360(node.longitude + 180.0),
                latitude=-node.latitude,
                distance=node.distance,
                speed=node.speed,
            )
        code = self._codes.get(body)
        if code is None:
            raise EphemerisError(f"unknown body '{body}'")
        self._ensure_configured()
        calc = swe.calc_ut if self.time_scale == "UT" else swe.calc
        try:
            values, _flags = calc(jd, code, self.flags)
        except swe.Error as exc:
            raise EphemerisError(f"swiss ephemeris failed for {body} at jd={jd}: {exc}") from exc
        return BodyPosition(
            longitude=norm360(values[0]),
            latitude=float(values[1]),
            distance=float(values[2]),
            speed=float(values[3]),
        )

    def julian_day(self, moment: _dt.datetime) -> float:
        utc = ensure_utc(moment)
        self._ensure_configured()
        seconds = utc.second + utc.microsecond / 1e6
        try:
            jd_et, jd_ut = swe.utc_to_jd(
                utc.year, utc.month, utc.day, utc.hour, utc.minute, seconds, swe.GREG_CAL
            )
        except swe.Error as exc:
            raise EphemerisError(f"cannot convert {utc.isoformat()} to a Julian day: {exc}") from exc
        return jd_ut if self.time_scale == "UT" else jd_et

    def to_ut(self, jd: float) -> float:
        """Return ``jd`` expressed in Universal Time."""

        if self.time_scale == "UT":
            return jd
        return jd - swe.deltat(jd)

    def to_datetime(self, jd: float) -> _dt.datetime:
        return jd_to_datetime(self.to_ut(jd))

    def houses(
        self,
        jd: float,
        latitude: float,
        longitude: float,
        system: str = "placidus",
    ) -> tuple[tuple[float, ...], float, float, str]:
        """Return ``(cusps, ascendant, midheaven, system_used)`` at ``jd``.

        Quadrant systems fail near the poles; those fall back to Whole Sign.
        """

        code = HOUSE_CODE_BY_NAME.get(system.lower())
        if code is None:
            raise ValueError(f"unsupported house system: {system}")
        self._ensure_configured()
        jd_ut = self.to_ut(jd)
        used = system.lower()
        try:
            cusps, angles = swe.houses_ex(jd_ut, latitude, longitude, code)
        except swe.Error as exc:
            if used == "whole_sign":
                raise EphemerisError(f"house calculation failed: {exc}") from exc
            LOG.warning(
                {
                    "event": "house_system_fallback",
                    "from": used,
                    "to": "whole_sign",
                    "latitude": latitude,
                    "reason": str(exc),
                }
            )
            used = "whole_sign"
            cusps, angles = swe.houses_ex(jd_ut, latitude, longitude, HOUSE_CODE_BY_NAME[used])
        return (
            tuple(norm360(c) for c in cusps[:12]),
            norm360(angles[0]),
            norm360(angles[1]),
            used,
        )
