"""Ephemeris provider contract and bundled adapters."""

from __future__ import annotations

from .base import BodyPosition, EphemerisProvider
from .linear import LinearMotionProvider
from .swiss import SwissEphemerisProvider, resolve_ephemeris_path
from .time import ensure_utc, jd_to_datetime, jd_to_iso, julian_day, parse_iso

__all__ = [
    "BodyPosition",
    "EphemerisProvider",
    "LinearMotionProvider",
    "SwissEphemerisProvider",
    "resolve_ephemeris_path",
    "ensure_utc",
    "jd_to_datetime",
    "jd_to_iso",
    "julian_day",
    "parse_iso",
]
