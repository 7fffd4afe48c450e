"""Relationship and body catalogues used by the alignment scanner."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final

__all__ = [
    "RelationshipDefinition",
    "DEFAULT_RELATIONSHIPS",
    "BodyDefinition",
    "CELESTIAL_BODIES",
    "SOUTH_NODE",
    "TRUE_NODE",
    "LILITH",
    "ASCENDANT",
    "MIDHEAVEN",
    "LUMINARIES",
    "ANGLE_POINTS",
    "TRANSIT_ORB_SCALE",
    "DEFAULT_TRANSIT_BODIES",
    "DEFAULT_NATAL_BODIES",
    "ZODIAC_SIGNS",
    "MOON_PERIGEE_AU",
    "MOON_APOGEE_AU",
]


@dataclass(frozen=True, slots=True)
class RelationshipDefinition:
    """A named target separation with its base orb in degrees."""

    name: str
    angle: float
    orb: float
    symbol: str = ""

    def __post_init__(self) -> None:
        if not math.isfinite(self.angle) or not 0.0 <= self.angle <= 180.0:
            raise ValueError(
                f"relationship '{self.name}' angle must lie in [0, 180], got {self.angle}"
            )
        if not math.isfinite(self.orb) or self.orb <= 0.0:
            raise ValueError(f"relationship '{self.name}' orb must be positive, got {self.orb}")


# Order is a behavioural contract: the first in-orb entry wins for a pair.
DEFAULT_RELATIONSHIPS: Final[tuple[RelationshipDefinition, ...]] = (
    RelationshipDefinition("Conjunction", 0.0, 8.0, "☌"),
    RelationshipDefinition("Opposition", 180.0, 8.0, "☍"),
    RelationshipDefinition("Trine", 120.0, 7.0, "△"),
    RelationshipDefinition("Square", 90.0, 7.0, "□"),
    RelationshipDefinition("Sextile", 60.0, 5.0, "⚹"),
    RelationshipDefinition("Quincunx", 150.0, 2.5, "⚻"),
    RelationshipDefinition("Semi-sextile", 30.0, 1.5, "⚺"),
)


@dataclass(frozen=True, slots=True)
class BodyDefinition:
    """Catalogue entry mapping a body name to its Swiss Ephemeris id."""

    name: str
    swe_id: int


CELESTIAL_BODIES: Final[tuple[BodyDefinition, ...]] = (
    BodyDefinition("Sun", 0),
    BodyDefinition("Moon", 1),
    BodyDefinition("Mercury", 2),
    BodyDefinition("Venus", 3),
    BodyDefinition("Mars", 4),
    BodyDefinition("Jupiter", 5),
    BodyDefinition("Saturn", 6),
    BodyDefinition("Uranus", 7),
    BodyDefinition("Neptune", 8),
    BodyDefinition("Pluto", 9),
    BodyDefinition("Chiron", 15),
    BodyDefinition("True Node", 11),
    BodyDefinition("Lilith", 12),
)

TRUE_NODE: Final[str] = "True Node"
SOUTH_NODE: Final[str] = "South Node"
LILITH: Final[str] = "Lilith"
ASCENDANT: Final[str] = "Ascendant"
MIDHEAVEN: Final[str] = "Midheaven"

LUMINARIES: Final[frozenset[str]] = frozenset({"Sun", "Moon"})
ANGLE_POINTS: Final[frozenset[str]] = frozenset({ASCENDANT, MIDHEAVEN})

# Moving body against a fixed natal point: half of the natal orb.
TRANSIT_ORB_SCALE: Final[float] = 0.5

DEFAULT_NATAL_BODIES: Final[tuple[str, ...]] = tuple(
    body.name for body in CELESTIAL_BODIES
) + (SOUTH_NODE,)

DEFAULT_TRANSIT_BODIES: Final[tuple[str, ...]] = tuple(
    body.name for body in CELESTIAL_BODIES if body.name not in {TRUE_NODE, LILITH}
) + (SOUTH_NODE,)

ZODIAC_SIGNS: Final[tuple[str, ...]] = (
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
)

# Geocentric Moon distance bounds, roughly 364,600 km and 405,400 km.
MOON_PERIGEE_AU: Final[float] = 0.00244
MOON_APOGEE_AU: Final[float] = 0.00271
