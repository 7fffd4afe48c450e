"""Orb policy and strength scoring for alignments."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .constants import ANGLE_POINTS, LUMINARIES, TRANSIT_ORB_SCALE, RelationshipDefinition

__all__ = ["OrbPolicy", "transit_orb_policy", "strength"]


@dataclass(frozen=True)
class OrbPolicy:
    """Callable policy resolving the allowed orb for a pair of participants.

    The base orb of the relationship is multiplied by ``context_scale``, then
    by ``luminary_factor`` when either participant is a luminary, then by
    ``angle_factor`` when either participant is a chart angle.  The modifiers
    are independent; no floor or ceiling is applied.
    """

    context_scale: float = 1.0
    luminary_factor: float = 1.25
    angle_factor: float = 0.75
    luminaries: frozenset[str] = field(default=LUMINARIES)
    angle_points: frozenset[str] = field(default=ANGLE_POINTS)

    def __call__(self, relationship: RelationshipDefinition, body_a: str, body_b: str) -> float:
        orb = relationship.orb * self.context_scale
        if body_a in self.luminaries or body_b in self.luminaries:
            orb *= self.luminary_factor
        if body_a in self.angle_points or body_b in self.angle_points:
            orb *= self.angle_factor
        return orb

    def table(
        self,
        relationships: Iterable[RelationshipDefinition],
        body_a: str,
        body_b: str,
    ) -> dict[str, float]:
        """Return the effective orb per relationship name for one pair."""

        return {rel.name: self(rel, body_a, body_b) for rel in relationships}


def transit_orb_policy(**overrides: object) -> OrbPolicy:
    """Return the policy used for moving bodies against fixed natal points."""

    overrides.setdefault("context_scale", TRANSIT_ORB_SCALE)
    return OrbPolicy(**overrides)  # type: ignore[arg-type]


def strength(deviation: float, orb_limit: float) -> int:
    """Score closeness to exact on a 0-100 scale (100 = exact)."""

    if orb_limit == 0:
        return 100
    score = round((1.0 - deviation / orb_limit) * 100.0)
    return max(0, min(100, int(score)))
