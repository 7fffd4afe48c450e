from __future__ import annotations

import pytest

from transitscan.angles import separation
from transitscan.constants import DEFAULT_RELATIONSHIPS, RelationshipDefinition
from transitscan.orbs import OrbPolicy, strength, transit_orb_policy

hypothesis = pytest.importorskip("hypothesis")
given = hypothesis.given
st = hypothesis.strategies

REL = {rel.name: rel for rel in DEFAULT_RELATIONSHIPS}


def test_relationship_priority_order() -> None:
    assert [rel.name for rel in DEFAULT_RELATIONSHIPS] == [
        "Conjunction",
        "Opposition",
        "Trine",
        "Square",
        "Sextile",
        "Quincunx",
        "Semi-sextile",
    ]


def test_relationship_definition_validates() -> None:
    with pytest.raises(ValueError):
        RelationshipDefinition("Bad", 200.0, 1.0)
    with pytest.raises(ValueError):
        RelationshipDefinition("Bad", 90.0, 0.0)


def test_transit_policy_modifiers() -> None:
    policy = transit_orb_policy()
    assert policy(REL["Trine"], "Mars", "Saturn") == pytest.approx(3.5)
    assert policy(REL["Trine"], "Mars", "Moon") == pytest.approx(4.375)
    assert policy(REL["Square"], "Mars", "Ascendant") == pytest.approx(2.625)
    assert policy(REL["Conjunction"], "Sun", "Midheaven") == pytest.approx(3.75)


def test_policy_table_and_overrides() -> None:
    policy = OrbPolicy()
    table = policy.table(DEFAULT_RELATIONSHIPS, "Venus", "Jupiter")
    assert table["Conjunction"] == pytest.approx(8.0)
    assert table["Semi-sextile"] == pytest.approx(1.5)

    custom = transit_orb_policy(luminary_factor=1.0)
    assert custom.context_scale == pytest.approx(0.5)
    assert custom(REL["Opposition"], "Sun", "Mars") == pytest.approx(4.0)


def test_exact_trine_scores_full_strength() -> None:
    deviation = abs(separation(10.0, 130.0) - REL["Trine"].angle)
    assert strength(deviation, 7.0) == 100


def test_strength_bounds() -> None:
    assert strength(0.0, 5.0) == 100
    assert strength(5.0, 5.0) == 0
    assert strength(6.0, 5.0) == 0
    assert strength(1.0, 0.0) == 100
    assert strength(1.0, 4.0) == 75


@given(
    orb=st.floats(min_value=0.1, max_value=20.0),
    d1=st.floats(min_value=0.0, max_value=20.0),
    d2=st.floats(min_value=0.0, max_value=20.0),
)
def test_strength_monotone_in_deviation(orb: float, d1: float, d2: float) -> None:
    lo, hi = sorted((d1, d2))
    assert strength(lo, orb) >= strength(hi, orb)
    assert 0 <= strength(hi, orb) <= 100
