"""Circle-aware angle helpers.

Every longitude handled by the scanner lives on a 360° circle.  Raw
subtraction invites bugs around the 0°/360° seam, so the helpers here are
the only place the wrap-around convention is spelled out:

* :func:`norm360` reduces to ``[0, 360)``;
* :func:`separation` is the unsigned shortest arc in ``[0, 180]``;
* :func:`signed_delta` is the signed shortest arc in ``(-180, 180]``;
* :func:`is_between` answers "did motion from ``start`` to ``end`` pass
  ``target``?" without caring where the seam is.
"""

from __future__ import annotations

import math
from typing import Final

__all__ = [
    "norm360",
    "separation",
    "signed_delta",
    "is_between",
    "sign_index",
]


EPSILON_DEG: Final[float] = 1e-9


def norm360(x: float) -> float:
    """Normalise ``x`` into the ``[0, 360)`` range."""

    y = math.fmod(float(x), 360.0)
    if y < 0.0:
        y += 360.0
    if y >= 360.0:
        y = 0.0
    return y


def separation(a: float, b: float) -> float:
    """Return the shortest unsigned arc between ``a`` and ``b`` in ``[0, 180]``."""

    d = math.fmod(abs(float(a) - float(b)), 360.0)
    return 360.0 - d if d > 180.0 else d


def signed_delta(a: float, b: float) -> float:
    """Smallest signed delta from ``a`` to ``b`` in degrees, in ``(-180, 180]``."""

    d = norm360(float(b) - float(a))
    return d - 360.0 if d > 180.0 else d


def is_between(start: float, end: float, target: float) -> bool:
    """Return ``True`` when the short arc ``start`` → ``end`` covers ``target``.

    The arc is always the shorter of the two arcs joining the endpoints, so a
    step taken during retrograde motion (``end`` behind ``start``) is handled
    by walking the arc backwards.  Both endpoints are inclusive.
    """

    span = signed_delta(start, end)
    offset = signed_delta(start, target)
    if span >= 0.0:
        return -EPSILON_DEG <= offset <= span + EPSILON_DEG
    return span - EPSILON_DEG <= offset <= EPSILON_DEG


def sign_index(longitude: float) -> int:
    """Zodiac sign index (0 = Aries) of ``longitude``."""

    return min(int(norm360(longitude) // 30.0), 11)
