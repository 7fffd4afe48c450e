"""Shared fixtures for the transit scan test-suite."""

from __future__ import annotations

from collections.abc import Callable, Mapping

import pytest

from transitscan.ephemeris.linear import LinearMotionProvider

J2000 = 2451545.0


@pytest.fixture
def epoch() -> float:
    return J2000


@pytest.fixture
def linear_provider(epoch: float) -> Callable[..., LinearMotionProvider]:
    """Factory building straight-line providers anchored at ``epoch``."""

    def _build(bodies: Mapping[str, tuple[float, float]], epoch_jd: float | None = None) -> LinearMotionProvider:
        return LinearMotionProvider(bodies, epoch_jd=epoch if epoch_jd is None else epoch_jd)

    return _build


@pytest.fixture(autouse=True)
def _clear_ephemeris_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("TRANSITSCAN_EPHEMERIS_PATH", "SE_EPHE_PATH", "SWE_EPH_PATH", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
