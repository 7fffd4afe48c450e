"""Deferred import of :mod:`swisseph`.

The scanner core and the linear provider work without pyswisseph; only the
Swiss provider touches :data:`swe`, and the module is imported on first
attribute access.
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
from typing import Any

from ..errors import EphemerisError

__all__ = ["swe", "has_swe"]

LOG = logging.getLogger(__name__)

_MODULE_NAME = "swisseph"


class _LazySwisseph:
    """Attribute proxy that imports pyswisseph on first use."""

    __slots__ = ("_module",)

    def __init__(self) -> None:
        self._module: Any | None = None

    def _load(self) -> Any:
        if self._module is None:
            try:
                self._module = importlib.import_module(_MODULE_NAME)
            except ImportError as exc:
                raise EphemerisError(
                    "pyswisseph is required for the Swiss ephemeris provider; "
                    "install 'pyswisseph' and point SE_EPHE_PATH at the data files"
                ) from exc
            LOG.debug("loaded swisseph %s", getattr(self._module, "version", "?"))
        return self._module

    def __getattr__(self, item: str) -> Any:
        return getattr(self._load(), item)


swe = _LazySwisseph()


def has_swe() -> bool:
    """Return ``True`` when pyswisseph can be imported."""

    return importlib.util.find_spec(_MODULE_NAME) is not None
