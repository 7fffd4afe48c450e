"""Process bootstrap helpers for the transit scan entry points."""

from __future__ import annotations

from .logging import configure_logging

__all__ = ["configure_logging"]
