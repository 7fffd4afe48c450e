"""Exception hierarchy shared by the scanner, providers and CLI."""

from __future__ import annotations

__all__ = [
    "TransitScanError",
    "ScanConfigError",
    "ScanCancelled",
    "EphemerisError",
]


class TransitScanError(Exception):
    """Base class for errors raised by :mod:`transitscan`."""


class ScanConfigError(TransitScanError, ValueError):
    """Raised when a scan request is rejected before any sampling happens."""


class ScanCancelled(TransitScanError):
    """Raised when a caller-supplied cancellation check fires mid-scan."""


class EphemerisError(TransitScanError, RuntimeError):
    """Raised when the ephemeris backend cannot produce a position."""
