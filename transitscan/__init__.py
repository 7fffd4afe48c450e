"""Transit alignment scanning with exact-time refinement."""

from __future__ import annotations

from .angles import is_between, norm360, separation, signed_delta
from .chart import BirthData, ReferenceChart, ReferencePoint, build_reference_chart
from .config import ScanSettings, load_settings
from .constants import DEFAULT_RELATIONSHIPS, RelationshipDefinition
from .ephemeris import (
    BodyPosition,
    EphemerisProvider,
    LinearMotionProvider,
    SwissEphemerisProvider,
)
from .errors import EphemerisError, ScanCancelled, ScanConfigError, TransitScanError
from .events import AlignmentEvent, AlignmentKey, ReturnEvent
from .orbs import OrbPolicy, strength, transit_orb_policy
from .refine import RefineResult, bisect_crossing, golden_section_minimize
from .report import build_transit_report
from .returns import ReturnSearch, find_return, solar_return
from .scanner import AlignmentScanner, ScanRequest, scan_alignments

__all__ = [
    "AlignmentEvent",
    "AlignmentKey",
    "AlignmentScanner",
    "BirthData",
    "BodyPosition",
    "DEFAULT_RELATIONSHIPS",
    "EphemerisError",
    "EphemerisProvider",
    "LinearMotionProvider",
    "OrbPolicy",
    "ReferenceChart",
    "ReferencePoint",
    "RefineResult",
    "RelationshipDefinition",
    "ReturnEvent",
    "ReturnSearch",
    "ScanCancelled",
    "ScanConfigError",
    "ScanRequest",
    "ScanSettings",
    "SwissEphemerisProvider",
    "TransitScanError",
    "bisect_crossing",
    "build_reference_chart",
    "build_transit_report",
    "find_return",
    "golden_section_minimize",
    "is_between",
    "load_settings",
    "norm360",
    "scan_alignments",
    "separation",
    "signed_delta",
    "solar_return",
    "strength",
    "transit_orb_policy",
]

__version__ = "0.1.0"
