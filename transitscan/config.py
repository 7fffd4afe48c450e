"""Configuration models and helpers for transit scan settings."""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import DEFAULT_RELATIONSHIPS, TRANSIT_ORB_SCALE, RelationshipDefinition
from .ephemeris.base import EphemerisProvider
from .ephemeris.swiss import resolve_ephemeris_path
from .errors import ScanConfigError
from .orbs import OrbPolicy
from .scanner import AlignmentScanner

__all__ = [
    "RelationshipCfg",
    "ScanSettings",
    "default_settings",
    "load_settings",
    "save_settings",
]

class RelationshipCfg(BaseModel):
    """One angular relationship as written in a settings file."""

    name: str
    angle: float = Field(ge=0.0, le=180.0)
    orb: float = Field(gt=0.0)
    symbol: str = ""

    def definition(self) -> RelationshipDefinition:
        return RelationshipDefinition(self.name, self.angle, self.orb, self.symbol)


def _default_relationships() -> List[RelationshipCfg]:
    return [
        RelationshipCfg(name=rel.name, angle=rel.angle, orb=rel.orb, symbol=rel.symbol)
        for rel in DEFAULT_RELATIONSHIPS
    ]


class ScanSettings(BaseModel):
    """Tunables for scans, refinement and return searches."""

    step_days: float = 0.5
    refine_window_days: float = 1.0
    refine_tol_days: float = 1e-4
    refine_max_iter: int = 30
    return_half_window: float = 5.0
    return_step: float = 0.5
    return_iterations: int = 25
    transit_orb_scale: float = TRANSIT_ORB_SCALE
    luminary_factor: float = 1.25
    angle_factor: float = 0.75
    relationships: List[RelationshipCfg] = Field(default_factory=_default_relationships)
    ephemeris_path: Optional[str] = None
    time_scale: Literal["UT", "TT"] = "UT"

    @field_validator(
        "step_days",
        "refine_window_days",
        "refine_tol_days",
        "return_half_window",
        "return_step",
        "transit_orb_scale",
        "luminary_factor",
        "angle_factor",
    )
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0.0:
            raise ValueError("must be positive")
        return value

    @field_validator("refine_max_iter", "return_iterations")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("time_scale", mode="before")
    @classmethod
    def _upper_scale(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("relationships")
    @classmethod
    def _unique_relationships(cls, value: List[RelationshipCfg]) -> List[RelationshipCfg]:
        if not value:
            raise ValueError("at least one relationship is required")
        names = [rel.name for rel in value]
        if len(set(names)) != len(names):
            raise ValueError("relationship names must be unique")
        return value

    def relationship_definitions(self) -> tuple[RelationshipDefinition, ...]:
        return tuple(rel.definition() for rel in self.relationships)

    def orb_policy(self) -> OrbPolicy:
        return OrbPolicy(
            context_scale=self.transit_orb_scale,
            luminary_factor=self.luminary_factor,
            angle_factor=self.angle_factor,
        )

    def build_scanner(self, provider: EphemerisProvider) -> AlignmentScanner:
        return AlignmentScanner(
            provider,
            self.orb_policy(),
            refine_window_days=self.refine_window_days,
            refine_tol_days=self.refine_tol_days,
            refine_max_iter=self.refine_max_iter,
        )


def default_settings() -> ScanSettings:
    """Instantiate settings populated with defaults and environment overrides."""

    return _apply_env(ScanSettings())


def _apply_env(settings: ScanSettings) -> ScanSettings:
    if settings.ephemeris_path:
        return settings
    discovered = resolve_ephemeris_path()
    if discovered is None:
        return settings
    return settings.model_copy(update={"ephemeris_path": discovered})


def load_settings(path: Optional[Path] = None) -> ScanSettings:
    """Load settings from a YAML file; a missing ``path`` yields defaults.

    An explicit ``ephemeris_path`` in the file wins over the environment;
    environment paths are only taken when they name an existing directory.
    """

    if path is None:
        return default_settings()
    source_path = Path(path)
    if not source_path.exists():
        raise ScanConfigError(f"settings file not found: {source_path}")
    with source_path.open("r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ScanConfigError(f"invalid YAML in {source_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ScanConfigError(f"{source_path} must contain a mapping at the top level")
    try:
        settings = ScanSettings(**raw)
    except ValidationError as exc:
        raise ScanConfigError(f"invalid settings in {source_path}: {exc}") from exc
    return _apply_env(settings)


def save_settings(settings: ScanSettings, path: Path) -> Path:
    """Persist ``settings`` to ``path`` as YAML."""

    target_path = Path(path)
    target_path.parent.mkdir(parents=True, exist_ok=True)
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(settings.model_dump(), handle, sort_keys=False, allow_unicode=True)
    return target_path
