from __future__ import annotations

from pathlib import Path

import pytest

from transitscan.config import ScanSettings, load_settings, save_settings
from transitscan.errors import ScanConfigError
from transitscan.scanner import AlignmentScanner


def test_defaults() -> None:
    settings = load_settings()

    assert settings.step_days == 0.5
    assert settings.refine_max_iter == 30
    assert settings.return_iterations == 25
    assert settings.time_scale == "UT"
    assert settings.ephemeris_path is None
    assert [rel.name for rel in settings.relationship_definitions()][:2] == [
        "Conjunction",
        "Opposition",
    ]


def test_yaml_overrides(tmp_path: Path) -> None:
    path = tmp_path / "scan.yaml"
    path.write_text(
        "step_days: 0.25\n"
        "time_scale: tt\n"
        "transit_orb_scale: 1.0\n"
        "relationships:\n"
        "  - {name: Conjunction, angle: 0, orb: 10}\n"
        "  - {name: Square, angle: 90, orb: 6}\n",
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.step_days == 0.25
    assert settings.time_scale == "TT"
    rels = settings.relationship_definitions()
    assert [(rel.name, rel.orb) for rel in rels] == [("Conjunction", 10.0), ("Square", 6.0)]
    assert settings.orb_policy()(rels[0], "Mars", "Venus") == pytest.approx(10.0)


@pytest.mark.parametrize(
    "body",
    [
        "step_days: 0\n",
        "refine_max_iter: 0\n",
        "time_scale: TAI\n",
        "relationships: []\n",
        "relationships:\n  - {name: A, angle: 10, orb: 1}\n  - {name: A, angle: 20, orb: 1}\n",
        "relationships:\n  - {name: A, angle: 200, orb: 1}\n",
        "- just\n- a list\n",
        "step_days: [unclosed\n",
    ],
)
def test_invalid_settings_raise_config_error(tmp_path: Path, body: str) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(ScanConfigError):
        load_settings(path)


def test_missing_settings_file(tmp_path: Path) -> None:
    with pytest.raises(ScanConfigError):
        load_settings(tmp_path / "absent.yaml")


def test_environment_supplies_ephemeris_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    se_dir = tmp_path / "se"
    swe_dir = tmp_path / "swe"
    ts_dir = tmp_path / "ts"
    for directory in (se_dir, swe_dir, ts_dir):
        directory.mkdir()

    monkeypatch.setenv("SWE_EPH_PATH", str(swe_dir))
    assert load_settings().ephemeris_path == str(swe_dir)

    monkeypatch.setenv("SE_EPHE_PATH", str(se_dir))
    assert load_settings().ephemeris_path == str(se_dir)

    monkeypatch.setenv("TRANSITSCAN_EPHEMERIS_PATH", str(ts_dir))
    assert load_settings().ephemeris_path == str(ts_dir)

    path = tmp_path / "scan.yaml"
    path.write_text("ephemeris_path: /explicit\n", encoding="utf-8")
    assert load_settings(path).ephemeris_path == "/explicit"


def test_environment_ignores_missing_directories(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    existing = tmp_path / "ephe"
    existing.mkdir()
    monkeypatch.setenv("TRANSITSCAN_EPHEMERIS_PATH", str(tmp_path / "absent"))
    assert load_settings().ephemeris_path is None

    monkeypatch.setenv("SE_EPHE_PATH", str(existing))
    assert load_settings().ephemeris_path == str(existing)


def test_build_scanner_applies_refine_options(linear_provider) -> None:
    settings = ScanSettings(refine_window_days=2.0, refine_tol_days=1e-5, luminary_factor=1.0)
    scanner = settings.build_scanner(linear_provider({"Mars": (0.0, 1.0)}))

    assert isinstance(scanner, AlignmentScanner)
    assert scanner.refine_window_days == 2.0
    assert scanner.refine_tol_days == 1e-5
    assert scanner.orb_policy.luminary_factor == 1.0
    assert scanner.orb_policy.context_scale == 0.5


def test_save_then_load(tmp_path: Path) -> None:
    original = ScanSettings(step_days=0.125, return_half_window=3.0)
    path = save_settings(original, tmp_path / "nested" / "scan.yaml")

    assert load_settings(path) == original
