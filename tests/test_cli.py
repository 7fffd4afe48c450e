from __future__ import annotations

import datetime as dt
import json

import pytest
from click.testing import CliRunner

import transitscan.cli as cli
from transitscan.constants import DEFAULT_NATAL_BODIES
from transitscan.ephemeris.linear import LinearMotionProvider
from transitscan.ephemeris.time import julian_day, parse_iso

BIRTH = dt.datetime(1990, 5, 17, 12, 0, tzinfo=dt.timezone.utc)


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> list[object]:
    levels: list[object] = []
    monkeypatch.setattr(cli, "configure_logging", lambda level=None: levels.append(level))
    return levels


def _use_provider(monkeypatch: pytest.MonkeyPatch, provider: LinearMotionProvider) -> None:
    monkeypatch.setattr(cli, "_make_provider", lambda settings: provider)


def test_scan_mock_emits_json_lines() -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli.main,
        [
            "scan-mock",
            "--start", "2024-01-01T00:00:00Z",
            "--end", "2024-01-31T00:00:00Z",
            "--step", "6",
            "--body", "Mars",
            "--lon0", "100",
            "--speed", "1",
            "--natal-point", "Venus",
            "--natal-lon", "120",
            "--relationship", "conjunction",
        ],
    )

    assert result.exit_code == 0, result.output
    lines = [json.loads(line) for line in result.output.strip().splitlines()]
    assert len(lines) == 1
    payload = lines[0]
    assert payload["relationship"] == "Conjunction"
    assert payload["moving_body"] == "Mars"
    assert payload["reference_point"] == "Venus"
    assert payload["strength"] == 100
    exact = parse_iso(payload["exact_time"])
    assert abs(exact - dt.datetime(2024, 1, 21, tzinfo=dt.timezone.utc)) < dt.timedelta(seconds=30)


def test_scan_mock_rejects_reversed_window() -> None:
    result = CliRunner().invoke(
        cli.main,
        [
            "scan-mock",
            "--start", "2024-02-01T00:00:00Z",
            "--end", "2024-01-01T00:00:00Z",
            "--body", "Mars",
            "--lon0", "0",
            "--speed", "1",
            "--natal-point", "Venus",
            "--natal-lon", "0",
        ],
    )

    assert result.exit_code != 0
    assert "must be after" in result.output


def test_scan_mock_rejects_bad_timestamp() -> None:
    result = CliRunner().invoke(
        cli.main,
        [
            "scan-mock",
            "--start", "soon",
            "--end", "2024-01-01T00:00:00Z",
            "--body", "Mars",
            "--lon0", "0",
            "--speed", "1",
            "--natal-point", "Venus",
            "--natal-lon", "0",
        ],
    )

    assert result.exit_code == 2
    assert "invalid timestamp" in result.output


def test_return_command_reports_instant(monkeypatch: pytest.MonkeyPatch) -> None:
    provider = LinearMotionProvider({"Sun": (56.0, 360.0 / 365.25)}, epoch_jd=julian_day(BIRTH))
    _use_provider(monkeypatch, provider)

    result = CliRunner().invoke(
        cli.main,
        ["return", "--date", "1990-05-17", "--time", "12:00", "--year", "1991"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["status"] == "found"
    assert payload["target_longitude"] == pytest.approx(56.0)
    expected = BIRTH + dt.timedelta(days=365.25)
    assert abs(parse_iso(payload["time"]) - expected) < dt.timedelta(seconds=2)


def test_return_command_not_found(monkeypatch: pytest.MonkeyPatch) -> None:
    provider = LinearMotionProvider({"Sun": (56.0, 360.0 / 200.0)}, epoch_jd=julian_day(BIRTH))
    _use_provider(monkeypatch, provider)

    result = CliRunner().invoke(
        cli.main,
        ["return", "--date", "1990-05-17", "--time", "12:00", "--year", "1991"],
    )

    assert result.exit_code == 1
    assert json.loads(result.output)["status"] == "not_found"


def test_scan_command_prints_report(monkeypatch: pytest.MonkeyPatch) -> None:
    bodies = {name: (30.0 * index, 1.0 - 0.2 * index) for index, name in enumerate(DEFAULT_NATAL_BODIES)}
    provider = LinearMotionProvider(bodies, epoch_jd=julian_day(BIRTH))
    _use_provider(monkeypatch, provider)

    result = CliRunner().invoke(
        cli.main,
        [
            "--log-level", "DEBUG",
            "scan",
            "--date", "1990-05-17",
            "--time", "12:00",
            "--lat", "51.5",
            "--lon", "-0.12",
            "--start", "2024-01-01T00:00:00Z",
            "--days", "10",
            "--step", "1",
            "--now", "2024-01-03T00:00:00Z",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert set(payload) >= {"natal", "window", "all_transits", "today", "week", "important", "all_events", "retrogrades", "lunar", "now"}
    assert payload["window"] == {"start": "2024-01-01T00:00:00Z", "end": "2024-01-11T00:00:00Z"}
    assert "Ascendant" not in payload["natal"]["points"]
    assert "True Node" not in payload["retrogrades"]
    assert "Saturn" in payload["retrogrades"]
    assert "Mars" not in payload["retrogrades"]
    assert payload["lunar"]["name"]


def _natal_linear_provider() -> LinearMotionProvider:
    bodies = {name: (30.0 * index, 1.0 - 0.2 * index) for index, name in enumerate(DEFAULT_NATAL_BODIES)}
    return LinearMotionProvider(bodies, epoch_jd=julian_day(BIRTH))


def _scan_args(*extra: str) -> list[str]:
    return [
        "scan",
        "--date", "1990-05-17",
        "--time", "12:00",
        "--lat", "51.5",
        "--lon", "-0.12",
        "--start", "2024-01-01T00:00:00Z",
        "--days", "10",
        "--step", "1",
        *extra,
    ]


def test_now_anchors_views_outside_the_scan_window(monkeypatch: pytest.MonkeyPatch) -> None:
    provider = _natal_linear_provider()
    _use_provider(monkeypatch, provider)

    result = CliRunner().invoke(cli.main, _scan_args("--now", "2030-01-01T00:00:00Z"))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["now"] == "2030-01-01T00:00:00Z"
    assert payload["window"] == {"start": "2024-01-01T00:00:00Z", "end": "2024-01-11T00:00:00Z"}
    assert payload["today"] == []
    assert payload["week"] == []
    now_jd = julian_day(dt.datetime(2030, 1, 1, tzinfo=dt.timezone.utc))
    expected_lunar = json.loads(json.dumps(cli.lunar_snapshot(provider, now_jd)))
    assert payload["lunar"] == expected_lunar


def test_week_view_starts_at_now(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_provider(monkeypatch, _natal_linear_provider())
    now = dt.datetime(2024, 1, 5, tzinfo=dt.timezone.utc)

    result = CliRunner().invoke(cli.main, _scan_args("--now", "2024-01-05T00:00:00Z"))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    for row in payload["week"]:
        assert now <= parse_iso(row["exact_time"]) < now + dt.timedelta(days=7)
    expected_week = [
        row for row in payload["all_events"]
        if now <= parse_iso(row["exact_time"]) < now + dt.timedelta(days=7)
    ]
    assert sorted(row["exact_time"] for row in payload["week"]) == sorted(row["exact_time"] for row in expected_week)


def test_scan_rejects_bad_now(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_provider(monkeypatch, _natal_linear_provider())

    result = CliRunner().invoke(cli.main, _scan_args("--now", "someday"))

    assert result.exit_code == 2
    assert "invalid timestamp" in result.output


def test_scan_command_rejects_bad_latitude() -> None:
    result = CliRunner().invoke(
        cli.main,
        ["scan", "--date", "1990-05-17", "--time", "12:00", "--lat", "99", "--lon", "0"],
    )

    assert result.exit_code == 2
    assert "latitude" in result.output


def test_log_level_is_forwarded(_quiet_logging) -> None:
    CliRunner().invoke(cli.main, ["--log-level", "INFO", "scan-mock", "--help"])

    assert _quiet_logging == ["INFO"]
