"""Command line interface for transit scans and return searches."""

from __future__ import annotations

import datetime as _dt
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, Dict, Optional

import click

from .boot.logging import configure_logging
from .chart import BirthData, ReferencePoint, build_reference_chart
from .config import ScanSettings, load_settings
from .constants import DEFAULT_RELATIONSHIPS, DEFAULT_TRANSIT_BODIES
from .ephemeris.base import EphemerisProvider
from .ephemeris.linear import LinearMotionProvider
from .ephemeris.swe import has_swe
from .ephemeris.swiss import SwissEphemerisProvider
from .ephemeris.time import jd_to_iso, julian_day, parse_iso
from .errors import EphemerisError, ScanConfigError
from .report import build_transit_report, lunar_snapshot, retrogrades
from .returns import solar_return
from .scanner import ScanRequest

_RELATIONSHIP_NAMES = [rel.name for rel in DEFAULT_RELATIONSHIPS]


def _parse_timestamp(value: str, option: str) -> _dt.datetime:
    try:
        return parse_iso(value)
    except ValueError as exc:
        raise click.BadParameter(f"invalid timestamp '{value}'", param_hint=option) from exc


def _parse_birth_moment(date: str, time: str) -> _dt.datetime:
    try:
        return _dt.datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M")
    except ValueError as exc:
        raise click.BadParameter(
            f"expected YYYY-MM-DD and HH:MM, got '{date}' '{time}'",
            param_hint="--date/--time",
        ) from exc


def _iso_formatter(provider: EphemerisProvider) -> Callable[[float], str]:
    def render(jd: float) -> str:
        moment = provider.to_datetime(jd).astimezone(_dt.timezone.utc)
        return moment.replace(microsecond=0).isoformat().replace("+00:00", "Z")

    return render


def _settings(path: Optional[Path]) -> ScanSettings:
    try:
        return load_settings(path)
    except ScanConfigError as exc:
        raise click.BadParameter(str(exc), param_hint="--settings") from exc


def _make_provider(settings: ScanSettings) -> EphemerisProvider:
    """Return the ephemeris backing the ``scan`` and ``return`` commands."""

    if not has_swe():
        raise click.ClickException("pyswisseph is not installed; run: pip install pyswisseph")
    return SwissEphemerisProvider(settings.ephemeris_path, time_scale=settings.time_scale)


def _emit(payload: Dict[str, Any], *, indent: Optional[int] = None) -> None:
    click.echo(json.dumps(payload, indent=indent, ensure_ascii=False))


_birth_options = [
    click.option("--date", "birth_date", required=True, help="Birth date (YYYY-MM-DD)"),
    click.option("--time", "birth_time", required=True, help="Birth time (HH:MM, local)"),
    click.option("--tz", "timezone", default="UTC", show_default=True, help="IANA timezone of the birth time"),
]


def _with_birth_options(func: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(_birth_options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--log-level",
    default=None,
    help="Logging level (name, number, quiet or verbose; overrides LOG_LEVEL)",
)
def main(log_level: Optional[str]) -> None:
    """Transit alignment scanning utilities."""

    configure_logging(level=log_level)


@main.command("scan")
@_with_birth_options
@click.option("--lat", "latitude", type=float, required=True, help="Birth latitude (-90..90)")
@click.option("--lon", "longitude", type=float, required=True, help="Birth longitude (-180..180)")
@click.option("--house-system", default="placidus", show_default=True, help="House system for the chart angles")
@click.option("--start", "start_iso", default=None, help="Scan window start (ISO-8601 UTC, default now)")
@click.option(
    "--now",
    "now_iso",
    default=None,
    help="Instant anchoring the today/week views, retrogrades and lunar data (ISO-8601 UTC, default now)",
)
@click.option("--days", type=float, default=30.0, show_default=True, help="Scan window length in days")
@click.option("--step", "step_days", type=float, default=None, help="Sample spacing in days")
@click.option("--top-n", type=int, default=10, show_default=True, help="Rows in the 'important' view")
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file",
)
def scan(
    birth_date: str,
    birth_time: str,
    timezone: str,
    latitude: float,
    longitude: float,
    house_system: str,
    start_iso: Optional[str],
    now_iso: Optional[str],
    days: float,
    step_days: Optional[float],
    top_n: int,
    settings_path: Optional[Path],
) -> None:
    """Scan transits against a natal chart and print a JSON report."""

    if days < 0:
        raise click.BadParameter("must not be negative", param_hint="--days")
    settings = _settings(settings_path)
    moment = _parse_birth_moment(birth_date, birth_time)
    current = _dt.datetime.now(_dt.timezone.utc)
    start = _parse_timestamp(start_iso, "--start") if start_iso else current
    now = _parse_timestamp(now_iso, "--now") if now_iso else current

    try:
        birth = BirthData(moment, latitude, longitude, house_system=house_system, timezone=timezone)
    except ScanConfigError as exc:
        raise click.BadParameter(str(exc)) from exc

    provider = _make_provider(settings)
    try:
        chart = build_reference_chart(provider, birth)
        start_jd = provider.julian_day(start)
        now_jd = provider.julian_day(now)
        request = ScanRequest(
            moving_bodies=DEFAULT_TRANSIT_BODIES,
            reference_points=chart.points,
            start_jd=start_jd,
            end_jd=start_jd + days,
            step_days=step_days if step_days is not None else settings.step_days,
            relationships=settings.relationship_definitions(),
        )
        events = settings.build_scanner(provider).scan(request)
        positions = {body: provider.position(now_jd, body) for body in DEFAULT_TRANSIT_BODIES}
        lunar = lunar_snapshot(provider, now_jd)
    except ScanConfigError as exc:
        raise click.BadParameter(str(exc)) from exc
    except EphemerisError as exc:
        raise click.ClickException(str(exc)) from exc

    to_iso = _iso_formatter(provider)
    report = build_transit_report(events, now_jd=now_jd, top_n=top_n, to_iso=to_iso)
    report.retrogrades = retrogrades(positions)
    report.lunar = lunar

    payload: Dict[str, Any] = {
        "natal": {
            "points": {name: round(lon, 4) for name, lon in chart.longitudes().items()},
            "house_system": chart.house_system,
        },
        "window": {"start": to_iso(start_jd), "end": to_iso(start_jd + days)},
        "now": to_iso(now_jd),
    }
    payload.update(report.as_dict())
    _emit(payload, indent=2)


@main.command("scan-mock")
@click.option("--start", "start_iso", required=True, help="Scan window start (UTC)")
@click.option("--end", "end_iso", required=True, help="Scan window end (UTC)")
@click.option(
    "--step",
    type=float,
    default=6.0,
    show_default=True,
    help="Sample spacing in hours",
)
@click.option("--body", "body_name", required=True, help="Moving body name")
@click.option("--lon0", type=float, required=True, help="Body longitude at start")
@click.option("--speed", type=float, required=True, help="Body speed in deg/day")
@click.option("--natal-point", "natal_point", required=True, help="Reference point name")
@click.option("--natal-lon", type=float, required=True, help="Reference longitude")
@click.option(
    "--relationship",
    "relationships",
    type=click.Choice(_RELATIONSHIP_NAMES, case_sensitive=False),
    multiple=True,
    help="Relationship to track (repeatable; default all)",
)
def scan_mock(
    start_iso: str,
    end_iso: str,
    step: float,
    body_name: str,
    lon0: float,
    speed: float,
    natal_point: str,
    natal_lon: float,
    relationships: tuple[str, ...],
) -> None:
    """Run a scan against a straight-line body and print JSON lines."""

    start_dt = _parse_timestamp(start_iso, "--start")
    end_dt = _parse_timestamp(end_iso, "--end")
    if end_dt < start_dt:
        raise click.BadParameter("--end must be after --start")
    if step <= 0:
        raise click.BadParameter("must be positive", param_hint="--step")

    start_jd = julian_day(start_dt)
    provider = LinearMotionProvider({body_name: (lon0, speed)}, epoch_jd=start_jd)
    wanted = {name.lower() for name in relationships}
    selected = tuple(
        rel for rel in DEFAULT_RELATIONSHIPS if not wanted or rel.name.lower() in wanted
    )
    try:
        request = ScanRequest(
            moving_bodies=(body_name,),
            reference_points=(ReferencePoint(natal_point, natal_lon),),
            start_jd=start_jd,
            end_jd=julian_day(end_dt),
            step_days=step / 24.0,
            relationships=selected,
        )
    except ScanConfigError as exc:
        raise click.BadParameter(str(exc)) from exc

    for event in ScanSettings().build_scanner(provider).scan(request):
        _emit(event.as_dict(jd_to_iso))


@main.command("return")
@_with_birth_options
@click.option("--year", type=int, required=True, help="Year of the return")
@click.option("--body", default="Sun", show_default=True, help="Returning body")
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file",
)
def return_(
    birth_date: str,
    birth_time: str,
    timezone: str,
    year: int,
    body: str,
    settings_path: Optional[Path],
) -> None:
    """Find the instant a body returns to its natal longitude."""

    settings = _settings(settings_path)
    moment = _parse_birth_moment(birth_date, birth_time)
    try:
        birth = BirthData(moment, 0.0, 0.0, timezone=timezone)
    except ScanConfigError as exc:
        raise click.BadParameter(str(exc), param_hint="--tz") from exc

    provider = _make_provider(settings)
    try:
        search = solar_return(
            provider,
            birth.moment,
            year,
            body=body,
            half_window=settings.return_half_window,
            step=settings.return_step,
            iterations=settings.return_iterations,
        )
    except EphemerisError as exc:
        raise click.ClickException(str(exc)) from exc

    payload: Dict[str, Any] = {
        "status": search.status,
        "body": search.body,
        "year": year,
        "target_longitude": round(search.target_longitude, 6),
    }
    if search.event is not None:
        payload["jd"] = search.event.jd
        payload["time"] = _iso_formatter(provider)(search.event.jd)
        payload["achieved_tol_sec"] = round(search.event.achieved_tol_sec, 3)
    _emit(payload)
    if not search.found:
        click.get_current_context().exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
