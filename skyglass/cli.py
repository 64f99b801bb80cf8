"""Command line dashboard."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict, dataclass, fields
from typing import List, Optional, Sequence

from .config import AppConfig, ImproperlyConfigured
from .entities import Coordinates, WeatherSnapshot
from .history import HistoryTracker
from .providers.base import RequestConfig
from .providers.openweather import OpenWeatherProvider
from .services.session import WeatherSession
from .services.weather import WeatherService
from .settings_store import Settings, SettingsStore
from .storage import JsonFileStore, KeyValueStore
from .themes import ThemeResolver
from .units import UnitConverter, aqi_label, format_visibility


logger = logging.getLogger(__name__)


@dataclass
class Dashboard:
    store: KeyValueStore
    settings: SettingsStore
    theme: ThemeResolver
    history: HistoryTracker
    units: UnitConverter


def build_dashboard(config: AppConfig, store: Optional[KeyValueStore] = None) -> Dashboard:
    store = store if store is not None else JsonFileStore(config.state_file)
    settings = SettingsStore(store)
    return Dashboard(
        store=store,
        settings=settings,
        theme=ThemeResolver(settings),
        history=HistoryTracker(store),
        units=UnitConverter(settings),
    )


def build_session(config: AppConfig, dashboard: Dashboard) -> WeatherSession:
    provider = OpenWeatherProvider(
        api_key=config.require_openweather_key(),
        base_url=config.openweather_base_url,
        request_config=RequestConfig(timeout=config.http_timeout),
    )
    return WeatherSession(
        source=WeatherService(provider, ttl=config.report_cache_ttl),
        settings=dashboard.settings,
        theme=dashboard.theme,
        history=dashboard.history,
        store=dashboard.store,
        fallback_city=config.fallback_city,
        timeout=config.fetch_timeout,
    )


def render(snapshot: WeatherSnapshot, dashboard: Dashboard) -> List[str]:
    units = dashboard.units
    current = dashboard.settings.settings
    lines = [
        f"{snapshot.location_name or 'Unknown location'} ({snapshot.coordinates.lat:.2f}, {snapshot.coordinates.lon:.2f})",
        f"  {units.temperature(snapshot.temp_c)}°{current.temp_unit}  {snapshot.condition_description}",
        f"  Feels like {units.temperature(snapshot.feels_like_c)}°  "
        f"H {units.temperature(snapshot.temp_max_c)}° L {units.temperature(snapshot.temp_min_c)}°",
        f"  Humidity {snapshot.humidity_pct:.0f}%  Wind {units.wind_speed(snapshot.wind_speed_ms)} {current.wind_unit}",
        f"  Pressure {units.pressure(snapshot.pressure_hpa)} {current.pressure_unit}  "
        f"Visibility {format_visibility(snapshot.visibility_m)}",
        f"  Air quality {aqi_label(snapshot.aqi)}",
        f"  Theme {dashboard.theme.theme.key}",
    ]
    daily = snapshot.daily()
    if daily:
        lines.append("  Next days:")
        for point in daily:
            lines.append(
                f"    {point.timestamp:%a} {units.temperature(point.temp_c)}° {point.condition_main}"
                f" ({point.precipitation_probability * 100:.0f}% rain)"
            )
    return lines


def _cmd_show(args: argparse.Namespace, config: AppConfig, dashboard: Dashboard) -> int:
    session = build_session(config, dashboard)
    if args.city:
        state = asyncio.run(session.fetch(args.city))
    elif args.lat is not None and args.lon is not None:
        state = asyncio.run(session.fetch(Coordinates(lat=args.lat, lon=args.lon)))
    else:
        state = asyncio.run(session.start())
    if state.snapshot is None:
        print(state.error_message, file=sys.stderr)
        return 1
    print("\n".join(render(state.snapshot, dashboard)))
    return 0


def _cmd_history(args: argparse.Namespace, config: AppConfig, dashboard: Dashboard) -> int:
    if args.clear:
        dashboard.history.clear()
    for name in dashboard.history.entries:
        print(name)
    return 0


def _cmd_settings(args: argparse.Namespace, config: AppConfig, dashboard: Dashboard) -> int:
    names = {f.name for f in fields(Settings)}
    changes = {}
    for item in args.set or ():
        key, sep, value = item.partition("=")
        if not sep or key not in names:
            print(f"Unknown setting {item!r}; expected one of {', '.join(sorted(names))}", file=sys.stderr)
            return 2
        changes[key] = value
    if changes:
        dashboard.settings.update(**changes)
    print(json.dumps(asdict(dashboard.settings.settings), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skyglass", description="Weather dashboard in the terminal")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Fetch and display the weather")
    show.add_argument("--city", type=str, help="City name")
    show.add_argument("--lat", type=float, help="Latitude")
    show.add_argument("--lon", type=float, help="Longitude")
    show.set_defaults(handler=_cmd_show)

    history = sub.add_parser("history", help="List recently searched cities")
    history.add_argument("--clear", action="store_true", help="Forget all recent cities")
    history.set_defaults(handler=_cmd_history)

    settings = sub.add_parser("settings", help="Show or change preferences")
    settings.add_argument("--set", action="append", metavar="KEY=VALUE", help="e.g. temp_unit=F")
    settings.set_defaults(handler=_cmd_settings)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        config = AppConfig.from_env()
        dashboard = build_dashboard(config)
        return args.handler(args, config, dashboard)
    except ImproperlyConfigured as exc:
        print(str(exc), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
