"""Minimal HTTP-like surface for the dashboard backend.

Tests and hosting adapters call :meth:`DashboardAPI.handle_request` directly
instead of going through a framework.  Two routes are served: the weather
report proxy and the chat assistant.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..entities import Coordinates, snapshot_from_dict, snapshot_to_dict
from ..providers.base import LocationNotFound, ProviderError, QuotaExceeded
from ..services.assistant import AssistantService, ServiceUnavailable
from ..services.weather import WeatherService


logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}
REPORT_CACHE_CONTROL = "public, s-maxage=900, stale-while-revalidate=59"
MAX_CITY_LENGTH = 50


@dataclass
class Response:
    status_code: int
    body: str
    headers: Mapping[str, str]

    def json(self) -> Any:
        return json.loads(self.body)


def _json_response(status: int, payload: Mapping[str, Any], headers: Optional[Mapping[str, str]] = None) -> Response:
    return Response(status_code=status, body=json.dumps(payload), headers={**JSON_HEADERS, **(headers or {})})


class DashboardAPI:
    REPORT_PATH = "/api/report"
    CHAT_PATH = "/api/chat"

    def __init__(self, weather: WeatherService, assistant: AssistantService) -> None:
        self._weather = weather
        self._assistant = assistant
        self._routes = {
            self.REPORT_PATH: ("GET", self.get_report),
            self.CHAT_PATH: ("POST", self.post_chat),
        }

    # -- HTTP like helpers --------------------------------------------------
    def handle_request(
        self,
        method: str,
        path: str,
        query: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Response:
        route = self._routes.get(path)
        if route is None:
            return _json_response(404, {"detail": "Not found"})
        allowed, handler = route
        if method.upper() != allowed:
            return _json_response(405, {"detail": "Method not allowed"})
        if allowed == "GET":
            return handler(query or {})
        return handler(body or {})

    def get_report(self, query: Mapping[str, str]) -> Response:
        city = (query.get("city") or "").strip()
        lat, lon = query.get("lat"), query.get("lon")
        if len(city) > MAX_CITY_LENGTH:
            return _json_response(400, {"error": "City name too long"})
        if city:
            location: Any = city
        elif lat and lon:
            try:
                location = Coordinates(lat=float(lat), lon=float(lon))
            except ValueError:
                return _json_response(400, {"error": "lat and lon must be valid floating point numbers"})
        else:
            return _json_response(400, {"error": "City or coordinates are required"})

        try:
            snapshot = self._weather.get_conditions(location)
        except LocationNotFound:
            return _json_response(404, {"error": "City not found"})
        except QuotaExceeded:
            return _json_response(429, {"error": "Too many requests"})
        except ProviderError as exc:
            logger.error("Data fetch error: %s", exc)
            return _json_response(500, {"error": "Failed to fetch weather data"})
        return _json_response(200, snapshot_to_dict(snapshot), {"Cache-Control": REPORT_CACHE_CONTROL})

    def post_chat(self, body: Mapping[str, Any]) -> Response:
        message = body.get("message")
        if not isinstance(message, str) or not message.strip():
            return _json_response(400, {"error": "Message is required"})
        if not self._assistant.configured:
            return _json_response(503, {"error": "Chat service unavailable"})

        snapshot = None
        weather: Optional[Dict[str, Any]] = body.get("weather")
        if weather:
            try:
                snapshot = snapshot_from_dict(weather)
            except (KeyError, TypeError, ValueError):
                logger.warning("Ignoring malformed weather context in chat request")

        try:
            reply = self._assistant.ask(message, snapshot)
        except ServiceUnavailable:
            return _json_response(503, {"error": "Failed to fetch response from AI"})
        return _json_response(200, {"reply": reply})


__all__ = ["DashboardAPI", "Response"]
