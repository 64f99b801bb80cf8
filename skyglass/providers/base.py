from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests
from requests import Response


logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """Base provider error."""


class LocationNotFound(ProviderError):
    """Raised when the query does not resolve to a known location."""


class QuotaExceeded(ProviderError):
    """Raised when a provider reports a quota/usage limit issue."""


class ProviderUnavailable(ProviderError):
    """Raised on transport failures, timeouts and upstream 5xx responses."""


@dataclass
class RequestConfig:
    timeout: float = 10.0


class WeatherProvider:
    """Base class that adds timeouts and status mapping for HTTP providers."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self.session = session or requests.Session()
        self._log = logging.getLogger(self.__class__.__name__)

    def _handle_response(self, response: Response) -> Response:
        if response.status_code == 404:
            self._log.info("Location not found: %s", response.text)
            raise LocationNotFound("location not found")
        if response.status_code == 429:
            self._log.warning("Quota exceeded: %s", response.text)
            raise QuotaExceeded("quota exceeded")
        if response.status_code >= 400:
            self._log.error("Provider returned %s: %s", response.status_code, response.text)
            raise ProviderUnavailable(f"HTTP {response.status_code}")
        return response

    def _request(self, method: str, url: str, **kwargs) -> Response:
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.request_config.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            self._log.error("Request timed out", exc_info=exc)
            raise ProviderUnavailable("timeout") from exc
        except requests.RequestException as exc:
            self._log.error("Request failed", exc_info=exc)
            raise ProviderUnavailable("request failed") from exc
        return self._handle_response(response)

    def _json(self, response: Response) -> dict:
        try:
            return response.json()
        except ValueError as exc:
            self._log.error("Failed to decode JSON", exc_info=exc)
            raise ProviderError("invalid json") from exc


__all__ = [
    "LocationNotFound",
    "ProviderError",
    "ProviderUnavailable",
    "QuotaExceeded",
    "RequestConfig",
    "WeatherProvider",
]
