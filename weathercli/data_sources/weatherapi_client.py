"""Build WeatherAPI.com request URLs and fetch typed responses through a Fetcher."""
from __future__ import annotations

import string

from weathercli.config import Settings
from weathercli.data_sources.fetcher import Failure, FailureKind, Fetcher, FetchResult
from weathercli.models import CurrentResponse, ForecastResponse, IpLookup
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/weatherapi_client")

_UNRESERVED = frozenset((string.ascii_letters + string.digits + "-_.~").encode("ascii"))

DEFAULT_FORECAST_DAYS = 7
HOURLY_FORECAST_DAYS = 2


def url_encode(text: str) -> str:
    """Percent-encode a query value: unreserved bytes pass, space is %20, the rest %XX."""
    out = []
    for byte in text.encode("utf-8"):
        if byte in _UNRESERVED:
            out.append(chr(byte))
        elif byte == 0x20:
            out.append("%20")
        else:
            out.append(f"%{byte:02X}")
    return "".join(out)


class WeatherService:
    """Endpoint composition over a Fetcher; API key and base URL are read per call."""

    def __init__(self, fetcher: Fetcher, settings: Settings) -> None:
        self.fetcher = fetcher
        self.settings = settings

    def build_url(self, endpoint: str, query: str, **params) -> str:
        """Return `{base}/{endpoint}.json?key=...&q=...` plus extra parameters in order."""
        parts = [f"key={self.settings.api_key or ''}", f"q={url_encode(query)}"]
        parts.extend(f"{name}={url_encode(str(value))}" for name, value in params.items())
        return f"{self.settings.base_url}/{endpoint}.json?" + "&".join(parts)

    def _fetch(self, url: str, schema) -> FetchResult:
        if not self.settings.api_key:
            logger.warning("Skipping request: API key is not configured")
            return Failure(FailureKind.API_ERROR, "API key is not configured")
        return self.fetcher.fetch(url, use_cache=True, max_retries=self.settings.max_retries, schema=schema)

    def get_current_weather(self, location: str) -> FetchResult:
        """Current conditions with air quality."""
        return self._fetch(self.build_url("current", location, aqi="yes"), CurrentResponse)

    def get_forecast(self, location: str, days: int = DEFAULT_FORECAST_DAYS) -> FetchResult:
        """Multi-day forecast including current conditions, air quality and alerts."""
        url = self.build_url("forecast", location, days=days, aqi="yes", alerts="yes")
        return self._fetch(url, ForecastResponse)

    def get_hourly_forecast(self, location: str) -> FetchResult:
        return self.get_forecast(location, HOURLY_FORECAST_DAYS)

    def get_air_quality(self, location: str) -> FetchResult:
        return self._fetch(self.build_url("current", location, aqi="yes"), CurrentResponse)

    def get_alerts(self, location: str) -> FetchResult:
        return self._fetch(self.build_url("forecast", location, alerts="yes"), ForecastResponse)

    def get_ip_lookup(self, ip: str) -> FetchResult:
        """Geolocate an IP address, or the caller's own address with "auto"."""
        return self._fetch(self.build_url("ip", ip), IpLookup)

    def clear_cache(self) -> None:
        """Invalidate every cached response immediately."""
        self.fetcher.cache.clear()
