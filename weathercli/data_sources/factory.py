"""Factory helpers for wiring the cache, fetcher and weather service at startup."""

from __future__ import annotations

from weathercli.config import Settings
from weathercli.data_sources.fetcher import Fetcher, RetryPolicy
from weathercli.data_sources.response_cache import ResponseCache
from weathercli.data_sources.weatherapi_client import WeatherService
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


def build_fetcher(settings: Settings, cache: ResponseCache, **kwargs) -> Fetcher:
    """Create a Fetcher from the transport-related settings."""
    return Fetcher(
        cache,
        timeout_seconds=settings.timeout_seconds,
        user_agent=settings.user_agent,
        retry_policy=RetryPolicy(max_attempts=settings.max_retries, base_backoff=settings.backoff_seconds),
        **kwargs,
    )


def build_weather_service(settings: Settings, cache: ResponseCache | None = None, **kwargs) -> WeatherService:
    """Instantiate the weather service; an existing cache is reused when given."""
    cache = cache if cache is not None else ResponseCache(ttl_seconds=settings.cache_ttl_seconds)
    logger.info(
        "Using WeatherAPI data source",
        extra={"base_url": settings.base_url, "timeout": settings.timeout_seconds, "cache_ttl": cache.ttl},
    )
    return WeatherService(build_fetcher(settings, cache, **kwargs), settings)
