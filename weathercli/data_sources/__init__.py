"""HTTP fetching, response caching and WeatherAPI.com endpoint composition."""

from .fetcher import Failure, FailureKind, Fetcher, FetchResult, RetryPolicy, Success
from .response_cache import CacheEntry, ResponseCache
from .weatherapi_client import WeatherService, url_encode
from .factory import build_fetcher, build_weather_service

__all__ = [
    "CacheEntry",
    "Failure",
    "FailureKind",
    "FetchResult",
    "Fetcher",
    "ResponseCache",
    "RetryPolicy",
    "Success",
    "WeatherService",
    "build_fetcher",
    "build_weather_service",
    "url_encode",
]
