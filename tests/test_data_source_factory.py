import unittest

from weathercli.config import Settings
from weathercli.data_sources.factory import build_fetcher, build_weather_service
from weathercli.data_sources.fetcher import Fetcher
from weathercli.data_sources.response_cache import ResponseCache
from weathercli.data_sources.weatherapi_client import WeatherService


class TestDataSourceFactory(unittest.TestCase):
    def test_build_weather_service_default(self):
        settings = Settings(api_key="k", cache_ttl_seconds=60)
        service = build_weather_service(settings)
        self.assertIsInstance(service, WeatherService)
        self.assertIsInstance(service.fetcher, Fetcher)
        self.assertEqual(service.fetcher.cache.ttl, 60)
        self.assertIs(service.settings, settings)

    def test_existing_cache_is_reused(self):
        cache = ResponseCache(ttl_seconds=10)
        service = build_weather_service(Settings(api_key="k"), cache)
        self.assertIs(service.fetcher.cache, cache)

    def test_build_fetcher_copies_transport_settings(self):
        settings = Settings(timeout_seconds=7, user_agent="agent/1", max_retries=5, backoff_seconds=0.5)
        sleeps = []
        fetcher = build_fetcher(settings, ResponseCache(), sleep=sleeps.append)
        self.assertEqual(fetcher.timeout_seconds, 7)
        self.assertEqual(fetcher.user_agent, "agent/1")
        self.assertEqual(fetcher.retry_policy.max_attempts, 5)
        self.assertEqual(fetcher.retry_policy.base_backoff, 0.5)
        self.assertEqual(fetcher._sleep, sleeps.append)


if __name__ == "__main__":
    unittest.main()
