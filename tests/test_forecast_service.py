import datetime as dt
import tempfile
import unittest
from pathlib import Path

from weathercli.data_sources.fetcher import Failure, FailureKind, Success
from weathercli.forecast_service import (
    build_report,
    describe_air_quality,
    estimate_pollen,
    export_weather_report,
    pollen_tip,
    summarize_forecast,
)
from weathercli.models import ForecastResponse

from weather_payloads import make_forecast_payload


class FakeService:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def get_forecast(self, location, days=7):
        self.calls.append((location, days))
        return self.result


class TestForecastSummary(unittest.TestCase):
    def test_summarize_forecast(self):
        data = ForecastResponse.model_validate(make_forecast_payload())
        summary = summarize_forecast(data.forecast.forecastday)

        self.assertAlmostEqual(summary.avg_high, 10.0)
        self.assertAlmostEqual(summary.avg_low, 2.0)
        self.assertAlmostEqual(summary.total_rain_mm, 8.0)
        # 80% and 60% exceed the threshold, 20% does not
        self.assertEqual(summary.rainy_days, 2)
        self.assertEqual(summary.day_count, 3)

    def test_summarize_empty(self):
        self.assertIsNone(summarize_forecast([]))


class TestAirQualityBands(unittest.TestCase):
    def test_describe_known_levels(self):
        self.assertEqual(describe_air_quality(1)[0], "Good")
        self.assertEqual(describe_air_quality(3)[0], "Unhealthy for Sensitive Groups")
        self.assertEqual(describe_air_quality(6), ("Hazardous", "Emergency conditions - stay indoors"))

    def test_describe_unknown(self):
        self.assertEqual(describe_air_quality(9), ("Unknown", "Data unavailable"))
        self.assertEqual(describe_air_quality(None)[0], "Unknown")

    def test_pollen_estimate(self):
        self.assertEqual([estimate_pollen(i) for i in range(1, 7)],
                         ["Low", "Low", "Moderate", "High", "Very High", "Very High"])

    def test_pollen_tip(self):
        self.assertIn("Good conditions", pollen_tip(1))
        self.assertIn("monitor symptoms", pollen_tip(3))
        self.assertIn("staying indoors", pollen_tip(5))


class TestReport(unittest.TestCase):
    def test_build_report(self):
        data = ForecastResponse.model_validate(make_forecast_payload())
        report = build_report("London", data, dt.datetime(2024, 1, 1, 12, 30, 0))

        self.assertTrue(report.startswith("Weather Report for London\nGenerated: 2024-01-01 12:30:00\n"))
        self.assertIn("Temperature: 11.4°C", report)
        self.assertIn("Wind: 14.4 km/h SW", report)
        self.assertIn("3-DAY FORECAST:", report)
        self.assertIn("2024-01-02: Sunny | High: 10.0°C | Low: 2.0°C", report)

    def test_export_writes_file(self):
        data = ForecastResponse.model_validate(make_forecast_payload())
        service = FakeService(Success(data))
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "weather_report.txt"
            error = export_weather_report(service, "London", path, now=dt.datetime(2024, 1, 1))
            self.assertIsNone(error)
            self.assertIn("Weather Report for London", path.read_text(encoding="utf-8"))
        self.assertEqual(service.calls, [("London", 7)])

    def test_export_failure_writes_nothing(self):
        service = FakeService(Failure(FailureKind.API_ERROR, "Invalid location"))
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "weather_report.txt"
            error = export_weather_report(service, "Nowhere", path)
            self.assertEqual(error, "Invalid location")
            self.assertFalse(path.exists())

    def test_export_unwritable_path(self):
        data = ForecastResponse.model_validate(make_forecast_payload())
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "no-such-dir" / "report.txt"
            error = export_weather_report(FakeService(Success(data)), "London", path)
            self.assertIsNotNone(error)


if __name__ == "__main__":
    unittest.main()
