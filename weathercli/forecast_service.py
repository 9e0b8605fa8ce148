"""Derived views over decoded forecasts: summaries, air-quality bands, reports."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from weathercli.data_sources.fetcher import Success
from weathercli.data_sources.weatherapi_client import WeatherService
from weathercli.models import ForecastDay, ForecastResponse
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="forecast_service")

RAINY_DAY_THRESHOLD = 50
REPORT_FORECAST_DAYS = 7
REPORT_RULE = "=" * 49

AIR_QUALITY_BANDS = {
    1: ("Good", "Air quality is satisfactory"),
    2: ("Moderate", "Acceptable for most people"),
    3: ("Unhealthy for Sensitive Groups", "Sensitive individuals should limit outdoor activities"),
    4: ("Unhealthy", "Everyone should limit outdoor activities"),
    5: ("Very Unhealthy", "Avoid outdoor activities"),
    6: ("Hazardous", "Emergency conditions - stay indoors"),
}
UNKNOWN_AIR_QUALITY = ("Unknown", "Data unavailable")


@dataclass
class ForecastSummary:
    """Aggregate statistics across forecast days."""
    avg_high: float
    avg_low: float
    total_rain_mm: float
    rainy_days: int
    day_count: int


def summarize_forecast(days: Sequence[ForecastDay]) -> Optional[ForecastSummary]:
    """Average highs/lows, total rain and count of days with > 50% chance of rain."""
    if not days:
        return None
    highs = [d.day.maxtemp_c for d in days]
    lows = [d.day.mintemp_c for d in days]
    return ForecastSummary(
        avg_high=sum(highs) / len(days),
        avg_low=sum(lows) / len(days),
        total_rain_mm=sum(d.day.totalprecip_mm for d in days),
        rainy_days=sum(1 for d in days if d.day.daily_chance_of_rain > RAINY_DAY_THRESHOLD),
        day_count=len(days),
    )


def describe_air_quality(us_epa_index: Optional[int]) -> tuple[str, str]:
    """Return (level, health advice) for a US EPA index."""
    return AIR_QUALITY_BANDS.get(us_epa_index, UNKNOWN_AIR_QUALITY)


def estimate_pollen(us_epa_index: int) -> str:
    """Rough allergen estimate derived from the air-quality index."""
    if us_epa_index <= 2:
        return "Low"
    if us_epa_index <= 3:
        return "Moderate"
    if us_epa_index <= 4:
        return "High"
    return "Very High"


def pollen_tip(us_epa_index: int) -> str:
    if us_epa_index <= 2:
        return "Good conditions for outdoor activities!"
    if us_epa_index <= 3:
        return "Sensitive individuals should monitor symptoms."
    return "Consider staying indoors and using air purifiers."


def build_report(location: str, data: ForecastResponse, generated_at: dt.datetime) -> str:
    """Render a plain-text weather report."""
    lines: List[str] = [
        f"Weather Report for {location}",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}",
        REPORT_RULE,
    ]
    current = data.current
    if current is not None:
        lines += [
            "",
            "CURRENT CONDITIONS:",
            f"Temperature: {current.temp_c}°C",
            f"Condition: {current.condition.text}",
            f"Feels Like: {current.feelslike_c}°C",
            f"Humidity: {current.humidity if current.humidity is not None else 'n/a'}%",
            f"Wind: {current.wind_kph if current.wind_kph is not None else 'n/a'} km/h {current.wind_dir or ''}".rstrip(),
        ]
    if data.forecast.forecastday:
        lines += ["", f"{len(data.forecast.forecastday)}-DAY FORECAST:"]
        for day in data.forecast.forecastday:
            lines.append(
                f"{day.date}: {day.day.condition.text} | "
                f"High: {day.day.maxtemp_c}°C | Low: {day.day.mintemp_c}°C"
            )
    return "\n".join(lines) + "\n"


def export_weather_report(service: WeatherService, location: str, path: str | Path,
                          *, now: Optional[dt.datetime] = None) -> Optional[str]:
    """Fetch a 7-day forecast and write the report to `path`.

    Returns None on success, otherwise a message describing what went wrong.
    """
    result = service.get_forecast(location, REPORT_FORECAST_DAYS)
    if not isinstance(result, Success):
        logger.warning("Report for %s not written: %s", location, result.detail)
        return result.detail

    report = build_report(location, result.payload, now or dt.datetime.now())
    try:
        Path(path).write_text(report, encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to write weather report to %s: %s", path, exc)
        return str(exc)
    logger.info("Weather report for %s exported to %s", location, path)
    return None
