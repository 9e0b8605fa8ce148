"""Pydantic schemas for the WeatherAPI.com payloads the CLI consumes.

Payloads are decoded once at the fetch boundary; presentation code works with
typed attributes instead of dictionary lookups. Unknown fields are ignored so
API additions do not break decoding, but fields the CLI relies on are required.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    """Base model that tolerates extra fields from the API."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Condition(_ApiModel):
    """Short textual weather condition."""
    text: str
    icon: Optional[str] = None
    code: Optional[int] = None


class Location(_ApiModel):
    """Resolved location for a query."""
    name: str
    region: str = ""
    country: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    tz_id: Optional[str] = None
    localtime: Optional[str] = None

    def label(self) -> str:
        """Return "Name, Country" (or just the name)."""
        return f"{self.name}, {self.country}" if self.country else self.name


class AirQuality(_ApiModel):
    """Pollutant concentrations (µg/m³) and the US EPA index (1-6)."""
    co: Optional[float] = None
    no2: Optional[float] = None
    o3: Optional[float] = None
    so2: Optional[float] = None
    pm2_5: Optional[float] = None
    pm10: Optional[float] = None
    us_epa_index: Optional[int] = Field(default=None, alias="us-epa-index")
    gb_defra_index: Optional[int] = Field(default=None, alias="gb-defra-index")


class CurrentWeather(_ApiModel):
    """Current conditions block."""
    last_updated: Optional[str] = None
    temp_c: float
    feelslike_c: float
    condition: Condition
    is_day: Optional[int] = None
    wind_kph: Optional[float] = None
    wind_dir: Optional[str] = None
    gust_kph: Optional[float] = None
    pressure_mb: Optional[float] = None
    precip_mm: Optional[float] = None
    humidity: Optional[int] = None
    cloud: Optional[int] = None
    vis_km: Optional[float] = None
    uv: Optional[float] = None
    air_quality: Optional[AirQuality] = None


class DaySummary(_ApiModel):
    """Daily aggregate for one forecast day."""
    maxtemp_c: float
    mintemp_c: float
    avgtemp_c: Optional[float] = None
    maxwind_kph: float = 0.0
    totalprecip_mm: float = 0.0
    avghumidity: Optional[float] = None
    daily_chance_of_rain: int = 0
    daily_chance_of_snow: int = 0
    uv: Optional[float] = None
    condition: Condition


class Astro(_ApiModel):
    """Sun and moon times for one day."""
    sunrise: str = ""
    sunset: str = ""
    moonrise: str = ""
    moonset: str = ""
    moon_phase: str = ""
    moon_illumination: int = 0


class HourForecast(_ApiModel):
    """Forecast for a single hour; `time` is "YYYY-MM-DD HH:MM" local."""
    time: str
    temp_c: float
    condition: Condition
    wind_kph: float = 0.0
    chance_of_rain: int = 0
    chance_of_snow: int = 0
    humidity: Optional[int] = None
    feelslike_c: Optional[float] = None

    @property
    def clock(self) -> str:
        """HH:MM portion of the timestamp."""
        return self.time[11:16]


class ForecastDay(_ApiModel):
    """One day of the forecast with its hourly breakdown."""
    date: str
    day: DaySummary
    astro: Optional[Astro] = None
    hour: List[HourForecast] = Field(default_factory=list)


class Forecast(_ApiModel):
    forecastday: List[ForecastDay] = Field(default_factory=list)


class Alert(_ApiModel):
    """Government weather alert."""
    headline: str = ""
    event: str = ""
    severity: str = ""
    areas: str = ""
    expires: str = ""
    desc: str = ""


class Alerts(_ApiModel):
    alert: List[Alert] = Field(default_factory=list)


class CurrentResponse(_ApiModel):
    """Payload of `current.json`."""
    location: Location
    current: CurrentWeather


class ForecastResponse(_ApiModel):
    """Payload of `forecast.json`."""
    location: Location
    current: Optional[CurrentWeather] = None
    forecast: Forecast = Field(default_factory=Forecast)
    alerts: Alerts = Field(default_factory=Alerts)


class IpLookup(_ApiModel):
    """Payload of `ip.json`."""
    ip: str
    type: str = ""
    continent_name: str = ""
    country_name: str = ""
    region: str = ""
    city: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    tz_id: str = ""
    localtime: str = ""

    def location_query(self) -> str:
        """Return a "City, Country" query for a follow-up weather lookup."""
        return f"{self.city}, {self.country_name}"
