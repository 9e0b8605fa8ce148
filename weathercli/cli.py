"""Interactive menu-driven weather client and the console entry point."""
from __future__ import annotations

import argparse
import ipaddress
import sys
from typing import Callable, List, Optional, TextIO

from pydantic import ValidationError

from weathercli import display
from weathercli.config import Settings, load_settings_file, save_settings_file
from weathercli.data_sources import Failure, WeatherService, build_fetcher, build_weather_service
from weathercli.display import Colors
from weathercli.forecast_service import (
    describe_air_quality,
    estimate_pollen,
    export_weather_report,
    pollen_tip,
    summarize_forecast,
)
from weathercli.models import CurrentWeather, ForecastResponse
from utils.logging_utils import get_tagged_logger, is_file_logging_enabled, set_file_logging, setup_logging

logger = get_tagged_logger(__name__, tag="cli")

EXIT_CHOICES = {"0", "exit", "quit"}
DEFAULT_REPORT_FILENAME = "weather_report.txt"
VERSION = "2.0"


def is_valid_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _num(value: Optional[float], unit: str = "") -> str:
    """Whole-number rendering used across the detail screens."""
    if value is None:
        return "n/a"
    return f"{int(value)}{unit}"


class WeatherApp:
    """Main menu loop. Input and output are injectable so the flow can be scripted."""

    def __init__(
        self,
        service: WeatherService,
        settings: Settings,
        *,
        input_func: Callable[[str], str] = input,
        out: TextIO | None = None,
    ) -> None:
        self.service = service
        self.settings = settings
        self._input = input_func
        self.out = out or sys.stdout
        self.running = True

    # -- io ---------------------------------------------------------------

    def write(self, *blocks: str) -> None:
        for block in blocks:
            print(block, file=self.out)
        self.out.flush()

    def ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def _screen(self) -> None:
        self.write(display.CLEAR_SCREEN + display.banner())

    def _loading(self, message: str) -> None:
        self.write(display.paint(f"⠋ {message}...", Colors.CYAN))

    def _report_failure(self, what: str, subject: str, failure: Failure) -> None:
        self.write(display.error_message(f"Failed to fetch {what} for {subject}: {failure.detail}"))

    def get_location_input(self) -> str:
        return self.ask(display.paint("\n🌍 Enter location (city, coordinates, or postal code): ", Colors.BOLD, Colors.CYAN))

    def get_ip_input(self) -> str:
        ip = self.ask(display.paint("\n🌐 Enter IP address (or 'auto' for your IP): ", Colors.BOLD, Colors.CYAN))
        return ip if ip and ip != "auto" else "auto"

    # -- screens ----------------------------------------------------------

    def show_current_weather(self, location: str) -> None:
        self._loading("Fetching current weather data")
        result = self.service.get_forecast(location, 1)
        if isinstance(result, Failure):
            self._report_failure("weather data", location, result)
            return
        data: ForecastResponse = result.payload
        self._screen()
        if data.current is not None:
            self.write(display.weather_card(data.current, location))
            self.show_detailed_current(data.current)
        if data.forecast.forecastday:
            today = data.forecast.forecastday[0].day
            self.write(
                display.section_header("TODAY'S FORECAST"),
                display.key_value("Max Temperature", _num(today.maxtemp_c, "°C"), display.temperature_color(today.maxtemp_c)),
                display.key_value("Min Temperature", _num(today.mintemp_c, "°C"), display.temperature_color(today.mintemp_c)),
                display.key_value("Condition", today.condition.text, Colors.GREEN),
                display.key_value("Precipitation", f"{today.totalprecip_mm:.1f} mm", Colors.BLUE),
                display.key_value("Max Wind", _num(today.maxwind_kph, " km/h"), Colors.CYAN),
                display.progress_bar(today.daily_chance_of_rain, "Chance of Rain"),
                display.progress_bar(today.daily_chance_of_snow, "Chance of Snow"),
            )
            self.show_astronomy(data)

    def show_detailed_current(self, current: CurrentWeather) -> None:
        self.write(
            display.section_header("DETAILED CONDITIONS"),
            display.key_value("Temperature", _num(current.temp_c, "°C"), display.temperature_color(current.temp_c)),
            display.key_value("Feels Like", _num(current.feelslike_c, "°C"), display.temperature_color(current.feelslike_c)),
            display.key_value("Wind Speed", _num(current.wind_kph, " km/h")),
            display.key_value("Wind Direction", current.wind_dir or "n/a"),
            display.key_value("Wind Gust", _num(current.gust_kph, " km/h")),
            display.key_value("Pressure", _num(current.pressure_mb, " mb"), Colors.BLUE),
            display.key_value("Humidity", _num(current.humidity, "%"), Colors.BLUE),
            display.key_value("Visibility", _num(current.vis_km, " km"), Colors.BLUE),
            display.key_value("UV Index", _num(current.uv), Colors.ORANGE),
        )
        if current.humidity is not None:
            self.write(display.progress_bar(current.humidity, "Humidity"))
        if current.uv is not None:
            self.write(display.progress_bar(current.uv * 10, "UV Index"))

    def show_astronomy(self, data: ForecastResponse) -> None:
        astro = data.forecast.forecastday[0].astro
        if astro is None:
            return
        self.write(
            display.section_header("ASTRONOMY"),
            display.key_value("Sunrise", astro.sunrise, Colors.ORANGE),
            display.key_value("Sunset", astro.sunset, Colors.ORANGE),
            display.key_value("Moonrise", astro.moonrise, Colors.PURPLE),
            display.key_value("Moonset", astro.moonset, Colors.PURPLE),
            display.key_value("Moon Phase", astro.moon_phase, Colors.PURPLE),
            display.progress_bar(astro.moon_illumination, "Moon Illumination"),
        )

    def show_extended_forecast(self, location: str) -> None:
        self._loading("Fetching extended forecast")
        result = self.service.get_forecast(location, 7)
        if isinstance(result, Failure):
            self._report_failure("forecast data", location, result)
            return
        days = result.payload.forecast.forecastday
        self._screen()
        self.write(display.daily_table(days))
        summary = summarize_forecast(days)
        if summary is not None:
            self.write(
                display.section_header("FORECAST SUMMARY"),
                display.key_value("Avg High", _num(summary.avg_high, "°C"), display.temperature_color(summary.avg_high)),
                display.key_value("Avg Low", _num(summary.avg_low, "°C"), display.temperature_color(summary.avg_low)),
                display.key_value("Total Rain", _num(summary.total_rain_mm, " mm"), Colors.BLUE),
                display.key_value("Rainy Days", f"{summary.rainy_days}/{summary.day_count}", Colors.BLUE),
            )

    def show_hourly_forecast(self, location: str) -> None:
        self._loading("Fetching hourly forecast")
        result = self.service.get_hourly_forecast(location)
        if isinstance(result, Failure):
            self._report_failure("hourly data", location, result)
            return
        days = result.payload.forecast.forecastday
        self._screen()
        if days:
            self.write(display.hourly_table(days[0].hour))

    def show_air_quality(self, location: str) -> None:
        self._loading("Fetching air quality data")
        result = self.service.get_air_quality(location)
        if isinstance(result, Failure):
            self._report_failure("air quality data", location, result)
            return
        self._screen()
        self.write(display.section_header(f"AIR QUALITY INDEX - {location}"))
        aqi = result.payload.current.air_quality
        if aqi is None or aqi.us_epa_index is None:
            self.write(display.warning_message("Air quality data not available for this location"))
            return
        level, advice = describe_air_quality(aqi.us_epa_index)
        color = display.aqi_color(aqi.us_epa_index)
        self.write(
            display.key_value("AQI Level", f"{aqi.us_epa_index} - {level}", color),
            display.key_value("Health Advice", advice, Colors.YELLOW),
            "",
            display.progress_bar(aqi.us_epa_index * 16, "Air Quality Index"),
            display.section_header("POLLUTANT BREAKDOWN"),
            display.key_value("Carbon Monoxide", _num(aqi.co, " µg/m³")),
            display.key_value("Nitrogen Dioxide", _num(aqi.no2, " µg/m³")),
            display.key_value("Ozone", _num(aqi.o3, " µg/m³")),
            display.key_value("Sulphur Dioxide", _num(aqi.so2, " µg/m³")),
            display.key_value("PM 2.5", _num(aqi.pm2_5, " µg/m³")),
            display.key_value("PM 10", _num(aqi.pm10, " µg/m³")),
        )

    def show_weather_alerts(self, location: str) -> None:
        self._loading("Checking weather alerts")
        result = self.service.get_alerts(location)
        if isinstance(result, Failure):
            self._report_failure("alerts", location, result)
            return
        self._screen()
        self.write(display.section_header(f"WEATHER ALERTS - {location}"))
        alerts = result.payload.alerts.alert
        if not alerts:
            self.write(display.success_message(f"No weather alerts for {location} - All clear! 🌤️"))
            return
        for i, alert in enumerate(alerts, start=1):
            lines: List[str] = [
                f"\n╭── Alert {i} " + "─" * 42 + "╮",
                "│ " + display.paint(f"⚠️  {alert.headline}", Colors.BOLD, Colors.RED),
                "├" + "─" * 57,
                "│ " + display.paint("Severity: ", Colors.BOLD) + display.paint(alert.severity, Colors.ORANGE),
                "│ " + display.paint("Areas: ", Colors.BOLD) + alert.areas,
                "│ " + display.paint("Expires: ", Colors.BOLD) + alert.expires,
                "│ " + display.paint("Description: ", Colors.BOLD),
            ]
            lines += display.wrap_words(alert.desc)
            lines.append("╰" + "─" * 57)
            self.write("\n".join(lines))

    def show_pollen_data(self, location: str) -> None:
        self._loading("Fetching pollen information")
        result = self.service.get_forecast(location, 3)
        if isinstance(result, Failure):
            self._report_failure("pollen data", location, result)
            return
        self._screen()
        self.write(
            display.section_header(f"POLLEN & ALLERGEN DATA - {location}"),
            display.info_message("Detailed pollen data requires a specialized API. Showing available air quality metrics."),
        )
        current = result.payload.current
        aqi = current.air_quality if current is not None else None
        if aqi is None or aqi.us_epa_index is None:
            self.write(display.warning_message("Pollen data not available for this location"))
            return
        index = aqi.us_epa_index
        color = display.aqi_color(index)
        self.write(
            display.key_value("Estimated Pollen", estimate_pollen(index), color),
            display.key_value("Air Quality", f"{index}/6", color),
            display.progress_bar(index * 16, "Allergen Risk Level"),
            "\n" + display.paint(f"💡 Tip: {pollen_tip(index)}", Colors.YELLOW),
        )

    def show_ip_lookup(self, ip: str) -> None:
        self._loading("Looking up IP information")
        result = self.service.get_ip_lookup(ip)
        if isinstance(result, Failure):
            self.write(display.error_message(f"Failed to lookup IP {ip}: {result.detail}"))
            return
        info = result.payload
        self._screen()
        self.write(
            display.section_header("IP GEOLOCATION LOOKUP"),
            display.key_value("IP Address", info.ip),
            display.key_value("Type", info.type),
            display.key_value("Country", info.country_name, Colors.GREEN),
            display.key_value("Region", info.region, Colors.GREEN),
            display.key_value("City", info.city, Colors.GREEN),
            display.key_value("Latitude", f"{info.lat}", Colors.YELLOW),
            display.key_value("Longitude", f"{info.lon}", Colors.YELLOW),
            display.key_value("Timezone", info.tz_id, Colors.PURPLE),
            display.key_value("Local Time", info.localtime, Colors.PURPLE),
            display.info_message("Fetching weather for detected location..."),
        )
        location = info.location_query()
        weather = self.service.get_current_weather(location)
        if isinstance(weather, Failure):
            logger.warning("No weather for detected location %s: %s", location, weather.detail)
            return
        self.write(display.weather_card(weather.payload.current, location))

    # -- settings ---------------------------------------------------------

    def show_settings_menu(self) -> None:
        while True:
            self._screen()
            logging_on = is_file_logging_enabled()
            self.write(
                display.section_header("SETTINGS & CONFIGURATION"),
                "\n" + display.paint("Current Configuration:", Colors.BOLD),
                display.key_value("API Key", self.settings.masked_api_key(), Colors.GRAY),
                display.key_value("Timeout", f"{self.settings.timeout_seconds} seconds"),
                display.key_value("Logging", "Enabled" if logging_on else "Disabled",
                                  Colors.GREEN if logging_on else Colors.RED),
                "\n╭────────── Settings Menu ──────────╮\n"
                "│ 1. 🔑 Configure API Key\n"
                "│ 2. 📊 Toggle Logging\n"
                "│ 3. 🗑️  Clear Cache\n"
                "│ 4. 📤 Export Settings\n"
                "│ 5. 📥 Import Settings\n"
                "│ 6. ⬅️  Back to Main Menu\n"
                "╰────────────────────────────────────╯",
            )
            choice = self.ask(display.paint("\nSelect option (1-6): ", Colors.BOLD, Colors.PURPLE))
            actions = {
                "1": self.configure_api_key,
                "2": self.toggle_logging,
                "3": self.clear_cache,
                "4": self.export_settings,
                "5": self.import_settings,
            }
            if choice == "6":
                return
            action = actions.get(choice)
            if action is None:
                self.write(display.error_message("Invalid choice"))
                continue
            action()
            return

    def configure_api_key(self) -> None:
        new_key = self.ask(display.paint("\nEnter new API key (or press Enter to keep current): ", Colors.CYAN))
        if not new_key:
            return
        self.settings.api_key = new_key
        if save_settings_file(self.settings):
            self.write(display.success_message("API key updated successfully"))
        else:
            self.write(display.error_message("Failed to save configuration"))

    def toggle_logging(self) -> None:
        enabled = not is_file_logging_enabled()
        set_file_logging(enabled, self.settings.log_file)
        self.settings.logging_enabled = enabled
        self.write(display.success_message(f"Logging {'enabled' if enabled else 'disabled'}"))

    def clear_cache(self) -> None:
        self.service.clear_cache()
        self.write(display.success_message("Cache cleared successfully"))

    def export_settings(self) -> None:
        if save_settings_file(self.settings):
            self.write(display.success_message(f"Settings exported to {self.settings.config_file}"))
        else:
            self.write(display.error_message("Failed to export settings"))

    def import_settings(self) -> None:
        if not load_settings_file(self.settings):
            self.write(display.error_message("Failed to import settings"))
            return
        # Timeout lives on the fetcher; the cache and HTTP session are kept.
        previous = self.service.fetcher
        self.service.fetcher = build_fetcher(self.settings, previous.cache, session=previous.session)
        self.write(display.success_message("Settings imported successfully"))

    # -- main loop --------------------------------------------------------

    def handle_export_report(self) -> None:
        location = self.get_location_input()
        if not location:
            self.write(display.error_message("Location cannot be empty"))
            return
        filename = self.ask(display.paint(f"\n📄 Enter filename (default: {DEFAULT_REPORT_FILENAME}): ", Colors.CYAN))
        filename = filename or DEFAULT_REPORT_FILENAME
        self._loading("Generating weather report")
        error = export_weather_report(self.service, location, filename)
        if error is None:
            self.write(display.success_message(f"Weather report exported to {filename}"))
        else:
            self.write(display.error_message(f"Failed to export weather report: {error}"))

    def handle_choice(self, choice: str) -> None:
        """Run one main-menu action."""
        location_screens = {
            "1": self.show_current_weather,
            "2": self.show_extended_forecast,
            "3": self.show_hourly_forecast,
            "4": self.show_air_quality,
            "5": self.show_weather_alerts,
            "6": self.show_pollen_data,
        }
        if choice in location_screens:
            location = self.get_location_input()
            if location:
                location_screens[choice](location)
            else:
                self.write(display.error_message("Location cannot be empty"))
        elif choice == "7":
            ip = self.get_ip_input()
            if ip == "auto" or is_valid_ip(ip):
                self.show_ip_lookup(ip)
            else:
                self.write(display.error_message(f"Invalid IP address: {ip}"))
        elif choice == "8":
            self.show_settings_menu()
        elif choice == "9":
            self.handle_export_report()
        else:
            self.write(display.error_message("Invalid choice. Please select 0-9."))

    def run(self) -> None:
        while self.running:
            self._screen()
            self.write(display.menu())
            try:
                choice = self.ask("")
            except EOFError:
                break
            if choice in EXIT_CHOICES:
                break
            try:
                self.handle_choice(choice)
                if choice != "8":
                    self.ask(display.paint("\nPress Enter to return to main menu...", Colors.GRAY))
            except EOFError:
                break
            except Exception as exc:
                logger.exception("Exception in main loop: %s", exc)
                self.write(display.error_message(f"An error occurred: {exc}"))
        self.running = False

    def shutdown(self) -> None:
        logger.info("Weather CLI Pro v%s shutting down", VERSION)
        self.write(
            display.CLEAR_SCREEN,
            "\n" + display.paint("Thank you for using Weather CLI Pro!", Colors.BOLD, Colors.CYAN),
            display.paint("🌈 Weather CLI Pro - Stay informed, stay safe! 🌈", Colors.BOLD),
            display.paint(f"Version {VERSION} - Professional Weather Intelligence", Colors.GRAY),
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="weather-cli", description="Interactive WeatherAPI.com terminal client")
    parser.add_argument("location", nargs="*", help="run a quick current-weather lookup for this location")
    parser.add_argument("--no-menu", action="store_true", help="exit after the quick lookup instead of opening the menu")
    parser.add_argument("--log-level", default=None, help="root log level (default: settings log_level)")
    return parser


def main(argv: Optional[List[str]] = None, *, settings: Settings | None = None,
         input_func: Callable[[str], str] = input, out: TextIO | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = settings or Settings()
    except ValidationError as exc:
        print(display.paint(f"Invalid configuration: {exc}", Colors.RED), file=sys.stderr)
        return 2
    load_settings_file(settings)
    setup_logging(
        level=args.log_level or settings.log_level,
        job_name="weather_cli",
        log_file=settings.log_file if settings.logging_enabled else None,
    )
    logger.info("Weather CLI Pro v%s started", VERSION)

    try:
        app = WeatherApp(build_weather_service(settings), settings, input_func=input_func, out=out)
        location = " ".join(args.location).strip()
        if location:
            app.write(display.CLEAR_SCREEN + display.banner(), display.info_message(f"Quick lookup for: {location}"))
            app.show_current_weather(location)
            if args.no_menu:
                return 0
            app.ask(display.paint("\nPress Enter to continue to main menu...", Colors.GRAY))
        app.run()
        app.shutdown()
    except (KeyboardInterrupt, EOFError):
        return 0
    except Exception as exc:
        logger.exception("Fatal error: %s", exc)
        print(display.paint(f"Fatal error: {exc}", Colors.RED), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
