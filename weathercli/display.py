"""Terminal rendering helpers: ANSI colors, headers, tables and cards.

Every function returns a string; the CLI decides where it is written.
"""
from __future__ import annotations

import datetime as dt
from typing import List, Optional, Sequence

from weathercli.models import CurrentWeather, ForecastDay, HourForecast


class Colors:
    """256-color ANSI escape sequences."""
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RESET = "\033[0m"

    RED = "\033[38;5;196m"
    ORANGE = "\033[38;5;208m"
    YELLOW = "\033[38;5;226m"
    GREEN = "\033[38;5;82m"
    CYAN = "\033[38;5;87m"
    BLUE = "\033[38;5;75m"
    PURPLE = "\033[38;5;141m"
    GRAY = "\033[38;5;246m"
    WHITE = "\033[38;5;255m"
    DARK_GRAY = "\033[38;5;240m"

    BG_BLUE = "\033[48;5;18m"
    BG_DARK = "\033[48;5;236m"
    BG_RED = "\033[48;5;88m"
    BG_GREEN = "\033[48;5;22m"
    BG_YELLOW = "\033[48;5;94m"


CLEAR_SCREEN = "\033[2J\033[1;1H"
PROGRESS_BAR_WIDTH = 50
HOURLY_ROWS = 12
ALERT_WRAP_WIDTH = 57

# (substrings, icon); first match wins
_ICON_RULES = [
    (("sunny", "clear"), "☀️"),
    (("cloud",), "☁️"),
    (("rain", "drizzle"), "🌧️"),
    (("snow",), "❄️"),
    (("storm", "thunder"), "⛈️"),
    (("fog", "mist"), "🌫️"),
]
DEFAULT_ICON = "🌤️"

_AQI_COLORS = {
    1: Colors.GREEN,
    2: Colors.YELLOW,
    3: Colors.ORANGE,
    4: Colors.RED,
    5: Colors.PURPLE,
    6: Colors.PURPLE,
}


def weather_icon(condition: str) -> str:
    lowered = condition.lower()
    for needles, icon in _ICON_RULES:
        if any(n in lowered for n in needles):
            return icon
    return DEFAULT_ICON


def temperature_color(temp_c: float) -> str:
    """Color band for a Celsius temperature."""
    if temp_c >= 35:
        return Colors.RED
    if temp_c >= 25:
        return Colors.ORANGE
    if temp_c >= 15:
        return Colors.YELLOW
    if temp_c >= 5:
        return Colors.GREEN
    if temp_c >= -5:
        return Colors.CYAN
    return Colors.BLUE


def aqi_color(us_epa_index: Optional[int]) -> str:
    return _AQI_COLORS.get(us_epa_index, Colors.GRAY)


def paint(text: str, *styles: str) -> str:
    return "".join(styles) + text + Colors.RESET


def banner(now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now()
    art = (
        "\n  ╔══════════════════════════════════════════════════════════════╗\n"
        "  ║                  W E A T H E R   C L I   P R O               ║\n"
        "  ╚══════════════════════════════════════════════════════════════╝\n"
    )
    return "\n".join([
        paint(art, Colors.BG_BLUE, Colors.PURPLE),
        paint("      🌍 Professional Weather Intelligence Platform v2.0      ", Colors.BG_BLUE, Colors.CYAN),
        paint("      " + "─" * 50 + "      ", Colors.BG_BLUE, Colors.YELLOW),
        "",
        paint(f"Current time: {now.strftime('%Y-%m-%d %H:%M:%S')}", Colors.DIM),
        "",
    ])


def section_header(title: str) -> str:
    border = "═" * (len(title) + 4)
    box = f"╔{border}╗\n║ {title}   ║\n╚{border}╝"
    return "\n" + paint(box, Colors.BG_DARK, Colors.BOLD, Colors.BLUE)


def key_value(key: str, value: str, color: str = Colors.CYAN) -> str:
    label = f"{key}:".ljust(18)
    return f" {paint(label, Colors.BOLD, Colors.GRAY)}{paint(value, color)}"


def progress_bar(percentage: float, label: str = "") -> str:
    """Fixed-width bar; the percentage is clamped to 0..100."""
    pct = max(0, min(100, int(percentage)))
    filled = (pct * PROGRESS_BAR_WIDTH) // 100
    cells = paint("█" * filled, Colors.GREEN) + paint("░" * (PROGRESS_BAR_WIDTH - filled), Colors.DARK_GRAY)
    return f" {paint(label + ': ', Colors.BOLD)}[{cells}] {paint(f'{pct}%', Colors.BOLD)}"


def _message(badge: str, badge_colors: Sequence[str], text: str, text_color: str) -> str:
    return "\n" + paint(f" {badge} ", *badge_colors) + " " + paint(text, text_color)


def error_message(text: str) -> str:
    return _message("❌ ERROR", (Colors.BG_RED, Colors.WHITE), text, Colors.RED)


def success_message(text: str) -> str:
    return _message("✅ SUCCESS", (Colors.BG_GREEN, Colors.WHITE), text, Colors.GREEN)


def warning_message(text: str) -> str:
    return _message("⚠️  WARNING", (Colors.BG_YELLOW, Colors.WHITE), text, Colors.YELLOW)


def info_message(text: str) -> str:
    return "\n" + paint(f"ℹ️  {text}", Colors.CYAN)


def weather_card(current: CurrentWeather, location: str) -> str:
    condition = current.condition.text
    lines = [
        "",
        "╭─────────────────────────────────────╮",
        f"│ {paint(location[:33].ljust(33), Colors.BOLD, Colors.CYAN)}   │",
        "├─────────────────────────────────────┤",
        f"│ {weather_icon(condition)} {condition}",
        f"│ {paint(f'{int(current.temp_c)}°C'.ljust(33), Colors.BOLD, temperature_color(current.temp_c))}   │",
        f"│ Feels like {paint(f'{int(current.feelslike_c)}°C', temperature_color(current.feelslike_c))}",
        "╰─────────────────────────────────────╯",
    ]
    return "\n".join(lines)


def hourly_table(hours: Sequence[HourForecast], limit: int = HOURLY_ROWS) -> str:
    """Next `limit` hours: time, condition, temperature, rain chance and wind."""
    lines = [
        section_header(f"{limit}-HOUR FORECAST"),
        "",
        paint(f"{'Time':>6}{'Condition':>12}{'Temp':>8}{'Rain%':>8}{'Wind':>10}", Colors.BOLD),
        "─" * 44,
    ]
    for hour in hours[:limit]:
        lines.append(
            paint(f"{hour.clock:>6}", Colors.CYAN)
            + f"{hour.condition.text[:10]:>12}"
            + paint(f"{int(hour.temp_c):>6}°", temperature_color(hour.temp_c))
            + paint(f"{hour.chance_of_rain:>6}%", Colors.BLUE)
            + paint(f"{int(hour.wind_kph):>8}kph", Colors.GRAY)
        )
    return "\n".join(lines)


def daily_table(days: Sequence[ForecastDay]) -> str:
    lines = [
        section_header(f"{len(days)}-DAY FORECAST"),
        "",
        paint(f"{'Date':>12}{'Condition':>15}{'High':>8}{'Low':>8}{'Rain%':>8}{'Wind':>10}", Colors.BOLD),
        "─" * 61,
    ]
    for day in days:
        summary = day.day
        lines.append(
            paint(f"{day.date[5:]:>12}", Colors.CYAN)
            + f"{summary.condition.text[:13]:>15}"
            + paint(f"{int(summary.maxtemp_c):>6}°", temperature_color(summary.maxtemp_c))
            + paint(f"{int(summary.mintemp_c):>6}°", temperature_color(summary.mintemp_c))
            + paint(f"{summary.daily_chance_of_rain:>6}%", Colors.BLUE)
            + paint(f"{int(summary.maxwind_kph):>8}kph", Colors.GRAY)
        )
    return "\n".join(lines)


def wrap_words(text: str, width: int = ALERT_WRAP_WIDTH, prefix: str = "│ ") -> List[str]:
    """Greedy word wrap; each line starts with `prefix` and stays within `width`."""
    lines: List[str] = []
    line = prefix
    for word in text.split():
        if len(line) + len(word) > width and line != prefix:
            lines.append(line.rstrip())
            line = prefix
        line += word + " "
    if line != prefix:
        lines.append(line.rstrip())
    return lines


def menu() -> str:
    options = [
        ("1", "🌤️  Current Weather & Today's Forecast"),
        ("2", "📅  7-Day Extended Forecast"),
        ("3", "🕒  24-Hour Detailed Forecast"),
        ("4", "💨  Air Quality Index & Pollution Data"),
        ("5", "⚠️   Weather Alerts & Warnings"),
        ("6", "🌿  Pollen & Allergen Information"),
        ("7", "🌍  IP Geolocation & Weather"),
        ("8", "⚙️   Settings & Configuration"),
        ("9", "📄  Export Weather Report"),
        ("0", "🚪  Exit Application"),
    ]
    lines = ["", "╭─────────────────────── MAIN MENU ───────────────────────╮", "│"]
    lines += [f"│ {paint(key + '.', Colors.BOLD)} {label}" for key, label in options]
    lines += ["│", "╰─────────────────────────────────────────────────────────╯", ""]
    lines.append(paint("Select an option (0-9): ", Colors.BOLD, Colors.PURPLE))
    return "\n".join(lines)
