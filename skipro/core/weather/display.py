"""Presentation helpers for weather readings."""

import math


COMPASS_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

WEATHER_ICONS = {
    "clear-day": "☀️",
    "clear-night": "🌙",
    "partly-cloudy-day": "⛅",
    "partly-cloudy-night": "☁️",
    "cloudy": "☁️",
    "rain": "🌧️",
    "snow": "🌨️",
    "sleet": "🌨️",
    "wind": "💨",
    "fog": "🌫️",
}

DEFAULT_WEATHER_ICON = "🌤️"


def wind_direction(degrees: float) -> str:
    """Eight-point compass label for a bearing, e.g. 225 -> "SW wind"."""
    if not math.isfinite(degrees):
        return "Variable wind"
    index = int(math.floor(degrees / 45 + 0.5)) % len(COMPASS_POINTS)
    return f"{COMPASS_POINTS[index]} wind"


def weather_icon(icon: str) -> str:
    return WEATHER_ICONS.get(icon, DEFAULT_WEATHER_ICON)
