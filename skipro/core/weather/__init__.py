"""
Resort weather: gateway, resort directory and display helpers.
"""

from .models import SkiResort
from .resorts import DEFAULT_SKI_RESORTS
from .display import weather_icon, wind_direction
from .gateway import (
    WeatherDataProvider,
    WeatherGateway,
    WeatherPayloadError,
    WeatherUnavailableError,
    normalize_observation,
    synthetic_observation,
)

__all__ = [
    "SkiResort",
    "DEFAULT_SKI_RESORTS",
    "weather_icon",
    "wind_direction",
    "WeatherDataProvider",
    "WeatherGateway",
    "WeatherPayloadError",
    "WeatherUnavailableError",
    "normalize_observation",
    "synthetic_observation",
]
