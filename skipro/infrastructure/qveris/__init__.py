"""
Qveris client for weather readings and resort search.

Implements the WeatherDataProvider protocol from core.weather.gateway.
"""

from .client import (
    QverisClient,
    QverisClientError,
    QverisConfig,
    create_qveris_client,
    flatten_timeline,
    poi_to_resort,
)

__all__ = [
    "QverisClient",
    "QverisClientError",
    "QverisConfig",
    "create_qveris_client",
    "flatten_timeline",
    "poi_to_resort",
]
