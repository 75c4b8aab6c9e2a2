"""
Domain models for the resort weather module.

The observation itself lives with the advisory models because the
classifier consumes it. This module holds what only the weather side
needs: the resort directory entries.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SkiResort:
    """
    A ski resort from the POI directory.

    `location` is "lng,lat" as the directory returns it. Weather
    providers want "lat,lng"; see `weather_query`.
    """
    id: str
    name: str
    address: str
    location: str
    rating: float
    cityname: str
    adname: str
    tel: Optional[str] = None
    photo_url: Optional[str] = None

    @property
    def district_address(self) -> str:
        """City plus district, used when the provider has no resolved address."""
        return f"{self.cityname}{self.adname}"

    @property
    def weather_query(self) -> str:
        """Coordinates in the "lat,lng" order weather providers expect."""
        parts = [p.strip() for p in self.location.split(",")]
        if len(parts) != 2 or not all(parts):
            return self.name
        lng, lat = parts
        return f"{lat},{lng}"
