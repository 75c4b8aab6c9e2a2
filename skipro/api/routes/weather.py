"""
Resort weather API endpoints.

Weather and advice are separate calls on purpose: the client shows the
reading as soon as it arrives and then asks for the advisory, which may
take up to the AI timeout before falling back to rules.

1. List resorts (GET /resorts)
2. Get a reading (GET /resorts/{resort_id} or GET ?location=...)
3. Get advice for that reading (POST /advisory)
"""

import dataclasses
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from ...core.advisory.models import WeatherObservation
from ...core.weather.display import weather_icon, wind_direction
from ...core.weather.gateway import NUMERIC_DEFAULTS, TEXT_DEFAULTS, WeatherUnavailableError
from ...core.weather.models import SkiResort
from ..dependencies import AdvisoryServiceDep, AuthenticatedUser, WeatherGatewayDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class ResortItem(BaseModel):
    id: str
    name: str
    address: str
    location: str = Field(description='Coordinates as "lng,lat"')
    rating: float
    cityname: str
    adname: str
    tel: Optional[str] = None
    photo_url: Optional[str] = None


class ResortListResponse(BaseModel):
    count: int
    resorts: list[ResortItem]


class ObservationModel(BaseModel):
    """
    A weather reading as sent over the API.

    Missing numeric and text fields take the same defaults the gateway
    applies to provider data, so the classifier never sees a gap.
    """
    model_config = ConfigDict(allow_inf_nan=False)

    location: str = Field(min_length=1)
    resolved_address: str = ""
    temp: float = NUMERIC_DEFAULTS["temp"]
    feelslike: float = NUMERIC_DEFAULTS["feelslike"]
    tempmax: float = NUMERIC_DEFAULTS["tempmax"]
    tempmin: float = NUMERIC_DEFAULTS["tempmin"]
    humidity: float = NUMERIC_DEFAULTS["humidity"]
    windspeed: float = NUMERIC_DEFAULTS["windspeed"]
    winddir: float = NUMERIC_DEFAULTS["winddir"]
    snow: float = NUMERIC_DEFAULTS["snow"]
    snowdepth: float = NUMERIC_DEFAULTS["snowdepth"]
    visibility: float = NUMERIC_DEFAULTS["visibility"]
    uvindex: float = NUMERIC_DEFAULTS["uvindex"]
    conditions: str = TEXT_DEFAULTS["conditions"]
    icon: str = TEXT_DEFAULTS["icon"]
    sunrise: str = TEXT_DEFAULTS["sunrise"]
    sunset: str = TEXT_DEFAULTS["sunset"]
    is_synthetic: bool = False

    def to_domain(self) -> WeatherObservation:
        return WeatherObservation(**self.model_dump())


class WeatherResponse(ObservationModel):
    """Reading plus display helpers."""
    wind_direction: str = Field(description='Compass label such as "NW wind"')
    icon_emoji: str


class AdvisoryRequest(BaseModel):
    observation: ObservationModel
    beginner_mode: bool = Field(default=True, description="Add a beginner tips section")


class AdvisoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    level: str = Field(description="excellent, good, caution or warning")
    title: str
    suggestions: list[str]
    beginner_tips: Optional[list[str]] = Field(
        default=None,
        alias="beginnerTips",
        description="Present only when beginner mode was requested",
    )


def _to_resort_item(resort: SkiResort) -> ResortItem:
    return ResortItem(**dataclasses.asdict(resort))


def _to_weather_response(observation: WeatherObservation) -> WeatherResponse:
    return WeatherResponse(
        **dataclasses.asdict(observation),
        wind_direction=wind_direction(observation.winddir),
        icon_emoji=weather_icon(observation.icon),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/resorts",
    response_model=ResortListResponse,
    summary="List ski resorts",
    description="Resorts from the POI directory, or the built-in list if it is unavailable",
)
async def list_resorts(
    gateway: WeatherGatewayDep,
    api_key: AuthenticatedUser,
    city: Annotated[Optional[str], Query(max_length=50)] = None,
    keywords: Annotated[Optional[str], Query(max_length=50)] = None,
) -> ResortListResponse:
    resorts = await gateway.fetch_resorts(city=city, keywords=keywords)
    return ResortListResponse(
        count=len(resorts),
        resorts=[_to_resort_item(r) for r in resorts],
    )


@router.get(
    "/resorts/{resort_id}",
    response_model=WeatherResponse,
    summary="Weather at a resort",
    responses={404: {"description": "Unknown resort"}, 503: {"description": "Weather unavailable, retry"}},
)
async def resort_weather(
    resort_id: str,
    gateway: WeatherGatewayDep,
    api_key: AuthenticatedUser,
) -> WeatherResponse:
    resort = gateway.get_resort(resort_id)
    if resort is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Resort not found"
        )

    try:
        observation = await gateway.fetch_for_resort(resort)
    except WeatherUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )

    return _to_weather_response(observation)


@router.get(
    "",
    response_model=WeatherResponse,
    summary="Weather for a location",
    description='Free-form location: "lat,lng" or a place name',
    responses={503: {"description": "Weather unavailable, retry"}},
)
async def location_weather(
    gateway: WeatherGatewayDep,
    api_key: AuthenticatedUser,
    location: Annotated[str, Query(min_length=1, max_length=200)],
    name: Annotated[Optional[str], Query(max_length=100)] = None,
) -> WeatherResponse:
    try:
        observation = await gateway.fetch_observation(location, name=name)
    except WeatherUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )

    return _to_weather_response(observation)


@router.post(
    "/advisory",
    response_model=AdvisoryResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
    summary="Ski advice for a reading",
    description="AI-generated when available, rule-based otherwise. Never fails on AI errors.",
)
async def advisory(
    request: AdvisoryRequest,
    service: AdvisoryServiceDep,
    api_key: AuthenticatedUser,
) -> AdvisoryResponse:
    observation = request.observation.to_domain()
    result = await service.get_advisory(observation, request.beginner_mode)

    logger.info(
        "Advisory served",
        extra={
            "location": observation.location,
            "level": result.level.value,
            "synthetic_weather": observation.is_synthetic,
        },
    )
    return AdvisoryResponse(**result.to_dict())
