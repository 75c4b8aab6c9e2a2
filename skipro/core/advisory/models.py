"""
Domain models for ski-condition advisories.

An advisory is derived from a weather observation and never stored.
Both the AI path and the rule-based classifier produce the same
Advisory shape, so callers never need to know which one answered.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class AdvisoryLevel(Enum):
    """
    How suitable today's conditions are for skiing.

    Levels are ordered by severity. Use `rank` for comparisons,
    never the string value.
    """
    EXCELLENT = "excellent"
    GOOD = "good"
    CAUTION = "caution"
    WARNING = "warning"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {
    AdvisoryLevel.EXCELLENT: 0,
    AdvisoryLevel.GOOD: 1,
    AdvisoryLevel.CAUTION: 2,
    AdvisoryLevel.WARNING: 3,
}


def raise_level(current: AdvisoryLevel, candidate: AdvisoryLevel) -> AdvisoryLevel:
    """Escalate to `candidate` only if it is more severe than `current`."""
    if candidate.rank > current.rank:
        return candidate
    return current


def force_level(current: AdvisoryLevel, candidate: AdvisoryLevel) -> AdvisoryLevel:
    """
    Replace `current` with `candidate` unconditionally.

    Reserved for hard safety stops. Everything else goes through
    raise_level so severity can only move up.
    """
    return candidate


@dataclass(frozen=True)
class WeatherObservation:
    """
    A normalized weather reading for one location.

    Frozen because an observation is a value: the classifier must see
    exactly what the gateway produced. Units are metric (°C, km/h, mm,
    cm, km).
    """
    location: str
    resolved_address: str
    temp: float
    feelslike: float
    tempmax: float
    tempmin: float
    humidity: float
    windspeed: float
    winddir: float
    snow: float
    snowdepth: float
    visibility: float
    uvindex: float
    conditions: str
    icon: str
    sunrise: str
    sunset: str
    is_synthetic: bool = False


@dataclass(frozen=True)
class Advisory:
    """
    Ski advice for a given observation.

    `beginner_tips` is None when beginner mode was off. An empty tuple
    would mean "beginner mode on, nothing to say", which the classifier
    never produces.
    """
    level: AdvisoryLevel
    title: str
    suggestions: tuple[str, ...] = ()
    beginner_tips: Optional[tuple[str, ...]] = None

    @property
    def has_beginner_tips(self) -> bool:
        return self.beginner_tips is not None

    def to_dict(self) -> dict[str, Any]:
        """Wire representation. The `beginnerTips` key is omitted when absent."""
        payload: dict[str, Any] = {
            "level": self.level.value,
            "title": self.title,
            "suggestions": list(self.suggestions),
        }
        if self.beginner_tips is not None:
            payload["beginnerTips"] = list(self.beginner_tips)
        return payload
