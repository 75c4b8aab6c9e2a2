"""
Ski-condition advisories.

Contains the advisory models, the rule-based classifier and the
service that prefers an AI model and falls back to the rules.
"""

from .models import (
    Advisory,
    AdvisoryLevel,
    WeatherObservation,
    force_level,
    raise_level,
)
from .classifier import classify
from .orchestrator import (
    AdvisoryPayloadError,
    AdvisoryService,
    TextModelClient,
    parse_advisory_payload,
)

__all__ = [
    "Advisory",
    "AdvisoryLevel",
    "WeatherObservation",
    "force_level",
    "raise_level",
    "classify",
    "AdvisoryPayloadError",
    "AdvisoryService",
    "TextModelClient",
    "parse_advisory_payload",
]
