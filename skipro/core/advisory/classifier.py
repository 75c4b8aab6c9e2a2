"""
Rule-based ski advisory.

This is the fallback for the AI advisory and must stay deterministic:
the same observation and mode always give the same Advisory. Rules run
in a fixed order (temperature, wind, visibility, UV) and the suggestion
list follows that order.

Severity only moves up through raise_level. The one exception is the
high-wind stop, which uses force_level and always ends at WARNING.
"""

from .models import Advisory, AdvisoryLevel, WeatherObservation, force_level, raise_level


# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

EXTREME_COLD_C = -20.0
SOFT_SNOW_ABOVE_C = 0.0
IDEAL_TEMP_MIN_C = -15.0
IDEAL_TEMP_MAX_C = -5.0

WIND_STOP_KMH = 40.0
WIND_CAUTION_KMH = 25.0
WIND_CALM_KMH = 15.0

LOW_VISIBILITY_KM = 5.0
HIGH_UV_INDEX = 4.0

BEGINNER_WIND_KMH = 15.0
BEGINNER_COLD_C = -10.0


# ---------------------------------------------------------------------------
# Copy
# ---------------------------------------------------------------------------

EXTREME_COLD_ADVICE = "Extremely cold today: wear insulated gear and watch for frostbite."
SOFT_SNOW_ADVICE = "Temperatures are above freezing, snow may be soft. Adjust your pace."
IDEAL_TEMP_ADVICE = "Comfortable temperature and good snow. Enjoy your day on the slopes."

WIND_STOP_ADVICE = "Wind is too strong. Suspend outdoor skiing for now."
WIND_CAUTION_ADVICE = "Strong wind: keep your weight centred and avoid high speeds."
CALM_WIND_ADVICE = "Light wind, ideal for practising technique."

LOW_VISIBILITY_ADVICE = "Low visibility: stick to runs you know and keep a safe distance."
HIGH_UV_ADVICE = "Strong UV: put on sunscreen and wear goggles."

TIP_BEGINNER_TERRAIN = "Stay on beginner runs and avoid steep slopes."
TIP_WIND_STANCE = "In the wind, lower your centre of gravity and keep your knees slightly bent."
TIP_COLD_WARMUP = "Cold muscles stiffen quickly. Warm up thoroughly before your first run."
TIP_REST = "Rest when you get tired. Steady, gradual progress is what makes you better."

TITLES = {
    AdvisoryLevel.EXCELLENT: "A perfect ski day! Conditions are excellent.",
    AdvisoryLevel.GOOD: "Good for skiing. Take the usual precautions.",
    AdvisoryLevel.CAUTION: "Skiable, but take extra care today.",
    AdvisoryLevel.WARNING: "Severe weather. Reschedule or pick an indoor venue.",
}


def classify(observation: WeatherObservation, beginner_mode: bool) -> Advisory:
    """
    Derive an Advisory from an observation.

    Total: every observation, including NaN or out-of-range values,
    yields a valid Advisory. NaN fails every comparison, so it simply
    triggers no rule.
    """
    level = AdvisoryLevel.GOOD
    suggestions: list[str] = []

    temp = observation.temp
    wind = observation.windspeed

    # Temperature: exactly one branch fires
    if temp < EXTREME_COLD_C:
        level = raise_level(level, AdvisoryLevel.CAUTION)
        suggestions.append(EXTREME_COLD_ADVICE)
    elif temp > SOFT_SNOW_ABOVE_C:
        level = raise_level(level, AdvisoryLevel.CAUTION)
        suggestions.append(SOFT_SNOW_ADVICE)
    elif IDEAL_TEMP_MIN_C <= temp <= IDEAL_TEMP_MAX_C:
        # Upgrade to EXCELLENT only while nothing has escalated yet
        if level.rank < AdvisoryLevel.CAUTION.rank:
            level = AdvisoryLevel.EXCELLENT
        suggestions.append(IDEAL_TEMP_ADVICE)

    # Wind
    if wind > WIND_STOP_KMH:
        level = force_level(level, AdvisoryLevel.WARNING)
        suggestions.append(WIND_STOP_ADVICE)
    elif wind > WIND_CAUTION_KMH:
        level = raise_level(level, AdvisoryLevel.CAUTION)
        suggestions.append(WIND_CAUTION_ADVICE)
    elif wind < WIND_CALM_KMH:
        suggestions.append(CALM_WIND_ADVICE)

    if observation.visibility < LOW_VISIBILITY_KM:
        level = raise_level(level, AdvisoryLevel.CAUTION)
        suggestions.append(LOW_VISIBILITY_ADVICE)

    if observation.uvindex >= HIGH_UV_INDEX:
        suggestions.append(HIGH_UV_ADVICE)

    return Advisory(
        level=level,
        title=TITLES[level],
        suggestions=tuple(suggestions),
        beginner_tips=_beginner_tips(observation) if beginner_mode else None,
    )


def _beginner_tips(observation: WeatherObservation) -> tuple[str, ...]:
    """Tips depend on the raw observation, never on the advisory level."""
    tips = [TIP_BEGINNER_TERRAIN]
    if observation.windspeed > BEGINNER_WIND_KMH:
        tips.append(TIP_WIND_STANCE)
    if observation.temp < BEGINNER_COLD_C:
        tips.append(TIP_COLD_WARMUP)
    tips.append(TIP_REST)
    return tuple(tips)
