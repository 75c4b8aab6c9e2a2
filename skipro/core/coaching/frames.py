"""
Keyframe selection for coaching videos.

Clips are short (a run or a few turns), so three frames spread across
the clip give the coach the start, middle and end of the movement
without paying for a dense frame pass.
"""

from dataclasses import dataclass


DEFAULT_KEYFRAME_FRACTIONS = (0.2, 0.5, 0.8)


@dataclass(frozen=True)
class KeyframeStrategy:
    """
    Pick timestamps at fixed fractions of the clip duration.

    Fractions outside [0, 1] are clamped to the clip bounds.
    """
    fractions: tuple[float, ...] = DEFAULT_KEYFRAME_FRACTIONS

    def __post_init__(self) -> None:
        if not self.fractions:
            raise ValueError("At least one keyframe fraction is required")

    def calculate_timestamps(self, duration_seconds: float) -> list[float]:
        if duration_seconds <= 0:
            return [0.0]
        return [
            min(max(fraction, 0.0), 1.0) * duration_seconds
            for fraction in self.fractions
        ]
