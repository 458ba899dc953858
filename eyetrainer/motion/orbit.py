from __future__ import annotations
import math

from ..utils import wrap_angle
from .config import Settings
from .geometry import Rect
from .state import MotionState


def orbit_angular_speed(settings: Settings) -> float:
    """rad/s for a point moving at settings.speed along the orbit circle."""
    return settings.speed / float(settings.circle_radius)


def update_orbit(
    state: MotionState, settings: Settings, region: Rect, elapsed_s: float
) -> None:
    """Advance the orbit angle and place the stimulus on the circle.

    The radius is assumed to fit the play region; no clamping happens here.
    """
    radius = float(settings.circle_radius)
    state.orbit_angle = wrap_angle(
        state.orbit_angle + orbit_angular_speed(settings) * elapsed_s
    )
    state.x = region["cx"] + math.cos(state.orbit_angle) * radius
    state.y = region["cy"] + math.sin(state.orbit_angle) * radius
