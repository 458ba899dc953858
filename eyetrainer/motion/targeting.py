from __future__ import annotations
import logging
import random
from typing import Callable, Dict, Tuple

from ..utils import random_uniform
from .config import AxisMode, Settings, TurnType
from .geometry import Rect, inset_rect, sample_point_in_rect
from .state import MotionState
from .steering import steer_angular

TargetSampler = Callable[[Rect, Rect, random.Random], Tuple[float, float]]


def _sample_horizontal(
    bounds: Rect, region: Rect, rng: random.Random
) -> Tuple[float, float]:
    """Random x inside the inset region, y pinned to the region's center line."""
    x = random_uniform(bounds["x"], bounds["x"] + bounds["width"], rng)
    return x, region["cy"]


def _sample_vertical(
    bounds: Rect, region: Rect, rng: random.Random
) -> Tuple[float, float]:
    y = random_uniform(bounds["y"], bounds["y"] + bounds["height"], rng)
    return region["cx"], y


def _sample_free(bounds: Rect, region: Rect, rng: random.Random) -> Tuple[float, float]:
    return sample_point_in_rect(bounds, rng)


# Orbit mode has no waypoints.
_TARGET_SAMPLERS: Dict[AxisMode, TargetSampler] = {
    AxisMode.HORIZONTAL: _sample_horizontal,
    AxisMode.VERTICAL: _sample_vertical,
    AxisMode.FREE: _sample_free,
}


def sample_turn_duration(settings: Settings, rng: random.Random) -> float:
    """Seconds until the next mandatory retarget, uniform in [min_freq, max_freq]."""
    return random_uniform(settings.min_freq, settings.max_freq, rng)


def pick_new_target(
    state: MotionState,
    settings: Settings,
    region: Rect,
    now_ms: float,
    rng: random.Random,
) -> bool:
    """Choose the next waypoint and arm the retarget and rest timers.

    Under angular steering the velocity snaps toward the new target at once;
    curved steering keeps its heading and converges frame by frame.
    Returns False (and changes nothing) in orbit mode.
    """
    sampler = _TARGET_SAMPLERS.get(settings.axis_mode)
    if sampler is None:
        return False

    bounds = inset_rect(region, settings.half_size)
    state.target_x, state.target_y = sampler(bounds, region, rng)

    if settings.turn_type is TurnType.ANGULAR:
        steer_angular(state, settings.speed)

    state.turn_duration = sample_turn_duration(settings, rng)
    state.next_target_ms = (
        now_ms + state.turn_duration * 1000.0 + settings.pause_at_turns
    )
    state.pause_until_ms = now_ms + settings.pause_at_turns

    logging.getLogger(__name__).debug(
        "New target (%.1f, %.1f) turn=%.2fs rest=%dms",
        state.target_x,
        state.target_y,
        state.turn_duration,
        settings.pause_at_turns,
    )
    return True
