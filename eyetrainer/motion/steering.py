from __future__ import annotations
import math
from typing import Callable, Dict

from ..utils import clamp, normalize_angle
from .config import Settings, TurnType, cfg
from .state import MotionState


def steer_angular(state: MotionState, speed: float) -> bool:
    """Point the velocity straight at the target at `speed` px/s.

    Skipped (returns False) when already on the target, since there is no
    direction to aim at.
    """
    dx = state.target_x - state.x
    dy = state.target_y - state.y
    distance = math.hypot(dx, dy)
    if distance <= 0:
        return False
    state.vx = dx / distance * speed
    state.vy = dy / distance * speed
    return True


def steer_curved(state: MotionState, speed: float, elapsed_s: float) -> float:
    """Turn the heading toward the target by at most MAX_TURN_RATE * elapsed.

    Returns the signed turn applied this frame in radians.
    """
    dx = state.target_x - state.x
    dy = state.target_y - state.y
    if math.hypot(dx, dy) <= 0:
        return 0.0

    target_angle = math.atan2(dy, dx)
    current_angle = math.atan2(state.vy, state.vx)
    angle_diff = normalize_angle(target_angle - current_angle)

    max_turn = cfg.MAX_TURN_RATE_RAD_S * max(0.0, elapsed_s)
    turn = clamp(angle_diff, -max_turn, max_turn)
    heading = current_angle + turn

    state.vx = math.cos(heading) * speed
    state.vy = math.sin(heading) * speed
    return turn


def _angular(state: MotionState, settings: Settings, elapsed_s: float) -> None:
    steer_angular(state, settings.speed)


def _curved(state: MotionState, settings: Settings, elapsed_s: float) -> None:
    steer_curved(state, settings.speed, elapsed_s)


_STEERING_MODELS: Dict[TurnType, Callable[[MotionState, Settings, float], None]] = {
    TurnType.ANGULAR: _angular,
    TurnType.CURVED: _curved,
}


def apply_steering(state: MotionState, settings: Settings, elapsed_s: float) -> None:
    """Update the velocity for one frame using the configured turn model."""
    _STEERING_MODELS[settings.turn_type](state, settings, elapsed_s)
