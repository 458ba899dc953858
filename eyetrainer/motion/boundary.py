from __future__ import annotations

from .config import Settings
from .geometry import Rect, clamp_point_to_rect, inset_rect
from .state import MotionState


def handle_boundary_collisions(
    state: MotionState, settings: Settings, region: Rect
) -> int:
    """Clamp the position into the region and reflect the velocity per axis.

    Returns the number of axes that bounced (0, 1 or 2).
    """
    bounds = inset_rect(region, settings.half_size)
    left, right = bounds["x"], bounds["x"] + bounds["width"]
    top, bottom = bounds["y"], bounds["y"] + bounds["height"]
    bounced = 0

    if state.x < left:
        state.x = left
        state.vx = abs(state.vx)
        bounced += 1
    elif state.x > right:
        state.x = right
        state.vx = -abs(state.vx)
        bounced += 1

    if state.y < top:
        state.y = top
        state.vy = abs(state.vy)
        bounced += 1
    elif state.y > bottom:
        state.y = bottom
        state.vy = -abs(state.vy)
        bounced += 1

    return bounced


def clamp_into_region(state: MotionState, settings: Settings, region: Rect) -> None:
    """Pull the position inside the region (after a resize) without bouncing."""
    state.x, state.y = clamp_point_to_rect(
        state.x, state.y, inset_rect(region, settings.half_size)
    )
