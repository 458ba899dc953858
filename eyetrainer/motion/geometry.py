from __future__ import annotations
import random
from typing import Dict, Optional, Tuple

from ..utils import clamp, random_uniform

Rect = Dict[str, float]


def make_rect(x: float, y: float, width: float, height: float) -> Rect:
    """Build a {x,y,width,height,cx,cy} rect dict."""
    width = max(0.0, float(width))
    height = max(0.0, float(height))
    return {
        "x": float(x),
        "y": float(y),
        "width": width,
        "height": height,
        "cx": float(x) + width / 2.0,
        "cy": float(y) + height / 2.0,
    }


def compute_play_region(
    viewport_width: float, viewport_height: float, play_area_pct: float
) -> Rect:
    """Centered sub-rectangle covering play_area_pct percent of each axis."""
    ratio = clamp(float(play_area_pct), 0.0, 100.0) / 100.0
    width = viewport_width * ratio
    height = viewport_height * ratio
    return make_rect(
        (viewport_width - width) / 2.0, (viewport_height - height) / 2.0, width, height
    )


def inset_rect(rect: Rect, inset_px: float) -> Rect:
    """Shrink a rect by inset_px on every side; collapses onto the center axis."""
    inset_x = min(inset_px, rect["width"] / 2.0)
    inset_y = min(inset_px, rect["height"] / 2.0)
    return make_rect(
        rect["x"] + inset_x,
        rect["y"] + inset_y,
        rect["width"] - 2 * inset_x,
        rect["height"] - 2 * inset_y,
    )


def sample_point_in_rect(
    rect: Rect, rng: Optional[random.Random] = None
) -> Tuple[float, float]:
    """Uniformly sample a point inside a rect."""
    x = random_uniform(rect["x"], rect["x"] + rect["width"], rng)
    y = random_uniform(rect["y"], rect["y"] + rect["height"], rng)
    return x, y


def clamp_point_to_rect(x: float, y: float, rect: Rect) -> Tuple[float, float]:
    """Clamp a point (x,y) into the rect."""
    return (
        clamp(x, rect["x"], rect["x"] + rect["width"]),
        clamp(y, rect["y"], rect["y"] + rect["height"]),
    )
