from __future__ import annotations
import math
import random
from typing import Optional

TWO_PI = 2.0 * math.pi


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Restrict value to [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def random_uniform(a: float, b: float, rng: Optional[random.Random] = None) -> float:
    """Return a random float between a and b, agnostic to order."""
    lo, hi = (a, b) if a <= b else (b, a)
    return (rng or random).uniform(lo, hi)


def normalize_angle(angle: float) -> float:
    """Wrap an angle difference into (-pi, pi]."""
    wrapped = math.fmod(angle, TWO_PI)
    if wrapped > math.pi:
        wrapped -= TWO_PI
    elif wrapped <= -math.pi:
        wrapped += TWO_PI
    return wrapped


def wrap_angle(angle: float) -> float:
    """Wrap an absolute angle into [0, 2*pi)."""
    wrapped = math.fmod(angle, TWO_PI)
    if wrapped < 0:
        wrapped += TWO_PI
    # fmod of a tiny negative can round up to exactly 2*pi
    return 0.0 if wrapped >= TWO_PI else wrapped
