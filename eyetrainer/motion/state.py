from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class MotionState:
    """Mutable kinematic state of the stimulus. Owned by a MotionEngine."""

    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0  # px/s
    vy: float = 0.0
    target_x: float = 0.0
    target_y: float = 0.0
    orbit_angle: float = 0.0  # radians, [0, 2*pi)
    turn_duration: float = 0.0  # seconds
    next_target_ms: float = 0.0
    pause_until_ms: float = 0.0
    last_time_ms: Optional[float] = None  # None until the first frame
    paused: bool = False

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self.vx, self.vy

    @property
    def target(self) -> Tuple[float, float]:
        return self.target_x, self.target_y
