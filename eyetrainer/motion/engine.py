from __future__ import annotations
import logging
import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .boundary import clamp_into_region, handle_boundary_collisions
from .config import AxisMode, Settings, TurnType
from .geometry import Rect, compute_play_region
from .orbit import update_orbit
from .state import MotionState
from .steering import apply_steering
from .targeting import pick_new_target


@dataclass(frozen=True)
class FrameSample:
    """What the render layer needs for one frame."""

    x: float
    y: float
    size: float  # full footprint in px
    t_ms: float
    paused: bool = False
    resting: bool = False  # inside the rest gate after a retarget


RenderSink = Callable[[FrameSample], None]


class MotionEngine:
    """Per-frame motion stepper for the bouncing stimulus.

    Feed it timestamps (ms, monotonic) through step(); it owns a MotionState
    and never raises out of step(), so a host frame loop cannot be halted by
    a bad frame.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        viewport_width: float = 0.0,
        viewport_height: float = 0.0,
        *,
        now_ms: float = 0.0,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ):
        self.settings = settings or Settings()
        self.rng = rng or random.Random(seed)
        self.viewport_width = float(viewport_width)
        self.viewport_height = float(viewport_height)
        self.region: Rect = compute_play_region(
            self.viewport_width, self.viewport_height, self.settings.play_area
        )
        self.state = MotionState()
        self._sinks: List[RenderSink] = []
        self.init_position()
        self.pick_new_target(now_ms)

    # ------------------------------------------------------------------
    # Collaborator wiring
    # ------------------------------------------------------------------
    def add_sink(self, sink: RenderSink) -> None:
        self._sinks.append(sink)

    def remove_sink(self, sink: RenderSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def _emit(self, sample: FrameSample) -> None:
        for sink in list(self._sinks):
            try:
                sink(sample)
            except Exception:
                logging.getLogger(__name__).warning(
                    "Render sink %r failed (frame skipped for it)", sink, exc_info=True
                )

    # ------------------------------------------------------------------
    # Configuration and geometry
    # ------------------------------------------------------------------
    def set_viewport(
        self, width: float, height: float, now_ms: Optional[float] = None
    ) -> None:
        """Resize the viewport; the play region follows and the position is clamped.

        The first usable size after a zero-area viewport starts the motion over
        from the region center with a fresh target.
        """
        was_empty = self.region["width"] <= 0 or self.region["height"] <= 0
        self.viewport_width = float(width)
        self.viewport_height = float(height)
        self._update_play_region()
        if was_empty and self.region["width"] > 0 and self.region["height"] > 0:
            if now_ms is None:
                now_ms = self.state.last_time_ms or 0.0
            self.init_position()
            self.pick_new_target(now_ms)

    def apply_settings(self, settings: Settings) -> None:
        """Swap in a new settings snapshot between frames."""
        previous = self.settings
        self.settings = settings
        self._update_play_region()
        if settings.axis_mode is not previous.axis_mode:
            self.init_position()

    def _update_play_region(self) -> None:
        self.region = compute_play_region(
            self.viewport_width, self.viewport_height, self.settings.play_area
        )
        if self.settings.axis_mode is not AxisMode.CIRCLE:
            clamp_into_region(self.state, self.settings, self.region)

    @property
    def viewport_center(self):
        return self.viewport_width / 2.0, self.viewport_height / 2.0

    @property
    def horizontal_offset(self) -> float:
        """Signed px offset of the stimulus from the viewport's vertical midline."""
        return self.state.x - self.viewport_width / 2.0

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------
    def init_position(self) -> None:
        """Center the stimulus; seed the orbit angle or a random curved heading."""
        state = self.state
        state.x = self.region["cx"]
        state.y = self.region["cy"]
        if self.settings.axis_mode is AxisMode.CIRCLE:
            state.orbit_angle = 0.0
        elif self.settings.turn_type is TurnType.CURVED:
            heading = self.rng.uniform(0.0, 2.0 * math.pi)
            state.vx = math.cos(heading) * self.settings.speed
            state.vy = math.sin(heading) * self.settings.speed

    def pick_new_target(self, now_ms: float) -> bool:
        return pick_new_target(
            self.state, self.settings, self.region, now_ms, self.rng
        )

    def reset(self, now_ms: float) -> None:
        """Start over from the region center with a fresh motion state."""
        paused = self.state.paused
        last_time_ms = self.state.last_time_ms
        self.state = MotionState(paused=paused, last_time_ms=last_time_ms)
        self.init_position()
        self.pick_new_target(now_ms)

    @property
    def paused(self) -> bool:
        return self.state.paused

    def pause(self) -> None:
        self.state.paused = True

    def resume(self, now_ms: Optional[float] = None) -> None:
        """Resume and rebase the frame clock so time spent paused is not replayed."""
        self.state.paused = False
        self.state.last_time_ms = now_ms

    def toggle_pause(self, now_ms: Optional[float] = None) -> bool:
        if self.state.paused:
            self.resume(now_ms)
        else:
            self.pause()
        return self.state.paused

    # ------------------------------------------------------------------
    # Frame stepping
    # ------------------------------------------------------------------
    def sample(self, now_ms: float, *, resting: bool = False) -> FrameSample:
        return FrameSample(
            x=self.state.x,
            y=self.state.y,
            size=self.settings.half_size * 2.0,
            t_ms=now_ms,
            paused=self.state.paused,
            resting=resting,
        )

    def step(self, now_ms: float) -> Optional[FrameSample]:
        """Advance one frame. Returns the emitted sample (None on the first frame)."""
        try:
            sample = self._step(float(now_ms))
        except Exception:
            logging.getLogger(__name__).error(
                "Motion step failed at t=%r ms; frame dropped", now_ms, exc_info=True
            )
            return None
        if sample is not None:
            self._emit(sample)
        return sample

    def _step(self, now_ms: float) -> Optional[FrameSample]:
        state = self.state
        if state.last_time_ms is None:
            state.last_time_ms = now_ms
            return None

        elapsed_s = max(0.0, (now_ms - state.last_time_ms) / 1000.0)
        state.last_time_ms = now_ms

        if state.paused:
            return self.sample(now_ms)
        if state.pause_until_ms > now_ms:
            return self.sample(now_ms, resting=True)

        _MODE_UPDATERS[self.settings.axis_mode](self, now_ms, elapsed_s)
        return self.sample(now_ms)

    def _update_waypoint(self, now_ms: float, elapsed_s: float) -> None:
        state = self.state
        settings = self.settings
        distance = math.hypot(state.target_x - state.x, state.target_y - state.y)
        overshoots = distance < settings.speed * elapsed_s
        if now_ms >= state.next_target_ms or overshoots:
            self.pick_new_target(now_ms)
            return

        apply_steering(state, settings, elapsed_s)
        state.x += state.vx * elapsed_s
        state.y += state.vy * elapsed_s

        bounced = handle_boundary_collisions(state, settings, self.region)
        # angular steering treats a bounce as arrival; curved keeps its target
        if bounced and settings.turn_type is TurnType.ANGULAR:
            self.pick_new_target(now_ms)

    def _update_orbit(self, now_ms: float, elapsed_s: float) -> None:
        update_orbit(self.state, self.settings, self.region, elapsed_s)


_MODE_UPDATERS: Dict[AxisMode, Callable[[MotionEngine, float, float], None]] = {
    AxisMode.HORIZONTAL: MotionEngine._update_waypoint,
    AxisMode.VERTICAL: MotionEngine._update_waypoint,
    AxisMode.FREE: MotionEngine._update_waypoint,
    AxisMode.CIRCLE: MotionEngine._update_orbit,
}
