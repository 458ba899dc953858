from __future__ import annotations
import dataclasses
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional, Tuple

from ..motion.config import cfg
from ..motion.engine import FrameSample, MotionEngine
from .visual_angle import calculate_visual_angle

Clock = Callable[[], float]
WallClock = Callable[[], datetime]


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing Z."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _normalized(offset: float, half_extent: float) -> float:
    if half_extent <= 0:
        return 0.0
    return round(offset / half_extent, 3)


@dataclass(frozen=True)
class LogEntry:
    """One diplopia mark: where the stimulus was and every setting in force.

    Field order is the CSV column order.
    """

    iso_timestamp: str
    t_ms_since_session_start: int
    x_px: int
    y_px: int
    norm_x: float
    norm_y: float
    ecc_deg_x: float
    speed_px_s: float
    dot_size_px: int
    play_area_pct: int
    axis_mode: str
    turn_min_s: float
    turn_max_s: float
    pause_ms: int
    circle_radius_px: int
    theme: str
    opacity: int
    shape: str

    def to_row(self) -> Tuple:
        return dataclasses.astuple(self)


CSV_HEADER: Tuple[str, ...] = tuple(f.name for f in dataclasses.fields(LogEntry))


def snapshot_entry(
    engine: MotionEngine, *, t_ms: float, moment: datetime
) -> LogEntry:
    """Capture the engine's instantaneous state as a LogEntry."""
    settings = engine.settings
    center_x, center_y = engine.viewport_center
    offset_x = engine.state.x - center_x
    offset_y = engine.state.y - center_y
    ecc_deg_x = calculate_visual_angle(
        offset_x, settings.viewing_distance, settings.screen_ppi
    )
    return LogEntry(
        iso_timestamp=iso_timestamp(moment),
        t_ms_since_session_start=int(round(t_ms)),
        x_px=int(round(engine.state.x)),
        y_px=int(round(engine.state.y)),
        norm_x=_normalized(offset_x, engine.region["width"] / 2.0),
        norm_y=_normalized(offset_y, engine.region["height"] / 2.0),
        ecc_deg_x=round(ecc_deg_x, 1),
        speed_px_s=settings.speed,
        dot_size_px=settings.size,
        play_area_pct=settings.play_area,
        axis_mode=settings.axis_mode.value,
        turn_min_s=settings.min_freq,
        turn_max_s=settings.max_freq,
        pause_ms=settings.pause_at_turns,
        circle_radius_px=settings.circle_radius,
        theme=settings.theme.value,
        opacity=settings.opacity,
        shape=settings.shape.value,
    )


@dataclass
class SessionLog:
    """Append-only record of diplopia marks for the current session."""

    entries: List[LogEntry] = field(default_factory=list)
    clock: Clock = monotonic_ms
    wall_clock: WallClock = utc_now
    start_ms: Optional[float] = None

    def __post_init__(self) -> None:
        if self.start_ms is None:
            self.start_ms = self.clock()

    def __len__(self) -> int:
        return len(self.entries)

    def mark(self, engine: MotionEngine) -> LogEntry:
        """Append a snapshot of the engine's current state."""
        entry = snapshot_entry(
            engine, t_ms=self.clock() - self.start_ms, moment=self.wall_clock()
        )
        self.entries.append(entry)
        logging.getLogger(__name__).info(
            "Diplopia mark #%d at (%d, %d) ecc=%.1f°",
            len(self.entries),
            entry.x_px,
            entry.y_px,
            entry.ecc_deg_x,
        )
        return entry

    @property
    def last(self) -> Optional[LogEntry]:
        return self.entries[-1] if self.entries else None

    def reset(self) -> None:
        """Drop all entries and restart the session clock."""
        self.entries.clear()
        self.start_ms = self.clock()


@dataclass
class TrajectoryRecorder:
    """Bounded buffer of emitted frames, for rendering the session path."""

    samples: Deque[FrameSample] = field(
        default_factory=lambda: deque(maxlen=cfg.TRAJECTORY_MAX_SAMPLES)
    )

    def log_frame(self, sample: FrameSample) -> None:
        """Render-sink entry point; paused frames are not recorded."""
        if not sample.paused:
            self.samples.append(sample)

    def reset(self) -> None:
        self.samples.clear()
