from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

from ..motion.config import Settings, Theme, cfg
from ..motion.engine import FrameSample, MotionEngine
from ..session.analysis import summarize_marks
from ..session.export import export_csv
from ..session.telemetry import (
    Clock,
    LogEntry,
    SessionLog,
    TrajectoryRecorder,
    WallClock,
    monotonic_ms,
    utc_now,
)
from ..session.visual_angle import format_eccentricity
from .persistence import MemoryStore, SettingsStore, load_settings, save_settings

Confirm = Callable[[str], bool]
Notify = Callable[[str], None]
SettingsListener = Callable[[Settings], None]

NO_MARK_TEXT = "Last diplopia mark: -"


class SessionController:
    """Façade over one training session, bound to its host collaborators.

    The host supplies a settings store, a confirm(prompt) callable for the
    reset dialog and a notify(message) callable for toasts. Everything the
    keyboard surface and settings panel can do goes through here.
    """

    def __init__(
        self,
        store: Optional[SettingsStore] = None,
        *,
        viewport: Tuple[float, float] = (0.0, 0.0),
        confirm: Optional[Confirm] = None,
        notify: Optional[Notify] = None,
        clock: Optional[Clock] = None,
        wall_clock: Optional[WallClock] = None,
        seed: Optional[int] = None,
    ):
        self.store = store if store is not None else MemoryStore()
        self.clock = clock or monotonic_ms
        self.confirm = confirm or (lambda prompt: True)
        self.notify = notify or (lambda message: None)
        self.engine = MotionEngine(
            load_settings(self.store),
            viewport[0],
            viewport[1],
            now_ms=self.clock(),
            seed=seed,
        )
        self.log = SessionLog(clock=self.clock, wall_clock=wall_clock or utc_now)
        self.trajectory = TrajectoryRecorder()
        self.engine.add_sink(self.trajectory.log_frame)
        self.last_mark_text = NO_MARK_TEXT
        self._settings_listeners: List[SettingsListener] = []

    @property
    def settings(self) -> Settings:
        return self.engine.settings

    def add_settings_listener(self, listener: SettingsListener) -> None:
        self._settings_listeners.append(listener)

    def _apply(self, settings: Settings) -> None:
        self.engine.apply_settings(settings)
        try:
            save_settings(self.store, settings)
        except OSError:
            logging.getLogger(__name__).warning(
                "Could not persist settings", exc_info=True
            )
        for listener in list(self._settings_listeners):
            try:
                listener(settings)
            except Exception:
                logging.getLogger(__name__).warning(
                    "Settings listener %r failed", listener, exc_info=True
                )

    def update_settings(self, **changes: Any) -> Settings:
        """Apply settings-panel changes, persist them and notify listeners."""
        self._apply(self.settings.update(**changes))
        return self.settings

    def set_viewport(self, width: float, height: float) -> None:
        self.engine.set_viewport(width, height, self.clock())

    def toggle_theme(self) -> Theme:
        theme = Theme.DARK if self.settings.theme is Theme.LIGHT else Theme.LIGHT
        self.update_settings(theme=theme)
        return theme

    def toggle_pause(self, now_ms: Optional[float] = None) -> bool:
        """Pause or resume; returns True when now paused."""
        now_ms = self.clock() if now_ms is None else now_ms
        paused = self.engine.toggle_pause(now_ms)
        logging.getLogger(__name__).info(
            "Session %s", "paused" if paused else "resumed"
        )
        return paused

    def reset(self, confirm: Optional[Confirm] = None) -> bool:
        """Back to default settings with an empty log, after confirmation."""
        ask = confirm or self.confirm
        if not ask(cfg.RESET_PROMPT):
            return False
        self.log.reset()
        self.trajectory.reset()
        self.last_mark_text = NO_MARK_TEXT
        self._apply(Settings())
        self.engine.reset(self.clock())
        logging.getLogger(__name__).info("Session reset to defaults")
        return True

    def mark(self) -> LogEntry:
        """Record a diplopia event at the stimulus' current position."""
        entry = self.log.mark(self.engine)
        local_time = self.log.wall_clock().astimezone().strftime("%H:%M:%S")
        self.last_mark_text = (
            f"Last diplopia mark: {entry.ecc_deg_x:.1f}° (time {local_time})"
        )
        self.notify("Marked")
        return entry

    def export_log(self, directory: Union[str, Path] = ".") -> Optional[Path]:
        path = export_csv(self.log, directory)
        if path is None:
            self.notify("No data to export")
        return path

    def summary(self) -> str:
        return summarize_marks(self.log)

    def eccentricity_readout(self) -> str:
        settings = self.settings
        return format_eccentricity(
            self.engine.horizontal_offset,
            settings.viewing_distance,
            settings.screen_ppi,
        )

    def step(self, now_ms: Optional[float] = None) -> Optional[FrameSample]:
        return self.engine.step(self.clock() if now_ms is None else now_ms)
