from __future__ import annotations
import dataclasses
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class cfg:
    """Motion engine and host tuning"""

    # --- Steering ---
    MAX_TURN_RATE_RAD_S = 2.0 * math.pi  # curved model: one full turn per second
    CURSOR_HALF_SIZE_PX = 8.0  # cursor marker ignores the size setting

    # --- Host frame loop ---
    TARGET_HZ = 60
    VIEWPORT_POLL_S = 0.5
    VIEWPORT_WAIT_S = 1.5  # install-time wait for the first layout
    CDP_SEND_TIMEOUT_S = 0.05
    TOAST_MS = 1500

    # --- Persistence ---
    STORAGE_KEY = "eyeTrainingSettings"

    # --- Session log / export ---
    CSV_FILENAME_PREFIX = "eye-coordination-log-"
    TRAJECTORY_MAX_SAMPLES = 20000
    RESET_PROMPT = "Reset all settings and clear session log?"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class ShapeType(str, Enum):
    CIRCLE = "circle"
    SQUARE = "square"
    CURSOR = "cursor"


class TurnType(str, Enum):
    ANGULAR = "angular"
    CURVED = "curved"


class AxisMode(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    FREE = "free"
    CIRCLE = "circle"


# attribute name -> (persisted key, value kind)
_FIELDS: Dict[str, Tuple[str, Any]] = {
    "theme": ("theme", Theme),
    "size": ("size", int),
    "shape": ("shapeType", ShapeType),
    "opacity": ("opacity", int),
    "speed": ("speed", int),
    "turn_type": ("turnType", TurnType),
    "min_freq": ("minFreq", float),
    "max_freq": ("maxFreq", float),
    "play_area": ("playArea", int),
    "axis_mode": ("axisMode", AxisMode),
    "pause_at_turns": ("pauseAtTurns", int),
    "grid_overlay": ("gridOverlay", bool),
    "circle_radius": ("circleRadius", int),
    "viewing_distance": ("viewingDistance", int),
    "screen_ppi": ("screenPPI", int),
}
_KEY_TO_FIELD = {key: name for name, (key, _) in _FIELDS.items()}

_PERCENT_FIELDS = frozenset({"opacity", "play_area"})
_NON_NEGATIVE_FIELDS = frozenset({"speed", "min_freq", "max_freq", "pause_at_turns"})
_POSITIVE_FIELDS = frozenset(
    {"size", "circle_radius", "viewing_distance", "screen_ppi"}
)


def _normalize_field(name: str, raw: Any) -> Any:
    """Coerce one raw value into the field's type; ValueError if unusable."""
    kind = _FIELDS[name][1]
    if isinstance(kind, type) and issubclass(kind, Enum):
        return kind(str(getattr(raw, "value", raw)).strip().lower())
    if kind is bool:
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        return bool(raw)
    if isinstance(raw, bool) or raw is None:
        raise ValueError(f"{name} must be numeric, got {raw!r}")
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {raw!r}")
    if name in _PERCENT_FIELDS:
        value = max(0.0, min(100.0, value))
    elif name in _POSITIVE_FIELDS and value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    elif name in _NON_NEGATIVE_FIELDS and value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return int(value) if kind is int else value


@dataclass(frozen=True)
class Settings:
    """Snapshot of every user-tunable parameter handed to the motion core."""

    theme: Theme = Theme.LIGHT
    size: int = 12
    shape: ShapeType = ShapeType.CIRCLE
    opacity: int = 100
    speed: int = 200
    turn_type: TurnType = TurnType.ANGULAR
    min_freq: float = 1.5
    max_freq: float = 3.0
    play_area: int = 60
    axis_mode: AxisMode = AxisMode.HORIZONTAL
    pause_at_turns: int = 200
    grid_overlay: bool = False
    circle_radius: int = 60
    viewing_distance: int = 60
    screen_ppi: int = 110

    @property
    def half_size(self) -> float:
        """Half of the shape's footprint in px (used for every inset/clamp)."""
        if self.shape is ShapeType.CURSOR:
            return cfg.CURSOR_HALF_SIZE_PX
        return self.size / 2.0

    @classmethod
    def minimal(cls) -> "Settings":
        """Full-window free bounce without rests between waypoints."""
        return cls(play_area=100, axis_mode=AxisMode.FREE, pause_at_turns=0)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Settings":
        """Build settings from a (possibly partial or malformed) mapping.

        Accepts persisted camelCase keys or attribute names. Unknown keys are
        ignored; unusable values fall back to the default with a warning.
        """
        logger = logging.getLogger(__name__)
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            logger.warning("Ignoring settings of type %s", type(data).__name__)
            return cls()

        values: Dict[str, Any] = {}
        for raw_key, raw in data.items():
            name = _KEY_TO_FIELD.get(raw_key, raw_key)
            if name not in _FIELDS:
                continue
            try:
                values[name] = _normalize_field(name, raw)
            except (TypeError, ValueError) as exc:
                logger.warning(
                    "Setting %s=%r rejected (%s); using default", raw_key, raw, exc
                )

        settings = cls(**values)
        if settings.min_freq > settings.max_freq:
            logger.warning(
                "minFreq %.3f > maxFreq %.3f; raising maxFreq",
                settings.min_freq,
                settings.max_freq,
            )
            settings = dataclasses.replace(settings, max_freq=settings.min_freq)
        return settings

    def to_dict(self) -> Dict[str, Any]:
        """Persisted (camelCase, JSON-safe) form."""
        out: Dict[str, Any] = {}
        for name, (key, _) in _FIELDS.items():
            value = getattr(self, name)
            out[key] = value.value if isinstance(value, Enum) else value
        return out

    def update(self, **changes: Any) -> "Settings":
        """Return a copy with `changes` applied.

        Rejected values keep the current one. Writing min_freq above max_freq
        drags max_freq up to it, and writing max_freq below min_freq drags
        min_freq down.
        """
        logger = logging.getLogger(__name__)
        values: Dict[str, Any] = {}
        for name, raw in changes.items():
            if name not in _FIELDS:
                raise TypeError(f"unknown setting {name!r}")
            try:
                values[name] = _normalize_field(name, raw)
            except (TypeError, ValueError) as exc:
                logger.warning(
                    "Setting %s=%r rejected (%s); keeping %r",
                    name,
                    raw,
                    exc,
                    getattr(self, name),
                )

        updated = dataclasses.replace(self, **values)
        if "min_freq" in values and updated.min_freq > updated.max_freq:
            updated = dataclasses.replace(updated, max_freq=updated.min_freq)
        elif "max_freq" in values and updated.max_freq < updated.min_freq:
            updated = dataclasses.replace(updated, min_freq=updated.max_freq)
        return updated
