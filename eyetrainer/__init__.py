from __future__ import annotations
from .host import SessionController, handle_key, KeyPress
from .motion import AxisMode, MotionEngine, Settings, TurnType
from .session import calculate_visual_angle, export_csv, save_session_trajectory_jpeg

__version__ = "0.1.0"

__all__ = [
    "AxisMode",
    "KeyPress",
    "MotionEngine",
    "SessionController",
    "Settings",
    "TurnType",
    "calculate_visual_angle",
    "export_csv",
    "handle_key",
    "save_session_trajectory_jpeg",
]
