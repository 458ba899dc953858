from .config import AxisMode, Settings, ShapeType, Theme, TurnType, cfg
from .engine import FrameSample, MotionEngine
from .state import MotionState

__all__ = [
    "AxisMode",
    "FrameSample",
    "MotionEngine",
    "MotionState",
    "Settings",
    "ShapeType",
    "Theme",
    "TurnType",
    "cfg",
]
