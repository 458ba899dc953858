"""Shared fixtures: a controllable clock and engines on an 800x600 viewport."""

import pytest

from eyetrainer.motion.config import Settings
from eyetrainer.motion.engine import MotionEngine
from eyetrainer.motion.geometry import inset_rect

VIEWPORT = (800, 600)


class FakeClock:
    """Millisecond clock the test advances by hand."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> float:
        self.now_ms += ms
        return self.now_ms


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def make_engine():
    def _make(now_ms: float = 0.0, seed: int = 7, **changes) -> MotionEngine:
        settings = Settings().update(**changes) if changes else Settings()
        return MotionEngine(settings, *VIEWPORT, now_ms=now_ms, seed=seed)

    return _make


def inside_bounds(engine: MotionEngine, tol: float = 1e-9) -> bool:
    bounds = inset_rect(engine.region, engine.settings.half_size)
    x, y = engine.state.position
    return (
        bounds["x"] - tol <= x <= bounds["x"] + bounds["width"] + tol
        and bounds["y"] - tol <= y <= bounds["y"] + bounds["height"] + tol
    )
