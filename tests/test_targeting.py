"""Waypoint sampling per axis mode and the retarget/rest timers."""

import random

import pytest

from eyetrainer.motion.config import Settings, TurnType
from eyetrainer.motion.geometry import compute_play_region, inset_rect
from eyetrainer.motion.state import MotionState
from eyetrainer.motion.targeting import pick_new_target, sample_turn_duration

REGION = compute_play_region(800, 600, 60)


def _pick(settings, now_ms=0.0, seed=3, state=None):
    state = state or MotionState(x=REGION["cx"], y=REGION["cy"])
    pick_new_target(state, settings, REGION, now_ms, random.Random(seed))
    return state


def test_play_region_is_centered_fraction_of_viewport():
    assert REGION == {
        "x": 160.0,
        "y": 120.0,
        "width": 480.0,
        "height": 360.0,
        "cx": 400.0,
        "cy": 300.0,
    }


@pytest.mark.parametrize("seed", range(20))
def test_horizontal_targets_stay_on_center_line(seed):
    settings = Settings(size=20)
    state = _pick(settings, seed=seed)
    assert state.target_y == REGION["cy"]
    assert 170.0 <= state.target_x <= 630.0


@pytest.mark.parametrize("seed", range(20))
def test_vertical_targets_stay_on_center_column(seed):
    settings = Settings(size=20).update(axis_mode="vertical")
    state = _pick(settings, seed=seed)
    assert state.target_x == REGION["cx"]
    assert 130.0 <= state.target_y <= 470.0


@pytest.mark.parametrize("seed", range(20))
def test_free_targets_cover_inset_region(seed):
    settings = Settings(size=20).update(axis_mode="free")
    state = _pick(settings, seed=seed)
    bounds = inset_rect(REGION, 10.0)
    assert bounds["x"] <= state.target_x <= bounds["x"] + bounds["width"]
    assert bounds["y"] <= state.target_y <= bounds["y"] + bounds["height"]


def test_orbit_mode_leaves_state_untouched():
    settings = Settings().update(axis_mode="circle")
    state = MotionState(x=1.0, y=2.0, vx=3.0, vy=4.0)
    assert pick_new_target(state, settings, REGION, 10.0, random.Random(0)) is False
    assert state == MotionState(x=1.0, y=2.0, vx=3.0, vy=4.0)


def test_timers_follow_turn_duration_and_rest():
    settings = Settings(min_freq=2.0, max_freq=2.0, pause_at_turns=250)
    state = _pick(settings, now_ms=10_000.0)
    assert state.turn_duration == 2.0
    assert state.next_target_ms == 10_000.0 + 2000.0 + 250.0
    assert state.pause_until_ms == 10_250.0


def test_turn_duration_within_bounds():
    settings = Settings(min_freq=0.5, max_freq=4.0)
    rng = random.Random(5)
    durations = [sample_turn_duration(settings, rng) for _ in range(200)]
    assert all(0.5 <= d <= 4.0 for d in durations)
    assert max(durations) - min(durations) > 2.0


def test_curved_model_keeps_velocity_on_retarget():
    settings = Settings(turn_type=TurnType.CURVED)
    state = MotionState(x=400.0, y=300.0, vx=-50.0, vy=10.0)
    _pick(settings, state=state)
    assert state.velocity == (-50.0, 10.0)


def test_angular_model_snaps_velocity_on_retarget():
    settings = Settings(speed=100)
    state = _pick(settings)
    assert state.vx != 0.0 or state.vy != 0.0
    assert (state.vx ** 2 + state.vy ** 2) ** 0.5 == pytest.approx(100)
