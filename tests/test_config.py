"""Settings parsing, normalization and the turn-duration ordering invariant."""

import logging

import pytest

from eyetrainer.motion.config import (
    AxisMode,
    Settings,
    ShapeType,
    Theme,
    TurnType,
    cfg,
)


class TestDefaults:
    def test_defaults_match_the_browser_app(self):
        s = Settings()
        assert s.theme is Theme.LIGHT
        assert s.size == 12
        assert s.shape is ShapeType.CIRCLE
        assert s.speed == 200
        assert s.turn_type is TurnType.ANGULAR
        assert (s.min_freq, s.max_freq) == (1.5, 3.0)
        assert s.play_area == 60
        assert s.axis_mode is AxisMode.HORIZONTAL
        assert s.pause_at_turns == 200
        assert s.circle_radius == 60
        assert (s.viewing_distance, s.screen_ppi) == (60, 110)
        assert s.grid_overlay is False

    def test_half_size_uses_fixed_cursor_footprint(self):
        assert Settings(size=30).half_size == 15
        assert (
            Settings(size=30, shape=ShapeType.CURSOR).half_size
            == cfg.CURSOR_HALF_SIZE_PX
        )

    def test_minimal_preset_is_a_full_window_free_bounce(self):
        s = Settings.minimal()
        assert s.play_area == 100
        assert s.axis_mode is AxisMode.FREE
        assert s.pause_at_turns == 0


class TestFromDict:
    def test_partial_dict_falls_back_to_defaults(self):
        s = Settings.from_dict({"speed": 350, "axisMode": "circle"})
        assert s.speed == 350
        assert s.axis_mode is AxisMode.CIRCLE
        assert s.size == 12

    def test_accepts_attribute_names_and_ignores_unknown_keys(self):
        s = Settings.from_dict({"turn_type": "curved", "bogus": 1})
        assert s.turn_type is TurnType.CURVED

    def test_bad_values_are_replaced_by_defaults(self, caplog):
        with caplog.at_level(logging.WARNING):
            s = Settings.from_dict(
                {"speed": "fast", "axisMode": "diagonal", "screenPPI": 0}
            )
        assert s.speed == 200
        assert s.axis_mode is AxisMode.HORIZONTAL
        assert s.screen_ppi == 110
        assert "rejected" in caplog.text

    def test_percent_fields_are_clamped(self):
        s = Settings.from_dict({"opacity": 180, "playArea": -5})
        assert s.opacity == 100
        assert s.play_area == 0

    def test_non_mapping_gives_defaults(self):
        assert Settings.from_dict(["not", "a", "dict"]) == Settings()
        assert Settings.from_dict(None) == Settings()

    def test_inverted_bounds_raise_max(self):
        s = Settings.from_dict({"minFreq": 4, "maxFreq": 2})
        assert s.min_freq == s.max_freq == 4

    def test_round_trip_through_persisted_form(self):
        original = Settings(theme=Theme.DARK, shape=ShapeType.SQUARE, grid_overlay=True)
        data = original.to_dict()
        assert data["shapeType"] == "square"
        assert data["screenPPI"] == 110
        assert Settings.from_dict(data) == original


class TestUpdate:
    @pytest.mark.parametrize("new_min", [3.5, 4.0, 10.0])
    def test_min_above_max_drags_max_up(self, new_min):
        s = Settings().update(min_freq=new_min)
        assert s.min_freq == new_min
        assert s.max_freq == new_min

    @pytest.mark.parametrize("new_max", [0.0, 0.5, 1.0])
    def test_max_below_min_drags_min_down(self, new_max):
        s = Settings().update(max_freq=new_max)
        assert s.max_freq == new_max
        assert s.min_freq == new_max

    def test_consistent_writes_leave_other_bound_alone(self):
        s = Settings().update(min_freq=2.0)
        assert (s.min_freq, s.max_freq) == (2.0, 3.0)
        s = s.update(max_freq=2.5)
        assert (s.min_freq, s.max_freq) == (2.0, 2.5)

    def test_rejected_value_keeps_current(self):
        s = Settings(speed=300).update(speed=-10)
        assert s.speed == 300

    def test_unknown_setting_is_an_error(self):
        with pytest.raises(TypeError, match="unknown setting"):
            Settings().update(warp=9)

    def test_update_returns_new_snapshot(self):
        s = Settings()
        t = s.update(theme="dark")
        assert s.theme is Theme.LIGHT
        assert t.theme is Theme.DARK
