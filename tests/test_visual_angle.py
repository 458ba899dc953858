"""Visual angle conversion and the live eccentricity readout."""

import pytest

from eyetrainer.session.visual_angle import (
    calculate_visual_angle,
    format_eccentricity,
    pixels_to_cm,
)


def test_zero_offset_is_zero_degrees():
    assert calculate_visual_angle(0, 60, 110) == 0.0


def test_reference_example():
    assert pixels_to_cm(200, 110) == pytest.approx(4.618, abs=1e-3)
    assert calculate_visual_angle(200, 60, 110) == pytest.approx(4.408, abs=1e-3)
    assert round(calculate_visual_angle(200, 60, 110), 1) == 4.4


def test_sign_of_offset_does_not_matter():
    assert calculate_visual_angle(-200, 60, 110) == calculate_visual_angle(200, 60, 110)


def test_monotonic_in_absolute_offset():
    angles = [calculate_visual_angle(px, 57, 96) for px in range(0, 4000, 25)]
    assert all(b > a for a, b in zip(angles, angles[1:]))
    assert angles[-1] < 180.0


def test_closer_viewing_gives_larger_angle():
    assert calculate_visual_angle(100, 30, 110) > calculate_visual_angle(100, 60, 110)


@pytest.mark.parametrize(
    "offset,expected",
    [
        (200, "Current eccentricity: +4.4°"),
        (-200, "Current eccentricity: -4.4°"),
        (0, "Current eccentricity: +0.0°"),
    ],
)
def test_readout_is_sign_annotated(offset, expected):
    assert format_eccentricity(offset, 60, 110) == expected
