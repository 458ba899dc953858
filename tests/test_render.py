import asyncio

import pytest
from PIL import Image

from eyetrainer.host.controller import SessionController
from eyetrainer.motion.config import Settings, Theme
from eyetrainer.motion.engine import FrameSample
from eyetrainer.motion.geometry import compute_play_region
from eyetrainer.session import render
from eyetrainer.session.render import (
    render_session_image,
    save_session_trajectory_jpeg,
    set_session_image_callback,
)


def _samples():
    return [FrameSample(160.0 + i * 4.0, 300.0, 12.0, i * 16.0) for i in range(120)]


def test_canvas_is_viewport_plus_margin():
    image = render_session_image(
        _samples(), [], Settings(), (800, 600), compute_play_region(800, 600, 60)
    )
    assert image.size == (840, 640)
    assert image.mode == "RGB"


def test_theme_sets_background():
    settings = Settings(theme=Theme.DARK, grid_overlay=True)
    image = render_session_image(
        [], [], settings, (200, 100), compute_play_region(200, 100, 60), annotate=False
    )
    assert image.getpixel((1, 1)) == (12, 12, 14)


def test_path_color_runs_blue_to_red():
    assert render._eccentricity_to_rgb(0.0, 10.0) == (0, 120, 255)
    assert render._eccentricity_to_rgb(-5.0, 10.0) == (60, 205, 60)
    assert render._eccentricity_to_rgb(25.0, 10.0) == (255, 60, 60)


@pytest.mark.asyncio
async def test_save_trajectory_jpeg(tmp_path, clock):
    controller = SessionController(viewport=(800, 600), clock=clock, seed=2)
    for _ in range(30):
        controller.step()
        clock.advance(16)
    controller.mark()
    seen = []

    async def _on_saved(path):
        seen.append(path)

    set_session_image_callback(_on_saved)
    try:
        out = await save_session_trajectory_jpeg(
            controller.engine,
            controller.trajectory,
            controller.log,
            str(tmp_path / "session.jpg"),
        )
        await asyncio.sleep(0)
    finally:
        set_session_image_callback(None)

    assert out == str(tmp_path / "session.jpg")
    with Image.open(out) as image:
        assert image.format == "JPEG"
        assert image.size == (840, 640)
    assert [p.name for p in seen] == ["session.jpg"]
