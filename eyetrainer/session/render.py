from __future__ import annotations
import asyncio
import logging
from pathlib import Path as FSPath
from typing import Awaitable, Callable, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from ..motion.config import Settings, Theme
from ..motion.engine import FrameSample, MotionEngine
from .telemetry import LogEntry, SessionLog, TrajectoryRecorder
from .visual_angle import calculate_visual_angle

SessionImageCallback = Optional[Callable[[FSPath], Awaitable[None]]]
_SESSION_IMAGE_CALLBACK: SessionImageCallback = None

_BACKGROUNDS = {Theme.LIGHT: (240, 240, 236), Theme.DARK: (12, 12, 14)}
_INK = {Theme.LIGHT: (60, 60, 60), Theme.DARK: (200, 200, 200)}
GRID_STEP_PX = 50


def set_session_image_callback(cb: SessionImageCallback) -> None:
    """Register an async callback invoked whenever a session image is saved."""
    global _SESSION_IMAGE_CALLBACK
    _SESSION_IMAGE_CALLBACK = cb
    logging.getLogger(__name__).info(
        "Session image callback %s", "registered" if cb else "cleared"
    )


def _eccentricity_to_rgb(degrees: float, max_degrees: float) -> Tuple[int, int, int]:
    """
    Map |eccentricity| to RGB:
      - center    => blue (0, 120, 255)
      - mid       => green (60, 205, 60)
      - periphery => red  (255, 60, 60)
    """
    t = 0.0 if max_degrees <= 0 else abs(degrees) / max_degrees
    t = max(0.0, min(1.0, t))
    if t <= 0.5:
        u = t / 0.5
        start, end = (0, 120, 255), (60, 205, 60)
    else:
        u = (t - 0.5) / 0.5
        start, end = (60, 205, 60), (255, 60, 60)
    return tuple(int(a + (b - a) * u) for a, b in zip(start, end))


def render_session_image(
    samples: Sequence[FrameSample],
    entries: Sequence[LogEntry],
    settings: Settings,
    viewport: Tuple[float, float],
    region: dict,
    *,
    canvas_margin: int = 20,
    mark_ring_radius: int = 6,
    annotate: bool = True,
) -> Image.Image:
    """Draw the session: play region, path colored by eccentricity, diplopia marks."""
    viewport_width, viewport_height = int(viewport[0]), int(viewport[1])
    background = _BACKGROUNDS[settings.theme]
    ink = _INK[settings.theme]
    image = Image.new(
        "RGB",
        (
            max(1, viewport_width) + canvas_margin * 2,
            max(1, viewport_height) + canvas_margin * 2,
        ),
        background,
    )
    draw = ImageDraw.Draw(image)

    def to_canvas(x: float, y: float) -> Tuple[float, float]:
        x = canvas_margin + max(0.0, min(viewport_width - 1.0, x))
        y = canvas_margin + max(0.0, min(viewport_height - 1.0, y))
        return x, y

    if settings.grid_overlay:
        for gx in range(0, viewport_width + 1, GRID_STEP_PX):
            draw.line(
                [to_canvas(gx, 0), to_canvas(gx, viewport_height)],
                fill=tuple(c // 2 + b // 2 for c, b in zip(ink, background)),
            )
        for gy in range(0, viewport_height + 1, GRID_STEP_PX):
            draw.line(
                [to_canvas(0, gy), to_canvas(viewport_width, gy)],
                fill=tuple(c // 2 + b // 2 for c, b in zip(ink, background)),
            )

    left, top = to_canvas(region["x"], region["y"])
    right, bottom = to_canvas(
        region["x"] + region["width"], region["y"] + region["height"]
    )
    draw.rectangle([left, top, right, bottom], outline=ink, width=1)

    center_x = viewport_width / 2.0
    max_degrees = calculate_visual_angle(
        viewport_width / 2.0, settings.viewing_distance, settings.screen_ppi
    )
    point_radius = 2
    for sample in samples:
        px, py = to_canvas(sample.x, sample.y)
        degrees = calculate_visual_angle(
            sample.x - center_x, settings.viewing_distance, settings.screen_ppi
        )
        draw.ellipse(
            [
                px - point_radius,
                py - point_radius,
                px + point_radius,
                py + point_radius,
            ],
            fill=_eccentricity_to_rgb(degrees, max_degrees),
        )

    for entry in entries:
        x, y = to_canvas(entry.x_px, entry.y_px)
        draw.ellipse(
            [
                x - mark_ring_radius,
                y - mark_ring_radius,
                x + mark_ring_radius,
                y + mark_ring_radius,
            ],
            outline=(255, 140, 40),
            width=2,
        )
        draw.text(
            (x + mark_ring_radius + 2, y - 6), f"{entry.ecc_deg_x:.1f} deg", fill=ink
        )

    if annotate:
        summary = (
            f"Frames: {len(samples)} | Marks: {len(entries)} | "
            f"axis={settings.axis_mode.value} turn={settings.turn_type.value} "
            f"speed={settings.speed}px/s"
        )
        draw.text(
            (canvas_margin, canvas_margin + viewport_height + 4), summary, fill=ink
        )
    return image


async def save_session_trajectory_jpeg(
    engine: MotionEngine,
    trajectory: TrajectoryRecorder,
    log: SessionLog,
    outfile: str = "session_trajectory.jpg",
    **render_kwargs,
) -> str:
    """
    Render the session into a JPEG image off the event loop and notify the
    registered session image callback, if any.
    """
    settings = engine.settings
    viewport = (engine.viewport_width, engine.viewport_height)
    region = dict(engine.region)
    samples = list(trajectory.samples)
    entries = list(log.entries)

    def _render() -> str:
        image = render_session_image(
            samples, entries, settings, viewport, region, **render_kwargs
        )
        image.save(outfile, format="JPEG", quality=92, optimize=True)
        return outfile

    outfile_path = await asyncio.to_thread(_render)

    cb = _SESSION_IMAGE_CALLBACK
    if cb is not None:
        try:
            asyncio.create_task(cb(FSPath(outfile_path)))
        except Exception:
            logging.getLogger(__name__).debug(
                "Failed to dispatch session image callback", exc_info=True
            )
    else:
        logging.getLogger(__name__).debug(
            "Session image saved to %s but no callback is registered", outfile_path
        )
    return outfile_path
