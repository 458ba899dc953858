from __future__ import annotations
import asyncio
import json
import logging
from typing import Any, List, Optional

from zendriver import cdp

from ..motion.config import Settings, ShapeType, Theme, cfg
from ..motion.engine import FrameSample
from .cdp import (
    ViewportUnavailable,
    evaluate,
    read_viewport,
    send_cdp,
    wait_for_viewport,
)
from .controller import SessionController
from .keyboard import KeyPress, handle_key

KEY_BINDING_NAME = "eyetrainerKey"
SHAPE_ID = "eyetrainer-shape"

_INSTALL_JS = """
(() => {
  if (document.getElementById(%(shape_id)s)) return true;
  const style = document.createElement('style');
  style.textContent = `
    body { margin: 0; overflow: hidden; background: #f4f4f0; }
    body.dark-theme { background: #0c0c0e; color: #ddd; }
    #eyetrainer-shape { position: fixed; left: 0; top: 0; background: #111;
                        will-change: transform; pointer-events: none; }
    body.dark-theme #eyetrainer-shape { background: #eee; }
    #eyetrainer-shape.circle { border-radius: 50%%; }
    #eyetrainer-shape.cursor { width: 16px; height: 16px; background: none;
      border-left: 2px solid currentColor; border-top: 2px solid currentColor; }
    #eyetrainer-grid { position: fixed; inset: 0; display: none; pointer-events: none;
      background-image: linear-gradient(#8884 1px, transparent 1px),
                        linear-gradient(90deg, #8884 1px, transparent 1px);
      background-size: 50px 50px; }
    #eyetrainer-grid.visible { display: block; }
    #eyetrainer-hud { position: fixed; left: 8px; bottom: 8px; font: 12px sans-serif; }
    #eyetrainer-toast { position: fixed; top: 12px; left: 50%%; opacity: 0;
      transform: translateX(-50%%); transition: opacity .2s; font: 14px sans-serif; }
    #eyetrainer-toast.visible { opacity: 1; }`;
  document.head.appendChild(style);
  const ids = ['eyetrainer-grid', %(shape_id)s, 'eyetrainer-hud', 'eyetrainer-toast'];
  for (const id of ids) {
    const el = document.createElement('div');
    el.id = id;
    document.body.appendChild(el);
  }
  document.addEventListener('keydown', (e) => {
    const f = document.activeElement;
    const inputFocused = !!f && ['INPUT', 'SELECT', 'TEXTAREA'].includes(f.tagName);
    const key = e.key.toLowerCase();
    if (![' ', 'r', 't', 'd'].includes(key) || inputFocused) return;
    if (key === 'r' && (e.ctrlKey || e.metaKey)) return;
    e.preventDefault();
    const payload = {key: e.key, ctrl: e.ctrlKey, meta: e.metaKey, inputFocused};
    if (key === 'r') payload.confirmed = window.confirm(%(prompt)s);
    window[%(binding)s](JSON.stringify(payload));
  });
  return true;
})()
"""


def _js(value: Any) -> str:
    return json.dumps(value)


class BrowserSession:
    """Drives a SessionController inside a Chromium tab through zendriver.

    The page only displays: the motion core runs here, one step per tick of
    an asyncio loop at cfg.TARGET_HZ, and each frame is pushed to the page
    as a CSS transform. Keydowns come back through a CDP runtime binding.
    """

    def __init__(
        self,
        page,
        controller: Optional[SessionController] = None,
        *,
        target_hz: float = cfg.TARGET_HZ,
    ):
        self.page = page
        self.controller = controller or SessionController()
        self.target_hz = float(target_hz)
        self._task: Optional[asyncio.Task] = None
        self._styles_dirty = True
        self._toasts: List[str] = []
        self._next_viewport_poll_ms = 0.0
        self.controller.notify = self._toasts.append
        self.controller.add_settings_listener(self._on_settings_changed)

    # ------------------------------------------------------------------
    # Page setup
    # ------------------------------------------------------------------
    async def install(self) -> None:
        """Inject the stimulus, HUD and key forwarding into the page."""
        await send_cdp(
            self.page,
            lambda: self.page.send(cdp.runtime.add_binding(name=KEY_BINDING_NAME)),
            label="addBinding",
            timeout_seconds=1.0,
        )
        self.page.add_handler(cdp.runtime.BindingCalled, self._on_binding_called)
        await evaluate(
            self.page,
            _INSTALL_JS
            % {
                "shape_id": _js(SHAPE_ID),
                "prompt": _js(cfg.RESET_PROMPT),
                "binding": _js(KEY_BINDING_NAME),
            },
            label="install",
        )
        try:
            width, height = await wait_for_viewport(self.page)
        except ViewportUnavailable:
            logging.getLogger(__name__).warning(
                "Viewport not ready after install; the frame loop keeps polling"
            )
        else:
            self._apply_viewport(width, height)

    async def refresh_viewport(self) -> None:
        size = await read_viewport(self.page)
        if size is None:
            logging.getLogger(__name__).debug("Viewport size not available")
            return
        self._apply_viewport(*size)

    def _apply_viewport(self, width: int, height: int) -> None:
        engine = self.controller.engine
        if (width, height) != (engine.viewport_width, engine.viewport_height):
            logging.getLogger(__name__).debug("Viewport now %dx%d", width, height)
            self.controller.set_viewport(width, height)

    def _on_settings_changed(self, settings: Settings) -> None:
        self._styles_dirty = True

    def _on_binding_called(self, event: cdp.runtime.BindingCalled) -> None:
        if event.name != KEY_BINDING_NAME:
            return
        try:
            payload = json.loads(event.payload)
        except ValueError:
            logging.getLogger(__name__).warning(
                "Malformed key payload %r", event.payload
            )
            return
        confirmed = bool(payload.get("confirmed", False))
        handle_key(
            self.controller,
            KeyPress.from_dict(payload),
            confirm=lambda prompt: confirmed,
        )

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def style_script(self, settings: Settings) -> str:
        size = "" if settings.shape is ShapeType.CURSOR else f"{settings.size}px"
        dark = _js(settings.theme is Theme.DARK)
        return (
            "(() => {"
            f"document.body.classList.toggle('dark-theme', {dark});"
            f"const s = document.getElementById({_js(SHAPE_ID)});"
            f"s.className = {_js(settings.shape.value)};"
            f"s.style.width = {_js(size)}; s.style.height = {_js(size)};"
            f"s.style.opacity = {settings.opacity / 100.0};"
            "document.getElementById('eyetrainer-grid')"
            f".classList.toggle('visible', {_js(settings.grid_overlay)});"
            "return true; })()"
        )

    def frame_script(self, sample: FrameSample) -> str:
        half = sample.size / 2.0
        hud = " | ".join(
            (self.controller.eccentricity_readout(), self.controller.last_mark_text)
        )
        return (
            f"document.getElementById({_js(SHAPE_ID)}).style.transform = "
            f"'translate3d({sample.x - half:.2f}px, {sample.y - half:.2f}px, 0)';"
            f"document.getElementById('eyetrainer-hud').textContent = {_js(hud)};"
        )

    def toast_script(self, message: str) -> str:
        return (
            "(() => { const t = document.getElementById('eyetrainer-toast');"
            f"t.textContent = {_js(message)}; t.classList.add('visible');"
            f"setTimeout(() => t.classList.remove('visible'), {cfg.TOAST_MS}); }})()"
        )

    async def render(self, sample: Optional[FrameSample]) -> None:
        if self._styles_dirty:
            self._styles_dirty = False
            await evaluate(
                self.page, self.style_script(self.controller.settings), label="styles"
            )
        while self._toasts:
            message = self._toasts.pop(0)
            await evaluate(self.page, self.toast_script(message), label="toast")
        if sample is not None:
            await evaluate(self.page, self.frame_script(sample), label="frame")

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------
    async def tick(self) -> Optional[FrameSample]:
        """One frame: poll the viewport when due, step the engine, render."""
        now_ms = self.controller.clock()
        if now_ms >= self._next_viewport_poll_ms:
            self._next_viewport_poll_ms = now_ms + cfg.VIEWPORT_POLL_S * 1000.0
            await self.refresh_viewport()
        sample = self.controller.step(now_ms)
        await self.render(sample)
        return sample

    async def run(self) -> None:
        interval = 1.0 / self.target_hz if self.target_hz > 0 else 0.0
        logging.getLogger(__name__).info(
            "Frame loop started at %.0f Hz", self.target_hz
        )
        try:
            while True:
                await self.tick()
                await asyncio.sleep(interval)
        finally:
            logging.getLogger(__name__).info("Frame loop stopped")

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.ensure_future(self.run())
        return self._task

    async def stop(self) -> None:
        """Cancel the frame loop; motion state is left as is."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None


async def run_session(
    page, controller: Optional[SessionController] = None
) -> BrowserSession:
    """Install into `page` and start the frame loop; returns the running session."""
    session = BrowserSession(page, controller)
    await session.install()
    session.start()
    return session
