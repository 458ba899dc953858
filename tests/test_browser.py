"""BrowserSession against a fake zendriver tab."""

import asyncio
import json
from types import SimpleNamespace

import pytest
from zendriver import cdp

from eyetrainer.host.browser import KEY_BINDING_NAME, SHAPE_ID, BrowserSession
from eyetrainer.host.cdp import ViewportUnavailable, read_viewport, wait_for_viewport
from eyetrainer.host.controller import SessionController


class FakePage:
    """Answers the handful of CDP commands the session sends."""

    def __init__(self, width=800, height=600):
        self.width = width
        self.height = height
        self.methods = []
        self.expressions = []
        self.handlers = []

    async def send(self, cmd):
        request = next(cmd)
        method = request["method"]
        self.methods.append(method)
        if method == "Page.getLayoutMetrics":
            return {
                "layoutViewport": {
                    "clientWidth": self.width,
                    "clientHeight": self.height,
                }
            }
        if method == "Runtime.evaluate":
            self.expressions.append(request["params"]["expression"])
            return SimpleNamespace(value=True), None
        return None

    def add_handler(self, event_type, handler):
        self.handlers.append((event_type, handler))


def _binding_event(payload, name=KEY_BINDING_NAME):
    raw = payload if isinstance(payload, str) else json.dumps(payload)
    return SimpleNamespace(name=name, payload=raw)


@pytest.fixture
def page():
    return FakePage()


@pytest.fixture
def session(page, clock):
    controller = SessionController(clock=clock, seed=5)
    return BrowserSession(page, controller)


@pytest.mark.asyncio
async def test_install(session, page):
    await session.install()
    assert page.methods[0] == "Runtime.addBinding"
    assert page.handlers == [(cdp.runtime.BindingCalled, session._on_binding_called)]
    assert SHAPE_ID in page.expressions[0]
    assert KEY_BINDING_NAME in page.expressions[0]
    engine = session.controller.engine
    assert (engine.viewport_width, engine.viewport_height) == (800.0, 600.0)
    assert engine.state.position == (400.0, 300.0)
    assert engine.state.target_y == 300.0


@pytest.mark.asyncio
async def test_read_viewport(page):
    assert await read_viewport(page) == (800, 600)
    assert await read_viewport(FakePage(0, 0)) is None


@pytest.mark.asyncio
async def test_wait_for_viewport_gives_up():
    page = FakePage(0, 0)
    with pytest.raises(ViewportUnavailable):
        await wait_for_viewport(
            page, timeout_seconds=0.05, poll_interval_seconds=0.01
        )


@pytest.mark.asyncio
async def test_tick_renders_frames(session, page, clock):
    await session.install()
    assert await session.tick() is None
    assert "dark-theme" in page.expressions[-1]
    clock.advance(16)
    sample = await session.tick()
    assert sample is not None
    assert "translate3d(" in page.expressions[-1]
    assert "Current eccentricity:" in page.expressions[-1]


@pytest.mark.asyncio
async def test_mark_key_shows_toast(session, page):
    await session.install()
    session._on_binding_called(_binding_event({"key": "d"}))
    assert len(session.controller.log) == 1
    await session.render(None)
    assert any("Marked" in e for e in page.expressions)


@pytest.mark.asyncio
async def test_theme_key_restyles(session, page):
    await session.install()
    await session.render(None)
    session._on_binding_called(_binding_event({"key": "t"}))
    await session.render(None)
    assert "classList.toggle('dark-theme', true)" in page.expressions[-1]


def test_reset_follows_page_confirmation(session):
    session.controller.mark()
    session._on_binding_called(_binding_event({"key": "r", "confirmed": False}))
    assert len(session.controller.log) == 1
    session._on_binding_called(_binding_event({"key": "r", "confirmed": True}))
    assert len(session.controller.log) == 0


def test_foreign_and_malformed_bindings_ignored(session):
    session._on_binding_called(_binding_event({"key": "d"}, name="other"))
    session._on_binding_called(_binding_event("{oops"))
    assert len(session.controller.log) == 0


@pytest.mark.asyncio
async def test_start_stop(session, page):
    await session.install()
    task = session.start()
    assert session.start() is task
    await asyncio.sleep(0.05)
    await session.stop()
    assert task.cancelled()
    assert session._task is None
    assert any("translate3d(" in e for e in page.expressions)
