from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from zendriver import cdp

from ..motion.config import cfg


class ViewportUnavailable(RuntimeError):
    """The tab never reported a usable viewport size."""

    pass


async def send_cdp(
    page,
    fn: Callable[[], Awaitable[Any]],
    *,
    label: str,
    timeout_seconds: float = cfg.CDP_SEND_TIMEOUT_S,
) -> Any:
    """Send one CDP command without letting it hold up the frame loop.

    A command that outlives `timeout_seconds` keeps running in the background
    and its late result is dropped. Returns None on a stall or failure; only
    cancellation propagates.
    """
    task = asyncio.ensure_future(fn())
    try:
        return await asyncio.wait_for(asyncio.shield(task), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logging.getLogger(__name__).warning(
            "CDP %s still pending after %.0f ms; dropping its result",
            label,
            timeout_seconds * 1000.0,
        )
        task.add_done_callback(_consume_late_result)
    except asyncio.CancelledError:
        raise
    except Exception:
        logging.getLogger(__name__).warning(
            "CDP %s failed", label, exc_info=True
        )
    return None


def _consume_late_result(task: asyncio.Future) -> None:
    if not task.cancelled() and task.exception() is not None:
        logging.getLogger(__name__).debug(
            "Late CDP reply failed", exc_info=task.exception()
        )


async def evaluate(page, expression: str, *, label: str = "evaluate") -> Any:
    """Run `expression` in the tab; returns its by-value result or None."""
    resp = await send_cdp(
        page,
        lambda: page.send(
            cdp.runtime.evaluate(expression=expression, return_by_value=True)
        ),
        label=label,
    )
    if resp is None:
        return None
    remote, thrown = resp if isinstance(resp, tuple) else (resp, None)
    if thrown is not None:
        logging.getLogger(__name__).warning("JS %s threw: %s", label, thrown)
        return None
    return getattr(remote, "value", None)


def _as_dict(reply: Any) -> dict:
    # getLayoutMetrics answers with a tuple of CDP objects, layout viewport first
    if isinstance(reply, tuple):
        reply = reply[0] if reply else None
    to_json = getattr(reply, "to_json", None)
    if callable(to_json):
        reply = to_json()
    return reply if isinstance(reply, dict) else {}


def _first_positive(data: dict, *names: str) -> int:
    for name in names:
        try:
            value = int(float(data.get(name, 0)))
        except (TypeError, ValueError):
            continue
        if value > 0:
            return value
    return 0


async def read_viewport(page) -> Optional[Tuple[int, int]]:
    """One attempt at the tab's CSS viewport size; None when it is not known yet.

    Layout metrics come first, window.innerWidth/innerHeight second.
    """
    metrics = _as_dict(
        await send_cdp(
            page,
            lambda: page.send(cdp.page.get_layout_metrics()),
            label="getLayoutMetrics",
        )
    )
    layout = metrics.get("layoutViewport", metrics)
    width = _first_positive(layout, "clientWidth", "width")
    height = _first_positive(layout, "clientHeight", "height")
    if width and height:
        return width, height

    inner = await evaluate(
        page, "[window.innerWidth || 0, window.innerHeight || 0]", label="innerSize"
    )
    try:
        width, height = int(inner[0]), int(inner[1])
    except (TypeError, ValueError, IndexError):
        return None
    return (width, height) if width > 0 and height > 0 else None


async def wait_for_viewport(
    page,
    *,
    timeout_seconds: float = cfg.VIEWPORT_WAIT_S,
    poll_interval_seconds: float = 0.05,
) -> Tuple[int, int]:
    """Poll read_viewport until the tab has laid out; ViewportUnavailable if not."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_seconds
    while True:
        size = await read_viewport(page)
        if size is not None:
            return size
        if loop.time() >= deadline:
            raise ViewportUnavailable(
                f"no viewport size within {timeout_seconds:.2f}s"
            )
        await asyncio.sleep(poll_interval_seconds)
