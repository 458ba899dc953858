from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from .controller import Confirm, SessionController


@dataclass(frozen=True)
class KeyPress:
    """A keydown as reported by the host."""

    key: str
    ctrl: bool = False
    meta: bool = False
    input_focused: bool = False  # INPUT/SELECT/TEXTAREA has focus

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "KeyPress":
        return cls(
            key=str(data.get("key", "")),
            ctrl=bool(data.get("ctrl", False)),
            meta=bool(data.get("meta", False)),
            input_focused=bool(data.get("inputFocused", False)),
        )


def _toggle_pause(controller, press, confirm) -> bool:
    controller.toggle_pause()
    return True


def _reset(controller, press, confirm) -> bool:
    # leave ctrl/cmd+R to the browser
    if press.ctrl or press.meta:
        return False
    controller.reset(confirm=confirm)
    return True


def _toggle_theme(controller, press, confirm) -> bool:
    controller.toggle_theme()
    return True


def _mark(controller, press, confirm) -> bool:
    controller.mark()
    return True


KeyAction = Callable[[SessionController, KeyPress, Optional[Confirm]], bool]

KEY_BINDINGS: Dict[str, KeyAction] = {
    " ": _toggle_pause,
    "r": _reset,
    "t": _toggle_theme,
    "d": _mark,
}


def handle_key(
    controller: SessionController,
    press: KeyPress,
    *,
    confirm: Optional[Confirm] = None,
) -> bool:
    """Run the action bound to `press`; returns True when the key was consumed.

    Keys typed into a form field are never treated as shortcuts.
    """
    if press.input_focused:
        return False
    action = KEY_BINDINGS.get(press.key.lower())
    if action is None:
        return False
    logging.getLogger(__name__).debug("Key %r -> %s", press.key, action.__name__)
    return action(controller, press, confirm)
