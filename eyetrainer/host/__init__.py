from .controller import SessionController
from .keyboard import KEY_BINDINGS, KeyPress, handle_key
from .persistence import (
    JsonFileStore,
    MemoryStore,
    SettingsStoreError,
    load_settings,
    save_settings,
)

__all__ = [
    "JsonFileStore",
    "KEY_BINDINGS",
    "KeyPress",
    "MemoryStore",
    "SessionController",
    "SettingsStoreError",
    "handle_key",
    "load_settings",
    "save_settings",
]
