from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from ..motion.config import Settings, cfg


class SettingsStoreError(ValueError):
    """Raised when a store's backing data cannot be read."""

    pass


class SettingsStore(Protocol):
    """Opaque string key-value store (the browser's localStorage, a file, ...)."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store; mostly for tests and throwaway sessions."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """Key-value store kept as one JSON object on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            raise SettingsStoreError(f"cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise SettingsStoreError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except SettingsStoreError:
            logging.getLogger(__name__).warning(
                "Overwriting unreadable settings file %s", self.path
            )
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def load_settings(store: SettingsStore, key: str = cfg.STORAGE_KEY) -> Settings:
    """Load persisted settings merged over the defaults; never raises."""
    logger = logging.getLogger(__name__)
    try:
        saved = store.get(key)
        if not saved:
            return Settings()
        return Settings.from_dict(json.loads(saved))
    except Exception:
        logger.error("Failed to load settings; using defaults", exc_info=True)
        return Settings()


def save_settings(
    store: SettingsStore, settings: Settings, key: str = cfg.STORAGE_KEY
) -> None:
    store.set(key, json.dumps(settings.to_dict()))
