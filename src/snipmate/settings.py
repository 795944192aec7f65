"""Persisted SnipMate settings and their merge over built-in defaults."""

from dataclasses import asdict, dataclass
from typing import Any

from .adapters.fs_storage import normalize_path
from .core.ports import SettingsStore

DEFAULT_DOCUMENT_PATH = "SnipMate.md"

# Key used by settings files written by the Obsidian plugin.
LEGACY_KEYS = {"snipMatePath": "document_path"}


@dataclass
class Settings:
    """User-editable settings. Only the document path today."""
    document_path: str = DEFAULT_DOCUMENT_PATH

    def effective_path(self, default: str = DEFAULT_DOCUMENT_PATH) -> str:
        """Configured path, or ``default`` when it is empty or whitespace."""
        return normalize_path(self.document_path) or default

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def merge_settings(defaults: Settings, persisted: dict[str, Any] | None) -> Settings:
    """
    Shallow key-by-key merge: each persisted key overrides the default.

    Unknown keys are dropped; legacy plugin keys are renamed first.
    """
    merged = defaults.to_dict()
    for key, value in (persisted or {}).items():
        key = LEGACY_KEYS.get(key, key)
        if key in merged and isinstance(value, str):
            merged[key] = value
    return Settings(**merged)


class SettingsManager:
    """Holds the live settings and writes them through the store."""

    def __init__(self, store: SettingsStore, defaults: Settings | None = None):
        self.store = store
        self.defaults = defaults or Settings()
        self.settings = Settings(**self.defaults.to_dict())

    def load(self) -> Settings:
        self.settings = merge_settings(self.defaults, self.store.load())
        return self.settings

    async def save(self) -> None:
        await self.store.save(self.settings.to_dict())

    async def set_document_path(self, path: str) -> None:
        self.settings.document_path = path.strip()
        await self.save()

    def document_path(self) -> str:
        return self.settings.effective_path(self.defaults.effective_path())
