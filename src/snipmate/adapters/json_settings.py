import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from ..core.ports import SettingsStore

logger = logging.getLogger("snipmate.settings")


class JsonSettingsStore(SettingsStore):
    """Persisted settings as a small JSON object (``data.json``)."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return None
        return data if isinstance(data, dict) else None

    def _write(self, settings: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(settings, indent=2) + "\n", encoding="utf-8")

    async def save(self, settings: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, dict(settings))
