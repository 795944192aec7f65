import asyncio
import hashlib
import io
import re
from pathlib import Path
from typing import Any

import yaml

from ..core.model import DocumentHandle
from ..core.ports import MetadataCache

_FM = re.compile(r"\A\s*---[ \t]*\r?\n(.*?)^---[ \t]*\r?$\n?", re.DOTALL | re.MULTILINE)


class YamlFrontmatter:
    def decode(self, text: str) -> tuple[dict[str, Any] | None, str]:
        """
        Split ``text`` into (front matter, body).

        Front matter is ``None`` when the document has no front matter
        section; an empty section decodes to ``{}``. Malformed YAML raises
        ``yaml.YAMLError``.
        """
        m = _FM.match(text)
        if not m:
            return None, text
        fm = yaml.safe_load(io.StringIO(m.group(1)))
        if not isinstance(fm, dict):
            fm = {}
        body = text[m.end() :]
        return (fm, body)


class FrontmatterCache(MetadataCache):
    """
    Front matter per document, re-parsed only when the content changes.

    Decodes the text the caller already read when given one; otherwise reads
    the file off the event loop.
    """

    def __init__(self, codec: YamlFrontmatter | None = None):
        self.codec = codec or YamlFrontmatter()
        self._entries: dict[Path, tuple[str, dict[str, Any] | None]] = {}

    async def get_metadata(
        self, handle: DocumentHandle, text: str | None = None
    ) -> dict[str, Any] | None:
        p = handle.location
        if text is None:
            if p is None or not p.is_file():
                return None
            text = await asyncio.to_thread(p.read_text, encoding="utf-8")
        key = p or Path(handle.path)
        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        cached = self._entries.get(key)
        if cached is not None and cached[0] == digest:
            return cached[1]
        meta, _body = self.codec.decode(text)
        self._entries[key] = (digest, meta)
        return meta

