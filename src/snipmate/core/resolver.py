import inspect
from collections.abc import Mapping
from typing import Any

from .ports import DocumentStore, MetadataCache


class ConfigResolver:
    """
    Shape a document's front matter into the ``config`` mapping.

    Absence at any step (document, front matter, non-mapping front matter)
    gives ``{}``. Errors raised by the metadata cache are left to the caller.
    """

    def __init__(self, store: DocumentStore, metadata: MetadataCache):
        self.store = store
        self.metadata = metadata

    async def resolve(self, document_path: str, text: str | None = None) -> dict[str, Any]:
        """
        ``text`` is the content the caller already read, so config and
        blocks come from the same version of the document.
        """
        handle = self.store.resolve(document_path)
        if handle is None:
            return {}
        meta = self.metadata.get_metadata(handle, text)
        if inspect.isawaitable(meta):
            meta = await meta
        if not isinstance(meta, Mapping):
            return {}
        return dict(meta)
