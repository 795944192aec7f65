import asyncio
from pathlib import Path, PurePosixPath

from ..core.model import DocumentHandle
from ..core.ports import DocumentStore


def normalize_path(path: str) -> str:
    """Vault-relative POSIX form: trimmed, forward slashes, no leading ``./``."""
    p = PurePosixPath(path.strip().replace("\\", "/"))
    return p.as_posix() if p.parts else ""


class FsDocumentStore(DocumentStore):
    def __init__(self, root: Path):
        self.root = root

    def _path(self, path: str) -> Path | None:
        rel = normalize_path(path)
        if not rel or PurePosixPath(rel).is_absolute():
            return None
        p = self.root / rel
        # stay inside the vault
        if not p.resolve().is_relative_to(self.root.resolve()):
            return None
        return p

    def resolve(self, path: str) -> DocumentHandle | None:
        p = self._path(path)
        if p is None or not p.is_file():
            return None
        return DocumentHandle(path=normalize_path(path), location=p)

    def exists(self, path: str) -> bool:
        p = self._path(path)
        return p is not None and p.exists()

    async def read_text(self, handle: DocumentHandle) -> str:
        p = handle.location or self.root / handle.path
        return await asyncio.to_thread(p.read_text, encoding="utf-8")

    async def create(self, path: str, contents: str) -> DocumentHandle:
        p = self._path(path)
        if p is None:
            raise ValueError(f"Invalid document path: {path!r}")
        if p.exists():
            raise FileExistsError(p)
        p.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(p.write_text, contents, encoding="utf-8")
        return DocumentHandle(path=normalize_path(path), location=p)
