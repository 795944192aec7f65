from typing import Any, Awaitable, Mapping, Protocol

from .model import DocumentHandle, EvalResult, RenderedBlock


class DocumentStore(Protocol):
    """
    Vault-relative documents. Absence is a normal outcome, not an error.
    """

    def resolve(self, path: str) -> DocumentHandle | None:
        pass

    def exists(self, path: str) -> bool:
        pass

    async def read_text(self, handle: DocumentHandle) -> str:
        pass

    async def create(self, path: str, contents: str) -> DocumentHandle:
        pass


class MetadataCache(Protocol):
    """
    Structured front matter already parsed by the host. May answer
    synchronously or with an awaitable. ``text``, when given, is the
    document content the caller already read.
    """

    def get_metadata(
        self, handle: DocumentHandle, text: str | None = None
    ) -> Mapping[str, Any] | None | Awaitable[Mapping[str, Any] | None]:
        pass


class SettingsStore(Protocol):
    def load(self) -> dict[str, Any] | None:
        pass

    async def save(self, settings: dict[str, Any]) -> None:
        pass


class Executor(Protocol):
    """
    Runs one block's source against the registry it is handed.
    """

    def run(self, source: str, registry: Any) -> EvalResult:
        pass


class BlockRenderer(Protocol):
    def render_block(self, source: str) -> RenderedBlock:
        pass
