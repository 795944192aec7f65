from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path

DocumentPath = str


@dataclass(frozen=True)
class DocumentHandle:
    path: DocumentPath  # vault-relative, POSIX separators
    location: Path | None = None  # where the store keeps it, if on disk


@dataclass(frozen=True)
class EvalResult:
    ok: bool
    message: str | None = None
    error_type: str | None = None

    @classmethod
    def success(cls) -> "EvalResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: BaseException) -> "EvalResult":
        return cls(ok=False, message=str(error) or type(error).__name__, error_type=type(error).__name__)


@dataclass(frozen=True)
class Diagnostic:
    document_path: DocumentPath
    index: int  # 1-based block position
    message: str
    error_type: str | None = None

    def __str__(self) -> str:
        return f"Error executing snippet #{self.index} from {self.document_path}: {self.message}"


@dataclass
class ReloadReport:
    document_path: DocumentPath
    status: str  # "ok" | "missing" | "read-error" | "config-error" | "coalesced"
    blocks: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.diagnostics) or self.status in ("read-error", "config-error")


@dataclass(frozen=True)
class RenderedBlock:
    source: str
    html: str
    result: EvalResult
