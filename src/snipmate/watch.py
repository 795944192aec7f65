"""Watch mode for snipmate - reload snippets when the snippet document changes."""

import asyncio
import json
import logging
import signal
import time
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .adapters.fs_storage import normalize_path

logger = logging.getLogger("snipmate.watch")


class ChangeWatcher:
    """Filter change notifications down to the configured snippet document."""

    def __init__(self, document_path: Callable[[], str], on_change: Callable[[str], Any]):
        self.document_path = document_path
        self.on_change = on_change

    def notify(self, changed_path: str) -> bool:
        """Trigger a reload if ``changed_path`` is the snippet document."""
        path = normalize_path(changed_path)
        if path != self.document_path():
            return False
        logger.debug("Snippet document %s changed", path)
        self.on_change(path)
        return True


class DebounceHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(
        self,
        vault_path: Path,
        on_batch: Callable[[set[str]], Any],
        debounce_ms: int = 150,
    ):
        super().__init__()
        self.vault_path = vault_path
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms

        # Vault-relative paths changed since the last flush
        self.changed: set[str] = set()
        self.last_event_time = 0.0

    def _should_skip(self, path: Path) -> bool:
        """Check if file should be skipped.

        Only editor temp/swap files are dropped here; the snippet document
        may have any name, so matching is left to ChangeWatcher.
        """
        name = path.name
        return name.endswith("~") or name.endswith(".swp") or name.startswith(".#")

    def _relative(self, path: Path) -> str | None:
        """Vault-relative path, or None for skipped files and files outside the vault."""
        if self._should_skip(path):
            return None
        try:
            return path.resolve().relative_to(self.vault_path.resolve()).as_posix()
        except ValueError:
            return None

    def _record(self, raw_path: Any) -> None:
        rel = self._relative(Path(str(raw_path)))
        if rel:
            self.changed.add(rel)
            self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle file creation."""
        if event.is_directory:
            return
        self._record(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle file modification."""
        if event.is_directory:
            return
        self._record(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle renames; editors often save by moving a temp file into place."""
        if event.is_directory:
            return
        self._record(event.dest_path)

    def check_and_flush(self) -> None:
        """Check if debounce period has elapsed and flush if so."""
        if not self.changed:
            return

        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        """Process accumulated events."""
        if not self.changed:
            return

        changed = set(self.changed)
        self.changed.clear()

        if self.on_batch:
            self.on_batch(changed)


def watch_document(
    runtime: Any,
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Load snippets, then watch the vault and reload whenever the snippet
    document changes.

    Args:
        runtime: Runtime instance
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    vault_path = runtime.config.vault.root
    if not vault_path.exists():
        logger.error("Vault not found: %s", vault_path)
        return 1

    running = True

    def emit(report: Any) -> None:
        if json_output:
            event = {
                "type": "reload",
                "document": report.document_path,
                "status": report.status,
                "blocks": report.blocks,
                "errors": [
                    {"index": d.index, "message": d.message} for d in report.diagnostics
                ],
            }
            print(json.dumps(event), flush=True)
        elif not quiet and report.status == "ok":
            print(
                f"Loaded {report.blocks} snippet(s) from {report.document_path}"
                f" ({len(report.diagnostics)} failed)",
                flush=True,
            )

    def reload(path: str) -> None:
        emit(asyncio.run(runtime.coordinator.reload(path)))

    watcher = ChangeWatcher(runtime.settings.document_path, reload)

    def handle_batch(changed: set[str]) -> None:
        """Handle a batch of changes."""
        for path in sorted(changed):
            watcher.notify(path)

    # Set up signal handlers for graceful shutdown
    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    previous_handlers = {
        signum: signal.signal(signum, signal_handler)
        for signum in (signal.SIGINT, signal.SIGTERM)
    }

    handler = DebounceHandler(vault_path, handle_batch, debounce_ms)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=True)

    try:
        # Initial load before any change arrives
        reload(runtime.settings.document_path())

        if not quiet and not json_output:
            print(
                f"Watching {vault_path / runtime.settings.document_path()}"
                f" (debounce: {debounce_ms}ms)",
                flush=True,
            )
            print("Press Ctrl+C to stop", flush=True)

        observer.start()
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        if observer.is_alive():
            observer.stop()
            observer.join()
        for signum, previous in previous_handlers.items():
            signal.signal(signum, previous)

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
