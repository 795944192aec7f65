"""Reload cycle: read the snippet document and evaluate its blocks in order."""

import logging
from typing import Callable

from .evaluator import Evaluator
from .extract import DEFAULT_TAG, extract_blocks
from .model import Diagnostic, ReloadReport
from .ports import DocumentStore
from .registry import Registry
from .resolver import ConfigResolver

logger = logging.getLogger("snipmate.reload")


class ReloadCoordinator:
    """
    Keep the registry in step with the snippet document.

    One cycle: resolve the document, read it, resolve its front matter into
    ``registry["config"]``, then evaluate every block in document order.
    A failing block is logged and recorded; later blocks still run and
    earlier blocks' effects stay applied.

    With ``single_flight`` (default) at most one cycle runs at a time:
    triggers arriving mid-cycle are coalesced into a single follow-up cycle
    for the most recently requested path. The caller that started the
    cycle gets the report of its own cycle; follow-up diagnostics are logged.
    Without the guard, overlapping cycles interleave freely.
    """

    def __init__(
        self,
        store: DocumentStore,
        resolver: ConfigResolver,
        evaluator: Evaluator,
        registry: Registry,
        path_source: Callable[[], str],
        tag: str = DEFAULT_TAG,
        single_flight: bool = True,
    ):
        self.store = store
        self.resolver = resolver
        self.evaluator = evaluator
        self.registry = registry
        self.path_source = path_source
        self.tag = tag
        self.single_flight = single_flight
        self._in_flight = False
        self._pending: str | None = None

    async def reload(self, document_path: str | None = None) -> ReloadReport:
        """
        Run a reload cycle for ``document_path`` (default: the configured one).

        Never raises for document, config or snippet problems; the returned
        report is informational and callers are free to ignore it.
        """
        path = document_path or self.path_source()
        if not self.single_flight:
            return await self._cycle(path)

        if self._in_flight:
            logger.debug("Reload of %s already in flight, coalescing", path)
            self._pending = path
            return ReloadReport(document_path=path, status="coalesced")

        self._in_flight = True
        try:
            report = await self._cycle(path)
            while self._pending is not None:
                follow_up, self._pending = self._pending, None
                await self._cycle(follow_up)
            return report
        finally:
            self._in_flight = False
            self._pending = None

    async def _cycle(self, path: str) -> ReloadReport:
        handle = self.store.resolve(path)
        if handle is None:
            logger.debug("Snippet document %s not found, nothing to load", path)
            return ReloadReport(document_path=path, status="missing")

        try:
            text = await self.store.read_text(handle)
        except Exception:
            logger.exception("Error reading file %s", path)
            return ReloadReport(document_path=path, status="read-error")

        try:
            config = await self.resolver.resolve(path, text)
        except Exception:
            logger.exception("Error extracting frontmatter from %s", path)
            return ReloadReport(document_path=path, status="config-error")

        self.registry.replace_config(config)

        blocks = extract_blocks(text, self.tag)
        report = ReloadReport(document_path=path, status="ok", blocks=len(blocks))
        for index, block in enumerate(blocks, start=1):
            result = self.evaluator.evaluate(block)
            if result.ok:
                continue
            diagnostic = Diagnostic(
                document_path=path,
                index=index,
                message=result.message or "",
                error_type=result.error_type,
            )
            logger.error("%s", diagnostic)
            report.diagnostics.append(diagnostic)

        logger.info(
            "Loaded %d snippet(s) from %s, %d failed",
            len(blocks),
            path,
            len(report.diagnostics),
        )
        return report
