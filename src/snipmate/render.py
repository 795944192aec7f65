"""Display-path rendering of snipmate blocks.

Every rendered block is evaluated again, independently of the reload cycle,
and annotated with the outcome.
"""

import html
import re

from .core.evaluator import Evaluator
from .core.extract import DEFAULT_TAG, fence_pattern
from .core.model import RenderedBlock
from .core.ports import BlockRenderer

SUCCESS_TEXT = "✓ Executed"
ERROR_PREFIX = "⚠️ Error: "


class SnippetRenderer(BlockRenderer):
    def __init__(self, evaluator: Evaluator, tag: str = DEFAULT_TAG):
        self.evaluator = evaluator
        self.tag = tag
        self._fence = fence_pattern(tag)

    def render_block(self, source: str) -> RenderedBlock:
        code = (
            '<pre class="snipmate-codeblock">'
            f"<code>{html.escape(source)}</code>"
            "</pre>"
        )
        result = self.evaluator.evaluate(source)
        if result.ok:
            indicator = f'<div class="snipmate-success">{SUCCESS_TEXT}</div>'
        else:
            indicator = (
                '<div class="snipmate-error">'
                f"{html.escape(ERROR_PREFIX + (result.message or ''))}"
                "</div>"
            )
        return RenderedBlock(source=source, html=code + "\n" + indicator, result=result)

    def render_document(self, text: str) -> tuple[str, list[RenderedBlock]]:
        """
        Replace every snipmate fence in ``text`` with its rendered HTML.

        Works on any document, not only the configured snippet document.
        Empty blocks are left untouched.
        """
        rendered: list[RenderedBlock] = []

        def sub(m: re.Match[str]) -> str:
            source = m.group(1)
            if not source:
                return m.group(0)
            block = self.render_block(source)
            rendered.append(block)
            return block.html

        return self._fence.sub(sub, text), rendered
