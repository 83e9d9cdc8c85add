"""
Presenter - Renders an AnalysisResult as an indented outline.

Each file becomes a header line followed by one line per entity,
indented by nesting depth. Full mode adds docstrings and `...` markers
for multi-line bodies; compress mode prints signatures only.
"""

import re
from typing import Iterator, List, Optional, Pattern

from .models import AnalysisResult, EntityChunk


INDENT = "  "


class Presenter:
    """Outline renderer with an optional regex search filter."""

    def __init__(
        self,
        query: Optional[str] = None,
        ignore_case: bool = False,
        compress: bool = False,
    ):
        self.compress = compress
        self._pattern: Optional[Pattern[str]] = None
        if query:
            self._pattern = re.compile(query, re.IGNORECASE if ignore_case else 0)

    def matches(self, chunk: EntityChunk) -> bool:
        """True when no query is set, or the query hits the content or docs."""
        if self._pattern is None:
            return True
        if self._pattern.search(chunk.content):
            return True
        return bool(chunk.boundary.docs and self._pattern.search(chunk.boundary.docs))

    def iter_lines(self, result: AnalysisResult) -> Iterator[str]:
        for relative_path, chunks in result.items():
            selected = [c for c in chunks if self.matches(c)]
            if not selected:
                continue

            yield ""
            yield f"{relative_path}:"
            if not self.compress:
                yield "|..."

            for chunk in selected:
                yield from self._render_chunk(chunk)

    def _render_chunk(self, chunk: EntityChunk) -> Iterator[str]:
        indent = INDENT * chunk.boundary.depth
        lines = chunk.content.split("\n")

        if not self.compress and chunk.boundary.docs:
            doc_lines = chunk.boundary.docs.split("\n")
            yield "|" + indent + doc_lines[0]
            for line in doc_lines[1:]:
                yield "|" + line

        yield "|" + indent + lines[0]

        if not self.compress and len(lines) > 1:
            yield "|" + indent + "..."

    def render(self, result: AnalysisResult) -> str:
        lines: List[str] = list(self.iter_lines(result))
        return "\n".join(lines)
