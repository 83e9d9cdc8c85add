"""
Extractor - Entity boundary detection.

The pipeline only depends on the BoundaryExtractor protocol. The default
implementation leans on Python's own `ast` module for Python sources and
yields nothing for languages it has no parser for.
"""

import ast
import logging
from pathlib import PurePath
from typing import Iterable, List, Protocol, Tuple

from .models import Boundary, EntityChunk, InclusionPolicy


logger = logging.getLogger(__name__)


PYTHON_EXTENSIONS = {".py", ".pyi"}


class BoundaryExtractor(Protocol):
    """Turns file content into an ordered list of entity chunks."""

    def extract(
        self,
        content: str,
        path: str,
        policy: InclusionPolicy,
    ) -> List[EntityChunk]:
        """
        Args:
            content: Decoded file content
            path: Path of the file relative to the mapped root (language hint)
            policy: Which node kinds to keep

        Returns:
            Chunks in source order, outer entities before inner ones
        """
        ...


class PythonBoundaryExtractor:
    """
    Extracts classes, functions and methods from Python files.

    Imports are reported with kind `import` / `import_from` so the
    inclusion policy can drop them. Source that does not parse yields no
    chunks.
    """

    def extract(
        self,
        content: str,
        path: str,
        policy: InclusionPolicy = InclusionPolicy.EXCLUDE_IMPORTS,
    ) -> List[EntityChunk]:
        if PurePath(path).suffix.lower() not in PYTHON_EXTENSIONS:
            return []

        try:
            tree = ast.parse(content, filename=path)
        except (SyntaxError, ValueError) as e:
            logger.debug(f"Cannot parse {path}: {e}")
            return []

        chunks: List[EntityChunk] = []
        self._walk(tree.body, content, (), False, policy, chunks)
        return chunks

    def _walk(
        self,
        body: Iterable[ast.stmt],
        source: str,
        parents: Tuple[str, ...],
        in_class: bool,
        policy: InclusionPolicy,
        out: List[EntityChunk],
    ) -> None:
        for node in body:
            if isinstance(node, ast.Import):
                self._emit(node, "import", source, parents, None, policy, out)

            elif isinstance(node, ast.ImportFrom):
                self._emit(node, "import_from", source, parents, None, policy, out)

            elif isinstance(node, ast.ClassDef):
                self._emit(node, "class", source, parents, ast.get_docstring(node), policy, out)
                self._walk(node.body, source, parents + (node.name,), True, policy, out)

            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                kind = "method" if in_class else "function"
                self._emit(node, kind, source, parents, ast.get_docstring(node), policy, out)
                self._walk(node.body, source, parents + (node.name,), False, policy, out)

            else:
                # if/try/with blocks: same nesting level as the block itself
                for nested in _nested_bodies(node):
                    self._walk(nested, source, parents, in_class, policy, out)

    def _emit(
        self,
        node: ast.stmt,
        kind: str,
        source: str,
        parents: Tuple[str, ...],
        docs: str | None,
        policy: InclusionPolicy,
        out: List[EntityChunk],
    ) -> None:
        if not policy.should_include(kind):
            return
        segment = ast.get_source_segment(source, node)
        if not segment:
            return
        out.append(EntityChunk(
            content=segment,
            kind=kind,
            boundary=Boundary(docs=docs, parent=parents),
        ))


def _nested_bodies(node: ast.stmt) -> List[List[ast.stmt]]:
    bodies = []
    for name in ("body", "orelse", "finalbody"):
        value = getattr(node, name, None)
        if isinstance(value, list) and value and isinstance(value[0], ast.stmt):
            bodies.append(value)
    for handler in getattr(node, "handlers", None) or []:
        bodies.append(handler.body)
    for case in getattr(node, "cases", None) or []:
        bodies.append(case.body)
    return bodies


def get_extractor() -> BoundaryExtractor:
    """Create the default extractor."""
    return PythonBoundaryExtractor()
