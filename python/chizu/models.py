"""
Data Models - Type definitions for the mapping pipeline.

These dataclasses represent the data flowing through the pipeline stages,
ensuring type safety and clear interfaces between modules.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class InclusionPolicy(Enum):
    """Which syntactic nodes the extractor keeps."""
    EXCLUDE_IMPORTS = "exclude_imports"   # Drop import/include-style declarations
    INCLUDE_ALL = "include_all"

    def should_include(self, node_kind: str) -> bool:
        """Decide inclusion from the node's kind label."""
        if self is InclusionPolicy.EXCLUDE_IMPORTS:
            return "import" not in node_kind.lower()
        return True


@dataclass(frozen=True)
class Boundary:
    """
    Extractor metadata for a chunk.

    `parent` holds ancestor names, outermost first. Its length is the
    nesting depth used for indentation.
    """
    docs: Optional[str] = None
    parent: Tuple[str, ...] = ()

    @property
    def depth(self) -> int:
        return len(self.parent)


@dataclass(frozen=True)
class EntityChunk:
    """One extracted entity (function, class, method...) with its source text."""
    content: str
    boundary: Boundary = field(default_factory=Boundary)
    kind: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "kind": self.kind,
            "boundary": {
                "docs": self.boundary.docs,
                "parent": list(self.boundary.parent),
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EntityChunk":
        boundary = data.get("boundary") or {}
        return cls(
            content=data["content"],
            kind=data.get("kind", ""),
            boundary=Boundary(
                docs=boundary.get("docs"),
                parent=tuple(boundary.get("parent") or ()),
            ),
        )


@dataclass
class CacheEntry:
    """
    A row in the cache store.

    Keyed by absolute file path. Valid only while `fingerprint` matches
    the hash of the file's current content.
    """
    key: str
    fingerprint: str
    chunks: List[EntityChunk]


# Relative POSIX path -> chunks, in discovery order
AnalysisResult = Dict[str, List[EntityChunk]]


@dataclass
class FileInfo:
    """
    Basic file information from the scanner.

    Only what we get from stat() without reading file content.
    """
    path: Path
    name: str
    size: int

    @classmethod
    def from_path(cls, path: Path, size: int) -> "FileInfo":
        """Create FileInfo from a path and its stat size."""
        return cls(path=path, name=path.name, size=size)


@dataclass
class ScanResult:
    """Result of scanning a directory tree."""
    files: List[FileInfo]
    skipped_count: int
    duration_seconds: float

    @property
    def paths(self) -> List[Path]:
        return [f.path for f in self.files]

    @property
    def total_bytes(self) -> int:
        return sum(f.size for f in self.files)


@dataclass
class AnalysisStats:
    """Statistics from a pipeline run."""
    files_processed: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    files_with_entities: int = 0
    chunks: int = 0
    duration_seconds: float = 0.0

    def __str__(self) -> str:
        return (
            f"Analyzed {self.files_processed} files "
            f"({self.cache_hits} cached, "
            f"{self.cache_misses} extracted, "
            f"{self.files_with_entities} with entities, "
            f"{self.chunks} chunks) "
            f"in {self.duration_seconds:.1f}s"
        )
