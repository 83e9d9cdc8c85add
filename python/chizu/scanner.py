"""
Scanner - File discovery for a single source tree.

Walks the tree with os.scandir, pruning directories excluded by the
root .gitignore (via pathspec) and by the hardcoded ignore patterns
before descending into them.
"""

import logging
import os
import time
from pathlib import Path
from typing import AsyncGenerator, List

import pathspec

from .config import get_config, ChizuConfig
from .errors import TargetNotFoundError
from .models import FileInfo, ScanResult


logger = logging.getLogger(__name__)


class Scanner:
    """
    Source tree scanner.

    Yields FileInfo objects for every file that survives the ignore
    rules. Dotfiles are kept; only the ignore rules decide.
    """

    def __init__(self, config: ChizuConfig | None = None):
        self.config = config or get_config()
        self._skipped = 0

    async def scan(self, root: Path) -> ScanResult:
        """
        Scan a directory tree and return all files found.

        Raises:
            TargetNotFoundError: root is missing or not a directory
        """
        root = Path(root).resolve()
        if not root.is_dir():
            raise TargetNotFoundError(root)

        start_time = time.monotonic()
        self._skipped = 0
        files: List[FileInfo] = []

        async for file_info in self.scan_iter(root):
            files.append(file_info)

        result = ScanResult(
            files=files,
            skipped_count=self._skipped,
            duration_seconds=time.monotonic() - start_time,
        )
        logger.info(
            f"Scanned {len(files)} files ({result.total_bytes} bytes) "
            f"in {result.duration_seconds:.1f}s ({self._skipped} ignored)"
        )
        return result

    async def scan_iter(self, root: Path) -> AsyncGenerator[FileInfo, None]:
        """
        Iterate over files under root.

        Streaming interface; files come out depth-first, sorted by name
        within each directory.
        """
        root = Path(root).resolve()
        spec = self.build_ignore_spec(root)

        async for file_info in self._scan_directory(root, root, spec):
            yield file_info

    def build_ignore_spec(self, root: Path) -> pathspec.PathSpec:
        """Combine the root .gitignore with the hardcoded ignore patterns."""
        lines: List[str] = []
        gitignore = root / ".gitignore"
        if self.config.use_gitignore and gitignore.is_file():
            lines.extend(gitignore.read_text(encoding="utf-8", errors="replace").splitlines())
        lines.extend(self.config.ignore_patterns)
        return pathspec.GitIgnoreSpec.from_lines(lines)

    async def _scan_directory(
        self,
        directory: Path,
        root: Path,
        spec: pathspec.PathSpec,
    ) -> AsyncGenerator[FileInfo, None]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning(f"Cannot list directory {directory}: {e}")
            return

        subdirs: List[Path] = []

        for entry in entries:
            rel = Path(entry.path).relative_to(root).as_posix()
            try:
                if entry.is_dir(follow_symlinks=False):
                    if spec.match_file(rel + "/"):
                        self._skipped += 1
                        continue
                    subdirs.append(Path(entry.path))

                elif entry.is_file():
                    if spec.match_file(rel):
                        self._skipped += 1
                        continue
                    yield self._get_file_info(entry)

            except OSError as e:
                logger.warning(f"Cannot stat {entry.path}: {e}")
                continue

        for subdir in subdirs:
            async for file_info in self._scan_directory(subdir, root, spec):
                yield file_info

    def _get_file_info(self, entry: os.DirEntry) -> FileInfo:
        stat = entry.stat()
        return FileInfo.from_path(path=Path(entry.path), size=stat.st_size)


async def scan_directory(
    root: Path,
    config: ChizuConfig | None = None,
) -> ScanResult:
    """
    Convenience function to scan a tree.

    Usage:
        result = await scan_directory(Path("."))
        for file in result.files:
            print(file.path)
    """
    scanner = Scanner(config)
    return await scanner.scan(root)
