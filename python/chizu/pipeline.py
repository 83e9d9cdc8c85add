"""
Analysis Pipeline - Cached, batch-bounded entity extraction.

For every file: read → fingerprint → cache lookup → (hit, or extract and
store). Files are processed in fixed-size batches; a batch runs
concurrently and batches run one after another, so the number of files
open at once never exceeds the batch size.
"""

import asyncio
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Tuple

from .cache import CacheStore
from .config import get_config, ChizuConfig
from .extractor import BoundaryExtractor, get_extractor
from .hasher import ContentHasher
from .models import AnalysisResult, AnalysisStats, EntityChunk, InclusionPolicy
from .scanner import Scanner


logger = logging.getLogger(__name__)


DEFAULT_BATCH_SIZE = 50


class AnalysisPipeline:
    """
    Turns a list of files into an AnalysisResult.

    The cache store, hasher and extractor are injected. Failures are not
    isolated per file: the first read or extraction error aborts the run
    and reaches the caller unchanged.
    """

    def __init__(
        self,
        store: CacheStore,
        hasher: ContentHasher,
        extractor: BoundaryExtractor,
        policy: InclusionPolicy = InclusionPolicy.EXCLUDE_IMPORTS,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.store = store
        self.hasher = hasher
        self.extractor = extractor
        self.policy = policy
        self.batch_size = batch_size
        self.last_stats: AnalysisStats | None = None

    async def run(
        self,
        target_root: Path,
        file_paths: Iterable[Path],
        batch_size: int | None = None,
    ) -> AnalysisResult:
        """
        Analyze files under target_root.

        Args:
            target_root: Directory the result keys are relative to
            file_paths: Files to analyze (absolute, or relative to target_root)
            batch_size: Override for the configured batch size

        Returns:
            Mapping of relative POSIX path to chunks. Files without
            entities are left out.
        """
        size = batch_size if batch_size is not None else self.batch_size
        if size < 1:
            raise ValueError(f"batch_size must be at least 1, got {size}")

        root = Path(target_root).resolve()
        paths = [p if p.is_absolute() else root / p for p in map(Path, file_paths)]

        start_time = time.monotonic()
        stats = AnalysisStats()
        result: AnalysisResult = {}

        # One worker per batch slot caps concurrently open files
        with ThreadPoolExecutor(max_workers=size, thread_name_prefix="chizu") as executor:
            for i in range(0, len(paths), size):
                batch = paths[i:i + size]
                batch_results = await self._run_batch(root, batch, executor, stats)

                for relative_path, chunks in batch_results:
                    if chunks:
                        result[relative_path] = chunks

        stats.files_processed = len(paths)
        stats.files_with_entities = len(result)
        stats.chunks = sum(len(chunks) for chunks in result.values())
        stats.duration_seconds = time.monotonic() - start_time
        self.last_stats = stats

        logger.info(f"Analysis complete: {stats}")
        return result

    async def _run_batch(
        self,
        root: Path,
        batch: List[Path],
        executor: ThreadPoolExecutor,
        stats: AnalysisStats,
    ) -> List[Tuple[str, List[EntityChunk]]]:
        tasks = [
            asyncio.ensure_future(self._process_file(root, path, executor, stats))
            for path in batch
        ]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            # Fail fast: drop the rest of the batch
            for task in tasks:
                task.cancel()
            raise

    async def _process_file(
        self,
        root: Path,
        path: Path,
        executor: ThreadPoolExecutor,
        stats: AnalysisStats,
    ) -> Tuple[str, List[EntityChunk]]:
        loop = asyncio.get_running_loop()
        relative_path = Path(os.path.relpath(path, root)).as_posix()
        # Full path as key so worktrees of the same repo don't collide
        key = str(path)

        content = await loop.run_in_executor(executor, _read_text, path)
        fingerprint = self.hasher.hash(content)

        chunks = self.store.lookup(key, fingerprint)
        if chunks is not None:
            stats.cache_hits += 1
            logger.debug(f"Cache hit: {relative_path}")
            return relative_path, chunks

        stats.cache_misses += 1
        logger.debug(f"Cache miss: {relative_path}")
        chunks = await loop.run_in_executor(
            executor,
            self.extractor.extract,
            content,
            relative_path,
            self.policy,
        )
        self.store.put(key, fingerprint, chunks)
        return relative_path, chunks


def _read_text(path: Path) -> str:
    # newline="" keeps line endings as-is so the fingerprint sees the raw text
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


async def analyze_directory(
    root: Path,
    store: CacheStore,
    config: ChizuConfig | None = None,
    extractor: BoundaryExtractor | None = None,
) -> AnalysisResult:
    """
    Convenience function: scan a tree and run the pipeline over it.

    Usage:
        with open_cache(config.db_path) as store:
            result = await analyze_directory(Path("."), store)
    """
    config = config or get_config()
    scan_result = await Scanner(config).scan(root)

    pipeline = AnalysisPipeline(
        store=store,
        hasher=ContentHasher(),
        extractor=extractor or get_extractor(),
        batch_size=config.batch_size,
    )
    return await pipeline.run(root, scan_result.paths)
