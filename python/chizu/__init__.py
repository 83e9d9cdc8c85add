"""
chizu - Repository entity mapper with a content-addressed cache.

Modules:
    - config: Centralized configuration
    - hasher: xxHash content fingerprints (change detection)
    - cache: SQLite-backed path -> (fingerprint, chunks) store
    - extractor: Entity boundary extraction (Python via ast)
    - scanner: File discovery honouring .gitignore
    - pipeline: Batch-bounded read → hash → cache → extract
    - presenter: Indented outline rendering
    - cli: Command line entry point

Flow:
    Scan → Read → Hash (xxHash) → Cache hit? → Extract (miss only) → Store → Render

Usage:
    from chizu import AnalysisPipeline, CacheStore, ContentHasher, PythonBoundaryExtractor

    with CacheStore(db_path) as store:
        pipeline = AnalysisPipeline(store, ContentHasher(), PythonBoundaryExtractor())
        result = await pipeline.run(root, paths)
"""

from .cache import CacheStore
from .extractor import PythonBoundaryExtractor
from .hasher import ContentHasher
from .models import InclusionPolicy
from .pipeline import AnalysisPipeline

__all__ = [
    "AnalysisPipeline",
    "CacheStore",
    "ContentHasher",
    "InclusionPolicy",
    "PythonBoundaryExtractor",
]
