"""
Test Configuration - Shared fixtures for mapper tests.

Uses pytest fixtures to create isolated test environments: a temporary
source tree, a throwaway cache directory, and a recording extractor.
"""

import shutil
import tempfile
import threading
import time
from pathlib import Path
from typing import Generator, List

import pytest

from chizu.cache import CacheStore
from chizu.config import ChizuConfig, set_config
from chizu.models import Boundary, EntityChunk, InclusionPolicy


class RecordingExtractor:
    """
    Fake extractor: one chunk per line starting with `def `.

    Records every call and the highest number of calls running at once.
    Safe to call from worker threads.
    """

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.calls: List[str] = []
        self.max_in_flight = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    def extract(self, content: str, path: str, policy: InclusionPolicy) -> List[EntityChunk]:
        with self._lock:
            self.calls.append(path)
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            return [
                EntityChunk(content=line, kind="function", boundary=Boundary())
                for line in content.splitlines()
                if line.startswith("def ")
            ]
        finally:
            with self._lock:
                self._in_flight -= 1


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="chizu_test_")
    # Resolve to handle macOS /var -> /private/var symlink
    resolved = Path(tmp).resolve()
    yield resolved
    shutil.rmtree(str(resolved), ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> ChizuConfig:
    """Create an isolated test configuration."""
    config = ChizuConfig(
        cache_dir=temp_dir / "cache",
        batch_size=3,
    )
    set_config(config)
    return config


@pytest.fixture
def store(test_config: ChizuConfig) -> Generator[CacheStore, None, None]:
    """Open a cache store in the test cache directory."""
    s = CacheStore(test_config.db_path)
    yield s
    s.close()


@pytest.fixture
def extractor() -> RecordingExtractor:
    return RecordingExtractor()


@pytest.fixture
def repo(temp_dir: Path) -> Path:
    """An empty source tree root."""
    root = temp_dir / "repo"
    root.mkdir()
    return root


@pytest.fixture
def sample_tree(repo: Path) -> dict[str, Path]:
    """Create a small source tree."""
    files = {}

    a = repo / "a.py"
    a.write_text("def alpha():\n    return 1\n")
    files["a"] = a

    b = repo / "b.py"
    b.write_text("def beta():\n    return 2\n\ndef beta_two():\n    pass\n")
    files["b"] = b

    # No entities: must never show up in results
    empty = repo / "notes.txt"
    empty.write_text("just some notes\n")
    files["empty"] = empty

    nested_dir = repo / "pkg" / "sub"
    nested_dir.mkdir(parents=True)
    nested = nested_dir / "deep.py"
    nested.write_text("def deep():\n    pass\n")
    files["nested"] = nested

    return files
