"""
Configuration - Centralized settings for the entity mapper.

Uses environment variables with sensible defaults. All paths are resolved
to absolute paths for reliability.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass
class ChizuConfig:
    """
    Configuration for the mapper.

    The cache database defaults to ~/.cache/chizu/cache.db.
    The batch size bounds how many files are open at once.
    """

    # --- Paths ---
    cache_dir: Path = field(default_factory=lambda: Path.home() / ".cache" / "chizu")

    # --- Concurrency Limits ---
    batch_size: int = 50            # Files read/extracted concurrently per batch

    # --- Discovery ---
    ignore_patterns: List[str] = field(default_factory=lambda: [
        ".git/",
        "node_modules/",
        "dist/",
    ])
    use_gitignore: bool = True

    def __post_init__(self):
        """Ensure paths are absolute. The directory itself is created by the cache store."""
        self.cache_dir = Path(self.cache_dir).expanduser().resolve()

    @property
    def db_path(self) -> Path:
        return self.cache_dir / "cache.db"

    @classmethod
    def from_env(cls) -> "ChizuConfig":
        """
        Create config from environment variables.

        Supported env vars:
            CHIZU_CACHE_DIR: Directory holding cache.db
            CHIZU_BATCH_SIZE: Files processed concurrently per batch
        """
        config = cls()

        if cache_dir := os.environ.get("CHIZU_CACHE_DIR"):
            config.cache_dir = Path(cache_dir)

        if batch_size := os.environ.get("CHIZU_BATCH_SIZE"):
            try:
                config.batch_size = int(batch_size)
            except ValueError:
                raise ValueError(f"CHIZU_BATCH_SIZE must be an integer, got {batch_size!r}") from None

        config.__post_init__()
        return config


# Singleton default config
_default_config: ChizuConfig | None = None


def get_config() -> ChizuConfig:
    """Get the default configuration (singleton)."""
    global _default_config
    if _default_config is None:
        _default_config = ChizuConfig.from_env()
    return _default_config


def set_config(config: ChizuConfig) -> None:
    """Override the default configuration (for testing)."""
    global _default_config
    _default_config = config
