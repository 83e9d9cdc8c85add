"""
Scanner Tests - Verify file discovery.

Tests:
- Basic and nested file discovery
- Hardcoded exclusions (.git, node_modules, dist)
- .gitignore handling
- Missing roots
"""

import logging

import pytest

from chizu.config import ChizuConfig
from chizu.errors import TargetNotFoundError
from chizu.scanner import Scanner, scan_directory


@pytest.fixture
def tree(repo):
    (repo / "main.py").write_text("def main(): pass\n")
    (repo / ".env.example").write_text("KEY=value\n")

    (repo / "src").mkdir()
    (repo / "src" / "lib.py").write_text("def lib(): pass\n")
    (repo / "src" / "generated.py").write_text("x = 1\n")

    for skipped in [".git", "node_modules", "dist"]:
        (repo / skipped).mkdir()
        (repo / skipped / "file.js").write_text("ignored\n")

    (repo / "logs").mkdir()
    (repo / "logs" / "run.log").write_text("log\n")
    (repo / "debug.log").write_text("log\n")

    (repo / ".gitignore").write_text("*.log\nsrc/generated.py\n")
    return repo


class TestScanner:
    """Tests for the Scanner class."""

    @pytest.mark.asyncio
    async def test_finds_files(self, tree, test_config):
        result = await Scanner(test_config).scan(tree)
        rel = {f.path.relative_to(tree).as_posix() for f in result.files}

        assert "main.py" in rel
        assert "src/lib.py" in rel

    @pytest.mark.asyncio
    async def test_keeps_dotfiles(self, tree, test_config):
        """Dotfiles are not skipped just for being hidden."""
        result = await Scanner(test_config).scan(tree)
        rel = {f.path.relative_to(tree).as_posix() for f in result.files}

        assert ".env.example" in rel
        assert ".gitignore" in rel

    @pytest.mark.asyncio
    async def test_skips_hardcoded_directories(self, tree, test_config):
        result = await Scanner(test_config).scan(tree)
        rel = {f.path.relative_to(tree).as_posix() for f in result.files}

        assert not any(r.startswith((".git/", "node_modules/", "dist/")) for r in rel)

    @pytest.mark.asyncio
    async def test_honours_gitignore(self, tree, test_config):
        result = await Scanner(test_config).scan(tree)
        rel = {f.path.relative_to(tree).as_posix() for f in result.files}

        assert "debug.log" not in rel
        assert "logs/run.log" not in rel
        assert "src/generated.py" not in rel
        assert result.skipped_count > 0

    @pytest.mark.asyncio
    async def test_gitignore_can_be_disabled(self, tree, temp_dir):
        config = ChizuConfig(cache_dir=temp_dir / "cache", use_gitignore=False)
        result = await Scanner(config).scan(tree)
        rel = {f.path.relative_to(tree).as_posix() for f in result.files}

        assert "debug.log" in rel
        assert "node_modules/file.js" not in rel

    @pytest.mark.asyncio
    async def test_returns_absolute_paths(self, tree, test_config):
        result = await Scanner(test_config).scan(tree)
        assert all(p.is_absolute() for p in result.paths)

    @pytest.mark.asyncio
    async def test_deterministic_order(self, tree, test_config):
        first = await Scanner(test_config).scan(tree)
        second = await Scanner(test_config).scan(tree)
        assert first.paths == second.paths

    @pytest.mark.asyncio
    async def test_file_info_fields(self, tree, test_config):
        result = await Scanner(test_config).scan(tree)
        info = next(f for f in result.files if f.name == "main.py")

        assert info.path == tree / "main.py"
        assert info.size == len("def main(): pass\n")

    @pytest.mark.asyncio
    async def test_total_bytes(self, tree, test_config, caplog):
        """total_bytes sums the sizes of the files that were kept."""
        with caplog.at_level(logging.INFO, logger="chizu.scanner"):
            result = await Scanner(test_config).scan(tree)

        assert f"({result.total_bytes} bytes)" in caplog.text
        assert result.total_bytes == sum(p.stat().st_size for p in result.paths)

    @pytest.mark.asyncio
    async def test_missing_root(self, temp_dir, test_config):
        with pytest.raises(TargetNotFoundError):
            await Scanner(test_config).scan(temp_dir / "does-not-exist")


class TestScannerConvenience:
    """Tests for convenience functions."""

    @pytest.mark.asyncio
    async def test_scan_directory_function(self, tree, test_config):
        result = await scan_directory(tree, test_config)
        assert len(result.files) > 0
