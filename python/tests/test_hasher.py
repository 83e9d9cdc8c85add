"""
Hasher Tests - Verify content fingerprints.

Tests:
- Determinism across instances
- Change detection
- Convenience function
"""

from chizu.hasher import ContentHasher, fingerprint


class TestContentHasher:
    """Tests for the ContentHasher class."""

    def test_same_content_same_fingerprint(self):
        """Fingerprints are stable across hasher instances."""
        assert ContentHasher().hash("def a(): pass") == ContentHasher().hash("def a(): pass")

    def test_changed_content_changes_fingerprint(self):
        """Any edit changes the fingerprint."""
        hasher = ContentHasher()
        assert hasher.hash("def a(): pass") != hasher.hash("def a(): pass\n")

    def test_fingerprint_is_xxh64_hex(self):
        """Fingerprint is a 64-bit hex digest."""
        digest = ContentHasher().hash("hello")
        assert len(digest) == 16
        int(digest, 16)

    def test_handles_non_ascii(self):
        """Unicode content is hashed via its UTF-8 bytes."""
        hasher = ContentHasher()
        assert hasher.hash("地図") != hasher.hash("地")

    def test_empty_content(self):
        assert ContentHasher().hash("") == fingerprint("")


class TestHasherConvenience:
    """Tests for convenience functions."""

    def test_fingerprint_function(self):
        """fingerprint() matches ContentHasher.hash()."""
        assert fingerprint("x = 1") == ContentHasher().hash("x = 1")
