"""
Hasher - Fast content fingerprints using xxHash.

Uses xxHash64 instead of SHA256 since the fingerprint only detects
change; it is not a security boundary. The digest is computed over the
decoded text the extractor sees, so a cache hit always means the
extractor would get identical input.
"""

import xxhash


class ContentHasher:
    """
    Deterministic content fingerprinting.

    Create one per process and pass it to the pipeline. The seed is fixed
    so fingerprints stay stable across restarts.
    """

    SEED = 0

    def hash(self, content: str) -> str:
        """Return the xxHash64 hex digest of the UTF-8 encoded content."""
        return xxhash.xxh64_hexdigest(content.encode("utf-8"), seed=self.SEED)


_default_hasher = ContentHasher()


def fingerprint(content: str) -> str:
    """
    Convenience function to fingerprint a string.

    Usage:
        if fingerprint(new_text) != entry.fingerprint:
            print("changed")
    """
    return _default_hasher.hash(content)
