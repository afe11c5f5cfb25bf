"""Content-addressed artifact keys.

A key identifies one rendered artifact. It is derived only from the output
format and the diagram source, so the same diagram always maps to the same
cache entry, in any process.
"""

from __future__ import annotations

import hashlib

__all__ = ["KEY_LENGTH", "artifact_key"]

# Hex characters kept from the digest (128 bits)
KEY_LENGTH = 32


def artifact_key(*parts: str) -> str:
    """Compute the artifact key for an ordered sequence of strings.

    Each part is length-prefixed before being fed to the digest, so
    ``("ab", "c")`` and ``("a", "bc")`` produce different keys and swapping
    two parts changes the key.

    Args:
        *parts: Strings to accumulate, typically ``(request_type, source)``.

    Returns:
        Lowercase hex key of KEY_LENGTH characters.

    Example:
        >>> artifact_key("svg", "@startuml\\nA -> B\\n@enduml") == artifact_key(
        ...     "svg", "@startuml\\nA -> B\\n@enduml")
        True
    """
    digest = hashlib.sha256()
    for part in parts:
        data = part.encode("utf-8")
        digest.update(len(data).to_bytes(8, "big"))
        digest.update(data)
    return digest.hexdigest()[:KEY_LENGTH]
