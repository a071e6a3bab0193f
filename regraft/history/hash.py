"""Content-addressable hashing utilities."""

import hashlib


def compute_object_hash(kind: str, body: bytes) -> str:
    """
    Compute the git object id of a loose object.

    The id is the SHA1 of ``b"<kind> <size>\\0"`` followed by the body,
    so identical content always yields the identical address.

    Args:
        kind: Object type ("commit", "tree", "blob").
        body: Raw object content.

    Returns:
        40-character hexadecimal SHA1.
    """
    header = f"{kind} {len(body)}\0".encode("ascii")
    return hashlib.sha1(header + body).hexdigest()


def short_hash(value: str | None, length: int = 8) -> str:
    """Abbreviate a hash for display."""
    if not value:
        return "????????"
    return value[:length]
