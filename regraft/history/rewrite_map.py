"""Old-hash to new-hash substitution table."""

from typing import Iterator

from regraft.history.errors import RewriteConflict


class RewriteMap:
    """
    Mapping from original commit hashes to their replacements.

    Created empty per run, seeded with the graft boundary and grown as
    each commit is rewritten. Entries are never replaced: setting a key
    again is only allowed with the value it already holds.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def set(self, old: str, new: str) -> None:
        """
        Record that ``old`` was rewritten to ``new``.

        Raises:
            RewriteConflict: ``old`` is already mapped to a different hash.
        """
        existing = self._entries.get(old)
        if existing is not None and existing != new:
            raise RewriteConflict(old, existing, new)
        self._entries[old] = new

    def get(self, old: str) -> str | None:
        """Get the replacement for ``old``, or None."""
        return self._entries.get(old)

    def has(self, old: str) -> bool:
        """Check whether ``old`` has a replacement."""
        return old in self._entries

    def resolve(self, old: str) -> str:
        """Get the replacement for ``old``, or ``old`` itself."""
        return self._entries.get(old, old)

    def items(self) -> list[tuple[str, str]]:
        """List (old, new) pairs in insertion order."""
        return list(self._entries.items())

    def snapshot(self) -> dict[str, str]:
        """Copy of the current entries, for diagnostics."""
        return dict(self._entries)

    def __contains__(self, old: object) -> bool:
        return old in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"RewriteMap({len(self._entries)} entries)"
