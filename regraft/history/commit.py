"""Commit object model and raw commit parser."""

import re
from dataclasses import dataclass, replace

from regraft.history.errors import MalformedCommit, UnrecognizedHeaderKey
from regraft.history.hash import short_hash


HEADER_KEYS = ("tree", "parent", "author", "committer")

# One "<key> <value>\n" header line, anchored at the match position
_HEADER_LINE = re.compile(r"(?P<key>[^ \n]+) (?P<value>[^\n]+)\n")


@dataclass(frozen=True)
class Commit:
    """
    An immutable commit object.

    Only the parent list ever differs between a commit and its
    replacement; tree, identities and message are carried over verbatim.

    Attributes:
        hash: Content address the commit was looked up by.
        tree: Content address of the file-tree snapshot.
        parents: Parent hashes in source order (empty for a root commit).
        author: Author line, opaque.
        committer: Committer line, opaque.
        message: Commit message with trailing whitespace trimmed.
    """

    hash: str
    tree: str
    parents: tuple[str, ...]
    author: str
    committer: str
    message: str

    @property
    def is_root(self) -> bool:
        """True if the commit has no parents."""
        return not self.parents

    @property
    def is_merge(self) -> bool:
        """True if the commit has two or more parents."""
        return len(self.parents) > 1

    @property
    def subject(self) -> str:
        """First line of the message."""
        return self.message.split("\n", 1)[0]

    def with_parents(self, parents: list[str] | tuple[str, ...]) -> "Commit":
        """
        Return a copy with a different parent list.

        The copy has no hash yet; the backend assigns one when it
        writes the object.
        """
        return replace(self, hash="", parents=tuple(parents))

    def to_raw(self) -> str:
        """Serialize to the raw header/message text the parser reads."""
        lines = [f"tree {self.tree}"]
        lines.extend(f"parent {parent}" for parent in self.parents)
        lines.append(f"author {self.author}")
        lines.append(f"committer {self.committer}")
        return "\n".join(lines) + "\n\n" + self.message + "\n"

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{short_hash(self.hash)} {self.subject}"

    def __repr__(self) -> str:
        """Debug representation."""
        parents = ",".join(short_hash(p) for p in self.parents)
        return (
            f"Commit(hash={short_hash(self.hash)}, tree={short_hash(self.tree)}, "
            f"parents=[{parents}])"
        )


def parse_commit(hash: str, raw: str | bytes) -> Commit:
    """
    Parse a raw commit object.

    The raw text is a block of ``<key> <value>`` header lines, a blank
    line, then the message. ``tree``, ``author`` and ``committer`` must be
    present; ``parent`` may repeat and its order is preserved.

    Args:
        hash: The hash the object was fetched by; becomes ``Commit.hash``.
        raw: Commit object as returned by the backend.

    Returns:
        The parsed commit.

    Raises:
        UnrecognizedHeaderKey: A header line uses an unknown key.
        MalformedCommit: The header block is not terminated by a blank
            line, or a required header is missing.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="surrogateescape")

    headers: dict[str, str] = {}
    parents: list[str] = []
    pos = 0

    while True:
        match = _HEADER_LINE.match(raw, pos)
        if match is None:
            break
        key, value = match.group("key"), match.group("value")
        if key not in HEADER_KEYS:
            raise UnrecognizedHeaderKey(key, raw)
        if key == "parent":
            parents.append(value)
        else:
            headers[key] = value
        pos = match.end()

    if raw[pos:pos + 1] != "\n":
        raise MalformedCommit(f"Invalid commit object {hash}: missing blank line after headers", raw)

    missing = [key for key in ("tree", "author", "committer") if key not in headers]
    if missing:
        raise MalformedCommit(
            f"Invalid commit object {hash}: missing {', '.join(missing)}", raw
        )

    return Commit(
        hash=hash,
        tree=headers["tree"],
        parents=tuple(parents),
        author=headers["author"],
        committer=headers["committer"],
        message=raw[pos + 1:].rstrip(),
    )
