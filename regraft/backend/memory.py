"""
In-memory backend.

Holds a content-addressed commit graph, references and replacement
records in plain dicts. Commits get git-compatible SHA1 addresses, so a
graph built here has the same hashes git would assign to the same
objects.
"""

import asyncio

from regraft.backend.base import VersionControlBackend
from regraft.history.branch import BRANCH_PREFIX
from regraft.history.commit import Commit, parse_commit
from regraft.history.errors import (
    BackendError,
    CheckoutError,
    InvalidRange,
    ObjectNotFound,
    RefConflict,
    RefNotFound,
)
from regraft.history.hash import compute_object_hash


class MemoryBackend(VersionControlBackend):
    """
    Version-control backend backed by dictionaries.

    Attributes:
        objects: Raw commit objects by hash.
        refs: Reference name to commit hash.
        head: Reference name HEAD points at (None when detached).
        replacements: Original hash to replacement hash for replacement
            records that have not been discarded yet.
        working_area: Commit the working area was last synced to.
    """

    def __init__(self) -> None:
        self.objects: dict[str, str] = {}
        self.refs: dict[str, str] = {}
        self.head: str | None = None
        self.replacements: dict[str, str] = {}
        self.working_area: str | None = None

    # =========================================================================
    # Graph construction
    # =========================================================================

    def write_commit(self, commit: Commit) -> str:
        """Store a commit object and return its content address."""
        raw = commit.to_raw()
        hash = compute_object_hash("commit", raw.encode("utf-8", errors="surrogateescape"))
        self.objects[hash] = raw
        return hash

    def add_commit(
        self,
        tree: str,
        parents: list[str] | None = None,
        message: str = "",
        author: str = "A U Thor <author@example.com> 1700000000 +0000",
        committer: str = "C O Mitter <committer@example.com> 1700000000 +0000",
    ) -> str:
        """Create a commit and return its hash."""
        commit = Commit(
            hash="",
            tree=tree,
            parents=tuple(parents or ()),
            author=author,
            committer=committer,
            message=message,
        )
        return self.write_commit(commit)

    def get_commit(self, hash: str) -> Commit:
        """Parse a stored commit."""
        if hash not in self.objects:
            raise ObjectNotFound(f"Not a valid commit object: {hash}")
        return parse_commit(hash, self.objects[hash])

    def set_branch(self, name: str, hash: str, checkout: bool = False) -> str:
        """Point a branch at a commit, optionally checking it out."""
        ref = name if name.startswith("refs/") else BRANCH_PREFIX + name
        self.refs[ref] = hash
        if checkout:
            self.head = ref
            self.working_area = hash
        return ref

    # =========================================================================
    # Backend interface
    # =========================================================================

    async def current_branch(self) -> str:
        if self.head is None:
            raise RefNotFound("HEAD is not a symbolic ref")
        return self.head

    async def resolve_ref(self, name: str) -> str:
        if name == "HEAD":
            if self.head is None:
                if self.working_area is None:
                    raise RefNotFound("HEAD does not point at a commit")
                return self.working_area
            name = self.head
        for candidate in (name, BRANCH_PREFIX + name):
            if candidate in self.refs:
                return self.refs[candidate]
        if name in self.objects:
            return name
        raise RefNotFound(f"Needed a single revision: {name}")

    async def list_revisions(self, range_args: list[str]) -> list[str]:
        include: list[str] = []
        exclude: list[str] = []
        try:
            for arg in range_args:
                if ".." in arg:
                    left, right = arg.split("..", 1)
                    exclude.append(await self.resolve_ref(left or "HEAD"))
                    include.append(await self.resolve_ref(right or "HEAD"))
                elif arg.startswith("^"):
                    exclude.append(await self.resolve_ref(arg[1:]))
                else:
                    include.append(await self.resolve_ref(arg))
        except RefNotFound as e:
            raise InvalidRange(f"Bad revision range {' '.join(range_args)}: {e}") from e

        hidden: set[str] = set()
        for tip in exclude:
            hidden |= self._ancestry(tip)

        # Post-order walk puts every parent before its children
        ordered: list[str] = []
        seen: set[str] = set(hidden)
        for tip in include:
            stack: list[tuple[str, bool]] = [(tip, False)]
            while stack:
                hash, expanded = stack.pop()
                if expanded:
                    ordered.append(hash)
                    continue
                if hash in seen:
                    continue
                seen.add(hash)
                stack.append((hash, True))
                for parent in reversed(self.get_commit(hash).parents):
                    stack.append((parent, False))

        ordered.reverse()
        return ordered

    async def read_commit(self, hash: str) -> str:
        await asyncio.sleep(0)
        if hash not in self.objects:
            raise ObjectNotFound(f"Not a valid object name {hash}")
        return self.objects[hash]

    async def create_replacement_commit(
        self,
        original: Commit,
        parents: list[str],
    ) -> str:
        stored = self.get_commit(original.hash)
        for parent in parents:
            if parent not in self.objects:
                raise ObjectNotFound(f"Not a valid object name {parent}")
        new_hash = self.write_commit(stored.with_parents(parents))
        if new_hash == original.hash:
            raise BackendError(f"New commit is the same as the old one: {original.hash}")
        self.replacements[original.hash] = new_hash
        return new_hash

    async def discard_replacement_record(self, original_hash: str) -> None:
        if self.replacements.pop(original_hash, None) is None:
            raise BackendError(f"Replace ref for {original_hash} not found")

    async def update_ref(
        self,
        name: str,
        new_hash: str,
        expected_old: str | None = None,
    ) -> None:
        if new_hash not in self.objects:
            raise RefConflict(f"Cannot update {name}: {new_hash} is not a commit")
        current = self.refs.get(name)
        if expected_old is not None and current != expected_old:
            raise RefConflict(
                f"Cannot lock ref {name}: is at {current} but expected {expected_old}"
            )
        self.refs[name] = new_hash

    async def checkout_working_area(self, hash: str) -> None:
        if hash not in self.objects:
            raise CheckoutError(f"Could not reset to {hash}")
        self.working_area = hash

    def _ancestry(self, tip: str) -> set[str]:
        """All commits reachable from ``tip``, inclusive."""
        reachable: set[str] = set()
        stack = [tip]
        while stack:
            hash = stack.pop()
            if hash in reachable:
                continue
            reachable.add(hash)
            stack.extend(self.get_commit(hash).parents)
        return reachable
