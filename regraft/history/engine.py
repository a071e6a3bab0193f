"""
Grafting engine - re-parents a segment of history.

The engine walks a segment oldest-first, rewriting each commit's parent
list through a RewriteMap and asking the backend for a replacement
commit. Tree and message of every commit are kept; only parentage
changes. The walk is strictly sequential because each commit's new
parents are the replacements made in earlier steps.
"""

from dataclasses import dataclass, field

from loguru import logger

from regraft.backend.base import VersionControlBackend
from regraft.history.commit import Commit
from regraft.history.errors import (
    BackendError,
    EmptySegment,
    TreeMismatch,
    UnresolvedParent,
    UnrewrittenTip,
)
from regraft.history.hash import short_hash
from regraft.history.rewrite_map import RewriteMap


@dataclass
class GraftResult:
    """
    Outcome of a completed walk.

    Attributes:
        new_tip: Hash the branch should be moved to.
        rewrite_map: Final old-to-new mapping.
        rewritten: (old, new) pairs for every synthesized commit, in walk order.
        skipped: Commits left untouched.
    """

    new_tip: str
    rewrite_map: RewriteMap
    rewritten: list[tuple[str, str]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class GraftEngine:
    """Rewrites commit parentage through a version-control backend."""

    def __init__(self, backend: VersionControlBackend):
        self.backend = backend

    async def graft(self, target_head: Commit, segment: list[Commit]) -> GraftResult:
        """
        Re-parent ``segment`` onto ``target_head``.

        The oldest commit of the segment must have the same tree as the
        target head; its original parents are all replaced by the target
        head. If it is a root commit it is rewritten directly on top of
        the target head.

        Args:
            target_head: Current tip of the live branch.
            segment: Commits to transplant, oldest first.

        Returns:
            The walk result; ``new_tip`` is the replacement of the newest
            commit of the segment.

        Raises:
            EmptySegment: ``segment`` is empty.
            TreeMismatch: Trees differ at the graft point. Nothing is written.
            UnresolvedParent: A commit has parents but none was rewritten.
            UnrewrittenTip: The newest commit is a root and was skipped.
        """
        if not segment:
            raise EmptySegment()

        graft_point = segment[0]
        if graft_point.tree != target_head.tree:
            raise TreeMismatch(graft_point, target_head)

        rewrite_map = RewriteMap()
        result = GraftResult(new_tip="", rewrite_map=rewrite_map)
        logger.info(
            f"Grafting {len(segment)} commits from {short_hash(graft_point.hash)} "
            f"onto {short_hash(target_head.hash)}"
        )

        if graft_point.parents:
            for parent in graft_point.parents:
                rewrite_map.set(parent, target_head.hash)
            remaining = segment
        else:
            await self._rewrite(graft_point, [target_head.hash], result)
            remaining = segment[1:]

        for commit in remaining:
            if not commit.parents:
                logger.warning(f"Skipping {commit}: no parents to rewrite")
                result.skipped.append(commit.hash)
                continue

            if not any(parent in rewrite_map for parent in commit.parents):
                raise UnresolvedParent(commit, rewrite_map.snapshot())

            new_parents = [rewrite_map.resolve(parent) for parent in commit.parents]
            await self._rewrite(commit, new_parents, result)

        if not rewrite_map.has(segment[-1].hash):
            raise UnrewrittenTip(segment[-1], rewrite_map.snapshot())

        result.new_tip = rewrite_map.resolve(segment[-1].hash)
        return result

    async def remove_parents(
        self,
        sequence: list[Commit],
        removed: set[str] | list[str],
    ) -> GraftResult:
        """
        Drop commits from the ancestry of ``sequence``.

        Every hash in ``removed`` is filtered out of the parent lists;
        the surviving parents are substituted with their replacements.
        A commit whose every parent is removed becomes a root commit.

        Args:
            sequence: Commits to walk, oldest first.
            removed: Hashes to cut out of the ancestry.

        Returns:
            The walk result; ``new_tip`` is the (possibly unchanged)
            newest commit of the sequence.

        Raises:
            EmptySegment: ``sequence`` is empty.
        """
        if not sequence:
            raise EmptySegment("No commits between start and branch tip")

        removed = set(removed)
        rewrite_map = RewriteMap()
        result = GraftResult(new_tip="", rewrite_map=rewrite_map)
        logger.info(f"Removing {len(removed)} parent(s) from {len(sequence)} commits")

        for commit in sequence:
            new_parents = [
                rewrite_map.resolve(parent)
                for parent in commit.parents
                if parent not in removed
            ]
            await self._rewrite(commit, new_parents, result)

        result.new_tip = rewrite_map.resolve(sequence[-1].hash)
        return result

    async def _rewrite(
        self,
        commit: Commit,
        new_parents: list[str],
        result: GraftResult,
    ) -> None:
        """Synthesize a replacement for ``commit`` and record it."""
        # Several parents may collapse onto the same replacement
        new_parents = list(dict.fromkeys(new_parents))

        if tuple(new_parents) == commit.parents:
            # Same parent list: the commit is its own replacement
            logger.debug(f"Keeping {commit}: parents unchanged")
            result.rewrite_map.set(commit.hash, commit.hash)
            result.skipped.append(commit.hash)
            return

        new_hash = await self.backend.create_replacement_commit(commit, new_parents)
        result.rewrite_map.set(commit.hash, new_hash)
        result.rewritten.append((commit.hash, new_hash))
        logger.debug(
            f"Rewrote {commit} -> {short_hash(new_hash)} "
            f"(parents: {', '.join(short_hash(p) for p in new_parents) or 'none'})"
        )

        try:
            await self.backend.discard_replacement_record(commit.hash)
        except BackendError as e:
            logger.warning(f"Failed to discard replacement record for {commit.hash}: {e}")
