"""
History rewriter - one rewriting run from branch lookup to branch update.

Wires the loader, the engine and the finalizer together. The branch is
only moved after the engine completed its walk; any error before that
leaves the branch where it was.
"""

from loguru import logger

from regraft.backend.base import VersionControlBackend
from regraft.config.schema import Config
from regraft.history.engine import GraftEngine, GraftResult
from regraft.history.finalizer import BranchFinalizer
from regraft.history.loader import CommitLoader


class HistoryRewriter:
    """
    Runs graft and parent-removal passes against a backend.

    Attributes:
        loader: Resolves branches and revision ranges to commits.
        engine: Rewrites parentage.
        finalizer: Moves the branch once the walk is done.
    """

    def __init__(self, backend: VersionControlBackend, config: Config | None = None):
        config = config or Config()
        self.backend = backend
        self.loader = CommitLoader(backend, max_concurrency=config.loader.max_concurrency)
        self.engine = GraftEngine(backend)
        self.finalizer = BranchFinalizer(backend, checkout=config.finalize.checkout)

    async def graft(self, range_args: list[str], branch: str | None = None) -> GraftResult:
        """
        Graft the commits in ``range_args`` onto the tip of a branch.

        Args:
            range_args: Revision range selecting the segment.
            branch: Full reference name; defaults to the checked-out branch.

        Returns:
            The engine's result.
        """
        target, head = await self.loader.load_branch_head(branch)
        segment = await self.loader.load_sequence(range_args)

        result = await self.engine.graft(head, segment)
        await self.finalizer.finalize(target.name, result.new_tip, expected_old=target.head)

        logger.info(f"Grafted {len(result.rewritten)} commits onto {target.short_name}")
        return result

    async def remove_parents(
        self,
        start: str,
        removed: list[str],
        branch: str | None = None,
    ) -> GraftResult:
        """
        Cut ``removed`` out of the ancestry between ``start`` and the branch tip.

        Args:
            start: Commit the walk starts after (exclusive).
            removed: Commit hashes to drop from parent lists.
            branch: Full reference name; defaults to the checked-out branch.

        Returns:
            The engine's result.
        """
        name = branch or await self.backend.current_branch()
        expected_old = await self.backend.resolve_ref(name)
        sequence = await self.loader.load_sequence([f"{start}..{name}"])

        result = await self.engine.remove_parents(sequence, removed)
        await self.finalizer.finalize(name, result.new_tip, expected_old=expected_old)

        logger.info(f"Rewrote {len(result.rewritten)} commits on {name}")
        return result
