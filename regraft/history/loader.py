"""Commit sequence loader."""

import asyncio

from loguru import logger

from regraft.backend.base import VersionControlBackend
from regraft.history.branch import Branch
from regraft.history.commit import Commit, parse_commit


class CommitLoader:
    """
    Resolves revision ranges to parsed commits.

    Fetches run concurrently (bounded by ``max_concurrency``) but the
    result always follows the order of the backend's hash list, never
    the order in which fetches complete.
    """

    def __init__(self, backend: VersionControlBackend, max_concurrency: int = 8):
        self.backend = backend
        self.max_concurrency = max(1, max_concurrency)

    async def load_commit(self, hash: str) -> Commit:
        """Fetch and parse one commit."""
        raw = await self.backend.read_commit(hash)
        return parse_commit(hash, raw)

    async def load_branch_head(self, branch: str | None = None) -> tuple[Branch, Commit]:
        """
        Load the tip commit of a branch.

        Args:
            branch: Full reference name; defaults to the checked-out branch.

        Returns:
            The branch as read, and its tip commit.
        """
        name = branch or await self.backend.current_branch()
        head_hash = await self.backend.resolve_ref(name)
        head = await self.load_commit(head_hash)
        logger.debug(f"Branch {name} is at {head!r}")
        return Branch(name=name, head=head_hash), head

    async def load_sequence(self, range_args: list[str]) -> list[Commit]:
        """
        Load the commits selected by a revision range, oldest first.

        Args:
            range_args: Range expression forwarded to the backend.

        Returns:
            Parsed commits in replay order.

        Raises:
            InvalidRange: The backend rejected the expression.
            ObjectNotFound: A listed commit could not be read.
            MalformedCommit: A listed commit could not be parsed.
        """
        hashes = await self.backend.list_revisions(range_args)
        hashes.reverse()

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch(hash: str) -> Commit:
            async with semaphore:
                return await self.load_commit(hash)

        tasks = [asyncio.ensure_future(fetch(h)) for h in hashes]
        try:
            commits = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.info(f"Loaded {len(commits)} commits for {' '.join(range_args)}")
        return list(commits)
