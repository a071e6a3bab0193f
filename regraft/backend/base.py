"""Base interface for version-control backends."""

from abc import ABC, abstractmethod

from regraft.history.commit import Commit


class VersionControlBackend(ABC):
    """
    Abstract base class for version-control backends.

    A backend owns the object store, the references and the working
    area. The rewriting pipeline only talks to it through this small
    set of operations. Failures are reported as BackendError subclasses.
    """

    @abstractmethod
    async def current_branch(self) -> str:
        """
        Get the full reference name of the checked-out branch.

        Raises:
            RefNotFound: HEAD is detached or unborn.
        """
        pass

    @abstractmethod
    async def resolve_ref(self, name: str) -> str:
        """
        Resolve a reference name to a commit hash.

        Raises:
            RefNotFound: The name does not resolve to a commit.
        """
        pass

    @abstractmethod
    async def list_revisions(self, range_args: list[str]) -> list[str]:
        """
        List the commits selected by a revision-range expression.

        Args:
            range_args: Backend-defined range expression (e.g. ["A..B"]).

        Returns:
            Commit hashes, newest first.

        Raises:
            InvalidRange: The expression was rejected.
        """
        pass

    @abstractmethod
    async def read_commit(self, hash: str) -> str:
        """
        Read a raw commit object.

        Raises:
            ObjectNotFound: No commit object with this hash.
        """
        pass

    @abstractmethod
    async def create_replacement_commit(
        self,
        original: Commit,
        parents: list[str],
    ) -> str:
        """
        Write a copy of ``original`` with a different parent list.

        Tree, author, committer and message are carried over unchanged.

        Returns:
            Hash of the new commit.
        """
        pass

    @abstractmethod
    async def discard_replacement_record(self, original_hash: str) -> None:
        """Drop the bookkeeping left behind by create_replacement_commit."""
        pass

    @abstractmethod
    async def update_ref(
        self,
        name: str,
        new_hash: str,
        expected_old: str | None = None,
    ) -> None:
        """
        Atomically point a reference at ``new_hash``.

        Args:
            name: Full reference name.
            new_hash: Commit to point at.
            expected_old: If given, only update while the reference still
                points here.

        Raises:
            RefConflict: The update was rejected.
        """
        pass

    @abstractmethod
    async def checkout_working_area(self, hash: str) -> None:
        """
        Reset the working area to a commit, discarding local changes.

        Raises:
            CheckoutError: The working area could not be synced.
        """
        pass
