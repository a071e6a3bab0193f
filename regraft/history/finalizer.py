"""Branch finalizer - moves the branch to the rewritten history."""

from loguru import logger

from regraft.backend.base import VersionControlBackend
from regraft.history.hash import short_hash


class BranchFinalizer:
    """
    Points a branch at a new tip and syncs the working area to it.

    The working-area reset discards uncommitted changes. Set
    ``checkout=False`` to move the reference only (e.g. in a bare clone).
    """

    def __init__(self, backend: VersionControlBackend, checkout: bool = True):
        self.backend = backend
        self.checkout = checkout

    async def finalize(
        self,
        branch: str,
        new_tip: str,
        expected_old: str | None = None,
    ) -> None:
        """
        Move ``branch`` to ``new_tip``.

        Args:
            branch: Full reference name.
            new_tip: Commit to point the branch at.
            expected_old: Tip the branch must still be at; the update is
                rejected if it moved in the meantime.

        Raises:
            RefConflict: The reference update was rejected.
            CheckoutError: The working area could not be reset.
        """
        await self.backend.update_ref(branch, new_tip, expected_old)
        logger.info(f"Moved {branch} to {short_hash(new_tip)}")

        if self.checkout:
            await self.backend.checkout_working_area(new_tip)
            logger.debug(f"Working area reset to {short_hash(new_tip)}")
