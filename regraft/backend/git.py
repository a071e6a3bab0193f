"""Backend driving the git executable."""

import asyncio
from pathlib import Path

from loguru import logger

from regraft.backend.base import VersionControlBackend
from regraft.history.commit import Commit
from regraft.history.errors import (
    BackendError,
    CheckoutError,
    InvalidRange,
    ObjectNotFound,
    RefConflict,
    RefNotFound,
)


class GitBackend(VersionControlBackend):
    """
    Version-control backend using git plumbing commands.

    Every operation spawns one git process. Replacement commits are made
    with ``git replace --graft``, which writes the new commit and records
    it under ``refs/replace/<original>``; that record is what
    discard_replacement_record deletes.
    """

    def __init__(
        self,
        repo_dir: Path | str | None = None,
        git_binary: str = "git",
        timeout: int = 60,
    ):
        self.repo_dir = Path(repo_dir) if repo_dir else None
        self.git_binary = git_binary
        self.timeout = timeout

    def _command(self, args: list[str]) -> list[str]:
        cmd = [self.git_binary]
        if self.repo_dir is not None:
            cmd.extend(["-C", str(self.repo_dir)])
        return cmd + args

    async def _run(
        self,
        args: list[str],
        error: type[BackendError] = BackendError,
    ) -> str:
        """
        Run a git command and return its stdout.

        Args:
            args: Arguments after the git binary.
            error: Exception class raised on a non-zero exit.

        Returns:
            Decoded standard output.

        Raises:
            BackendError: (or ``error``) if git fails or times out.
        """
        cmd = self._command(args)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise BackendError(f"git executable not found: {self.git_binary}", cmd) from e

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise BackendError(
                f"Timed out after {self.timeout}s: {' '.join(cmd)}", cmd
            ) from e

        if proc.returncode != 0:
            err = stderr.decode("utf-8", errors="replace").strip()
            raise error(f"Error: {err} from command: {' '.join(cmd)}", cmd, err)

        return stdout.decode("utf-8", errors="surrogateescape")

    # =========================================================================
    # References
    # =========================================================================

    async def current_branch(self) -> str:
        output = await self._run(["symbolic-ref", "HEAD"], RefNotFound)
        return output.strip()

    async def resolve_ref(self, name: str) -> str:
        try:
            output = await self._run(
                ["rev-parse", "--verify", "--quiet", f"{name}^{{commit}}"],
                RefNotFound,
            )
        except RefNotFound as e:
            # --quiet leaves stderr empty
            raise RefNotFound(f"Cannot resolve reference: {name}", e.command, e.stderr) from e
        return output.strip()

    async def update_ref(
        self,
        name: str,
        new_hash: str,
        expected_old: str | None = None,
    ) -> None:
        args = ["update-ref", "-m", "regraft: rewrite history", name, new_hash]
        if expected_old is not None:
            args.append(expected_old)
        await self._run(args, RefConflict)

    # =========================================================================
    # Objects
    # =========================================================================

    async def list_revisions(self, range_args: list[str]) -> list[str]:
        # Children before parents even when commit dates tie
        output = await self._run(["rev-list", "--topo-order", *range_args], InvalidRange)
        return output.split()

    async def read_commit(self, hash: str) -> str:
        return await self._run(["cat-file", "commit", hash], ObjectNotFound)

    async def create_replacement_commit(
        self,
        original: Commit,
        parents: list[str],
    ) -> str:
        await self._run(["replace", "-f", "--graft", original.hash, *parents])
        output = await self._run(["rev-parse", f"refs/replace/{original.hash}"])
        return output.strip()

    async def discard_replacement_record(self, original_hash: str) -> None:
        await self._run(["replace", "-d", original_hash])

    # =========================================================================
    # Working area
    # =========================================================================

    async def checkout_working_area(self, hash: str) -> None:
        await self._run(["reset", "--hard", hash], CheckoutError)
