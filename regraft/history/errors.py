"""
Error taxonomy for history rewriting.

Errors fall into three stages:
- parse: the backend returned a commit object we cannot read
- backend: the version-control backend rejected an operation
- graft: a precondition or invariant of the rewrite was violated

None of them are retried. The CLI reports the stage and the message and
exits non-zero.
"""

from typing import Any


class RegraftError(Exception):
    """Base class for all regraft errors."""

    stage = "regraft"


# =========================================================================
# Parse errors
# =========================================================================


class MalformedCommit(RegraftError):
    """Raw commit text does not have the expected header/message shape."""

    stage = "parse"

    def __init__(self, message: str, raw: str | None = None):
        super().__init__(message)
        self.raw = raw


class UnrecognizedHeaderKey(MalformedCommit):
    """A header line starts with a key outside tree/parent/author/committer."""

    def __init__(self, key: str, raw: str | None = None):
        super().__init__(f"Unrecognized commit header key: {key!r}", raw)
        self.key = key


# =========================================================================
# Backend errors
# =========================================================================


class BackendError(RegraftError):
    """
    The version-control backend rejected an operation.

    Attributes:
        command: The command line that failed (git backend only).
        stderr: Diagnostic output of the failed command.
    """

    stage = "backend"

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class ObjectNotFound(BackendError):
    """An object could not be read from the store."""


class RefNotFound(BackendError):
    """A reference name could not be resolved."""


class InvalidRange(BackendError):
    """A revision-range expression was rejected."""


class RefConflict(BackendError):
    """A reference update was rejected (e.g. concurrent modification)."""


class CheckoutError(BackendError):
    """The working area could not be synced to a commit."""


# =========================================================================
# Graft errors
# =========================================================================


class GraftError(RegraftError):
    """A rewrite precondition or invariant was violated."""

    stage = "graft"


class EmptySegment(GraftError):
    """The segment to rewrite contains no commits."""

    def __init__(self, message: str = "Segment to graft is empty"):
        super().__init__(message)


class TreeMismatch(GraftError):
    """The oldest commit of the segment does not share the target tip's tree."""

    def __init__(self, graft_point: Any, target_head: Any):
        super().__init__(
            f"Tree hash mismatch: {graft_point.hash} has tree {graft_point.tree}, "
            f"but {target_head.hash} has tree {target_head.tree}"
        )
        self.graft_point = graft_point
        self.target_head = target_head


class UnresolvedParent(GraftError):
    """
    None of a commit's parents has been rewritten yet.

    Attributes:
        commit: The offending commit.
        rewrite_map: Snapshot of the rewrite map when the walk stopped.
    """

    def __init__(self, commit: Any, rewrite_map: dict[str, str]):
        parents = ", ".join(commit.parents)
        super().__init__(
            f"No rewritten parent for {commit.hash} (parents: {parents})"
        )
        self.commit = commit
        self.rewrite_map = rewrite_map


class UnrewrittenTip(GraftError):
    """
    The newest commit of the segment was never rewritten.

    Raised when the segment ends in a root commit, which the walk skips.
    Moving the branch there would drop the target head from its history.

    Attributes:
        commit: The newest commit of the segment.
        rewrite_map: Snapshot of the rewrite map at the end of the walk.
    """

    def __init__(self, commit: Any, rewrite_map: dict[str, str]):
        super().__init__(
            f"Newest commit {commit.hash} has no replacement; refusing to move the branch"
        )
        self.commit = commit
        self.rewrite_map = rewrite_map


class RewriteConflict(RegraftError):
    """A commit was rewritten twice with different results."""

    stage = "rewrite-map"

    def __init__(self, old: str, existing: str, new: str):
        super().__init__(
            f"Commit {old} already rewritten to {existing}, refusing {new}"
        )
        self.old = old
        self.existing = existing
        self.new = new
