"""
History model for regraft.

This package provides the pieces of a rewriting run:
- Commit objects and the raw commit parser
- The rewrite map (old hash -> new hash)
- The commit loader, grafting engine and branch finalizer

The pipeline classes live in their own modules (loader, engine,
finalizer, rewriter) and are imported from there.
"""

from regraft.history.branch import Branch
from regraft.history.commit import Commit, parse_commit
from regraft.history.errors import (
    BackendError,
    CheckoutError,
    EmptySegment,
    GraftError,
    InvalidRange,
    MalformedCommit,
    ObjectNotFound,
    RefConflict,
    RefNotFound,
    RegraftError,
    RewriteConflict,
    TreeMismatch,
    UnrecognizedHeaderKey,
    UnresolvedParent,
    UnrewrittenTip,
)
from regraft.history.rewrite_map import RewriteMap

__all__ = [
    "Branch",
    "Commit",
    "parse_commit",
    "RewriteMap",
    "RegraftError",
    "MalformedCommit",
    "UnrecognizedHeaderKey",
    "BackendError",
    "ObjectNotFound",
    "RefNotFound",
    "InvalidRange",
    "RefConflict",
    "CheckoutError",
    "GraftError",
    "EmptySegment",
    "TreeMismatch",
    "UnresolvedParent",
    "UnrewrittenTip",
    "RewriteConflict",
]
