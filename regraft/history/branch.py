"""Branch reference data structure."""

from dataclasses import dataclass

from regraft.history.hash import short_hash


BRANCH_PREFIX = "refs/heads/"


@dataclass
class Branch:
    """
    A named reference to a commit.

    The backend owns the reference; regraft reads it once at the start
    of a run and moves it once at the end.

    Attributes:
        name: Full reference name (e.g. "refs/heads/main").
        head: Hash the reference pointed at when it was read.
    """

    name: str
    head: str

    @property
    def short_name(self) -> str:
        """Branch name without the refs/heads/ prefix."""
        if self.name.startswith(BRANCH_PREFIX):
            return self.name[len(BRANCH_PREFIX):]
        return self.name

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.short_name} -> {short_hash(self.head)}"
