"""Version-control backends."""

from regraft.backend.base import VersionControlBackend
from regraft.backend.git import GitBackend
from regraft.backend.memory import MemoryBackend

__all__ = ["VersionControlBackend", "GitBackend", "MemoryBackend"]
