"""Tests for the commit sequence loader."""

import asyncio

import pytest

from regraft.backend.memory import MemoryBackend
from regraft.history.errors import InvalidRange, MalformedCommit, ObjectNotFound
from regraft.history.loader import CommitLoader
from tests.fixtures.history_data import TREE_T, build_orphan_scenario


class SlowOldestBackend(MemoryBackend):
    """Backend whose reads finish newest-first."""

    def __init__(self):
        super().__init__()
        self.completed: list[str] = []

    async def read_commit(self, hash):
        order = list(self.objects)
        # Older commits were added first and take longer
        await asyncio.sleep(0.01 * (len(order) - order.index(hash)))
        raw = await super().read_commit(hash)
        self.completed.append(hash)
        return raw


@pytest.mark.asyncio
async def test_load_sequence_is_oldest_first():
    backend, hashes = build_orphan_scenario()
    loader = CommitLoader(backend)

    commits = await loader.load_sequence(["side"])

    assert [c.hash for c in commits] == [hashes["A"], hashes["B"], hashes["C"]]
    assert commits[0].is_root
    assert commits[1].parents == (hashes["A"],)


@pytest.mark.asyncio
async def test_load_sequence_order_ignores_completion_order():
    backend = SlowOldestBackend()
    a = backend.add_commit(TREE_T, message="A")
    b = backend.add_commit(TREE_T, [a], message="B")
    c = backend.add_commit(TREE_T, [b], message="C")
    backend.set_branch("main", c)

    loader = CommitLoader(backend, max_concurrency=3)
    commits = await loader.load_sequence(["main"])

    assert backend.completed == [c, b, a]
    assert [commit.hash for commit in commits] == [a, b, c]


@pytest.mark.asyncio
async def test_load_sequence_range():
    backend, hashes = build_orphan_scenario()
    loader = CommitLoader(backend)

    commits = await loader.load_sequence([f"{hashes['A']}..side"])

    assert [c.hash for c in commits] == [hashes["B"], hashes["C"]]


@pytest.mark.asyncio
async def test_load_sequence_empty_range():
    backend, _ = build_orphan_scenario()
    loader = CommitLoader(backend)

    assert await loader.load_sequence(["side..side"]) == []


@pytest.mark.asyncio
async def test_invalid_range():
    backend, _ = build_orphan_scenario()
    loader = CommitLoader(backend)

    with pytest.raises(InvalidRange):
        await loader.load_sequence(["main..no-such-branch"])


@pytest.mark.asyncio
async def test_single_failed_fetch_fails_whole_load():
    class FlakyBackend(MemoryBackend):
        def __init__(self):
            super().__init__()
            self.missing: str | None = None

        async def read_commit(self, hash):
            if hash == self.missing:
                raise ObjectNotFound(f"Not a valid object name {hash}")
            return await super().read_commit(hash)

    backend = FlakyBackend()
    a = backend.add_commit(TREE_T, message="A")
    b = backend.add_commit(TREE_T, [a], message="B")
    backend.set_branch("main", b)
    backend.missing = a

    loader = CommitLoader(backend)
    with pytest.raises(ObjectNotFound):
        await loader.load_sequence(["main"])


@pytest.mark.asyncio
async def test_corrupt_object_fails_load():
    class CorruptBackend(MemoryBackend):
        async def read_commit(self, hash):
            return "garbage without headers"

    backend = CorruptBackend()
    a = backend.add_commit(TREE_T, message="A")
    backend.set_branch("main", a)

    loader = CommitLoader(backend)
    with pytest.raises(MalformedCommit):
        await loader.load_sequence(["main"])


@pytest.mark.asyncio
async def test_load_branch_head_defaults_to_checked_out_branch():
    backend, hashes = build_orphan_scenario()
    loader = CommitLoader(backend)

    branch, head = await loader.load_branch_head()

    assert branch.name == "refs/heads/main"
    assert branch.short_name == "main"
    assert branch.head == hashes["H"]
    assert head.hash == hashes["H"]
    assert head.tree == TREE_T
