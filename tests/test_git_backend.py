"""
Tests for the git backend against real repositories.

Skipped when the git executable is not available.
"""

import shutil

import pytest

from regraft.backend.git import GitBackend
from regraft.history.commit import parse_commit
from regraft.history.errors import (
    InvalidRange,
    ObjectNotFound,
    RefConflict,
    RefNotFound,
    TreeMismatch,
)
from regraft.history.rewriter import HistoryRewriter
from tests.fixtures.history_data import GIT_ENV, git, make_graft_repo

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def repo(tmp_path, monkeypatch):
    """Create a repository with a live branch and an orphan branch."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key, value in GIT_ENV.items():
        monkeypatch.setenv(key, value)

    path = tmp_path / "repo"
    hashes = make_graft_repo(path)
    return path, hashes


@pytest.mark.asyncio
async def test_current_branch_and_resolve(repo):
    path, hashes = repo
    backend = GitBackend(path)

    assert await backend.current_branch() == "refs/heads/main"
    assert await backend.resolve_ref("refs/heads/main") == hashes["H"]
    assert await backend.resolve_ref("side") == hashes["C"]


@pytest.mark.asyncio
async def test_resolve_missing_ref(repo):
    path, _ = repo
    backend = GitBackend(path)

    with pytest.raises(RefNotFound, match="no-such-branch"):
        await backend.resolve_ref("no-such-branch")


@pytest.mark.asyncio
async def test_list_revisions_newest_first(repo):
    path, hashes = repo
    backend = GitBackend(path)

    assert await backend.list_revisions(["side"]) == [hashes["C"], hashes["B"], hashes["A"]]
    assert await backend.list_revisions([f"{hashes['A']}..side"]) == [hashes["C"], hashes["B"]]

    with pytest.raises(InvalidRange):
        await backend.list_revisions(["main..no-such-branch"])


@pytest.mark.asyncio
async def test_read_commit(repo):
    path, hashes = repo
    backend = GitBackend(path)

    commit = parse_commit(hashes["B"], await backend.read_commit(hashes["B"]))

    assert commit.parents == (hashes["A"],)
    assert commit.tree == git(path, "rev-parse", f"{hashes['B']}^{{tree}}")
    assert commit.message == "Add b"
    assert commit.author.startswith("Test Author <author@example.com>")

    with pytest.raises(ObjectNotFound):
        await backend.read_commit("0" * 40)


@pytest.mark.asyncio
async def test_replacement_commit_round_trip(repo):
    path, hashes = repo
    backend = GitBackend(path)
    original = parse_commit(hashes["A"], await backend.read_commit(hashes["A"]))

    new_hash = await backend.create_replacement_commit(original, [hashes["H"]])
    assert git(path, "replace", "-l") == hashes["A"]

    await backend.discard_replacement_record(hashes["A"])
    assert git(path, "replace", "-l") == ""

    replacement = parse_commit(new_hash, await backend.read_commit(new_hash))
    assert replacement.parents == (hashes["H"],)
    assert replacement.tree == original.tree
    assert replacement.message == original.message


@pytest.mark.asyncio
async def test_update_ref_compare_and_swap(repo):
    path, hashes = repo
    backend = GitBackend(path)

    with pytest.raises(RefConflict):
        await backend.update_ref("refs/heads/main", hashes["C"], expected_old=hashes["A"])
    assert git(path, "rev-parse", "main") == hashes["H"]

    await backend.update_ref("refs/heads/main", hashes["C"], expected_old=hashes["H"])
    assert git(path, "rev-parse", "main") == hashes["C"]


@pytest.mark.asyncio
async def test_graft_orphan_branch(repo):
    """main: H; side: A <- B <- C with tree(A) == tree(H)."""
    path, hashes = repo
    rewriter = HistoryRewriter(GitBackend(path))

    result = await rewriter.graft(["side"])

    assert git(path, "rev-parse", "main") == result.new_tip
    history = git(path, "rev-list", "main").splitlines()
    assert len(history) == 4
    assert history[-1] == hashes["H"]
    assert git(path, "log", "--format=%s", "main").splitlines() == [
        "Add c",
        "Add b",
        "Import snapshot",
        "Live tip",
    ]
    assert git(path, "rev-parse", "main^{tree}") == git(path, "rev-parse", "side^{tree}")

    # Working tree follows the new tip, replace refs are gone
    assert (path / "c.txt").read_text() == "three\n"
    assert git(path, "status", "--porcelain") == ""
    assert git(path, "replace", "-l") == ""


@pytest.mark.asyncio
async def test_graft_tree_mismatch(repo):
    path, hashes = repo
    (path / "a.txt").write_text("changed\n")
    git(path, "commit", "-q", "-am", "Diverge")
    tip = git(path, "rev-parse", "HEAD")

    rewriter = HistoryRewriter(GitBackend(path))
    with pytest.raises(TreeMismatch):
        await rewriter.graft(["side"])

    assert git(path, "rev-parse", "main") == tip


@pytest.mark.asyncio
async def test_remove_parent(repo):
    path, hashes = repo
    # Merge the orphan history into main, then cut it out again
    git(path, "merge", "-q", "--allow-unrelated-histories", "-m", "Merge side", "side")
    (path / "d.txt").write_text("four\n")
    git(path, "add", "d.txt")
    git(path, "commit", "-q", "-m", "Add d")

    rewriter = HistoryRewriter(GitBackend(path))
    await rewriter.remove_parents(hashes["H"], [hashes["C"]])

    assert git(path, "log", "--format=%s", "main").splitlines() == [
        "Add d",
        "Merge side",
        "Live tip",
    ]
    assert git(path, "rev-parse", "main~1^@").splitlines() == [hashes["H"]]
    assert git(path, "replace", "-l") == ""
