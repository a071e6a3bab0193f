"""Tests for the command-line interface."""

import shutil
import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from regraft import __version__
from regraft.cli.commands import app
from tests.fixtures.history_data import GIT_ENV, git, make_graft_repo

runner = CliRunner()

needs_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture(autouse=True)
def restore_logger():
    """Point loguru back at the real stderr after each CLI run."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def repo(tmp_path, monkeypatch):
    """Create a graft repository with an isolated home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key, value in GIT_ENV.items():
        monkeypatch.setenv(key, value)

    path = tmp_path / "repo"
    hashes = make_graft_repo(path)
    return path, hashes


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_config_show(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))

    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert "max_concurrency" in result.output
    assert not (tmp_path / ".regraft").exists()


def test_config_init(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))

    result = runner.invoke(app, ["config", "init"])

    assert result.exit_code == 0
    assert (tmp_path / ".regraft" / "config.json").exists()


@needs_git
def test_log(repo):
    path, _ = repo

    result = runner.invoke(app, ["-C", str(path), "log", "side"])

    assert result.exit_code == 0
    assert result.output.index("Import snapshot") < result.output.index("Add c")


@needs_git
def test_show(repo):
    path, hashes = repo

    result = runner.invoke(app, ["-C", str(path), "show", hashes["B"]])

    assert result.exit_code == 0
    assert hashes["A"] in result.output
    assert "Add b" in result.output


@needs_git
def test_graft(repo):
    path, hashes = repo

    result = runner.invoke(app, ["-C", str(path), "graft", "side"])

    assert result.exit_code == 0, result.output
    tip = git(path, "rev-parse", "main")
    assert tip in result.output
    assert git(path, "rev-parse", "main~3") == hashes["H"]


@needs_git
def test_graft_no_checkout(repo):
    path, _ = repo

    result = runner.invoke(app, ["-C", str(path), "graft", "--no-checkout", "side"])

    assert result.exit_code == 0, result.output
    assert not (path / "c.txt").exists()


@needs_git
def test_graft_tree_mismatch_exits_nonzero(repo):
    path, hashes = repo

    result = runner.invoke(app, ["-C", str(path), "graft", f"{hashes['A']}..side"])

    assert result.exit_code == 1
    assert "graft" in result.output
    assert "Tree hash mismatch" in result.output
    assert git(path, "rev-parse", "main") == hashes["H"]


@needs_git
def test_graft_bad_range_exits_nonzero(repo):
    path, hashes = repo

    result = runner.invoke(app, ["-C", str(path), "graft", "no-such-branch"])

    assert result.exit_code == 1
    assert "backend" in result.output
    assert git(path, "rev-parse", "main") == hashes["H"]


def test_remove_parent_requires_removed_commits():
    result = runner.invoke(app, ["remove-parent", "abc123"])

    assert result.exit_code != 0
