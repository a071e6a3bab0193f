"""CLI commands for regraft."""

import asyncio
import sys

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from regraft import __version__, __logo__
from regraft.history.errors import RegraftError, UnresolvedParent, UnrewrittenTip
from regraft.history.hash import short_hash

app = typer.Typer(
    name="regraft",
    help=f"{__logo__} regraft - Transplant commit history onto a live branch",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} regraft v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
    repo: str = typer.Option(None, "--repo", "-C", help="Run as if started in this repository"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug output"),
):
    """regraft - Transplant commit history onto a live branch."""
    ctx.obj = {"repo": repo, "verbose": verbose}


def _setup(ctx: typer.Context, no_checkout: bool = False):
    """Load config, configure logging and create the git backend."""
    from regraft.backend.git import GitBackend
    from regraft.config.loader import load_config

    options = ctx.obj or {}
    config = load_config()
    if options.get("repo"):
        config.git.repo_dir = options["repo"]
    if no_checkout:
        config.finalize.checkout = False

    logger.remove()
    level = "DEBUG" if options.get("verbose") else config.log_level
    logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> {message}")

    backend = GitBackend(
        repo_dir=config.repo_path,
        git_binary=config.git.binary,
        timeout=config.git.timeout,
    )
    return config, backend


def _report_error(e: RegraftError) -> None:
    """Print a fatal error with its stage and diagnostic context."""
    logger.error(f"[{e.stage}] {e}")
    console.print(f"[red]Error ({e.stage}):[/red] {e}")

    if isinstance(e, (UnresolvedParent, UnrewrittenTip)):
        console.print(f"\n[bold]Offending commit[/bold]\n{e.commit.to_raw()}")
        table = Table(title="Rewrite map")
        table.add_column("Original", style="cyan")
        table.add_column("Replacement")
        for old, new in e.rewrite_map.items():
            table.add_row(old, new)
        console.print(table)


def _print_result(result) -> None:
    """Print the commits rewritten by a pass."""
    if result.rewritten:
        table = Table(title="Rewritten Commits")
        table.add_column("Original", style="cyan")
        table.add_column("Replacement", style="green")
        for old, new in result.rewritten:
            table.add_row(short_hash(old), short_hash(new))
        console.print(table)

    if result.skipped:
        console.print(f"[dim]Unchanged: {', '.join(short_hash(h) for h in result.skipped)}[/dim]")

    console.print(f"[green]✓[/green] Branch now at {result.new_tip}")


# ============================================================================
# Rewriting Commands
# ============================================================================


@app.command()
def graft(
    ctx: typer.Context,
    range_args: list[str] = typer.Argument(..., help="Revision range of the segment to graft (e.g. 'base..orphan')"),
    no_checkout: bool = typer.Option(False, "--no-checkout", help="Move the branch without resetting the working tree"),
):
    """Graft a segment of history onto the current branch tip."""
    from regraft.history.rewriter import HistoryRewriter

    config, backend = _setup(ctx, no_checkout)
    rewriter = HistoryRewriter(backend, config)

    try:
        result = asyncio.run(rewriter.graft(range_args))
    except RegraftError as e:
        _report_error(e)
        raise typer.Exit(1)

    _print_result(result)


@app.command("remove-parent")
def remove_parent(
    ctx: typer.Context,
    start: str = typer.Argument(..., help="Starting commit (exclusive)"),
    removed: list[str] = typer.Argument(..., help="Commit IDs to remove from the ancestry"),
    no_checkout: bool = typer.Option(False, "--no-checkout", help="Move the branch without resetting the working tree"),
):
    """Remove commits from the ancestry between START and the current tip."""
    from regraft.history.rewriter import HistoryRewriter

    config, backend = _setup(ctx, no_checkout)
    rewriter = HistoryRewriter(backend, config)

    try:
        result = asyncio.run(rewriter.remove_parents(start, removed))
    except RegraftError as e:
        _report_error(e)
        raise typer.Exit(1)

    _print_result(result)


# ============================================================================
# Inspection Commands
# ============================================================================


@app.command("log")
def log_commits(
    ctx: typer.Context,
    range_args: list[str] = typer.Argument(..., help="Revision range to list"),
):
    """List the commits of a range in replay (oldest-first) order."""
    from regraft.history.loader import CommitLoader

    config, backend = _setup(ctx)
    loader = CommitLoader(backend, max_concurrency=config.loader.max_concurrency)

    try:
        commits = asyncio.run(loader.load_sequence(range_args))
    except RegraftError as e:
        _report_error(e)
        raise typer.Exit(1)

    if not commits:
        console.print("No commits in range.")
        return

    table = Table(title=f"Commits in {' '.join(range_args)}")
    table.add_column("Commit", style="cyan")
    table.add_column("Tree")
    table.add_column("Parents")
    table.add_column("Subject")

    for commit in commits:
        parents = ", ".join(short_hash(p) for p in commit.parents) or "[dim]root[/dim]"
        table.add_row(short_hash(commit.hash), short_hash(commit.tree), parents, commit.subject)

    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    rev: str = typer.Argument("HEAD", help="Commit to show"),
):
    """Show a parsed commit object."""
    from regraft.history.loader import CommitLoader

    _, backend = _setup(ctx)
    loader = CommitLoader(backend)

    async def load():
        return await loader.load_commit(await backend.resolve_ref(rev))

    try:
        commit = asyncio.run(load())
    except RegraftError as e:
        _report_error(e)
        raise typer.Exit(1)

    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()

    table.add_row("Commit:", commit.hash)
    table.add_row("Tree:", commit.tree)
    for parent in commit.parents:
        table.add_row("Parent:", parent)
    table.add_row("Author:", commit.author)
    table.add_row("Committer:", commit.committer)

    console.print(table)
    console.print(f"\n{commit.message}")


# ============================================================================
# Config Commands
# ============================================================================

config_app = typer.Typer(help="Manage regraft configuration")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show():
    """Show the effective configuration."""
    from regraft.config.loader import get_config_path, load_config

    config_path = get_config_path()
    config = load_config()

    source = str(config_path) if config_path.exists() else "defaults"
    console.print(f"[bold]Configuration[/bold] [dim]({source})[/dim]")
    console.print_json(config.model_dump_json())


@config_app.command("init")
def config_init():
    """Write the default configuration file."""
    from regraft.config.loader import get_config_path, save_config
    from regraft.config.schema import Config

    config_path = get_config_path()

    if config_path.exists():
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config())
    console.print(f"[green]✓[/green] Created config at {config_path}")


if __name__ == "__main__":
    app()
