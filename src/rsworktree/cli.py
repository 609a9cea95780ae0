"""CLI entry point for rsworktree."""

import json
import logging
import subprocess
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from rsworktree.config import Config, load_config
from rsworktree.core.editor import (
    EditorConfigurationError,
    make_editor_command_matcher,
    missing_preference_message,
    resolve_editor_preference,
)
from rsworktree.core.hooks import HookRunner, HookSpawnError, is_executable
from rsworktree.core.launcher import DirectLauncher
from rsworktree.core.placement import SessionPlacementEngine
from rsworktree.core.repo import NotAGitRepositoryError, RepoContext
from rsworktree.core.resolver import WorktreeResolver
from rsworktree.core.tmux_manager import TmuxError, TmuxTopology, is_inside_tmux
from rsworktree.core.worktree import WorktreeError, WorktreeManager, branch_of
from rsworktree.models.editor import EditorLaunchStatus
from rsworktree.models.hooks import HookContext, HookName
from rsworktree.models.worktree import ResolvedWorktree

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=verbose)],
        force=True,
    )
    logging.getLogger("git").setLevel(logging.WARNING)
    logging.getLogger("libtmux").setLevel(logging.WARNING)


def get_repo() -> RepoContext:
    """
    Get the RepoContext for the current directory.

    Raises:
        click.ClickException: If not in a git repository.
    """
    try:
        return RepoContext()
    except NotAGitRepositoryError as e:
        raise click.ClickException(str(e)) from e


def get_config(ctx: click.Context, repo: RepoContext) -> Config:
    return load_config(repo.root, ctx.obj.get("config_path"))


def resolve_worktree(
    repo: RepoContext,
    name: Optional[str] = None,
    path: Optional[Path] = None,
) -> ResolvedWorktree:
    try:
        return WorktreeResolver.for_repo(repo).resolve(name=name, path=path)
    except WorktreeError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(package_name="rsworktree")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Path to a config file (default: .rsworktree/config.toml).",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: bool) -> None:
    """rsworktree - manage git worktrees and open them in your editor.

    Worktrees live under .rsworktree/ in the repository. Inside tmux,
    `open` reuses the worktree's window and editor pane.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command("open")
@click.argument("name", required=False)
@click.option(
    "-p",
    "--path",
    type=click.Path(path_type=Path),
    help="Open the worktree at this path instead of looking it up by name.",
)
@click.option(
    "--background",
    is_flag=True,
    help="Outside tmux, start the editor detached instead of waiting for it.",
)
@click.pass_context
def open_worktree(
    ctx: click.Context,
    name: Optional[str],
    path: Optional[Path],
    background: bool,
) -> None:
    """Open a worktree in the configured editor.

    NAME can be the full worktree name (feature/foo), its last segment
    (foo), or any trailing part of it starting after a '/'.

    Inside tmux the editor goes to the worktree's window `<project>/<name>`,
    reusing an editor pane there when one is running.

    Example:
        rsworktree open feature/login
        rsworktree open login
        rsworktree open --path ../.rsworktree/feature/login
    """
    if name and path:
        raise click.UsageError("Pass either NAME or --path, not both.")
    if not name and not path:
        raise click.UsageError("worktree name or --path must be provided")

    repo = get_repo()
    config = get_config(ctx, repo)
    resolved = resolve_worktree(repo, name=name, path=path)

    if is_inside_tmux():
        _open_in_tmux(repo, config, resolved)
    else:
        _open_direct(config, resolved, background)


def _open_in_tmux(repo: RepoContext, config: Config, resolved: ResolvedWorktree) -> None:
    resolution = resolve_editor_preference(config)
    if not resolution.is_found:
        console.print(f"[yellow]{escape(missing_preference_message(resolution.missing_reason))}[/yellow]")
        return

    engine = SessionPlacementEngine(
        topology=TmuxTopology(),
        project_name=repo.project_name,
        matcher=make_editor_command_matcher(config.tmux.extra_editor_commands),
        split_direction=config.tmux.split_direction,
    )

    try:
        result = engine.place(resolved, resolution.preference)
    except TmuxError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"[green]{escape(result.message)}[/green]")


def _open_direct(config: Config, resolved: ResolvedWorktree, background: bool) -> None:
    launcher = DirectLauncher(config)

    try:
        outcome = launcher.launch(resolved.name, resolved.path, background=background)
    except EditorConfigurationError as e:
        raise click.ClickException(str(e)) from e

    if outcome.is_error:
        raise click.ClickException(outcome.message)

    if outcome.status == EditorLaunchStatus.PREFERENCE_MISSING:
        console.print(f"[yellow]{escape(outcome.message)}[/yellow]")
        return

    console.print(f"Opened [bold cyan]{resolved.name}[/bold cyan] at {resolved.path}.")
    console.print(escape(outcome.message))


@main.command("create")
@click.argument("name")
@click.option("-b", "--branch", help="Branch to check out (default: NAME).")
@click.option("--base", "base_branch", help="Start point for a new branch (default: current branch).")
@click.option(
    "--hooks/--no-hooks",
    default=True,
    help="Run the post-create hook (default: enabled).",
)
@click.pass_context
def create_worktree(
    ctx: click.Context,
    name: str,
    branch: Optional[str],
    base_branch: Optional[str],
    hooks: bool,
) -> None:
    """Create a worktree NAME under .rsworktree/.

    If the branch doesn't exist, it is created from --base (or the
    current branch). The post-create hook in .rsworktree/hooks/ runs
    afterwards with RSWORKTREE_* variables describing the worktree.

    Example:
        rsworktree create feature/login
        rsworktree create hotfix --branch fix/crash --base main
    """
    repo = get_repo()
    config = get_config(ctx, repo)
    manager = WorktreeManager(repo)

    try:
        with console.status(f"[bold blue]Creating worktree '{name}'..."):
            worktree = manager.create(name, branch=branch, base=base_branch)
    except WorktreeError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"[bold green]Worktree created:[/bold green] {worktree.name}")
    console.print(f"[bold]Path:[/bold] {worktree.path}")

    if not (hooks and config.hooks.enabled):
        return

    context = HookContext(
        worktree_name=worktree.name,
        worktree_path=worktree.path,
        branch=branch or name,
        base_branch=base_branch,
        base_path=repo.root,
    )

    runner = HookRunner(repo.config_dir)
    hook_path = runner.hook_path(HookName.POST_CREATE)
    if hook_path.exists() and is_executable(hook_path):
        console.print(f"[cyan]Running {HookName.POST_CREATE.value} hook...[/cyan]")

    try:
        result = runner.run_hook(HookName.POST_CREATE, context)
    except HookSpawnError as e:
        raise click.ClickException(str(e)) from e

    if result.succeeded:
        console.print(f"[cyan]{result.hook} hook finished[/cyan]")


@main.command("ls")
def list_worktrees() -> None:
    """List worktrees under .rsworktree/."""
    repo = get_repo()
    entries = WorktreeManager(repo).list_entries()

    if not entries:
        console.print("[yellow]No worktrees found.[/yellow]")
        console.print("[dim]Create one with: rsworktree create <name>[/dim]")
        return

    table = Table(title=f"Worktrees of {repo.project_name}", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold")
    table.add_column("Branch", style="green")
    table.add_column("Path")

    for entry in entries:
        table.add_row(entry.name, entry.branch, entry.short_path)

    console.print(table)


@main.command("rm")
@click.argument("name")
@click.option("-f", "--force", is_flag=True, help="Remove even with uncommitted changes.")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation prompt.")
def remove_worktree(name: str, force: bool, yes: bool) -> None:
    """Remove the worktree NAME."""
    repo = get_repo()
    worktree = resolve_worktree(repo, name=name)

    if not yes and not click.confirm(f"Remove worktree '{worktree.name}' at {worktree.path}?"):
        console.print("[yellow]Aborted.[/yellow]")
        return

    try:
        removed = WorktreeManager(repo).remove(worktree, force=force)
    except WorktreeError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"[bold green]Worktree removed:[/bold green] {removed}")


def _run_provider(
    program: str,
    args: list[str],
    cwd: Path,
    capture: bool = False,
) -> subprocess.CompletedProcess:
    logger.debug(f"{program} {' '.join(args)}")
    try:
        return subprocess.run(
            [program, *args],
            cwd=cwd,
            capture_output=capture,
            text=True,
        )
    except FileNotFoundError as e:
        raise click.ClickException(f"`{program}` is not installed or not on PATH") from e


@main.command("pr", context_settings={"ignore_unknown_options": True})
@click.argument("name")
@click.option("--draft", is_flag=True, help="Open as a draft.")
@click.option("--fill", is_flag=True, help="Fill title and body from commits.")
@click.option("--web", is_flag=True, help="Continue in the browser.")
@click.option("-r", "--reviewer", "reviewers", multiple=True, help="Request a reviewer (repeatable).")
@click.argument("extra_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def create_pull_request(
    ctx: click.Context,
    name: str,
    draft: bool,
    fill: bool,
    web: bool,
    reviewers: tuple[str, ...],
    extra_args: tuple[str, ...],
) -> None:
    """Open a pull/merge request for the branch of worktree NAME.

    Extra arguments are passed to gh/glab unchanged.
    """
    repo = get_repo()
    config = get_config(ctx, repo)
    worktree = resolve_worktree(repo, name=name)
    provider = config.provider
    branch = branch_of(worktree.path)

    args = provider.build_create_args(branch, draft, fill, web, reviewers, extra_args)
    result = _run_provider(provider.cli_program, args, worktree.path)

    if result.returncode != 0:
        raise click.ClickException(
            f"{provider.cli_program} exited with code {result.returncode} "
            f"while creating the {provider.merge_request_term}"
        )


@main.command("merge")
@click.argument("name")
@click.option("--keep-branch", is_flag=True, help="Keep the source branch after merging.")
@click.pass_context
def merge_pull_request(ctx: click.Context, name: str, keep_branch: bool) -> None:
    """Merge the open pull/merge request for the branch of worktree NAME."""
    repo = get_repo()
    config = get_config(ctx, repo)
    worktree = resolve_worktree(repo, name=name)
    provider = config.provider
    branch = branch_of(worktree.path)

    listing = _run_provider(
        provider.cli_program, provider.build_list_args(branch), worktree.path, capture=True
    )
    if listing.returncode != 0:
        raise click.ClickException(listing.stderr.strip() or f"{provider.cli_program} list failed")

    number = _first_request_number(listing.stdout)
    if number is None:
        raise click.ClickException(
            f"No open {provider.merge_request_short} found for branch `{branch}`"
        )

    delete_branch = not keep_branch
    merged = _run_provider(
        provider.cli_program,
        provider.build_merge_args(number, delete_branch),
        worktree.path,
        capture=True,
    )

    if merged.returncode != 0:
        if delete_branch and provider.is_branch_delete_failure(merged.stderr):
            console.print(
                f"[yellow]Warning: merged {provider.merge_request_short} #{number}, "
                f"but the branch could not be deleted[/yellow]"
            )
            return
        raise click.ClickException(merged.stderr.strip() or f"failed to merge #{number}")

    console.print(
        f"[bold green]Merged {provider.merge_request_short} #{number}[/bold green] ({provider})"
    )


def _first_request_number(output: str) -> Optional[int]:
    """Number of the first request in gh/glab JSON list output."""
    try:
        entries = json.loads(output or "[]")
    except json.JSONDecodeError:
        return None
    for entry in entries if isinstance(entries, list) else []:
        number = entry.get("number") or entry.get("iid")
        if number is not None:
            return int(number)
    return None


if __name__ == "__main__":
    main()
