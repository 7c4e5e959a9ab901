"""
Defines the command-line interface for the application using Typer.

The callback is the composition root: it loads the configuration once and
hands it to every repository, client and service the commands construct.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from agp_local import __version__
from agp_local.api.client import RemoteServiceClient
from agp_local.core import DraftPublisher, Installer, Launcher
from agp_local.exceptions import AgpLocalError
from agp_local.models.config import AppConfig
from agp_local.models.draft import DEFAULT_LANGUAGE, Draft
from agp_local.storage.config_manager import ConfigManager
from agp_local.storage.drafts import DraftRepository
from agp_local.storage.installations import InstallationRepository
from agp_local.utils.formatting import format_duration
from agp_local.utils.path import default_app_data_dir

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_draft,
    print_drafts_table,
    print_installations_table,
    print_packages_table,
)
from .progress_manager import InstallProgress

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("agp_local")

app = typer.Typer(
    name="agp-local",
    help=(
        "Manage local code drafts and installed games for AGP Studios. Use"
        " 'agp-local <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)
drafts_app = typer.Typer(help="Create, edit and publish code drafts.")
games_app = typer.Typer(help="Browse, install and launch games.")
app.add_typer(drafts_app, name="drafts")
app.add_typer(games_app, name="games")


@dataclass
class AppContext:
    """Objects shared by all commands of one invocation."""

    config: AppConfig
    config_path: Path

    def drafts(self) -> DraftRepository:
        return DraftRepository(self.config.drafts_root())

    def installations(self) -> InstallationRepository:
        return InstallationRepository(self.config.games_root())


def _context(ctx: typer.Context) -> AppContext:
    obj = ctx.find_root().obj
    if not isinstance(obj, AppContext):
        console.print("[red]✗ Configuration was not loaded.[/red]")
        raise typer.Exit(code=1)
    return obj


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-v for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    data_dir: Path | None = typer.Option(
        None,
        "--data-dir",
        help="Directory holding config.ini, drafts and games.",
        envvar="AGP_LOCAL_HOME",
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """AGP Studios local content manager"""
    if version:
        console.print(f"[bold]agp-local[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    logging.getLogger("agp_local").setLevel("DEBUG" if verbose >= 1 else "INFO")

    config_manager = ConfigManager(data_dir or default_app_data_dir())
    try:
        config = config_manager.load_config()
    except AgpLocalError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    ctx.obj = AppContext(config=config, config_path=config_manager.config_file_path)

    if show_config:
        print_config(config_manager.config_file_path, config)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def _read_content(file: Path | None) -> str | None:
    if file is None:
        return None
    try:
        return file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]✗ Could not read '{escape(str(file))}': {e}[/red]")
        raise typer.Exit(code=1) from e


def _load_draft(repo: DraftRepository, draft_id: str) -> Draft:
    draft = repo.load(draft_id)
    if draft is None:
        console.print(f"[red]✗ Draft '{escape(draft_id)}' not found.[/red]")
        raise typer.Exit(code=1)
    return draft


@drafts_app.command(name="list")
def drafts_list(ctx: typer.Context):
    """List saved drafts, most recently modified first."""
    print_drafts_table(_context(ctx).drafts().list_all_recent_first())


@drafts_app.command(name="new")
def drafts_new(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Draft name (defaults to a timestamp)."),
    file: Path | None = typer.Option(
        None, "--file", "-f", help="Read the draft content from a file."
    ),
    language: str = typer.Option(DEFAULT_LANGUAGE, "--language", "-l"),
):
    """Create and save a new draft."""
    repo = _context(ctx).drafts()
    draft = Draft.new(name=name, content=_read_content(file) or "", language=language)
    if not repo.save(draft):
        console.print("[red]✗ Failed to save the draft.[/red]")
        raise typer.Exit(code=1)
    console.print(
        f"[green]✓ Draft '{escape(draft.name)}' saved.[/green] [dim]{draft.id}[/dim]"
    )


@drafts_app.command(name="show")
def drafts_show(ctx: typer.Context, draft_id: str = typer.Argument(..., metavar="ID")):
    """Show a draft and its content."""
    print_draft(_load_draft(_context(ctx).drafts(), draft_id))


@drafts_app.command(name="edit")
def drafts_edit(
    ctx: typer.Context,
    draft_id: str = typer.Argument(..., metavar="ID"),
    name: str | None = typer.Option(None, "--name", "-n", help="Rename the draft."),
    file: Path | None = typer.Option(
        None, "--file", "-f", help="Replace the content with a file's content."
    ),
    language: str | None = typer.Option(None, "--language", "-l"),
):
    """Update a draft's name, content or language."""
    repo = _context(ctx).drafts()
    draft = _load_draft(repo, draft_id)
    content = _read_content(file)
    if name is not None:
        draft.name = name
    if content is not None:
        draft.content = content
    if language is not None:
        draft.language = language
    if not repo.save(draft):
        console.print("[red]✗ Failed to save the draft.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Draft '{escape(draft.name)}' saved.[/green]")


@drafts_app.command(name="delete")
def drafts_delete(
    ctx: typer.Context,
    draft_id: str = typer.Argument(..., metavar="ID"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Bypass the confirmation prompt."
    ),
):
    """Delete a draft."""
    repo = _context(ctx).drafts()
    if not force and not typer.confirm(f"Delete draft '{draft_id}'?"):
        console.print("[yellow]Operation cancelled.[/yellow]")
        raise typer.Abort()
    if repo.delete(draft_id):
        console.print("[green]✓ Draft deleted.[/green]")
    else:
        console.print(f"[yellow]Draft '{escape(draft_id)}' does not exist.[/yellow]")
        raise typer.Exit(code=1)


@drafts_app.command(name="publish")
def drafts_publish(ctx: typer.Context, draft_id: str = typer.Argument(..., metavar="ID")):
    """Publish a draft to the server."""
    app_ctx = _context(ctx)
    repo = app_ctx.drafts()
    draft = _load_draft(repo, draft_id)

    async def _publish_async() -> bool:
        async with RemoteServiceClient(app_ctx.config) as client:
            return await DraftPublisher(client, repo).publish(draft)

    console.print(f"[cyan]Publishing '{escape(draft.name)}'...[/cyan]")
    if not asyncio.run(_publish_async()):
        console.print("[red]✗ Publish failed.[/red]")
        raise typer.Exit(code=1)
    console.print("[green]✓ Published successfully.[/green]")


@games_app.command(name="available")
def games_available(ctx: typer.Context):
    """List games published on the server."""
    app_ctx = _context(ctx)

    async def _list_async():
        async with RemoteServiceClient(app_ctx.config) as client:
            return await client.list_packages()

    packages = asyncio.run(_list_async())
    installed_ids = {r.package_id for r in app_ctx.installations().list_all()}
    print_packages_table(packages, installed_ids)


@games_app.command(name="install")
def games_install(
    ctx: typer.Context, package_id: int = typer.Argument(..., metavar="ID")
):
    """Download and install a game from the server."""
    app_ctx = _context(ctx)
    installations = app_ctx.installations()

    async def _install_async():
        async with RemoteServiceClient(app_ctx.config) as client:
            packages = await client.list_packages()
            descriptor = next((p for p in packages if p.id == package_id), None)
            if descriptor is None:
                return None
            installer = Installer(
                client, installations, app_ctx.config.entrypoint_patterns
            )
            with InstallProgress(console, descriptor.name) as progress:
                return await installer.run(descriptor, progress.update)

    start_time = time.monotonic()
    outcome = asyncio.run(_install_async())
    if outcome is None:
        console.print(f"[red]✗ No game with ID {package_id} on the server.[/red]")
        raise typer.Exit(code=1)
    if not outcome.success:
        console.print(f"[red]✗ Installation failed: {escape(outcome.message)}[/red]")
        raise typer.Exit(code=1)
    console.print(
        f"[green]✓ Installed in {format_duration(time.monotonic() - start_time)}."
        "[/green]"
    )
    if outcome.record and not outcome.record.has_entrypoint:
        console.print(
            "[yellow]⚠️  No executable was found; the game cannot be launched.[/yellow]"
        )


@games_app.command(name="installed")
def games_installed(ctx: typer.Context):
    """List installed games."""
    print_installations_table(_context(ctx).installations().list_all())


@games_app.command(name="launch")
def games_launch(
    ctx: typer.Context, package_id: int = typer.Argument(..., metavar="ID")
):
    """Launch an installed game."""
    record = _context(ctx).installations().load(package_id)
    if record is None:
        console.print(f"[red]✗ Game {package_id} is not installed.[/red]")
        raise typer.Exit(code=1)
    if not Launcher().launch(record):
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Started {escape(record.name)}.[/green]")
