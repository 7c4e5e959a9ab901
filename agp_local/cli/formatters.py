"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from agp_local.models.config import AppConfig
from agp_local.models.draft import Draft
from agp_local.models.game import InstallationRecord, PackageDescriptor
from agp_local.utils.formatting import format_size, format_timestamp, preview_text


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your config.ini.",
            "• Delete the file to have a default configuration written again.",
        ],
        "FetchError": [
            "• Check that the server URL in your configuration is reachable.",
            "• The package may have been removed from the server.",
        ],
        "ExtractionError": [
            "• The downloaded package may be corrupt. Try installing it again.",
            "• Make sure the games directory is writable and has free space.",
        ],
        "LaunchError": [
            "• Reinstall the game to restore its files.",
            "• Check that the entrypoint is executable on this platform.",
        ],
        "StoreWriteError": [
            "• Make sure the data directory is writable and has free space.",
        ],
        "ClientConnectorError": [
            "• A network connection issue occurred.",
            "• The server might be temporarily unavailable.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -v for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_drafts_table(drafts: list[Draft]) -> None:
    """Prints drafts, most recently modified first."""
    console = Console()
    if not drafts:
        console.print("[dim]No drafts saved yet.[/dim]")
        return

    table = Table(title="Drafts", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Language")
    table.add_column("Modified")
    table.add_column("Published", justify="center")
    table.add_column("Preview", style="dim")
    for draft in drafts:
        table.add_row(
            draft.id,
            draft.name,
            draft.language,
            format_timestamp(draft.last_modified),
            "[green]✓[/green]" if draft.is_published else "",
            preview_text(draft.content),
        )
    console.print(table)


def print_draft(draft: Draft) -> None:
    """Prints a single draft with its full content."""
    console = Console()
    header = Table.grid(padding=(0, 2))
    header.add_column(style="cyan")
    header.add_column()
    header.add_row("ID", draft.id)
    header.add_row("Language", draft.language)
    header.add_row("Created", format_timestamp(draft.created_at))
    header.add_row("Modified", format_timestamp(draft.last_modified))
    header.add_row("Published", "yes" if draft.is_published else "no")
    console.print(Panel(header, title=f"[bold]{draft.name}[/bold]", expand=False))
    console.print(draft.content or "[dim](empty)[/dim]", markup=False, highlight=False)


def print_packages_table(
    packages: list[PackageDescriptor], installed_ids: set[int] | None = None
) -> None:
    """Prints the remote package catalog."""
    console = Console()
    if not packages:
        console.print("[dim]No games are available on the server.[/dim]")
        return

    installed_ids = installed_ids or set()
    table = Table(title="Available Games", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Version")
    table.add_column("Author")
    table.add_column("Size", justify="right")
    table.add_column("Installed", justify="center")
    for package in packages:
        table.add_row(
            str(package.id),
            package.name,
            package.version,
            package.author,
            format_size(package.size_bytes),
            "[green]✓[/green]" if package.id in installed_ids else "",
        )
    console.print(table)


def print_installations_table(records: list[InstallationRecord]) -> None:
    """Prints locally installed games."""
    console = Console()
    if not records:
        console.print("[dim]No games installed.[/dim]")
        return

    table = Table(title="Installed Games", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Version")
    table.add_column("Installed")
    table.add_column("Entrypoint", style="dim")
    for record in sorted(records, key=lambda r: r.package_id):
        entrypoint = (
            Path(record.entrypoint_path).name
            if record.has_entrypoint
            else "[yellow]not found[/yellow]"
        )
        table.add_row(
            str(record.package_id),
            record.name,
            record.version,
            format_timestamp(record.installed_at),
            entrypoint,
        )
    console.print(table)


def print_config(config_path: Path, config: AppConfig) -> None:
    """Prints the current configuration in a formatted table."""
    console = Console()
    table = Table(
        title="Current Configuration",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    values: dict[str, Any] = config.model_dump()
    for key in sorted(values):
        value = values[key]
        if key == "api_token" and value:
            display_value = "[dim]********[/dim]"
        elif isinstance(value, list):
            display_value = ", ".join(map(str, value))
        else:
            display_value = str(value)
        table.add_row(key, display_value)

    console.print(table)
    console.print(f"[dim]Config file: {config_path}[/dim]")
