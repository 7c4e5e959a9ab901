"""
Renders installation progress with a Rich progress bar.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

STEP_LABELS = {
    10: "Downloading",
    50: "Extracting",
    70: "Locating entrypoint",
    90: "Finishing",
    100: "Installed",
}


class InstallProgress:
    """
    A context manager whose ``update`` method is used as the installer's
    progress observer.
    """

    def __init__(self, console: Console, title: str):
        self.console = console
        self.title = title
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            TimeElapsedColumn(),
            console=console,
            transient=False,
        )
        self._task_id: TaskID | None = None

    def __enter__(self) -> "InstallProgress":
        self.progress.start()
        self._task_id = self.progress.add_task(
            f"[bold]{self.title}[/bold] [dim]starting[/dim]", total=100
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.progress.stop()

    def update(self, percent: int) -> None:
        """Moves the bar to ``percent`` and shows the step that is now running."""
        if self._task_id is None:
            return
        label = STEP_LABELS.get(percent, "Working")
        self.progress.update(
            self._task_id,
            completed=percent,
            description=f"[bold]{self.title}[/bold] [dim]{label}[/dim]",
        )
