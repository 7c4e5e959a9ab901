"""
Starts installed packages as independent processes.
"""

import logging
import os
import subprocess
from pathlib import Path

from agp_local.exceptions import LaunchError
from agp_local.models.game import InstallationRecord

log = logging.getLogger(__name__)


class Launcher:
    """Validates an installation record and starts its entrypoint."""

    def start(self, record: InstallationRecord) -> subprocess.Popen:
        """
        Starts the record's entrypoint with its own directory as the working
        directory. The process is detached; it is neither awaited nor captured.

        Raises:
            LaunchError: If the entrypoint is missing or the process cannot start.
        """
        if not record.entrypoint_path:
            raise LaunchError(f"'{record.name}' has no known entrypoint.")

        entrypoint = Path(record.entrypoint_path)
        if not entrypoint.is_file():
            raise LaunchError(f"Entrypoint not found: '{entrypoint}'.")

        kwargs = {}
        if os.name == "nt":
            kwargs["creationflags"] = (
                subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
            )
        else:
            kwargs["start_new_session"] = True

        try:
            process = subprocess.Popen(
                [str(entrypoint)],
                cwd=str(entrypoint.parent),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                close_fds=True,
                **kwargs,
            )
        except (OSError, ValueError) as e:
            raise LaunchError(f"Could not start '{entrypoint.name}': {e}") from e

        log.info(f"Launched {record.name} (pid {process.pid}).")
        return process

    def launch(self, record: InstallationRecord) -> bool:
        """Starts the record's entrypoint. Returns False instead of raising."""
        try:
            self.start(record)
            return True
        except LaunchError as e:
            log.error(f"[red]✗ Launch failed:[/red] {e}")
            return False
