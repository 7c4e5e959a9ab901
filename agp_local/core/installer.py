"""
Handles the installation of a single package, from download to the persisted
installation record.
"""

import asyncio
import logging
import os
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

import aiofiles

from agp_local.exceptions import (
    AgpLocalError,
    ExtractionError,
    FetchError,
    StoreIOError,
    StoreWriteError,
)
from agp_local.models.config import DEFAULT_ENTRYPOINT_PATTERNS
from agp_local.models.game import InstallationRecord, PackageDescriptor
from agp_local.storage.installations import InstallationRepository
from agp_local.utils.path import create_dir

from .discovery import find_entrypoint
from .extractor import extract_archive
from .protocols import ProgressObserver, RemoteService

log = logging.getLogger(__name__)

STAGING_FILE_NAME = "game_package.zip"


class InstallState(str, Enum):
    """Steps of an installation run."""

    PENDING = "pending"
    FETCHING = "fetching"
    STAGED = "staged"
    EXTRACTING = "extracting"
    DISCOVERING = "discovering"
    RECORDING = "recording"
    DONE = "done"
    FAILED = "failed"


# Progress reported once each step completes
PROGRESS_FETCH_STARTED = 10
PROGRESS_STAGED = 50
PROGRESS_EXTRACTED = 70
PROGRESS_RECORDED = 90
PROGRESS_DONE = 100


@dataclass
class InstallOutcome:
    """The result of an installation run."""

    package_id: int
    success: bool = False
    state: InstallState = InstallState.PENDING
    message: str = ""
    record: InstallationRecord | None = None


class _Cancelled(AgpLocalError):
    pass


class Installer:
    """
    Orchestrates fetch, staging, extraction, entrypoint discovery and
    recording of one package at a time per package id.
    """

    def __init__(
        self,
        remote: RemoteService,
        installations: InstallationRepository,
        entrypoint_patterns: list[str] | None = None,
    ):
        self.remote = remote
        self.installations = installations
        self.entrypoint_patterns = list(
            entrypoint_patterns or DEFAULT_ENTRYPOINT_PATTERNS
        )
        self._package_locks: OrderedDict[int, asyncio.Lock] = OrderedDict()
        self._max_locks = 256
        self._package_lock_main = asyncio.Lock()

    async def _get_package_lock(self, package_id: int) -> asyncio.Lock:
        """Gets or creates the lock serializing installs of one package id."""
        async with self._package_lock_main:
            if package_id in self._package_locks:
                self._package_locks.move_to_end(package_id)
                return self._package_locks[package_id]

            lock = asyncio.Lock()
            self._package_locks[package_id] = lock

            # Evict the oldest idle lock if over limit
            if len(self._package_locks) > self._max_locks:
                for old_id, old_lock in self._package_locks.items():
                    if not old_lock.locked() and old_id != package_id:
                        del self._package_locks[old_id]
                        break

            return lock

    async def install(
        self,
        descriptor: PackageDescriptor,
        progress: ProgressObserver | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> bool:
        """Installs a package. Returns True once its record has been persisted."""
        outcome = await self.run(descriptor, progress, cancel_event)
        return outcome.success

    async def run(
        self,
        descriptor: PackageDescriptor,
        progress: ProgressObserver | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> InstallOutcome:
        """
        Manages the complete lifecycle of installing a package.

        Any failing step stops the run in the FAILED state; the installation
        record is only written by the final step, so a failed or cancelled run
        never leaves one behind.
        """
        outcome = InstallOutcome(package_id=descriptor.id)
        lock = await self._get_package_lock(descriptor.id)
        async with lock:
            try:
                outcome.record = await self._run_steps(
                    descriptor, outcome, progress, cancel_event
                )
                outcome.state = InstallState.DONE
                outcome.success = True
                self._report(progress, PROGRESS_DONE)
                log.info(
                    f"[green]✓ Installed[/green] {descriptor.name} "
                    f"{descriptor.version} [dim]({outcome.record.install_path})[/dim]"
                )
            except _Cancelled:
                outcome.message = "cancelled"
                log.info(f"Installation of {descriptor.name} was cancelled.")
                outcome.state = InstallState.FAILED
            except AgpLocalError as e:
                outcome.message = str(e)
                log.error(
                    f"[red]✗ Installation failed[/red] while {outcome.state.value}: "
                    f"{descriptor.name} ({e})"
                )
                outcome.state = InstallState.FAILED
            except Exception as e:
                outcome.message = f"Unexpected error: {e}"
                log.error(
                    f"[red]✗ Installation failed[/red] while {outcome.state.value}: "
                    f"{descriptor.name} ({e})",
                    exc_info=log.getEffectiveLevel() == logging.DEBUG,
                )
                outcome.state = InstallState.FAILED
        return outcome

    async def _run_steps(
        self,
        descriptor: PackageDescriptor,
        outcome: InstallOutcome,
        progress: ProgressObserver | None,
        cancel_event: asyncio.Event | None,
    ) -> InstallationRecord:
        if not descriptor.download_url:
            raise FetchError(f"Package {descriptor.id} has no download locator.")

        # The install path is known before any I/O happens.
        install_dir = self.installations.install_path_for(descriptor.id)

        self._check_cancelled(cancel_event)
        outcome.state = InstallState.FETCHING
        self._report(progress, PROGRESS_FETCH_STARTED)
        payload = await self._fetch(descriptor)

        self._check_cancelled(cancel_event)
        staging_path = await self._stage(install_dir, payload)
        outcome.state = InstallState.STAGED
        self._report(progress, PROGRESS_STAGED)

        self._check_cancelled(cancel_event)
        outcome.state = InstallState.EXTRACTING
        await asyncio.to_thread(extract_archive, staging_path, install_dir)
        try:
            os.remove(staging_path)
        except OSError as e:
            raise ExtractionError(f"Could not remove staging file: {e}") from e
        self._report(progress, PROGRESS_EXTRACTED)

        self._check_cancelled(cancel_event)
        outcome.state = InstallState.DISCOVERING
        entrypoint = await asyncio.to_thread(
            find_entrypoint, install_dir, self.entrypoint_patterns
        )
        if entrypoint is None:
            log.warning(
                f"[yellow]No entrypoint found for {descriptor.name}; it will not "
                "be launchable.[/yellow]"
            )

        self._check_cancelled(cancel_event)
        outcome.state = InstallState.RECORDING
        record = InstallationRecord(
            package_id=descriptor.id,
            name=descriptor.name,
            version=descriptor.version,
            install_path=str(install_dir.resolve()),
            entrypoint_path=str(entrypoint.resolve()) if entrypoint else "",
            installed_at=datetime.now(tz=timezone.utc),
        )
        saved = await asyncio.to_thread(self.installations.save, record)
        if not saved:
            raise StoreWriteError(
                f"Could not persist installation record for package {descriptor.id}."
            )
        self._report(progress, PROGRESS_RECORDED)
        return record

    async def _fetch(self, descriptor: PackageDescriptor) -> bytes:
        try:
            payload = await self.remote.fetch_bytes(descriptor.download_url)
        except AgpLocalError:
            raise
        except Exception as e:
            raise FetchError(f"Download failed: {e}") from e
        if not payload:
            raise FetchError("The remote service returned no data.")
        log.debug(f"Fetched {len(payload)} bytes for package {descriptor.id}.")
        return payload

    async def _stage(self, install_dir: Path, payload: bytes) -> Path:
        """Writes the payload into the install directory for extraction."""
        staging_path = install_dir / STAGING_FILE_NAME
        try:
            await asyncio.to_thread(create_dir, install_dir)
            async with aiofiles.open(staging_path, "wb") as f:
                await f.write(payload)
        except OSError as e:
            raise StoreIOError(f"Could not stage package payload: {e}") from e
        return staging_path

    @staticmethod
    def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise _Cancelled()

    @staticmethod
    def _report(progress: ProgressObserver | None, percent: int) -> None:
        """Notifies the observer; its failures never affect the installation."""
        if progress is None:
            return
        try:
            progress(percent)
        except Exception as e:
            log.debug(f"Progress observer failed at {percent}%: {e}")
