"""
Core application engine for installing, launching and publishing content.

The `Installer` drives a package through fetch, staging, extraction and
entrypoint discovery before recording it; the `Launcher` starts recorded
installations; the `DraftPublisher` sends drafts to the server.
"""

from .installer import InstallOutcome, InstallState, Installer
from .launcher import Launcher
from .publisher import DraftPublisher

__all__ = ["DraftPublisher", "InstallOutcome", "InstallState", "Installer", "Launcher"]
