"""
Storage Layer.

This package handles all data persistence: the configuration file, the
generic file-per-record store, and the draft and installation repositories
built on it.
"""

from .config_manager import ConfigManager
from .drafts import DraftRepository
from .installations import InstallationRepository
from .record_store import RecordStore

__all__ = ["ConfigManager", "DraftRepository", "InstallationRepository", "RecordStore"]
