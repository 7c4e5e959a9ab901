"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application: configuration, drafts, remote package
descriptors and local installation records.
"""

from .config import AppConfig
from .draft import Draft
from .game import InstallationRecord, PackageDescriptor

__all__ = ["AppConfig", "Draft", "InstallationRecord", "PackageDescriptor"]
