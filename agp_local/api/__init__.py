"""
API Client Layer.

This package contains the client for the AGP Studios server, used to browse
the package catalog, download package payloads and publish drafts.
"""

from .client import RemoteServiceClient

__all__ = ["RemoteServiceClient"]
