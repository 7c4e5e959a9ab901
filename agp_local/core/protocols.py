"""
Interfaces of the collaborators the core depends on.
"""

from collections.abc import Callable
from typing import Protocol

ProgressObserver = Callable[[int], None]


class RemoteService(Protocol):
    """Retrieves package payloads by locator."""

    async def fetch_bytes(self, locator: str) -> bytes | None: ...


class PublishService(Protocol):
    """Publishes draft content to the remote service."""

    async def publish_code(self, name: str, content: str) -> bool: ...
