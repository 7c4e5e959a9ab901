"""Shared fixtures for agp-local tests."""

import asyncio
import io
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from agp_local.models.config import AppConfig
from agp_local.models.game import PackageDescriptor
from agp_local.storage.installations import InstallationRepository


class FakeRemote:
    """In-memory remote service serving payloads by locator."""

    def __init__(self, payloads: dict[str, bytes | None] | None = None, delay: float = 0):
        self.payloads = payloads or {}
        self.delay = delay
        self.calls: list[str] = []
        self.error: Exception | None = None
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_bytes(self, locator: str) -> bytes | None:
        self.calls.append(locator)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return self.payloads.get(locator)
        finally:
            self.in_flight -= 1


def build_zip(
    files: dict[str, str | bytes], modes: dict[str, int] | None = None
) -> bytes:
    """
    Builds an in-memory zip archive from a name -> content mapping.

    ``modes`` optionally records Unix permission bits for some members.
    """
    modes = modes or {}
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            info = zipfile.ZipInfo(name)
            if name in modes:
                info.external_attr = modes[name] << 16
            zf.writestr(info, content)
    return buffer.getvalue()


@pytest.fixture
def make_zip() -> Callable[..., bytes]:
    return build_zip


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(app_data_path=str(tmp_path / "data"))


@pytest.fixture
def installations(config: AppConfig) -> InstallationRepository:
    return InstallationRepository(config.games_root())


@pytest.fixture
def descriptor() -> PackageDescriptor:
    return PackageDescriptor(
        id=42,
        name="Space Miner",
        version="1.0.0",
        size_bytes=1024,
        download_url="https://example.test/games/42.zip",
    )


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()
