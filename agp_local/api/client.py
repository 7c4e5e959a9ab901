"""
Async client for the AGP Studios server: package catalog, package downloads
and draft publishing.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError

from agp_local.models.config import AppConfig
from agp_local.models.game import PackageDescriptor
from agp_local.utils.path import resolve_locator

log = logging.getLogger(__name__)


class RemoteServiceClient:
    """
    Thin async client over the server's JSON API.

    Features:
    - Retries with exponential backoff for package downloads
    - Optional bearer token taken from the configuration
    - A single pooled session per client, closed on exit
    """

    GAMES_ENDPOINT = "/api/games"
    PUBLISH_ENDPOINT = "/api/admin/publish"

    def __init__(self, config: AppConfig, base_delay: float = 1.5):
        """
        Initializes the client.

        Args:
            config: Application configuration providing the server URL, token,
                timeout and number of download attempts.
            base_delay: Seconds to wait before the first retry; doubled each time.
        """
        self.base_url = config.full_server_url()
        self.api_token = config.api_token
        self.max_attempts = config.fetch_attempts
        self.request_timeout = config.request_timeout
        self.base_delay = base_delay
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "RemoteServiceClient":
        await self._initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            headers = {"Accept-Encoding": "gzip, deflate"}
            if self.api_token:
                headers["Authorization"] = f"Bearer {self.api_token}"
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(limit=8, ttl_dns_cache=300),
                headers=headers,
                timeout=aiohttp.ClientTimeout(
                    total=self.request_timeout, sock_connect=15
                ),
            )
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def url_for(self, locator: str) -> str:
        return resolve_locator(locator, self.base_url)

    async def fetch_bytes(self, locator: str) -> Optional[bytes]:
        """
        Downloads a package payload. Returns None when the server does not
        have it or every attempt failed.
        """
        if not locator:
            return None

        url = self.url_for(locator)
        session = await self._initialize_session()
        for attempt in range(1, self.max_attempts + 1):
            try:
                async with session.get(url, allow_redirects=True) as response:
                    if response.status == 404:
                        log.debug(f"Package not found at {url}")
                        return None
                    response.raise_for_status()
                    return await response.read()
            except aiohttp.ClientResponseError as e:
                if e.status < 500:
                    log.debug(f"Download of {url} rejected: {e.status} {e.message}")
                    return None
                self._log_retry(url, attempt, e)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                self._log_retry(url, attempt, e)

            if attempt < self.max_attempts:
                await asyncio.sleep(self.base_delay * (2 ** (attempt - 1)))

        log.warning(f"[yellow]Giving up on {url} after {self.max_attempts} attempts.[/yellow]")
        return None

    def _log_retry(self, url: str, attempt: int, error: Exception) -> None:
        log.debug(
            f"Download attempt {attempt}/{self.max_attempts} for '{url}' failed: "
            f"{error}. Retrying..."
        )

    async def list_packages(self) -> List[PackageDescriptor]:
        """Fetches the published package catalog. Returns [] on failure."""
        session = await self._initialize_session()
        try:
            async with session.get(self.url_for(self.GAMES_ENDPOINT)) as response:
                response.raise_for_status()
                payload: Any = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            log.error(f"[red]Could not load the package catalog: {e}[/red]")
            return []

        if not isinstance(payload, list):
            log.error("[red]Unexpected package catalog format.[/red]")
            return []

        packages = []
        for item in payload:
            try:
                packages.append(PackageDescriptor.model_validate(item))
            except ValidationError as e:
                log.debug(f"Skipping malformed catalog entry: {e}")
        return packages

    async def publish_code(self, name: str, content: str) -> bool:
        """Publishes code to the server. Admin permissions are checked server-side."""
        body: Dict[str, Any] = {
            "Name": name,
            "Content": content,
            "PublishedDate": datetime.now(tz=timezone.utc).isoformat(),
        }
        session = await self._initialize_session()
        try:
            async with session.post(
                self.url_for(self.PUBLISH_ENDPOINT), json=body
            ) as response:
                if response.status >= 400:
                    log.debug(f"Publish rejected with status {response.status}")
                    return False
                return True
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.debug(f"Publish request failed: {e}")
            return False
