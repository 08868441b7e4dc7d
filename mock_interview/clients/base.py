"""
Shared aiohttp plumbing for the JSON-over-HTTP collaborator clients.
"""

from typing import Any, Optional

import aiohttp
from loguru import logger

from config import config


class JsonServiceClient:
    """Lazily opens one aiohttp session and closes it on demand."""

    service_name = "service"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or config.services.api_host).rstrip("/")
        self.timeout = timeout if timeout is not None else config.services.request_timeout
        self.session: Optional[aiohttp.ClientSession] = None
        self.total_requests = 0

    async def _ensure_session(self):
        """Make sure an open HTTP session exists"""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )

    async def _read_json(self, response: aiohttp.ClientResponse) -> Any:
        """Return the decoded body or raise ValueError for non-JSON content."""
        self.total_requests += 1
        try:
            return await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError) as e:
            text = await response.text()
            raise ValueError(f"{self.service_name} returned non-JSON body ({response.status}): {text[:200]}") from e

    async def close(self):
        """Close the HTTP session"""
        if self.session and not self.session.closed:
            await self.session.close()
            logger.debug(f"{self.service_name} session closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()
