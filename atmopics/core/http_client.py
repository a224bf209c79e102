"""
Centralized HTTP client configuration.

Provides unified session management for both sync (requests) and async (aiohttp)
HTTP clients with shared headers and timeouts:
- aiohttp for the identity / record resolution pipeline
- requests for blob downloads in the upload flow
"""

from __future__ import annotations

import logging
import socket
from typing import Dict, Optional

import aiohttp
import requests
from aiohttp import ClientTimeout, TCPConnector

from atmopics import __version__

logger = logging.getLogger(__name__)


USER_AGENT = f"atmopics/{__version__} (+https://atmo.pics)"

# XRPC and DID document endpoints all answer JSON
API_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
    "Accept-Encoding": "gzip, deflate",
}

# Blob bytes: whatever the host stored
MEDIA_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Accept-Encoding": "identity;q=1, *;q=0",
}


class HttpClientConfig:
    """Central HTTP client configuration."""

    def __init__(
        self,
        max_connections_per_host: int = 10,
        max_total_connections: int = 100,
        connect_timeout: float = 10,
        read_timeout: float = 30,
    ):
        self.max_connections_per_host = max_connections_per_host
        self.max_total_connections = max_total_connections
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout


class HttpClient:
    """
    Centralized HTTP client factory.

    Creates and configures both sync (requests) and async (aiohttp) sessions
    with shared configuration for headers and timeouts.
    """

    def __init__(self, config: Optional[HttpClientConfig] = None):
        self.config = config or HttpClientConfig()
        self._sync_session: Optional[requests.Session] = None
        self._async_session: Optional[aiohttp.ClientSession] = None

    def create_sync_session(self, headers: Optional[Dict[str, str]] = None) -> requests.Session:
        session = requests.Session()
        session.headers.update(headers or MEDIA_HEADERS)
        self._sync_session = session
        return session

    def get_sync_session(self) -> requests.Session:
        """Get existing session or create new one."""
        if self._sync_session is None:
            return self.create_sync_session()
        return self._sync_session

    @property
    def sync_timeout(self) -> tuple:
        return (self.config.connect_timeout, self.config.read_timeout)

    def create_async_session(
        self,
        headers: Optional[Dict[str, str]] = None,
        total_timeout: Optional[float] = None,
    ) -> aiohttp.ClientSession:
        """
        Create a configured aiohttp.ClientSession for async HTTP.

        Must be called with a running event loop.

        Args:
            headers: Optional headers to use (defaults to API_HEADERS)
            total_timeout: Total request timeout (None for no limit)
        """
        connector = TCPConnector(
            limit=self.config.max_total_connections,
            limit_per_host=self.config.max_connections_per_host,
            ttl_dns_cache=300,
            family=socket.AF_UNSPEC,
            force_close=False,
        )
        timeout = ClientTimeout(
            total=total_timeout,
            connect=self.config.connect_timeout,
            sock_read=self.config.read_timeout,
        )
        session = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers=headers or API_HEADERS,
            raise_for_status=False,
        )
        self._async_session = session
        return session

    def get_async_session(self) -> aiohttp.ClientSession:
        if self._async_session is None or self._async_session.closed:
            return self.create_async_session()
        return self._async_session

    async def close_async_session(self) -> None:
        if self._async_session is not None:
            await self._async_session.close()
            self._async_session = None

    def close(self) -> None:
        if self._sync_session is not None:
            self._sync_session.close()
            self._sync_session = None


def create_http_client_from_settings(settings) -> HttpClient:
    """
    Create HttpClient configured from Settings.

    Args:
        settings: Settings instance to read timeouts from
    """
    config = HttpClientConfig(
        connect_timeout=settings.get_float("connect_timeout"),
        read_timeout=settings.get_float("read_timeout"),
    )
    return HttpClient(config)
