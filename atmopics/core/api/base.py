"""
Shared async plumbing for XRPC and DID-document requests.

Platform quirks are normalized here; callers decide what a status code means
for their own stage (a 404 is "no such handle" to one caller and "no such
record" to another), so this layer only separates transport failures from
answers.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import aiohttp

logger = logging.getLogger(__name__)


class APIError(RuntimeError):
    """Raised for transport failures (connection, TLS, timeout)."""

    def __init__(self, message: str, *, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out


@dataclass(frozen=True)
class XrpcResponse:
    status: int
    data: Any                 # parsed JSON, or None when the body was empty / not JSON
    json_valid: bool
    error: Optional[str] = None     # XRPC error name, e.g. "RecordNotFound"
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class BaseXrpcClient:
    """
    Thin async request helper bound to one aiohttp session.

    The session is owned by the caller (normally CoreContext) and shared by
    every client built from it; nothing here holds per-request state.
    """

    def __init__(self, session: aiohttp.ClientSession):
        self.session = session

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> XrpcResponse:
        if params:
            logger.info(f"API Request: {method} {url}?{urlencode(params)}")
        else:
            logger.info(f"API Request: {method} {url}")

        try:
            async with self.session.request(method, url, params=params) as resp:
                status = resp.status
                body = await resp.text()
        except asyncio.TimeoutError as e:
            raise APIError(f"request to {url} timed out", timed_out=True) from e
        except aiohttp.ClientError as e:
            raise APIError(f"request to {url} failed: {e}") from e

        data: Any = None
        json_valid = False
        if body:
            try:
                data = json.loads(body)
                json_valid = True
            except ValueError:
                logger.debug(f"  └─ non-JSON body ({len(body)} chars)")

        error = message = None
        if isinstance(data, dict):
            if isinstance(data.get("error"), str):
                error = data["error"]
            if isinstance(data.get("message"), str):
                message = data["message"]

        logger.debug(f"  └─ HTTP {status}{f' ({error})' if error else ''}")
        return XrpcResponse(status=status, data=data, json_valid=json_valid, error=error, message=message)

    async def _get(self, url: str, *, params: Optional[Dict[str, Any]] = None) -> XrpcResponse:
        return await self._request("GET", url, params=params)
