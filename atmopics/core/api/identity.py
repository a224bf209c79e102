from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import unquote, urlparse

import aiohttp

from atmopics.core.api.base import APIError, BaseXrpcClient
from atmopics.core.cache import IdentityCache
from atmopics.core.dto.identity import RepositoryLocation
from atmopics.core.errors import HandleResolutionError, IdentityUnresolvableError
from atmopics.core.identifiers import is_did

logger = logging.getLogger(__name__)

PDS_SERVICE_ID = "#atproto_pds"
PDS_SERVICE_TYPE = "AtprotoPersonalDataServer"


class HandleResolver(BaseXrpcClient):
    """Resolves a handle to a DID with one directory round-trip."""

    def __init__(self, session: aiohttp.ClientSession, *, resolver_url: str):
        super().__init__(session)
        self.resolver_url = resolver_url.rstrip("/")

    async def resolve(self, handle: str) -> str:
        url = f"{self.resolver_url}/xrpc/com.atproto.identity.resolveHandle"
        try:
            resp = await self._get(url, params={"handle": handle})
        except APIError as e:
            raise HandleResolutionError(handle, str(e), unreachable=True) from e

        if not resp.ok:
            if resp.status >= 500:
                raise HandleResolutionError(handle, f"directory returned HTTP {resp.status}", unreachable=True)
            raise HandleResolutionError(handle, resp.message or resp.error or f"HTTP {resp.status}")

        did = resp.data.get("did") if isinstance(resp.data, dict) else None
        if not isinstance(did, str) or not is_did(did):
            raise HandleResolutionError(handle, "directory answered without a valid DID")
        return did


class RepositoryLocator(BaseXrpcClient):
    """
    Finds the repository host (PDS) for a DID from its DID document.

    Supports did:plc via the PLC directory and did:web via the well-known path.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        plc_directory_url: str,
        cache: Optional[IdentityCache] = None,
    ):
        super().__init__(session)
        self.plc_directory_url = plc_directory_url.rstrip("/")
        self._cache = cache or IdentityCache()

    def document_url(self, did: str) -> str:
        if did.startswith("did:plc:"):
            return f"{self.plc_directory_url}/{did}"
        if did.startswith("did:web:"):
            parts = did[len("did:web:"):].split(":")
            host = unquote(parts[0])
            if len(parts) > 1:
                return f"https://{host}/{'/'.join(unquote(p) for p in parts[1:])}/did.json"
            return f"https://{host}/.well-known/did.json"
        raise IdentityUnresolvableError(did, "unsupported DID method")

    async def locate(self, did: str) -> RepositoryLocation:
        cached = self._cache.get(did)
        if cached is not None:
            logger.debug(f"Repository location cache hit for {did}")
            return cached

        url = self.document_url(did)
        try:
            resp = await self._get(url)
        except APIError as e:
            raise IdentityUnresolvableError(did, str(e)) from e

        if not resp.ok:
            raise IdentityUnresolvableError(did, f"DID document fetch returned HTTP {resp.status}")
        if not isinstance(resp.data, dict):
            raise IdentityUnresolvableError(did, "DID document is not a JSON object")
        if resp.data.get("id") != did:
            raise IdentityUnresolvableError(did, "DID document id does not match")

        endpoint = select_pds_endpoint(did, resp.data)
        if endpoint is None:
            raise IdentityUnresolvableError(did, "no repository-hosting service entry")

        location = RepositoryLocation(did=did, endpoint=endpoint)
        self._cache.set(did, location)
        return location


def select_pds_endpoint(did: str, document: dict) -> Optional[str]:
    """
    Pick the repository-hosting service from a DID document.

    Entries are matched on id and type; the first qualifying entry in document
    order wins, so the choice never depends on anything but the document.
    """
    services = document.get("service")
    if not isinstance(services, list):
        return None
    for entry in services:
        if not isinstance(entry, dict):
            continue
        if entry.get("id") not in (PDS_SERVICE_ID, f"{did}{PDS_SERVICE_ID}"):
            continue
        if entry.get("type") != PDS_SERVICE_TYPE:
            continue
        endpoint = _usable_endpoint(entry.get("serviceEndpoint"))
        if endpoint is not None:
            return endpoint
    return None


def _usable_endpoint(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return value.rstrip("/")
