"""Shared fixtures: in-process HTTP stubs, no network."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

RESOLVER = "https://resolver.test"
PLC = "https://plc.test"
PDS = "https://pds.test"
DID = "did:plc:ewvi7nxzyoun6zhxrhs64oiz"


class StubResponse:
    """Minimal stand-in for an aiohttp response used as an async context manager."""

    def __init__(self, status: int = 200, body: str = "", error: Optional[BaseException] = None) -> None:
        self.status = status
        self._body = body
        self._error = error

    async def __aenter__(self) -> "StubResponse":
        if self._error is not None:
            raise self._error
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

    async def text(self) -> str:
        return self._body


def json_response(status: int, data: Any) -> StubResponse:
    return StubResponse(status, json.dumps(data))


class StubSession:
    """aiohttp.ClientSession stub routing by URL (query string excluded)."""

    def __init__(self, routes: Optional[Dict[str, Union[StubResponse, BaseException]]] = None) -> None:
        self.routes = routes or {}
        self.calls: List[Tuple[str, str, Optional[dict]]] = []

    def request(self, method: str, url: str, params: Optional[dict] = None, **kwargs) -> StubResponse:
        self.calls.append((method, url, params))
        item = self.routes.get(url)
        if item is None:
            return StubResponse(404, json.dumps({"error": "NotFound"}))
        if isinstance(item, BaseException):
            return StubResponse(error=item)
        return item

    def urls(self) -> List[str]:
        return [url for _, url, _ in self.calls]


def did_document(did: str = DID, endpoint: str = PDS, **extra: Any) -> dict:
    doc = {
        "id": did,
        "alsoKnownAs": ["at://alice.test"],
        "service": [
            {"id": "#atproto_pds", "type": "AtprotoPersonalDataServer", "serviceEndpoint": endpoint},
        ],
    }
    doc.update(extra)
    return doc


def blob(cid: str = "bafkreigh2akiscaildc", mime: str = "image/jpeg", size: int = 1234) -> dict:
    return {"$type": "blob", "ref": {"$link": cid}, "mimeType": mime, "size": size}


def record_body(collection: str, rkey: str, value: dict, did: str = DID) -> dict:
    return {
        "uri": f"at://{did}/{collection}/{rkey}",
        "cid": "bafyreib2rxk3rh6kzwq",
        "value": {"$type": collection, **value},
    }


@pytest.fixture
def session() -> StubSession:
    return StubSession()
