from __future__ import annotations

import logging

from atmopics.core.api.base import APIError, BaseXrpcClient
from atmopics.core.dto.identity import RecordAddress, RepositoryLocation
from atmopics.core.dto.record import Record
from atmopics.core.errors import (
    HostUnreachableError,
    InvalidResponseError,
    RecordNotFoundError,
)
from atmopics.core.records import decode_record

logger = logging.getLogger(__name__)

# XRPC error names that mean "there is nothing to show here"
NOT_FOUND_ERRORS = frozenset({
    "RecordNotFound",
    "RepoNotFound",
    "RepoDeactivated",
    "RepoTakendown",
    "RepoSuspended",
})


class RecordFetcher(BaseXrpcClient):
    """
    Reads a single record from a repository host.

    Exactly one request per call; no retry, no pagination.
    """

    async def get_record(self, location: RepositoryLocation, address: RecordAddress) -> Record:
        url = f"{location.endpoint}/xrpc/com.atproto.repo.getRecord"
        params = {
            "repo": address.did,
            "collection": address.collection,
            "rkey": address.rkey,
        }
        try:
            resp = await self._get(url, params=params)
        except APIError as e:
            raise HostUnreachableError(f"{location.endpoint} unreachable: {e}") from e

        if resp.status == 404 or (resp.status == 400 and resp.error in NOT_FOUND_ERRORS):
            raise RecordNotFoundError(f"Record not found: {address.uri}")
        if resp.status >= 500:
            raise HostUnreachableError(f"{location.endpoint} returned HTTP {resp.status}")
        if not resp.ok:
            raise InvalidResponseError(
                f"{location.endpoint} returned HTTP {resp.status}"
                f"{f' ({resp.error})' if resp.error else ''}"
            )
        if not resp.json_valid:
            raise InvalidResponseError(f"{location.endpoint} returned a non-JSON record body")

        return decode_record(address, resp.data)
