"""
Blob reference extraction and delivery URL synthesis.

Both are pure: no network access, same input always gives the same output.
A blob's CID is a hash of its bytes, so every URL built here is cacheable
indefinitely.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote, urlencode

from atmopics.core.dto.blob import BlobReference, BlobVariant
from atmopics.core.dto.identity import RepositoryLocation
from atmopics.core.dto.record import Record
from atmopics.core.errors import BlobAbsentError, BlobMalformedError

logger = logging.getLogger(__name__)

BLOB_TYPE = "blob"

DEFAULT_CDN_URL = "https://cdn.bsky.app"
CDN_PRESETS = ("feed_thumbnail", "feed_fullsize")


def extract_blob(
    source: Union[Record, Mapping[str, Any]],
    field: str,
    expected_type: str = BLOB_TYPE,
) -> BlobReference:
    """
    Validate and return the blob reference stored under ``field``.

    Raises:
        BlobAbsentError: the field is missing or null.
        BlobMalformedError: the field is present but is not a ``$type``-tagged blob
            with a content link.
    """
    value = source.raw if isinstance(source, Record) else source
    raw = value.get(field)
    if raw is None:
        raise BlobAbsentError(field)
    if not isinstance(raw, dict):
        raise BlobMalformedError(field, f"expected an object, got {type(raw).__name__}")
    if raw.get("$type") != expected_type:
        raise BlobMalformedError(field, f"discriminator {raw.get('$type')!r} != {expected_type!r}")

    ref = raw.get("ref")
    link = ref.get("$link") if isinstance(ref, dict) else None
    if not isinstance(link, str) or not link:
        raise BlobMalformedError(field, "missing content link")

    mime_type = raw.get("mimeType")
    size = raw.get("size")
    return BlobReference(
        cid=link,
        mime_type=mime_type if isinstance(mime_type, str) else None,
        size=size if isinstance(size, int) and not isinstance(size, bool) else None,
    )


def extract_optional_blob(
    source: Union[Record, Mapping[str, Any]],
    field: str,
    expected_type: str = BLOB_TYPE,
) -> Optional[BlobReference]:
    """Like extract_blob, but absence is an ordinary outcome; malformed still raises."""
    try:
        return extract_blob(source, field, expected_type)
    except BlobAbsentError:
        return None


def blob_url(
    did: str,
    blob: BlobReference,
    variant: BlobVariant = BlobVariant.RAW,
    *,
    location: Optional[RepositoryLocation] = None,
    cdn_url: str = DEFAULT_CDN_URL,
    preset: str = "feed_thumbnail",
) -> str:
    """
    Build a retrieval URL for a blob.

    RAW points at the repository host's getBlob endpoint and therefore needs the
    repository location; the CDN variants are derived from the DID and CID only.

    Raises:
        ValueError: on input-contract violations (no CID, RAW without location,
            unknown preset).
    """
    if not blob.cid:
        raise ValueError("blob reference has no content link")

    if not variant.is_cdn:
        if location is None:
            raise ValueError("raw blob URLs need the repository location")
        query = urlencode({"did": did, "cid": blob.cid})
        return f"{location.endpoint}/xrpc/com.atproto.sync.getBlob?{query}"

    if preset not in CDN_PRESETS:
        raise ValueError(f"unknown CDN preset: {preset}")
    return (
        f"{cdn_url.rstrip('/')}/img/{preset}/plain/"
        f"{quote(did, safe=':')}/{quote(blob.cid, safe='')}@{variant.value}"
    )
