"""
Schema-checked decoding of fetched records into typed content variants.

Each collection has one decoder. Scalar fields are checked here, at the fetch
boundary; blob fields are passed through untouched for the blob extractor.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from atmopics.core.collections import (
    CODE_COLLECTION,
    IMAGE_COLLECTION,
    MARKDOWN_COLLECTION,
    VIDEO_COLLECTION,
)
from atmopics.core.dto.blob import AspectRatio
from atmopics.core.dto.identity import RecordAddress
from atmopics.core.dto.record import (
    CodeRecord,
    ImageRecord,
    MarkdownRecord,
    Record,
    RecordContent,
    VideoRecord,
)
from atmopics.core.errors import InvalidResponseError


def _optional_str(value: Mapping[str, Any], field: str) -> Optional[str]:
    item = value.get(field)
    if item is None:
        return None
    if not isinstance(item, str):
        raise InvalidResponseError(f"field {field!r} must be a string")
    return item


def _text(value: Mapping[str, Any], field: str) -> str:
    return _optional_str(value, field) or ""


def parse_aspect_ratio(raw: Any) -> Optional[AspectRatio]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise InvalidResponseError("aspectRatio must be an object")
    width, height = raw.get("width"), raw.get("height")
    for name, dim in (("width", width), ("height", height)):
        # bool is an int subclass; reject it explicitly
        if not isinstance(dim, int) or isinstance(dim, bool) or dim <= 0:
            raise InvalidResponseError(f"aspectRatio.{name} must be a positive integer")
    return AspectRatio(width=width, height=height)


def _decode_code(value: Mapping[str, Any]) -> CodeRecord:
    return CodeRecord(
        title=_optional_str(value, "title"),
        content=_text(value, "content"),
        language=_optional_str(value, "language"),
    )


def _decode_image(value: Mapping[str, Any]) -> ImageRecord:
    return ImageRecord(
        title=_optional_str(value, "title"),
        alt=_optional_str(value, "alt"),
        image=value.get("image"),
        aspect_ratio=parse_aspect_ratio(value.get("aspectRatio")),
    )


def _decode_markdown(value: Mapping[str, Any]) -> MarkdownRecord:
    return MarkdownRecord(
        title=_optional_str(value, "title"),
        content=_text(value, "content"),
    )


def _decode_video(value: Mapping[str, Any]) -> VideoRecord:
    return VideoRecord(
        title=_optional_str(value, "title"),
        video=value.get("video"),
        thumbnail=value.get("thumbnail"),
        aspect_ratio=parse_aspect_ratio(value.get("aspectRatio")),
    )


DECODERS: Dict[str, Callable[[Mapping[str, Any]], RecordContent]] = {
    CODE_COLLECTION: _decode_code,
    IMAGE_COLLECTION: _decode_image,
    MARKDOWN_COLLECTION: _decode_markdown,
    VIDEO_COLLECTION: _decode_video,
}


def decode_record(address: RecordAddress, payload: Any) -> Record:
    """
    Turn a ``com.atproto.repo.getRecord`` response body into a Record.

    Raises:
        InvalidResponseError: the body, its envelope or a typed field has the wrong shape.
    """
    if not isinstance(payload, dict):
        raise InvalidResponseError("record response is not a JSON object")
    value = payload.get("value")
    if not isinstance(value, dict):
        raise InvalidResponseError("record response has no value object")
    uri = payload.get("uri")
    if not isinstance(uri, str):
        raise InvalidResponseError("record response has no uri")
    cid = payload.get("cid")
    if cid is not None and not isinstance(cid, str):
        raise InvalidResponseError("record cid must be a string")

    record_type = value.get("$type")
    if record_type is not None and record_type != address.collection:
        raise InvalidResponseError(
            f"record type {record_type!r} does not match collection {address.collection!r}"
        )

    decoder = DECODERS.get(address.collection)
    if decoder is None:
        raise InvalidResponseError(f"no decoder for collection {address.collection!r}")

    return Record(
        address=address,
        uri=uri,
        cid=cid,
        content=decoder(value),
        raw=value,
    )
