"""Pipeline tests: identifier -> DID -> host -> record -> media URLs."""

from __future__ import annotations

import logging

import aiohttp
import pytest

from atmopics.core.api.identity import HandleResolver, RepositoryLocator
from atmopics.core.api.repo import RecordFetcher
from atmopics.core.collections import (
    CODE_COLLECTION,
    IMAGE_COLLECTION,
    MARKDOWN_COLLECTION,
    VIDEO_COLLECTION,
)
from atmopics.core.content_manager import ContentManager
from atmopics.core.errors import (
    BlobAbsentError,
    BlobMalformedError,
    HandleResolutionError,
    HostUnreachableError,
    IdentityUnresolvableError,
    RecordNotFoundError,
    Stage,
    UnrecognizedIdentifierError,
)

from tests.conftest import (
    DID,
    PDS,
    PLC,
    RESOLVER,
    StubResponse,
    StubSession,
    blob,
    did_document,
    json_response,
    record_body,
)

RESOLVE_URL = f"{RESOLVER}/xrpc/com.atproto.identity.resolveHandle"
DOC_URL = f"{PLC}/{DID}"
GET_RECORD = f"{PDS}/xrpc/com.atproto.repo.getRecord"


def _manager(session: StubSession) -> ContentManager:
    return ContentManager(
        handle_resolver=HandleResolver(session, resolver_url=RESOLVER),
        locator=RepositoryLocator(session, plc_directory_url=PLC),
        fetcher=RecordFetcher(session),
        cdn_url="https://cdn.test",
    )


def _session(collection: str, value: dict, **overrides) -> StubSession:
    routes = {
        RESOLVE_URL: json_response(200, {"did": DID}),
        DOC_URL: json_response(200, did_document()),
        GET_RECORD: json_response(200, record_body(collection, "3k2", value)),
    }
    routes.update(overrides)
    return StubSession(routes)


@pytest.mark.asyncio
async def test_did_input_never_calls_handle_resolver() -> None:
    session = _session(IMAGE_COLLECTION, {"image": blob()})
    record = await _manager(session).resolve_content(DID, IMAGE_COLLECTION, "3k2")
    assert record.address.did == DID
    assert RESOLVE_URL not in session.urls()
    assert session.urls() == [DOC_URL, GET_RECORD]


@pytest.mark.asyncio
async def test_handle_input_resolves_first() -> None:
    session = _session(IMAGE_COLLECTION, {"image": blob()})
    record = await _manager(session).resolve_content("Alice.Test", IMAGE_COLLECTION, "3k2")
    assert record.address.did == DID
    assert session.urls() == [RESOLVE_URL, DOC_URL, GET_RECORD]
    assert session.calls[0][2] == {"handle": "alice.test"}


@pytest.mark.asyncio
async def test_unrecognized_identifier_makes_no_calls() -> None:
    session = _session(IMAGE_COLLECTION, {})
    with pytest.raises(UnrecognizedIdentifierError):
        await _manager(session).resolve_content("not an identifier!", IMAGE_COLLECTION, "3k2")
    assert session.calls == []


@pytest.mark.asyncio
async def test_invalid_rkey_and_unknown_collection_make_no_calls() -> None:
    session = _session(IMAGE_COLLECTION, {})
    manager = _manager(session)
    with pytest.raises(RecordNotFoundError) as bad_rkey:
        await manager.resolve_content(DID, IMAGE_COLLECTION, "..")
    with pytest.raises(RecordNotFoundError) as bad_collection:
        await manager.resolve_content(DID, "app.bsky.feed.post", "3k2")
    assert session.calls == []
    assert bad_rkey.value.stage is Stage.CLASSIFY
    assert bad_collection.value.stage is Stage.CLASSIFY


@pytest.mark.asyncio
async def test_record_404_is_not_found_not_unreachable() -> None:
    session = _session(IMAGE_COLLECTION, {}, **{GET_RECORD: StubResponse(404, "")})
    with pytest.raises(RecordNotFoundError) as excinfo:
        await _manager(session).resolve_content(DID, IMAGE_COLLECTION, "3k2")
    assert not isinstance(excinfo.value, HostUnreachableError)
    assert excinfo.value.stage is Stage.FETCH_RECORD


@pytest.mark.asyncio
async def test_failures_keep_their_stage(caplog) -> None:
    session = _session(IMAGE_COLLECTION, {}, **{RESOLVE_URL: aiohttp.ClientOSError(110, "timed out")})
    with pytest.raises(HandleResolutionError) as excinfo:
        await _manager(session).resolve_content("alice.test", IMAGE_COLLECTION, "3k2")
    assert excinfo.value.stage is Stage.RESOLVE_HANDLE

    session = _session(IMAGE_COLLECTION, {}, **{DOC_URL: StubResponse(410, "")})
    with pytest.raises(IdentityUnresolvableError):
        await _manager(session).resolve_content(DID, IMAGE_COLLECTION, "3k2")

    session = _session(IMAGE_COLLECTION, {}, **{GET_RECORD: aiohttp.ServerDisconnectedError()})
    with caplog.at_level(logging.WARNING, logger="atmopics.core.content_manager"):
        with pytest.raises(HostUnreachableError):
            await _manager(session).resolve_content(DID, IMAGE_COLLECTION, "3k2")
    assert "HostUnreachableError" in caplog.text
    assert "[fetch_record]" in caplog.text


# ==================== Page loads ====================


@pytest.mark.asyncio
async def test_load_image() -> None:
    session = _session(IMAGE_COLLECTION, {"image": blob()})
    page = await _manager(session).load_image(DID, "3k2")
    assert page.did == DID
    assert page.blob.cid == "bafkreigh2akiscaildc"
    assert page.image_url.startswith(f"{PDS}/xrpc/com.atproto.sync.getBlob?")


@pytest.mark.asyncio
async def test_load_image_with_null_blob_is_absent() -> None:
    session = _session(IMAGE_COLLECTION, {"image": None})
    with pytest.raises(BlobAbsentError):
        await _manager(session).load_image(DID, "3k2")


@pytest.mark.asyncio
async def test_load_image_with_wrong_type_is_malformed(caplog) -> None:
    session = _session(IMAGE_COLLECTION, {"image": {"$type": "other"}})
    with caplog.at_level(logging.WARNING, logger="atmopics.core.content_manager"):
        with pytest.raises(BlobMalformedError):
            await _manager(session).load_image(DID, "3k2")
    assert "BlobMalformedError" in caplog.text


@pytest.mark.asyncio
async def test_load_video() -> None:
    value = {
        "video": blob("bafkvideo", "video/mp4"),
        "thumbnail": blob("bafkthumb", "image/webp"),
        "aspectRatio": {"width": 16, "height": 9},
    }
    page = await _manager(_session(VIDEO_COLLECTION, value)).load_video(DID, "3k2")
    assert page.video_blob.cid == "bafkvideo"
    assert page.thumbnail_blob.cid == "bafkthumb"
    assert "cid=bafkvideo" in page.video_url


@pytest.mark.asyncio
async def test_load_video_tolerates_missing_or_broken_thumbnail() -> None:
    for thumb in (None, {"$type": "other"}):
        value = {"video": blob("bafkvideo", "video/mp4"), "thumbnail": thumb}
        page = await _manager(_session(VIDEO_COLLECTION, value)).load_video(DID, "3k2")
        assert page.thumbnail_blob is None


@pytest.mark.asyncio
async def test_load_code_requires_content() -> None:
    manager = _manager(_session(CODE_COLLECTION, {"title": "t", "content": ""}))
    with pytest.raises(RecordNotFoundError, match="Code not found"):
        await manager.load_code(DID, "3k2")

    page = await _manager(_session(CODE_COLLECTION, {"content": "x = 1"})).load_code(DID, "3k2")
    assert page.record.content.content == "x = 1"


@pytest.mark.asyncio
async def test_load_markdown() -> None:
    page = await _manager(_session(MARKDOWN_COLLECTION, {"content": "# hi"})).load_markdown(DID, "3k2")
    assert page.record.content.content == "# hi"


# ==================== Previews ====================


@pytest.mark.asyncio
async def test_video_preview_uses_thumbnail_and_layout() -> None:
    value = {
        "video": blob("bafkvideo", "video/mp4"),
        "thumbnail": blob("bafkthumb", "image/webp"),
        "aspectRatio": {"width": 1, "height": 1},
    }
    card = await _manager(_session(VIDEO_COLLECTION, value)).build_preview("video", DID, "3k2")
    assert 'width="630" height="630"' in card.markup
    assert f"https://cdn.test/img/feed_thumbnail/plain/{DID}/bafkthumb@jpeg" in card.markup


@pytest.mark.asyncio
async def test_video_preview_without_thumbnail_is_absent() -> None:
    value = {"video": blob("bafkvideo", "video/mp4"), "aspectRatio": {"width": 1, "height": 1}}
    with pytest.raises(BlobAbsentError):
        await _manager(_session(VIDEO_COLLECTION, value)).build_preview("video", DID, "3k2")


@pytest.mark.asyncio
async def test_code_preview_escapes_record_text() -> None:
    value = {"title": "<script>", "content": "a && b"}
    card = await _manager(_session(CODE_COLLECTION, value)).build_preview("code", DID, "3k2")
    assert "&lt;script&gt;" in card.markup
    assert "a &amp;&amp; b" in card.markup
