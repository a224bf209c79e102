from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from atmopics.core.api.identity import HandleResolver, RepositoryLocator
from atmopics.core.api.repo import RecordFetcher
from atmopics.core.blobs import DEFAULT_CDN_URL, blob_url, extract_blob, extract_optional_blob
from atmopics.core.collections import get_kind, kind_for_collection
from atmopics.core.dto.blob import AspectRatio, BlobVariant
from atmopics.core.dto.identity import RecordAddress, RepositoryLocation
from atmopics.core.dto.page import CodePage, ImagePage, MarkdownPage, VideoPage
from atmopics.core.dto.record import CodeRecord, ImageRecord, MarkdownRecord, Record, VideoRecord
from atmopics.core.errors import ContentError, RecordNotFoundError, Stage
from atmopics.core.identifiers import classify_identifier, is_record_key
from atmopics.core.preview import (
    OG_HEIGHT,
    OG_WIDTH,
    PreviewCard,
    code_card,
    markdown_card,
    media_card,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedContent:
    did: str
    location: RepositoryLocation
    record: Record


class ContentManager:
    """
    Authoritative manager for the read path: identifier -> record -> media URLs.

    Guarantees:
    - Stages run strictly in order, once per call
    - Each failure keeps its own error type and stage
    - Returns DTOs only; no per-request state is kept on the manager
    """

    def __init__(
        self,
        *,
        handle_resolver: HandleResolver,
        locator: RepositoryLocator,
        fetcher: RecordFetcher,
        cdn_url: str = DEFAULT_CDN_URL,
    ):
        self._handles = handle_resolver
        self._locator = locator
        self._fetcher = fetcher
        self._cdn_url = cdn_url

    # ---------------------------------------------------------
    # Pipeline
    # ---------------------------------------------------------

    async def resolve_did(self, identifier: str) -> str:
        ident = classify_identifier(identifier)
        if ident.is_did:
            return ident.value
        return await self._handles.resolve(ident.value)

    async def resolve(self, identifier: str, collection: str, rkey: str) -> ResolvedContent:
        try:
            if kind_for_collection(collection) is None:
                raise RecordNotFoundError(f"Unknown collection: {collection}", stage=Stage.CLASSIFY)
            if not is_record_key(rkey):
                raise RecordNotFoundError(f"Invalid record key: {rkey!r}", stage=Stage.CLASSIFY)

            did = await self.resolve_did(identifier)
            location = await self._locator.locate(did)
            address = RecordAddress(did=did, collection=collection, rkey=rkey)
            record = await self._fetcher.get_record(location, address)
        except ContentError as e:
            self._report(e, identifier, collection, rkey)
            raise
        return ResolvedContent(did=did, location=location, record=record)

    async def resolve_content(self, identifier: str, collection: str, rkey: str) -> Record:
        resolved = await self.resolve(identifier, collection, rkey)
        return resolved.record

    # ---------------------------------------------------------
    # Page loads
    # ---------------------------------------------------------

    async def load_code(self, identifier: str, rkey: str) -> CodePage:
        resolved = await self.resolve(identifier, get_kind("code").collection, rkey)
        content = resolved.record.content
        if not isinstance(content, CodeRecord) or not content.content:
            raise RecordNotFoundError("Code not found")
        return CodePage(record=resolved.record, did=resolved.did)

    async def load_image(self, identifier: str, rkey: str) -> ImagePage:
        resolved = await self.resolve(identifier, get_kind("image").collection, rkey)
        blob = self._extract(resolved, "image")
        return ImagePage(
            record=resolved.record,
            did=resolved.did,
            blob=blob,
            image_url=blob_url(resolved.did, blob, BlobVariant.RAW, location=resolved.location),
        )

    async def load_markdown(self, identifier: str, rkey: str) -> MarkdownPage:
        resolved = await self.resolve(identifier, get_kind("markdown").collection, rkey)
        return MarkdownPage(record=resolved.record, did=resolved.did)

    async def load_video(self, identifier: str, rkey: str) -> VideoPage:
        resolved = await self.resolve(identifier, get_kind("video").collection, rkey)
        video = self._extract(resolved, "video")
        try:
            thumbnail = extract_optional_blob(resolved.record, "thumbnail")
        except ContentError as e:
            self._report(e, resolved.did, resolved.record.address.collection, resolved.record.address.rkey)
            thumbnail = None
        return VideoPage(
            record=resolved.record,
            did=resolved.did,
            video_blob=video,
            thumbnail_blob=thumbnail,
            video_url=blob_url(resolved.did, video, BlobVariant.RAW, location=resolved.location),
        )

    # ---------------------------------------------------------
    # Preview cards
    # ---------------------------------------------------------

    async def build_preview(self, kind: str, identifier: str, rkey: str) -> PreviewCard:
        content_kind = get_kind(kind)
        resolved = await self.resolve(identifier, content_kind.collection, rkey)
        content = resolved.record.content

        if isinstance(content, CodeRecord):
            return code_card(content)
        if isinstance(content, MarkdownRecord):
            return markdown_card(content)
        if isinstance(content, VideoRecord):
            blob = self._extract(resolved, "thumbnail")
            return media_card(resolved.did, blob, self._aspect_or_canvas(content.aspect_ratio), cdn_url=self._cdn_url)
        if isinstance(content, ImageRecord):
            blob = self._extract(resolved, "image")
            return media_card(resolved.did, blob, self._aspect_or_canvas(content.aspect_ratio), cdn_url=self._cdn_url)
        raise ValueError(f"No preview for {kind}")

    # ---------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------

    def _extract(self, resolved: ResolvedContent, field: str):
        try:
            return extract_blob(resolved.record, field)
        except ContentError as e:
            self._report(e, resolved.did, resolved.record.address.collection, resolved.record.address.rkey)
            raise

    @staticmethod
    def _aspect_or_canvas(aspect: Optional[AspectRatio]) -> AspectRatio:
        # records written before aspect ratios were stored fill the card
        return aspect or AspectRatio(OG_WIDTH, OG_HEIGHT)

    @staticmethod
    def _report(error: ContentError, identifier: str, collection: str, rkey: str) -> None:
        where = f"{identifier}/{collection}/{rkey}"
        if error.log_worthy:
            logger.warning(f"[{error.stage.value}] {type(error).__name__} for {where}: {error}")
        else:
            logger.info(f"[{error.stage.value}] {type(error).__name__} for {where}: {error}")
