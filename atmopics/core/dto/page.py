from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from atmopics.core.dto.blob import BlobReference
from atmopics.core.dto.record import Record


@dataclass(frozen=True)
class CodePage:
    record: Record
    did: str


@dataclass(frozen=True)
class ImagePage:
    record: Record
    did: str
    blob: BlobReference
    image_url: str


@dataclass(frozen=True)
class MarkdownPage:
    record: Record
    did: str


@dataclass(frozen=True)
class VideoPage:
    record: Record
    did: str
    video_blob: BlobReference
    thumbnail_blob: Optional[BlobReference]
    video_url: str
