from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from atmopics.core.dto.blob import AspectRatio
from atmopics.core.dto.identity import RecordAddress


# Blob fields stay raw here; the blob extractor validates their shape so
# that "absent" and "malformed" remain distinguishable.

@dataclass(frozen=True)
class CodeRecord:
    title: Optional[str]
    content: str
    language: Optional[str] = None


@dataclass(frozen=True)
class ImageRecord:
    title: Optional[str]
    alt: Optional[str]
    image: Any
    aspect_ratio: Optional[AspectRatio] = None


@dataclass(frozen=True)
class MarkdownRecord:
    title: Optional[str]
    content: str


@dataclass(frozen=True)
class VideoRecord:
    title: Optional[str]
    video: Any
    thumbnail: Any
    aspect_ratio: Optional[AspectRatio] = None


RecordContent = Union[CodeRecord, ImageRecord, MarkdownRecord, VideoRecord]


@dataclass(frozen=True)
class Record:
    address: RecordAddress
    uri: str
    cid: Optional[str]            # commit reference of this record version
    content: RecordContent
    raw: Mapping[str, Any]
