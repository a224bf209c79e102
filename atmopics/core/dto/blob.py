from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True, slots=True)
class BlobReference:
    cid: str                      # content-addressed link
    mime_type: Optional[str]
    size: Optional[int]


@dataclass(frozen=True, slots=True)
class AspectRatio:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class FitLayout:
    width: int
    height: int


class BlobVariant(str, Enum):
    RAW = "raw"
    CDN_JPEG = "jpeg"
    CDN_PNG = "png"
    CDN_WEBP = "webp"

    @property
    def is_cdn(self) -> bool:
        return self is not BlobVariant.RAW
