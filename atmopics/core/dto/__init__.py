from atmopics.core.dto.identity import (
    IdentifierKind,
    PublicIdentifier,
    RecordAddress,
    RepositoryLocation,
)
from atmopics.core.dto.blob import AspectRatio, BlobReference, BlobVariant, FitLayout
from atmopics.core.dto.record import (
    CodeRecord,
    ImageRecord,
    MarkdownRecord,
    Record,
    RecordContent,
    VideoRecord,
)
from atmopics.core.dto.page import CodePage, ImagePage, MarkdownPage, VideoPage

# Media prober DTOs
from atmopics.core.dto.thumbnail import VideoThumbnail

__all__ = [
    # Identity
    "IdentifierKind",
    "PublicIdentifier",
    "RecordAddress",
    "RepositoryLocation",

    # Blobs / layout
    "AspectRatio",
    "BlobReference",
    "BlobVariant",
    "FitLayout",

    # Records
    "CodeRecord",
    "ImageRecord",
    "MarkdownRecord",
    "Record",
    "RecordContent",
    "VideoRecord",

    # Pages
    "CodePage",
    "ImagePage",
    "MarkdownPage",
    "VideoPage",

    # Media
    "VideoThumbnail",
]
