from dataclasses import dataclass

from atmopics.core.dto.blob import AspectRatio


@dataclass(frozen=True, slots=True)
class VideoThumbnail:
    data: bytes
    mime_type: str
    aspect_ratio: AspectRatio
