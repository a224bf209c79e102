from __future__ import annotations

import json
import logging
import os
import shutil
import subprocess
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from PyQt6.QtCore import QBuffer, QIODevice
from PyQt6.QtGui import QImage

from atmopics.core.dto.blob import AspectRatio
from atmopics.core.dto.thumbnail import VideoThumbnail
from atmopics.core.errors import MetadataLoadError, ThumbnailGenerationError

logger = logging.getLogger(__name__)

MediaSource = Union[bytes, bytearray, str, Path]

THUMBNAIL_FORMAT = "WEBP"
THUMBNAIL_QUALITY = 0.8

_MIME_TYPES = {"WEBP": "image/webp", "JPEG": "image/jpeg", "PNG": "image/png"}


def _subprocess_kwargs() -> dict:
    """Get platform-specific subprocess kwargs to hide console windows on Windows."""
    kwargs = {}
    if sys.platform == 'win32':
        kwargs['creationflags'] = subprocess.CREATE_NO_WINDOW
    return kwargs


class SourceHandle:
    """
    Temporary on-disk reference to a video's bytes for ffprobe / ffmpeg.

    In-memory sources are spilled to a temp file that is deleted on release;
    path sources are referenced in place and never deleted.
    """

    def __init__(self, path: Path, owned: bool):
        self.path = path
        self._owned = owned
        self._released = False

    @classmethod
    def acquire(cls, source: MediaSource) -> "SourceHandle":
        if isinstance(source, (bytes, bytearray)):
            fd, name = tempfile.mkstemp(prefix="atmopics-", suffix=".video")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(source)
            except BaseException:
                # no handle exists yet, so nothing else will remove the file
                Path(name).unlink(missing_ok=True)
                raise
            return cls(Path(name), owned=True)
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(path)
        return cls(path, owned=False)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        if self._owned:
            self.path.unlink(missing_ok=True)


@contextmanager
def open_source(source: MediaSource) -> Iterator[SourceHandle]:
    """Acquire a SourceHandle and release it on every exit path."""
    handle = SourceHandle.acquire(source)
    try:
        yield handle
    finally:
        handle.release()


class MediaProber:
    """
    Video dimension probing and first-frame thumbnails, for the upload flow.

    Responsibilities:
    - Read native width / height from container metadata
    - Decode the frame at t=0 and encode it as a lossy still

    Non-responsibilities:
    - Network access
    - Caching
    - Threading
    """

    def __init__(
        self,
        *,
        image_format: str = THUMBNAIL_FORMAT,
        quality: float = THUMBNAIL_QUALITY,
        timeout: float = 60,
    ):
        self.image_format = image_format.upper()
        self.quality = quality
        self.timeout = timeout

    # ------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------

    def probe_dimensions(self, source: MediaSource) -> AspectRatio:
        """
        Native pixel dimensions of the first video stream.

        Raises:
            MetadataLoadError: ffprobe is missing or the container cannot be parsed.
        """
        try:
            with open_source(source) as handle:
                return self._probe(handle.path)
        except OSError as e:
            raise MetadataLoadError(f"Failed to load video metadata: {e}") from e

    def generate_thumbnail(self, source: MediaSource) -> VideoThumbnail:
        """
        Rasterize the very first frame and return it with the native dimensions.

        Raises:
            ThumbnailGenerationError: probing, decoding or encoding failed.
        """
        try:
            with open_source(source) as handle:
                try:
                    aspect = self._probe(handle.path)
                except MetadataLoadError as e:
                    raise ThumbnailGenerationError(f"Failed to load video: {e}") from e
                frame = self._extract_first_frame(handle.path)
                data = self._encode(frame)
        except OSError as e:
            raise ThumbnailGenerationError(f"Failed to generate thumbnail: {e}") from e

        logger.info(
            f"Thumbnail generated: {aspect.width}x{aspect.height}, "
            f"{len(data)} bytes {self.image_format}"
        )
        return VideoThumbnail(
            data=data,
            mime_type=_MIME_TYPES.get(self.image_format, "application/octet-stream"),
            aspect_ratio=aspect,
        )

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _probe(self, path: Path) -> AspectRatio:
        if not self._ffprobe_available():
            raise MetadataLoadError("ffprobe not found on PATH")
        cmd = [
            "ffprobe",
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height",
            "-of", "json",
            str(path),
        ]
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                text=True,
                timeout=self.timeout,
                **_subprocess_kwargs(),
            )
        except subprocess.CalledProcessError as e:
            raise MetadataLoadError(f"ffprobe failed: {(e.stderr or '').strip()}") from e
        except subprocess.TimeoutExpired as e:
            raise MetadataLoadError("ffprobe timed out") from e

        try:
            streams = json.loads(proc.stdout or "{}").get("streams") or []
            width = int(streams[0]["width"])
            height = int(streams[0]["height"])
        except (ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
            raise MetadataLoadError("no video stream dimensions in container") from e
        if width <= 0 or height <= 0:
            raise MetadataLoadError(f"invalid video dimensions {width}x{height}")
        return AspectRatio(width=width, height=height)

    def _extract_first_frame(self, path: Path) -> QImage:
        if not self._ffmpeg_available():
            raise ThumbnailGenerationError("ffmpeg not found on PATH")
        cmd = [
            "ffmpeg",
            "-loglevel", "error",
            "-ss", "0",
            "-i", str(path),
            "-frames:v", "1",
            "-f", "image2pipe",
            "-vcodec", "png",
            "-",
        ]
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=self.timeout,
                **_subprocess_kwargs(),
            )
        except subprocess.CalledProcessError as e:
            raise ThumbnailGenerationError(
                f"ffmpeg failed: {(e.stderr or b'').decode(errors='ignore').strip()}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ThumbnailGenerationError("ffmpeg timed out") from e

        img = QImage.fromData(proc.stdout, "PNG")
        if img.isNull():
            raise ThumbnailGenerationError("Failed to decode first video frame")
        return img

    def _encode(self, img: QImage) -> bytes:
        buffer = QBuffer()
        if not buffer.open(QIODevice.OpenModeFlag.WriteOnly):
            raise ThumbnailGenerationError("Failed to open image buffer")
        try:
            ok = img.save(buffer, self.image_format, self._qt_quality())
            data = bytes(buffer.data())
        finally:
            buffer.close()
        if not ok or not data:
            raise ThumbnailGenerationError(f"Failed to encode thumbnail as {self.image_format}")
        return data

    def _qt_quality(self) -> int:
        # Qt takes 0-100; keep the 0-1 scale at the API surface
        return max(0, min(100, round(self.quality * 100)))

    @staticmethod
    def _ffmpeg_available() -> bool:
        return shutil.which("ffmpeg") is not None

    @staticmethod
    def _ffprobe_available() -> bool:
        return shutil.which("ffprobe") is not None


def save_thumbnail(thumbnail: VideoThumbnail, destination: Path) -> Path:
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(thumbnail.data)
    return destination
