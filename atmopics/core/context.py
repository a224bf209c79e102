from __future__ import annotations

import logging
import shutil
from typing import Optional

from atmopics.core.api.blobs import BlobDownloader
from atmopics.core.api.identity import HandleResolver, RepositoryLocator
from atmopics.core.api.repo import RecordFetcher
from atmopics.core.cache import IdentityCache
from atmopics.core.config import Settings
from atmopics.core.content_manager import ContentManager
from atmopics.core.http_client import HttpClient, create_http_client_from_settings

logger = logging.getLogger(__name__)


class CoreContext:
    """
    Shared Core dependencies (settings + HTTP sessions + managers).

    Use a single instance for the process lifetime. The aiohttp session is
    created lazily on first use, because it needs a running event loop.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        http_client: Optional[HttpClient] = None,
    ):
        self.settings = settings or Settings()
        self._http_client = http_client or create_http_client_from_settings(self.settings)
        self.identity_cache = IdentityCache(
            ttl_seconds=self.settings.get_int("identity_cache_ttl"),
            limit=self.settings.get_int("identity_cache_size"),
        )
        self._content: Optional[ContentManager] = None
        self._blobs: Optional[BlobDownloader] = None
        logger.info(
            f"Core context created - resolver: {self.settings.handle_resolver_url}, "
            f"plc: {self.settings.plc_directory_url}, "
            f"identity cache: {'on' if self.identity_cache.decision.enabled else 'off'}"
        )

    @property
    def content(self) -> ContentManager:
        if self._content is None:
            session = self._http_client.get_async_session()
            self._content = ContentManager(
                handle_resolver=HandleResolver(session, resolver_url=self.settings.handle_resolver_url),
                locator=RepositoryLocator(
                    session,
                    plc_directory_url=self.settings.plc_directory_url,
                    cache=self.identity_cache,
                ),
                fetcher=RecordFetcher(session),
                cdn_url=self.settings.cdn_url,
            )
        return self._content

    @property
    def blobs(self) -> BlobDownloader:
        if self._blobs is None:
            self._blobs = BlobDownloader(
                self._http_client.get_sync_session(),
                timeout=self._http_client.sync_timeout,
            )
        return self._blobs

    @staticmethod
    def check_ffmpeg_availability() -> bool:
        """Check if ffmpeg and ffprobe are available for thumbnail generation."""
        missing = [tool for tool in ("ffmpeg", "ffprobe") if shutil.which(tool) is None]
        if missing:
            logger.warning(
                f"{', '.join(missing)} not found in PATH. Video probing will be unavailable. "
                "Install ffmpeg: https://ffmpeg.org/download.html"
            )
            return False
        return True

    async def aclose(self) -> None:
        self._content = None
        await self._http_client.close_async_session()
        self.close()

    def close(self) -> None:
        self._blobs = None
        self._http_client.close()
