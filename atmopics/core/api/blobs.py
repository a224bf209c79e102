from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import requests

from atmopics.core.blobs import blob_url
from atmopics.core.dto.blob import BlobReference, BlobVariant
from atmopics.core.dto.identity import RepositoryLocation
from atmopics.core.errors import BlobAbsentError, HostUnreachableError, InvalidResponseError, Stage

logger = logging.getLogger(__name__)

CHUNK_SIZE = 256 * 1024
PARTIAL_SUFFIX = ".part"


class BlobDownloader:
    """
    Synchronous blob reads from a repository host.

    Used by the upload / thumbnail flow, which runs outside the async
    resolution pipeline.
    """

    def __init__(self, session: Optional[requests.Session] = None, *, timeout: Tuple[float, float] = (10, 60)):
        self.session = session or requests.Session()
        self.timeout = timeout

    def download(
        self,
        location: RepositoryLocation,
        blob: BlobReference,
        destination: Path,
    ) -> Path:
        """
        Stream a blob's bytes into ``destination``.

        Bytes go to a sibling ``.part`` file that replaces ``destination`` only
        once the stream completes; on failure an existing file is left as it was.
        """
        url = blob_url(location.did, blob, BlobVariant.RAW, location=location)
        logger.info(f"Blob download: {url}")
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_suffix(destination.suffix + PARTIAL_SUFFIX)

        resp = None
        try:
            resp = self.session.get(url, stream=True, timeout=self.timeout)
            if resp.status_code in (400, 404):
                raise BlobAbsentError("blob", f"Blob {blob.cid} not found on {location.endpoint}")
            if resp.status_code >= 500:
                raise HostUnreachableError(
                    f"{location.endpoint} returned HTTP {resp.status_code}", stage=Stage.EXTRACT_BLOB
                )
            if not resp.ok:
                raise InvalidResponseError(
                    f"{location.endpoint} returned HTTP {resp.status_code}", stage=Stage.EXTRACT_BLOB
                )

            written = 0
            with open(partial, "wb") as f:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
            partial.replace(destination)
            logger.info(f"  └─ {written} bytes -> {destination}")
            return destination
        except requests.RequestException as e:
            partial.unlink(missing_ok=True)
            raise HostUnreachableError(f"blob download failed: {e}", stage=Stage.EXTRACT_BLOB) from e
        except Exception:
            partial.unlink(missing_ok=True)
            raise
        finally:
            if resp is not None:
                resp.close()
