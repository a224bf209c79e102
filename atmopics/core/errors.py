"""
Error taxonomy for the content resolution pipeline.

Every error knows which stage raised it and how the boundary should treat it:
absence collapses to a 404, transport and payload problems are transient and
worth an operator's attention.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Stage(str, Enum):
    CLASSIFY = "classify"
    RESOLVE_HANDLE = "resolve_handle"
    LOCATE_REPOSITORY = "locate_repository"
    FETCH_RECORD = "fetch_record"
    EXTRACT_BLOB = "extract_blob"
    PROBE_MEDIA = "probe_media"


class Disposition(str, Enum):
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"
    RETRYABLE = "retryable"


class ContentError(RuntimeError):
    """Base class for all resolution, extraction and probing failures."""

    stage: Stage = Stage.CLASSIFY
    disposition: Disposition = Disposition.NOT_FOUND
    log_worthy: bool = False

    def __init__(self, message: str, *, stage: Optional[Stage] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    @property
    def not_found(self) -> bool:
        return self.disposition is Disposition.NOT_FOUND


class UnrecognizedIdentifierError(ContentError):
    """Input matches neither the DID nor the handle grammar."""

    stage = Stage.CLASSIFY

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Not a recognized identifier: {identifier!r}")


class HandleResolutionError(ContentError):
    """Handle has no bound identity, or the directory could not be reached."""

    stage = Stage.RESOLVE_HANDLE

    def __init__(self, handle: str, reason: str, *, unreachable: bool = False):
        self.handle = handle
        self.unreachable = unreachable
        super().__init__(f"Could not resolve handle {handle}: {reason}")


class IdentityUnresolvableError(ContentError):
    """DID document missing, unfetchable, or without a usable repository endpoint."""

    stage = Stage.LOCATE_REPOSITORY

    def __init__(self, did: str, reason: str):
        self.did = did
        super().__init__(f"Could not locate repository for {did}: {reason}")


class RecordNotFoundError(ContentError):
    stage = Stage.FETCH_RECORD

    def __init__(self, message: str, *, stage: Optional[Stage] = None):
        super().__init__(message, stage=stage)


class HostUnreachableError(ContentError):
    """Transport failure talking to a repository host."""

    stage = Stage.FETCH_RECORD
    disposition = Disposition.TRANSIENT
    log_worthy = True


class InvalidResponseError(ContentError):
    """Repository host answered with a payload we cannot use."""

    stage = Stage.FETCH_RECORD
    disposition = Disposition.TRANSIENT
    log_worthy = True


class BlobAbsentError(ContentError):
    """Expected media field is missing or null."""

    stage = Stage.EXTRACT_BLOB

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Blob field {field!r} is absent")


class BlobMalformedError(ContentError):
    """Media field is present but is not a well-formed blob reference."""

    stage = Stage.EXTRACT_BLOB
    log_worthy = True

    def __init__(self, field: str, reason: str):
        self.field = field
        super().__init__(f"Blob field {field!r} is malformed: {reason}")


class MetadataLoadError(ContentError):
    """Video container could not be parsed for its dimensions."""

    stage = Stage.PROBE_MEDIA
    disposition = Disposition.RETRYABLE


class ThumbnailGenerationError(ContentError):
    """First-frame decode, rasterization or encode failed."""

    stage = Stage.PROBE_MEDIA
    disposition = Disposition.RETRYABLE
