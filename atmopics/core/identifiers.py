"""
Syntactic classification of public identifiers.

No network access happens here: a string is either a DID, a handle that still
needs resolving, or not an identifier at all.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from atmopics.core.dto.identity import IdentifierKind, PublicIdentifier
from atmopics.core.errors import UnrecognizedIdentifierError

DID_MAX_LENGTH = 2048
HANDLE_MAX_LENGTH = 253
RKEY_MAX_LENGTH = 512

_DID_RE = re.compile(r"^did:[a-z]+:[a-zA-Z0-9._:%-]*[a-zA-Z0-9._-]$")
_HANDLE_RE = re.compile(
    r"^([a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+"
    r"[a-zA-Z]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?$"
)
_RKEY_RE = re.compile(r"^[a-zA-Z0-9._:~-]{1,512}$")


def is_did(value: str) -> bool:
    return len(value) <= DID_MAX_LENGTH and _DID_RE.match(value) is not None


def is_handle(value: str) -> bool:
    return len(value) <= HANDLE_MAX_LENGTH and _HANDLE_RE.match(value) is not None


def is_record_key(value: str) -> bool:
    if value in (".", ".."):
        return False
    return _RKEY_RE.match(value) is not None


def classify_identifier(value: str) -> PublicIdentifier:
    """
    Classify a public identifier string.

    Raises:
        UnrecognizedIdentifierError: when the string is neither a DID nor a handle.
    """
    if not isinstance(value, str):
        raise UnrecognizedIdentifierError(repr(value))
    if is_did(value):
        return PublicIdentifier(IdentifierKind.DID, value)
    if is_handle(value):
        return PublicIdentifier(IdentifierKind.HANDLE, value.lower())
    raise UnrecognizedIdentifierError(value)


# ------------------------------------------------------------
# at:// URIs
# ------------------------------------------------------------

@dataclass(frozen=True)
class AtUri:
    repo: str
    collection: Optional[str] = None
    rkey: Optional[str] = None


def parse_at_uri(uri: str) -> Optional[AtUri]:
    """Split ``at://repo/collection/rkey``; returns None for anything else."""
    if not uri or not uri.startswith("at://"):
        return None
    parts = uri[len("at://"):].split("/")
    if not parts[0] or len(parts) > 3 or any(not p for p in parts[1:]):
        return None
    return AtUri(
        repo=parts[0],
        collection=parts[1] if len(parts) > 1 else None,
        rkey=parts[2] if len(parts) > 2 else None,
    )
