"""
Content-kind collections and their public routes.

Collection names are part of the wire contract with the repository host and
must match exactly. Adding a content kind means adding a row to ``KINDS``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote

from atmopics.core.identifiers import parse_at_uri

CODE_COLLECTION = "pics.atmo.code"
IMAGE_COLLECTION = "pics.atmo.image"
MARKDOWN_COLLECTION = "pics.atmo.markdown"
VIDEO_COLLECTION = "pics.atmo.video"


@dataclass(frozen=True)
class ContentKind:
    name: str
    collection: str
    route: str  # "/{prefix}/{repo}/{rkey}"


KINDS: Dict[str, ContentKind] = {
    "code": ContentKind("code", CODE_COLLECTION, "/c/{repo}/{rkey}"),
    "image": ContentKind("image", IMAGE_COLLECTION, "/i/{repo}/{rkey}"),
    "markdown": ContentKind("markdown", MARKDOWN_COLLECTION, "/m/{repo}/{rkey}"),
    "video": ContentKind("video", VIDEO_COLLECTION, "/v/{repo}/{rkey}"),
}

_BY_COLLECTION: Dict[str, ContentKind] = {k.collection: k for k in KINDS.values()}


def kind_for_collection(collection: str) -> Optional[ContentKind]:
    return _BY_COLLECTION.get(collection)


def get_kind(name_or_collection: str) -> ContentKind:
    """Look up a kind by short name ("video") or by collection NSID."""
    kind = KINDS.get(name_or_collection) or _BY_COLLECTION.get(name_or_collection)
    if kind is None:
        raise KeyError(f"Unknown content kind: {name_or_collection}")
    return kind


def share_link(origin: str, repo: str, collection: str, rkey: str) -> str:
    kind = kind_for_collection(collection)
    if kind is None:
        return ""
    path = kind.route.format(repo=quote(repo, safe=":"), rkey=quote(rkey, safe=":~"))
    return f"{origin.rstrip('/')}{path}"


def share_link_from_uri(origin: str, uri: str) -> str:
    parts = parse_at_uri(uri)
    if not parts or not parts.collection or not parts.rkey:
        return ""
    return share_link(origin, parts.repo, parts.collection, parts.rkey)
