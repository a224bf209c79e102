from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class IdentifierKind(str, Enum):
    DID = "did"
    HANDLE = "handle"


@dataclass(frozen=True, slots=True)
class PublicIdentifier:
    kind: IdentifierKind
    value: str  # handles are stored lowercased

    @property
    def is_did(self) -> bool:
        return self.kind is IdentifierKind.DID


@dataclass(frozen=True, slots=True)
class RepositoryLocation:
    did: str
    endpoint: str  # base URL of the repository host, no trailing slash


@dataclass(frozen=True, slots=True)
class RecordAddress:
    did: str
    collection: str
    rkey: str

    @property
    def uri(self) -> str:
        return f"at://{self.did}/{self.collection}/{self.rkey}"
