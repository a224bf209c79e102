from atmopics.core.api.base import APIError, BaseXrpcClient, XrpcResponse
from atmopics.core.api.blobs import BlobDownloader
from atmopics.core.api.identity import HandleResolver, RepositoryLocator, select_pds_endpoint
from atmopics.core.api.repo import RecordFetcher

__all__ = [
    "APIError",
    "BaseXrpcClient",
    "XrpcResponse",
    "BlobDownloader",
    "HandleResolver",
    "RepositoryLocator",
    "select_pds_endpoint",
    "RecordFetcher",
]
