"""Query and content-loading stack."""

from .content_loader import ContentLoader, extract_subtree
from .fetcher import CancellationToken, FetchResponse, Fetcher, FileFetcher, ViewSlot
from .search_client import SearchClient

__all__ = [
    "CancellationToken",
    "ContentLoader",
    "FetchResponse",
    "Fetcher",
    "FileFetcher",
    "SearchClient",
    "ViewSlot",
    "extract_subtree",
]
