"""Typed models shared across the application."""

from .chunk import ChunkStats, ContentChunk
from .indexer_config import ContentTypeConfig, IndexerConfig, ReferenceConfig, TextExtractionConfig
from .navigation import NavigationNode, QuickAccessEntry
from .node import Node, NodeKind, Revision, RevisionKind
from .retrieval import Highlight, SearchOptions, SearchResult
from .search import (
    DivisionSummary,
    ExtractedReference,
    IndexBuildResult,
    IndexStatistics,
    PartSummary,
    RevisionDate,
    SearchDocument,
    SearchMetadata,
    TocItem,
)

__all__ = [
    "ChunkStats",
    "ContentChunk",
    "ContentTypeConfig",
    "DivisionSummary",
    "ExtractedReference",
    "Highlight",
    "IndexBuildResult",
    "IndexStatistics",
    "IndexerConfig",
    "NavigationNode",
    "Node",
    "NodeKind",
    "PartSummary",
    "QuickAccessEntry",
    "ReferenceConfig",
    "Revision",
    "RevisionDate",
    "RevisionKind",
    "SearchDocument",
    "SearchMetadata",
    "SearchOptions",
    "SearchResult",
    "TextExtractionConfig",
    "TocItem",
]
