"""Query options and ranked results."""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import Field

from buildcode.config import settings

from .base import CamelModel
from .search import SearchDocument


class SearchOptions(CamelModel):
    """Filters and pagination applied to a full-text query."""

    division_filter: Optional[str] = None
    part_filter: Optional[Union[int, str]] = None
    section_filter: Optional[Union[int, str]] = None
    amendments_only: bool = False
    tables_only: bool = False
    figures_only: bool = False
    content_types: Optional[List[str]] = None
    effective_date: Optional[str] = None
    limit: int = Field(default_factory=lambda: settings.search_default_limit, ge=0)
    offset: int = Field(default=0, ge=0)


class Highlight(CamelModel):
    field: str
    text: str


class SearchResult(CamelModel):
    """Document returned by the query engine with its final score."""

    document: SearchDocument
    score: float
    highlights: List[Highlight] = Field(default_factory=list)
