"""Flat search records and the metadata emitted alongside them."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import Field, field_validator

from .base import CamelModel


class ExtractedReference(CamelModel):
    """One inline ``[REF:...]`` tag found in text."""

    type: str
    id: str
    display_text: str = ""
    format: Optional[str] = None
    full_match: str


class SearchDocument(CamelModel):
    """Denormalised record for one indexable unit."""

    id: str
    type: str
    article_number: str = ""
    title: str = ""
    text: str = ""
    snippet: str = ""

    division_id: str = ""
    division_letter: str = ""
    division_title: str = ""
    part_id: str = ""
    part_number: str = ""
    part_title: str = ""
    section_id: str = ""
    section_number: str = ""
    section_title: str = ""
    subsection_id: str = ""
    subsection_number: str = ""
    subsection_title: str = ""

    path: str = ""
    breadcrumbs: List[str] = Field(default_factory=list)
    url_path: str = ""

    has_amendment: bool = False
    amendment_type: Optional[str] = None
    latest_amendment_date: Optional[str] = None
    has_tables: bool = False
    has_figures: bool = False
    has_internal_refs: bool = False
    has_external_refs: bool = False
    has_term_refs: bool = False

    search_priority: float = 5.0
    reference_ids: Optional[List[str]] = None

    @field_validator(
        "part_number", "section_number", "subsection_number", "article_number", mode="before"
    )
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value


class TocItem(CamelModel):
    """Table-of-contents node; ``has_revisions`` is OR-ed up from children."""

    id: str
    type: str
    number: str = ""
    title: str = ""
    level: int = 0
    has_revisions: bool = False
    children: Optional[List[TocItem]] = None

    @field_validator("number", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        return "" if value is None else str(value)


class RevisionDate(CamelModel):
    effective_date: str
    display_date: str
    count: int
    type: str


class IndexStatistics(CamelModel):
    total_documents: int = 0
    total_articles: int = 0
    total_tables: int = 0
    total_figures: int = 0
    total_parts: int = 0
    total_sections: int = 0
    total_subsections: int = 0
    total_amendments: int = 0
    total_revision_dates: int = 0
    total_glossary_terms: int = 0


class PartSummary(CamelModel):
    id: str
    number: str = ""
    title: str = ""

    @field_validator("number", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Any:
        return "" if value is None else str(value)


class DivisionSummary(CamelModel):
    id: str
    letter: str = ""
    title: str = ""
    parts: List[PartSummary] = Field(default_factory=list)


class SearchMetadata(CamelModel):
    """Everything the client needs besides the documents themselves."""

    version: str
    generated_at: str
    statistics: IndexStatistics = Field(default_factory=IndexStatistics)
    divisions: List[DivisionSummary] = Field(default_factory=list)
    revision_dates: List[RevisionDate] = Field(default_factory=list)
    table_of_contents: List[TocItem] = Field(default_factory=list)
    content_types: List[str] = Field(default_factory=list)


class IndexBuildResult(CamelModel):
    documents: List[SearchDocument]
    metadata: SearchMetadata
