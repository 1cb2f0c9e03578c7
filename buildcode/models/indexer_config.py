"""Configuration models for search index generation."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from buildcode.config import settings

REFERENCE_TYPES = ("term", "internal", "external", "standard", "functional-statement")


class ReferenceConfig(BaseModel):
    """How inline reference tags are treated in searchable text."""

    strip_from_search_text: bool = True
    preserve_reference_ids: bool = True
    process_types: List[str] = Field(
        default_factory=lambda: ["term", "internal", "external", "standard"]
    )


class TextExtractionConfig(BaseModel):
    """Which parts of an article body feed the searchable text."""

    include_sentences: bool = True
    include_clauses: bool = True
    include_subclauses: bool = True
    max_text_length: int = Field(default_factory=lambda: settings.max_text_length)
    snippet_length: int = Field(default_factory=lambda: settings.snippet_length)
    table_sample_rows: int = Field(default_factory=lambda: settings.table_sample_rows)


class ContentTypeConfig(BaseModel):
    enabled: bool = True
    priority: float = 5.0
    amendment_boost: float = 1.0


def default_content_types() -> Dict[str, ContentTypeConfig]:
    return {
        "division": ContentTypeConfig(enabled=False, priority=10),
        "part": ContentTypeConfig(priority=10),
        "section": ContentTypeConfig(priority=9),
        "subsection": ContentTypeConfig(priority=8),
        "article": ContentTypeConfig(priority=5, amendment_boost=1.5),
        "table": ContentTypeConfig(priority=7, amendment_boost=1.3),
        "figure": ContentTypeConfig(priority=7, amendment_boost=1.3),
        "glossary": ContentTypeConfig(priority=6),
        "note": ContentTypeConfig(priority=4, amendment_boost=1.2),
        "application-note": ContentTypeConfig(priority=4, amendment_boost=1.2),
    }


_DISABLED = ContentTypeConfig(enabled=False, priority=0)


class IndexerConfig(BaseModel):
    """Full indexer configuration."""

    references: ReferenceConfig = Field(default_factory=ReferenceConfig)
    text_extraction: TextExtractionConfig = Field(default_factory=TextExtractionConfig)
    content_types: Dict[str, ContentTypeConfig] = Field(default_factory=default_content_types)

    def content_type(self, name: str) -> ContentTypeConfig:
        return self.content_types.get(name, _DISABLED)

    def is_enabled(self, name: str) -> bool:
        return self.content_type(name).enabled

    def priority_for(self, name: str, has_amendment: bool) -> float:
        """Base priority of ``name``, boosted when the unit is amended."""
        type_config = self.content_type(name)
        priority = type_config.priority
        if has_amendment:
            priority *= type_config.amendment_boost
        return priority

    @classmethod
    def merged(cls, overrides: Optional[Mapping[str, Any]] = None) -> "IndexerConfig":
        """Merge partial overrides onto the defaults, one nested group at a time."""
        base = cls()
        if not overrides:
            return base
        references = ReferenceConfig.model_validate(
            {**base.references.model_dump(), **dict(overrides.get("references") or {})}
        )
        text_extraction = TextExtractionConfig.model_validate(
            {**base.text_extraction.model_dump(), **dict(overrides.get("text_extraction") or {})}
        )
        content_types = dict(base.content_types)
        for name, value in (overrides.get("content_types") or {}).items():
            if isinstance(value, ContentTypeConfig):
                content_types[name] = value
            else:
                content_types[name] = ContentTypeConfig.model_validate(value)
        return cls(
            references=references,
            text_extraction=text_extraction,
            content_types=content_types,
        )
