"""Flatten the code hierarchy into search documents, a TOC and a date catalog.

The walk runs over the unresolved document so that every historical and
current revision is visible when amendment flags and dates are computed.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Set

from buildcode.config import settings
from buildcode.ingestion.text_extractor import (
    extract_article_text,
    extract_table_text,
    generate_snippet,
    has_external_refs,
    has_figures_in_content,
    has_internal_refs,
    has_tables_in_content,
    has_term_refs,
    normalize_whitespace,
    raw_article_text,
)
from buildcode.models.indexer_config import IndexerConfig
from buildcode.models.node import Node, NodeKind, RevisionKind, child_list, iter_divisions
from buildcode.models.search import (
    DivisionSummary,
    IndexBuildResult,
    IndexStatistics,
    PartSummary,
    RevisionDate,
    SearchDocument,
    SearchMetadata,
    TocItem,
)
from buildcode.parsing.references import strip_references
from buildcode.utils.json_io import read_json, write_json

logger = logging.getLogger(__name__)

FRONT_MATTER_ID = "front-matter"


def _number(node: Optional[Node]) -> str:
    if not node or node.get("number") is None:
        return ""
    return str(node["number"])


def _title(node: Optional[Node]) -> str:
    if not node:
        return ""
    return str(node.get("title") or "")


class Ancestry(NamedTuple):
    """Hierarchy context denormalised into every record below it."""

    division: Node
    part: Optional[Node] = None
    section: Optional[Node] = None
    subsection: Optional[Node] = None

    @property
    def letter(self) -> str:
        return str(self.division.get("letter") or "")

    def numbers(self) -> List[str]:
        return [_number(node) for node in (self.part, self.section, self.subsection) if node]

    def titles(self) -> List[str]:
        nodes = (self.division, self.part, self.section, self.subsection)
        return [_title(node) for node in nodes if node]

    def base_fields(self) -> Dict[str, Any]:
        return {
            "division_id": str(self.division.get("id") or ""),
            "division_letter": self.letter,
            "division_title": _title(self.division),
            "part_id": str((self.part or {}).get("id") or ""),
            "part_number": _number(self.part),
            "part_title": _title(self.part),
            "section_id": str((self.section or {}).get("id") or ""),
            "section_number": _number(self.section),
            "section_title": _title(self.section),
            "subsection_id": str((self.subsection or {}).get("id") or ""),
            "subsection_number": _number(self.subsection),
            "subsection_title": _title(self.subsection),
        }


@dataclass
class RevisionInfo:
    """Amendment summary of one unit's revision scan."""

    has_amendment: bool = False
    amendment_type: Optional[str] = None
    latest_date: Optional[str] = None

    def absorb(self, other: "RevisionInfo") -> None:
        if not other.has_amendment:
            return
        self.has_amendment = True
        if self.amendment_type is None:
            self.amendment_type = other.amendment_type
        if other.latest_date and (not self.latest_date or other.latest_date > self.latest_date):
            self.latest_date = other.latest_date


@dataclass
class _DateTally:
    count: int = 0
    kinds: Set[Optional[str]] = field(default_factory=set)


def format_display_date(date_string: str) -> str:
    """``2024-08-27`` -> ``August 27, 2024``; anything unparseable is returned as is."""
    try:
        parsed = dt.date.fromisoformat(date_string[:10])
    except ValueError:
        return date_string
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def catalog_type(kinds: Set[Optional[str]]) -> str:
    if len(kinds) > 1:
        return "mixed"
    if kinds == {RevisionKind.ORIGINAL.value}:
        return "original"
    return "amendment"


class SearchIndexBuilder:
    """Accumulates documents, dates and content types during one walk."""

    def __init__(self, config: Optional[IndexerConfig] = None):
        self.config = config or IndexerConfig()
        self.documents: List[SearchDocument] = []
        self.content_types_found: List[str] = []
        self._dates: Dict[str, _DateTally] = {}

    # -- revision scan -------------------------------------------------

    def _track(self, revision: Mapping[str, Any]) -> None:
        date = revision.get("effective_date")
        if not date:
            return
        tally = self._dates.setdefault(str(date), _DateTally())
        tally.count += 1
        tally.kinds.add(revision.get("type"))

    def scan_revisions(self, node: Node) -> RevisionInfo:
        """Record every revision of ``node`` and summarise the amendments."""
        info = RevisionInfo()
        for revision in child_list(node, "revisions"):
            if not isinstance(revision, dict):
                continue
            self._track(revision)
            if revision.get("type") != RevisionKind.REVISION.value:
                continue
            info.absorb(
                RevisionInfo(
                    has_amendment=True,
                    amendment_type=revision.get("revision_type"),
                    latest_date=revision.get("effective_date"),
                )
            )
        return info

    def revision_dates(self) -> List[RevisionDate]:
        entries = [
            RevisionDate(
                effective_date=date,
                display_date=format_display_date(date),
                count=tally.count,
                type=catalog_type(tally.kinds),
            )
            for date, tally in self._dates.items()
        ]
        return sorted(entries, key=lambda entry: entry.effective_date, reverse=True)

    # -- helpers -------------------------------------------------------

    def _found(self, content_type: str) -> None:
        if content_type not in self.content_types_found:
            self.content_types_found.append(content_type)

    def _emit(self, content_type: str, info: RevisionInfo, **fields: Any) -> None:
        fields.setdefault("search_priority", self.config.priority_for(content_type, info.has_amendment))
        document = SearchDocument(
            type=content_type,
            has_amendment=info.has_amendment,
            amendment_type=info.amendment_type,
            latest_amendment_date=info.latest_date,
            **fields,
        )
        self.documents.append(document)
        self._found(content_type)

    def _structural(
        self, content_type: str, node: Node, ancestry: Ancestry, path: str, info: RevisionInfo
    ) -> None:
        numbers = ancestry.numbers()
        dotted = ".".join([ancestry.letter, *numbers])
        url = "/".join(["/code", str(ancestry.division.get("id") or ""), *numbers])
        title = _title(node)
        self._emit(
            content_type,
            info,
            id=str(node.get("id") or ""),
            article_number=dotted,
            title=title,
            text=title,
            snippet=title,
            path=path,
            breadcrumbs=ancestry.titles(),
            url_path=url,
            **ancestry.base_fields(),
        )

    # -- walk ----------------------------------------------------------

    def process_division(self, division: Node) -> TocItem:
        ancestry = Ancestry(division)
        toc = TocItem(
            id=str(division.get("id") or ""),
            type=NodeKind.DIVISION.value,
            number=ancestry.letter,
            title=_title(division),
            level=0,
            children=[],
        )
        info = self.scan_revisions(division)
        if self.config.is_enabled(NodeKind.DIVISION.value):
            self._structural(
                NodeKind.DIVISION.value, division, ancestry, f"Division {ancestry.letter}", info
            )
        toc.has_revisions = info.has_amendment
        for part in child_list(division, "parts"):
            child = self.process_part(ancestry._replace(part=part))
            toc.children.append(child)
            toc.has_revisions = toc.has_revisions or child.has_revisions
        return toc

    def process_part(self, ancestry: Ancestry) -> TocItem:
        part = ancestry.part or {}
        info = self.scan_revisions(part)
        if self.config.is_enabled(NodeKind.PART.value):
            path = f"Division {ancestry.letter} > Part {_number(part)}"
            self._structural(NodeKind.PART.value, part, ancestry, path, info)
        toc = TocItem(
            id=str(part.get("id") or ""),
            type=NodeKind.PART.value,
            number=_number(part),
            title=_title(part),
            level=1,
            has_revisions=info.has_amendment,
            children=[],
        )
        for section in child_list(part, "sections"):
            child = self.process_section(ancestry._replace(section=section))
            toc.children.append(child)
            toc.has_revisions = toc.has_revisions or child.has_revisions
        return toc

    def process_section(self, ancestry: Ancestry) -> TocItem:
        section = ancestry.section or {}
        info = self.scan_revisions(section)
        if self.config.is_enabled(NodeKind.SECTION.value):
            path = (
                f"Division {ancestry.letter} > Part {_number(ancestry.part)}"
                f" > Section {_number(section)}"
            )
            self._structural(NodeKind.SECTION.value, section, ancestry, path, info)
        toc = TocItem(
            id=str(section.get("id") or ""),
            type=NodeKind.SECTION.value,
            number=_number(section),
            title=_title(section),
            level=2,
            has_revisions=info.has_amendment,
            children=[],
        )
        for subsection in child_list(section, "subsections"):
            child = self.process_subsection(ancestry._replace(subsection=subsection))
            toc.children.append(child)
            toc.has_revisions = toc.has_revisions or child.has_revisions
        return toc

    def process_subsection(self, ancestry: Ancestry) -> TocItem:
        subsection = ancestry.subsection or {}
        info = self.scan_revisions(subsection)
        if self.config.is_enabled(NodeKind.SUBSECTION.value):
            path = (
                f"Division {ancestry.letter} > Part {_number(ancestry.part)}"
                f" > Section {_number(ancestry.section)} > Subsection {_number(subsection)}"
            )
            self._structural(NodeKind.SUBSECTION.value, subsection, ancestry, path, info)
        toc = TocItem(
            id=str(subsection.get("id") or ""),
            type=NodeKind.SUBSECTION.value,
            number=_number(subsection),
            title=_title(subsection),
            level=3,
            has_revisions=info.has_amendment,
            children=[],
        )
        for article in child_list(subsection, "articles"):
            child = self.process_article(ancestry, article)
            toc.children.append(child)
            toc.has_revisions = toc.has_revisions or child.has_revisions
        return toc

    def process_article(self, ancestry: Ancestry, article: Node) -> TocItem:
        content = child_list(article, "content")
        info = self.scan_revisions(article)
        item_infos: List[RevisionInfo] = []
        for item in content:
            item_info = self.scan_revisions(item) if isinstance(item, dict) else RevisionInfo()
            item_infos.append(item_info)
            info.absorb(item_info)

        article_number = ".".join([ancestry.letter, *ancestry.numbers(), _number(article)])
        article_url = "/".join(
            ["/code", str(ancestry.division.get("id") or ""), *ancestry.numbers(), _number(article)]
        )
        article_path = (
            f"Division {ancestry.letter} > Part {_number(ancestry.part)}"
            f" > Section {_number(ancestry.section)}"
            f" > {_number(ancestry.subsection)}.{_number(article)}"
        )
        breadcrumbs = [*ancestry.titles(), _title(article)]
        extraction = self.config.text_extraction
        refs = self.config.references

        if self.config.is_enabled(NodeKind.ARTICLE.value):
            text, reference_ids = extract_article_text(content, extraction, refs)
            raw_text = raw_article_text(content, extraction)
            self._emit(
                NodeKind.ARTICLE.value,
                info,
                id=str(article.get("id") or ""),
                article_number=article_number,
                title=_title(article),
                text=text,
                snippet=generate_snippet(text, extraction.snippet_length),
                path=article_path,
                breadcrumbs=breadcrumbs,
                url_path=article_url,
                has_internal_refs=has_internal_refs(raw_text),
                has_external_refs=has_external_refs(raw_text),
                has_term_refs=has_term_refs(raw_text),
                has_tables=has_tables_in_content(content),
                has_figures=has_figures_in_content(content),
                reference_ids=reference_ids if refs.preserve_reference_ids else None,
                **ancestry.base_fields(),
            )

        for item, item_info in zip(content, item_infos):
            kind = NodeKind.of(item)
            if kind not in (NodeKind.TABLE, NodeKind.FIGURE):
                continue
            if not self.config.is_enabled(kind.value):
                continue
            self._attachment(
                kind, item, item_info, ancestry, article, article_number, article_url,
                article_path, breadcrumbs,
            )

        return TocItem(
            id=str(article.get("id") or ""),
            type=NodeKind.ARTICLE.value,
            number=_number(article),
            title=_title(article),
            level=4,
            has_revisions=info.has_amendment,
        )

    def _attachment(
        self,
        kind: NodeKind,
        item: Node,
        info: RevisionInfo,
        ancestry: Ancestry,
        article: Node,
        article_number: str,
        article_url: str,
        article_path: str,
        breadcrumbs: List[str],
    ) -> None:
        """Emit a table or figure record carrying its article's context."""
        label = "Table" if kind is NodeKind.TABLE else "Figure"
        number = _number(item) or "1"
        refs = self.config.references
        title = strip_references(str(item.get("title") or f"{label} {number}"), refs)
        item_id = item.get("id") or f"{article.get('id', '')}.{kind.value}{number}"

        reference_ids: Optional[List[str]] = None
        if kind is NodeKind.TABLE:
            text, ids = extract_table_text(item, self.config.text_extraction, refs)
            snippet = generate_snippet(text, self.config.text_extraction.snippet_length)
            if refs.preserve_reference_ids:
                reference_ids = ids
        else:
            text = normalize_whitespace(title)
            snippet = text

        self._emit(
            kind.value,
            info,
            id=str(item_id),
            article_number=f"{article_number} {label} {number}",
            title=title,
            text=text,
            snippet=snippet,
            path=f"{article_path} > {label} {number}",
            breadcrumbs=[*breadcrumbs, f"{label} {number}"],
            url_path=f"{article_url}#{item.get('id') or item_id}",
            has_tables=kind is NodeKind.TABLE,
            has_figures=kind is NodeKind.FIGURE,
            reference_ids=reference_ids,
            **ancestry.base_fields(),
        )

    # -- front matter and glossary --------------------------------------

    def process_front_matter(self, front_matter: Node) -> Optional[TocItem]:
        preface = front_matter.get("preface")
        if not isinstance(preface, dict):
            return None
        pieces = [
            str(item["content"])
            for item in child_list(preface, "content")
            if isinstance(item, dict) and isinstance(item.get("content"), str)
        ]
        full_text = " ".join(pieces)
        text = normalize_whitespace(strip_references(full_text, self.config.references))
        preface_id = str(preface.get("id") or "preface")
        self._emit(
            NodeKind.ARTICLE.value,
            RevisionInfo(),
            id=preface_id,
            article_number="Preface",
            title="Preface",
            text=text,
            snippet=generate_snippet(text, self.config.text_extraction.snippet_length),
            division_id=FRONT_MATTER_ID,
            division_title="Front Matter",
            path="Front Matter > Preface",
            breadcrumbs=["Front Matter", "Preface"],
            url_path="/preface",
            has_internal_refs=has_internal_refs(full_text),
            has_external_refs=has_external_refs(full_text),
            has_term_refs=has_term_refs(full_text),
            search_priority=self.config.content_type(NodeKind.ARTICLE.value).priority,
        )
        return TocItem(
            id=FRONT_MATTER_ID,
            type=NodeKind.DIVISION.value,
            title="Front Matter",
            level=0,
            children=[
                TocItem(id=preface_id, type=NodeKind.ARTICLE.value, title="Preface", level=1)
            ],
        )

    def process_glossary(self, entries: Iterable[Node]) -> None:
        for entry in entries:
            definition = str(entry.get("definition") or "")
            text = normalize_whitespace(strip_references(definition, self.config.references))
            entry_id = str(entry.get("id") or "")
            self._emit(
                "glossary",
                RevisionInfo(),
                id=entry_id,
                title=str(entry.get("term") or ""),
                text=text,
                snippet=generate_snippet(text, self.config.text_extraction.snippet_length),
                path="Glossary",
                breadcrumbs=["Glossary"],
                url_path=f"/glossary/{entry_id}",
                has_internal_refs=has_internal_refs(definition),
                has_external_refs=has_external_refs(definition),
                has_term_refs=has_term_refs(definition),
            )


def glossary_entries(document: Node) -> List[Node]:
    """Glossary as a list of entries; the source keys entries by id."""
    glossary = document.get("glossary")
    if isinstance(glossary, dict):
        return [
            {"id": entry_id, **entry}
            for entry_id, entry in glossary.items()
            if isinstance(entry, dict)
        ]
    if isinstance(glossary, list):
        return [entry for entry in glossary if isinstance(entry, dict)]
    return []


def summarize_divisions(divisions: Iterable[Node]) -> List[DivisionSummary]:
    return [
        DivisionSummary(
            id=str(division.get("id") or ""),
            letter=str(division.get("letter") or ""),
            title=_title(division),
            parts=[
                PartSummary(id=str(part.get("id") or ""), number=part.get("number"), title=_title(part))
                for part in child_list(division, "parts")
            ],
        )
        for division in divisions
    ]


def _count(documents: List[SearchDocument], content_type: str) -> int:
    return sum(1 for document in documents if document.type == content_type)


def build_statistics(
    documents: List[SearchDocument], revision_dates: List[RevisionDate]
) -> IndexStatistics:
    return IndexStatistics(
        total_documents=len(documents),
        total_articles=_count(documents, "article"),
        total_tables=_count(documents, "table"),
        total_figures=_count(documents, "figure"),
        total_parts=_count(documents, "part"),
        total_sections=_count(documents, "section"),
        total_subsections=_count(documents, "subsection"),
        total_amendments=sum(1 for document in documents if document.has_amendment),
        total_revision_dates=len(revision_dates),
        total_glossary_terms=_count(documents, "glossary"),
    )


def build_search_index(
    document: Node,
    config: Optional[IndexerConfig] = None,
    generated_at: Optional[str] = None,
) -> IndexBuildResult:
    """Walk ``document`` once and return its search records and metadata."""
    builder = SearchIndexBuilder(config)
    table_of_contents: List[TocItem] = []

    front_matter = document.get("front_matter")
    if isinstance(front_matter, dict) and builder.config.is_enabled(NodeKind.ARTICLE.value):
        front_toc = builder.process_front_matter(front_matter)
        if front_toc is not None:
            table_of_contents.append(front_toc)

    divisions = iter_divisions(document)
    for division in divisions:
        table_of_contents.append(builder.process_division(division))

    if builder.config.is_enabled("glossary"):
        entries = glossary_entries(document)
        if entries:
            builder.process_glossary(entries)

    revision_dates = builder.revision_dates()
    metadata = SearchMetadata(
        version=str(document.get("version") or "1.0"),
        generated_at=generated_at or dt.datetime.now(dt.timezone.utc).isoformat(),
        statistics=build_statistics(builder.documents, revision_dates),
        divisions=summarize_divisions(divisions),
        revision_dates=revision_dates,
        table_of_contents=table_of_contents,
        content_types=builder.content_types_found,
    )
    logger.info(
        "Built %s search documents across %s revision dates",
        len(builder.documents),
        len(revision_dates),
    )
    return IndexBuildResult(documents=builder.documents, metadata=metadata)


def main() -> None:
    logging.basicConfig(level=settings.log_level)
    source = settings.source_file_path
    if not source.exists():
        logger.error("Source document %s does not exist.", source)
        return
    result = build_search_index(read_json(source))
    search_dir = settings.version_dir() / "search"
    documents = [document.to_json_dict() for document in result.documents]
    size = write_json(search_dir / "documents.json", documents)
    logger.info("Wrote %s documents (%s bytes) to %s", len(documents), size, search_dir)
    write_json(search_dir / "metadata.json", result.metadata.to_json_dict(), indent=2)


if __name__ == "__main__":
    main()
