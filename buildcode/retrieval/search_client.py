"""In-memory Tantivy index over the flat search documents."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Union

import tantivy

from buildcode.config import settings
from buildcode.exceptions import SearchIndexNotInitializedError
from buildcode.models.retrieval import Highlight, SearchOptions, SearchResult
from buildcode.models.search import (
    DivisionSummary,
    RevisionDate,
    SearchDocument,
    SearchMetadata,
    TocItem,
)
from buildcode.utils.json_io import read_json

if TYPE_CHECKING:
    from buildcode.retrieval.content_loader import ContentLoader

logger = logging.getLogger(__name__)

FIELD_WEIGHTS: Dict[str, float] = {
    "article_number": 10.0,
    "title": 5.0,
    "path": 2.0,
    "text": 1.0,
}
UNKNOWN_FIELD_WEIGHT = 0.5
EXACT_MATCH_SCORE = 1000.0
MIN_QUERY_LENGTH = 2

WORD_PATTERN = re.compile(r"[^\W_]+")


def field_weight(field: str) -> float:
    return FIELD_WEIGHTS.get(field, UNKNOWN_FIELD_WEIGHT)


def article_number_pattern(divisions: str) -> re.Pattern[str]:
    return re.compile(rf"^[{divisions}]\.\d+\.\d+\.\d+\.\d+$", re.IGNORECASE)


def build_schema() -> tantivy.Schema:
    builder = tantivy.SchemaBuilder()
    builder.add_unsigned_field("ord", stored=True, indexed=True)
    # Article numbers match whole tokens only; the other fields match word prefixes.
    builder.add_text_field("article_number", tokenizer_name="whitespace")
    builder.add_text_field("title", tokenizer_name="default")
    builder.add_text_field("path", tokenizer_name="default")
    builder.add_text_field("text", tokenizer_name="default", index_option="freq")
    return builder.build()


def _mark_first(text: str, pattern: re.Pattern[str]) -> str:
    return pattern.sub(lambda match: f"<mark>{match.group(0)}</mark>", text, count=1)


class SearchClient:
    """Ranked, filtered search over one loaded document set."""

    def __init__(self, article_divisions: Optional[str] = None):
        self.article_pattern = article_number_pattern(
            article_divisions or settings.article_number_divisions
        )
        self._schema = build_schema()
        self._index: Optional[tantivy.Index] = None
        self._searcher: Optional[tantivy.Searcher] = None
        self._documents: List[SearchDocument] = []
        self._by_id: Dict[str, SearchDocument] = {}
        self._metadata: Optional[SearchMetadata] = None

    # -- construction ----------------------------------------------------

    def build(
        self,
        documents: Iterable[Union[SearchDocument, dict]],
        metadata: Union[SearchMetadata, dict, None] = None,
    ) -> None:
        """(Re)build the index from scratch; the same input yields the same index."""
        docs = [
            doc if isinstance(doc, SearchDocument) else SearchDocument.model_validate(doc)
            for doc in documents
        ]
        if metadata is not None and not isinstance(metadata, SearchMetadata):
            metadata = SearchMetadata.model_validate(metadata)

        index = tantivy.Index(self._schema)
        writer = index.writer()
        for ordinal, doc in enumerate(docs):
            record = tantivy.Document()
            record.add_unsigned("ord", ordinal)
            record.add_text("article_number", doc.article_number.lower())
            record.add_text("title", doc.title)
            record.add_text("path", doc.path)
            record.add_text("text", doc.text)
            writer.add_document(record)
        writer.commit()
        writer.wait_merging_threads()
        index.reload()

        self._index = index
        self._searcher = index.searcher()
        self._documents = docs
        self._by_id = {doc.id: doc for doc in docs}
        self._metadata = metadata
        logger.info("Indexed %s search documents", len(docs))

    @classmethod
    def from_directory(cls, search_dir: Path, **kwargs) -> "SearchClient":
        """Load ``documents.json`` and ``metadata.json`` from ``search_dir``."""
        client = cls(**kwargs)
        metadata_path = search_dir / "metadata.json"
        metadata = read_json(metadata_path) if metadata_path.exists() else None
        client.build(read_json(search_dir / "documents.json"), metadata)
        return client

    async def initialize(self, loader: "ContentLoader", version: Optional[str] = None) -> None:
        """Fetch the search artifacts through ``loader`` unless already built."""
        if self.is_initialized:
            return
        documents = await loader.load_documents(version)
        metadata = await loader.load_metadata(version)
        self.build(documents, metadata)

    # -- accessors -------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._searcher is not None

    @property
    def document_count(self) -> int:
        return len(self._documents)

    @property
    def metadata(self) -> Optional[SearchMetadata]:
        return self._metadata

    @property
    def table_of_contents(self) -> List[TocItem]:
        return self._metadata.table_of_contents if self._metadata else []

    @property
    def revision_dates(self) -> List[RevisionDate]:
        return self._metadata.revision_dates if self._metadata else []

    @property
    def divisions(self) -> List[DivisionSummary]:
        return self._metadata.divisions if self._metadata else []

    @property
    def content_types(self) -> List[str]:
        return self._metadata.content_types if self._metadata else []

    def get_document(self, doc_id: str) -> Optional[SearchDocument]:
        return self._by_id.get(doc_id)

    # -- querying --------------------------------------------------------

    def _field_query(self, field: str, query: str) -> Optional[tantivy.Query]:
        if field == "article_number":
            clauses = [
                tantivy.Query.term_query(self._schema, field, token)
                for token in query.lower().split()
            ]
        else:
            clauses = [
                tantivy.Query.regex_query(self._schema, field, f"{re.escape(token)}.*")
                for token in WORD_PATTERN.findall(query.lower())
            ]
        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        return tantivy.Query.boolean_query([(tantivy.Occur.Must, clause) for clause in clauses])

    def _field_hits(self, field: str, query: str) -> List[int]:
        field_query = self._field_query(field, query)
        if field_query is None or not self._documents:
            return []
        result = self._searcher.search(field_query, limit=len(self._documents))
        return [self._searcher.doc(address)["ord"][0] for _score, address in result.hits]

    def _raw_scores(self, query: str) -> Dict[int, float]:
        scores: Dict[int, float] = {}
        for field in FIELD_WEIGHTS:
            for ordinal in self._field_hits(field, query):
                scores[ordinal] = scores.get(ordinal, 0.0) + field_weight(field)
        return scores

    @staticmethod
    def _passes(doc: SearchDocument, options: SearchOptions) -> bool:
        if options.division_filter and doc.division_letter != options.division_filter:
            return False
        if options.part_filter is not None and doc.part_number != str(options.part_filter):
            return False
        if options.section_filter is not None and doc.section_number != str(options.section_filter):
            return False
        if options.amendments_only and not doc.has_amendment:
            return False
        if options.tables_only and not doc.has_tables:
            return False
        if options.figures_only and not doc.has_figures:
            return False
        if options.content_types and doc.type not in options.content_types:
            return False
        if (
            options.effective_date
            and doc.latest_amendment_date
            and doc.latest_amendment_date != options.effective_date
        ):
            return False
        return True

    @staticmethod
    def final_score(doc: SearchDocument, raw_score: float, query: str) -> float:
        score = raw_score * (doc.search_priority / 5)
        if doc.has_amendment:
            score *= 1.5
        if query.lower() in doc.title.lower():
            score *= 2
        return score

    def highlights(self, doc: SearchDocument, query: str) -> List[Highlight]:
        pattern = re.compile(re.escape(query), re.IGNORECASE)
        found: List[Highlight] = []
        if pattern.search(doc.title):
            found.append(Highlight(field="title", text=_mark_first(doc.title, pattern)))

        match = pattern.search(doc.text)
        if match:
            context = settings.highlight_context
            start = max(0, match.start() - context)
            end = min(len(doc.text), match.end() + context)
            window = _mark_first(doc.text[start:end], pattern)
            prefix = "..." if start > 0 else ""
            suffix = "..." if end < len(doc.text) else ""
            found.append(Highlight(field="text", text=f"{prefix}{window}{suffix}"))
        return found

    def _search_by_article_number(self, query: str) -> List[SearchResult]:
        wanted = query.upper()
        for doc in self._documents:
            if doc.article_number.upper() == wanted:
                return [SearchResult(document=doc, score=EXACT_MATCH_SCORE)]
        return []

    def search(self, query: str, options: Optional[SearchOptions] = None) -> List[SearchResult]:
        if not self.is_initialized:
            raise SearchIndexNotInitializedError()
        options = options or SearchOptions()
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return []
        query = query.strip()

        if self.article_pattern.match(query):
            return self._search_by_article_number(query)

        ranked = []
        for ordinal, raw_score in self._raw_scores(query).items():
            doc = self._documents[ordinal]
            if not self._passes(doc, options):
                continue
            ranked.append((self.final_score(doc, raw_score, query), ordinal))
        ranked.sort(key=lambda item: (-item[0], item[1]))

        page = ranked[options.offset : options.offset + options.limit]
        results = []
        for score, ordinal in page:
            doc = self._documents[ordinal]
            results.append(
                SearchResult(document=doc, score=score, highlights=self.highlights(doc, query))
            )
        logger.debug("Query %r matched %s documents", query, len(ranked))
        return results

    def get_suggestions(self, query: str, limit: int = 5) -> List[str]:
        """Distinct titles of the best matches, shorter titles first on ties."""
        if len(query.strip()) < MIN_QUERY_LENGTH:
            return []
        results = self.search(query, SearchOptions(limit=limit * 3))
        results.sort(key=lambda result: (-result.score, len(result.document.title)))
        suggestions: List[str] = []
        for result in results:
            title = result.document.title.strip()
            if not title or title in suggestions:
                continue
            suggestions.append(title)
            if len(suggestions) >= limit:
                break
        return suggestions
