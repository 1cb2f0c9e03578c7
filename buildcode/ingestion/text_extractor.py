"""Extract clean, bounded searchable text from article and table content."""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional, Tuple

from buildcode.models.indexer_config import ReferenceConfig, TextExtractionConfig
from buildcode.models.node import Node, NodeKind, child_list
from buildcode.parsing.references import extract_reference_ids, strip_references

WHITESPACE_PATTERN = re.compile(r"\s+")
ELLIPSIS = "..."


def normalize_whitespace(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def _dedupe(values: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def _finish(
    texts: List[str], reference_ids: List[str], config: TextExtractionConfig, refs: ReferenceConfig
) -> Tuple[str, List[str]]:
    full_text = " ".join(text for text in texts if text)
    full_text = normalize_whitespace(strip_references(full_text, refs))
    if len(full_text) > config.max_text_length:
        full_text = full_text[: config.max_text_length]
    return full_text, _dedupe(reference_ids)


def extract_clause_text(clauses: Optional[List[Node]], config: TextExtractionConfig) -> str:
    """Clause text, recursing through ``subclauses`` and nested ``clauses``."""
    if not clauses or not config.include_clauses:
        return ""
    texts: List[str] = []
    for clause in clauses:
        if not isinstance(clause, dict):
            continue
        if clause.get("text"):
            texts.append(str(clause["text"]))
        if config.include_subclauses:
            texts.append(extract_clause_text(child_list(clause, "subclauses"), config))
            texts.append(extract_clause_text(child_list(clause, "clauses"), config))
    return " ".join(text for text in texts if text)


def extract_article_text(
    content: Optional[List[Node]], config: TextExtractionConfig, refs: ReferenceConfig
) -> Tuple[str, List[str]]:
    """Return ``(text, reference_ids)`` for the sentences of an article."""
    if not content:
        return "", []
    texts: List[str] = []
    reference_ids: List[str] = []
    for item in content:
        if NodeKind.of(item) is not NodeKind.SENTENCE or not config.include_sentences:
            continue
        if item.get("text"):
            texts.append(str(item["text"]))
            reference_ids.extend(extract_reference_ids(str(item["text"]), refs))
        clause_text = extract_clause_text(child_list(item, "clauses"), config)
        if clause_text:
            texts.append(clause_text)
            reference_ids.extend(extract_reference_ids(clause_text, refs))
    return _finish(texts, reference_ids, config, refs)


def raw_article_text(content: Optional[List[Node]], config: TextExtractionConfig) -> str:
    """Unstripped text of every content item and its clauses, used for reference flags.

    Unlike extract_article_text this does not skip non-sentence items, so
    references in notes still set the flags.
    """
    texts: List[str] = []
    for item in content or []:
        if item.get("text"):
            texts.append(str(item["text"]))
        texts.append(extract_clause_text(child_list(item, "clauses"), config))
    return " ".join(text for text in texts if text)


def _cell_text(cell: Any) -> str:
    if isinstance(cell, str):
        return cell
    if isinstance(cell, dict):
        value = cell.get("text") or cell.get("content") or ""
        return value if isinstance(value, str) else ""
    return ""


def _row_cells(row: Any) -> List[Any]:
    if isinstance(row, dict):
        return child_list(row, "cells")
    if isinstance(row, list):
        return row
    return []


def extract_table_text(
    table: Node, config: TextExtractionConfig, refs: ReferenceConfig
) -> Tuple[str, List[str]]:
    """Title, caption, headers and a sample of body rows."""
    pieces: List[str] = []
    for field in ("title", "caption"):
        if isinstance(table.get(field), str):
            pieces.append(table[field])

    structure = table.get("structure") if isinstance(table.get("structure"), dict) else {}
    for header in child_list(structure, "headers"):
        pieces.append(_cell_text(header))
    for row in child_list(structure, "header_rows"):
        pieces.extend(_cell_text(cell) for cell in _row_cells(row))

    rows = child_list(structure, "body_rows") or child_list(structure, "rows")
    for row in rows[: config.table_sample_rows]:
        pieces.extend(_cell_text(cell) for cell in _row_cells(row))

    pieces = [piece for piece in pieces if piece]
    reference_ids: List[str] = []
    for piece in pieces:
        reference_ids.extend(extract_reference_ids(piece, refs))
    return _finish(pieces, reference_ids, config, refs)


def generate_snippet(text: str, length: int) -> str:
    """Shorten ``text`` to ``length`` characters, preferring a word boundary."""
    if not text:
        return ""
    cleaned = normalize_whitespace(text)
    if len(cleaned) <= length:
        return cleaned
    truncated = cleaned[:length]
    last_space = truncated.rfind(" ")
    if last_space > length * 0.7:
        return truncated[:last_space] + ELLIPSIS
    return truncated + ELLIPSIS


def has_tables_in_content(content: Optional[List[Node]]) -> bool:
    return any(NodeKind.of(item) is NodeKind.TABLE for item in content or [])


def has_figures_in_content(content: Optional[List[Node]]) -> bool:
    return any(NodeKind.of(item) is NodeKind.FIGURE for item in content or [])


def has_internal_refs(text: str) -> bool:
    return "[REF:internal:" in text


def has_external_refs(text: str) -> bool:
    return "[REF:external:" in text or "[REF:standard:" in text


def has_term_refs(text: str) -> bool:
    return "[REF:term:" in text
