"""Inline citation tags of the form ``[REF:type:id[:format]]displayText``.

Examples::

    [REF:term:bldng]building
    [REF:internal:nbc.divB.part3.sect2.subsect10:long]
    [REF:standard:CSA-A23.3]

Tags that do not fit the grammar are left alone; nothing here raises on
malformed input.
"""

from __future__ import annotations

import re
from typing import List

from buildcode.models.indexer_config import ReferenceConfig
from buildcode.models.search import ExtractedReference

REFERENCE_PATTERN = re.compile(
    r"\[REF:(?P<type>term|internal|external|standard|functional-statement)"
    r":(?P<id>[^\]:]+)(?::(?P<format>[^\]]+))?\](?P<display>\w*)"
)


def _to_reference(match: re.Match[str]) -> ExtractedReference:
    return ExtractedReference(
        type=match.group("type"),
        id=match.group("id"),
        display_text=match.group("display") or "",
        format=match.group("format"),
        full_match=match.group(0),
    )


def extract_references(text: str) -> List[ExtractedReference]:
    if not text:
        return []
    return [_to_reference(match) for match in REFERENCE_PATTERN.finditer(text)]


def strip_references(text: str, config: ReferenceConfig) -> str:
    """Replace configured tags with their display text; other tags stay verbatim."""
    if not text or not config.strip_from_search_text:
        return text

    def replace(match: re.Match[str]) -> str:
        if match.group("type") not in config.process_types:
            return match.group(0)
        return match.group("display") or ""

    return REFERENCE_PATTERN.sub(replace, text)


def extract_reference_ids(text: str, config: ReferenceConfig) -> List[str]:
    """Return deduplicated ``type:id`` keys, in order of first appearance."""
    if not config.preserve_reference_ids:
        return []
    seen: List[str] = []
    for ref in extract_references(text):
        if ref.type not in config.process_types:
            continue
        key = f"{ref.type}:{ref.id}"
        if key not in seen:
            seen.append(key)
    return seen
