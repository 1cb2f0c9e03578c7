"""Node kinds of the hierarchical code document.

Source nodes stay plain JSON dictionaries so that revision payloads can be
overlaid field by field; :class:`NodeKind` is the closed set of ``type`` tags
the resolver and extractor dispatch on.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

Node = Dict[str, Any]
Revision = Dict[str, Any]


class NodeKind(str, Enum):
    DIVISION = "division"
    PART = "part"
    SECTION = "section"
    SUBSECTION = "subsection"
    ARTICLE = "article"
    SENTENCE = "sentence"
    CLAUSE = "clause"
    SUBCLAUSE = "subclause"
    TABLE = "table"
    FIGURE = "figure"
    NOTE = "note"
    EQUATION = "equation"

    @classmethod
    def of(cls, node: Node) -> Optional["NodeKind"]:
        """Return the kind of ``node`` or None for an unrecognised tag."""
        if not isinstance(node, dict):
            return None
        try:
            return cls(node.get("type"))
        except ValueError:
            return None


class RevisionKind(str, Enum):
    ORIGINAL = "original"
    REVISION = "revision"


# Bookkeeping keys of a revision record; never copied onto the resolved node.
REVISION_META_FIELDS = frozenset(
    {
        "type",
        "effective_date",
        "revision_id",
        "revision_type",
        "sequence",
        "status",
        "change_summary",
        "note",
        "deleted",
    }
)


def child_list(node: Node, field: str) -> List[Node]:
    value = node.get(field)
    return value if isinstance(value, list) else []


def iter_divisions(document: Node) -> List[Node]:
    """Divisions live at the top level or are grouped under volumes."""
    if isinstance(document.get("divisions"), list):
        return document["divisions"]
    divisions: List[Node] = []
    for volume in child_list(document, "volumes"):
        divisions.extend(child_list(volume, "divisions"))
    return divisions
