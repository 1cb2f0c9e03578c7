"""Collapse time-stamped revision overlays to the text valid on a given date.

Every node may carry a ``revisions`` list. For a target date the applicable
revision is the most recent one effective on or before that date, falling
back to the earliest revision when none qualifies, or the most recent
overall when no date is given. Its payload is overlaid on the node (never
replacing ``id`` or ``type``) and the children are resolved recursively
according to the node kind. Deleted nodes resolve to ``None`` and are
dropped from their parent's collections.

All functions here are pure: inputs are never mutated.
"""

from __future__ import annotations

import datetime as dt
from typing import Callable, Dict, Iterable, List, Optional, Union

from buildcode.models.node import (
    REVISION_META_FIELDS,
    Node,
    NodeKind,
    Revision,
    child_list,
)

TargetDate = Union[str, dt.date, None]

_ATTACHMENT_FIELDS = ("tables", "figures", "equations")


def normalize_target_date(target_date: TargetDate) -> Optional[str]:
    if target_date is None or target_date == "":
        return None
    if isinstance(target_date, dt.date):
        return target_date.isoformat()
    return str(target_date)


def applicable_revision(
    revisions: Optional[Iterable[Revision]], target_date: TargetDate = None
) -> Optional[Revision]:
    """Pick the revision that governs a node on ``target_date``."""
    ordered = sorted(
        (rev for rev in revisions or [] if isinstance(rev, dict)),
        key=lambda rev: rev.get("effective_date") or "",
        reverse=True,
    )
    if not ordered:
        return None
    target = normalize_target_date(target_date)
    if target is None:
        return ordered[0]
    for revision in ordered:
        if (revision.get("effective_date") or "") <= target:
            return revision
    return ordered[-1]


def is_deleted(revision: Revision) -> bool:
    return bool(revision.get("deleted")) or revision.get("revision_type") == "delete"


def apply_revision(node: Node, target_date: Optional[str]) -> Optional[Node]:
    """Shallow-merge the applicable revision payload onto ``node``."""
    revisions = node.get("revisions")
    revision = applicable_revision(revisions if isinstance(revisions, list) else None, target_date)
    if revision is None:
        return dict(node)
    if is_deleted(revision):
        return None

    payload = {key: value for key, value in revision.items() if key not in REVISION_META_FIELDS}
    merged = {**node, **payload}
    for key in ("id", "type"):
        if key in node:
            merged[key] = node[key]
        else:
            merged.pop(key, None)
    return merged


def _resolve_all(items: Iterable[Node], target_date: Optional[str]) -> List[Node]:
    resolved: List[Node] = []
    for item in items:
        if not isinstance(item, dict):
            resolved.append(item)
            continue
        result = _resolve(item, target_date)
        if result is not None:
            resolved.append(result)
    return resolved


def _nested_source(node: Node, primary_field: Optional[str]) -> List[Node]:
    """Children of a sentence-like node: ``content`` wins over the legacy fields."""
    if isinstance(node.get("content"), list):
        return node["content"]
    items: List[Node] = list(child_list(node, primary_field)) if primary_field else []
    for field in _ATTACHMENT_FIELDS:
        items.extend(child_list(node, field))
    return items


def _sentence_like(primary_field: Optional[str]) -> Callable[[Node, Optional[str]], Optional[Node]]:
    def resolve(node: Node, target_date: Optional[str]) -> Optional[Node]:
        resolved = apply_revision(node, target_date)
        if resolved is None:
            return None
        nested = _resolve_all(_nested_source(resolved, primary_field), target_date)
        if nested:
            resolved["content"] = nested
        elif "content" in resolved:
            resolved["content"] = []
        return resolved

    return resolve


def _container(children_field: str) -> Callable[[Node, Optional[str]], Optional[Node]]:
    def resolve(node: Node, target_date: Optional[str]) -> Optional[Node]:
        resolved = apply_revision(node, target_date)
        if resolved is None:
            return None
        if isinstance(resolved.get(children_field), list):
            resolved[children_field] = _resolve_all(resolved[children_field], target_date)
        return resolved

    return resolve


def _resolve_rows(rows: List[Node], target_date: Optional[str]) -> List[Node]:
    resolved_rows: List[Node] = []
    for row in rows:
        if not isinstance(row, dict):
            resolved_rows.append(row)
            continue
        resolved_row = apply_revision(row, target_date)
        if resolved_row is None:
            continue
        if isinstance(resolved_row.get("cells"), list):
            cells = []
            for cell in resolved_row["cells"]:
                if not isinstance(cell, dict):
                    cells.append(cell)
                    continue
                resolved_cell = apply_revision(cell, target_date)
                if resolved_cell is not None:
                    cells.append(resolved_cell)
            resolved_row["cells"] = cells
        resolved_rows.append(resolved_row)
    return resolved_rows


def _resolve_table(node: Node, target_date: Optional[str]) -> Optional[Node]:
    resolved = apply_revision(node, target_date)
    if resolved is None:
        return None
    structure = resolved.get("structure")
    if isinstance(structure, dict):
        structure = dict(structure)
        for field in ("header_rows", "body_rows"):
            if isinstance(structure.get(field), list):
                structure[field] = _resolve_rows(structure[field], target_date)
        resolved["structure"] = structure
    return resolved


def _resolve_leaf(node: Node, target_date: Optional[str]) -> Optional[Node]:
    return apply_revision(node, target_date)


_RESOLVERS: Dict[NodeKind, Callable[[Node, Optional[str]], Optional[Node]]] = {
    NodeKind.DIVISION: _container("parts"),
    NodeKind.PART: _container("sections"),
    NodeKind.SECTION: _container("subsections"),
    NodeKind.SUBSECTION: _container("articles"),
    NodeKind.ARTICLE: _container("content"),
    NodeKind.SENTENCE: _sentence_like("clauses"),
    NodeKind.CLAUSE: _sentence_like("subclauses"),
    NodeKind.SUBCLAUSE: _sentence_like(None),
    NodeKind.TABLE: _resolve_table,
    NodeKind.FIGURE: _resolve_leaf,
    NodeKind.NOTE: _resolve_leaf,
    NodeKind.EQUATION: _resolve_leaf,
}

_LETTER_NUMBERED = {NodeKind.CLAUSE, NodeKind.SUBCLAUSE}


def _stringify_number(node: Node, kind: Optional[NodeKind]) -> Node:
    number = node.get("number")
    if number is None and kind in _LETTER_NUMBERED:
        number = node.get("letter")
    if number is not None:
        node["number"] = str(number)
    return node


def _resolve(node: Node, target_date: Optional[str]) -> Optional[Node]:
    kind = NodeKind.of(node)
    resolver = _RESOLVERS.get(kind, _resolve_leaf) if kind else _resolve_leaf
    resolved = resolver(node, target_date)
    if resolved is None:
        return None
    return _stringify_number(resolved, kind)


def resolve_node(node: Node, target_date: TargetDate = None) -> Optional[Node]:
    """Resolve ``node`` and its subtree as of ``target_date``; None if deleted."""
    return _resolve(node, normalize_target_date(target_date))


def resolve_document(document: Node, target_date: TargetDate = None) -> Node:
    """Resolve every division of a whole document."""
    target = normalize_target_date(target_date)
    resolved = dict(document)
    if isinstance(document.get("divisions"), list):
        resolved["divisions"] = _resolve_all(document["divisions"], target)
    elif isinstance(document.get("volumes"), list):
        resolved["volumes"] = [
            {**volume, "divisions": _resolve_all(child_list(volume, "divisions"), target)}
            for volume in document["volumes"]
        ]
    return resolved


__all__ = [
    "applicable_revision",
    "apply_revision",
    "is_deleted",
    "normalize_target_date",
    "resolve_document",
    "resolve_node",
]
