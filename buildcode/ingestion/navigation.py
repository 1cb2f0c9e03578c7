"""Navigation tree, glossary map, quick-access list and content-type scan."""

from __future__ import annotations

from typing import Dict, List, Set

from buildcode.ingestion.index_builder import glossary_entries
from buildcode.models.navigation import NavigationNode, QuickAccessEntry
from buildcode.models.node import Node, NodeKind, child_list, iter_divisions

_NESTED_FIELDS = ("content", "clauses", "subclauses", "tables", "figures")


def _code_path(*segments: object) -> str:
    return "/".join(["/code", *(str(segment) for segment in segments)])


def extract_navigation_tree(document: Node) -> List[NavigationNode]:
    tree: List[NavigationNode] = []
    for division in iter_divisions(document):
        division_id = division.get("id", "")
        division_node = NavigationNode(
            id=division_id,
            type=NodeKind.DIVISION.value,
            title=division.get("title", ""),
            path=_code_path(division_id),
            children=[],
        )
        for part in child_list(division, "parts"):
            part_no = part.get("number", "")
            part_node = NavigationNode(
                id=part.get("id", ""),
                type=NodeKind.PART.value,
                number=part_no,
                title=part.get("title", ""),
                path=_code_path(division_id, part_no),
                children=[],
            )
            for section in child_list(part, "sections"):
                section_no = section.get("number", "")
                section_node = NavigationNode(
                    id=section.get("id", ""),
                    type=NodeKind.SECTION.value,
                    number=section_no,
                    title=section.get("title", ""),
                    path=_code_path(division_id, part_no, section_no),
                    children=[],
                )
                for subsection in child_list(section, "subsections"):
                    subsection_no = subsection.get("number", "")
                    subsection_node = NavigationNode(
                        id=subsection.get("id", ""),
                        type=NodeKind.SUBSECTION.value,
                        number=subsection_no,
                        title=subsection.get("title", ""),
                        path=_code_path(division_id, part_no, section_no, subsection_no),
                        children=[
                            NavigationNode(
                                id=article.get("id", ""),
                                type=NodeKind.ARTICLE.value,
                                number=article.get("number"),
                                title=article.get("title", ""),
                                path=_code_path(
                                    division_id,
                                    part_no,
                                    section_no,
                                    subsection_no,
                                    article.get("number", ""),
                                ),
                            )
                            for article in child_list(subsection, "articles")
                        ],
                    )
                    section_node.children.append(subsection_node)
                part_node.children.append(section_node)
            division_node.children.append(part_node)
        tree.append(division_node)
    return tree


def extract_glossary_map(document: Node) -> Dict[str, Node]:
    """Lower-cased term -> entry, for case-insensitive lookups."""
    glossary: Dict[str, Node] = {}
    for entry in glossary_entries(document):
        term = entry.get("term")
        if isinstance(term, str) and term:
            glossary[term.lower()] = entry
    return glossary


def extract_quick_access(document: Node) -> List[QuickAccessEntry]:
    """The first section of every part."""
    entries: List[QuickAccessEntry] = []
    for division in iter_divisions(document):
        for part in child_list(division, "parts"):
            sections = child_list(part, "sections")
            if not sections:
                continue
            section = sections[0]
            entries.append(
                QuickAccessEntry(
                    id=section.get("id", ""),
                    title=f"{part.get('title', '')} - {section.get('title', '')}",
                    path=_code_path(division.get("id", ""), part.get("number", ""), section.get("number", "")),
                    description=(
                        f"{division.get('title', '')}, Part {part.get('number', '')},"
                        f" Section {section.get('number', '')}"
                    ),
                )
            )
    return entries


def _is_application_note(note: Node) -> bool:
    title = note.get("note_title") or note.get("title") or ""
    return isinstance(title, str) and "application" in title.lower()


def _scan(nodes: List[Node], found: Set[str]) -> None:
    for node in nodes:
        kind = NodeKind.of(node)
        if kind is NodeKind.TABLE:
            found.add("table")
        elif kind is NodeKind.FIGURE:
            found.add("figure")
        elif kind is NodeKind.NOTE:
            found.add("note")
            if _is_application_note(node):
                found.add("application-note")
        if isinstance(node, dict):
            for field in _NESTED_FIELDS:
                _scan(child_list(node, field), found)


def extract_content_types(document: Node) -> List[str]:
    """Content types present in the document; ``article`` is always listed."""
    found: Set[str] = set()
    for division in iter_divisions(document):
        for part in child_list(division, "parts"):
            for section in child_list(part, "sections"):
                for subsection in child_list(section, "subsections"):
                    for article in child_list(subsection, "articles"):
                        notes = child_list(article, "notes")
                        if notes:
                            found.add("note")
                            if any(_is_application_note(note) for note in notes if isinstance(note, dict)):
                                found.add("application-note")
                        _scan(child_list(article, "content"), found)
    ordered = ["article", "table", "figure", "note", "application-note"]
    return [name for name in ordered if name == "article" or name in found]
