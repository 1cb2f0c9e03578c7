"""Generate every static artifact for one code version from the source JSON."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Optional

from buildcode.config import settings
from buildcode.ingestion.chunking import chunk_content, log_chunk_report, write_chunks
from buildcode.ingestion.index_builder import build_search_index
from buildcode.ingestion.navigation import (
    extract_content_types,
    extract_glossary_map,
    extract_navigation_tree,
    extract_quick_access,
)
from buildcode.models.indexer_config import IndexerConfig
from buildcode.models.node import Node
from buildcode.utils.json_io import read_json, write_json

logger = logging.getLogger(__name__)


def generate_assets(
    document: Node, output_dir: Path, config: Optional[IndexerConfig] = None
) -> Dict[str, int]:
    """Write all artifacts under ``output_dir`` and return bytes written per file."""
    sizes: Dict[str, int] = {}

    def emit(relative: str, data: Any, indent: Optional[int] = None) -> None:
        sizes[relative] = write_json(output_dir / relative, data, indent=indent)

    result = build_search_index(document, config)
    by_type = Counter(doc.type for doc in result.documents)
    for content_type, count in sorted(by_type.items()):
        logger.info("Indexed %s %s documents", count, content_type)

    emit("search/documents.json", [doc.to_json_dict() for doc in result.documents])
    emit("search/metadata.json", result.metadata.to_json_dict(), indent=2)

    emit(
        "navigation-tree.json",
        [node.to_json_dict() for node in extract_navigation_tree(document)],
        indent=2,
    )
    amendment_dates = document.get("amendment_dates")
    if not isinstance(amendment_dates, list):
        amendment_dates = [entry.to_json_dict() for entry in result.metadata.revision_dates]
    emit("amendment-dates.json", amendment_dates, indent=2)
    emit("content-types.json", extract_content_types(document), indent=2)
    emit("glossary-map.json", extract_glossary_map(document), indent=2)
    emit(
        "quick-access.json",
        [entry.to_json_dict() for entry in extract_quick_access(document)],
        indent=2,
    )

    for relative, size in sizes.items():
        logger.info("Wrote %s (%.1f KB)", relative, size / 1024)

    chunks = chunk_content(document)
    written = write_chunks(chunks, output_dir)
    logger.info("Wrote %s section chunks under %s", written, output_dir / "content")
    log_chunk_report(chunks)
    sizes["content"] = sum(chunk.size for chunk in chunks)
    return sizes


def main() -> None:
    logging.basicConfig(level=settings.log_level)
    source = settings.source_file_path
    if not source.exists():
        logger.error("Source document %s does not exist.", source)
        return
    document = read_json(source)
    output_dir = settings.version_dir()
    sizes = generate_assets(document, output_dir)
    logger.info(
        "Generated %s artifacts for version %s in %s", len(sizes), settings.code_version, output_dir
    )


if __name__ == "__main__":
    main()
