"""Split the document into one JSON file per section for on-demand loading."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple

from buildcode.config import settings
from buildcode.models.chunk import ChunkStats, ContentChunk
from buildcode.models.node import Node, child_list, iter_divisions
from buildcode.utils.json_io import byte_size, read_json, write_json

logger = logging.getLogger(__name__)

CHUNK_PATH_PATTERN = re.compile(
    r"^content/(?P<division>[^/]+)/part-(?P<part>[^/]+)/section-(?P<section>[^/]+)\.json$"
)


def chunk_path(division_id: str, part_number: object, section_number: object) -> str:
    """``content/{division}/part-{n}/section-{m}.json`` with dots turned into hyphens."""
    division = str(division_id).lower().replace(".", "-")
    section = str(section_number).replace(".", "-")
    return f"content/{division}/part-{part_number}/section-{section}.json"


def parse_chunk_path(path: str) -> Tuple[str, str, str]:
    """Inverse of :func:`chunk_path`; section hyphens are read back as dots."""
    match = CHUNK_PATH_PATTERN.match(path)
    if not match:
        raise ValueError(f"Not a content chunk path: {path}")
    return match.group("division"), match.group("part"), match.group("section").replace("-", ".")


def iter_sections(document: Node) -> Iterator[Tuple[Node, Node, Node]]:
    for division in iter_divisions(document):
        for part in child_list(division, "parts"):
            for section in child_list(part, "sections"):
                yield division, part, section


def chunk_content(document: Node) -> List[ContentChunk]:
    """One chunk per section; ``data`` is the section exactly as in the source."""
    chunks: List[ContentChunk] = []
    for division, part, section in iter_sections(document):
        path = chunk_path(division.get("id", ""), part.get("number", ""), section.get("number", ""))
        chunks.append(ContentChunk(path=path, data=section, size=byte_size(section)))
    return chunks


def is_optimal_chunk_size(chunk: ContentChunk) -> bool:
    return settings.chunk_min_bytes <= chunk.size <= settings.chunk_max_bytes


def get_chunk_stats(chunks: List[ContentChunk]) -> ChunkStats:
    if not chunks:
        return ChunkStats()
    sizes = [chunk.size for chunk in chunks]
    return ChunkStats(
        total_chunks=len(sizes),
        total_size=sum(sizes),
        average_size=sum(sizes) / len(sizes),
        min_size=min(sizes),
        max_size=max(sizes),
    )


def write_chunks(chunks: Iterable[ContentChunk], output_dir: Path) -> int:
    count = 0
    for count, chunk in enumerate(chunks, start=1):
        write_json(output_dir / chunk.path, chunk.data)
    return count


def log_chunk_report(chunks: List[ContentChunk]) -> ChunkStats:
    stats = get_chunk_stats(chunks)
    logger.info(
        "Chunks: %s total, %s bytes, avg %.0f, min %s, max %s",
        stats.total_chunks,
        stats.total_size,
        stats.average_size,
        stats.min_size,
        stats.max_size,
    )
    for chunk in chunks:
        if not is_optimal_chunk_size(chunk):
            logger.warning("Chunk %s is outside the target size band (%s bytes)", chunk.path, chunk.size)
    return stats


def main() -> None:
    logging.basicConfig(level=settings.log_level)
    source = settings.source_file_path
    if not source.exists():
        logger.error("Source document %s does not exist.", source)
        return
    chunks = chunk_content(read_json(source))
    total = write_chunks(chunks, settings.version_dir())
    logger.info("Wrote %s section chunks to %s", total, settings.version_dir())
    log_chunk_report(chunks)


if __name__ == "__main__":
    main()
