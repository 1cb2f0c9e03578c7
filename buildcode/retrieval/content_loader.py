"""Load section chunks and search artifacts through a fetcher, with a bounded cache."""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from typing import Any, List, NamedTuple, Optional

from buildcode.config import settings
from buildcode.exceptions import (
    ContentLoadError,
    ContentNotFoundError,
    ContentValidationError,
    FetchCancelledError,
    NodeNotFoundError,
)
from buildcode.ingestion.chunking import chunk_path
from buildcode.models.node import Node, child_list
from buildcode.retrieval.fetcher import CancellationToken, Fetcher, FetchResponse, ViewSlot

logger = logging.getLogger(__name__)


def documents_path(version: str) -> str:
    return f"{version}/search/documents.json"


def metadata_path(version: str) -> str:
    return f"{version}/search/metadata.json"


def navigation_tree_path(version: str) -> str:
    return f"{version}/navigation-tree.json"


def section_path(version: str, division: str, part: str, section: str) -> str:
    return f"{version}/{chunk_path(division, part, section)}"


def missing_section_fields(content: Any) -> List[str]:
    if not isinstance(content, dict):
        return ["id", "reference", "title"]
    missing = []
    if not content.get("id"):
        missing.append("id")
    if not content.get("reference") and content.get("number") in (None, ""):
        missing.append("reference")
    if not content.get("title"):
        missing.append("title")
    return missing


class Subtree(NamedTuple):
    content: Node
    render_level: str
    context: Optional[Node]


def extract_subtree(
    section: Node, subsection_id: Optional[str] = None, article_id: Optional[str] = None
) -> Subtree:
    """Narrow a loaded section to a subsection or article view."""
    if not subsection_id:
        return Subtree(section, "section", None)
    subsection = next(
        (sub for sub in child_list(section, "subsections") if sub.get("id") == subsection_id), None
    )
    if subsection is None:
        raise NodeNotFoundError("subsection", subsection_id)
    if not article_id:
        return Subtree(subsection, "subsection", section)
    article = next(
        (art for art in child_list(subsection, "articles") if art.get("id") == article_id), None
    )
    if article is None:
        raise NodeNotFoundError("article", article_id)
    return Subtree(article, "article", section)


class ContentLoader:
    """Fetch JSON artifacts by version; section chunks are cached LRU."""

    def __init__(self, fetcher: Fetcher, cache_size: Optional[int] = None):
        self.fetcher = fetcher
        self.cache_size = cache_size if cache_size is not None else settings.content_cache_size
        self._cache: "OrderedDict[str, Node]" = OrderedDict()

    # -- cache -----------------------------------------------------------

    @staticmethod
    def cache_key(version: str, division: str, part: str, section: str) -> str:
        return f"{version}/{division}/{part}/{section}"

    def cached(self, key: str) -> Optional[Node]:
        content = self._cache.get(key)
        if content is not None:
            self._cache.move_to_end(key)
        return content

    def _remember(self, key: str, content: Node) -> None:
        if self.cache_size <= 0:
            return
        self._cache[key] = content
        self._cache.move_to_end(key)
        while len(self._cache) > self.cache_size:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug("Evicted %s from content cache", evicted)

    def clear_cache(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    # -- transport -------------------------------------------------------

    async def _fetch(self, path: str, token: CancellationToken) -> FetchResponse:
        try:
            response = await self.fetcher.fetch(path, token)
        except OSError as exc:
            token.raise_if_cancelled()
            raise ContentLoadError(str(exc)) from exc
        token.raise_if_cancelled()
        return response

    @staticmethod
    def _decode(response: FetchResponse) -> Any:
        try:
            return json.loads(response.body)
        except ValueError as exc:
            raise ContentLoadError(f"malformed JSON ({exc})") from exc

    async def _load_json(self, path: str) -> Any:
        response = await self._fetch(path, CancellationToken())
        if not response.ok:
            raise ContentLoadError(response.status_text)
        return self._decode(response)

    # -- public API ------------------------------------------------------

    async def load_section(
        self,
        division: str,
        part: str,
        section: str,
        version: Optional[str] = None,
        slot: Optional[ViewSlot] = None,
    ) -> Optional[Node]:
        """Return the section chunk, or None when the fetch was superseded."""
        version = version or settings.code_version
        key = self.cache_key(version, division, part, section)
        content = self.cached(key)
        if content is not None:
            logger.debug("Content cache hit for %s", key)
            if slot is not None:
                slot.cancel()
            return content

        token = slot.begin() if slot is not None else CancellationToken()
        try:
            response = await self._fetch(section_path(version, division, part, section), token)
            if response.status == 404:
                raise ContentNotFoundError(division, part, section)
            if not response.ok:
                raise ContentLoadError(response.status_text)
            content = self._decode(response)
            missing = missing_section_fields(content)
            if missing:
                raise ContentValidationError(missing)
            self._remember(key, content)
            return content
        except FetchCancelledError:
            logger.debug("Fetch of %s was cancelled", key)
            return None
        finally:
            if slot is not None:
                slot.release(token)

    async def load_documents(self, version: Optional[str] = None) -> List[Node]:
        return await self._load_json(documents_path(version or settings.code_version))

    async def load_metadata(self, version: Optional[str] = None) -> Node:
        return await self._load_json(metadata_path(version or settings.code_version))

    async def load_navigation_tree(self, version: Optional[str] = None) -> List[Node]:
        return await self._load_json(navigation_tree_path(version or settings.code_version))

    extract_subtree = staticmethod(extract_subtree)
