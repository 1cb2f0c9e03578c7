"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request

from buildcode.config import settings
from buildcode.exceptions import (
    ContentLoadError,
    ContentNotFoundError,
    ContentValidationError,
    NodeNotFoundError,
    SearchIndexNotInitializedError,
)
from buildcode.models.retrieval import SearchOptions
from buildcode.retrieval.content_loader import ContentLoader
from buildcode.retrieval.fetcher import FileFetcher
from buildcode.retrieval.search_client import SearchClient
from buildcode.revisions.resolver import resolve_node

logger = logging.getLogger(__name__)


def get_search_client(request: Request) -> SearchClient:
    client: Optional[SearchClient] = request.app.state.search_client
    if client is None or not client.is_initialized:
        raise HTTPException(status_code=503, detail="Search index is not loaded.")
    return client


def get_loader(request: Request) -> ContentLoader:
    return request.app.state.loader


def create_app(
    search_client: Optional[SearchClient] = None, loader: Optional[ContentLoader] = None
) -> FastAPI:
    """Build the app; collaborators default to the artifacts under ``settings.output_dir``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.search_client is None:
            client = SearchClient()
            try:
                await client.initialize(app.state.loader)
            except ContentLoadError as exc:
                logger.error("Search artifacts unavailable: %s", exc)
            else:
                app.state.search_client = client
        yield

    app = FastAPI(
        title="BuildCode",
        description="Versioned building code content and search API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.search_client = search_client
    app.state.loader = (
        loader if loader is not None else ContentLoader(FileFetcher(settings.output_dir_path))
    )

    @app.get("/health")
    def health() -> Dict[str, str]:
        """Simple readiness probe."""
        return {"status": "ok"}

    @app.get("/search")
    def search(
        q: str,
        division: Optional[str] = None,
        part: Optional[str] = None,
        section: Optional[str] = None,
        amendments_only: bool = False,
        tables_only: bool = False,
        figures_only: bool = False,
        content_types: Optional[List[str]] = Query(default=None),
        effective_date: Optional[str] = None,
        limit: int = Query(default=settings.search_default_limit, ge=0),
        offset: int = Query(default=0, ge=0),
        client: SearchClient = Depends(get_search_client),
    ) -> List[Dict[str, Any]]:
        options = SearchOptions(
            division_filter=division,
            part_filter=part,
            section_filter=section,
            amendments_only=amendments_only,
            tables_only=tables_only,
            figures_only=figures_only,
            content_types=content_types,
            effective_date=effective_date,
            limit=limit,
            offset=offset,
        )
        try:
            results = client.search(q, options)
        except SearchIndexNotInitializedError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return [result.to_json_dict() for result in results]

    @app.get("/suggest")
    def suggest(
        q: str,
        limit: int = Query(default=5, ge=1),
        client: SearchClient = Depends(get_search_client),
    ) -> List[str]:
        return client.get_suggestions(q, limit)

    @app.get("/documents/{doc_id}")
    def get_document(doc_id: str, client: SearchClient = Depends(get_search_client)) -> Dict[str, Any]:
        document = client.get_document(doc_id)
        if document is None:
            raise HTTPException(status_code=404, detail=f"Unknown document: {doc_id}")
        return document.to_json_dict()

    @app.get("/metadata")
    def get_metadata(client: SearchClient = Depends(get_search_client)) -> Dict[str, Any]:
        if client.metadata is None:
            raise HTTPException(status_code=404, detail="No metadata loaded.")
        return client.metadata.to_json_dict()

    @app.get("/code/{version}/{division}/{part}/{section}")
    async def get_section(
        version: str,
        division: str,
        part: str,
        section: str,
        effective_date: Optional[str] = None,
        subsection: Optional[str] = None,
        article: Optional[str] = None,
        loader: ContentLoader = Depends(get_loader),
    ) -> Dict[str, Any]:
        """Section chunk resolved to the text in force on ``effective_date``."""
        try:
            content = await loader.load_section(division, part, section, version=version)
            if content is None:
                raise HTTPException(status_code=409, detail="Request superseded.")
            view = loader.extract_subtree(content, subsection, article)
        except (ContentNotFoundError, NodeNotFoundError) as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except (ContentLoadError, ContentValidationError) as exc:
            logger.error("Loading %s/%s/%s failed: %s", division, part, section, exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc

        resolved = resolve_node(view.content, effective_date)
        if resolved is None:
            raise HTTPException(status_code=404, detail="Content is not in force on that date.")
        return {"renderLevel": view.render_level, "effectiveDate": effective_date, "content": resolved}

    return app


app = create_app()
