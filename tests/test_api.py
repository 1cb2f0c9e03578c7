from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from buildcode.api.main import create_app
from buildcode.ingestion.generate_assets import generate_assets
from buildcode.retrieval.content_loader import ContentLoader
from buildcode.retrieval.fetcher import FileFetcher
from buildcode.retrieval.search_client import SearchClient


@pytest.fixture
def api(tmp_path: Path, sample_document) -> TestClient:
    generate_assets(sample_document, tmp_path / "2024")
    client = SearchClient.from_directory(tmp_path / "2024" / "search")
    loader = ContentLoader(FileFetcher(tmp_path))
    return TestClient(create_app(search_client=client, loader=loader))


def test_health(api: TestClient):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_search_returns_camel_case_results(api: TestClient):
    response = api.get("/search", params={"q": "sprinkler", "division": "B"})
    assert response.status_code == 200
    results = response.json()
    assert results[0]["document"]["id"] == "fig-1"
    assert results[0]["document"]["articleNumber"].endswith("Figure 3.2.1.1")
    assert results[0]["highlights"][0]["field"] == "title"


def test_search_filters_by_content_type(api: TestClient):
    response = api.get("/search", params={"q": "sprinkler", "content_types": ["article"]})
    assert [r["document"]["type"] for r in response.json()] == ["article"]


def test_suggest(api: TestClient):
    response = api.get("/suggest", params={"q": "sprink"})
    suggestions = response.json()
    assert suggestions[0] == "Sprinkler layout"
    assert "Exceptions" in suggestions


def test_document_lookup(api: TestClient):
    assert api.get("/documents/tbl-1").json()["type"] == "table"
    assert api.get("/documents/nope").status_code == 404


def test_metadata(api: TestClient):
    metadata = api.get("/metadata").json()
    assert metadata["statistics"]["totalTables"] == 1
    assert metadata["tableOfContents"][0]["id"] == "front-matter"


def test_section_resolved_on_date(api: TestClient):
    path = "/code/2024/nbc.divA/1/1"
    art2 = "nbc.divA.part1.sect1.subsect1.art2"
    params = {"subsection": "nbc.divA.part1.sect1.subsect1", "article": art2}

    older = api.get(path, params={**params, "effective_date": "2021-01-01"}).json()
    assert older["renderLevel"] == "article"
    assert older["content"]["title"] == "Building Height Limits"

    newer = api.get(path, params={**params, "effective_date": "2024-06-01"}).json()
    assert newer["content"]["title"] == "Maximum Building Height"

    section = api.get(path).json()
    assert section["renderLevel"] == "section"
    assert section["content"]["number"] == "1"


def test_missing_section_is_404(api: TestClient):
    assert api.get("/code/2024/nbc.divA/7/7").status_code == 404
    missing_article = api.get("/code/2024/nbc.divA/1/1", params={"subsection": "nope"})
    assert missing_article.status_code == 404


def test_search_without_index_is_unavailable(tmp_path: Path):
    api = TestClient(create_app(loader=ContentLoader(FileFetcher(tmp_path))))
    assert api.get("/search", params={"q": "sprinkler"}).status_code == 503


def test_injected_loader_is_used(tmp_path: Path):
    loader = ContentLoader(FileFetcher(tmp_path))
    assert len(loader) == 0
    assert create_app(loader=loader).state.loader is loader
