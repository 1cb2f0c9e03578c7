from pathlib import Path

import pytest

from buildcode.exceptions import SearchIndexNotInitializedError
from buildcode.ingestion.generate_assets import generate_assets
from buildcode.models.retrieval import SearchOptions
from buildcode.models.search import SearchDocument
from buildcode.retrieval.search_client import EXACT_MATCH_SCORE, SearchClient


def _doc(doc_id, **fields):
    base = {
        "id": doc_id,
        "type": "article",
        "division_letter": "A",
        "part_number": "1",
        "section_number": "1",
        "path": "Division A > Part 1 > Section 1",
        "search_priority": 5,
    }
    base.update(fields)
    return SearchDocument(**base)


@pytest.fixture
def client():
    search = SearchClient()
    search.build(
        [
            _doc("title-hit", article_number="A.1.1.1.1", title="Building Permits", text="Rules for permits."),
            _doc("text-hit", article_number="A.1.1.1.2", title="Permits", text="Rules for building permits."),
            _doc(
                "amended",
                article_number="B.3.2.1.1",
                title="Sprinkler Systems",
                text="Sprinklers shall be installed in every building over three storeys.",
                division_letter="B",
                part_number="3",
                section_number="2",
                has_amendment=True,
                latest_amendment_date="2025-06-16",
            ),
            _doc(
                "table",
                type="table",
                article_number="B.3.2.1.1 Table 1",
                title="Sprinkler Spacing",
                text="Spacing of sprinkler heads",
                division_letter="B",
                part_number="3",
                section_number="2",
                has_tables=True,
                search_priority=7,
            ),
            _doc("deep", article_number="A.1.2.3.4", title="Deep Article", text="Nothing relevant"),
        ]
    )
    return search


def test_search_before_build_raises():
    with pytest.raises(SearchIndexNotInitializedError):
        SearchClient().search("building")


def test_short_queries_return_nothing(client):
    assert client.search("b") == []
    assert client.search(" ") == []


def test_article_number_fast_path(client):
    results = client.search("a.1.2.3.4")
    assert len(results) == 1
    assert results[0].document.id == "deep"
    assert results[0].score == EXACT_MATCH_SCORE
    assert client.search("C.9.9.9.9") == []


def test_article_number_divisions_are_configurable():
    narrow = SearchClient(article_divisions="A-C")
    narrow.build([_doc("e", article_number="E.1.1.1.1", title="Division E article")])
    # falls through to field matching on the article number
    (fallback,) = narrow.search("E.1.1.1.1")
    assert fallback.score == 10
    wide = SearchClient(article_divisions="A-Z")
    wide.build([_doc("e", article_number="E.1.1.1.1", title="Division E article")])
    (exact,) = wide.search("E.1.1.1.1")
    assert exact.score == EXACT_MATCH_SCORE


def test_title_match_outranks_text_match(client):
    results = client.search("building")
    ids = [result.document.id for result in results]
    assert ids.index("title-hit") < ids.index("text-hit")
    scores = {result.document.id: result.score for result in results}
    assert scores["title-hit"] == 5 * 2
    assert scores["text-hit"] == 1


def test_prefix_matching(client):
    ids = {result.document.id for result in client.search("sprink")}
    assert ids == {"amended", "table"}


def test_amendment_and_priority_boosts(client):
    scores = {result.document.id: result.score for result in client.search("sprinkler")}
    # title (5) + text (1), boosted by amendment and title substring
    assert scores["amended"] == pytest.approx(6 * 1.5 * 2)
    assert scores["table"] == pytest.approx(6 * 7 / 5 * 2)


def test_filters(client):
    def ids(**options):
        return {r.document.id for r in client.search("sprinkler", SearchOptions(**options))}

    assert ids(division_filter="A") == set()
    assert ids(part_filter=3, section_filter="2") == {"amended", "table"}
    assert ids(amendments_only=True) == {"amended"}
    assert ids(tables_only=True) == {"table"}
    assert ids(figures_only=True) == set()
    assert ids(content_types=["table"]) == {"table"}
    assert ids(effective_date="2024-01-01") == {"table"}
    assert ids(effective_date="2025-06-16") == {"amended", "table"}


def test_pagination(client):
    everything = client.search("permits")
    assert len(everything) == 2
    page = client.search("permits", SearchOptions(limit=1, offset=1))
    assert [r.document.id for r in page] == [everything[1].document.id]


def test_highlights(client):
    (result,) = [r for r in client.search("building") if r.document.id == "title-hit"]
    assert result.highlights[0].field == "title"
    assert result.highlights[0].text == "<mark>Building</mark> Permits"

    long_text = "x" * 80 + " building code " + "y" * 80
    doc = _doc("long", title="Other", text=long_text)
    (highlight,) = client.highlights(doc, "building")
    assert highlight.field == "text"
    assert highlight.text.startswith("...")
    assert highlight.text.endswith("...")
    assert "<mark>building</mark>" in highlight.text


def test_suggestions_are_distinct_titles(client):
    client.build(
        list(client._documents) + [_doc("dup", title="Sprinkler Systems", text="sprinkler")]
    )
    suggestions = client.get_suggestions("sprinkler", limit=5)
    assert suggestions.count("Sprinkler Systems") == 1
    assert set(suggestions) == {"Sprinkler Systems", "Sprinkler Spacing"}
    assert client.get_suggestions("s") == []


def test_accessors(client):
    assert client.is_initialized
    assert client.document_count == 5
    assert client.get_document("table").title == "Sprinkler Spacing"
    assert client.get_document("missing") is None
    assert client.metadata is None
    assert client.table_of_contents == []


def test_build_is_repeatable(client):
    first = [(r.document.id, r.score) for r in client.search("sprinkler")]
    client.build(list(client._documents))
    assert [(r.document.id, r.score) for r in client.search("sprinkler")] == first


def test_from_generated_artifacts(tmp_path: Path, sample_document):
    generate_assets(sample_document, tmp_path)
    search = SearchClient.from_directory(tmp_path / "search")
    assert search.document_count == 13
    assert search.metadata.version == "2024"
    assert [d.letter for d in search.divisions] == ["A", "B"]
    assert "table" in search.content_types
    assert search.revision_dates[0].effective_date == "2025-06-16"
    ids = [r.document.id for r in search.search("sprinkler")]
    assert ids[0] == "fig-1"
    assert "nbc.divB.part3.sect2.subsect1.art1" in ids
    (exact,) = search.search("A.1.1.1.2")
    assert exact.document.id == "nbc.divA.part1.sect1.subsect1.art2"
