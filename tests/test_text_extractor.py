from buildcode.ingestion.text_extractor import (
    extract_article_text,
    extract_table_text,
    generate_snippet,
    has_external_refs,
    has_figures_in_content,
    has_tables_in_content,
    normalize_whitespace,
    raw_article_text,
)
from buildcode.models.indexer_config import ReferenceConfig, TextExtractionConfig


def _content():
    return [
        {
            "type": "sentence",
            "text": "Every  [REF:term:bldng]building\nshall have",
            "clauses": [
                {"type": "clause", "text": "an exit, and", "subclauses": [{"text": "a sign"}]},
                {"type": "clause", "text": "an alarm.", "clauses": [{"text": "tested yearly"}]},
            ],
        },
        {"type": "table", "title": "Not article text"},
    ]


def test_article_text_joins_sentences_and_clauses():
    text, ids = extract_article_text(_content(), TextExtractionConfig(), ReferenceConfig())
    assert text == "Every building shall have an exit, and a sign an alarm. tested yearly"
    assert ids == ["term:bldng"]


def test_article_text_without_subclauses():
    config = TextExtractionConfig(include_subclauses=False)
    text, _ = extract_article_text(_content(), config, ReferenceConfig())
    assert text == "Every building shall have an exit, and an alarm."


def test_article_text_is_truncated():
    config = TextExtractionConfig(max_text_length=10)
    text, _ = extract_article_text(_content(), config, ReferenceConfig())
    assert text == "Every buil"


def test_article_text_empty_content():
    assert extract_article_text(None, TextExtractionConfig(), ReferenceConfig()) == ("", [])


def test_table_text_samples_rows():
    table = {
        "type": "table",
        "title": "Loads",
        "caption": "Per [REF:standard:CSA-S16]",
        "structure": {
            "header_rows": [{"cells": [{"text": "Use"}, {"text": "kPa"}]}],
            "body_rows": [{"cells": [{"text": f"row{i}"}, "x"]} for i in range(8)],
        },
    }
    text, ids = extract_table_text(table, TextExtractionConfig(table_sample_rows=2), ReferenceConfig())
    assert text == "Loads Per Use kPa row0 x row1 x"
    assert ids == ["standard:CSA-S16"]


def test_snippet_truncates_at_word_boundary():
    snippet = generate_snippet("word " * 100, 30)
    assert len(snippet) <= 33
    assert snippet.endswith("...")
    assert snippet == "word word word word word word..."


def test_snippet_hard_truncates_long_words():
    snippet = generate_snippet("a" * 50, 20)
    assert snippet == "a" * 20 + "..."


def test_snippet_short_text_unchanged():
    assert generate_snippet("  short   text ", 30) == "short text"
    assert generate_snippet("", 30) == ""


def test_flags_on_raw_content():
    content = _content()
    assert has_tables_in_content(content)
    assert not has_figures_in_content(content)
    assert has_external_refs("[REF:standard:X]")
    assert not has_external_refs("[REF:term:X]x")
    assert normalize_whitespace(" a \n\t b ") == "a b"


def test_raw_text_keeps_non_sentence_items():
    content = _content() + [{"type": "note", "text": "See [REF:external:nfpa13]NFPA 13"}]
    raw = raw_article_text(content, TextExtractionConfig())
    assert "[REF:term:bldng]" in raw
    assert "[REF:external:nfpa13]" in raw
    assert "Not article text" not in raw
