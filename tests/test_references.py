from buildcode.models.indexer_config import ReferenceConfig
from buildcode.parsing.references import (
    extract_reference_ids,
    extract_references,
    strip_references,
)


def test_extract_references_reads_all_parts():
    refs = extract_references(
        "See [REF:internal:nbc.divB.part3:long] and [REF:term:bldng]building here."
    )
    assert [(ref.type, ref.id) for ref in refs] == [
        ("internal", "nbc.divB.part3"),
        ("term", "bldng"),
    ]
    assert refs[0].format == "long"
    assert refs[0].display_text == ""
    assert refs[1].display_text == "building"
    assert refs[1].full_match == "[REF:term:bldng]building"


def test_malformed_tags_are_ignored():
    text = "Broken [REF:term] and [REF:unknown:x]y and [REF:term:abc"
    assert extract_references(text) == []
    assert strip_references(text, ReferenceConfig()) == text


def test_strip_replaces_with_display_text():
    text = "A [REF:term:bldng]building needs a [REF:standard:CSA-A23.3] permit."
    assert strip_references(text, ReferenceConfig()) == "A building needs a  permit."


def test_strip_leaves_unconfigured_types():
    config = ReferenceConfig(process_types=["term"])
    text = "[REF:term:bldng]building per [REF:internal:nbc.divA:short]"
    assert strip_references(text, config) == "building per [REF:internal:nbc.divA:short]"


def test_strip_is_idempotent():
    config = ReferenceConfig()
    text = "Any [REF:term:occup]occupancy in [REF:internal:nbc.divB.part9]."
    once = strip_references(text, config)
    assert strip_references(once, config) == once


def test_strip_disabled_returns_text():
    config = ReferenceConfig(strip_from_search_text=False)
    text = "[REF:term:bldng]building"
    assert strip_references(text, config) == text


def test_reference_ids_are_deduplicated_in_order():
    text = "[REF:term:a]x [REF:internal:b] [REF:term:a]y [REF:functional-statement:F02]"
    assert extract_reference_ids(text, ReferenceConfig()) == ["term:a", "internal:b"]


def test_reference_ids_respect_preserve_flag():
    config = ReferenceConfig(preserve_reference_ids=False)
    assert extract_reference_ids("[REF:term:a]x", config) == []
