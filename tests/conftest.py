import copy

import pytest

SAMPLE_DOCUMENT = {
    "document_type": "building_code",
    "version": "2024",
    "front_matter": {
        "id": "fm",
        "preface": {
            "id": "preface",
            "type": "preface",
            "content": [
                {
                    "type": "paragraph",
                    "id": "preface.p1",
                    "content": "This Code applies to [REF:term:bldng]buildings in the province.",
                }
            ],
        },
    },
    "glossary": {
        "bldng": {
            "term": "Building",
            "definition": "Any structure used or intended for supporting any [REF:term:occup]occupancy.",
        }
    },
    "divisions": [
        {
            "id": "nbc.divA",
            "type": "division",
            "letter": "A",
            "title": "Compliance, Objectives and Functional Statements",
            "parts": [
                {
                    "id": "nbc.divA.part1",
                    "type": "part",
                    "number": 1,
                    "title": "Compliance",
                    "sections": [
                        {
                            "id": "nbc.divA.part1.sect1",
                            "type": "section",
                            "number": 1,
                            "title": "General",
                            "subsections": [
                                {
                                    "id": "nbc.divA.part1.sect1.subsect1",
                                    "type": "subsection",
                                    "number": 1,
                                    "title": "Application of this Code",
                                    "articles": [
                                        {
                                            "id": "nbc.divA.part1.sect1.subsect1.art1",
                                            "type": "article",
                                            "number": 1,
                                            "title": "Application",
                                            "content": [
                                                {
                                                    "id": "nbc.divA.part1.sect1.subsect1.art1.sent1",
                                                    "type": "sentence",
                                                    "number": 1,
                                                    "text": "This Code applies to any [REF:term:bldng]building.",
                                                    "clauses": [
                                                        {
                                                            "id": "nbc.divA.part1.sect1.subsect1.art1.sent1.a",
                                                            "type": "clause",
                                                            "letter": "a",
                                                            "text": "new construction,",
                                                        }
                                                    ],
                                                }
                                            ],
                                        },
                                        {
                                            "id": "nbc.divA.part1.sect1.subsect1.art2",
                                            "type": "article",
                                            "number": 2,
                                            "title": "Building Height Limits",
                                            "revisions": [
                                                {"type": "original", "effective_date": "2020-12-01"},
                                                {
                                                    "type": "revision",
                                                    "effective_date": "2024-03-08",
                                                    "revision_type": "replace",
                                                    "title": "Maximum Building Height",
                                                },
                                            ],
                                            "content": [
                                                {
                                                    "id": "nbc.divA.part1.sect1.subsect1.art2.sent1",
                                                    "type": "sentence",
                                                    "number": 1,
                                                    "text": "Height is measured from grade. See [REF:internal:nbc.divB.part3:long].",
                                                },
                                                {
                                                    "id": "tbl-1",
                                                    "type": "table",
                                                    "number": "1.1.1.2",
                                                    "title": "Maximum Heights",
                                                    "structure": {
                                                        "header_rows": [
                                                            {"cells": [{"text": "Occupancy"}, {"text": "Storeys"}]}
                                                        ],
                                                        "body_rows": [
                                                            {"cells": [{"text": "Residential"}, {"text": "6"}]}
                                                        ],
                                                    },
                                                    "revisions": [
                                                        {
                                                            "type": "revision",
                                                            "effective_date": "2025-06-16",
                                                            "revision_type": "amendment",
                                                        }
                                                    ],
                                                },
                                            ],
                                        },
                                    ],
                                }
                            ],
                        }
                    ],
                }
            ],
        },
        {
            "id": "nbc.divB",
            "type": "division",
            "letter": "B",
            "title": "Acceptable Solutions",
            "parts": [
                {
                    "id": "nbc.divB.part3",
                    "type": "part",
                    "number": 3,
                    "title": "Fire Protection",
                    "sections": [
                        {
                            "id": "nbc.divB.part3.sect2",
                            "type": "section",
                            "number": 2,
                            "title": "Building Fire Safety",
                            "subsections": [
                                {
                                    "id": "nbc.divB.part3.sect2.subsect1",
                                    "type": "subsection",
                                    "number": 1,
                                    "title": "General",
                                    "articles": [
                                        {
                                            "id": "nbc.divB.part3.sect2.subsect1.art1",
                                            "type": "article",
                                            "number": 1,
                                            "title": "Exceptions",
                                            "content": [
                                                {
                                                    "id": "nbc.divB.part3.sect2.subsect1.art1.sent1",
                                                    "type": "sentence",
                                                    "number": 1,
                                                    "text": "Sprinklers are required in every storey.",
                                                },
                                                {
                                                    "id": "fig-1",
                                                    "type": "figure",
                                                    "number": "3.2.1.1",
                                                    "title": "Sprinkler layout",
                                                },
                                            ],
                                        }
                                    ],
                                }
                            ],
                        }
                    ],
                }
            ],
        },
    ],
}


@pytest.fixture
def sample_document():
    return copy.deepcopy(SAMPLE_DOCUMENT)
