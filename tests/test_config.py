import pytest
from pydantic import ValidationError

from buildcode.config import Settings
from buildcode.models.indexer_config import IndexerConfig
from buildcode.models.retrieval import SearchOptions


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("CODE_VERSION", "2018")
    monkeypatch.setenv("OUTPUT_DIR", "/srv/data")
    current = Settings()
    assert current.code_version == "2018"
    assert str(current.version_dir()) == "/srv/data/2018"
    assert current.chunk_max_bytes == 200 * 1024


def test_indexer_defaults():
    config = IndexerConfig()
    assert not config.is_enabled("division")
    assert config.priority_for("article", has_amendment=True) == 7.5
    assert config.priority_for("part", has_amendment=True) == 10
    assert not config.is_enabled("unknown")


def test_merged_overrides_keep_other_defaults():
    config = IndexerConfig.merged(
        {
            "text_extraction": {"snippet_length": 80},
            "content_types": {"article": {"priority": 6, "amendment_boost": 2}},
        }
    )
    assert config.text_extraction.snippet_length == 80
    assert config.text_extraction.max_text_length == 5000
    assert config.priority_for("article", has_amendment=True) == 12
    assert config.content_type("table").priority == 7
    assert config.references.strip_from_search_text


def test_search_options_validation():
    assert SearchOptions().limit == 50
    with pytest.raises(ValidationError):
        SearchOptions(offset=-1)
