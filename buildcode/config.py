"""Application configuration loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    source_file: str = "data/source/bcbc-2024.json"
    output_dir: str = "data/public"
    code_version: str = "2024"

    snippet_length: int = 200
    max_text_length: int = 5000
    table_sample_rows: int = 5

    chunk_min_bytes: int = 50 * 1024
    chunk_max_bytes: int = 200 * 1024
    content_cache_size: int = 64

    search_default_limit: int = 50
    highlight_context: int = 50
    article_number_divisions: str = "A-Z"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def source_file_path(self) -> Path:
        return Path(self.source_file)

    @property
    def output_dir_path(self) -> Path:
        return Path(self.output_dir)

    def version_dir(self, version: str | None = None) -> Path:
        return self.output_dir_path / (version or self.code_version)


settings = Settings()
