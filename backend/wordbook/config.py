from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Wordbook"
    environment: str = "dev"

    database_url: str = "sqlite:///./wordbook.db"

    # "auto" picks DeepSeek when its key is set, then Gemini
    llm_provider: Literal["auto", "deepseek", "gemini"] = "auto"
    deepseek_api_key: str | None = None
    gemini_api_key: str | None = None

    # Empty means the provider's own default
    llm_model: str | None = None
    llm_base_url: str | None = None
    llm_timeout_sec: float = 60.0

    # "upsert" overwrites the previous lookup of the same word, "insert" keeps every lookup
    word_write_mode: Literal["upsert", "insert"] = "upsert"

    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
