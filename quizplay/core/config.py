from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUIZPLAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Play timing
    question_time_limit: int = Field(default=30, ge=1)
    tick_interval_seconds: float = Field(default=1.0, gt=0)
    gap_seconds: float = Field(default=2.0, ge=0)
    attempt_write_retries: int = Field(default=2, ge=0)

    # Direct URL override (takes precedence if set)
    database_url: str | None = None

    # Individual DB params (used if database_url is not provided)
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "quizplay"
    db_user: str = "postgres"
    db_password: str = "postgres"

    # Hint generation (OpenAI-compatible chat completions)
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("QUIZPLAY_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_model: str = Field(
        default="gpt-3.5-turbo",
        validation_alias=AliasChoices("QUIZPLAY_OPENAI_MODEL", "OPENAI_MODEL"),
    )
    openai_timeout: float = Field(
        default=10.0,
        validation_alias=AliasChoices("QUIZPLAY_OPENAI_TIMEOUT", "OPENAI_TIMEOUT"),
    )
    openai_base_url: str = "https://api.openai.com/v1"

    log_dir: Path = Path("logs")

    @property
    def assembled_db_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"


settings = Settings()
