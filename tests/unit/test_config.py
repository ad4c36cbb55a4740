# =============================================================================
# TESTS - Configuration and logging
# =============================================================================

import logging

from quizplay.core.config import Settings
from quizplay.core.logging import configure_logging


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("QUIZPLAY_QUESTION_TIME_LIMIT", raising=False)

        config = Settings()

        assert config.question_time_limit == 30
        assert config.tick_interval_seconds == 1.0
        assert config.attempt_write_retries == 2

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("QUIZPLAY_QUESTION_TIME_LIMIT", "45")
        monkeypatch.setenv("QUIZPLAY_GAP_SECONDS", "0.5")

        config = Settings()

        assert config.question_time_limit == 45
        assert config.gap_seconds == 0.5

    def test_openai_key_without_prefix(self, monkeypatch):
        monkeypatch.delenv("QUIZPLAY_OPENAI_API_KEY", raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        assert Settings().openai_api_key == "sk-test"

    def test_database_url_override(self):
        assert Settings(database_url="sqlite+aiosqlite:///x.db").assembled_db_url == "sqlite+aiosqlite:///x.db"

    def test_assembled_postgres_url(self):
        config = Settings(database_url=None, db_host="db", db_port=5433, db_name="quiz", db_user="u", db_password="p")

        assert config.assembled_db_url == "postgresql+asyncpg://u:p@db:5433/quiz"


class TestConfigureLogging:
    def test_creates_log_files(self, tmp_path):
        configure_logging(tmp_path / "logs")

        logging.getLogger("session").info("session line")
        logging.getLogger("hints").info("hints line")

        for name in ("app.log", "session.log", "hints.log"):
            assert (tmp_path / "logs" / name).exists()
        assert not logging.getLogger("session").propagate
