"""Unit tests for configuration and logging setup."""

import logging
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest
import structlog
from pydantic import ValidationError

from phishlens.config.logging import configure_logging, get_logger
from phishlens.config.settings import Environment, Settings

ROOT = Path(__file__).resolve().parents[2]


class TestSettings:

    def test_defaults(self):
        settings = Settings(OLLAMA_API_URL="http://localhost:11434")

        assert settings.OLLAMA_MODEL == "llama3.2:3b"
        assert settings.OLLAMA_TIMEOUT == 60.0
        assert settings.OLLAMA_CONNECT_TIMEOUT == 10.0
        assert settings.NARRATIVE_BODY_CHARS == 1000
        assert settings.MAX_CONCURRENT_ANALYSES == 5
        assert settings.is_development()
        assert not settings.is_production()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_MODEL", "mistral:7b")
        monkeypatch.setenv("ENABLE_AI_ANALYSIS", "false")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings()

        assert settings.OLLAMA_MODEL == "mistral:7b"
        assert settings.ENABLE_AI_ANALYSIS is False
        assert settings.ENVIRONMENT == Environment.PRODUCTION
        assert settings.is_production()

    def test_url_trailing_slash_stripped(self):
        assert Settings(OLLAMA_API_URL="https://llm.internal/").OLLAMA_API_URL == "https://llm.internal"

    @pytest.mark.parametrize("overrides", [
        {"OLLAMA_API_URL": "ftp://llm.internal"},
        {"OLLAMA_MODEL": "  "},
        {"LOG_FORMAT": "xml"},
        {"MAX_CONCURRENT_ANALYSES": 0},
        {"NARRATIVE_BODY_CHARS": 0},
        {"OLLAMA_TIMEOUT": 5, "OLLAMA_CONNECT_TIMEOUT": 10},
        {"OLLAMA_TIMEOUT": 10, "OLLAMA_CONNECT_TIMEOUT": 10},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            Settings(**overrides)

    def test_log_format_normalised(self):
        assert Settings(LOG_FORMAT="JSON").LOG_FORMAT == "json"


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield root
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_import_leaves_host_logging_alone(self):
        script = textwrap.dedent("""
            import logging
            root = logging.getLogger()
            handler = logging.StreamHandler()
            root.addHandler(handler)
            root.setLevel(logging.DEBUG)

            import phishlens.analyzers
            from phishlens.services.analyzer_factory import AnalyzerFactory
            from phishlens.schemas.email import EmailInput, Sender
            AnalyzerFactory().run_all(EmailInput(sender=Sender(address="a@example.com")))

            assert handler in root.handlers, "handler removed"
            assert root.level == logging.DEBUG, "level changed"
        """)
        result = subprocess.run([sys.executable, "-c", script], capture_output=True, text=True, cwd=ROOT)

        assert result.returncode == 0, result.stderr

    def test_configure_sets_level(self):
        configure_logging(log_level="DEBUG", log_format="json")
        assert logging.getLogger().level == logging.DEBUG

        configure_logging(log_level="WARNING", log_format="console")
        assert logging.getLogger().level == logging.WARNING

    def test_get_logger_is_bound(self):
        logger = get_logger("phishlens.test")
        logger.info("test_event", key="value")

        configure_logging(log_level="INFO")
        assert structlog.is_configured()
