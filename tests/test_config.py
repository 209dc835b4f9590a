import pytest

from brewlog.backend.config import get_settings


@pytest.fixture
def fresh_settings():
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()


def test_reads_quoted_values(monkeypatch, fresh_settings):
    monkeypatch.setenv("BREWLOG_CORS_ORIGINS", '"https://brew.example, http://localhost:3000 ,"')
    monkeypatch.setenv("BREWLOG_VERSION", "'2.1.0'")

    settings = fresh_settings()

    assert settings.cors_origins == ("https://brew.example", "http://localhost:3000")
    assert settings.version == "2.1.0"
    assert settings.is_memory_db


def test_invalid_log_level(monkeypatch, fresh_settings):
    monkeypatch.setenv("BREWLOG_LOG_LEVEL", "loud")

    with pytest.raises(RuntimeError, match="BREWLOG_LOG_LEVEL"):
        fresh_settings()
