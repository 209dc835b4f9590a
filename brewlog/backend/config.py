import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import find_dotenv, load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
DEFAULT_DB_PATH = BASE_DIR / "brewlog.db"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"


def load_environment() -> None:
    if ENV_PATH.exists():
        load_dotenv(dotenv_path=ENV_PATH, override=False)
        return

    discovered = find_dotenv(usecwd=True)
    if discovered:
        load_dotenv(dotenv_path=discovered, override=False)


@dataclass(frozen=True)
class Settings:
    database_url: str
    cors_origins: tuple[str, ...]
    log_level: str
    version: str

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_memory_db(self) -> bool:
        return self.database_url in {"sqlite://", "sqlite:///:memory:"}


def _env(name: str, default: str = "") -> str:
    raw = os.getenv(name, "").strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in {"'", '"'}:
        raw = raw[1:-1].strip()
    return raw or default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_environment()

    database_url = _env("BREWLOG_DATABASE_URL", f"sqlite:///{DEFAULT_DB_PATH}")
    raw_origins = _env("BREWLOG_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    log_level = _env("BREWLOG_LOG_LEVEL", "INFO").upper()
    version = _env("BREWLOG_VERSION", "1.0.0")

    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(
            f"Invalid BREWLOG_LOG_LEVEL '{log_level}'. Expected one of DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )

    cors_origins = tuple(origin.strip() for origin in raw_origins.split(",") if origin.strip())

    return Settings(
        database_url=database_url,
        cors_origins=cors_origins,
        log_level=log_level,
        version=version,
    )
