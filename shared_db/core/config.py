# shared_db/core/config.py
import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SQLITE_FALLBACK_URL = "sqlite:///./local_test.db"


def normalize_database_url(url: str) -> str:
    # Heroku style URLs still say 'postgres://', SQLAlchemy only knows 'postgresql://'
    if url and url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    PROJECT_NAME: str = "Shared DB Schema Store"

    def __init__(self):
        self.DATABASE_URL: str = os.getenv("DATABASE_URL")
        self.SQL_ECHO: bool = _env_flag("SQL_ECHO")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        if not self.DATABASE_URL:
            # Local runs without a .env get a SQLite file
            logger.warning("DATABASE_URL not found. Using SQLite for local testing.")
            self.DATABASE_URL = SQLITE_FALLBACK_URL

        self.DATABASE_URL = normalize_database_url(self.DATABASE_URL)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = Settings()
