"""
core/config.py -- Settings for the marina backend, read once from the environment.

Environment variables (or a .env file next to the process) map onto Settings
fields by upper-cased name: DEBUG, SECRET_KEY, LOG_LEVEL, DATABASE_URL,
SECURE_COOKIES, CORS_ORIGINS. Code elsewhere asks get_settings() rather than
reading os.environ itself.

SECRET_KEY signs the session tokens and the flash-message cookie. The lifespan
in api/main.py hands it to TokenService when the app starts.

Layer rule: imports nothing from api/, web/, auth/ or marina/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("marina.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'marina.db'}"
_MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Every field has a default, so DEBUG=true alone is a runnable configuration."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False
    secret_key: str = ""  # "" means unset; resolved by check_secret_key
    log_level: str = "INFO"

    database_url: str = _DEFAULT_DB_URL

    # Set behind HTTPS so the authToken cookie carries the Secure flag.
    secure_cookies: bool = False
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    @model_validator(mode="after")
    def check_secret_key(self) -> "Settings":
        """Fill in or reject SECRET_KEY.

        Missing key: a throwaway one is generated under DEBUG (existing
        sessions die on restart); otherwise startup fails. A key shorter than
        32 characters fails in either mode.
        """
        if not self.secret_key:
            if not self.debug:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Export SECRET_KEY (at least 32 characters) or set DEBUG=true for local work."
                )
            self.secret_key = secrets.token_hex(_MIN_SECRET_LENGTH)
            logger.warning("SECRET_KEY not set; generated a temporary one for this process.")
        if len(self.secret_key) < _MIN_SECRET_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {_MIN_SECRET_LENGTH} characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Cached Settings instance. Tests that change the environment call get_settings.cache_clear()."""
    return Settings()
