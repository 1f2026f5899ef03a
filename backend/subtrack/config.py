"""
Application configuration.

All settings come from environment variables and are read once into a
Settings object. Services receive the Settings instance at construction;
nothing below the route layer touches os.environ directly.
"""

import os
from functools import lru_cache
from typing import List

from pydantic import BaseModel


class Settings(BaseModel):
    """Process-scoped configuration injected into services and the guard."""

    database_url: str = "sqlite:///./subtrack.db"
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24
    bcrypt_rounds: int = 10
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./subtrack.db"),
            jwt_secret_key=os.getenv("JWT_SECRET_KEY", "change-me-in-production"),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expire_minutes=int(os.getenv("JWT_EXPIRE_MINUTES", str(60 * 24))),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


@lru_cache()
def get_settings() -> Settings:
    """FastAPI dependency returning the cached process settings."""
    return Settings.from_env()
