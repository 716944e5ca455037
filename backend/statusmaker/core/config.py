import secrets
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database (SQLite by default, PostgreSQL/MySQL via DATABASE_URL)
    DATABASE_URL: str = "sqlite:///./statusmaker.db"

    # Server
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8000
    CORS_ORIGINS: List[str] = ["*"]

    # Authentication & Security
    SECRET_KEY: str = secrets.token_urlsafe(32)  # Generated if not provided
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24

    # File storage
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_SIZE_MB: int = 100
    MAX_THUMBNAIL_SIZE_MB: int = 2

    # Rendering handoff
    # The renderer resolves preview tokens and reports export progress back to us
    PREVIEW_URL_PREFIX: str = "/api/preview"
    EXPORT_URL_PREFIX: str = "/exports"
    RENDERER_CALLBACK_TOKEN: str = ""  # Empty disables the callback endpoint

    # Startup
    SEED_DEFAULTS: bool = True

    # Development
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
