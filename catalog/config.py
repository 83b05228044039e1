# catalog/config.py

import os
from typing import Literal

from pydantic import BaseModel, Field


class Settings(BaseModel):
  """Runtime configuration, read from environment variables."""
  env: Literal["development", "testing", "production"] = "development"
  log_dir: str = "logs"
  storage: Literal["memory", "sqlite"] = "memory"
  db_file: str = "db/catalog.db"
  api_url: str = "http://127.0.0.1:8000"
  api_timeout: float = Field(10.0, gt=0)


def load_settings() -> Settings:
  """
  Build Settings from the current environment.

  Environment is read on every call so tests can override values with monkeypatch.
  Raises pydantic.ValidationError for unsupported values (e.g. CATALOG_STORAGE=redis).
  """
  return Settings(
    env=os.getenv("APP_ENV", "development"),
    log_dir=os.getenv("LOG_DIR", "logs"),
    storage=os.getenv("CATALOG_STORAGE", "memory").lower(),
    db_file=os.getenv("CATALOG_DB_FILE", "db/catalog.db"),
    api_url=os.getenv("CATALOG_API_URL", "http://127.0.0.1:8000").rstrip("/"),
    api_timeout=os.getenv("CATALOG_API_TIMEOUT", "10"),
  )
