from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Settings:
    """Environment-driven settings for the clinic records API.

    Values are read once at import time; tests override them with
    ``monkeypatch.setattr(settings, ...)``.
    """

    # Optional database configuration for SQL-backed repositories.
    database_url: Optional[str] = os.getenv("DATABASE_URL")
    use_sql_repos: bool = os.getenv("USE_SQL_REPOS", "false").lower() == "true"

    # Directory where uploaded treatment attachments are stored.
    attachments_dir: Path = Path(os.getenv("ATTACHMENTS_DIR", "attachments"))

    # Request size limit for a single uploaded attachment (in bytes).
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    # Time frame used by the stats routes when the caller does not pass one.
    default_time_frame: str = os.getenv("DEFAULT_TIME_FRAME", "1m")

    # Hosted LLM used for per-treatment analysis.
    openai_api_key: Optional[str] = os.getenv("OPENAI_API_KEY")
    llm_model: str = os.getenv("LLM_MODEL", "gpt-4o-mini")

    # Local Ollama server used for patient summaries.
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "gemma3:1b")
    ollama_timeout_seconds: float = float(os.getenv("OLLAMA_TIMEOUT_SECONDS", "60"))

    # Comma-separated allowed origins; "*" allows any.
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
