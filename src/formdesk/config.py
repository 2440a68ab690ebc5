from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


class Settings:
    def __init__(self) -> None:
        self.storage_backend = os.getenv("STORAGE_BACKEND", "sqlite").lower()
        self.sqlite_path = Path(os.getenv("SQLITE_PATH", "./data/app.db"))
        self.json_path = Path(os.getenv("JSON_PATH", "./data/jsonstore.json"))
        self.host = os.getenv("HOST", "0.0.0.0")
        self.log_level = os.getenv("LOG_LEVEL", "info").lower()
        port_value = os.getenv("PORT", "8000")
        try:
            self.port = int(port_value)
        except ValueError:
            self.port = 8000
        page_size = os.getenv("DEFAULT_PAGE_SIZE", "10")
        try:
            self.default_page_size = max(1, int(page_size))
        except ValueError:
            self.default_page_size = 10
        max_sessions = os.getenv("BUILDER_MAX_SESSIONS", "500")
        try:
            self.builder_max_sessions = max(1, int(max_sessions))
        except ValueError:
            self.builder_max_sessions = 500
        session_ttl = os.getenv("BUILDER_SESSION_TTL", "3600")
        try:
            self.builder_session_ttl = max(1.0, float(session_ttl))
        except ValueError:
            self.builder_session_ttl = 3600.0


def ensure_dirs(settings: Settings) -> None:
    settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
    settings.json_path.parent.mkdir(parents=True, exist_ok=True)
