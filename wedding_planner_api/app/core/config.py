"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields except the
backend credentials, which must be supplied in any real deployment.
Cache lifetimes are expressed in milliseconds because the cache clock
works in milliseconds.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Wedding Planner Dashboard")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Base URL of the backend-as-a-service project (e.g.
    # ``https://xyz.example.co``).  Row, RPC, storage and auth endpoints
    # are all resolved relative to it.
    backend_url: str = os.getenv("BACKEND_URL", "http://localhost:54321")

    # Public (anonymous) API key sent as the ``apikey`` header with every
    # request.  Row-level security is enforced through the caller's own
    # access token, never through this key.
    backend_anon_key: str = os.getenv("BACKEND_ANON_KEY", "")

    # Storage bucket holding uploaded wedding documents and the lifetime
    # of signed download URLs issued for them (seconds).
    documents_bucket: str = os.getenv("DOCUMENTS_BUCKET", "wedding-documents")
    signed_url_ttl: int = int(os.getenv("SIGNED_URL_TTL", "3600"))

    # Cache lifetimes.  Task lists change often, documents rarely.
    wedding_cache_ttl_ms: int = int(os.getenv("WEDDING_CACHE_TTL_MS", str(5 * 60 * 1000)))
    tasks_cache_ttl_ms: int = int(os.getenv("TASKS_CACHE_TTL_MS", str(3 * 60 * 1000)))
    documents_cache_ttl_ms: int = int(os.getenv("DOCUMENTS_CACHE_TTL_MS", str(10 * 60 * 1000)))
    # Expired entries are swept out on every N-th cache write.
    cache_purge_every: int = int(os.getenv("CACHE_PURGE_EVERY", "100"))

    # Delay before a burst of note edits is written to the backend.
    notes_debounce_ms: int = int(os.getenv("NOTES_DEBOUNCE_MS", "1000"))

    # JSON file used as persistent key/value storage for preferences
    # (language choice, notes written before a wedding exists).
    preferences_path: str = os.getenv("PREFERENCES_PATH", "preferences.json")

    # Viewports narrower than this never get their scroll position restored.
    narrow_viewport_width: int = int(os.getenv("NARROW_VIEWPORT_WIDTH", "768"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
