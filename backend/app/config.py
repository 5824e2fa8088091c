from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "hackportal-participation")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "HackPortal Participation")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Upstream portal REST API
    portal_api_url: str = os.getenv("PORTAL_API_URL", "http://api:3000/api/v1")
    portal_api_timeout_seconds: float = float(os.getenv("PORTAL_API_TIMEOUT_SECONDS", "10"))
    participant_fetch_concurrency: int = int(os.getenv("PARTICIPANT_FETCH_CONCURRENCY", "8"))

    # Sample data source used when the backend is unreachable
    demo_mode: bool = os.getenv("DEMO_MODE", "0") == "1"

    # Pending action marker (resume after login)
    pending_store: str = os.getenv("PENDING_STORE", "redis")  # redis|memory
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")
    pending_key_prefix: str = os.getenv("PENDING_KEY_PREFIX", "pending:")

settings = Settings()
