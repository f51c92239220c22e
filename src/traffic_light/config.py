"""Service configuration via environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_CHECKS_FILE = Path(__file__).parent / "data" / "checks.yaml"


class Settings(BaseSettings):
    """All configuration loaded from TRAFFIC_LIGHT_* env vars or a .env file."""

    # Backstage-style backends
    catalog_base_url: str = "http://localhost:7007/api/catalog"
    tech_insights_base_url: str = "http://localhost:7007/api/tech-insights"
    api_token: str | None = None
    http_timeout_seconds: float = 30.0

    # Check registry
    checks_file: str | None = None

    # Entity resolution
    default_namespace: str = "default"
    group_kind: str = "system"

    log_level: str = "INFO"

    model_config = {
        "env_prefix": "TRAFFIC_LIGHT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def checks_path(self) -> Path:
        return Path(self.checks_file) if self.checks_file else DEFAULT_CHECKS_FILE
