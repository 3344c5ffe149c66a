from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


@dataclass(frozen=True)
class Settings:
    # Webhook auth; empty disables verification (local/dev only)
    webhook_secret: str

    # Core/runtime
    db_path: str
    run_env: str
    log_level: str

    # Contact creation defaults
    lead_source: str = "LINKEDIN_OUTREACH"
    initial_lead_status: str = "NEW"

    # HTTP service
    service_name: str = "gensales-service"
    service_version: str = "1.0.0"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def auth_enabled(self) -> bool:
        return bool(self.webhook_secret)

    @property
    def is_production(self) -> bool:
        return (self.run_env or "").lower() == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    return Settings(
        webhook_secret=os.getenv("OUTREACH_WEBHOOK_SECRET", ""),
        db_path=os.getenv("DB_PATH", "crm.db"),
        run_env=os.getenv("RUN_ENV", "local"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        lead_source=os.getenv("LEAD_SOURCE", "LINKEDIN_OUTREACH"),
        initial_lead_status=os.getenv("INITIAL_LEAD_STATUS", "NEW"),
        service_name=os.getenv("SERVICE_NAME", "gensales-service"),
        service_version=os.getenv("SERVICE_VERSION", "1.0.0"),
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=int(os.getenv("API_PORT", "8000")),
    )
