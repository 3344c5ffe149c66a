#!/usr/bin/env python3
"""
CRM Outreach Sync Service

Receives LinkedIn connection webhooks from the outreach backend and keeps a
single contact per person per organization.

Run with: uvicorn main:app --host 0.0.0.0 --port 8000
"""

from api.app import create_app
from config.settings import get_settings


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
