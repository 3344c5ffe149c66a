from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator

from fastapi import Request

from config.settings import Settings
from pipelines.sync_connections import ConnectionSync, build_connection_sync
from services.auth import WebhookAuthenticator


SyncOpener = Callable[[], ContextManager[ConnectionSync]]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_authenticator(request: Request) -> WebhookAuthenticator:
    return request.app.state.authenticator


def get_sync_opener(request: Request) -> SyncOpener:
    """Defer opening the store until the route has authenticated and validated.

    Each call yields a ConnectionSync on a fresh SQLite connection, closed
    afterwards. Opening may raise; routes handle that inside their own guard.
    """
    state = request.app.state

    @contextmanager
    def _open() -> Iterator[ConnectionSync]:
        conn = state.connection_factory()
        try:
            yield build_connection_sync(conn, state.settings, clock=state.clock)
        finally:
            conn.close()

    return _open
