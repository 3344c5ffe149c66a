from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'pipelines.sync_connections'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


ORG_ID = "6f1c2b0e-2d4a-4c1e-9a53-0c7f1a2b3c4d"
OTHER_ORG_ID = "9d8e7f6a-5b4c-4d3e-8f2a-1b0c9d8e7f6a"
WORKSPACE_ID = "1a2b3c4d-5e6f-4a7b-8c9d-0e1f2a3b4c5d"
INTEGRATION_ID = "2b3c4d5e-6f7a-4b8c-9d0e-1f2a3b4c5d6e"
FIXED_NOW = "2024-06-01T00:00:00+00:00"


def fixed_clock() -> str:
    return FIXED_NOW


def connection_dict(**overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": "0b6f0a6e-6a43-4a8e-8f1e-3c2d1b0a9f87",
        "urn_id": "u1",
        "name": "Ada Lovelace",
        "profile_url": "https://www.linkedin.com/in/ada",
        "email": "ada@x.com",
        "connected_on": "2024-05-01T10:00:00Z",
    }
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not None}


def make_connection(**overrides: Any):
    from models.connection import Connection

    return Connection.model_validate(connection_dict(**overrides))


@pytest.fixture
def db(tmp_path):
    from db import schema
    from db.connection import get_connection

    conn = get_connection(str(tmp_path / "t.db"))
    try:
        schema.bootstrap(conn)
        yield conn
    finally:
        conn.close()


@pytest.fixture
def contacts(db):
    from db.repos.contacts_repo import ContactsRepo

    return ContactsRepo(db)


@pytest.fixture
def activities(db):
    from db.repos.activities_repo import ActivitiesRepo

    return ActivitiesRepo(db)
