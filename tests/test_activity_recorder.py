from __future__ import annotations

import logging

from conftest import INTEGRATION_ID, ORG_ID, WORKSPACE_ID, make_connection
from models.connection import SourceInfo
from models.sync_result import SyncAction
from services.activity_recorder import ActivityRecorder


def _contact(contacts):
    return contacts.create_contact(ORG_ID, {"first_name": "Ada", "custom_fields": {}})


def test_record_writes_provenance(contacts, activities):
    cid = _contact(contacts)
    source = SourceInfo(organization_id=ORG_ID, workspace_id=WORKSPACE_ID, integration_id=INTEGRATION_ID)
    ok = ActivityRecorder(activities).record(
        ORG_ID, cid, SyncAction.CREATED, make_connection(), source=source, event_timestamp="2024-05-01T10:00:05Z"
    )
    assert ok is True

    rows = activities.list_for_contact(cid)
    assert len(rows) == 1
    row = rows[0]
    assert row["title"] == "Contact created from LinkedIn connection"
    assert row["type"] == "NOTE"
    assert row["description"] == "LinkedIn connection accepted. Profile: Ada Lovelace"
    cf = row["custom_fields"]
    assert cf["source"] == "OUTREACH_SYNC"
    assert cf["connectionId"] == "0b6f0a6e-6a43-4a8e-8f1e-3c2d1b0a9f87"
    assert cf["linkedinUrl"] == "https://www.linkedin.com/in/ada"
    assert cf["connectedOn"] == "2024-05-01T10:00:00Z"
    assert cf["eventTimestamp"] == "2024-05-01T10:00:05Z"
    assert cf["workspaceId"] == WORKSPACE_ID
    assert "campaignId" not in cf


def test_record_failure_is_logged_and_swallowed(caplog):
    class _Broken:
        def create_activity(self, *args, **kwargs):
            raise RuntimeError("activities table locked")

    with caplog.at_level(logging.WARNING, logger="services.activity_recorder"):
        ok = ActivityRecorder(_Broken()).record(ORG_ID, "c1", SyncAction.UPDATED, make_connection())
    assert ok is False
    assert any("activities table locked" in r.getMessage() for r in caplog.records)
