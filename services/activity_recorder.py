from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from models.connection import Connection, SourceInfo
from models.sync_result import SyncAction, SyncActivity
from ports.repos import ActivitiesRepoPort


logger = logging.getLogger(__name__)

ACTIVITY_SOURCE = "OUTREACH_SYNC"

_TITLES = {
    SyncAction.CREATED: "Contact created from LinkedIn connection",
    SyncAction.UPDATED: "Contact updated from LinkedIn sync",
}


class ActivityRecorder:
    """Fire-and-forget audit trail for sync outcomes.

    `record` returns whether the activity was written; a failure is logged
    and never raised, so the outcome the caller already holds is untouched.
    """

    def __init__(self, activities: ActivitiesRepoPort) -> None:
        self.activities = activities

    def build_activity(
        self,
        organization_id: str,
        contact_id: str,
        action: SyncAction,
        connection: Connection,
        source: Optional[SourceInfo] = None,
        event_timestamp: Optional[str] = None,
    ) -> SyncActivity:
        custom_fields: Dict[str, Any] = {
            "source": ACTIVITY_SOURCE,
            "connectionId": connection.id,
            "linkedinUrl": connection.profile_url,
            "connectedOn": connection.connected_on,
        }
        if event_timestamp:
            custom_fields["eventTimestamp"] = event_timestamp
        if source is not None:
            custom_fields["workspaceId"] = source.workspace_id
            custom_fields["integrationId"] = source.integration_id
            if source.campaign_id:
                custom_fields["campaignId"] = source.campaign_id
        return SyncActivity(
            organization_id=organization_id,
            contact_id=contact_id,
            title=_TITLES.get(action, "Contact synced from LinkedIn"),
            description=f"LinkedIn connection accepted. Profile: {connection.name}",
            custom_fields=custom_fields,
        )

    def record(
        self,
        organization_id: str,
        contact_id: str,
        action: SyncAction,
        connection: Connection,
        source: Optional[SourceInfo] = None,
        event_timestamp: Optional[str] = None,
    ) -> bool:
        try:
            activity = self.build_activity(organization_id, contact_id, action, connection, source, event_timestamp)
            self.activities.create_activity(
                activity.organization_id,
                activity.contact_id,
                activity.type,
                activity.title,
                activity.description,
                activity.custom_fields,
            )
        except Exception as exc:
            # Non-critical - log but don't fail
            logger.warning(
                f"Failed to create sync activity: {exc}",
                extra={"step": "activity", "status": "failed", "org_id": organization_id, "contact_id": contact_id, "error": str(exc)},
            )
            return False
        return True
