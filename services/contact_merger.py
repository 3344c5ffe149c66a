from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from models.connection import Connection
from models.contact_record import ContactRecord
from models.sync_result import MatchResult, MatchType, SyncAction, SyncOutcome
from ports.repos import ContactsRepoPort
from services.errors import DuplicateContactError
from services.linkedin_urls import normalize_linkedin_url
from services.mapping import build_linkedin_fields, merge_linkedin_fields, parse_name


logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContactMerger:
    """Create new contacts or fold LinkedIn data into existing ones.

    Merge strategy:
    - LinkedIn-sourced fields (photo, headline, location, connected date,
      skills, work history...): always take the latest inbound value; keep
      the stored value when the inbound one is absent.
    - Basic identity (name, email, job title, phone, company): only filled
      when currently empty, unless force_update is set.
    - User-managed fields (lead status, owner, priority): never written.

    Storage failures never escape; they become a `skipped` outcome.
    """

    def __init__(
        self,
        contacts: ContactsRepoPort,
        lead_source: str = "LINKEDIN_OUTREACH",
        initial_lead_status: str = "NEW",
        clock: Optional[Callable[[], str]] = None,
    ) -> None:
        self.contacts = contacts
        self.lead_source = lead_source
        self.initial_lead_status = initial_lead_status
        self.clock = clock or _utc_now_iso

    def create_contact(self, organization_id: str, connection: Connection) -> SyncOutcome:
        first_name, last_name = parse_name(connection.name, connection.first_name, connection.last_name)
        fields: Dict[str, Any] = {
            "first_name": first_name,
            "last_name": last_name,
            "email": connection.email.lower() if connection.email else None,
            "phone": connection.phone or None,
            "job_title": connection.job_title or None,
            "company_name": connection.company or None,
            "linkedin_url": normalize_linkedin_url(connection.profile_url, connection.public_id),
            "profile_image_url": connection.profile_pic_url or None,
            "is_lead": True,
            "lead_source": self.lead_source,
            "lead_status": self.initial_lead_status,
            "linkedin_urn_id": connection.urn_id,
            "custom_fields": build_linkedin_fields(connection, self.clock()),
        }
        try:
            contact_id = self.contacts.create_contact(organization_id, fields)
        except DuplicateContactError as exc:
            # Another delivery created this identity between our match and insert
            logger.warning(
                "Contact create lost a race to a concurrent sync",
                extra={"step": "create", "status": "conflict", "org_id": organization_id, "error": str(exc)},
            )
            return SyncOutcome.skipped(str(exc), match_type=MatchType.NEW, conflict=True)
        except Exception as exc:
            logger.error(
                f"Failed to create contact: {exc}",
                extra={"step": "create", "status": "skipped", "org_id": organization_id, "error": str(exc)},
            )
            return SyncOutcome.skipped(str(exc) or "Unknown error")

        logger.info(
            f"Created new contact {contact_id} from LinkedIn connection",
            extra={"step": "create", "status": "ok", "org_id": organization_id, "contact_id": contact_id},
        )
        return SyncOutcome(
            success=True,
            action=SyncAction.CREATED,
            contact_id=contact_id,
            match_type=MatchType.NEW,
            message=f"Created new contact: {first_name} {last_name}".rstrip(),
        )

    def merge_contact(self, match: MatchResult, connection: Connection, force_update: bool = False) -> SyncOutcome:
        if not match.found or match.contact is None:
            return SyncOutcome.skipped("No existing contact to merge with")

        contact_id = match.contact.id
        try:
            # Re-read so the empty-field checks see the latest stored state
            current = self.contacts.get_contact(contact_id)
            if current is None:
                return SyncOutcome.skipped(f"Contact {contact_id} no longer exists", match_type=match.match_type)
            update, first_name, last_name = self._build_update(current, connection, force_update)
            self.contacts.update_contact(contact_id, update)
        except Exception as exc:
            logger.error(
                f"Failed to merge contact: {exc}",
                extra={"step": "merge", "status": "skipped", "contact_id": contact_id, "error": str(exc)},
            )
            return SyncOutcome.skipped(str(exc) or "Unknown error", match_type=match.match_type)

        logger.info(
            f"Merged LinkedIn data into contact {contact_id} (match type: {match.match_type.value})",
            extra={"step": "merge", "status": "ok", "contact_id": contact_id, "match_type": match.match_type.value},
        )
        return SyncOutcome(
            success=True,
            action=SyncAction.UPDATED,
            contact_id=contact_id,
            match_type=match.match_type,
            message=f"Updated existing contact: {first_name} {last_name}".rstrip(),
        )

    def _build_update(self, existing: ContactRecord, connection: Connection, force_update: bool):
        update: Dict[str, Any] = {
            "custom_fields": merge_linkedin_fields(existing.custom_fields, connection, self.clock()),
            "linkedin_urn_id": connection.urn_id,
            "linkedin_url": normalize_linkedin_url(connection.profile_url, connection.public_id) or existing.linkedin_url,
            "profile_image_url": connection.profile_pic_url or existing.profile_image_url,
        }

        first_name, last_name = parse_name(connection.name, connection.first_name, connection.last_name)
        basic = {
            "first_name": first_name,
            "last_name": last_name,
            "email": connection.email.lower() if connection.email else None,
            "job_title": connection.job_title,
            "phone": connection.phone,
            "company_name": connection.company,
        }
        for column, inbound in basic.items():
            # An absent inbound value never blanks a stored one, even when forced
            if not inbound:
                continue
            if force_update or not getattr(existing, column):
                update[column] = inbound
        return update, first_name, last_name
