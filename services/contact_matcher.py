from __future__ import annotations

import logging
from typing import Callable, Optional

from models.connection import Connection
from models.contact_record import ContactRecord
from models.sync_result import MatchResult, MatchType
from ports.repos import ContactsRepoPort
from services.linkedin_urls import linkedin_url_variations, normalize_linkedin_url


logger = logging.getLogger(__name__)


class ContactMatcher:
    """Resolve an inbound connection to at most one existing contact.

    Priority order, first hit wins:
      1. LinkedIn URN (exact, case-sensitive)
      2. Canonical LinkedIn profile URL (any stored spelling)
      3. Email (case-insensitive), only when the connection has one

    A failing lookup is logged and counted as a miss so the cascade keeps
    going. That can resolve to a lower-priority contact while the URN path
    is down.
    """

    def __init__(self, contacts: ContactsRepoPort) -> None:
        self.contacts = contacts

    def _safe_lookup(self, step: str, organization_id: str, lookup: Callable[[], Optional[ContactRecord]]) -> Optional[ContactRecord]:
        try:
            return lookup()
        except Exception as exc:
            logger.warning(
                "Contact lookup failed; treating as miss",
                extra={"step": step, "status": "degraded", "org_id": organization_id, "error": str(exc)},
            )
            return None

    def find_match(self, organization_id: str, connection: Connection) -> MatchResult:
        urn_id = connection.urn_id
        contact = self._safe_lookup(
            "match_urn", organization_id,
            lambda: self.contacts.find_by_integration_id(organization_id, urn_id),
        )
        if contact:
            return self._found(MatchType.URN_ID, contact, organization_id)

        normalized_url = normalize_linkedin_url(connection.profile_url, connection.public_id)
        if normalized_url:
            variations = linkedin_url_variations(normalized_url)
            contact = self._safe_lookup(
                "match_url", organization_id,
                lambda: self.contacts.find_by_normalized_url(organization_id, variations),
            )
            if contact:
                return self._found(MatchType.LINKEDIN_URL, contact, organization_id)

        if connection.email:
            email = connection.email.lower()
            contact = self._safe_lookup(
                "match_email", organization_id,
                lambda: self.contacts.find_by_email(organization_id, email),
            )
            if contact:
                return self._found(MatchType.EMAIL, contact, organization_id)

        logger.info(
            f"No existing contact found for URN: {urn_id}",
            extra={"step": "match", "status": "miss", "org_id": organization_id, "match_type": MatchType.NEW.value},
        )
        return MatchResult.not_found()

    @staticmethod
    def _found(match_type: MatchType, contact: ContactRecord, organization_id: str) -> MatchResult:
        logger.info(
            f"Found contact match by {match_type.value}: {contact.id}",
            extra={
                "step": "match",
                "status": "hit",
                "org_id": organization_id,
                "contact_id": contact.id,
                "match_type": match_type.value,
            },
        )
        return MatchResult(found=True, match_type=match_type, contact=contact)
