from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from models.contact_record import ContactRecord


class ContactsRepoPort(Protocol):
    def find_by_integration_id(self, organization_id: str, urn_id: str) -> Optional[ContactRecord]:
        ...

    def find_by_normalized_url(self, organization_id: str, variations: List[str]) -> Optional[ContactRecord]:
        ...

    def find_by_email(self, organization_id: str, email: str) -> Optional[ContactRecord]:
        ...

    def get_contact(self, contact_id: str) -> Optional[ContactRecord]:
        ...

    def create_contact(self, organization_id: str, fields: Dict[str, Any]) -> str:
        ...

    def update_contact(self, contact_id: str, fields: Dict[str, Any]) -> None:
        ...


class ActivitiesRepoPort(Protocol):
    def create_activity(
        self,
        organization_id: str,
        contact_id: str,
        type: str,
        title: str,
        description: str,
        custom_fields: Optional[Dict[str, Any]] = None,
    ) -> str:
        ...

    def list_for_contact(self, contact_id: str) -> List[Dict[str, Any]]:
        ...
