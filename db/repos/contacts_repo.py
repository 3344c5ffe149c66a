from __future__ import annotations

import json
import sqlite3
import uuid
from typing import Any, Dict, List, Optional

from models.contact_record import USER_MANAGED_FIELDS, ContactRecord
from services.errors import DuplicateContactError, StorageError


_COLUMNS = (
    "id", "organization_id", "first_name", "last_name", "email", "phone", "job_title",
    "company_name", "linkedin_url", "profile_image_url", "is_lead", "lead_source",
    "lead_status", "owner_id", "priority", "linkedin_urn_id", "custom_fields_json",
    "created_at", "updated_at",
)

# Columns create_contact accepts (id/timestamps are generated)
_INSERTABLE = (
    "first_name", "last_name", "email", "phone", "job_title", "company_name",
    "linkedin_url", "profile_image_url", "is_lead", "lead_source", "lead_status",
    "owner_id", "priority", "linkedin_urn_id", "custom_fields",
)

_UPDATABLE = frozenset(_INSERTABLE) - USER_MANAGED_FIELDS - {"is_lead", "lead_source"}

_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM contacts"


def _row_to_contact(row: Optional[tuple]) -> Optional[ContactRecord]:
    if row is None:
        return None
    data = dict(zip(_COLUMNS, row))
    raw_custom = data.pop("custom_fields_json") or "{}"
    try:
        custom = json.loads(raw_custom)
    except ValueError:
        custom = {}
    data["custom_fields"] = custom if isinstance(custom, dict) else {}
    data["is_lead"] = bool(data.get("is_lead"))
    return ContactRecord(**data)


def _to_db_value(column: str, value: Any) -> Any:
    if column == "custom_fields":
        return json.dumps(value or {}, ensure_ascii=False, sort_keys=True)
    if column == "is_lead":
        return 1 if value else 0
    return value


def _db_column(column: str) -> str:
    return "custom_fields_json" if column == "custom_fields" else column


class ContactsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _fetch_one(self, sql: str, params: tuple) -> Optional[ContactRecord]:
        try:
            cur = self.conn.cursor()
            cur.execute(sql, params)
            return _row_to_contact(cur.fetchone())
        except sqlite3.Error as exc:
            raise StorageError(f"Contact lookup failed: {exc}", exc) from exc

    def find_by_integration_id(self, organization_id: str, urn_id: str) -> Optional[ContactRecord]:
        """Exact, case-sensitive match on the stored LinkedIn URN."""
        if not urn_id:
            return None
        sql = (
            f"{_SELECT} WHERE organization_id = ? "
            "AND (linkedin_urn_id = ? OR json_extract(custom_fields_json, '$.linkedinUrnId') = ?) "
            "ORDER BY created_at ASC, rowid ASC LIMIT 1;"
        )
        return self._fetch_one(sql, (organization_id, urn_id, urn_id))

    def find_by_normalized_url(self, organization_id: str, variations: List[str]) -> Optional[ContactRecord]:
        if not variations:
            return None
        placeholders = ", ".join("?" for _ in variations)
        sql = (
            f"{_SELECT} WHERE organization_id = ? AND linkedin_url IN ({placeholders}) "
            "ORDER BY created_at ASC, rowid ASC LIMIT 1;"
        )
        return self._fetch_one(sql, (organization_id, *variations))

    def find_by_email(self, organization_id: str, email: str) -> Optional[ContactRecord]:
        if not email:
            return None
        sql = (
            f"{_SELECT} WHERE organization_id = ? AND lower(email) = lower(?) "
            "ORDER BY created_at ASC, rowid ASC LIMIT 1;"
        )
        return self._fetch_one(sql, (organization_id, email.strip()))

    def get_contact(self, contact_id: str) -> Optional[ContactRecord]:
        return self._fetch_one(f"{_SELECT} WHERE id = ?;", (contact_id,))

    def list_recent(self, organization_id: str, limit: int = 5) -> List[ContactRecord]:
        try:
            cur = self.conn.cursor()
            cur.execute(
                f"{_SELECT} WHERE organization_id = ? ORDER BY updated_at DESC, rowid DESC LIMIT ?;",
                (organization_id, limit),
            )
            return [c for c in (_row_to_contact(r) for r in cur.fetchall()) if c is not None]
        except sqlite3.Error as exc:
            raise StorageError(f"Contact listing failed: {exc}", exc) from exc

    def count(self, organization_id: str) -> int:
        cur = self.conn.cursor()
        cur.execute("SELECT COUNT(*) FROM contacts WHERE organization_id = ?;", (organization_id,))
        return int(cur.fetchone()[0])

    def create_contact(self, organization_id: str, fields: Dict[str, Any]) -> str:
        """Insert a contact; returns its id.

        Raises DuplicateContactError when another contact in the organization
        already carries the same linkedin_urn_id.
        """
        unknown = set(fields) - set(_INSERTABLE)
        if unknown:
            raise ValueError(f"Unknown contact fields: {sorted(unknown)}")
        contact_id = str(uuid.uuid4())
        columns = ["id", "organization_id"] + [_db_column(c) for c in fields]
        values = [contact_id, organization_id] + [_to_db_value(c, v) for c, v in fields.items()]
        sql = (
            f"INSERT INTO contacts ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)});"
        )
        try:
            self.conn.execute(sql, values)
            self.conn.commit()
        except sqlite3.IntegrityError as exc:
            self.conn.rollback()
            raise DuplicateContactError(f"Contact already exists for this LinkedIn identity: {exc}", exc) from exc
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise StorageError(f"Contact insert failed: {exc}", exc) from exc
        return contact_id

    def update_contact(self, contact_id: str, fields: Dict[str, Any]) -> None:
        """Update the given columns only; user-managed columns are rejected."""
        forbidden = set(fields) & USER_MANAGED_FIELDS
        if forbidden:
            raise ValueError(f"Refusing to write user-managed fields: {sorted(forbidden)}")
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unknown contact fields: {sorted(unknown)}")
        if not fields:
            return
        assignments = [f"{_db_column(c)} = ?" for c in fields] + ["updated_at = datetime('now')"]
        values = [_to_db_value(c, v) for c, v in fields.items()]
        sql = f"UPDATE contacts SET {', '.join(assignments)} WHERE id = ?;"
        try:
            cur = self.conn.execute(sql, (*values, contact_id))
            if cur.rowcount == 0:
                self.conn.rollback()
                raise StorageError(f"Contact {contact_id} not found")
            self.conn.commit()
        except sqlite3.IntegrityError as exc:
            self.conn.rollback()
            raise DuplicateContactError(f"Update conflicts with another contact: {exc}", exc) from exc
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise StorageError(f"Contact update failed: {exc}", exc) from exc
