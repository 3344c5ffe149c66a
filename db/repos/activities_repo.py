from __future__ import annotations

import json
import sqlite3
import uuid
from typing import Any, Dict, List, Optional

from services.errors import StorageError


class ActivitiesRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def create_activity(
        self,
        organization_id: str,
        contact_id: str,
        type: str,
        title: str,
        description: str,
        custom_fields: Optional[Dict[str, Any]] = None,
    ) -> str:
        activity_id = str(uuid.uuid4())
        sql = (
            "INSERT INTO activities (id, organization_id, contact_id, type, title, description, custom_fields_json) "
            "VALUES (?, ?, ?, ?, ?, ?, ?);"
        )
        try:
            self.conn.execute(sql, (
                activity_id, organization_id, contact_id, type, title, description,
                json.dumps(custom_fields or {}, ensure_ascii=False, sort_keys=True),
            ))
            self.conn.commit()
        except sqlite3.Error as exc:
            self.conn.rollback()
            raise StorageError(f"Activity insert failed: {exc}", exc) from exc
        return activity_id

    def list_for_contact(self, contact_id: str) -> List[Dict[str, Any]]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT id, organization_id, contact_id, type, title, description, custom_fields_json, created_at "
            "FROM activities WHERE contact_id = ? ORDER BY created_at ASC, rowid ASC;",
            (contact_id,),
        )
        out = []
        for r in cur.fetchall():
            out.append({
                "id": r[0],
                "organization_id": r[1],
                "contact_id": r[2],
                "type": r[3],
                "title": r[4],
                "description": r[5],
                "custom_fields": json.loads(r[6] or "{}"),
                "created_at": r[7],
            })
        return out
