from __future__ import annotations

import sqlite3


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create contacts/activities schema and indexes (idempotent)."""
    cur = conn.cursor()

    # Contacts table
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS contacts (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  organization_id TEXT NOT NULL,\n"
            "  first_name TEXT,\n"
            "  last_name TEXT,\n"
            "  email TEXT,\n"
            "  phone TEXT,\n"
            "  job_title TEXT,\n"
            "  company_name TEXT,\n"
            "  linkedin_url TEXT,\n"
            "  profile_image_url TEXT,\n"
            "  is_lead INTEGER NOT NULL DEFAULT 0,\n"
            "  lead_source TEXT,\n"
            "  lead_status TEXT,\n"
            "  owner_id TEXT,\n"
            "  priority TEXT,\n"
            "  linkedin_urn_id TEXT,\n"
            "  custom_fields_json TEXT NOT NULL DEFAULT '{}',\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  updated_at TEXT NOT NULL DEFAULT (datetime('now'))\n"
            ")"
        )
    )
    # One contact per LinkedIn identity per organization
    cur.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS uq_contacts_org_urn "
        "ON contacts(organization_id, linkedin_urn_id) WHERE linkedin_urn_id IS NOT NULL;"
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_contacts_org_linkedin_url ON contacts(organization_id, linkedin_url);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_contacts_org_email ON contacts(organization_id, lower(email));")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_contacts_last_first ON contacts(last_name, first_name);")

    # Activities (append-only audit trail)
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS activities (\n"
            "  id TEXT PRIMARY KEY,\n"
            "  organization_id TEXT NOT NULL,\n"
            "  contact_id TEXT,\n"
            "  type TEXT NOT NULL,\n"
            "  title TEXT NOT NULL,\n"
            "  description TEXT,\n"
            "  custom_fields_json TEXT NOT NULL DEFAULT '{}',\n"
            "  created_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  FOREIGN KEY(contact_id) REFERENCES contacts(id) ON DELETE SET NULL\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_activities_contact_id ON activities(contact_id);")
    cur.execute("CREATE INDEX IF NOT EXISTS idx_activities_org_created ON activities(organization_id, created_at);")

    conn.commit()
