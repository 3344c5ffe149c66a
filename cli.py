import argparse
import json
import sys
from contextlib import contextmanager
from pathlib import Path

from db.connection import get_connection
from db import schema
from db.repos.activities_repo import ActivitiesRepo
from db.repos.contacts_repo import ContactsRepo
from models.connection import UuidStr
from pipelines.sync_connections import build_connection_sync
from services.linkedin_urls import linkedin_url_variations, normalize_linkedin_url
from services.reporting import print_summary
from config.settings import get_settings
from utils.logging_setup import init_logging
from pydantic import TypeAdapter, ValidationError


_UUID = TypeAdapter(UuidStr)


def _org_id(value: str) -> str:
    try:
        return _UUID.validate_python(value)
    except ValidationError:
        raise argparse.ArgumentTypeError(f"Invalid organization id (expected UUID): {value}")


def _contact_summary(contact) -> dict:
    return {
        "contact_id": contact.id,
        "first_name": contact.first_name,
        "last_name": contact.last_name,
        "email": contact.email,
        "job_title": contact.job_title,
        "company_name": contact.company_name,
        "linkedin_url": contact.linkedin_url,
        "lead_status": contact.lead_status,
        "updated_at": contact.updated_at,
    }


@contextmanager
def _open_store(db_path):
    """Bootstrapped SQLite connection, closed when the command finishes."""
    conn = get_connection(db_path)
    try:
        schema.bootstrap(conn)
        yield conn
    finally:
        conn.close()


def cmd_bootstrap(args):
    with _open_store(args.db):
        print("Schema ready")


def cmd_sync(args):
    input_path = Path(args.input)
    data = json.loads(input_path.read_text(encoding="utf-8"))
    connections = data.get("connections") if isinstance(data, dict) else data
    if not isinstance(connections, list):
        print("Input must be a JSON array or an object with a 'connections' array")
        sys.exit(2)
    with _open_store(args.db) as conn:
        sync = build_connection_sync(conn, get_settings())
        result = sync.run_batch(args.org, connections, force_update=args.force)
    print_summary(result, input_path)


def cmd_report_contact(args):
    profile = normalize_linkedin_url(args.profile)
    if not profile:
        print("Invalid LinkedIn profile URL")
        return
    with _open_store(args.db) as conn:
        contact = ContactsRepo(conn).find_by_normalized_url(args.org, linkedin_url_variations(profile))
        if not contact:
            print("No record found for profile")
            return
        activities = ActivitiesRepo(conn).list_for_contact(contact.id)
    result = _contact_summary(contact)
    result["custom_fields"] = contact.custom_fields
    result["activities"] = [
        {"title": a["title"], "created_at": a["created_at"], "source": a["custom_fields"].get("source")}
        for a in activities
    ]
    print(json.dumps(result, indent=2, ensure_ascii=False))


def cmd_report_recent(args):
    with _open_store(args.db) as conn:
        contacts = ContactsRepo(conn).list_recent(args.org, limit=args.limit)
    print(json.dumps([_contact_summary(c) for c in contacts], indent=2, ensure_ascii=False))


def cmd_serve(args):
    import uvicorn
    from api.app import create_app
    from dataclasses import replace

    settings = replace(get_settings(), db_path=args.db)
    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=settings.log_level.lower())


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="CRM outreach sync CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_sync = sub.add_parser("sync", help="Sync a JSON file of LinkedIn connections into contacts")
    p_sync.add_argument("--org", required=True, type=_org_id, help="Organization id (UUID)")
    p_sync.add_argument("--input", required=True, help="Path to JSON file (array or {\"connections\": [...]})")
    p_sync.add_argument("--force", action="store_true", help="Overwrite non-empty name/email/job title")
    p_sync.set_defaults(func=cmd_sync)

    p_rc = sub.add_parser("report-contact", help="Show the contact for a LinkedIn profile")
    p_rc.add_argument("--org", required=True, type=_org_id, help="Organization id (UUID)")
    p_rc.add_argument("--profile", required=True, help="LinkedIn profile URL")
    p_rc.set_defaults(func=cmd_report_contact)

    p_rr = sub.add_parser("report-recent", help="List recently synced contacts")
    p_rr.add_argument("--org", required=True, type=_org_id, help="Organization id (UUID)")
    p_rr.add_argument("--limit", type=int, default=5)
    p_rr.set_defaults(func=cmd_report_recent)

    p_srv = sub.add_parser("serve", help="Run the webhook HTTP service")
    p_srv.add_argument("--host", default=settings.api_host)
    p_srv.add_argument("--port", type=int, default=settings.api_port)
    p_srv.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
