from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from models.connection import Connection


# customFields key -> Connection attribute
_LINKEDIN_SOURCE_ATTRS: Dict[str, str] = {
    "linkedinUrnId": "urn_id",
    "linkedinPublicId": "public_id",
    "linkedinConnected": "connected_on",
    "linkedinHeadline": "headline",
    "linkedinLocation": "location",
    "linkedinProfilePhoto": "profile_pic_url",
    "linkedinIndustry": "industry",
    "linkedinSkills": "skills",
    "linkedinLanguages": "languages",
    "linkedinWorkExperience": "work_experience",
    "linkedinEducation": "education",
}

_LIST_KEYS = ("linkedinSkills", "linkedinLanguages")


def parse_name(full_name: Optional[str], first_name: Optional[str] = None, last_name: Optional[str] = None) -> Tuple[str, str]:
    """Resolve (first, last). Explicit parts win only when both are given."""
    if first_name and last_name:
        return first_name, last_name
    parts = (full_name or "").split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], " ".join(parts[1:])


def build_linkedin_fields(connection: Connection, synced_at: str) -> Dict[str, Any]:
    """Integration-owned customFields for a brand new contact."""
    fields: Dict[str, Any] = {}
    for key, attr in _LINKEDIN_SOURCE_ATTRS.items():
        value = getattr(connection, attr)
        if value is not None:
            fields[key] = value
    for key in _LIST_KEYS:
        fields.setdefault(key, [])
    fields["syncedFromOutreach"] = True
    fields["lastSyncedAt"] = synced_at
    return fields


def merge_linkedin_fields(existing: Optional[Dict[str, Any]], connection: Connection, synced_at: str) -> Dict[str, Any]:
    """Overlay the latest integration values onto stored customFields.

    Inbound values always win; an absent inbound value keeps what is stored.
    Keys outside the integration namespace pass through untouched.
    """
    merged: Dict[str, Any] = dict(existing or {})
    for key, attr in _LINKEDIN_SOURCE_ATTRS.items():
        value = getattr(connection, attr)
        if value is not None:
            merged[key] = value
    for key in _LIST_KEYS:
        if merged.get(key) is None:
            merged[key] = []
    merged["syncedFromOutreach"] = True
    merged["lastSyncedAt"] = synced_at
    return merged
