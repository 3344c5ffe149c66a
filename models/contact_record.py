from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


# customFields keys owned by the LinkedIn outreach integration
LINKEDIN_FIELD_KEYS = (
    "linkedinUrnId",
    "linkedinPublicId",
    "linkedinConnected",
    "linkedinHeadline",
    "linkedinLocation",
    "linkedinProfilePhoto",
    "linkedinIndustry",
    "linkedinSkills",
    "linkedinLanguages",
    "linkedinWorkExperience",
    "linkedinEducation",
    "syncedFromOutreach",
    "lastSyncedAt",
)

# Owned by CRM users; the sync never writes these after creation
USER_MANAGED_FIELDS = frozenset({"lead_status", "owner_id", "priority"})


class ContactRecord(BaseModel):
    """Canonical, organization-scoped contact row."""

    id: str
    organization_id: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    job_title: str | None = None
    company_name: str | None = None
    linkedin_url: str | None = None
    profile_image_url: str | None = None
    is_lead: bool = False
    lead_source: str | None = None
    lead_status: str | None = None
    owner_id: str | None = None
    priority: str | None = None
    linkedin_urn_id: str | None = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None

    model_config = ConfigDict(extra="ignore")
