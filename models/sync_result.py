from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from models.contact_record import ContactRecord


class MatchType(str, Enum):
    URN_ID = "URN_ID"
    LINKEDIN_URL = "LINKEDIN_URL"
    EMAIL = "EMAIL"
    NEW = "NEW"


class SyncAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


class MatchResult(BaseModel):
    """Outcome of the match cascade. `contact` is a snapshot taken at match time."""

    found: bool
    match_type: MatchType
    contact: Optional[ContactRecord] = None

    @property
    def contact_id(self) -> Optional[str]:
        return self.contact.id if self.contact else None

    @classmethod
    def not_found(cls) -> "MatchResult":
        return cls(found=False, match_type=MatchType.NEW)


class SyncOutcome(BaseModel):
    success: bool
    action: SyncAction
    contact_id: Optional[str] = None
    match_type: Optional[MatchType] = None
    message: Optional[str] = None
    error: Optional[str] = None
    # Lost an insert race against the uniqueness guard; internal only
    conflict: bool = Field(default=False, exclude=True)

    @classmethod
    def skipped(cls, error: str, match_type: Optional[MatchType] = None, conflict: bool = False) -> "SyncOutcome":
        return cls(success=False, action=SyncAction.SKIPPED, match_type=match_type, error=error, conflict=conflict)

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class BatchSyncResult(BaseModel):
    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    results: List[SyncOutcome] = Field(default_factory=list)

    def add(self, outcome: SyncOutcome) -> None:
        self.results.append(outcome)
        self.total += 1
        if outcome.action is SyncAction.CREATED:
            self.created += 1
        elif outcome.action is SyncAction.UPDATED:
            self.updated += 1
        else:
            self.skipped += 1

    def to_response(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "results": [r.to_response() for r in self.results],
        }


class SyncActivity(BaseModel):
    """Append-only audit row describing one sync outcome."""

    organization_id: str
    contact_id: str
    type: str = "NOTE"
    title: str
    description: str
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
