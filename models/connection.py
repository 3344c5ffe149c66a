from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, ValidationError

from services.errors import PayloadValidationError


def _check_uuid(value: str) -> str:
    # Canonical lowercase hyphenated form; raises ValueError on garbage
    return str(uuid.UUID(value))


def _check_iso_datetime(value: str) -> str:
    if "T" not in value:
        raise ValueError("expected an ISO-8601 date-time")
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    datetime.fromisoformat(text)
    return value


UuidStr = Annotated[str, AfterValidator(_check_uuid)]
IsoDateTimeStr = Annotated[str, AfterValidator(_check_iso_datetime)]


class SourceInfo(BaseModel):
    """Where the event came from in the outreach backend."""

    organization_id: UuidStr
    workspace_id: UuidStr
    integration_id: UuidStr
    campaign_id: Optional[UuidStr] = None

    model_config = ConfigDict(extra="ignore")


class Connection(BaseModel):
    """An accepted LinkedIn connection as delivered by the outreach backend.

    Immutable once validated; the pipeline only reads from it.
    """

    id: UuidStr
    urn_id: str = Field(min_length=1)
    public_id: Optional[str] = None
    name: str = Field(min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    profile_url: str
    profile_pic_url: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    location: Optional[str] = None
    industry: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    connected_on: IsoDateTimeStr
    # Enrichment
    skills: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    work_experience: Optional[Any] = None
    education: Optional[Any] = None

    model_config = ConfigDict(extra="ignore", frozen=True)


class ConnectionAcceptedPayload(BaseModel):
    webhook_secret: str
    event_type: Literal["CONNECTION_ACCEPTED"]
    timestamp: IsoDateTimeStr
    source: SourceInfo
    connection: Connection

    model_config = ConfigDict(extra="ignore")


class BatchSyncPayload(BaseModel):
    webhook_secret: str
    organization_id: UuidStr
    # Items are validated one by one so a bad record only skips itself
    connections: List[Any]

    model_config = ConfigDict(extra="ignore")


class ManualSyncPayload(BaseModel):
    webhook_secret: str
    organization_id: UuidStr
    workspace_id: UuidStr
    force_update: bool = False
    connection: Connection

    model_config = ConfigDict(extra="ignore")


M = TypeVar("M", bound=BaseModel)


def parse_payload(model: Type[M], raw: Any) -> M:
    """Validate raw JSON into `model` or raise PayloadValidationError."""
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        raise PayloadValidationError(errors) from exc


def parse_connection(raw: Any) -> Connection:
    return parse_payload(Connection, raw)
