from __future__ import annotations

from typing import Any, Dict, List, Optional


class SyncError(Exception):
    """Base class for connection sync failures."""


class PayloadValidationError(SyncError):
    """Inbound payload failed schema validation. No side effects happened."""

    def __init__(self, errors: List[Dict[str, Any]], message: str = "Invalid webhook payload"):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def summary(self) -> str:
        parts = []
        for err in self.errors:
            loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
            parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
        return "; ".join(parts) or self.message


class AuthenticationError(SyncError):
    """Webhook secret missing or mismatched."""


class StorageError(SyncError):
    """A contact/activity store operation failed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class DuplicateContactError(StorageError):
    """Insert hit the (organization_id, linkedin_urn_id) uniqueness guard."""
