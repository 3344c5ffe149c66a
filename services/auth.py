from __future__ import annotations

import hmac
import logging
from typing import Any, Optional

from services.errors import AuthenticationError


logger = logging.getLogger(__name__)


def verify_secret(expected: Optional[str], provided: Any) -> bool:
    """Timing-safe shared-secret check.

    An empty expected secret means auth is disabled and always passes.
    Never raises: non-string or unencodable input simply fails.
    """
    if not expected:
        return True
    if not isinstance(provided, str):
        return False
    try:
        expected_bytes = expected.encode("utf-8")
        provided_bytes = provided.encode("utf-8")
    except UnicodeEncodeError:
        return False
    if len(expected_bytes) != len(provided_bytes):
        return False
    # hmac.compare_digest runs in constant time regardless of where bytes differ
    return hmac.compare_digest(expected_bytes, provided_bytes)


class WebhookAuthenticator:
    """Holds the configured webhook secret and checks inbound requests against it."""

    def __init__(self, secret: Optional[str], production: bool = False) -> None:
        self._secret = secret or ""
        if not self._secret:
            # Fail-open for local/dev; loud so it is noticed anywhere else
            level = logging.ERROR if production else logging.WARNING
            logger.log(
                level,
                "OUTREACH_WEBHOOK_SECRET not set - webhook authentication disabled",
                extra={"step": "auth", "status": "disabled"},
            )

    @property
    def enabled(self) -> bool:
        return bool(self._secret)

    def verify(self, provided: Any) -> bool:
        return verify_secret(self._secret, provided)

    def require(self, provided: Any) -> None:
        if not self.verify(provided):
            logger.warning("Webhook authentication failed", extra={"step": "auth", "status": "rejected"})
            raise AuthenticationError("Invalid webhook secret")
