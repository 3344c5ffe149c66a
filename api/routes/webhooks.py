"""
Outreach Webhook Routes
Sync accepted LinkedIn connections from the outreach backend into CRM contacts.

Auth and schema failures are the only request-level errors (401/400).
Anything that goes wrong after that is reported inside the outcome body.
"""
import logging
from typing import Any, Dict, Type, TypeVar

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import SyncOpener, get_authenticator, get_sync_opener
from models.connection import BatchSyncPayload, ConnectionAcceptedPayload, ManualSyncPayload, parse_payload
from models.sync_result import BatchSyncResult, SyncOutcome
from services.auth import WebhookAuthenticator
from services.errors import AuthenticationError, PayloadValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks/outreach", tags=["webhooks"])

M = TypeVar("M", bound=BaseModel)


def _require_object(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Invalid webhook payload",
                "errors": [{"loc": [], "msg": "Expected a JSON object", "type": "dict_type"}],
            },
        )
    return payload


def _authenticate(authenticator: WebhookAuthenticator, payload: Dict[str, Any]) -> None:
    try:
        authenticator.require(payload.get("webhook_secret"))
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e


def _validate(model: Type[M], payload: Dict[str, Any]) -> M:
    try:
        return parse_payload(model, payload)
    except PayloadValidationError as e:
        logger.error(f"Invalid payload: {e.summary()}", extra={"step": "validate", "status": "rejected"})
        raise HTTPException(status_code=400, detail={"message": e.message, "errors": e.errors}) from e


@router.post("/connection-accepted")
def connection_accepted(
    payload: Any = Body(...),
    authenticator: WebhookAuthenticator = Depends(get_authenticator),
    open_sync: SyncOpener = Depends(get_sync_opener),
):
    """Create or update one contact for an accepted LinkedIn connection."""
    logger.info("Received connection-accepted webhook")
    body = _require_object(payload)
    _authenticate(authenticator, body)
    event = _validate(ConnectionAcceptedPayload, body)

    try:
        with open_sync() as sync:
            outcome = sync.sync_one(
                event.source.organization_id,
                event.connection,
                force_update=False,
                source=event.source,
                event_timestamp=event.timestamp,
            )
    except Exception as e:
        logger.error(f"Webhook processing failed: {e}", exc_info=True, extra={"step": "webhook", "status": "skipped"})
        outcome = SyncOutcome.skipped(str(e) or "Processing failed")
    return outcome.to_response()


@router.post("/batch-sync")
def batch_sync(
    payload: Any = Body(...),
    authenticator: WebhookAuthenticator = Depends(get_authenticator),
    open_sync: SyncOpener = Depends(get_sync_opener),
):
    """
    Sync many connections at once (initial import or periodic reconciliation).

    Item failures land in `results`; the request itself still returns 200.
    """
    connections = payload.get("connections") if isinstance(payload, dict) else None
    logger.info(f"Received batch-sync webhook with {len(connections) if isinstance(connections, list) else 0} connections")
    body = _require_object(payload)
    _authenticate(authenticator, body)
    batch = _validate(BatchSyncPayload, body)

    try:
        with open_sync() as sync:
            result = sync.run_batch(batch.organization_id, batch.connections)
    except Exception as e:
        # Store unreachable: every item is reported as skipped
        logger.error(f"Batch sync failed: {e}", exc_info=True, extra={"step": "batch", "status": "skipped"})
        result = BatchSyncResult()
        for _ in batch.connections:
            result.add(SyncOutcome.skipped(str(e) or "Processing failed"))
    return result.to_response()


@router.post("/manual-sync")
def manual_sync(
    payload: Any = Body(...),
    authenticator: WebhookAuthenticator = Depends(get_authenticator),
    open_sync: SyncOpener = Depends(get_sync_opener),
):
    """Re-sync a single connection on demand, optionally overwriting basic fields."""
    logger.info("Received manual-sync request")
    body = _require_object(payload)
    _authenticate(authenticator, body)
    manual = _validate(ManualSyncPayload, body)

    try:
        with open_sync() as sync:
            outcome = sync.sync_one(manual.organization_id, manual.connection, force_update=manual.force_update)
    except Exception as e:
        logger.error(f"Manual sync failed: {e}", exc_info=True, extra={"step": "manual_sync", "status": "skipped"})
        outcome = SyncOutcome.skipped(str(e) or "Processing failed")
    return outcome.to_response()
