from .connection import (
    BatchSyncPayload,
    Connection,
    ConnectionAcceptedPayload,
    ManualSyncPayload,
    SourceInfo,
)
from .contact_record import ContactRecord
from .sync_result import BatchSyncResult, MatchResult, MatchType, SyncAction, SyncActivity, SyncOutcome

__all__ = [
    "BatchSyncPayload",
    "Connection",
    "ConnectionAcceptedPayload",
    "ManualSyncPayload",
    "SourceInfo",
    "ContactRecord",
    "BatchSyncResult",
    "MatchResult",
    "MatchType",
    "SyncAction",
    "SyncActivity",
    "SyncOutcome",
]
