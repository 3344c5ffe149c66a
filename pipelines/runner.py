from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from models.connection import Connection, SourceInfo
from models.sync_result import MatchResult, SyncOutcome
from utils.logging_setup import init_logging


@dataclass
class RunContext:
    """State for one connection flowing through the sync pipeline."""

    organization_id: str
    connection: Connection
    force_update: bool = False
    source: Optional[SourceInfo] = None
    event_timestamp: Optional[str] = None
    match: Optional[MatchResult] = None
    outcome: Optional[SyncOutcome] = None
    meta: dict = field(default_factory=dict)


class Step(Protocol):
    def run(self, ctx: RunContext) -> RunContext:
        ...


class Pipeline:
    def __init__(self, steps: List[Step]):
        self.steps = steps

    def run(self, ctx: RunContext) -> RunContext:
        # Make logging idempotent for any direct runner use
        init_logging()
        for step in self.steps:
            ctx = step.run(ctx)
        return ctx
