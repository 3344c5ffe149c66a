from __future__ import annotations

from pipelines.runner import RunContext
from services.activity_recorder import ActivityRecorder


class RecordActivity:
    def __init__(self, recorder: ActivityRecorder) -> None:
        self.recorder = recorder

    def run(self, ctx: RunContext) -> RunContext:
        outcome = ctx.outcome
        if outcome is None or not outcome.success or not outcome.contact_id:
            return ctx
        ctx.meta["activity_recorded"] = self.recorder.record(
            ctx.organization_id,
            outcome.contact_id,
            outcome.action,
            ctx.connection,
            source=ctx.source,
            event_timestamp=ctx.event_timestamp,
        )
        return ctx
