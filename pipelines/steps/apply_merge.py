from __future__ import annotations

from models.sync_result import MatchResult
from pipelines.runner import RunContext
from services.contact_merger import ContactMerger


class ApplyMergePolicy:
    """Create on a miss, merge on a hit."""

    def __init__(self, merger: ContactMerger) -> None:
        self.merger = merger

    def run(self, ctx: RunContext) -> RunContext:
        match = ctx.match or MatchResult.not_found()
        if match.found:
            ctx.outcome = self.merger.merge_contact(match, ctx.connection, ctx.force_update)
        else:
            ctx.outcome = self.merger.create_contact(ctx.organization_id, ctx.connection)
        return ctx
