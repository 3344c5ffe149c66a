from __future__ import annotations

from pipelines.runner import RunContext
from services.contact_matcher import ContactMatcher


class MatchContact:
    def __init__(self, matcher: ContactMatcher) -> None:
        self.matcher = matcher

    def run(self, ctx: RunContext) -> RunContext:
        ctx.match = self.matcher.find_match(ctx.organization_id, ctx.connection)
        return ctx
