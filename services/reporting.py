from __future__ import annotations

from pathlib import Path
from typing import Optional

from models.sync_result import BatchSyncResult, SyncAction


def print_summary(result: BatchSyncResult, input_path: Optional[Path] = None, show_errors: int = 5) -> None:
    """Print summary of a batch sync run."""
    print("\n" + "="*60)
    print("LINKEDIN OUTREACH SYNC - SUMMARY")
    print("="*60)
    if input_path:
        print(f"Input File: {input_path}")
    print(f"Total Connections: {result.total}")
    print()
    print("Outcomes:")
    print(f"  Created: {result.created}")
    print(f"  Updated: {result.updated}")
    print(f"  Skipped: {result.skipped}")

    match_counts: dict = {}
    for outcome in result.results:
        if outcome.action is not SyncAction.SKIPPED and outcome.match_type is not None:
            key = outcome.match_type.value
            match_counts[key] = match_counts.get(key, 0) + 1
    if match_counts:
        print()
        print("Match Types:")
        for key in sorted(match_counts):
            print(f"  {key}: {match_counts[key]}")

    errors = [o.error for o in result.results if o.action is SyncAction.SKIPPED and o.error]
    if errors:
        print()
        print(f"Errors (first {min(show_errors, len(errors))} of {len(errors)}):")
        for err in errors[:show_errors]:
            print(f"  - {err}")
    print("="*60)
