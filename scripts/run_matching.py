"""
Manual matching trigger — runs a single event's matching from the command line.

Usage:
    python scripts/run_matching.py <event_id>

Same run the organizer endpoint performs: takes the event lock, replaces
the event's matches and prints the run report.
"""

import asyncio
import json
import sys

from app.matching_engine.engine import matching_engine


async def main(event_id: str):
    """Run matching for *event_id* and print the report."""
    print(f"Starting matching run for event {event_id}...")
    result = await matching_engine.run_for_event(event_id)

    if result.get("skipped"):
        print("Skipped: another run of this event is in progress.")
        return

    print("\n=== Matching Run Report ===")
    print(json.dumps(result, indent=2, default=str))
    print(f"\nTotal pairs: {result['results']['total_pairs']}")
    print(f"Match rate: {result['results']['match_rate_pct']}%")
    print(f"Unmatched: {', '.join(result['unmatched']) or '-'}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python scripts/run_matching.py <event_id>")
        sys.exit(2)
    asyncio.run(main(sys.argv[1]))
