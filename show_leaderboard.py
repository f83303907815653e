"""
Print the puzzle leaderboard for one day.

Usage:
    python show_leaderboard.py [mini|daily] [--date YYYY-MM-DD] [--credentials cookies.json]

Environment:
    Any puzzleboard setting, e.g. REQUEST_TIMEOUT, MAX_CONCURRENCY, LOOKUP_FAILURE_POLICY
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date

import httpx

from puzzleboard.config import settings
from puzzleboard.credentials import CredentialFileError, CredentialStore
from puzzleboard.leaderboard.aggregator import InvalidVariant, LeaderboardAggregator
from puzzleboard.leaderboard.formatting import format_time, parse_date
from puzzleboard.models import LeaderboardEntry
from puzzleboard.puzzles.client import PuzzleClient


async def fetch(
    store: CredentialStore,
    variant: str,
    day: date,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[LeaderboardEntry]:
    async with httpx.AsyncClient(timeout=settings.request_timeout, transport=transport) as http:
        aggregator = LeaderboardAggregator(store, PuzzleClient(http))
        return await aggregator.build_leaderboard(variant, day)


def render(entries: list[LeaderboardEntry]) -> str:
    if not entries:
        return "No results"
    width = max(len(e.name) for e in entries)
    return "\n".join(
        f"{rank:>2}. {e.name:<{width}}  {format_time(e.score)}"
        for rank, e in enumerate(entries, start=1)
    )


def main(argv: list[str] | None = None, transport: httpx.AsyncBaseTransport | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("variant", nargs="?", default=settings.default_variant)
    parser.add_argument("--date", dest="day", help="Puzzle date, YYYY-MM-DD (default: today)")
    parser.add_argument("--credentials", default=settings.credentials_file, help="Path to cookies JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        day = parse_date(args.day) if args.day else date.today()
    except ValueError:
        print(f"ERROR: invalid date '{args.day}', expected YYYY-MM-DD", file=sys.stderr)
        return 2

    try:
        store = CredentialStore.from_file(args.credentials)
    except CredentialFileError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    try:
        entries = asyncio.run(fetch(store, args.variant, day, transport))
    except InvalidVariant as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    print(f"{args.variant} leaderboard for {day.isoformat()}")
    print(render(entries))
    return 0


if __name__ == "__main__":
    sys.exit(main())
