"""
Leaderboard aggregation.

For every configured credential: confirm the session is live, look up the
user's solve time and collect an entry. Entries are sorted fastest first
once the whole batch has finished.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Awaitable, Callable, Literal, Mapping, Optional

from puzzleboard.config import settings
from puzzleboard.credentials import CredentialStore
from puzzleboard.models import Credential, LeaderboardEntry, PuzzleVariant
from puzzleboard.puzzles.client import PuzzleClient, PuzzleLookupError
from puzzleboard.puzzles.session import SessionValidator

logger = logging.getLogger(__name__)

FailurePolicy = Literal["zero", "skip"]
FetchSolveTime = Callable[[PuzzleClient, date, str], Awaitable[Optional[int]]]


class InvalidVariant(ValueError):
    def __init__(self, variant: str):
        super().__init__(f"Invalid leaderboard type: {variant}")
        self.variant = variant


async def fetch_mini_time(client: PuzzleClient, day: date, token: str) -> int | None:
    return await client.fetch_solve_time(day, PuzzleVariant.MINI, token)


async def fetch_daily_time(client: PuzzleClient, day: date, token: str) -> int | None:
    return await client.fetch_solve_time(day, PuzzleVariant.DAILY, token)


@dataclass(frozen=True)
class VariantDescriptor:
    id: str
    name: str
    fetch: FetchSolveTime


VARIANTS: Mapping[str, VariantDescriptor] = MappingProxyType(
    {
        PuzzleVariant.MINI.value: VariantDescriptor("mini", "Mini", fetch_mini_time),
        PuzzleVariant.DAILY.value: VariantDescriptor("daily", "Daily", fetch_daily_time),
    }
)


def get_variant(variant: str | PuzzleVariant) -> VariantDescriptor:
    key = variant.value if isinstance(variant, PuzzleVariant) else variant
    descriptor = VARIANTS.get(key)
    if descriptor is None:
        raise InvalidVariant(str(key))
    return descriptor


class LeaderboardAggregator:
    def __init__(
        self,
        store: CredentialStore,
        client: PuzzleClient,
        validator: SessionValidator | None = None,
        failure_policy: FailurePolicy | None = None,
        max_concurrency: int | None = None,
    ):
        self.store = store
        self.client = client
        self.validator = validator or SessionValidator(client)
        self.failure_policy = failure_policy or settings.lookup_failure_policy
        self.max_concurrency = max(1, max_concurrency or settings.max_concurrency)

    async def build_leaderboard(self, variant: str | PuzzleVariant, day: date) -> list[LeaderboardEntry]:
        descriptor = get_variant(variant)
        credentials = self.store.list_credentials()
        logger.info(
            f"Building {descriptor.id} leaderboard for {day.isoformat()} "
            f"across {len(credentials)} users"
        )

        if self.max_concurrency == 1:
            results = []
            for index, credential in enumerate(credentials, start=1):
                results.append(await self._evaluate(index, credential, descriptor, day))
        else:
            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def bounded(index: int, credential: Credential):
                async with semaphore:
                    return await self._evaluate(index, credential, descriptor, day)

            results = await asyncio.gather(
                *(bounded(i, c) for i, c in enumerate(credentials, start=1))
            )

        entries = [entry for entry in results if entry is not None]
        # sorted() is stable, so tied scores keep store order
        return sorted(entries, key=lambda entry: entry.score)

    async def _evaluate(
        self,
        index: int,
        credential: Credential,
        descriptor: VariantDescriptor,
        day: date,
    ) -> LeaderboardEntry | None:
        user_id = credential.user_id
        try:
            valid = await self.validator.is_valid(credential.session_token, user_id=user_id)
        except Exception:
            logger.exception(f"Unexpected error validating session for {user_id}")
            valid = False
        if not valid:
            logger.info(f"Skipping {user_id}: session not accepted")
            return None

        try:
            seconds = await descriptor.fetch(self.client, day, credential.session_token)
        except PuzzleLookupError as e:
            logger.warning(f"Lookup failed for {user_id} ({e.kind.value}): {e}")
            return self._failed_entry(index, user_id)
        except Exception:
            logger.exception(f"Unexpected error fetching data for {user_id}")
            return self._failed_entry(index, user_id)

        return LeaderboardEntry(id=index, name=user_id, score=seconds or 0)

    def _failed_entry(self, index: int, user_id: str) -> LeaderboardEntry | None:
        if self.failure_policy == "skip":
            return None
        return LeaderboardEntry(id=index, name=user_id, score=0)
