"""
Puzzle service client.

Resolves the puzzle id published for a date and variant, then reads a
user's play state for that puzzle. Both calls authenticate with the user's
session cookie and present the same headers as the web client.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from enum import Enum
from typing import Any

import httpx

from puzzleboard.config import settings
from puzzleboard.models import PuzzleVariant, SolveOutcome
from puzzleboard.puzzles.alerts import AlertSink, LoggingAlertSink

logger = logging.getLogger(__name__)


class LookupFailure(str, Enum):
    NOT_OK = "not_ok"
    MISSING_ID = "missing_id"
    MALFORMED = "malformed"
    NETWORK = "network"


class PuzzleLookupError(Exception):
    def __init__(self, kind: LookupFailure, message: str, status_code: int | None = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class PuzzleClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str | None = None,
        cookie_name: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
    ):
        self.http = http
        self.base_url = (base_url or settings.puzzle_service_url).rstrip("/")
        self.cookie_name = cookie_name or settings.session_cookie_name
        self.user_agent = user_agent or settings.user_agent
        self.timeout = timeout if timeout is not None else settings.request_timeout

        url = httpx.URL(self.base_url)
        self.origin = f"{url.scheme}://{url.host}"

    def puzzle_url(self, variant: PuzzleVariant, day: date) -> str:
        return f"{self.base_url}/v6/puzzle/{variant.value}/{day.isoformat()}.json"

    def game_url(self, puzzle_id: Any) -> str:
        return f"{self.base_url}/v6/game/{puzzle_id}.json"

    def headers(self, token: str, variant: PuzzleVariant = PuzzleVariant.MINI) -> dict[str, str]:
        return {
            "Cookie": f"{self.cookie_name}={token}",
            "Origin": self.origin,
            "Referer": f"{self.origin}/crosswords/game/{variant.value}",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    async def get(self, url: str, token: str, variant: PuzzleVariant = PuzzleVariant.MINI) -> httpx.Response:
        """Authenticated GET; transport errors propagate as httpx exceptions."""
        return await self.http.get(url, headers=self.headers(token, variant), timeout=self.timeout)

    async def _get_json(
        self,
        url: str,
        token: str,
        variant: PuzzleVariant,
        request_id: str,
    ) -> dict[str, Any]:
        logger.debug(f"[{request_id}] GET {url}")
        try:
            response = await self.get(url, token, variant)
        except httpx.TimeoutException as e:
            logger.warning(f"[{request_id}] Timeout fetching {url}")
            raise PuzzleLookupError(LookupFailure.NETWORK, f"Request timed out: {url}") from e
        except httpx.HTTPError as e:
            logger.warning(f"[{request_id}] Network error fetching {url}: {e}")
            raise PuzzleLookupError(LookupFailure.NETWORK, f"Network error: {e}") from e
        except (httpx.InvalidURL, ValueError) as e:
            logger.warning(f"[{request_id}] Could not build request for {url}: {e.__class__.__name__}")
            raise PuzzleLookupError(LookupFailure.MALFORMED, f"Invalid request: {e}") from e

        logger.debug(f"[{request_id}] Response status: {response.status_code}")
        if not response.is_success:
            logger.warning(f"[{request_id}] {url} returned {response.status_code}")
            raise PuzzleLookupError(
                LookupFailure.NOT_OK,
                f"Network response was not ok: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise PuzzleLookupError(
                LookupFailure.MALFORMED, f"Response from {url} is not JSON", response.status_code
            ) from e
        if not isinstance(data, dict):
            raise PuzzleLookupError(
                LookupFailure.MALFORMED, f"Unexpected payload from {url}", response.status_code
            )
        return data

    async def resolve_puzzle_id(
        self,
        day: date,
        variant: PuzzleVariant,
        token: str,
        request_id: str | None = None,
    ) -> Any:
        request_id = request_id or new_request_id()
        data = await self._get_json(self.puzzle_url(variant, day), token, variant, request_id)
        puzzle_id = data.get("id")
        if not puzzle_id:
            logger.warning(f"[{request_id}] No puzzle ID for {variant.value} {day.isoformat()}")
            raise PuzzleLookupError(LookupFailure.MISSING_ID, "No puzzle ID found in response")
        logger.debug(f"[{request_id}] {variant.value} {day.isoformat()} is puzzle {puzzle_id}")
        return puzzle_id

    async def resolve_solve_outcome(
        self,
        puzzle_id: Any,
        token: str,
        variant: PuzzleVariant = PuzzleVariant.MINI,
        request_id: str | None = None,
    ) -> SolveOutcome:
        request_id = request_id or new_request_id()
        data = await self._get_json(self.game_url(puzzle_id), token, variant, request_id)

        calcs = data.get("calcs")
        if not isinstance(calcs, dict) or not calcs.get("solved"):
            return SolveOutcome(solved=False)

        seconds = calcs.get("secondsSpentSolving")
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            return SolveOutcome(solved=True)
        return SolveOutcome(solved=True, elapsed_seconds=int(seconds))

    async def fetch_solve_time(self, day: date, variant: PuzzleVariant, token: str) -> int | None:
        """
        Seconds the token's user spent solving the `variant` puzzle of `day`.

        Returns None when the puzzle is unsolved. Raises PuzzleLookupError when
        either remote step fails.
        """
        request_id = new_request_id()
        logger.info(f"[{request_id}] Fetching {variant.value} solve time for {day.isoformat()}")
        puzzle_id = await self.resolve_puzzle_id(day, variant, token, request_id=request_id)
        outcome = await self.resolve_solve_outcome(puzzle_id, token, variant, request_id=request_id)
        logger.info(
            f"[{request_id}] Puzzle {puzzle_id}: solved={outcome.solved} "
            f"seconds={outcome.elapsed_seconds}"
        )
        return outcome.elapsed_seconds if outcome.solved else None


async def fetch_current_puzzle_info(
    client: PuzzleClient,
    token: str,
    day: date | None = None,
    alerts: AlertSink | None = None,
) -> int | None:
    """Single-user mini lookup that reports failures to the user instead of raising."""
    alerts = alerts or LoggingAlertSink()
    day = day or date.today()
    try:
        return await client.fetch_solve_time(day, PuzzleVariant.MINI, token)
    except PuzzleLookupError as e:
        logger.error(f"Error fetching puzzle info ({e.kind.value}): {e}")
        alerts.alert("Error", str(e) or "An unknown error occurred")
        return None
