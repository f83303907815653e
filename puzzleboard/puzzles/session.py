from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable

import httpx

from puzzleboard.models import PuzzleVariant
from puzzleboard.puzzles.client import PuzzleClient, new_request_id

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class SessionValidator:
    """
    Checks a session cookie against today's (UTC) mini puzzle.

    Expired cookies and an unreachable service look the same from here:
    both return False. Nothing is cached, so a transient outage only drops
    the user for the current call.
    """

    def __init__(self, client: PuzzleClient, today: Callable[[], date] = utc_today):
        self.client = client
        self.today = today

    async def is_valid(self, session_token: str, user_id: str | None = None) -> bool:
        request_id = new_request_id()
        who = user_id or "anonymous"
        url = self.client.puzzle_url(PuzzleVariant.MINI, self.today())
        logger.debug(f"[{request_id}] Probing session for {who}")
        try:
            response = await self.client.get(url, session_token, PuzzleVariant.MINI)
        except httpx.HTTPError as e:
            logger.warning(f"[{request_id}] Session probe for {who} failed: {e.__class__.__name__}")
            return False
        except (httpx.InvalidURL, ValueError) as e:
            # Raised while building the request, e.g. a token that is not valid in a header
            logger.warning(f"[{request_id}] Unusable session token for {who}: {e.__class__.__name__}")
            return False

        if not response.is_success:
            logger.info(f"[{request_id}] Session for {who} rejected with status {response.status_code}")
            return False

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"[{request_id}] Session probe for {who} returned a non-JSON body")
            return False
        if not isinstance(payload, dict):
            logger.warning(f"[{request_id}] Session probe for {who} returned an unexpected payload")
            return False

        logger.debug(f"[{request_id}] Session for {who} accepted")
        return True
