import asyncio
from dataclasses import dataclass, field
from datetime import date

import httpx
import pytest

from puzzleboard.credentials import CredentialStore
from puzzleboard.models import Credential
from puzzleboard.puzzles.client import PuzzleClient
from puzzleboard.puzzles.session import SessionValidator

BASE_URL = "https://puzzles.test/svc/crosswords"
PROBE_DAY = date(2030, 1, 1)
PUZZLE_DAY = date(2024, 3, 10)
PUZZLE_IDS = {"mini": 21000, "daily": 22000}


@dataclass
class Player:
    """How the fake service treats one session token."""

    valid: bool = True
    seconds: int | None = None
    solved: bool = True
    id_status: int = 200
    game_status: int = 200
    missing_id: bool = False
    network_error: bool = False


@dataclass
class FakePuzzleService:
    players: dict[str, Player] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)

    def add(self, token: str, **behaviour) -> Player:
        self.players[token] = Player(**behaviour)
        return self.players[token]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        token = request.headers.get("cookie", "").removeprefix("NYT-S=")
        player = self.players.get(token)
        if player is None or not player.valid:
            return httpx.Response(403, json={"error": "forbidden"})

        parts = request.url.path.split("/")
        if parts[-3] == "puzzle":
            variant, day = parts[-2], parts[-1].removesuffix(".json")
            if day == PROBE_DAY.isoformat():
                return httpx.Response(200, json={"id": PUZZLE_IDS["mini"]})
            if player.network_error:
                raise httpx.ConnectError("connection refused", request=request)
            if player.id_status != 200:
                return httpx.Response(player.id_status)
            if player.missing_id:
                return httpx.Response(200, json={"status": "ok"})
            return httpx.Response(200, json={"id": PUZZLE_IDS[variant], "publicationDate": day})

        if parts[-2] == "game":
            if player.game_status != 200:
                return httpx.Response(player.game_status)
            calcs = {"solved": player.solved}
            if player.seconds is not None:
                calcs["secondsSpentSolving"] = player.seconds
            return httpx.Response(200, json={"calcs": calcs, "firsts": {}})

        return httpx.Response(404)


@pytest.fixture
def service():
    return FakePuzzleService()


@pytest.fixture
def make_client():
    """Build PuzzleClients over a MockTransport handler; all are closed on teardown."""
    clients = []

    def _make(handler, **kwargs):
        client = PuzzleClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)), **kwargs)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        asyncio.run(client.http.aclose())


@pytest.fixture
def puzzle_client(service, make_client):
    return make_client(service.handle, base_url=BASE_URL, timeout=2.0)


@pytest.fixture
def validator(puzzle_client):
    return SessionValidator(puzzle_client, today=lambda: PROBE_DAY)


def _store(*users: str) -> CredentialStore:
    return CredentialStore(
        Credential(user_id=user, session_token=f"tok-{user}", date_added=date(2024, 3, 1))
        for user in users
    )


@pytest.fixture
def make_store():
    """Build a store whose users hold the tokens `tok-<user>`."""
    return _store
