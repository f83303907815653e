import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from puzzleboard.config import settings
from puzzleboard.credentials import CredentialFileError, CredentialStore
from puzzleboard.leaderboard.aggregator import LeaderboardAggregator
from puzzleboard.puzzles.client import PuzzleClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def load_credentials() -> CredentialStore:
    try:
        return CredentialStore.from_file(settings.credentials_file)
    except CredentialFileError as e:
        logger.warning(f"Starting with no credentials: {e}")
        return CredentialStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the shared httpx client and the credential snapshot."""
    http = httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=False)
    client = PuzzleClient(http)
    app.state.aggregator = LeaderboardAggregator(load_credentials(), client)
    logger.info("Puzzleboard started")
    yield
    await http.aclose()
    logger.info("Puzzleboard stopped")


app = FastAPI(title="Puzzleboard", version="0.1.0", lifespan=lifespan)


@app.get("/health")
async def health():
    return {"status": "ok"}


# Import routers after app is created to avoid circular imports
from puzzleboard.leaderboard.router import router as leaderboard_router  # noqa: E402

app.include_router(leaderboard_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
