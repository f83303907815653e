from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

SAFARI_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.3.1 Safari/605.1.15"
)


class Settings(BaseSettings):
    puzzle_service_url: str = "https://www.nytimes.com/svc/crosswords"
    session_cookie_name: str = "NYT-S"
    user_agent: str = SAFARI_USER_AGENT
    credentials_file: str = "data/cookies.json"

    # Outbound HTTP
    request_timeout: float = 5.0  # seconds, per call
    max_concurrency: int = Field(default=1, ge=1)

    # Leaderboard
    default_variant: str = "mini"
    lookup_failure_policy: Literal["zero", "skip"] = "zero"

    class Config:
        env_file = ".env"


settings = Settings()
