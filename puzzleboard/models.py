from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class PuzzleVariant(str, Enum):
    MINI = "mini"
    DAILY = "daily"


@dataclass(frozen=True)
class Credential:
    user_id: str
    session_token: str
    date_added: date


@dataclass(frozen=True)
class SolveOutcome:
    solved: bool
    elapsed_seconds: Optional[int] = None


@dataclass
class LeaderboardEntry:
    # Position in the evaluation order of one call, not a stable identity.
    id: int
    name: str
    score: int
