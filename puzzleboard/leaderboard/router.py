from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from puzzleboard.leaderboard.aggregator import VARIANTS, InvalidVariant, LeaderboardAggregator
from puzzleboard.leaderboard.formatting import format_time, parse_date

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])
logger = logging.getLogger(__name__)


class VariantOut(BaseModel):
    id: str
    name: str


class EntryOut(BaseModel):
    id: int
    name: str
    score: int
    time: str


class LeaderboardOut(BaseModel):
    variant: str
    date: str
    entries: list[EntryOut]


def get_aggregator(request: Request) -> LeaderboardAggregator:
    aggregator = getattr(request.app.state, "aggregator", None)
    if aggregator is None:
        raise HTTPException(status_code=503, detail="Leaderboard not ready")
    return aggregator


@router.get("/variants", response_model=list[VariantOut])
async def list_variants():
    return [VariantOut(id=v.id, name=v.name) for v in VARIANTS.values()]


@router.get("/{variant}", response_model=LeaderboardOut)
async def leaderboard(
    variant: str,
    day: str | None = Query(default=None, alias="date", description="YYYY-MM-DD, defaults to today"),
    aggregator: LeaderboardAggregator = Depends(get_aggregator),
):
    try:
        puzzle_date = parse_date(day) if day else date.today()
    except ValueError:
        logger.info(f"Rejected leaderboard request with bad date {day!r}")
        raise HTTPException(status_code=400, detail=f"Invalid date '{day}', expected YYYY-MM-DD")

    try:
        entries = await aggregator.build_leaderboard(variant, puzzle_date)
    except InvalidVariant as e:
        logger.info(f"Rejected leaderboard request: {e}")
        raise HTTPException(status_code=404, detail=str(e))

    return LeaderboardOut(
        variant=variant,
        date=puzzle_date.isoformat(),
        entries=[
            EntryOut(id=e.id, name=e.name, score=e.score, time=format_time(e.score))
            for e in entries
        ],
    )
