from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from satprep.features.daily_challenges.service import (
    DEFAULT_HISTORY_LIMIT,
    STREAK_LOOKBACK_DAYS,
    get_daily_challenge_service,
)
from satprep.features.daily_challenges.session_updates import updates_for_answer
from satprep.models.daily_challenge import VISITOR_ID_MAX_LENGTH, ChallengeType, ProgressUpdate

router = APIRouter(prefix="/v1/daily-challenges")


class VisitorRequest(BaseModel):
    visitor_id: str = Field(..., min_length=1, max_length=VISITOR_ID_MAX_LENGTH)


class ProgressUpdateIn(BaseModel):
    type: ChallengeType
    value: int = Field(..., ge=0)
    is_absolute: bool = False


class ProgressRequest(BaseModel):
    visitor_id: str = Field(..., min_length=1, max_length=VISITOR_ID_MAX_LENGTH)
    updates: List[ProgressUpdateIn] = Field(default_factory=list)


class AnswerEvent(BaseModel):
    visitor_id: str = Field(..., min_length=1, max_length=VISITOR_ID_MAX_LENGTH)
    is_correct: bool
    current_streak: int = Field(0, ge=0)
    difficulty: int = Field(1, ge=1)
    time_spent_ms: int = Field(..., ge=0)
    session_domains: List[str] = Field(..., min_length=1)
    session_answered: int = Field(..., ge=1)
    session_correct: int = Field(0, ge=0)


@router.get("/today")
def get_daily_challenges(visitor_id: str = Query(..., min_length=1, max_length=VISITOR_ID_MAX_LENGTH)):
    """Today's challenge set, or null if it has not been generated yet."""
    record = get_daily_challenge_service().get_daily_challenges(visitor_id=visitor_id)
    return {"challenge_set": record.to_dict() if record else None}


@router.post("/today/generate")
def generate_daily_challenges(req: VisitorRequest):
    """Get or create today's challenge set (idempotent)."""
    record = get_daily_challenge_service().generate_daily_challenges(visitor_id=req.visitor_id)
    return {"challenge_set": record.to_dict()}


@router.post("/today/progress")
def update_challenge_progress(req: ProgressRequest):
    updates = [
        ProgressUpdate(type=u.type, value=u.value, is_absolute=u.is_absolute)
        for u in req.updates
    ]
    result = get_daily_challenge_service().update_challenge_progress(
        visitor_id=req.visitor_id,
        updates=updates,
    )
    return result.to_dict()


@router.post("/today/claim")
def claim_daily_bonus(req: VisitorRequest):
    """Claim the all-complete bonus; fails closed and never pays twice."""
    return get_daily_challenge_service().claim_daily_bonus(visitor_id=req.visitor_id).to_dict()


@router.get("/history")
def get_challenge_history(
    visitor_id: str = Query(..., min_length=1, max_length=VISITOR_ID_MAX_LENGTH),
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=STREAK_LOOKBACK_DAYS),
):
    history = get_daily_challenge_service().get_challenge_history(visitor_id=visitor_id, limit=limit)
    return {"history": [record.to_dict() for record in history]}


@router.get("/streak")
def get_daily_streak(visitor_id: str = Query(..., min_length=1, max_length=VISITOR_ID_MAX_LENGTH)):
    streak = get_daily_challenge_service().get_daily_streak(visitor_id=visitor_id)
    return {"visitor_id": visitor_id, "streak": streak}


@router.post("/answers")
def record_answer(event: AnswerEvent):
    """Apply the progress implied by one practice answer."""
    updates = updates_for_answer(
        is_correct=event.is_correct,
        current_streak=event.current_streak,
        difficulty=event.difficulty,
        time_spent_ms=event.time_spent_ms,
        session_domains=event.session_domains,
        session_answered=event.session_answered,
        session_correct=event.session_correct,
    )
    result = get_daily_challenge_service().update_challenge_progress(
        visitor_id=event.visitor_id,
        updates=updates,
    )
    return result.to_dict()
