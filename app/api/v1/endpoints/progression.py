"""Completion events: run the progression engine for an exercise."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_progression_engine
from app.db.session import get_db
from app.models.session import WorkoutSession
from app.schemas.progression import ProgressionEvent, ProgressionResult
from app.services.progression import ProgressionEngine

router = APIRouter()


@router.post("/{exercise_id}", response_model=ProgressionResult)
async def progress_exercise(
    exercise_id: uuid.UUID,
    payload: ProgressionEvent,
    db: AsyncSession = Depends(get_db),
    engine: ProgressionEngine = Depends(get_progression_engine),
):
    """
    Report a completed exercise. success=false and maintenance mode change nothing.
    Linked exercises progress too; logs are written when session_id and sets are sent.
    """
    if payload.session_id is not None and not await db.get(WorkoutSession, payload.session_id):
        raise HTTPException(status_code=404, detail="Workout session not found")
    outcome = await engine.handle_exercise_progression(
        exercise_id, payload.success, payload.session_id, payload.sets
    )
    return ProgressionResult(
        exercise_id=outcome.exercise_id,
        progressed=outcome.progressed,
        skipped=outcome.skipped,
    )
