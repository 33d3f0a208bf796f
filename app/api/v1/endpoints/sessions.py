"""Workout sessions: start, finish exercises (sets + progression), complete."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_progression_engine
from app.db.session import get_db
from app.models.session import SetLog, WorkoutSession
from app.schemas.progression import ProgressionResult
from app.schemas.session import ExerciseCompletion, SetLogRead, WorkoutSessionRead
from app.services.progression import ProgressionEngine

router = APIRouter()


async def _get_session_or_404(db: AsyncSession, session_id: uuid.UUID) -> WorkoutSession:
    session = await db.get(WorkoutSession, session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Workout session not found")
    return session


@router.post("", response_model=WorkoutSessionRead, status_code=201)
async def create_session(db: AsyncSession = Depends(get_db)):
    """Start a workout session."""
    session = WorkoutSession()
    db.add(session)
    await db.flush()
    await db.refresh(session)
    return session


@router.post("/{session_id}/complete", response_model=WorkoutSessionRead)
async def complete_session(
    session_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    session = await _get_session_or_404(db, session_id)
    session.completed_at = datetime.now(timezone.utc)
    await db.flush()
    return session


@router.post("/{session_id}/exercises/{exercise_id}/complete", response_model=ProgressionResult)
async def complete_exercise(
    session_id: uuid.UUID,
    exercise_id: uuid.UUID,
    payload: ExerciseCompletion,
    db: AsyncSession = Depends(get_db),
    engine: ProgressionEngine = Depends(get_progression_engine),
):
    """Record the sets of an exercise; progression runs only when every set succeeded."""
    await _get_session_or_404(db, session_id)
    outcome = await engine.complete_exercise(session_id, exercise_id, payload.sets)
    return ProgressionResult(
        exercise_id=outcome.exercise_id,
        progressed=outcome.progressed,
        skipped=outcome.skipped,
    )


@router.get("/{session_id}/sets", response_model=list[SetLogRead])
async def list_set_logs(
    session_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Set outcomes recorded in a session, in set order per exercise."""
    await _get_session_or_404(db, session_id)
    result = await db.execute(
        select(SetLog)
        .where(SetLog.session_id == session_id)
        .order_by(SetLog.exercise_id, SetLog.set_number)
    )
    return list(result.scalars().all())
