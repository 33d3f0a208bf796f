"""Exercise endpoints: authoring, variables, links and maintenance mode."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import get_progression_engine
from app.core.config import get_settings
from app.db.session import get_db
from app.models.exercise import Exercise
from app.models.exercise_link import ExerciseLink
from app.models.variable import ExerciseVariable
from app.schemas.exercise import (
    ExerciseCreate,
    ExerciseLinkCreate,
    ExerciseLinkRead,
    ExerciseRead,
    ExerciseReadWithVariables,
    MaintenanceModeUpdate,
)
from app.schemas.variable import VariableCreate, VariableRead
from app.services.progression import ProgressionEngine
from app.services.validation import validate_variable

router = APIRouter()


def _exercise_query():
    return select(Exercise).options(selectinload(Exercise.variables))


async def _get_exercise_or_404(db: AsyncSession, exercise_id: uuid.UUID) -> Exercise:
    result = await db.execute(_exercise_query().where(Exercise.id == exercise_id))
    exercise = result.scalar_one_or_none()
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise not found")
    return exercise


@router.get("", response_model=list[ExerciseRead])
async def list_exercises(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 100,
):
    """List exercises ordered by order_index then name."""
    result = await db.execute(
        select(Exercise).order_by(Exercise.order_index, Exercise.name).offset(skip).limit(limit)
    )
    return list(result.scalars().all())


@router.post("", response_model=ExerciseReadWithVariables, status_code=201)
async def create_exercise(
    payload: ExerciseCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an exercise (variables are added separately)."""
    exercise = Exercise(**payload.model_dump())
    db.add(exercise)
    await db.flush()
    return await _get_exercise_or_404(db, exercise.id)


@router.get("/{exercise_id}", response_model=ExerciseReadWithVariables)
async def get_exercise(
    exercise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get an exercise with its variables."""
    return await _get_exercise_or_404(db, exercise_id)


@router.delete("/{exercise_id}", status_code=204)
async def delete_exercise(
    exercise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Delete an exercise and its variables."""
    exercise = await _get_exercise_or_404(db, exercise_id)
    await db.delete(exercise)
    return None


@router.patch("/{exercise_id}/maintenance", response_model=ExerciseRead)
async def set_maintenance_mode(
    exercise_id: uuid.UUID,
    payload: MaintenanceModeUpdate,
    db: AsyncSession = Depends(get_db),
    engine: ProgressionEngine = Depends(get_progression_engine),
):
    """Freeze (enabled=true) or unfreeze progression for an exercise."""
    await engine.toggle_maintenance_mode(exercise_id, payload.enabled)
    return await _get_exercise_or_404(db, exercise_id)


@router.post("/{exercise_id}/variables", response_model=VariableRead, status_code=201)
async def create_variable(
    exercise_id: uuid.UUID,
    payload: VariableCreate,
    db: AsyncSession = Depends(get_db),
):
    """Add a variable; rejected with 422 and the list of problems when invalid."""
    exercise = await _get_exercise_or_404(db, exercise_id)
    data = payload.model_dump()
    if data["current_value"] is None:
        data["current_value"] = data["start_value"]
    variable = ExerciseVariable(exercise_id=exercise_id, **data)
    errors = validate_variable(
        variable,
        exercise.progression_type,
        exercise.variables,
        require_time_primary=get_settings().require_time_primary,
    )
    if errors:
        raise HTTPException(status_code=422, detail=errors)
    db.add(variable)
    await db.flush()
    await db.refresh(variable)
    return variable


@router.get("/{exercise_id}/links", response_model=list[ExerciseLinkRead])
async def list_links(
    exercise_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Exercises that progress when this one does."""
    result = await db.execute(
        select(ExerciseLink).where(ExerciseLink.primary_exercise_id == exercise_id)
    )
    return list(result.scalars().all())


@router.post("/{exercise_id}/links", response_model=ExerciseLinkRead, status_code=201)
async def create_link(
    exercise_id: uuid.UUID,
    payload: ExerciseLinkCreate,
    db: AsyncSession = Depends(get_db),
):
    """Link another exercise so it progresses whenever this one does."""
    await _get_exercise_or_404(db, exercise_id)
    await _get_exercise_or_404(db, payload.linked_exercise_id)
    existing = await db.execute(
        select(ExerciseLink).where(
            ExerciseLink.primary_exercise_id == exercise_id,
            ExerciseLink.linked_exercise_id == payload.linked_exercise_id,
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="Exercises are already linked")
    link = ExerciseLink(primary_exercise_id=exercise_id, linked_exercise_id=payload.linked_exercise_id)
    db.add(link)
    await db.flush()
    return link
