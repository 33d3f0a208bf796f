"""Variable endpoints: read, validated edit and progression status."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_progression_engine
from app.core.config import get_settings
from app.db.session import get_db
from app.models.exercise import Exercise
from app.models.variable import ExerciseVariable
from app.schemas.variable import ProgressionStatusRead, VariableRead, VariableUpdate
from app.services.progression import ProgressionEngine
from app.services.sequence import format_variable_value, generate_sequence
from app.services.validation import validate_variable

router = APIRouter()


async def _get_variable_or_404(db: AsyncSession, variable_id: uuid.UUID) -> ExerciseVariable:
    variable = await db.get(ExerciseVariable, variable_id)
    if not variable:
        raise HTTPException(status_code=404, detail="Variable not found")
    return variable


@router.get("/{variable_id}", response_model=VariableRead)
async def get_variable(
    variable_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await _get_variable_or_404(db, variable_id)


@router.patch("/{variable_id}", response_model=VariableRead)
async def update_variable(
    variable_id: uuid.UUID,
    payload: VariableUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Edit a variable's configuration (partial). The merged variable is validated
    like a new one; when the edit moves current_value off the new sequence the
    request is rejected, so pass current_value (e.g. the new start value) with it.
    """
    variable = await _get_variable_or_404(db, variable_id)
    exercise = await db.get(Exercise, variable.exercise_id)
    siblings = await db.execute(
        select(ExerciseVariable).where(
            ExerciseVariable.exercise_id == variable.exercise_id,
            ExerciseVariable.id != variable_id,
        )
    )

    changes = payload.model_dump(exclude_unset=True)
    candidate = VariableRead.model_validate(variable).model_copy(update=changes)
    errors = validate_variable(
        candidate,
        exercise.progression_type,
        list(siblings.scalars().all()),
        require_time_primary=get_settings().require_time_primary,
    )
    if errors:
        raise HTTPException(status_code=422, detail=errors)

    for k, v in changes.items():
        setattr(variable, k, v)
    if "current_value" in changes:
        variable.current_value_modified_at = datetime.now(timezone.utc)
    await db.flush()
    await db.refresh(variable)
    return variable


@router.get("/{variable_id}/status", response_model=ProgressionStatusRead)
async def get_variable_status(
    variable_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    engine: ProgressionEngine = Depends(get_progression_engine),
):
    """Position in the sequence, next value and completion, with display strings."""
    variable = await _get_variable_or_404(db, variable_id)
    status = engine.get_progression_status(variable)
    return ProgressionStatusRead(
        variable_id=variable.id,
        current=status.current,
        total=status.total,
        next_value=status.next_value,
        is_complete=status.is_complete,
        sequence=generate_sequence(variable),
        display_value=format_variable_value(variable.current_value, variable),
        display_next_value=format_variable_value(status.next_value, variable),
    )
