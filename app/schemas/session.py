"""Workout session and set outcome schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import MAX_SET_SCORE, MIN_SET_SCORE


class SetOutcome(BaseModel):
    """One performed set as reported by the client."""

    set_number: int = Field(..., ge=1)
    success: bool
    completed: bool = True
    pain_score: int | None = Field(None, ge=MIN_SET_SCORE, le=MAX_SET_SCORE)
    difficulty_score: int | None = Field(None, ge=MIN_SET_SCORE, le=MAX_SET_SCORE)
    notes: str | None = Field(None, max_length=500)


class ExerciseCompletion(BaseModel):
    """All sets of one exercise in a session; progression runs when every set succeeded."""

    sets: list[SetOutcome] = Field(..., min_length=1)


class WorkoutSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    started_at: datetime
    completed_at: datetime | None = None


class SetLogRead(SetOutcome):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    session_id: UUID
    exercise_id: UUID
