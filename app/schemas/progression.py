"""Progression event schemas."""

from uuid import UUID

from pydantic import BaseModel

from app.schemas.session import SetOutcome


class ProgressionEvent(BaseModel):
    """A completion event for one exercise. Logs are written only with both session_id and sets."""

    success: bool
    session_id: UUID | None = None
    sets: list[SetOutcome] | None = None


class ProgressionResult(BaseModel):
    exercise_id: UUID
    progressed: list[UUID] = []  # root first, then linked exercises in traversal order
    skipped: list[UUID] = []  # maintenance mode
