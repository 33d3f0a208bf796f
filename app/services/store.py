"""Persistence contract of the progression engine and its SQLAlchemy implementation.

Each call stands alone: there is no transaction spanning several calls from
the engine's point of view, writes are flushed as they happen.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, PersistenceError
from app.models.exercise import Exercise
from app.models.exercise_link import ExerciseLink
from app.models.session import ExerciseLog, SetLog
from app.models.variable import ExerciseVariable
from app.schemas.session import SetOutcome

logger = logging.getLogger(__name__)


class ProgressionStore(Protocol):
    """Store operations the engine calls into."""

    async def get_exercise(self, exercise_id: uuid.UUID) -> Optional[Exercise]: ...

    async def list_variables(self, exercise_id: uuid.UUID) -> list[ExerciseVariable]: ...

    async def update_variable(
        self,
        variable_id: uuid.UUID,
        current_value: float,
        modified_at: datetime,
        should_reset_cycle: Optional[bool] = None,
    ) -> None: ...

    async def list_links(self, exercise_id: uuid.UUID) -> list[uuid.UUID]: ...

    async def insert_completion_log(
        self,
        session_id: uuid.UUID,
        exercise_id: uuid.UUID,
        variable_id: uuid.UUID,
        value_used: float,
    ) -> None: ...

    async def insert_set_log(
        self, session_id: uuid.UUID, exercise_id: uuid.UUID, outcome: SetOutcome
    ) -> None: ...

    async def set_maintenance_mode(self, exercise_id: uuid.UUID, enabled: bool) -> bool: ...


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Re-raise database failures as PersistenceError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Store call failed (%s): %s", action, e)
        raise PersistenceError(f"Failed to {action}: {e}") from e


class SqlAlchemyProgressionStore:
    """ProgressionStore over an AsyncSession. Commit is left to the session owner (get_db)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_exercise(self, exercise_id: uuid.UUID) -> Optional[Exercise]:
        with _store_errors("fetch exercise"):
            return await self.db.get(Exercise, exercise_id)

    async def list_variables(self, exercise_id: uuid.UUID) -> list[ExerciseVariable]:
        with _store_errors("fetch exercise variables"):
            result = await self.db.execute(
                select(ExerciseVariable).where(ExerciseVariable.exercise_id == exercise_id)
            )
            return list(result.scalars().all())

    async def update_variable(
        self,
        variable_id: uuid.UUID,
        current_value: float,
        modified_at: datetime,
        should_reset_cycle: Optional[bool] = None,
    ) -> None:
        with _store_errors("update variable"):
            variable = await self.db.get(ExerciseVariable, variable_id)
            if variable is None:
                raise NotFoundError("Variable", variable_id)
            variable.current_value = current_value
            variable.current_value_modified_at = modified_at
            if should_reset_cycle is not None:
                variable.should_reset_cycle = should_reset_cycle
            await self.db.flush()

    async def list_links(self, exercise_id: uuid.UUID) -> list[uuid.UUID]:
        with _store_errors("fetch linked exercises"):
            result = await self.db.execute(
                select(ExerciseLink.linked_exercise_id).where(
                    ExerciseLink.primary_exercise_id == exercise_id
                )
            )
            return list(result.scalars().all())

    async def insert_completion_log(
        self,
        session_id: uuid.UUID,
        exercise_id: uuid.UUID,
        variable_id: uuid.UUID,
        value_used: float,
    ) -> None:
        with _store_errors("create exercise log"):
            self.db.add(
                ExerciseLog(
                    session_id=session_id,
                    exercise_id=exercise_id,
                    variable_id=variable_id,
                    value_used=value_used,
                )
            )
            await self.db.flush()

    async def insert_set_log(
        self, session_id: uuid.UUID, exercise_id: uuid.UUID, outcome: SetOutcome
    ) -> None:
        with _store_errors("create set log"):
            self.db.add(SetLog(session_id=session_id, exercise_id=exercise_id, **outcome.model_dump()))
            await self.db.flush()

    async def set_maintenance_mode(self, exercise_id: uuid.UUID, enabled: bool) -> bool:
        with _store_errors("toggle maintenance mode"):
            exercise = await self.db.get(Exercise, exercise_id)
            if exercise is None:
                return False
            exercise.maintenance_mode = enabled
            await self.db.flush()
            return True
