"""Shared endpoint dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.session import get_db
from app.services.progression import ProgressionEngine
from app.services.store import SqlAlchemyProgressionStore


def get_progression_engine(db: AsyncSession = Depends(get_db)) -> ProgressionEngine:
    """Engine bound to the request's DB session (committed by get_db on success)."""
    return ProgressionEngine(
        SqlAlchemyProgressionStore(db),
        tolerance=get_settings().progression_tolerance,
    )
