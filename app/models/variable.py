"""ExerciseVariable model - one trainable numeric parameter with its progression rule."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class ExerciseVariable(Base):
    """Variable (time, reps, weight...) of an exercise.

    current_value always sits on the sequence generated from start_value,
    increment_size / percentage_increase, number_of_increments and the bounds.
    Exactly one of is_primary / is_secondary / is_tertiary is set.
    """

    __tablename__ = "exercise_variables"
    __table_args__ = (Index("ix_exercise_variables_exercise_id", "exercise_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    exercise_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    variable_type: Mapped[str] = mapped_column(String(50), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    custom_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    start_value: Mapped[float] = mapped_column(Float, nullable=False)
    current_value: Mapped[float] = mapped_column(Float, nullable=False)
    increment_size: Mapped[float | None] = mapped_column(Float, nullable=True)
    percentage_increase: Mapped[float | None] = mapped_column(Float, nullable=True)
    number_of_increments: Mapped[int] = mapped_column(Integer, nullable=False)
    min_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_value: Mapped[float | None] = mapped_column(Float, nullable=True)

    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_secondary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_tertiary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    should_reset_cycle: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    current_value_modified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=lambda: datetime.now(timezone.utc)
    )

    exercise: Mapped["Exercise"] = relationship("Exercise", back_populates="variables")

