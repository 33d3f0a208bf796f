"""WorkoutSession, ExerciseLog and SetLog models."""

from __future__ import annotations

from datetime import datetime, timezone
from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from app.db.base import Base


class WorkoutSession(Base):
    """A performed workout; completion and set logs hang off it."""

    __tablename__ = "workout_sessions"
    __table_args__ = (Index("ix_workout_sessions_started_at", "started_at"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    exercise_logs: Mapped[list["ExerciseLog"]] = relationship(
        "ExerciseLog", back_populates="session", cascade="all, delete-orphan"
    )
    set_logs: Mapped[list["SetLog"]] = relationship(
        "SetLog", back_populates="session", cascade="all, delete-orphan"
    )


class ExerciseLog(Base):
    """Value a variable had when the exercise was completed in a session."""

    __tablename__ = "exercise_logs"
    __table_args__ = (Index("ix_exercise_logs_session_id", "session_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("workout_sessions.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    variable_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("exercise_variables.id", ondelete="CASCADE"), nullable=False
    )
    value_used: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    session: Mapped["WorkoutSession"] = relationship("WorkoutSession", back_populates="exercise_logs")


class SetLog(Base):
    """Raw outcome of one set: success flag, optional pain/difficulty (0-10) and note."""

    __tablename__ = "set_logs"
    __table_args__ = (
        Index("ix_set_logs_session_id", "session_id"),
        Index("ix_set_logs_exercise_id", "exercise_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("workout_sessions.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    set_number: Mapped[int] = mapped_column(Integer, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    pain_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    difficulty_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    session: Mapped["WorkoutSession"] = relationship("WorkoutSession", back_populates="set_logs")
