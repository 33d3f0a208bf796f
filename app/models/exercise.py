"""Exercise model - progression type, maintenance flag and owned variables."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Enum, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.enums import ProgressionType
from app.db.base import Base


class Exercise(Base):
    """Exercise whose 1-3 variables progress together according to progression_type."""

    __tablename__ = "exercises"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    progression_type: Mapped[ProgressionType] = mapped_column(
        Enum(ProgressionType), default=ProgressionType.SINGLE, nullable=False
    )
    maintenance_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    prep_timer_duration: Mapped[int] = mapped_column(Integer, default=0)  # seconds
    order_index: Mapped[int] = mapped_column(Integer, default=0)

    variables: Mapped[list["ExerciseVariable"]] = relationship(
        "ExerciseVariable", back_populates="exercise", cascade="all, delete-orphan"
    )
