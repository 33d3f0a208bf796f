"""ExerciseLink model - directed "progress this one too" relation between exercises."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class ExerciseLink(Base):
    """primary_exercise_id -> linked_exercise_id. Cycles are allowed by the schema."""

    __tablename__ = "exercise_links"
    __table_args__ = (
        UniqueConstraint("primary_exercise_id", "linked_exercise_id", name="uq_exercise_links_pair"),
        Index("ix_exercise_links_primary_exercise_id", "primary_exercise_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    primary_exercise_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    linked_exercise_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
