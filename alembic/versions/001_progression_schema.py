"""Progression schema: exercises, exercise_variables, exercise_links, sessions and logs.

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

progression_type = sa.Enum("SINGLE", "DOUBLE", "TRIPLE", name="progressiontype")


def upgrade() -> None:
    op.create_table(
        "exercises",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("progression_type", progression_type, nullable=False),
        sa.Column("maintenance_mode", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("prep_timer_duration", sa.Integer(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_exercises_name"), "exercises", ["name"], unique=False)

    op.create_table(
        "exercise_variables",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("variable_type", sa.String(length=50), nullable=False),
        sa.Column("unit", sa.String(length=20), nullable=True),
        sa.Column("custom_name", sa.String(length=100), nullable=True),
        sa.Column("start_value", sa.Float(), nullable=False),
        sa.Column("current_value", sa.Float(), nullable=False),
        sa.Column("increment_size", sa.Float(), nullable=True),
        sa.Column("percentage_increase", sa.Float(), nullable=True),
        sa.Column("number_of_increments", sa.Integer(), nullable=False),
        sa.Column("min_value", sa.Float(), nullable=True),
        sa.Column("max_value", sa.Float(), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_secondary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_tertiary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("should_reset_cycle", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("current_value_modified_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_exercise_variables_exercise_id", "exercise_variables", ["exercise_id"], unique=False)

    op.create_table(
        "exercise_links",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("primary_exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("linked_exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.ForeignKeyConstraint(["primary_exercise_id"], ["exercises.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["linked_exercise_id"], ["exercises.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("primary_exercise_id", "linked_exercise_id", name="uq_exercise_links_pair"),
    )
    op.create_index(
        "ix_exercise_links_primary_exercise_id", "exercise_links", ["primary_exercise_id"], unique=False
    )

    op.create_table(
        "workout_sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workout_sessions_started_at", "workout_sessions", ["started_at"], unique=False)

    op.create_table(
        "exercise_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("variable_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("value_used", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["session_id"], ["workout_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["variable_id"], ["exercise_variables.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_exercise_logs_session_id", "exercise_logs", ["session_id"], unique=False)

    op.create_table(
        "set_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("exercise_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("pain_score", sa.Integer(), nullable=True),
        sa.Column("difficulty_score", sa.Integer(), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["session_id"], ["workout_sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["exercise_id"], ["exercises.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_set_logs_session_id", "set_logs", ["session_id"], unique=False)
    op.create_index("ix_set_logs_exercise_id", "set_logs", ["exercise_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_set_logs_exercise_id", table_name="set_logs")
    op.drop_index("ix_set_logs_session_id", table_name="set_logs")
    op.drop_table("set_logs")
    op.drop_index("ix_exercise_logs_session_id", table_name="exercise_logs")
    op.drop_table("exercise_logs")
    op.drop_index("ix_workout_sessions_started_at", table_name="workout_sessions")
    op.drop_table("workout_sessions")
    op.drop_index("ix_exercise_links_primary_exercise_id", table_name="exercise_links")
    op.drop_table("exercise_links")
    op.drop_index("ix_exercise_variables_exercise_id", table_name="exercise_variables")
    op.drop_table("exercise_variables")
    op.drop_index(op.f("ix_exercises_name"), table_name="exercises")
    op.drop_table("exercises")
    progression_type.drop(op.get_bind(), checkfirst=True)
