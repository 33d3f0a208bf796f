from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from app.core.enums import ProgressionType
from app.core.exceptions import PersistenceError
from app.models import Exercise, ExerciseVariable
from app.services.progression import ProgressionEngine

FIXED_NOW = datetime(2026, 1, 5, 7, 30, tzinfo=timezone.utc)


def make_exercise(progression_type=ProgressionType.SINGLE, maintenance_mode=False, name="Plank"):
    return Exercise(
        id=uuid.uuid4(),
        name=name,
        progression_type=progression_type,
        maintenance_mode=maintenance_mode,
        prep_timer_duration=0,
        order_index=0,
    )


def make_variable(exercise, role="primary", **overrides):
    """Transient variable row; current_value defaults to start_value."""
    values = dict(
        id=uuid.uuid4(),
        exercise_id=exercise.id,
        variable_type="time",
        unit="s",
        custom_name=None,
        start_value=30.0,
        increment_size=10.0,
        percentage_increase=None,
        number_of_increments=3,
        min_value=None,
        max_value=None,
        is_primary=role == "primary",
        is_secondary=role == "secondary",
        is_tertiary=role == "tertiary",
        should_reset_cycle=False,
        current_value_modified_at=None,
    )
    values.update(overrides)
    values.setdefault("current_value", values["start_value"])
    return ExerciseVariable(**values)


class FakeProgressionStore:
    """In-memory ProgressionStore. Returns the stored objects so tests can inspect them."""

    def __init__(self):
        self.exercises: dict[uuid.UUID, Exercise] = {}
        self.variables: dict[uuid.UUID, ExerciseVariable] = {}
        self.links: dict[uuid.UUID, list[uuid.UUID]] = {}
        self.updates: list[tuple[uuid.UUID, float, bool | None]] = []
        self.completion_logs: list[tuple] = []
        self.set_logs: list[tuple] = []
        self.link_lookups: list[uuid.UUID] = []
        self.fail_on_update: int | None = None  # 1-based update call that raises

    def add(self, exercise, *variables):
        self.exercises[exercise.id] = exercise
        for v in variables:
            self.variables[v.id] = v
        return exercise

    def link(self, source, target):
        self.links.setdefault(source.id, []).append(target.id)

    async def get_exercise(self, exercise_id):
        return self.exercises.get(exercise_id)

    async def list_variables(self, exercise_id):
        return [v for v in self.variables.values() if v.exercise_id == exercise_id]

    async def update_variable(self, variable_id, current_value, modified_at, should_reset_cycle=None):
        if self.fail_on_update is not None and len(self.updates) + 1 == self.fail_on_update:
            raise PersistenceError("Failed to update variable: connection lost")
        variable = self.variables[variable_id]
        variable.current_value = current_value
        variable.current_value_modified_at = modified_at
        if should_reset_cycle is not None:
            variable.should_reset_cycle = should_reset_cycle
        self.updates.append((variable_id, current_value, should_reset_cycle))

    async def list_links(self, exercise_id):
        self.link_lookups.append(exercise_id)
        return list(self.links.get(exercise_id, []))

    async def insert_completion_log(self, session_id, exercise_id, variable_id, value_used):
        self.completion_logs.append((session_id, exercise_id, variable_id, value_used))

    async def insert_set_log(self, session_id, exercise_id, outcome):
        self.set_logs.append((session_id, exercise_id, outcome))

    async def set_maintenance_mode(self, exercise_id, enabled):
        exercise = self.exercises.get(exercise_id)
        if exercise is None:
            return False
        exercise.maintenance_mode = enabled
        return True


@pytest.fixture
def store():
    return FakeProgressionStore()


@pytest.fixture
def engine(store):
    return ProgressionEngine(store, tolerance=1e-4, clock=lambda: FIXED_NOW)
