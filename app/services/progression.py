"""Exercise progression: advance variables on a successful completion.

Flow for one completion event:
    maintenance gate -> variable state machine -> linked exercises -> completion logs

The state machine works on up to three role-tagged variables. The primary
variable steps along its sequence; when it was already at the end of the
sequence the next variable up steps once and the lower one(s) go back to
their start value (should_reset_cycle is set on them).

Every variable write is its own store call. Nothing is rolled back when a
later call fails, and nothing serialises two events for the same exercise
(the last write wins); callers re-read state after an error.
"""

from __future__ import annotations

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Sequence

from app.core.config import get_settings
from app.core.constants import REQUIRED_ROLES
from app.core.enums import ProgressionType, VariableRole
from app.core.exceptions import ConfigurationError, NotFoundError
from app.schemas.session import SetOutcome
from app.services.sequence import (
    ProgressionStatus,
    get_progression_status,
    has_step,
    resolve_sequence,
    values_match,
)
from app.services.store import ProgressionStore
from app.services.validation import role_of

logger = logging.getLogger(__name__)


@dataclass
class RoleSlots:
    """At most one variable per role."""

    primary: Optional[Any] = None
    secondary: Optional[Any] = None
    tertiary: Optional[Any] = None

    @classmethod
    def from_variables(cls, variables: Iterable[Any]) -> "RoleSlots":
        slots = cls()
        for variable in variables:
            role = role_of(variable)
            if role is None:
                raise ConfigurationError(f"Variable {variable.id} must have exactly one role")
            if getattr(slots, role.value) is not None:
                raise ConfigurationError(
                    f"Exercise {variable.exercise_id} has more than one {role.value} variable"
                )
            setattr(slots, role.value, variable)
        return slots

    @property
    def roles(self) -> frozenset[VariableRole]:
        return frozenset(role for role in VariableRole if getattr(self, role.value) is not None)

    def check_against(self, progression_type: ProgressionType) -> None:
        """Raise ConfigurationError unless the present roles are exactly the required ones."""
        required = REQUIRED_ROLES[progression_type]
        if self.roles != required:
            raise ConfigurationError(
                f"{progression_type.value} progression requires roles "
                f"{sorted(r.value for r in required)}, found {sorted(r.value for r in self.roles)}"
            )


@dataclass
class ProgressionOutcome:
    """Which exercises one event progressed (root first) and which were frozen."""

    exercise_id: uuid.UUID
    progressed: list[uuid.UUID] = field(default_factory=list)
    skipped: list[uuid.UUID] = field(default_factory=list)


class ProgressionEngine:
    """Runs completion events against a ProgressionStore."""

    def __init__(
        self,
        store: ProgressionStore,
        tolerance: float | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.tolerance = tolerance if tolerance is not None else get_settings().progression_tolerance
        self._now = clock or (lambda: datetime.now(timezone.utc))

    # ── Entry points ─────────────────────────────────────────────────────

    async def handle_exercise_progression(
        self,
        exercise_id: uuid.UUID,
        success: bool,
        session_id: uuid.UUID | None = None,
        sets: Sequence[SetOutcome] | None = None,
    ) -> ProgressionOutcome:
        """
        Progress an exercise after a completion event, then its linked exercises,
        then write completion / set logs when session_id and sets are given.
        Failed events and exercises in maintenance mode change nothing.
        """
        outcome = ProgressionOutcome(exercise_id=exercise_id)
        if not success:
            return outcome

        exercise = await self._load_exercise(exercise_id)
        if exercise.maintenance_mode:
            logger.info("Exercise %s is in maintenance mode, progression skipped", exercise_id)
            outcome.skipped.append(exercise_id)
            return outcome

        values_used = await self._progress_exercise(exercise)
        outcome.progressed.append(exercise_id)

        await self.propagate_links(exercise_id, outcome)

        if session_id is not None and sets is not None:
            await self.log_completion(session_id, exercise_id, values_used, sets)
        return outcome

    async def complete_exercise(
        self,
        session_id: uuid.UUID,
        exercise_id: uuid.UUID,
        sets: Sequence[SetOutcome],
    ) -> ProgressionOutcome:
        """
        End of an exercise within a session. Progresses only when every set
        succeeded; otherwise just the set outcomes are recorded.
        """
        success = bool(sets) and all(s.success for s in sets)
        if success:
            return await self.handle_exercise_progression(exercise_id, True, session_id, sets)

        outcome = ProgressionOutcome(exercise_id=exercise_id)
        exercise = await self._load_exercise(exercise_id)
        if exercise.maintenance_mode:
            outcome.skipped.append(exercise_id)
            return outcome
        for s in sets:
            await self.store.insert_set_log(session_id, exercise_id, s)
        return outcome

    async def toggle_maintenance_mode(self, exercise_id: uuid.UUID, enabled: bool) -> None:
        if not await self.store.set_maintenance_mode(exercise_id, enabled):
            raise NotFoundError("Exercise", exercise_id)
        logger.info("Exercise %s maintenance mode %s", exercise_id, "on" if enabled else "off")

    def get_progression_status(self, variable: Any) -> ProgressionStatus:
        return get_progression_status(variable, tolerance=self.tolerance)

    # ── State machine ────────────────────────────────────────────────────

    async def advance_on_completion(self, exercise: Any, slots: RoleSlots, success: bool = True) -> None:
        """Apply one successful completion to the exercise's variables."""
        if not success or exercise.maintenance_mode:
            return
        primary = slots.primary
        if primary is None:
            raise ConfigurationError(f"Exercise {exercise.id} has no primary variable")

        progression_type = ProgressionType(exercise.progression_type)
        if progression_type == ProgressionType.SINGLE:
            await self._progress_variable(primary)

        elif progression_type == ProgressionType.DOUBLE:
            primary_done = await self._progress_variable(primary)
            if primary_done and slots.secondary is not None:
                await self._progress_variable(slots.secondary)
                await self._reset_variable(primary)

        elif progression_type == ProgressionType.TRIPLE:
            primary_done = await self._progress_variable(primary)
            if primary_done and slots.secondary is not None:
                secondary_done = await self._progress_variable(slots.secondary)
                if secondary_done and slots.tertiary is not None:
                    await self._progress_variable(slots.tertiary)
                    await self._reset_variable(primary)
                    await self._reset_variable(slots.secondary)
                elif secondary_done:
                    # Secondary keeps its value when there is no tertiary to carry over into
                    await self._reset_variable(primary)

    async def _progress_variable(self, variable: Any) -> bool:
        """Step to the next sequence value. Returns True if it was already at the end."""
        if not has_step(variable):
            raise ConfigurationError(
                f"Variable {variable.id} has neither increment size nor percentage increase"
            )
        resolved = resolve_sequence(variable, tolerance=self.tolerance)
        if not resolved.found:
            raise ConfigurationError(
                f"Variable {variable.id}: current value {variable.current_value} "
                f"is not part of its sequence {resolved.values}"
            )
        current_value = float(variable.current_value)
        next_value = resolved.next_value if resolved.next_value is not None else current_value
        at_terminal = values_match(next_value, current_value, self.tolerance)

        await self.store.update_variable(variable.id, next_value, self._now())
        if at_terminal:
            logger.info("Variable %s completed its sequence at %s", variable.id, current_value)
        else:
            logger.info("Variable %s progressed %s -> %s", variable.id, current_value, next_value)
        return at_terminal

    async def _reset_variable(self, variable: Any) -> None:
        await self.store.update_variable(
            variable.id, float(variable.start_value), self._now(), should_reset_cycle=True
        )
        logger.info("Variable %s reset to %s", variable.id, variable.start_value)

    async def _progress_exercise(self, exercise: Any) -> dict[uuid.UUID, float]:
        """Load, check and advance one exercise. Returns the values used before advancing."""
        variables = await self.store.list_variables(exercise.id)
        values_used = {v.id: float(v.current_value) for v in variables}
        slots = RoleSlots.from_variables(variables)
        slots.check_against(ProgressionType(exercise.progression_type))
        await self.advance_on_completion(exercise, slots)
        return values_used

    async def _load_exercise(self, exercise_id: uuid.UUID) -> Any:
        exercise = await self.store.get_exercise(exercise_id)
        if exercise is None:
            raise NotFoundError("Exercise", exercise_id)
        return exercise

    # ── Linked exercises ─────────────────────────────────────────────────

    async def propagate_links(
        self,
        exercise_id: uuid.UUID,
        outcome: ProgressionOutcome | None = None,
    ) -> ProgressionOutcome:
        """
        Progress every exercise reachable through links, breadth-first, as an
        implicit success. Each exercise progresses at most once per call, so link
        cycles terminate. Exercises in maintenance mode are skipped and their own
        links are not followed.
        """
        if outcome is None:
            outcome = ProgressionOutcome(exercise_id=exercise_id)
        visited = {exercise_id, *outcome.progressed, *outcome.skipped}
        queue = deque([exercise_id])
        while queue:
            current = queue.popleft()
            for linked_id in await self.store.list_links(current):
                if linked_id in visited:
                    continue
                visited.add(linked_id)
                linked = await self._load_exercise(linked_id)
                if linked.maintenance_mode:
                    logger.info("Linked exercise %s is in maintenance mode, skipped", linked_id)
                    outcome.skipped.append(linked_id)
                    continue
                await self._progress_exercise(linked)
                outcome.progressed.append(linked_id)
                logger.info("Linked exercise %s progressed via %s", linked_id, current)
                queue.append(linked_id)
        return outcome

    # ── Completion logs ──────────────────────────────────────────────────

    async def log_completion(
        self,
        session_id: uuid.UUID,
        exercise_id: uuid.UUID,
        values_used: dict[uuid.UUID, float],
        sets: Sequence[SetOutcome],
    ) -> None:
        """One log per variable with the value used in the session, one per set outcome."""
        for variable_id, value in values_used.items():
            await self.store.insert_completion_log(session_id, exercise_id, variable_id, value)
        for s in sets:
            await self.store.insert_set_log(session_id, exercise_id, s)
