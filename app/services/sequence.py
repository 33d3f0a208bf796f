"""Progression sequences for exercise variables.

A variable walks through a bounded list of values: start_value, then one step
per increment (additive increment_size or multiplicative percentage_increase),
clamped to max_value / min_value. current_value is located in that list by
tolerance comparison, which gives the position, the next value and whether
the variable has finished its cycle.

Everything here is pure: no DB access, works on ORM rows or any object with
the same attributes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from app.core.constants import TIME_VARIABLE_TYPE, VALUE_TOLERANCE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressionSequence:
    """Sequence values plus where current_value sits in them (-1 when not found)."""

    values: list[float]
    current_index: int
    is_complete: bool
    next_value: Optional[float]

    @property
    def found(self) -> bool:
        return self.current_index >= 0


@dataclass(frozen=True)
class ProgressionStatus:
    """UI view of a variable: 1-based position, sequence length, next value, completion."""

    current: int
    total: int
    next_value: float
    is_complete: bool


def values_match(a: float, b: float, tolerance: float = VALUE_TOLERANCE) -> bool:
    return abs(a - b) < tolerance


def has_step(variable: Any) -> bool:
    """True when the variable has a usable increment (0 counts as unset)."""
    return bool(variable.percentage_increase) or bool(variable.increment_size)


def generate_sequence(variable: Any) -> list[float]:
    """
    Build the bounded sequence of values for a variable.
    Length is between 1 and number_of_increments + 1; a value clamped to a bound
    may repeat (the variable stays at its ceiling / floor).
    """
    current = float(variable.start_value)
    sequence = [current]
    for _ in range(int(variable.number_of_increments or 0)):
        if variable.percentage_increase:
            nxt = current * (1 + variable.percentage_increase / 100)
        elif variable.increment_size:
            nxt = current + variable.increment_size
        else:
            break

        # Apply bounds
        if variable.max_value is not None and nxt > variable.max_value:
            nxt = float(variable.max_value)
        if variable.min_value is not None and nxt < variable.min_value:
            nxt = float(variable.min_value)

        sequence.append(nxt)
        current = nxt

        if variable.max_value is not None and current >= variable.max_value:
            break
    return sequence


def find_index(values: list[float], value: float, tolerance: float = VALUE_TOLERANCE) -> int:
    """First position matching value, or -1. Earlier duplicates win."""
    for i, v in enumerate(values):
        if values_match(v, value, tolerance):
            return i
    return -1


def resolve_sequence(
    variable: Any,
    values: Optional[list[float]] = None,
    tolerance: float = VALUE_TOLERANCE,
) -> ProgressionSequence:
    """Locate variable.current_value in its sequence (generated unless given)."""
    if values is None:
        values = generate_sequence(variable)
    index = find_index(values, float(variable.current_value), tolerance)
    if index < 0:
        logger.debug(
            "Variable %s: current value %s not in sequence %s",
            getattr(variable, "id", None), variable.current_value, values,
        )
        return ProgressionSequence(values=values, current_index=-1, is_complete=False, next_value=None)
    last = len(values) - 1
    return ProgressionSequence(
        values=values,
        current_index=index,
        is_complete=index == last,
        next_value=values[index + 1] if index < last else None,
    )


def get_progression_status(variable: Any, tolerance: float = VALUE_TOLERANCE) -> ProgressionStatus:
    """Position / next value / completion for display. Read-only."""
    resolved = resolve_sequence(variable, tolerance=tolerance)
    current_value = float(variable.current_value)
    next_value = resolved.next_value if resolved.next_value is not None else current_value
    return ProgressionStatus(
        current=resolved.current_index + 1,
        total=len(resolved.values),
        next_value=next_value,
        is_complete=values_match(current_value, resolved.values[-1], tolerance),
    )


def calculate_next_values(variables: Iterable[Any]) -> dict[Any, Optional[float]]:
    """Next sequence value for each variable id (None at the end or when not found)."""
    return {v.id: resolve_sequence(v).next_value for v in variables}


def should_reset_variable(variable: Any, higher_variable: Any | None) -> bool:
    """A lower-order variable resets when the variable above it has completed its sequence."""
    if higher_variable is None:
        return False
    return resolve_sequence(higher_variable).is_complete


def format_variable_value(value: float, variable: Any) -> str:
    """m:ss for time variables, value + unit otherwise."""
    if variable.variable_type == TIME_VARIABLE_TYPE:
        minutes = int(value // 60)
        seconds = int(value % 60)
        return f"{minutes}:{seconds:02d}"
    text = str(int(value)) if float(value).is_integer() else str(value)
    return f"{text}{variable.unit}" if variable.unit else text
