"""Authoring-time validation of variable configurations.

Runs when a variable is created or edited by the user. Returns a list of
human-readable errors (empty when valid) so the API can report all of them
at once.
"""

from __future__ import annotations

from typing import Any, Sequence

from app.core.constants import REQUIRED_ROLES, TIME_VARIABLE_TYPE
from app.core.enums import ProgressionType, VariableRole
from app.services.sequence import find_index, generate_sequence


def role_of(variable: Any) -> VariableRole | None:
    """Single role of a variable, or None when zero or several flags are set."""
    flags = [
        role
        for flag, role in (
            (variable.is_primary, VariableRole.PRIMARY),
            (variable.is_secondary, VariableRole.SECONDARY),
            (variable.is_tertiary, VariableRole.TERTIARY),
        )
        if flag
    ]
    return flags[0] if len(flags) == 1 else None


def validate_variable(
    variable: Any,
    progression_type: ProgressionType,
    existing_variables: Sequence[Any] = (),
    require_time_primary: bool = True,
) -> list[str]:
    """
    Check a variable configuration against its exercise's progression type.
    existing_variables are the exercise's other variables (excluding this one on edit).
    """
    errors: list[str] = []
    allowed = REQUIRED_ROLES[progression_type]

    if len(existing_variables) >= len(allowed):
        errors.append(
            f"Maximum of {len(allowed)} variables allowed for {progression_type.value} progression"
        )
        return errors

    role = role_of(variable)
    if role is None:
        errors.append("Variable must have exactly one role (primary, secondary, or tertiary)")
    elif role not in allowed:
        errors.append(f"{role.value} role is not allowed for {progression_type.value} progression")
    elif any(role_of(v) == role for v in existing_variables):
        errors.append(f"Exercise already has a {role.value} variable")

    if require_time_primary and role == VariableRole.PRIMARY and variable.variable_type != TIME_VARIABLE_TYPE:
        errors.append("Primary variable must be time for this progression type")

    if variable.start_value is None:
        errors.append("Start value is required")
    if not variable.number_of_increments:
        errors.append("Number of increments is required")

    if not variable.increment_size and not variable.percentage_increase:
        errors.append("Either increment size or percentage increase is required")
    elif variable.increment_size and variable.percentage_increase:
        errors.append("Only one of increment size or percentage increase may be set")

    if variable.min_value is not None and variable.max_value is not None:
        if variable.min_value >= variable.max_value:
            errors.append("Minimum value must be less than maximum value")
    if variable.start_value is not None:
        if variable.max_value is not None and variable.start_value > variable.max_value:
            errors.append("Start value must not exceed maximum value")
        if variable.min_value is not None and variable.start_value < variable.min_value:
            errors.append("Start value must not be below minimum value")

    current = getattr(variable, "current_value", None)
    if not errors and current is not None:
        if find_index(generate_sequence(variable), current) < 0:
            errors.append(f"Current value {current:g} is not a step of the variable's sequence")

    return errors
