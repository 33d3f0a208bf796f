"""Shared enums for models and API."""

from enum import Enum


class ProgressionType(str, Enum):
    """How many cascading variables an exercise's progression involves."""

    SINGLE = "single"  # primary only
    DOUBLE = "double"  # primary -> secondary
    TRIPLE = "triple"  # primary -> secondary -> tertiary


class VariableRole(str, Enum):
    """Role a variable plays within its exercise's progression."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
