"""Exercise variable schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VariableBase(BaseModel):
    variable_type: str = Field(..., min_length=1, max_length=50)
    unit: str | None = Field(None, max_length=20)
    custom_name: str | None = Field(None, max_length=100)
    start_value: float
    increment_size: float | None = None
    percentage_increase: float | None = None
    number_of_increments: int = Field(..., ge=0)
    min_value: float | None = None
    max_value: float | None = None
    is_primary: bool = False
    is_secondary: bool = False
    is_tertiary: bool = False


class VariableCreate(VariableBase):
    # Defaults to start_value
    current_value: float | None = None


REQUIRED_ON_UPDATE = ("variable_type", "start_value", "number_of_increments", "current_value")


class VariableUpdate(BaseModel):
    """Explicit user edit; the merged result is validated like a new variable."""

    variable_type: str | None = Field(None, min_length=1, max_length=50)
    unit: str | None = Field(None, max_length=20)
    custom_name: str | None = Field(None, max_length=100)
    start_value: float | None = None
    increment_size: float | None = None
    percentage_increase: float | None = None
    number_of_increments: int | None = Field(None, ge=0)
    min_value: float | None = None
    max_value: float | None = None
    current_value: float | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        """Omitting a field keeps it; null is only allowed where the column is nullable."""
        nulled = sorted(
            name for name in REQUIRED_ON_UPDATE if name in self.model_fields_set and getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"Fields cannot be null: {', '.join(nulled)}")
        return self


class VariableRead(VariableBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    exercise_id: UUID
    current_value: float
    should_reset_cycle: bool = False
    current_value_modified_at: datetime | None = None


class ProgressionStatusRead(BaseModel):
    """Position of a variable in its sequence, for display."""

    variable_id: UUID
    current: int
    total: int
    next_value: float
    is_complete: bool
    sequence: list[float]
    display_value: str
    display_next_value: str
