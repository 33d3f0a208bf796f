"""Exercise and exercise link schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import ProgressionType
from app.schemas.variable import VariableRead


class ExerciseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    notes: str | None = None
    progression_type: ProgressionType = ProgressionType.SINGLE
    prep_timer_duration: int = Field(default=0, ge=0)
    order_index: int = 0


class ExerciseCreate(ExerciseBase):
    maintenance_mode: bool = False


class ExerciseRead(ExerciseBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    maintenance_mode: bool = False


class ExerciseReadWithVariables(ExerciseRead):
    variables: list[VariableRead] = []


class MaintenanceModeUpdate(BaseModel):
    enabled: bool


class ExerciseLinkCreate(BaseModel):
    linked_exercise_id: UUID


class ExerciseLinkRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    primary_exercise_id: UUID
    linked_exercise_id: UUID
