"""ORM models - import all so Base.metadata is complete for migrations."""

from app.models.exercise import Exercise
from app.models.exercise_link import ExerciseLink
from app.models.session import ExerciseLog, SetLog, WorkoutSession
from app.models.variable import ExerciseVariable

__all__ = [
    "Exercise",
    "ExerciseLink",
    "ExerciseLog",
    "ExerciseVariable",
    "SetLog",
    "WorkoutSession",
]
