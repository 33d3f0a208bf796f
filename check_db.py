"""Report row counts and variables whose current_value is not on their own sequence.

Run from the repository root: python check_db.py
"""

import asyncio

from sqlalchemy import func, select

from app.core.config import get_settings
from app.db.session import async_session_maker, engine
from app.models import Exercise, ExerciseLink, ExerciseLog, ExerciseVariable, SetLog, WorkoutSession
from app.services.sequence import find_index, generate_sequence


async def check_data():
    tolerance = get_settings().progression_tolerance
    async with async_session_maker() as session:
        for model in (Exercise, ExerciseVariable, ExerciseLink, WorkoutSession, ExerciseLog, SetLog):
            count = (await session.execute(select(func.count()).select_from(model))).scalar()
            print(f"Table '{model.__tablename__}' row count: {count}")

        result = await session.execute(select(ExerciseVariable))
        off_sequence = 0
        for variable in result.scalars():
            sequence = generate_sequence(variable)
            if find_index(sequence, variable.current_value, tolerance) < 0:
                off_sequence += 1
                print(
                    f"  Variable {variable.id} (exercise {variable.exercise_id}): "
                    f"current {variable.current_value} not in {sequence}"
                )
        print(f"Variables off their sequence: {off_sequence}")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(check_data())
