# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.user import User
from models.habit import Habit
from models.habit_completion import HabitCompletion
from models.workout import Workout, WorkoutExercise, WorkoutSet
from models.exercise_library import ExerciseLibrary

__all__ = [
    "User",
    "Habit",
    "HabitCompletion",
    "Workout",
    "WorkoutExercise",
    "WorkoutSet",
    "ExerciseLibrary",
]
