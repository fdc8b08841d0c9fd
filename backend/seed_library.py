"""
Seed the exercise library with a default catalogue.

Run with: python seed_library.py
Existing names are left untouched, so it is safe to run repeatedly.
"""
import logging

from sqlalchemy.orm import Session

from database import SessionLocal, init_db
from models.exercise_library import ExerciseLibrary

logger = logging.getLogger(__name__)

DEFAULT_EXERCISES = [
    ("Bench Press", "Chest", "Barbell"),
    ("Incline Dumbbell Press", "Chest", "Dumbbell"),
    ("Push-Up", "Chest", "Bodyweight"),
    ("Deadlift", "Back", "Barbell"),
    ("Pull-Up", "Back", "Bodyweight"),
    ("Barbell Row", "Back", "Barbell"),
    ("Lat Pulldown", "Back", "Cable"),
    ("Squat", "Legs", "Barbell"),
    ("Leg Press", "Legs", "Machine"),
    ("Romanian Deadlift", "Legs", "Barbell"),
    ("Overhead Press", "Shoulders", "Barbell"),
    ("Lateral Raise", "Shoulders", "Dumbbell"),
    ("Barbell Curl", "Arms", "Barbell"),
    ("Triceps Pushdown", "Arms", "Cable"),
    ("Plank", "Core", "Bodyweight"),
    ("Kettlebell Swing", "Full Body", "Kettlebell"),
]


def seed_library(db: Session) -> int:
    """Insert missing default exercises. Returns how many were added."""
    existing = {name for (name,) in db.query(ExerciseLibrary.name).all()}
    added = 0
    for name, muscle_group, equipment in DEFAULT_EXERCISES:
        if name in existing:
            continue
        db.add(ExerciseLibrary(name=name, muscle_group=muscle_group, equipment=equipment,
                               is_custom=False, usage_count=0))
        added += 1
    db.commit()
    return added


if __name__ == "__main__":
    init_db()
    db = SessionLocal()
    try:
        count = seed_library(db)
        logger.info(f"Seeded {count} exercises")
    finally:
        db.close()
