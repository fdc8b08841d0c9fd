from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Text, Date, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database import Base

OPEN_STATUSES = ("active", "paused")
MUSCLE_GROUPS = ("Chest", "Back", "Legs", "Shoulders", "Arms", "Core", "Cardio", "Full Body")
EQUIPMENT = ("Barbell", "Dumbbell", "Machine", "Bodyweight", "Cable", "Kettlebell", "Other")
WORKOUT_TYPES = ("Push", "Pull", "Legs", "Full Body", "Upper", "Lower", "Cardio", "Other")
WEIGHT_UNITS = ("kg", "lb")


def _dt(value):
    return value.isoformat() if value else None


class Workout(Base):
    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, default=lambda: datetime.now(timezone.utc).date(), index=True)
    status = Column(String(20), default="completed", index=True)  # planned/active/paused/completed
    start_time = Column(DateTime, nullable=True)  # naive UTC, reset on every resume
    end_time = Column(DateTime, nullable=True)
    duration = Column(Integer, default=0)  # active seconds accumulated so far
    paused_duration = Column(Integer, default=0)  # seconds
    paused_at = Column(DateTime, nullable=True)
    notes = Column(Text, default="")
    workout_type = Column(String(20), nullable=True)  # Push/Pull/Legs/...
    calories_burned = Column(Float, nullable=True)
    weight_unit = Column(String(2), default="kg")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    exercises = relationship(
        "WorkoutExercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="WorkoutExercise.position",
    )

    @property
    def total_volume(self) -> float:
        return sum(e.volume for e in self.exercises)

    @property
    def total_sets(self) -> int:
        return sum(len(e.sets) for e in self.exercises)

    @property
    def total_reps(self) -> int:
        return sum(s.reps or 0 for e in self.exercises for s in e.sets)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat() if self.date else None,
            "status": self.status,
            "start_time": _dt(self.start_time),
            "end_time": _dt(self.end_time),
            "duration": self.duration or 0,
            "paused_duration": self.paused_duration or 0,
            "paused_at": _dt(self.paused_at),
            "notes": self.notes or "",
            "workout_type": self.workout_type,
            "calories_burned": self.calories_burned,
            "weight_unit": self.weight_unit,
            "exercises": [e.to_dict() for e in self.exercises],
            "total_volume": self.total_volume,
            "total_sets": self.total_sets,
            "total_reps": self.total_reps,
        }


class WorkoutExercise(Base):
    __tablename__ = "workout_exercises"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False, index=True)
    muscle_group = Column(String(20), nullable=True)
    equipment = Column(String(20), nullable=True)
    position = Column(Integer, default=0)

    workout = relationship("Workout", back_populates="exercises")
    sets = relationship(
        "WorkoutSet",
        back_populates="exercise",
        cascade="all, delete-orphan",
        order_by="WorkoutSet.id",
    )

    @property
    def volume(self) -> float:
        return sum((s.reps or 0) * (s.weight or 0) for s in self.sets)

    def to_dict(self):
        return {
            "name": self.name,
            "muscle_group": self.muscle_group,
            "equipment": self.equipment,
            "order": self.position or 0,
            "sets": [s.to_dict() for s in self.sets],
        }


class WorkoutSet(Base):
    __tablename__ = "workout_sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    exercise_id = Column(Integer, ForeignKey("workout_exercises.id", ondelete="CASCADE"), nullable=False)
    reps = Column(Integer, nullable=False)
    weight = Column(Float, nullable=False)
    rest_time = Column(Integer, nullable=True)  # seconds
    rpe = Column(Float, nullable=True)  # 1-10
    completed = Column(Boolean, default=True)

    exercise = relationship("WorkoutExercise", back_populates="sets")

    def to_dict(self):
        return {
            "reps": self.reps,
            "weight": self.weight,
            "rest_time": self.rest_time,
            "rpe": self.rpe,
            "completed": True if self.completed is None else bool(self.completed),
        }
