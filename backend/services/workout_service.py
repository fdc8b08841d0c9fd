"""
workout_service.py — Workout logging & live sessions
CRUD for workouts, the start/pause/resume/end lifecycle, exercise/set
mutation and the exercise library usage counter.
"""

from datetime import date, datetime, timezone, timedelta

from sqlalchemy.orm import Session

from models.exercise_library import ExerciseLibrary
from models.workout import Workout, WorkoutExercise, WorkoutSet, OPEN_STATUSES
from services import workout_analytics
from services.habit_analytics import utc_today

LIST_LIMIT = 100
LIBRARY_LIMIT = 50


class WorkoutStateError(ValueError):
    """Requested transition is not allowed from the workout's current status."""


class ActiveWorkoutExists(WorkoutStateError):
    def __init__(self, workout_id: int):
        super().__init__("You already have an active workout")
        self.workout_id = workout_id


def utc_now() -> datetime:
    # Stored naive; SQLite drops tzinfo anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _seconds_since(then: datetime | None, now: datetime) -> int:
    if then is None:
        return 0
    return max(0, int((now - then).total_seconds()))


def _check_exercise_names(exercises: list) -> None:
    if any(not (e.get("name") or "").strip() for e in exercises):
        raise ValueError("Exercise name is required")


def _build_exercise(data: dict, position: int) -> WorkoutExercise:
    return WorkoutExercise(
        name=data["name"],
        muscle_group=data.get("muscle_group"),
        equipment=data.get("equipment"),
        position=position,
        sets=[
            WorkoutSet(
                reps=s["reps"],
                weight=s["weight"],
                rest_time=s.get("rest_time"),
                rpe=s.get("rpe"),
                completed=s.get("completed", True),
            )
            for s in data.get("sets") or []
        ],
    )


class WorkoutService:
    @staticmethod
    def get(db: Session, user_id: int, workout_id: int) -> Workout | None:
        return db.query(Workout).filter_by(id=workout_id, user_id=user_id).first()

    @staticmethod
    def get_all(db: Session, user_id: int, filters: dict = None) -> list[Workout]:
        """Query with filters."""
        filters = filters or {}
        query = db.query(Workout).filter(Workout.user_id == user_id)

        if filters.get("start_date"):
            query = query.filter(Workout.date >= filters["start_date"])
        if filters.get("end_date"):
            query = query.filter(Workout.date <= filters["end_date"])
        if filters.get("muscle_group"):
            query = query.filter(Workout.exercises.any(WorkoutExercise.muscle_group == filters["muscle_group"]))
        if filters.get("workout_type"):
            query = query.filter(Workout.workout_type == filters["workout_type"])
        if filters.get("search"):
            query = query.filter(Workout.exercises.any(WorkoutExercise.name.ilike(f"%{filters['search']}%")))

        sort_by = filters.get("sort_by")
        if sort_by == "duration":
            query = query.order_by(Workout.duration.desc(), Workout.date.desc())
        else:
            query = query.order_by(Workout.date.desc(), Workout.id.desc())

        if sort_by == "volume":
            # Volume is derived from sets, so rank in Python
            workouts = sorted(query.all(), key=lambda w: w.total_volume, reverse=True)
            return workouts[:LIST_LIMIT]
        return query.limit(LIST_LIMIT).all()

    @staticmethod
    def get_active(db: Session, user_id: int) -> Workout | None:
        return (
            db.query(Workout)
            .filter(Workout.user_id == user_id, Workout.status.in_(OPEN_STATUSES))
            .first()
        )

    @staticmethod
    def elapsed_duration(w: Workout, now: datetime | None = None) -> int:
        """Active seconds so far, including the running stretch when active."""
        elapsed = w.duration or 0
        if w.status == "active":
            elapsed += _seconds_since(w.start_time, now or utc_now())
        return elapsed

    @staticmethod
    def start(db: Session, user_id: int, data: dict) -> Workout:
        """Open a live workout. Only one active/paused workout per user."""
        existing = WorkoutService.get_active(db, user_id)
        if existing:
            raise ActiveWorkoutExists(existing.id)

        try:
            w = Workout(
                user_id=user_id,
                date=data.get("date") or utc_today(),
                status="active",
                start_time=utc_now(),
                workout_type=data.get("workout_type"),
                weight_unit=data.get("weight_unit") or "kg",
                notes="",
                duration=0,
                paused_duration=0,
            )
            db.add(w)
            db.commit()
            db.refresh(w)
            return w
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def pause(db: Session, user_id: int, workout_id: int) -> Workout | None:
        w = WorkoutService.get(db, user_id, workout_id)
        if not w:
            return None
        if w.status != "active":
            raise WorkoutStateError("Workout is not active")

        try:
            now = utc_now()
            w.duration = (w.duration or 0) + _seconds_since(w.start_time, now)
            w.paused_at = now
            w.status = "paused"
            db.commit()
            db.refresh(w)
            return w
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def resume(db: Session, user_id: int, workout_id: int) -> Workout | None:
        w = WorkoutService.get(db, user_id, workout_id)
        if not w:
            return None
        if w.status != "paused":
            raise WorkoutStateError("Workout is not paused")

        try:
            now = utc_now()
            w.paused_duration = (w.paused_duration or 0) + _seconds_since(w.paused_at, now)
            w.paused_at = None
            w.status = "active"
            # Next active stretch is measured from here
            w.start_time = now
            db.commit()
            db.refresh(w)
            return w
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def end(db: Session, user_id: int, workout_id: int) -> Workout | None:
        w = WorkoutService.get(db, user_id, workout_id)
        if not w:
            return None
        if w.status not in OPEN_STATUSES:
            raise WorkoutStateError("Workout is not active or paused")

        try:
            now = utc_now()
            w.duration = WorkoutService.elapsed_duration(w, now)
            w.status = "completed"
            w.end_time = now
            w.paused_at = None
            db.commit()
            db.refresh(w)
            return w
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Workout:
        """Log a finished workout after the fact."""
        exercises = data.get("exercises") or []
        if not exercises:
            raise ValueError("At least one exercise is required")
        _check_exercise_names(exercises)

        try:
            d = data.get("date") or utc_today()
            w = Workout(
                user_id=user_id,
                date=d,
                status="completed",
                exercises=[_build_exercise(e, i) for i, e in enumerate(exercises)],
                notes=data.get("notes") or "",
                workout_type=data.get("workout_type"),
                weight_unit=data.get("weight_unit") or "kg",
                duration=data.get("duration") or 0,
                paused_duration=0,
                calories_burned=data.get("calories_burned"),
                end_time=datetime(d.year, d.month, d.day),
            )
            db.add(w)
            for e in exercises:
                WorkoutService._bump_library(db, user_id, e)
            db.commit()
            db.refresh(w)
            return w
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def add_exercise(db: Session, user_id: int, workout_id: int, data: dict) -> Workout | None:
        w = WorkoutService.get(db, user_id, workout_id)
        if not w:
            return None
        _check_exercise_names([data])

        try:
            w.exercises.append(_build_exercise({**data, "sets": []}, len(w.exercises)))
            WorkoutService._bump_library(db, user_id, data)
            db.commit()
            db.refresh(w)
            return w
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def add_set(db: Session, user_id: int, workout_id: int, index: int, data: dict) -> Workout | None:
        w = WorkoutService.get(db, user_id, workout_id)
        if not w:
            return None
        if index < 0 or index >= len(w.exercises):
            raise ValueError("Invalid exercise index")
        if not data.get("reps") or not data.get("weight"):
            raise ValueError("Reps and weight are required")

        try:
            w.exercises[index].sets.append(
                WorkoutSet(
                    reps=data["reps"],
                    weight=data["weight"],
                    rest_time=data.get("rest_time"),
                    rpe=data.get("rpe"),
                    completed=True if data.get("completed") is None else data["completed"],
                )
            )
            db.commit()
            db.refresh(w)
            return w
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def update(db: Session, user_id: int, workout_id: int, data: dict) -> Workout | None:
        w = WorkoutService.get(db, user_id, workout_id)
        if not w:
            return None
        if w.status in OPEN_STATUSES:
            raise WorkoutStateError("Cannot update active or paused workout. End it first.")
        if data.get("exercises"):
            _check_exercise_names(data["exercises"])

        try:
            if data.get("date"):
                w.date = data["date"]
            if data.get("exercises"):
                w.exercises = [_build_exercise(e, i) for i, e in enumerate(data["exercises"])]
            for field in ("notes", "workout_type", "duration", "calories_burned"):
                if field in data:
                    setattr(w, field, data[field])
            if data.get("weight_unit"):
                w.weight_unit = data["weight_unit"]
            db.commit()
            db.refresh(w)
            return w
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def delete(db: Session, user_id: int, workout_id: int) -> bool:
        try:
            w = WorkoutService.get(db, user_id, workout_id)
            if not w:
                return False
            db.delete(w)
            db.commit()
            return True
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def _bump_library(db: Session, user_id: int, exercise: dict) -> None:
        """Upsert the library entry for an exercise name and count one more use."""
        entry = db.query(ExerciseLibrary).filter_by(name=exercise["name"]).first()
        if not entry:
            entry = ExerciseLibrary(
                name=exercise["name"],
                muscle_group=exercise.get("muscle_group") or "Full Body",
                equipment=exercise.get("equipment") or "Other",
                is_custom=True,
                created_by=user_id,
                usage_count=0,
            )
            db.add(entry)
        else:
            if exercise.get("muscle_group"):
                entry.muscle_group = exercise["muscle_group"]
            if exercise.get("equipment"):
                entry.equipment = exercise["equipment"]
        entry.usage_count = (entry.usage_count or 0) + 1
        db.flush()

    @staticmethod
    def search_library(db: Session, search: str = None, muscle_group: str = None,
                       equipment: str = None) -> list[ExerciseLibrary]:
        query = db.query(ExerciseLibrary)
        if search:
            query = query.filter(ExerciseLibrary.name.ilike(f"%{search}%"))
        if muscle_group:
            query = query.filter(ExerciseLibrary.muscle_group == muscle_group)
        if equipment:
            query = query.filter(ExerciseLibrary.equipment == equipment)
        return (
            query.order_by(ExerciseLibrary.usage_count.desc(), ExerciseLibrary.name.asc())
            .limit(LIBRARY_LIMIT)
            .all()
        )

    # --- Analytics -------------------------------------------------------

    @staticmethod
    def completed(db: Session, user_id: int, start_date: date = None, end_date: date = None) -> list[Workout]:
        """Completed workouts, oldest first."""
        query = db.query(Workout).filter(Workout.user_id == user_id, Workout.status == "completed")
        if start_date:
            query = query.filter(Workout.date >= start_date)
        if end_date:
            query = query.filter(Workout.date <= end_date)
        return query.order_by(Workout.date.asc(), Workout.id.asc()).all()

    @staticmethod
    def stats_summary(db: Session, user_id: int, start_date: date = None, end_date: date = None) -> dict:
        workouts = WorkoutService.completed(db, user_id, start_date, end_date)
        return workout_analytics.summary(workouts)

    @staticmethod
    def progression(db: Session, user_id: int, exercise_name: str = None,
                    muscle_group: str = None, days: int = 90) -> dict:
        since = utc_today() - timedelta(days=days)
        workouts = WorkoutService.completed(db, user_id, start_date=since)
        return workout_analytics.progression(workouts, exercise_name, muscle_group)

    @staticmethod
    def personal_records(db: Session, user_id: int, exercise_name: str = None) -> dict:
        workouts = WorkoutService.completed(db, user_id)
        return workout_analytics.personal_records(workouts, exercise_name)
