"""
habit_service.py — Habits & completions
CRUD for habits, find-or-create completion records (one per day), and the
glue that feeds stored completions into habit_analytics.
"""

from datetime import date

from sqlalchemy.orm import Session

from models.habit import Habit
from models.habit_completion import HabitCompletion
from services import habit_analytics

EDITABLE_FIELDS = (
    "name", "category", "frequency", "weekly_days", "custom_frequency", "start_date",
    "reminder_time", "reminder_enabled", "goal_type", "numeric_goal", "color", "icon",
)
# Fields an update may explicitly clear; anything else keeps its value on null
CLEARABLE_FIELDS = ("custom_frequency", "reminder_time", "numeric_goal")


class HabitService:
    @staticmethod
    def create(db: Session, user_id: int, data: dict) -> Habit:
        try:
            h = Habit(
                user_id=user_id,
                name=data["name"],
                category=data.get("category") or "Custom",
                frequency=data.get("frequency") or "daily",
                weekly_days=data.get("weekly_days") or [],
                custom_frequency=data.get("custom_frequency"),
                start_date=data.get("start_date") or habit_analytics.utc_today(),
                reminder_time=data.get("reminder_time"),
                reminder_enabled=data.get("reminder_enabled") or False,
                goal_type=data.get("goal_type") or "yes_no",
                numeric_goal=data.get("numeric_goal"),
                color=data.get("color") or "#3b82f6",
                icon=data.get("icon") or "📝",
            )
            db.add(h)
            db.commit()
            db.refresh(h)
            return h
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def get_all(db: Session, user_id: int) -> list[Habit]:
        """Newest first."""
        return (
            db.query(Habit)
            .filter_by(user_id=user_id)
            .order_by(Habit.created_at.desc(), Habit.id.desc())
            .all()
        )

    @staticmethod
    def get(db: Session, user_id: int, habit_id: int) -> Habit | None:
        return db.query(Habit).filter_by(id=habit_id, user_id=user_id).first()

    @staticmethod
    def update(db: Session, user_id: int, habit_id: int, data: dict) -> Habit | None:
        try:
            h = HabitService.get(db, user_id, habit_id)
            if not h:
                return None
            for k, v in data.items():
                if k not in EDITABLE_FIELDS:
                    continue
                if v is None and k not in CLEARABLE_FIELDS:
                    continue
                setattr(h, k, v)
            db.commit()
            db.refresh(h)
            return h
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def delete(db: Session, user_id: int, habit_id: int) -> bool:
        try:
            h = HabitService.get(db, user_id, habit_id)
            if not h:
                return False
            db.delete(h)
            db.commit()
            return True
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def _find_completion(h: Habit, d: date) -> HabitCompletion | None:
        return next((c for c in h.completions if c.date == d), None)

    @staticmethod
    def complete(db: Session, user_id: int, habit_id: int, d: date | None = None,
                 value: float | None = None) -> Habit | None:
        """Mark a day completed. Re-completing a day updates the existing record in place."""
        try:
            d = d or habit_analytics.utc_today()
            h = HabitService.get(db, user_id, habit_id)
            if not h:
                return None

            numeric = h.goal_type == "numeric"
            c = HabitService._find_completion(h, d)
            if c:
                c.completed = True
                if value is not None and numeric:
                    c.value = value
            else:
                h.completions.append(
                    HabitCompletion(date=d, completed=True, value=value if numeric else None)
                )
            db.commit()
            db.refresh(h)
            return h
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def uncomplete(db: Session, user_id: int, habit_id: int, d: date | None = None) -> Habit | None:
        try:
            d = d or habit_analytics.utc_today()
            h = HabitService.get(db, user_id, habit_id)
            if not h:
                return None
            c = HabitService._find_completion(h, d)
            if c:
                c.completed = False
                db.commit()
                db.refresh(h)
            return h
        except Exception:
            db.rollback()
            raise

    @staticmethod
    def analytics(h: Habit, days: int = 30, today: date | None = None) -> dict:
        return habit_analytics.analyze(h.completions, days=days, start_date=h.start_date, today=today)

    @staticmethod
    def daily_summary(db: Session, user_id: int, target: date | None = None) -> dict:
        habits = db.query(Habit).filter_by(user_id=user_id).all()
        return habit_analytics.daily_summary(habits, target)

    @staticmethod
    def longest_streak(db: Session, user_id: int) -> int:
        """Best run across all of the user's habits."""
        habits = db.query(Habit).filter_by(user_id=user_id).all()
        return max((habit_analytics.longest_streak(h.completions) for h in habits), default=0)
