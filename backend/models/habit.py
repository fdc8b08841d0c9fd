from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from database import Base

CATEGORIES = ("Health", "Fitness", "Productivity", "Mindfulness", "Custom")
FREQUENCIES = ("daily", "weekly", "custom")
GOAL_TYPES = ("yes_no", "numeric")


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    category = Column(String(20), default="Custom")  # Health/Fitness/Productivity/Mindfulness/Custom
    frequency = Column(String(20), default="daily")  # daily/weekly/custom
    weekly_days = Column(JSON, default=list)  # 0 (Sunday) .. 6 (Saturday), used when weekly
    custom_frequency = Column(Integer, nullable=True)  # N times per week, 1-7
    start_date = Column(Date, nullable=False, default=lambda: datetime.now(timezone.utc).date())
    reminder_time = Column(String(10), nullable=True)  # e.g., "08:00"
    reminder_enabled = Column(Boolean, default=False)
    goal_type = Column(String(20), default="yes_no")  # yes_no/numeric
    numeric_goal = Column(Float, nullable=True)
    color = Column(String(7), default="#3b82f6")
    icon = Column(String(10), default="📝")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    completions = relationship(
        "HabitCompletion",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="HabitCompletion.date",
    )

    def to_dict(self, completions=None):
        if completions is None:
            completions = self.completions
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "category": self.category,
            "frequency": self.frequency,
            "weekly_days": list(self.weekly_days or []),
            "custom_frequency": self.custom_frequency,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "reminder_time": self.reminder_time,
            "reminder_enabled": self.reminder_enabled,
            "goal_type": self.goal_type,
            "numeric_goal": self.numeric_goal,
            "color": self.color,
            "icon": self.icon,
            "completions": [c.to_dict() for c in completions],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
