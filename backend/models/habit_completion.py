from sqlalchemy import Column, Integer, Float, Date, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base


class HabitCompletion(Base):
    __tablename__ = "habit_completions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    habit_id = Column(Integer, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    completed = Column(Boolean, default=True)
    value = Column(Float, nullable=True)  # only kept for numeric goals

    habit = relationship("Habit", back_populates="completions")

    __table_args__ = (
        UniqueConstraint("habit_id", "date", name="uq_habit_date"),
    )

    def to_dict(self):
        return {
            "date": self.date.isoformat(),
            "completed": bool(self.completed),
            "value": self.value,
        }
