from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from database import Base


class ExerciseLibrary(Base):
    __tablename__ = "exercise_library"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    muscle_group = Column(String(20), nullable=False, default="Full Body")
    equipment = Column(String(20), nullable=False, default="Other")
    is_custom = Column(Boolean, default=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    usage_count = Column(Integer, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "name": self.name,
            "muscle_group": self.muscle_group,
            "equipment": self.equipment,
            "usage_count": self.usage_count or 0,
        }
