from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import get_current_user
from config import HABIT_ANALYTICS_DAYS
from database import get_db
from models.habit import CATEGORIES, FREQUENCIES, GOAL_TYPES
from services.habit_service import HabitService

router = APIRouter(prefix="/api/v1/habits", tags=["Habits"])

Category = Literal[CATEGORIES]
Frequency = Literal[FREQUENCIES]
GoalType = Literal[GOAL_TYPES]
OptionalDate = Optional[date]


class HabitCreate(BaseModel):
    name: str = Field(min_length=1)
    category: Optional[Category] = "Custom"
    frequency: Optional[Frequency] = "daily"
    weekly_days: Optional[List[int]] = None
    custom_frequency: Optional[int] = Field(default=None, ge=1, le=7)
    start_date: Optional[date] = None
    reminder_time: Optional[str] = None
    reminder_enabled: Optional[bool] = False
    goal_type: Optional[GoalType] = "yes_no"
    numeric_goal: Optional[float] = Field(default=None, ge=0)
    color: Optional[str] = Field(default="#3b82f6", pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = "📝"


class HabitUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[Category] = None
    frequency: Optional[Frequency] = None
    weekly_days: Optional[List[int]] = None
    custom_frequency: Optional[int] = Field(default=None, ge=1, le=7)
    start_date: Optional[date] = None
    reminder_time: Optional[str] = None
    reminder_enabled: Optional[bool] = None
    goal_type: Optional[GoalType] = None
    numeric_goal: Optional[float] = Field(default=None, ge=0)
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = None


class CompletionRequest(BaseModel):
    date: OptionalDate = None
    value: Optional[float] = None


def _check_weekly_days(days: Optional[List[int]]):
    if days and any(d < 0 or d > 6 for d in days):
        raise HTTPException(status_code=400, detail="Weekly days must be between 0 (Sunday) and 6 (Saturday)")


@router.get("")
async def list_habits(date: Optional[date] = None, user_id: int = Depends(get_current_user),
                      db: Session = Depends(get_db)):
    """All habits, newest first. With ?date= only that day's completions are included."""
    habits = HabitService.get_all(db, user_id)
    if date is None:
        return {"habits": [h.to_dict() for h in habits]}
    return {"habits": [h.to_dict([c for c in h.completions if c.date == date]) for h in habits]}


@router.get("/summary/daily")
async def daily_summary(date: Optional[date] = None, user_id: int = Depends(get_current_user),
                        db: Session = Depends(get_db)):
    return HabitService.daily_summary(db, user_id, date)


@router.post("", status_code=201)
async def create_habit(habit_data: HabitCreate, user_id: int = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    if not habit_data.name.strip():
        raise HTTPException(status_code=400, detail="Habit name is required")
    _check_weekly_days(habit_data.weekly_days)
    h = HabitService.create(db, user_id, habit_data.model_dump())
    return {"status": "success", "message": "Habit created successfully", "data": h.to_dict()}


@router.put("/{habit_id}")
async def update_habit(habit_id: int, habit_data: HabitUpdate, user_id: int = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    fields = habit_data.model_dump(exclude_unset=True)
    if "name" in fields and not (fields["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Habit name is required")
    _check_weekly_days(habit_data.weekly_days)
    h = HabitService.update(db, user_id, habit_id, fields)
    if not h:
        raise HTTPException(status_code=404, detail="Habit not found")
    return {"status": "success", "message": "Habit updated successfully", "data": h.to_dict()}


@router.delete("/{habit_id}")
async def delete_habit(habit_id: int, user_id: int = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    if not HabitService.delete(db, user_id, habit_id):
        raise HTTPException(status_code=404, detail="Habit not found")
    return {"status": "success", "message": "Habit deleted successfully"}


@router.post("/{habit_id}/complete")
async def complete_habit(habit_id: int, body: Optional[CompletionRequest] = None,
                         user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    body = body or CompletionRequest()
    h = HabitService.complete(db, user_id, habit_id, body.date, body.value)
    if not h:
        raise HTTPException(status_code=404, detail="Habit not found")
    return {"status": "success", "message": "Habit marked as completed", "data": h.to_dict()}


@router.post("/{habit_id}/uncomplete")
async def uncomplete_habit(habit_id: int, body: Optional[CompletionRequest] = None,
                           user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    body = body or CompletionRequest()
    h = HabitService.uncomplete(db, user_id, habit_id, body.date)
    if not h:
        raise HTTPException(status_code=404, detail="Habit not found")
    return {"status": "success", "message": "Habit unmarked", "data": h.to_dict()}


@router.get("/{habit_id}/analytics")
async def habit_analytics(habit_id: int, days: int = Query(default=HABIT_ANALYTICS_DAYS, ge=1, le=3650),
                          user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    h = HabitService.get(db, user_id, habit_id)
    if not h:
        raise HTTPException(status_code=404, detail="Habit not found")
    return HabitService.analytics(h, days)
