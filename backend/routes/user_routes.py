from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import get_current_user, hash_password, verify_password
from config import MIN_PASSWORD_LENGTH
from database import get_db
from models.habit import Habit
from models.user import User
from models.workout import Workout
from services.habit_service import HabitService

router = APIRouter(prefix="/api/v1/user", tags=["User"])


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


def _load_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/profile")
async def get_profile(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"user": _load_user(db, user_id).to_dict()}


@router.put("/profile")
async def update_profile(body: ProfileUpdate, user_id: int = Depends(get_current_user),
                         db: Session = Depends(get_db)):
    user = _load_user(db, user_id)

    if body.email:
        email = body.email.strip().lower()
        taken = db.query(User).filter(User.email == email, User.id != user_id).first()
        if taken:
            raise HTTPException(status_code=400, detail="Email already exists")
        user.email = email
    if body.name:
        user.name = body.name.strip()

    try:
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise
    return {"status": "success", "message": "Profile updated successfully", "user": user.to_dict()}


@router.put("/change-password")
async def change_password(body: PasswordChange, user_id: int = Depends(get_current_user),
                          db: Session = Depends(get_db)):
    if not body.current_password or not body.new_password:
        raise HTTPException(status_code=400, detail="Current password and new password are required")
    if len(body.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"New password must be at least {MIN_PASSWORD_LENGTH} characters",
        )

    user = _load_user(db, user_id)
    if not verify_password(body.current_password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    try:
        user.hashed_password = hash_password(body.new_password)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"status": "success", "message": "Password changed successfully"}


@router.get("/stats")
async def user_stats(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return {
        "total_habits": db.query(Habit).filter_by(user_id=user_id).count(),
        "total_workouts": db.query(Workout).filter_by(user_id=user_id).count(),
        "longest_streak": HabitService.longest_streak(db, user_id),
    }
