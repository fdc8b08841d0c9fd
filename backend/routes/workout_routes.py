from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from auth import get_current_user
from config import WORKOUT_ANALYTICS_DAYS
from database import get_db
from models.workout import MUSCLE_GROUPS, EQUIPMENT, WORKOUT_TYPES, WEIGHT_UNITS
from services.workout_service import WorkoutService, WorkoutStateError, ActiveWorkoutExists

router = APIRouter(prefix="/api/v1/workouts", tags=["Workouts"])

MuscleGroup = Literal[MUSCLE_GROUPS]
Equipment = Literal[EQUIPMENT]
WorkoutType = Literal[WORKOUT_TYPES]
WeightUnit = Literal[WEIGHT_UNITS]
OptionalDate = Optional[date]


class SetIn(BaseModel):
    reps: int = Field(ge=0)
    weight: float = Field(ge=0)
    rest_time: Optional[int] = Field(default=None, ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    completed: Optional[bool] = True


class ExerciseIn(BaseModel):
    name: str = Field(min_length=1)
    muscle_group: Optional[MuscleGroup] = None
    equipment: Optional[Equipment] = None
    sets: List[SetIn] = []


class WorkoutStart(BaseModel):
    date: OptionalDate = None
    workout_type: Optional[WorkoutType] = None
    weight_unit: Optional[WeightUnit] = "kg"


class WorkoutCreate(BaseModel):
    date: OptionalDate = None
    exercises: Optional[List[ExerciseIn]] = None
    notes: Optional[str] = ""
    workout_type: Optional[WorkoutType] = None
    weight_unit: Optional[WeightUnit] = "kg"
    duration: Optional[int] = Field(default=0, ge=0)
    calories_burned: Optional[float] = Field(default=None, ge=0)


class WorkoutUpdate(BaseModel):
    date: OptionalDate = None
    exercises: Optional[List[ExerciseIn]] = None
    notes: Optional[str] = None
    workout_type: Optional[WorkoutType] = None
    weight_unit: Optional[WeightUnit] = None
    duration: Optional[int] = Field(default=None, ge=0)
    calories_burned: Optional[float] = Field(default=None, ge=0)


class SetCreate(BaseModel):
    reps: Optional[int] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)
    rest_time: Optional[int] = Field(default=None, ge=0)
    rpe: Optional[float] = Field(default=None, ge=1, le=10)
    completed: Optional[bool] = None


def _not_found():
    return HTTPException(status_code=404, detail="Workout not found")


def _payload(w):
    return {"status": "success", "data": w.to_dict()}


# --- Collection & fixed paths (must come before /{workout_id}) -----------

@router.get("")
async def list_workouts(
    search: Optional[str] = None,
    muscle_group: Optional[str] = None,
    workout_type: Optional[str] = None,
    sort_by: Optional[Literal["date", "volume", "duration"]] = None,
    start_date: OptionalDate = None,
    end_date: OptionalDate = None,
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    workouts = WorkoutService.get_all(db, user_id, {
        "search": search,
        "muscle_group": muscle_group,
        "workout_type": workout_type,
        "sort_by": sort_by,
        "start_date": start_date,
        "end_date": end_date,
    })
    return {"workouts": [w.to_dict() for w in workouts]}


@router.post("/start", status_code=201)
async def start_workout(body: Optional[WorkoutStart] = None, user_id: int = Depends(get_current_user),
                        db: Session = Depends(get_db)):
    body = body or WorkoutStart()
    try:
        w = WorkoutService.start(db, user_id, body.model_dump())
    except ActiveWorkoutExists as e:
        return JSONResponse(status_code=400, content={"detail": str(e), "active_workout_id": e.workout_id})
    return {"status": "success", "message": "Workout started successfully", "data": w.to_dict()}


@router.get("/active/current")
async def active_workout(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    w = WorkoutService.get_active(db, user_id)
    if not w:
        return {"workout": None}
    return {"workout": {**w.to_dict(), "elapsed_duration": WorkoutService.elapsed_duration(w)}}


@router.get("/stats/summary")
async def workout_summary(start_date: OptionalDate = None, end_date: OptionalDate = None,
                          user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    return WorkoutService.stats_summary(db, user_id, start_date, end_date)


@router.get("/analytics/progression")
async def workout_progression(
    exercise_name: Optional[str] = None,
    muscle_group: Optional[str] = None,
    days: int = Query(default=WORKOUT_ANALYTICS_DAYS, ge=1, le=3650),
    user_id: int = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return WorkoutService.progression(db, user_id, exercise_name, muscle_group, days)


@router.get("/exercises/library")
async def exercise_library(search: Optional[str] = None, muscle_group: Optional[str] = None,
                           equipment: Optional[str] = None, user_id: int = Depends(get_current_user),
                           db: Session = Depends(get_db)):
    entries = WorkoutService.search_library(db, search, muscle_group, equipment)
    return {"exercises": [e.to_dict() for e in entries]}


@router.get("/prs")
async def personal_records(exercise_name: Optional[str] = None, user_id: int = Depends(get_current_user),
                           db: Session = Depends(get_db)):
    return WorkoutService.personal_records(db, user_id, exercise_name)


@router.post("", status_code=201)
async def create_workout(body: WorkoutCreate, user_id: int = Depends(get_current_user),
                         db: Session = Depends(get_db)):
    try:
        w = WorkoutService.create(db, user_id, body.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "message": "Workout created successfully", "data": w.to_dict()}


# --- Single workout -------------------------------------------------------

@router.get("/{workout_id}")
async def get_workout(workout_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    w = WorkoutService.get(db, user_id, workout_id)
    if not w:
        raise _not_found()
    return _payload(w)


@router.post("/{workout_id}/pause")
async def pause_workout(workout_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        w = WorkoutService.pause(db, user_id, workout_id)
    except WorkoutStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not w:
        raise _not_found()
    return _payload(w)


@router.post("/{workout_id}/resume")
async def resume_workout(workout_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        w = WorkoutService.resume(db, user_id, workout_id)
    except WorkoutStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not w:
        raise _not_found()
    return _payload(w)


@router.post("/{workout_id}/end")
async def end_workout(workout_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        w = WorkoutService.end(db, user_id, workout_id)
    except WorkoutStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not w:
        raise _not_found()
    return _payload(w)


@router.post("/{workout_id}/exercises")
async def add_exercise(workout_id: int, body: ExerciseIn, user_id: int = Depends(get_current_user),
                       db: Session = Depends(get_db)):
    try:
        w = WorkoutService.add_exercise(db, user_id, workout_id, body.model_dump(exclude={"sets"}))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not w:
        raise _not_found()
    return _payload(w)


@router.post("/{workout_id}/exercises/{exercise_index}/sets")
async def add_set(workout_id: int, exercise_index: int, body: SetCreate,
                  user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        w = WorkoutService.add_set(db, user_id, workout_id, exercise_index, body.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not w:
        raise _not_found()
    return _payload(w)


@router.put("/{workout_id}")
async def update_workout(workout_id: int, body: WorkoutUpdate, user_id: int = Depends(get_current_user),
                         db: Session = Depends(get_db)):
    try:
        w = WorkoutService.update(db, user_id, workout_id, body.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not w:
        raise _not_found()
    return {"status": "success", "message": "Workout updated successfully", "data": w.to_dict()}


@router.delete("/{workout_id}")
async def delete_workout(workout_id: int, user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    if not WorkoutService.delete(db, user_id, workout_id):
        raise _not_found()
    return {"status": "success", "message": "Workout deleted successfully"}
