"""
Auth routes — register/login with email + password, bearer JWT for everything else.
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
import logging

from auth import hash_password, verify_password, create_token, get_current_user
from config import MIN_PASSWORD_LENGTH
from database import get_db
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class LoginRequest(BaseModel):
    email: str
    password: str


def _token_for(user: User) -> str:
    return create_token({"user_id": user.id, "email": user.email})


# ── Routes ────────────────────────────────────────────────────────
@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return a token for it."""
    email = body.email.strip().lower()
    if db.query(User).filter_by(email=email).first():
        raise HTTPException(status_code=400, detail="User already exists")

    try:
        user = User(name=body.name.strip(), email=email, hashed_password=hash_password(body.password))
        db.add(user)
        db.commit()
        db.refresh(user)
    except Exception:
        db.rollback()
        raise

    logger.info(f"Registered user {user.id}")
    return {
        "status": "success",
        "data": {"token": _token_for(user), "user": user.to_dict()},
    }


@router.post("/login")
async def login(body: LoginRequest, db: Session = Depends(get_db)):
    """Authenticate with email + password."""
    user = db.query(User).filter_by(email=body.email.strip().lower()).first()
    if not user or not verify_password(body.password, user.hashed_password):
        logger.info(f"Failed login for {body.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return {
        "status": "success",
        "data": {"token": _token_for(user), "user": user.to_dict()},
    }


@router.get("/me")
async def me(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Return the current user's profile from the token."""
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"status": "success", "data": user.to_dict()}
