# app/routers/auth.py
import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core import config
from app.core.database import get_db
from app.core.security import create_access_token, get_current_user, hash_password, verify_password
from app.models.user import User
from app.schemas.auth import AuthResponse, LoginRequest, MeResponse, RegisterRequest, UserResponse
from app.schemas.common import Envelope

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", response_model=Envelope[AuthResponse], status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create an account and return it with a bearer token.

    - **email** must be unique.
    - **password** must be at least MIN_PASSWORD_LENGTH characters.
    """
    if len(payload.password) < config.MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters long",
        )

    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="User already exists with this email")

    user = User(
        id=str(uuid4()),
        email=email,
        password_hash=hash_password(payload.password),
        name=(payload.name or "").strip() or None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)

    return Envelope(
        message="User registered successfully",
        data=AuthResponse(user=UserResponse.model_validate(user), token=create_access_token(user.id)),
    )

@router.post("/login", response_model=Envelope[AuthResponse])
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email.lower()).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return Envelope(
        message="Login successful",
        data=AuthResponse(user=UserResponse.model_validate(user), token=create_access_token(user.id)),
    )

@router.get("/me", response_model=Envelope[MeResponse])
def me(current_user: User = Depends(get_current_user)):
    return Envelope(data=MeResponse(user=UserResponse.model_validate(current_user)))
