"""Identity endpoints: setup, registration, login, refresh, logout."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from studytrack.app.db.session import get_db
from studytrack.app.dependencies.auth import get_current_caller
from studytrack.app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    SetupRequest,
    TokenPair,
)
from studytrack.app.schemas.user import UserRead
from studytrack.app.services import auth_service
from studytrack.app.services.authorization import Caller

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/setup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def setup(payload: SetupRequest, db: Session = Depends(get_db)):
    return auth_service.setup(db, name=payload.name, email=payload.email, password=payload.password)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    return auth_service.register(db, name=payload.name, email=payload.email, password=payload.password)


@router.post("/login", response_model=AuthResponse)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(db, email=credentials.email, password=credentials.password)


@router.post("/refresh", response_model=TokenPair)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)):
    return auth_service.refresh(db, refresh_token=payload.refresh_token)


@router.post("/logout")
def logout(caller: Caller = Depends(get_current_caller)):
    auth_service.logout(caller=caller)
    return {"status": "ok", "message": "Successfully logged out"}


@router.get("/me", response_model=UserRead)
def read_me(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return auth_service.get_self(db, caller=caller)
