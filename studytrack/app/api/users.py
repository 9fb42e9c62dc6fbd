"""User management endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from studytrack.app.db.session import get_db
from studytrack.app.dependencies.auth import get_current_caller
from studytrack.app.schemas.user import UserCreate, UserRead, UserUpdate
from studytrack.app.services import user_service
from studytrack.app.services.authorization import Caller

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=list[UserRead])
async def list_users(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return user_service.list_users(db, caller=caller)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return user_service.get_user(db, caller=caller, user_id=user_id)


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(user_in: UserCreate, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return user_service.create_user(
        db,
        caller=caller,
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
        role=user_in.role,
    )


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return user_service.update_user(
        db,
        caller=caller,
        user_id=user_id,
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
        role=user_in.role,
    )


@router.delete("/{user_id}")
async def delete_user(user_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    user_service.delete_user(db, caller=caller, user_id=user_id)
    return {"status": "deleted", "id": user_id}
