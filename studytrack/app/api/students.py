"""Student endpoints for StudyTrack."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from studytrack.app.db.session import get_db
from studytrack.app.dependencies.auth import get_current_caller
from studytrack.app.schemas.student import StudentCreate, StudentParentsUpdate, StudentRead, StudentUpdate
from studytrack.app.services import student_service
from studytrack.app.services.authorization import Caller

router = APIRouter(prefix="/students", tags=["students"])


@router.get("/", response_model=list[StudentRead])
async def list_students(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return student_service.list_visible_students(db, caller=caller)


@router.get("/{student_id}", response_model=StudentRead)
async def get_student(student_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return student_service.get_student(db, caller=caller, student_id=student_id)


@router.post("/", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
async def create_student(
    student_in: StudentCreate, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)
):
    return student_service.create_student(
        db,
        caller=caller,
        name=student_in.name,
        grade=student_in.grade,
        parent_ids=student_in.parent_ids,
    )


@router.put("/{student_id}", response_model=StudentRead)
async def update_student(
    student_id: int,
    student_in: StudentUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return student_service.update_student(
        db,
        caller=caller,
        student_id=student_id,
        name=student_in.name,
        grade=student_in.grade,
        parent_ids=student_in.parent_ids,
    )


@router.put("/{student_id}/parents", response_model=StudentRead)
async def reassign_parents(
    student_id: int,
    parents_in: StudentParentsUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return student_service.reassign_parents(db, caller=caller, student_id=student_id, parent_ids=parents_in.parent_ids)


@router.delete("/{student_id}")
async def delete_student(student_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    student_service.delete_student(db, caller=caller, student_id=student_id)
    return {"status": "deleted", "id": student_id}
