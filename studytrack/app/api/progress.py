"""Progress endpoints: upsert and role-scoped reads."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from studytrack.app.db.session import get_db
from studytrack.app.dependencies.auth import get_current_caller
from studytrack.app.schemas.progress import ProgressRead, ProgressUpsert, StudentProgressSummary
from studytrack.app.services import progress_service
from studytrack.app.services.authorization import Caller

router = APIRouter(prefix="/progress", tags=["progress"])


@router.post("/", response_model=ProgressRead)
async def upsert_progress(
    progress_in: ProgressUpsert, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)
):
    return progress_service.upsert_progress(
        db,
        caller=caller,
        student_id=progress_in.student_id,
        topic_id=progress_in.topic_id,
        status=progress_in.status,
        notes=progress_in.notes,
    )


@router.get("/recent", response_model=list[ProgressRead])
async def recent_progress(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return progress_service.get_recent_progress(db, caller=caller)


@router.get("/student/{student_id}", response_model=list[ProgressRead])
async def student_progress(student_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return progress_service.get_progress_for_student(db, caller=caller, student_id=student_id)


@router.get("/student/{student_id}/summary", response_model=StudentProgressSummary)
async def student_progress_summary(
    student_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)
):
    return progress_service.get_progress_summary(db, caller=caller, student_id=student_id)


@router.get("/student/{student_id}/subject/{subject_id}", response_model=list[ProgressRead])
async def student_subject_progress(
    student_id: int,
    subject_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return progress_service.get_progress_for_student_and_subject(
        db, caller=caller, student_id=student_id, subject_id=subject_id
    )
