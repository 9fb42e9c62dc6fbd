"""Curriculum endpoints: subjects, units and topics."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from studytrack.app.db.session import get_db
from studytrack.app.dependencies.auth import get_current_caller
from studytrack.app.schemas.curriculum import NameIn, SubjectRead, TopicRead, UnitRead
from studytrack.app.services import curriculum_service
from studytrack.app.services.authorization import Caller

router = APIRouter(prefix="/subjects", tags=["subjects"])


@router.get("/", response_model=list[SubjectRead])
async def list_subjects(db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return curriculum_service.list_subjects(db, caller=caller)


@router.get("/{subject_id}", response_model=SubjectRead)
async def get_subject(subject_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return curriculum_service.get_subject(db, caller=caller, subject_id=subject_id)


@router.post("/", response_model=SubjectRead, status_code=status.HTTP_201_CREATED)
async def create_subject(body: NameIn, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    return curriculum_service.create_subject(db, caller=caller, name=body.name)


@router.put("/{subject_id}", response_model=SubjectRead)
async def update_subject(
    subject_id: int, body: NameIn, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)
):
    return curriculum_service.update_subject(db, caller=caller, subject_id=subject_id, name=body.name)


@router.delete("/{subject_id}")
async def delete_subject(subject_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)):
    curriculum_service.delete_subject(db, caller=caller, subject_id=subject_id)
    return {"status": "deleted", "id": subject_id}


@router.post("/{subject_id}/units", response_model=UnitRead, status_code=status.HTTP_201_CREATED)
async def add_unit(
    subject_id: int, body: NameIn, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)
):
    return curriculum_service.add_unit(db, caller=caller, subject_id=subject_id, name=body.name)


@router.put("/{subject_id}/units/{unit_id}", response_model=UnitRead)
async def update_unit(
    subject_id: int,
    unit_id: int,
    body: NameIn,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return curriculum_service.update_unit(db, caller=caller, subject_id=subject_id, unit_id=unit_id, name=body.name)


@router.delete("/{subject_id}/units/{unit_id}")
async def delete_unit(
    subject_id: int, unit_id: int, db: Session = Depends(get_db), caller: Caller = Depends(get_current_caller)
):
    curriculum_service.delete_unit(db, caller=caller, subject_id=subject_id, unit_id=unit_id)
    return {"status": "deleted", "id": unit_id}


@router.post("/{subject_id}/units/{unit_id}/topics", response_model=TopicRead, status_code=status.HTTP_201_CREATED)
async def add_topic(
    subject_id: int,
    unit_id: int,
    body: NameIn,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return curriculum_service.add_topic(db, caller=caller, subject_id=subject_id, unit_id=unit_id, name=body.name)


@router.put("/{subject_id}/units/{unit_id}/topics/{topic_id}", response_model=TopicRead)
async def update_topic(
    subject_id: int,
    unit_id: int,
    topic_id: int,
    body: NameIn,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    return curriculum_service.update_topic(
        db, caller=caller, subject_id=subject_id, unit_id=unit_id, topic_id=topic_id, name=body.name
    )


@router.delete("/{subject_id}/units/{unit_id}/topics/{topic_id}")
async def delete_topic(
    subject_id: int,
    unit_id: int,
    topic_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
):
    curriculum_service.delete_topic(db, caller=caller, subject_id=subject_id, unit_id=unit_id, topic_id=topic_id)
    return {"status": "deleted", "id": topic_id}
