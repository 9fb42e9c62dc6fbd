"""Progress store: per-student, per-topic mastery status.

``upsert_progress`` is the only write path. It looks the (student, topic) row
up and either updates it in place or inserts it, so callers never create a
second row for the same pair; the unique constraint on the table is only the
backstop for two requests racing on the same pair.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from studytrack.app.core.errors import NotFoundError, ValidationError
from studytrack.app.core.settings import get_settings
from studytrack.app.core.time import utc_now
from studytrack.app.models.parent_link import ParentStudentLink
from studytrack.app.models.progress import Progress, ProgressStatus
from studytrack.app.models.student import Student
from studytrack.app.models.subject import Subject
from studytrack.app.models.topic import Topic
from studytrack.app.models.unit import Unit
from studytrack.app.schemas.progress import StudentProgressSummary, SubjectProgress
from studytrack.app.services.authorization import Caller, can_view_progress, can_write_progress, ensure
from studytrack.app.services.common import commit

logger = logging.getLogger(__name__)

VALID_STATUSES = [status.value for status in ProgressStatus]


def parse_status(value: Optional[str]) -> ProgressStatus:
    try:
        return ProgressStatus(value)
    except ValueError:
        raise ValidationError(f"Status must be one of: {', '.join(VALID_STATUSES)}") from None


def _get_visible_student(db: Session, caller: Caller, student_id: int) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise NotFoundError("Student")
    ensure(can_view_progress(caller, student.parent_ids), "Access denied to this student's progress")
    return student


def _empty_counts() -> dict[str, int]:
    return {status: 0 for status in VALID_STATUSES}


def upsert_progress(
    db: Session,
    *,
    caller: Caller,
    student_id: int,
    topic_id: int,
    status: str,
    notes: Optional[str] = None,
) -> Progress:
    ensure(can_write_progress(caller), "Access denied: requires admin privileges")
    parsed = parse_status(status)
    if db.query(Student.id).filter(Student.id == student_id).first() is None:
        raise NotFoundError("Student")
    if db.query(Topic.id).filter(Topic.id == topic_id).first() is None:
        raise NotFoundError("Topic")

    cleaned_notes = notes.strip() if notes is not None else None
    entry = (
        db.query(Progress)
        .filter(Progress.student_id == student_id, Progress.topic_id == topic_id)
        .first()
    )
    created = entry is None
    if created:
        entry = Progress(student_id=student_id, topic_id=topic_id)
        db.add(entry)
    entry.status = parsed.value
    if notes is not None:
        entry.notes = cleaned_notes or None
    entry.updated_by_id = caller.id
    if not created:
        # onupdate does not fire when no other column changed
        entry.updated_at = utc_now()
    commit(
        db,
        conflict_message="Progress for this student and topic was written concurrently",
        failure_message="Error saving progress",
    )
    db.refresh(entry)
    logger.info(
        "Progress %s for student %s topic %s set to %s by user %s",
        "created" if created else "updated",
        student_id,
        topic_id,
        parsed.value,
        caller.id,
    )
    return entry


def get_progress_for_student(db: Session, *, caller: Caller, student_id: int) -> List[Progress]:
    student = _get_visible_student(db, caller, student_id)
    return (
        db.query(Progress)
        .filter(Progress.student_id == student.id)
        .order_by(Progress.topic_id.asc())
        .all()
    )


def get_progress_for_student_and_subject(
    db: Session, *, caller: Caller, student_id: int, subject_id: int
) -> List[Progress]:
    """Rows for topics currently reachable from the subject's tree."""
    student = _get_visible_student(db, caller, student_id)
    if db.query(Subject.id).filter(Subject.id == subject_id).first() is None:
        raise NotFoundError("Subject")
    return (
        db.query(Progress)
        .join(Topic, Topic.id == Progress.topic_id)
        .join(Unit, Unit.id == Topic.unit_id)
        .filter(Progress.student_id == student.id, Unit.subject_id == subject_id)
        .order_by(Unit.id.asc(), Topic.id.asc())
        .all()
    )


def get_recent_progress(db: Session, *, caller: Caller, limit: Optional[int] = None) -> List[Progress]:
    if limit is None:
        limit = get_settings().recent_progress_limit
    query = db.query(Progress)
    if not can_write_progress(caller):
        child_ids = select(ParentStudentLink.student_id).where(ParentStudentLink.parent_user_id == caller.id)
        query = query.filter(Progress.student_id.in_(child_ids))
    return query.order_by(Progress.updated_at.desc(), Progress.id.desc()).limit(limit).all()


def get_progress_summary(db: Session, *, caller: Caller, student_id: int) -> StudentProgressSummary:
    student = _get_visible_student(db, caller, student_id)
    statuses = {
        entry.topic_id: entry.status
        for entry in db.query(Progress).filter(Progress.student_id == student.id).all()
    }
    subjects = (
        db.query(Subject)
        .options(selectinload(Subject.units).selectinload(Unit.topics))
        .order_by(Subject.id.asc())
        .all()
    )

    overall = _empty_counts()
    subjects_progress: list[SubjectProgress] = []
    total_topics = 0
    for subject in subjects:
        counts = _empty_counts()
        topic_count = 0
        for unit in subject.units:
            for topic in unit.topics:
                topic_count += 1
                counts[statuses.get(topic.id, ProgressStatus.NOT_STUDIED.value)] += 1
        for status, count in counts.items():
            overall[status] += count
        total_topics += topic_count
        subjects_progress.append(
            SubjectProgress(
                subject_id=subject.id,
                subject=subject.name,
                total_topics=topic_count,
                status_counts=counts,
            )
        )

    return StudentProgressSummary(
        student_id=student.id,
        total_topics=total_topics,
        status_counts=overall,
        subjects=subjects_progress,
    )
