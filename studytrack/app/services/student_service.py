"""Student store and the parent <-> child links.

Parent links live in one table, so ``reassign_parents`` is the only place
that changes who a student's parents are and both directions stay in step.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from studytrack.app.core.errors import NotFoundError, ValidationError
from studytrack.app.core.roles import Role
from studytrack.app.models.parent_link import ParentStudentLink
from studytrack.app.models.student import Student
from studytrack.app.models.user import User
from studytrack.app.services.authorization import (
    Caller,
    can_access_student,
    can_manage_students,
    can_view_all_students,
    ensure,
)
from studytrack.app.services.common import clean_name, commit

logger = logging.getLogger(__name__)

STUDENT_NAME_MAX = 50


def _require_manager(caller: Caller) -> None:
    ensure(can_manage_students(caller), "Access denied: requires admin privileges")


def _get_student(db: Session, student_id: int) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise NotFoundError("Student")
    return student


def _clean_grade(grade: Optional[str]) -> Optional[str]:
    if grade is None:
        return None
    return grade.strip() or None


def _load_parents(db: Session, parent_ids: Iterable[int]) -> List[User]:
    wanted = list(dict.fromkeys(parent_ids))
    if not wanted:
        return []
    parents = db.query(User).filter(User.id.in_(wanted)).all()
    found = {parent.id: parent for parent in parents}
    for parent_id in wanted:
        parent = found.get(parent_id)
        if parent is None:
            raise NotFoundError("Parent user")
        if parent.role != Role.USER.value:
            raise ValidationError(f"User {parent_id} is not a parent account")
    return [found[parent_id] for parent_id in wanted]


def _set_parents(db: Session, student: Student, parents: List[User]) -> None:
    wanted = {parent.id for parent in parents}
    current = {link.parent_user_id for link in student.parent_links}
    for link in student.parent_links:
        if link.parent_user_id not in wanted:
            # links hang off both User and Student, so delete them outright
            db.delete(link)
    for parent in parents:
        if parent.id not in current:
            student.parent_links.append(ParentStudentLink(parent_user_id=parent.id))


def list_visible_students(db: Session, *, caller: Caller) -> List[Student]:
    query = db.query(Student)
    if not can_view_all_students(caller):
        query = query.join(ParentStudentLink, ParentStudentLink.student_id == Student.id).filter(
            ParentStudentLink.parent_user_id == caller.id
        )
    return query.order_by(Student.id.asc()).all()


def get_student(db: Session, *, caller: Caller, student_id: int) -> Student:
    student = _get_student(db, student_id)
    ensure(can_access_student(caller, student.parent_ids), "Access denied to this student")
    return student


def create_student(
    db: Session,
    *,
    caller: Caller,
    name: str,
    grade: Optional[str] = None,
    parent_ids: Iterable[int] = (),
) -> Student:
    _require_manager(caller)
    student = Student(name=clean_name(name, "Student", STUDENT_NAME_MAX), grade=_clean_grade(grade))
    _set_parents(db, student, _load_parents(db, parent_ids))
    db.add(student)
    commit(db, failure_message="Error creating student")
    db.refresh(student)
    logger.info("Student %s created by user %s with parents %s", student.id, caller.id, student.parent_ids)
    return student


def update_student(
    db: Session,
    *,
    caller: Caller,
    student_id: int,
    name: Optional[str] = None,
    grade: Optional[str] = None,
    parent_ids: Optional[Iterable[int]] = None,
) -> Student:
    _require_manager(caller)
    student = _get_student(db, student_id)
    if name is not None:
        student.name = clean_name(name, "Student", STUDENT_NAME_MAX)
    if grade is not None:
        student.grade = _clean_grade(grade)
    if parent_ids is not None:
        _set_parents(db, student, _load_parents(db, parent_ids))
    commit(db, failure_message="Error updating student")
    db.refresh(student)
    logger.info("Student %s updated by user %s", student.id, caller.id)
    return student


def reassign_parents(db: Session, *, caller: Caller, student_id: int, parent_ids: Iterable[int]) -> Student:
    """Replace the student's parent set in a single transaction."""
    _require_manager(caller)
    student = _get_student(db, student_id)
    before = student.parent_ids
    _set_parents(db, student, _load_parents(db, parent_ids))
    commit(db, failure_message="Error reassigning parents")
    db.refresh(student)
    logger.info(
        "Student %s parents changed from %s to %s by user %s",
        student.id,
        before,
        student.parent_ids,
        caller.id,
    )
    return student


def delete_student(db: Session, *, caller: Caller, student_id: int) -> None:
    _require_manager(caller)
    student = _get_student(db, student_id)
    progress_count = len(student.progress_entries)
    db.delete(student)
    commit(db, failure_message="Error deleting student")
    logger.info("Student %s deleted by user %s with %d progress rows", student_id, caller.id, progress_count)
