"""Curriculum store: subjects, their units and the units' topics.

The tree is owned top-down. Every unit- or topic-scoped call re-checks the
child's back-reference against the ids it was given, so a unit id from one
subject can never be used through another subject's path.

Deletes cascade through the ORM relationships (subject -> units -> topics ->
progress rows) and are committed as one transaction: on failure the whole
cascade is rolled back.
"""

import logging
from typing import List

from sqlalchemy.orm import Session, selectinload

from studytrack.app.core.errors import ConflictError, NotFoundError
from studytrack.app.models.subject import Subject
from studytrack.app.models.topic import Topic
from studytrack.app.models.unit import Unit
from studytrack.app.services.authorization import Caller, can_manage_curriculum, can_view_curriculum, ensure
from studytrack.app.services.common import clean_name, commit

logger = logging.getLogger(__name__)

SUBJECT_NAME_MAX = 50
UNIT_NAME_MAX = 100
TOPIC_NAME_MAX = 100

DUPLICATE_TOPIC_MESSAGE = "A topic with this name already exists in this unit"


def _require_manager(caller: Caller) -> None:
    ensure(can_manage_curriculum(caller), "Access denied: requires admin privileges")


def _get_subject(db: Session, subject_id: int) -> Subject:
    subject = db.query(Subject).filter(Subject.id == subject_id).first()
    if not subject:
        raise NotFoundError("Subject")
    return subject


def _get_owned_unit(db: Session, subject_id: int, unit_id: int) -> Unit:
    unit = db.query(Unit).filter(Unit.id == unit_id).first()
    if not unit or unit.subject_id != subject_id:
        raise NotFoundError("Unit")
    return unit


def _get_owned_topic(db: Session, subject_id: int, unit_id: int, topic_id: int) -> Topic:
    unit = _get_owned_unit(db, subject_id, unit_id)
    topic = db.query(Topic).filter(Topic.id == topic_id).first()
    if not topic or topic.unit_id != unit.id:
        raise NotFoundError("Topic")
    return topic


def _topic_name_taken(db: Session, unit_id: int, name: str, exclude_topic_id: int | None = None) -> bool:
    query = db.query(Topic.id).filter(Topic.unit_id == unit_id, Topic.name == name)
    if exclude_topic_id is not None:
        query = query.filter(Topic.id != exclude_topic_id)
    return query.first() is not None


def list_subjects(db: Session, *, caller: Caller) -> List[Subject]:
    ensure(can_view_curriculum(caller))
    return (
        db.query(Subject)
        .options(selectinload(Subject.units).selectinload(Unit.topics))
        .order_by(Subject.id.asc())
        .all()
    )


def get_subject(db: Session, *, caller: Caller, subject_id: int) -> Subject:
    ensure(can_view_curriculum(caller))
    return _get_subject(db, subject_id)


def create_subject(db: Session, *, caller: Caller, name: str) -> Subject:
    _require_manager(caller)
    subject = Subject(name=clean_name(name, "Subject", SUBJECT_NAME_MAX))
    db.add(subject)
    commit(db, failure_message="Error creating subject")
    db.refresh(subject)
    logger.info("Subject %s created by user %s", subject.id, caller.id)
    return subject


def update_subject(db: Session, *, caller: Caller, subject_id: int, name: str) -> Subject:
    _require_manager(caller)
    cleaned = clean_name(name, "Subject", SUBJECT_NAME_MAX)
    subject = _get_subject(db, subject_id)
    subject.name = cleaned
    commit(db, failure_message="Error updating subject")
    db.refresh(subject)
    logger.info("Subject %s renamed by user %s", subject.id, caller.id)
    return subject


def delete_subject(db: Session, *, caller: Caller, subject_id: int) -> None:
    _require_manager(caller)
    subject = _get_subject(db, subject_id)
    unit_count = len(subject.units)
    topic_count = sum(len(unit.topics) for unit in subject.units)
    db.delete(subject)
    commit(db, failure_message="Error deleting subject")
    logger.info(
        "Subject %s deleted by user %s with %d units and %d topics",
        subject_id,
        caller.id,
        unit_count,
        topic_count,
    )


def add_unit(db: Session, *, caller: Caller, subject_id: int, name: str) -> Unit:
    _require_manager(caller)
    cleaned = clean_name(name, "Unit", UNIT_NAME_MAX)
    subject = _get_subject(db, subject_id)
    unit = Unit(name=cleaned)
    subject.units.append(unit)
    commit(db, failure_message="Error creating unit")
    db.refresh(unit)
    logger.info("Unit %s added to subject %s by user %s", unit.id, subject.id, caller.id)
    return unit


def update_unit(db: Session, *, caller: Caller, subject_id: int, unit_id: int, name: str) -> Unit:
    _require_manager(caller)
    cleaned = clean_name(name, "Unit", UNIT_NAME_MAX)
    unit = _get_owned_unit(db, subject_id, unit_id)
    unit.name = cleaned
    commit(db, failure_message="Error updating unit")
    db.refresh(unit)
    logger.info("Unit %s renamed by user %s", unit.id, caller.id)
    return unit


def delete_unit(db: Session, *, caller: Caller, subject_id: int, unit_id: int) -> None:
    _require_manager(caller)
    _get_subject(db, subject_id)
    unit = _get_owned_unit(db, subject_id, unit_id)
    topic_count = len(unit.topics)
    db.delete(unit)
    commit(db, failure_message="Error deleting unit")
    logger.info("Unit %s deleted by user %s with %d topics", unit_id, caller.id, topic_count)


def add_topic(db: Session, *, caller: Caller, subject_id: int, unit_id: int, name: str) -> Topic:
    _require_manager(caller)
    cleaned = clean_name(name, "Topic", TOPIC_NAME_MAX)
    _get_subject(db, subject_id)
    unit = _get_owned_unit(db, subject_id, unit_id)
    if _topic_name_taken(db, unit.id, cleaned):
        raise ConflictError(DUPLICATE_TOPIC_MESSAGE)
    topic = Topic(name=cleaned)
    unit.topics.append(topic)
    commit(db, conflict_message=DUPLICATE_TOPIC_MESSAGE, failure_message="Error creating topic")
    db.refresh(topic)
    logger.info("Topic %s added to unit %s by user %s", topic.id, unit.id, caller.id)
    return topic


def update_topic(
    db: Session, *, caller: Caller, subject_id: int, unit_id: int, topic_id: int, name: str
) -> Topic:
    _require_manager(caller)
    cleaned = clean_name(name, "Topic", TOPIC_NAME_MAX)
    topic = _get_owned_topic(db, subject_id, unit_id, topic_id)
    if _topic_name_taken(db, topic.unit_id, cleaned, exclude_topic_id=topic.id):
        raise ConflictError(DUPLICATE_TOPIC_MESSAGE)
    topic.name = cleaned
    commit(db, conflict_message=DUPLICATE_TOPIC_MESSAGE, failure_message="Error updating topic")
    db.refresh(topic)
    logger.info("Topic %s renamed by user %s", topic.id, caller.id)
    return topic


def delete_topic(db: Session, *, caller: Caller, subject_id: int, unit_id: int, topic_id: int) -> None:
    _require_manager(caller)
    topic = _get_owned_topic(db, subject_id, unit_id, topic_id)
    progress_count = len(topic.progress_entries)
    db.delete(topic)
    commit(db, failure_message="Error deleting topic")
    logger.info("Topic %s deleted by user %s with %d progress rows", topic_id, caller.id, progress_count)
