import logging

import pytest
from sqlalchemy.exc import SQLAlchemyError

from studytrack.app.core.errors import ConflictError, ForbiddenError, NotFoundError, ServerError, ValidationError
from studytrack.app.core.roles import Role
from studytrack.app.db.base import Base
from studytrack.app.db.session import SessionLocal, engine
from studytrack.app.models.progress import Progress
from studytrack.app.models.student import Student
from studytrack.app.models.subject import Subject
from studytrack.app.models.topic import Topic
from studytrack.app.models.unit import Unit
from studytrack.app.models.user import User
from studytrack.app.services import curriculum_service
from studytrack.app.services.authorization import Caller


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def teacher(db):
    user = User(name="Teacher", email="teacher@example.com", hashed_password="x", role=Role.ADMIN.value)
    db.add(user)
    db.commit()
    return Caller(id=user.id, role=Role.ADMIN)


@pytest.fixture
def parent(db):
    user = User(name="Parent", email="parent@example.com", hashed_password="x", role=Role.USER.value)
    db.add(user)
    db.commit()
    return Caller(id=user.id, role=Role.USER)


def build_tree(db, caller):
    subject = curriculum_service.create_subject(db, caller=caller, name="Biology")
    unit = curriculum_service.add_unit(db, caller=caller, subject_id=subject.id, name="Cell biology")
    topic = curriculum_service.add_topic(
        db, caller=caller, subject_id=subject.id, unit_id=unit.id, name="Cell structure"
    )
    return subject.id, unit.id, topic.id


def test_round_trip_subject_unit_topic(db, teacher):
    subject_id, _, _ = build_tree(db, teacher)
    db.expire_all()

    subject = curriculum_service.get_subject(db, caller=teacher, subject_id=subject_id)
    assert subject.name == "Biology"
    assert [unit.name for unit in subject.units] == ["Cell biology"]
    assert [topic.name for topic in subject.units[0].topics] == ["Cell structure"]


def test_names_are_trimmed(db, teacher):
    subject = curriculum_service.create_subject(db, caller=teacher, name="  Physics  ")
    assert subject.name == "Physics"


@pytest.mark.parametrize("name", ["", "   ", None])
def test_create_subject_rejects_blank_name(db, teacher, name):
    with pytest.raises(ValidationError):
        curriculum_service.create_subject(db, caller=teacher, name=name)
    assert db.query(Subject).count() == 0


def test_subject_name_length_limit(db, teacher):
    with pytest.raises(ValidationError):
        curriculum_service.create_subject(db, caller=teacher, name="x" * 51)


def test_subject_names_need_not_be_unique(db, teacher):
    curriculum_service.create_subject(db, caller=teacher, name="Biology")
    curriculum_service.create_subject(db, caller=teacher, name="Biology")
    assert db.query(Subject).count() == 2


def test_update_subject(db, teacher):
    subject_id, _, _ = build_tree(db, teacher)
    subject = curriculum_service.update_subject(db, caller=teacher, subject_id=subject_id, name="Life science")
    assert subject.name == "Life science"


def test_update_missing_subject_is_not_found(db, teacher):
    with pytest.raises(NotFoundError):
        curriculum_service.update_subject(db, caller=teacher, subject_id=999, name="Nope")


def test_units_and_topics_keep_insertion_order(db, teacher):
    subject = curriculum_service.create_subject(db, caller=teacher, name="Chemistry")
    for name in ["Atomic structure", "Bonding", "Rates"]:
        curriculum_service.add_unit(db, caller=teacher, subject_id=subject.id, name=name)
    db.expire_all()
    subject = curriculum_service.get_subject(db, caller=teacher, subject_id=subject.id)
    assert [unit.name for unit in subject.units] == ["Atomic structure", "Bonding", "Rates"]

    middle = subject.units[1]
    curriculum_service.delete_unit(db, caller=teacher, subject_id=subject.id, unit_id=middle.id)
    db.expire_all()
    subject = curriculum_service.get_subject(db, caller=teacher, subject_id=subject.id)
    assert [unit.name for unit in subject.units] == ["Atomic structure", "Rates"]


def test_duplicate_topic_name_in_unit_conflicts(db, teacher):
    subject_id, unit_id, _ = build_tree(db, teacher)
    with pytest.raises(ConflictError):
        curriculum_service.add_topic(db, caller=teacher, subject_id=subject_id, unit_id=unit_id, name="Cell structure")
    assert db.query(Topic).filter(Topic.unit_id == unit_id).count() == 1


def test_same_topic_name_allowed_in_other_unit(db, teacher):
    subject_id, _, _ = build_tree(db, teacher)
    other = curriculum_service.add_unit(db, caller=teacher, subject_id=subject_id, name="Organisation")
    topic = curriculum_service.add_topic(
        db, caller=teacher, subject_id=subject_id, unit_id=other.id, name="Cell structure"
    )
    assert topic.unit_id == other.id


def test_rename_topic_to_existing_name_conflicts(db, teacher):
    subject_id, unit_id, _ = build_tree(db, teacher)
    second = curriculum_service.add_topic(db, caller=teacher, subject_id=subject_id, unit_id=unit_id, name="Mitosis")
    with pytest.raises(ConflictError):
        curriculum_service.update_topic(
            db, caller=teacher, subject_id=subject_id, unit_id=unit_id, topic_id=second.id, name="Cell structure"
        )
    renamed = curriculum_service.update_topic(
        db, caller=teacher, subject_id=subject_id, unit_id=unit_id, topic_id=second.id, name="Mitosis"
    )
    assert renamed.name == "Mitosis"


def test_unit_must_belong_to_subject(db, teacher):
    subject_id, unit_id, topic_id = build_tree(db, teacher)
    other = curriculum_service.create_subject(db, caller=teacher, name="Chemistry")

    with pytest.raises(NotFoundError):
        curriculum_service.update_unit(db, caller=teacher, subject_id=other.id, unit_id=unit_id, name="Hijack")
    with pytest.raises(NotFoundError):
        curriculum_service.delete_unit(db, caller=teacher, subject_id=other.id, unit_id=unit_id)
    with pytest.raises(NotFoundError):
        curriculum_service.add_topic(db, caller=teacher, subject_id=other.id, unit_id=unit_id, name="Sneaky")
    with pytest.raises(NotFoundError):
        curriculum_service.delete_topic(db, caller=teacher, subject_id=other.id, unit_id=unit_id, topic_id=topic_id)
    assert db.query(Unit).filter(Unit.id == unit_id).count() == 1


def test_topic_must_belong_to_unit(db, teacher):
    subject_id, unit_id, topic_id = build_tree(db, teacher)
    other_unit = curriculum_service.add_unit(db, caller=teacher, subject_id=subject_id, name="Organisation")
    with pytest.raises(NotFoundError):
        curriculum_service.update_topic(
            db, caller=teacher, subject_id=subject_id, unit_id=other_unit.id, topic_id=topic_id, name="Moved"
        )


def test_delete_subject_cascades_whole_tree(db, teacher):
    subject_id, unit_id, topic_id = build_tree(db, teacher)
    curriculum_service.add_topic(db, caller=teacher, subject_id=subject_id, unit_id=unit_id, name="Cell division")
    curriculum_service.add_unit(db, caller=teacher, subject_id=subject_id, name="Organisation")

    curriculum_service.delete_subject(db, caller=teacher, subject_id=subject_id)

    assert db.query(Subject).count() == 0
    assert db.query(Unit).count() == 0
    assert db.query(Topic).count() == 0
    with pytest.raises(NotFoundError):
        curriculum_service.add_unit(db, caller=teacher, subject_id=subject_id, name="Too late")


def test_delete_subject_removes_progress_for_its_topics(db, teacher):
    subject_id, _, topic_id = build_tree(db, teacher)
    student = Student(name="Aahil")
    db.add(student)
    db.commit()
    db.add(Progress(student_id=student.id, topic_id=topic_id, status="ok", updated_by_id=teacher.id))
    db.commit()

    curriculum_service.delete_subject(db, caller=teacher, subject_id=subject_id)
    assert db.query(Progress).count() == 0
    assert db.query(Student).count() == 1


def test_delete_subject_is_atomic(db, teacher, monkeypatch):
    subject_id, unit_id, topic_id = build_tree(db, teacher)

    def failing_commit():
        db.flush()
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(ServerError):
        curriculum_service.delete_subject(db, caller=teacher, subject_id=subject_id)
    monkeypatch.undo()

    with SessionLocal() as fresh:
        assert fresh.query(Subject).filter(Subject.id == subject_id).count() == 1
        assert fresh.query(Unit).filter(Unit.id == unit_id).count() == 1
        assert fresh.query(Topic).filter(Topic.id == topic_id).count() == 1


def test_delete_unit_cascades_to_topics(db, teacher):
    subject_id, unit_id, _ = build_tree(db, teacher)
    curriculum_service.delete_unit(db, caller=teacher, subject_id=subject_id, unit_id=unit_id)
    assert db.query(Unit).count() == 0
    assert db.query(Topic).count() == 0
    assert db.query(Subject).count() == 1


def test_delete_topic_removes_it_from_unit(db, teacher):
    subject_id, unit_id, topic_id = build_tree(db, teacher)
    curriculum_service.delete_topic(db, caller=teacher, subject_id=subject_id, unit_id=unit_id, topic_id=topic_id)
    db.expire_all()
    subject = curriculum_service.get_subject(db, caller=teacher, subject_id=subject_id)
    assert subject.units[0].topics == []


def test_parent_can_read_but_not_write(db, teacher, parent):
    subject_id, unit_id, _ = build_tree(db, teacher)
    subjects = curriculum_service.list_subjects(db, caller=parent)
    assert [subject.id for subject in subjects] == [subject_id]

    with pytest.raises(ForbiddenError):
        curriculum_service.create_subject(db, caller=parent, name="Art")
    with pytest.raises(ForbiddenError):
        curriculum_service.delete_subject(db, caller=parent, subject_id=subject_id)
    with pytest.raises(ForbiddenError):
        curriculum_service.add_topic(db, caller=parent, subject_id=subject_id, unit_id=unit_id, name="Extra")


def test_renames_are_logged_with_acting_user(db, teacher, caplog):
    subject_id, unit_id, topic_id = build_tree(db, teacher)
    caplog.set_level(logging.INFO, logger="studytrack.app.services.curriculum_service")

    curriculum_service.update_unit(db, caller=teacher, subject_id=subject_id, unit_id=unit_id, name="Cells")
    curriculum_service.update_topic(
        db, caller=teacher, subject_id=subject_id, unit_id=unit_id, topic_id=topic_id, name="Organelles"
    )

    messages = [record.getMessage() for record in caplog.records]
    assert f"Unit {unit_id} renamed by user {teacher.id}" in messages
    assert f"Topic {topic_id} renamed by user {teacher.id}" in messages
