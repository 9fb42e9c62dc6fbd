import logging
import os

from sqlalchemy.orm import Session

from studytrack.app.core.roles import Role
from studytrack.app.core.security import get_password_hash
from studytrack.app.models.parent_link import ParentStudentLink
from studytrack.app.models.progress import Progress, ProgressStatus
from studytrack.app.models.student import Student
from studytrack.app.models.subject import Subject
from studytrack.app.models.topic import Topic
from studytrack.app.models.unit import Unit
from studytrack.app.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_DEV_PASSWORD = "password"

DEMO_USERS = [
    ("Super Admin", "superadmin@example.com", Role.SUPER_ADMIN),
    ("Teacher", "teacher@example.com", Role.ADMIN),
    ("Parent 1", "parent@example.com", Role.USER),
    ("Parent 2", "parent2@example.com", Role.USER),
]

# student name, grade, parent email
DEMO_STUDENTS = [
    ("Aahil", "10", "parent@example.com"),
    ("Sara", "9", "parent@example.com"),
    ("John", "11", "parent2@example.com"),
]

DEMO_CURRICULUM = {
    "Biology": {
        "Cell biology": ["Cell structure", "Cell division", "Transport in cells"],
        "Organisation": ["Digestive system", "Heart and blood vessels"],
    },
    "Chemistry": {
        "Atomic structure": ["Atoms and elements", "The periodic table"],
        "Bonding": ["Ionic bonding", "Covalent bonding"],
    },
    "Physics": {
        "Energy": ["Energy stores", "Conservation of energy"],
    },
}


def seed_demo_data(db: Session) -> bool:
    """
    Populate an empty database with demo accounts, students and curriculum.
    Returns False without touching anything when users already exist or when
    running under pytest.
    """
    if os.getenv("PYTEST_CURRENT_TEST"):
        return False
    if db.query(User.id).first() is not None:
        return False

    hashed_password = get_password_hash(DEFAULT_DEV_PASSWORD)
    users = {}
    for name, email, role in DEMO_USERS:
        user = User(name=name, email=email, hashed_password=hashed_password, role=role.value)
        db.add(user)
        users[email] = user
    db.flush()

    students = []
    for name, grade, parent_email in DEMO_STUDENTS:
        student = Student(name=name, grade=grade)
        student.parent_links.append(ParentStudentLink(parent_user_id=users[parent_email].id))
        db.add(student)
        students.append(student)

    first_topics = []
    for subject_name, units in DEMO_CURRICULUM.items():
        subject = Subject(name=subject_name)
        for unit_name, topic_names in units.items():
            unit = Unit(name=unit_name)
            unit.topics.extend(Topic(name=topic_name) for topic_name in topic_names)
            subject.units.append(unit)
        db.add(subject)
        first_topics.append(subject.units[0].topics[0])
    db.flush()

    teacher = users["teacher@example.com"]
    for topic, status in zip(first_topics, [ProgressStatus.STARTED, ProgressStatus.OK, ProgressStatus.CONFIDENT]):
        db.add(Progress(student_id=students[0].id, topic_id=topic.id, status=status.value, updated_by_id=teacher.id))

    db.commit()
    logger.info("Seeded demo data: %d users, %d students", len(users), len(students))
    return True
