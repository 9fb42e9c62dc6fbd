import pytest
from fastapi.testclient import TestClient

from studytrack.app.core.roles import Role
from studytrack.app.core.security import create_access_token
from studytrack.app.db.base import Base
from studytrack.app.db.session import SessionLocal, engine
from studytrack.app.main import app
from studytrack.app.models.parent_link import ParentStudentLink
from studytrack.app.models.progress import Progress
from studytrack.app.models.student import Student
from studytrack.app.models.subject import Subject
from studytrack.app.models.topic import Topic
from studytrack.app.models.unit import Unit
from studytrack.app.models.user import User


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def make_user(email: str, role: Role) -> int:
    db = SessionLocal()
    try:
        user = User(name=email.split("@")[0], email=email, hashed_password="x", role=role.value)
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def headers_for(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def create_student(client: TestClient, headers: dict, name: str, parent_ids=()) -> dict:
    resp = client.post("/students/", json={"name": name, "grade": "10", "parent_ids": list(parent_ids)}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


def test_admin_creates_student_with_parents():
    client = TestClient(app)
    teacher = make_user("teacher@example.com", Role.ADMIN)
    parent = make_user("parent@example.com", Role.USER)

    student = create_student(client, headers_for(teacher), "  Aahil ", [parent])
    assert student["name"] == "Aahil"
    assert student["parent_ids"] == [parent]

    me = client.get("/auth/me", headers=headers_for(parent))
    assert me.json()["child_ids"] == [student["id"]]


def test_parent_cannot_create_student():
    client = TestClient(app)
    parent = make_user("parent@example.com", Role.USER)
    resp = client.post("/students/", json={"name": "Sneaky"}, headers=headers_for(parent))
    assert resp.status_code == 403
    assert resp.json()["error"] == "Forbidden"


def test_create_student_rejects_missing_or_staff_parent():
    client = TestClient(app)
    teacher = make_user("teacher@example.com", Role.ADMIN)
    resp = client.post("/students/", json={"name": "Aahil", "parent_ids": [999]}, headers=headers_for(teacher))
    assert resp.status_code == 404

    resp = client.post("/students/", json={"name": "Aahil", "parent_ids": [teacher]}, headers=headers_for(teacher))
    assert resp.status_code == 400

    listing = client.get("/students/", headers=headers_for(teacher))
    assert listing.json() == []


def test_create_student_requires_name():
    client = TestClient(app)
    teacher = make_user("teacher@example.com", Role.ADMIN)
    resp = client.post("/students/", json={"name": "   "}, headers=headers_for(teacher))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Student name is required"


def test_parents_see_only_their_children():
    client = TestClient(app)
    teacher = make_user("teacher@example.com", Role.ADMIN)
    parent_one = make_user("parent@example.com", Role.USER)
    parent_two = make_user("parent2@example.com", Role.USER)
    aahil = create_student(client, headers_for(teacher), "Aahil", [parent_one])
    sara = create_student(client, headers_for(teacher), "Sara", [parent_one, parent_two])
    john = create_student(client, headers_for(teacher), "John", [parent_two])

    staff_view = client.get("/students/", headers=headers_for(teacher)).json()
    assert [s["id"] for s in staff_view] == [aahil["id"], sara["id"], john["id"]]

    parent_view = client.get("/students/", headers=headers_for(parent_one)).json()
    assert [s["id"] for s in parent_view] == [aahil["id"], sara["id"]]

    assert client.get(f"/students/{sara['id']}", headers=headers_for(parent_two)).status_code == 200
    resp = client.get(f"/students/{aahil['id']}", headers=headers_for(parent_two))
    assert resp.status_code == 403


def test_missing_student_is_not_found_for_everyone():
    client = TestClient(app)
    parent = make_user("parent@example.com", Role.USER)
    resp = client.get("/students/999", headers=headers_for(parent))
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Student not found"


def test_reassign_parents_updates_both_sides():
    client = TestClient(app)
    teacher = make_user("teacher@example.com", Role.ADMIN)
    parent_one = make_user("parent@example.com", Role.USER)
    parent_two = make_user("parent2@example.com", Role.USER)
    student = create_student(client, headers_for(teacher), "Aahil", [parent_one])

    resp = client.put(
        f"/students/{student['id']}/parents", json={"parent_ids": [parent_two]}, headers=headers_for(teacher)
    )
    assert resp.status_code == 200
    assert resp.json()["parent_ids"] == [parent_two]

    assert client.get("/auth/me", headers=headers_for(parent_one)).json()["child_ids"] == []
    assert client.get("/auth/me", headers=headers_for(parent_two)).json()["child_ids"] == [student["id"]]
    assert client.get(f"/students/{student['id']}", headers=headers_for(parent_one)).status_code == 403

    db = SessionLocal()
    try:
        links = db.query(ParentStudentLink).all()
        assert [(link.parent_user_id, link.student_id) for link in links] == [(parent_two, student["id"])]
    finally:
        db.close()


def test_reassign_parents_failure_changes_nothing():
    client = TestClient(app)
    teacher = make_user("teacher@example.com", Role.ADMIN)
    parent = make_user("parent@example.com", Role.USER)
    student = create_student(client, headers_for(teacher), "Aahil", [parent])

    resp = client.put(
        f"/students/{student['id']}/parents", json={"parent_ids": [parent, 999]}, headers=headers_for(teacher)
    )
    assert resp.status_code == 404
    assert client.get(f"/students/{student['id']}", headers=headers_for(teacher)).json()["parent_ids"] == [parent]


def test_update_student_fields():
    client = TestClient(app)
    teacher = make_user("teacher@example.com", Role.ADMIN)
    student = create_student(client, headers_for(teacher), "Aahil")
    resp = client.put(
        f"/students/{student['id']}", json={"name": "Aahil K", "grade": "11"}, headers=headers_for(teacher)
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Aahil K"
    assert resp.json()["grade"] == "11"


def test_delete_student_removes_links_and_progress():
    client = TestClient(app)
    teacher = make_user("teacher@example.com", Role.ADMIN)
    parent = make_user("parent@example.com", Role.USER)
    student = create_student(client, headers_for(teacher), "Aahil", [parent])

    db = SessionLocal()
    try:
        subject = Subject(name="Biology")
        unit = Unit(name="Cell biology")
        unit.topics.append(Topic(name="Cell structure"))
        subject.units.append(unit)
        db.add(subject)
        db.commit()
        db.add(Progress(student_id=student["id"], topic_id=unit.topics[0].id, status="ok", updated_by_id=teacher))
        db.commit()
    finally:
        db.close()

    assert client.delete(f"/students/{student['id']}", headers=headers_for(parent)).status_code == 403
    resp = client.delete(f"/students/{student['id']}", headers=headers_for(teacher))
    assert resp.status_code == 200
    assert resp.json() == {"status": "deleted", "id": student["id"]}

    db = SessionLocal()
    try:
        assert db.query(Student).count() == 0
        assert db.query(ParentStudentLink).count() == 0
        assert db.query(Progress).count() == 0
        assert db.query(Topic).count() == 1
    finally:
        db.close()

    assert client.get("/auth/me", headers=headers_for(parent)).json()["child_ids"] == []
