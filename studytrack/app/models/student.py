"""Student model for StudyTrack."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from studytrack.app.core.time import utc_now
from studytrack.app.db.base_class import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    grade = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    parent_links = relationship(
        "ParentStudentLink",
        back_populates="student",
        cascade="all, delete-orphan",
        foreign_keys="ParentStudentLink.student_id",
    )
    progress_entries = relationship("Progress", back_populates="student", cascade="all, delete-orphan")

    @property
    def parent_ids(self) -> list[int]:
        return sorted(link.parent_user_id for link in self.parent_links)
