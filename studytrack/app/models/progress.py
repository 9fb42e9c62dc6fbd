"""Progress model: one mastery status per (student, topic)."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from studytrack.app.core.time import utc_now
from studytrack.app.db.base_class import Base


class ProgressStatus(str, Enum):
    NOT_STUDIED = "not_studied"
    STARTED = "started"
    DIFFICULT = "difficult"
    OK = "ok"
    CONFIDENT = "confident"


class Progress(Base):
    __tablename__ = "progress"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ProgressStatus.NOT_STUDIED.value)
    notes = Column(Text, nullable=True)
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now, index=True)

    # Backstop for the upsert path
    __table_args__ = (
        UniqueConstraint("student_id", "topic_id", name="uq_progress_student_topic"),
    )

    student = relationship("Student", back_populates="progress_entries")
    topic = relationship("Topic", back_populates="progress_entries")
    updated_by = relationship("User", foreign_keys=[updated_by_id])
