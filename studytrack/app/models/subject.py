"""Curriculum root: a subject owns its units."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from studytrack.app.core.time import utc_now
from studytrack.app.db.base_class import Base


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    # Insertion order is display order ("Unit 1", "Unit 2", ...)
    units = relationship(
        "Unit",
        back_populates="subject",
        cascade="all, delete-orphan",
        order_by="Unit.id",
    )
