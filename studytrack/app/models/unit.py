from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from studytrack.app.core.time import utc_now
from studytrack.app.db.base_class import Base


class Unit(Base):
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    subject = relationship("Subject", back_populates="units")
    topics = relationship(
        "Topic",
        back_populates="unit",
        cascade="all, delete-orphan",
        order_by="Topic.id",
    )
