from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from studytrack.app.core.time import utc_now
from studytrack.app.db.base_class import Base


class Topic(Base):
    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, index=True)
    unit_id = Column(Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    __table_args__ = (
        UniqueConstraint("unit_id", "name", name="uq_topic_unit_name"),
    )

    unit = relationship("Unit", back_populates="topics")
    progress_entries = relationship("Progress", back_populates="topic", cascade="all, delete-orphan")
