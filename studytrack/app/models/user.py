from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from studytrack.app.core.roles import Role
from studytrack.app.core.time import utc_now
from studytrack.app.db.base_class import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=Role.USER.value)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    parent_links = relationship(
        "ParentStudentLink",
        back_populates="parent_user",
        cascade="all, delete-orphan",
        foreign_keys="ParentStudentLink.parent_user_id",
    )

    @property
    def child_ids(self) -> list[int]:
        return sorted(link.student_id for link in self.parent_links)
