"""First-run setup marker.

The table holds at most one row, keyed by ``SETUP_ROW_ID``. ``auth_service.setup``
inserts it in the same transaction as the first super admin, so a second setup
racing past the "no users yet" check fails on the primary key.
"""

from sqlalchemy import Column, DateTime, Integer

from studytrack.app.core.time import utc_now
from studytrack.app.db.base_class import Base

SETUP_ROW_ID = 1


class SetupState(Base):
    __tablename__ = "setup_state"

    id = Column(Integer, primary_key=True, default=SETUP_ROW_ID, autoincrement=False)
    completed_at = Column(DateTime, nullable=False, default=utc_now)
