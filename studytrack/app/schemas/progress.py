"""Progress schemas for topic mastery tracking."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ProgressUpsert(BaseModel):
    student_id: int
    topic_id: int
    status: str
    notes: Optional[str] = None


class ProgressRead(BaseModel):
    id: int
    student_id: int
    topic_id: int
    status: str
    notes: Optional[str] = None
    updated_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SubjectProgress(BaseModel):
    subject_id: int
    subject: str
    total_topics: int
    status_counts: Dict[str, int]


class StudentProgressSummary(BaseModel):
    student_id: int
    total_topics: int
    status_counts: Dict[str, int]
    subjects: List[SubjectProgress]
