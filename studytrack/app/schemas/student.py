"""Student schemas for StudyTrack."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class StudentCreate(BaseModel):
    name: str
    grade: Optional[str] = None
    parent_ids: List[int] = []


class StudentUpdate(BaseModel):
    name: Optional[str] = None
    grade: Optional[str] = None
    parent_ids: Optional[List[int]] = None


class StudentParentsUpdate(BaseModel):
    parent_ids: List[int]


class StudentRead(BaseModel):
    id: int
    name: str
    grade: Optional[str] = None
    parent_ids: List[int] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
