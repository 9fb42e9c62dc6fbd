"""Subject, unit and topic schemas."""

from typing import List

from pydantic import BaseModel, ConfigDict


class NameIn(BaseModel):
    name: str


class TopicRead(BaseModel):
    id: int
    name: str
    unit_id: int

    model_config = ConfigDict(from_attributes=True)


class UnitRead(BaseModel):
    id: int
    name: str
    subject_id: int
    topics: List[TopicRead] = []

    model_config = ConfigDict(from_attributes=True)


class SubjectRead(BaseModel):
    id: int
    name: str
    units: List[UnitRead] = []

    model_config = ConfigDict(from_attributes=True)
