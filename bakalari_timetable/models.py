#!/usr/bin/env python3
"""
Data models for the Bakalari Timetable application.

This module defines the selector types used to address a timetable and the
Pydantic models for hours, days, lessons and the overall timetable.
"""

import enum
import json
from dataclasses import dataclass, field
import datetime as dt
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class SubjectKind(str, enum.Enum):
    """Category of entity a timetable belongs to."""
    TEACHER = "teacher"
    CLASS = "class"
    ROOM = "room"

    def __str__(self) -> str:
        return self.value


class Which(str, enum.Enum):
    """Which of the published timetable windows to fetch."""
    PERMANENT = "permanent"
    ACTUAL = "actual"
    NEXT = "next"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Selector:
    """
    Identifies the timetable to request, e.g. ``class/2A``.

    Equality only considers kind and identifier. ``name`` is the display name
    the identifier was resolved from, when known.
    """
    kind: SubjectKind
    id: str
    name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "kind", SubjectKind(self.kind))

    @classmethod
    def teacher(cls, id: str, name: Optional[str] = None) -> "Selector":
        return cls(SubjectKind.TEACHER, id, name)

    @classmethod
    def class_(cls, id: str, name: Optional[str] = None) -> "Selector":
        return cls(SubjectKind.CLASS, id, name)

    @classmethod
    def room(cls, id: str, name: Optional[str] = None) -> "Selector":
        return cls(SubjectKind.ROOM, id, name)

    @property
    def label(self) -> str:
        """Display name if known, otherwise the identifier."""
        return self.name if self.name is not None else self.id

    def __str__(self) -> str:
        return f"{self.kind.value}/{self.id}"


class Hour(BaseModel):
    """One period of the day (timetable header)."""
    start: dt.time
    duration: int

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "start": "08:00:00",
                "duration": 45
            }
        }


class _TaughtLesson(BaseModel):
    """Fields shared by regular lessons and substitutions."""
    class_: str = Field(..., alias="class")
    subject: str
    abbr: str
    teacher: str
    teacher_abbr: Optional[str] = Field(None, alias="teacherAbbr")
    room: Optional[str] = None
    group: Optional[str] = None
    topic: Optional[str] = None

    class Config:
        populate_by_name = True
        frozen = True


class RegularLesson(_TaughtLesson):
    """A lesson taking place as planned."""
    type: Literal["regular"] = "regular"

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "type": "regular",
                "class": "2.A",
                "subject": "Matematika",
                "abbr": "M",
                "teacher": "Mgr. Jana Nováková",
                "teacherAbbr": "Nov",
                "room": "207",
                "group": "2.A",
                "topic": "Kvadratické rovnice"
            }
        }


class SubstitutionLesson(_TaughtLesson):
    """A lesson the portal marks as changed (substitute teacher, room, ...)."""
    type: Literal["substitution"] = "substitution"


class CanceledLesson(BaseModel):
    """A lesson that was removed from the timetable."""
    type: Literal["canceled"] = "canceled"

    class Config:
        frozen = True


class AbsentLesson(BaseModel):
    """A slot where the class or teacher is absent (trip, exam, ...)."""
    type: Literal["absent"] = "absent"
    info: str
    abbr: str

    class Config:
        populate_by_name = True
        frozen = True


Lesson = Annotated[
    Union[RegularLesson, SubstitutionLesson, CanceledLesson, AbsentLesson],
    Field(discriminator="type"),
]


class Day(BaseModel):
    """One row of the timetable; ``lessons`` holds one slot per hour."""
    date: Optional[dt.date] = None
    lessons: List[List[Lesson]]

    class Config:
        populate_by_name = True
        frozen = True


class Timetable(BaseModel):
    """Complete timetable: the period header and one row per day."""
    hours: List[Hour]
    days: List[Day]

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode='after')
    def validate_lesson_counts(self):
        """Every day must have exactly one slot per hour."""
        for i, day in enumerate(self.days):
            if len(day.lessons) != len(self.hours):
                raise ValueError(
                    f"Day {i + 1} has {len(day.lessons)} slots but there are {len(self.hours)} hours"
                )
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Timetable":
        """Create Timetable instance from a dictionary."""
        return cls.model_validate(data)

    @classmethod
    def from_json(cls, text: str) -> "Timetable":
        """Create Timetable instance from a JSON string."""
        return cls.model_validate_json(text)

    def to_dict(self) -> Dict[str, Any]:
        """Convert Timetable to a JSON-compatible dictionary."""
        return self.model_dump(by_alias=True, mode="json")

    def to_json(self) -> str:
        """Convert Timetable to a JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)
