#!/usr/bin/env python3
"""
Parser for the lesson entries of a timetable cell.

Each entry carries a JSON payload in its data-detail attribute. The payload's
``type`` only proposes a variant; the entry's CSS classes have to confirm it
before a Lesson is produced.
"""
import logging
from typing import Annotated, Any, List, Literal, Optional, Tuple, Union

from bs4 import Tag
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from ..constants import (
    ABSENT_CLASS_INDICATOR,
    CHANGED_CLASS_INDICATOR,
    DAY_ITEM_SELECTOR,
    LESSON_ABBR_SELECTOR,
    LESSON_DATA_ATTRIBUTE,
    LESSON_SELECTOR,
    LESSON_TEACHER_ABBR_SELECTOR,
    SUBJECT_TEXT_SEPARATOR,
)
from ..models import (
    AbsentLesson,
    CanceledLesson,
    Lesson,
    RegularLesson,
    Selector,
    SubjectKind,
    SubstitutionLesson,
)
from ..utils.error_utils import LessonParseError, ParseErrorKind

logger = logging.getLogger(__name__)


class _Payload(BaseModel):
    """Common behaviour of data-detail payloads: empty strings mean no value."""

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator(
        "subject_text", "teacher", "room", "group", "theme", "notice", "changeinfo",
        "homeworks", "absencetext", "has_absent", "absent_info_text",
        "info_absent_name", "absent_info",
        mode="before", check_fields=False,
    )
    @classmethod
    def empty_string_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and value == "":
            return None
        return value


class AtomPayload(_Payload):
    """Payload of a regular or substituted lesson."""
    type: Literal["atom"]
    subject_text: Optional[str] = Field(None, alias="subjecttext")
    teacher: Optional[str] = None
    room: Optional[str] = None
    group: Optional[str] = None
    theme: Optional[str] = None
    notice: Optional[str] = None
    changeinfo: Optional[str] = None
    homeworks: Optional[Any] = None
    absencetext: Optional[str] = None
    has_absent: Optional[bool] = Field(None, alias="hasAbsent")
    absent_info_text: Optional[str] = Field(None, alias="absentInfoText")


class RemovedPayload(_Payload):
    """Payload of a canceled lesson."""
    type: Literal["removed"]
    subject_text: Optional[str] = Field(None, alias="subjecttext")


class AbsentPayload(_Payload):
    """Payload of an absence (trip, exam week, ...)."""
    type: Literal["absent"]
    info_absent_name: Optional[str] = Field(None, alias="InfoAbsentName")
    absent_info: Optional[str] = Field(None, alias="absentinfo")


LessonPayload = Annotated[
    Union[AtomPayload, RemovedPayload, AbsentPayload],
    Field(discriminator="type"),
]

_payload_adapter = TypeAdapter(LessonPayload)


def decode_payload(raw: str) -> Union[AtomPayload, RemovedPayload, AbsentPayload]:
    """
    Decode the data-detail JSON into a payload model.

    Raises:
        LessonParseError: JSON kind for malformed JSON or an unknown ``type``.
    """
    try:
        return _payload_adapter.validate_json(raw)
    except ValidationError as e:
        raise LessonParseError(ParseErrorKind.JSON, detail=str(e)) from e


def has_class(element: Tag, class_name: str) -> bool:
    """Case-insensitive check for a CSS class on an element."""
    wanted = class_name.lower()
    return any(c.lower() == wanted for c in element.get("class") or [])


def get_prop(element: Tag, css_selector: str, prop: str) -> str:
    """
    Read the text of the single element matching ``css_selector``.

    The match must be unique and contain exactly one text node.

    Raises:
        LessonParseError: MISSING_PROPERTY naming ``prop``.
    """
    matches = element.select(css_selector)
    if len(matches) != 1:
        raise LessonParseError(ParseErrorKind.MISSING_PROPERTY, prop=prop)
    texts = list(matches[0].strings)
    if len(texts) != 1:
        raise LessonParseError(ParseErrorKind.MISSING_PROPERTY, prop=prop)
    return texts[0].strip()


def parse_subject(subject_text: Optional[str]) -> str:
    """
    Take the subject name out of "Matematika | Po 2.9. | 1 (8:00 - 8:45)".

    Raises:
        LessonParseError: MISSING_PROPERTY when absent, BAD_SUBJECT_TEXT when
            there is no separator or the name is empty.
    """
    if subject_text is None:
        raise LessonParseError(ParseErrorKind.MISSING_PROPERTY, prop="subjecttext")
    subject, sep, _ = subject_text.partition(SUBJECT_TEXT_SEPARATOR)
    subject = subject.strip()
    if not sep or not subject:
        raise LessonParseError(ParseErrorKind.BAD_SUBJECT_TEXT, detail=subject_text)
    return subject


def parse_teacher(entry: Tag, teacher: Optional[str], selector: Selector) -> Tuple[str, Optional[str]]:
    """
    Resolve the teacher name and abbreviation of a lesson.

    In a teacher's own timetable the payload may omit the teacher, who is then
    the viewed teacher, and no abbreviation is read. Elsewhere the abbreviation
    element is required.
    """
    in_teacher_view = selector.kind == SubjectKind.TEACHER

    if teacher is None:
        if not in_teacher_view:
            raise LessonParseError(ParseErrorKind.MISSING_PROPERTY, prop="teacher")
        teacher = selector.label

    if in_teacher_view:
        return teacher, None
    return teacher, get_prop(entry, LESSON_TEACHER_ABBR_SELECTOR, "teacher_abbr")


def _resolve_atom(entry: Tag, payload: AtomPayload, selector: Selector) -> Lesson:
    subject = parse_subject(payload.subject_text)
    abbr = get_prop(entry, LESSON_ABBR_SELECTOR, "abbr")
    teacher, teacher_abbr = parse_teacher(entry, payload.teacher, selector)

    if selector.kind == SubjectKind.CLASS:
        class_name = selector.label
    elif payload.group is not None:
        class_name = payload.group
    else:
        raise LessonParseError(ParseErrorKind.MISSING_PROPERTY, prop="group")

    fields = dict(
        class_=class_name,
        subject=subject,
        abbr=abbr,
        teacher=teacher,
        teacher_abbr=teacher_abbr,
        room=payload.room,
        group=payload.group,
        topic=payload.theme,
    )
    if has_class(entry, CHANGED_CLASS_INDICATOR):
        return SubstitutionLesson(**fields)
    return RegularLesson(**fields)


def _resolve_absent(entry: Tag, payload: AbsentPayload) -> Lesson:
    if not has_class(entry, ABSENT_CLASS_INDICATOR):
        raise LessonParseError(ParseErrorKind.DATA_TYPE_MISMATCH, detail="absent entry without absence marker")
    if payload.info_absent_name is None:
        raise LessonParseError(ParseErrorKind.MISSING_PROPERTY, prop="InfoAbsentName")
    if payload.absent_info is None:
        raise LessonParseError(ParseErrorKind.MISSING_PROPERTY, prop="absentinfo")
    return AbsentLesson(info=payload.info_absent_name, abbr=payload.absent_info)


def _resolve_removed(entry: Tag) -> Lesson:
    if not has_class(entry, CHANGED_CLASS_INDICATOR):
        raise LessonParseError(ParseErrorKind.DATA_TYPE_MISMATCH, detail="removed entry without change marker")
    return CanceledLesson()


def parse_lesson_entry(entry: Tag, selector: Selector) -> Lesson:
    """
    Decode one lesson entry (a ``div.day-item-hover`` element).

    Args:
        entry: The entry element.
        selector: The timetable being decoded, for the fields the payload omits.

    Returns:
        Lesson: The confirmed lesson variant.

    Raises:
        LessonParseError: On a missing or malformed payload, a missing field,
            or when the CSS marker does not confirm the payload type.
    """
    raw = entry.get(LESSON_DATA_ATTRIBUTE)
    if raw is None:
        raise LessonParseError(ParseErrorKind.NO_DATA)

    payload = decode_payload(raw)

    if isinstance(payload, AtomPayload):
        return _resolve_atom(entry, payload, selector)
    if isinstance(payload, AbsentPayload):
        return _resolve_absent(entry, payload)
    return _resolve_removed(entry)


def parse_cell(cell: Tag, selector: Selector) -> List[Lesson]:
    """
    Decode one timetable cell into its lessons.

    A cell without a day item is an empty slot.
    """
    item = cell.select_one(DAY_ITEM_SELECTOR)
    if item is None:
        return []
    return [parse_lesson_entry(entry, selector) for entry in item.select(LESSON_SELECTOR)]
