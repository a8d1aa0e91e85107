from datetime import date

import pytest
from pydantic import ValidationError

from bakalari_timetable.extractors.timetable import parse_timetable
from bakalari_timetable.models import (
    AbsentLesson,
    Selector,
    SubjectKind,
    SubstitutionLesson,
    Timetable,
    Which,
)


@pytest.fixture
def timetable(timetable_html):
    return parse_timetable(timetable_html, Selector.class_("2A", "2.A"), today=date(2024, 9, 1))


def test_json_round_trip(timetable):
    restored = Timetable.from_json(timetable.to_json())
    assert restored == timetable


def test_dict_uses_external_names(timetable):
    data = timetable.to_dict()

    lesson = data["days"][0]["lessons"][0][0]
    assert lesson["type"] == "regular"
    assert lesson["class"] == "2.A"
    assert lesson["teacherAbbr"] == "Nov"
    assert data["hours"][0] == {"start": "08:00:00", "duration": 45}
    assert data["days"][0]["date"] == "2024-09-02"
    assert data["days"][1]["lessons"][0] == [{"type": "canceled"}]


def test_from_dict_picks_variant_by_type():
    data = {
        "hours": [{"start": "08:00", "duration": 45}],
        "days": [{
            "date": None,
            "lessons": [[
                {"type": "substitution", "class": "2.A", "subject": "Fyzika", "abbr": "F", "teacher": "Petr Kovář"},
                {"type": "absent", "info": "Exkurze", "abbr": "EXK"},
            ]],
        }],
    }
    timetable = Timetable.from_dict(data)
    first, second = timetable.days[0].lessons[0]
    assert isinstance(first, SubstitutionLesson)
    assert first.room is None
    assert isinstance(second, AbsentLesson)


def test_from_dict_rejects_slot_count_mismatch():
    data = {
        "hours": [{"start": "08:00", "duration": 45}, {"start": "08:55", "duration": 45}],
        "days": [{"date": None, "lessons": [[]]}],
    }
    with pytest.raises(ValidationError):
        Timetable.from_dict(data)


def test_models_are_frozen(timetable):
    with pytest.raises(ValidationError):
        timetable.hours[0].duration = 50


def test_selector_display_and_equality():
    selector = Selector.teacher("UNOV", "Nováková Jana")
    assert str(selector) == "teacher/UNOV"
    assert selector == Selector(SubjectKind.TEACHER, "UNOV")
    assert hash(selector) == hash(Selector.teacher("UNOV"))
    assert selector != Selector.room("UNOV")
    assert selector.label == "Nováková Jana"
    assert Selector.room("R1").label == "R1"


def test_enum_values():
    assert str(SubjectKind.CLASS) == "class"
    assert [w.value for w in Which] == ["permanent", "actual", "next"]


def test_selector_accepts_kind_as_text():
    selector = Selector("class", "2A")
    assert selector.kind is SubjectKind.CLASS
    assert selector == Selector.class_("2A")
    assert str(selector) == "class/2A"

    with pytest.raises(ValueError):
        Selector("pupil", "2A")
