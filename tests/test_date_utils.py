from datetime import date

import pytest

from bakalari_timetable.utils.date_utils import infer_year, parse_day_month, parse_portal_date


def test_parse_day_month():
    assert parse_day_month("15.1.") == (15, 1)
    assert parse_day_month(" 2.9. ") == (2, 9)
    assert parse_day_month("2.9") == (2, 9)


@pytest.mark.parametrize("text", ["", "15", "15.", "a.b.", "15-1", "1.2.2024"])
def test_parse_day_month_rejects(text):
    with pytest.raises(ValueError):
        parse_day_month(text)


def test_recent_past_stays_in_current_year():
    # 45 days back is inside the window
    assert parse_portal_date("15.1.", today=date(2024, 3, 1)) == date(2024, 1, 15)


def test_far_future_moves_to_previous_year():
    assert parse_portal_date("15.12.", today=date(2024, 1, 1)) == date(2023, 12, 15)


def test_far_past_moves_to_next_year():
    assert parse_portal_date("5.1.", today=date(2024, 12, 20)) == date(2025, 1, 5)


def test_window_boundary():
    today = date(2024, 3, 1)
    assert infer_year(31, 12, today=date(2024, 11, 1)) == date(2024, 12, 31)
    assert infer_year(1, 1, today=today) == date(2024, 1, 1)
    assert infer_year(30, 4, today=today) == date(2024, 4, 30)
    assert infer_year(1, 5, today=today) == date(2023, 5, 1)


def test_invalid_calendar_date():
    with pytest.raises(ValueError):
        parse_portal_date("30.2.", today=date(2024, 3, 1))
