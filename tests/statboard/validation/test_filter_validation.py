from __future__ import annotations

from datetime import date

import pytest

from statboard.core.exceptions import InvalidRangeError, ValidationError
from statboard.validation.filter_validation import parse_filter_form


def test_parses_dates_and_tri_state():
    state = parse_filter_form(
        {"published_status": "1", "start_date": "2024-01-01", "end_date": "2024-01-31"}
    )
    assert state.get("published_status") is True
    assert state.get("start_date") == date(2024, 1, 1)
    assert state.get("end_date") == date(2024, 1, 31)


def test_blank_values_stay_unset():
    state = parse_filter_form({"published_status": "", "start_date": None, "end_date": "  "})
    assert state.values == {}


def test_zero_means_drafts_not_unset():
    state = parse_filter_form({"published_status": "0"})
    assert state.is_set("published_status")
    assert state.get("published_status") is False


def test_date_picker_timestamps_are_truncated_to_the_day():
    state = parse_filter_form({"start_date": "2024-02-01T00:00:00"})
    assert state.get("start_date") == date(2024, 2, 1)

    state = parse_filter_form({"end_date": "2024-02-03 17:45"})
    assert state.get("end_date") == date(2024, 2, 3)


@pytest.mark.parametrize("raw", ["2024-01-01 junk", "2024-01-01Tnoon", "2024-01-01 12", "2024-02-30"])
def test_trailing_garbage_is_not_a_date(raw):
    with pytest.raises(ValidationError) as exc:
        parse_filter_form({"start_date": raw})
    assert [i.code for i in exc.value.issues] == ["DATE_FORMAT"]


def test_extra_names_pass_through():
    state = parse_filter_form({"category": " news "})
    assert state.get("category") == "news"


def test_all_issues_reported_together():
    with pytest.raises(ValidationError) as exc:
        parse_filter_form({"published_status": "maybe", "start_date": "01/02/2024"})

    codes = sorted(i.code for i in exc.value.issues)
    assert codes == ["DATE_FORMAT", "STATUS_VALUE"]
    assert set(exc.value.messages_by_field()) == {"published_status", "start_date"}


def test_reversed_range_is_rejected():
    with pytest.raises(InvalidRangeError) as exc:
        parse_filter_form({"start_date": "2024-06-01", "end_date": "2024-01-01"})
    assert exc.value.issues[0].field == "end_date"
    assert isinstance(exc.value, ValidationError)


def test_same_day_range_is_fine():
    state = parse_filter_form({"start_date": "2024-06-01", "end_date": "2024-06-01"})
    assert state.get("start_date") == state.get("end_date")
