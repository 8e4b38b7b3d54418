"""
Tests for opening hours, date overrides and service shifts.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from slotwise.application.use_cases.validate_hours import find_shift, select_rule, validate_hours
from slotwise.application.utils.messages import MESSAGES
from slotwise.application.utils.time_utils import TimeInterval, local_to_instant
from slotwise.domain.entities.operating_hours import OperatingHoursRule

MONDAY = "2025-06-02"
TZ = "Europe/Madrid"


def _interval(hhmm: str, minutes: int = 60, day: str = MONDAY) -> TimeInterval:
    return TimeInterval.from_start(local_to_instant(day, hhmm, TZ), minutes)


def _monday_rule(business_id: str = "salon-1", **kwargs) -> OperatingHoursRule:
    params = {"open_time": "09:00", "close_time": "18:00", **kwargs}
    return OperatingHoursRule(business_id=business_id, day_of_week=1, **params)


def test_no_rule_means_closed(salon):
    result = validate_hours(salon, MONDAY, _interval("10:00"), None)
    assert result.within_hours is False
    assert result.message == "El negocio está cerrado los lunes"


def test_closed_rule_means_closed(salon):
    result = validate_hours(salon, MONDAY, _interval("10:00"), _monday_rule(is_closed=True))
    assert result.within_hours is False
    assert "cerrado" in result.message


def test_closed_message_in_english(salon):
    result = validate_hours(replace(salon, locale="en"), MONDAY, _interval("10:00"), None)
    assert result.message == "The business is closed on Mondays"


def test_rule_without_times_is_not_open(salon):
    rule = OperatingHoursRule(business_id=salon.id, day_of_week=1)
    result = validate_hours(salon, MONDAY, _interval("10:00"), rule)
    assert result.within_hours is False


def test_start_before_opening_reports_open_time(salon):
    result = validate_hours(salon, MONDAY, _interval("08:00"), _monday_rule())
    assert result.within_hours is False
    assert result.message == "Abrimos a las 09:00"


def test_end_after_closing_reports_computed_end(salon):
    result = validate_hours(salon, MONDAY, _interval("17:30"), _monday_rule())
    assert result.within_hours is False
    assert "18:30" in result.message
    assert "18:00" in result.message


def test_ending_exactly_at_close_is_allowed(salon):
    result = validate_hours(salon, MONDAY, _interval("17:00"), _monday_rule())
    assert result.within_hours is True
    assert result.open_time == "09:00"
    assert result.close_time == "18:00"


def test_times_with_seconds_are_compared_as_hhmm(salon):
    rule = _monday_rule(open_time="09:00:00", close_time="18:00:00")
    assert validate_hours(salon, MONDAY, _interval("09:00"), rule).within_hours is True


def test_specific_date_override_wins_over_weekday():
    weekly = _monday_rule()
    holiday = OperatingHoursRule(business_id="salon-1", specific_date=date(2025, 6, 2), is_closed=True)
    assert select_rule([weekly, holiday], date(2025, 6, 2)) is holiday
    assert select_rule([weekly, holiday], date(2025, 6, 9)) is weekly


def test_higher_priority_wins_within_the_same_kind():
    low = _monday_rule(priority=0)
    high = _monday_rule(open_time="10:00", priority=5)
    assert select_rule([low, high], date(2025, 6, 2)) is high


def test_no_matching_rule_selects_nothing():
    assert select_rule([_monday_rule()], date(2025, 6, 3)) is None


def test_closed_override_message_mentions_date(salon):
    holiday = OperatingHoursRule(business_id=salon.id, specific_date=date(2025, 6, 2), is_closed=True)
    result = validate_hours(salon, MONDAY, _interval("10:00"), holiday)
    assert result.message == "El negocio está cerrado el 2025-06-02"


def test_shifts_restrict_start_times(restaurant, lunch_and_dinner):
    business = replace(restaurant, shifts=lunch_and_dinner)
    rule = OperatingHoursRule(business_id=business.id, day_of_week=1, open_time="12:00", close_time="23:30")

    assert validate_hours(business, MONDAY, _interval("13:30", 90), rule).within_hours is True
    between = validate_hours(business, MONDAY, _interval("17:00", 90), rule)
    assert between.within_hours is False
    assert "17:00" in between.message


def test_find_shift_end_is_exclusive(lunch_and_dinner):
    assert find_shift("13:00", lunch_and_dinner).key == "lunch"
    assert find_shift("15:59", lunch_and_dinner).key == "lunch"
    assert find_shift("16:00", lunch_and_dinner) is None
    assert find_shift("21:00:00", lunch_and_dinner).key == "dinner"


def test_disabled_shift_is_skipped(lunch_and_dinner):
    shifts = (replace(lunch_and_dinner[0], enabled=False), lunch_and_dinner[1])
    assert find_shift("13:30", shifts) is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"day_of_week": None},
        {"day_of_week": 7},
        {"day_of_week": 1, "open_time": "18:00", "close_time": "09:00"},
    ],
)
def test_rule_invariants(kwargs):
    with pytest.raises(ValueError):
        OperatingHoursRule(business_id="salon-1", **{"open_time": "09:00", "close_time": "18:00", **kwargs})


def test_message_catalogs_share_keys():
    assert set(MESSAGES["es"]) == set(MESSAGES["en"])
    assert "within_hours" not in MESSAGES["es"]
