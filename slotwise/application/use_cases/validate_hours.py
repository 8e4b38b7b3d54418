from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from slotwise.application.utils.messages import day_name, message
from slotwise.application.utils.time_utils import (
    TimeInterval,
    day_of_week_index,
    instant_to_local,
    normalize_hhmm,
    parse_date,
)
from slotwise.domain.entities.business import Business, Shift
from slotwise.domain.entities.operating_hours import OperatingHoursRule


@dataclass(frozen=True)
class HoursCheck:
    within_hours: bool
    message: str | None
    open_time: str | None = None  # HH:MM
    close_time: str | None = None  # HH:MM
    rule: OperatingHoursRule | None = None


def select_rule(rules: Iterable[OperatingHoursRule], target_date: date) -> OperatingHoursRule | None:
    """Specific-date overrides win over day-of-week rules; higher priority wins within a kind."""
    day_index = day_of_week_index(target_date)
    overrides = [r for r in rules if r.specific_date == target_date]
    if overrides:
        return max(overrides, key=lambda r: r.priority)
    weekly = [r for r in rules if r.specific_date is None and r.day_of_week == day_index]
    if weekly:
        return max(weekly, key=lambda r: r.priority)
    return None


def find_shift(time_str: str, shifts: Iterable[Shift]) -> Shift | None:
    """Enabled shift whose [start, end) contains time_str."""
    hhmm = normalize_hhmm(time_str)
    for shift in shifts:
        if not shift.enabled:
            continue
        if normalize_hhmm(shift.start) <= hhmm < normalize_hhmm(shift.end):
            return shift
    return None


def _closed(business: Business, target_date: date, rule: OperatingHoursRule | None) -> HoursCheck:
    if rule is not None and rule.is_override:
        text = message("closed_date", business.locale, date=target_date.isoformat())
    else:
        text = message("closed_weekday", business.locale, day=day_name(day_of_week_index(target_date), business.locale))
    return HoursCheck(within_hours=False, message=text, rule=rule)


def validate_hours(
    business: Business,
    target_date: date | str,
    requested: TimeInterval,
    rule: OperatingHoursRule | None,
) -> HoursCheck:
    """
    Check that `requested` falls fully inside the open hours of `rule`.

    A missing rule means closed. Start is compared against open time and the
    computed local end against close time, both as HH:MM strings.
    """
    target_date = parse_date(target_date)

    if rule is None or rule.is_closed:
        return _closed(business, target_date, rule)

    if not rule.open_time or not rule.close_time:
        return HoursCheck(
            within_hours=False,
            message=message("no_hours", business.locale, day=day_name(day_of_week_index(target_date), business.locale)),
            rule=rule,
        )

    open_time = normalize_hhmm(rule.open_time)
    close_time = normalize_hhmm(rule.close_time)

    local_start = instant_to_local(requested.start, business.timezone)
    local_end = instant_to_local(requested.end, business.timezone)
    start_str = local_start.strftime("%H:%M")
    end_str = local_end.strftime("%H:%M")

    if local_start.date() != target_date or start_str < open_time:
        return HoursCheck(
            within_hours=False,
            message=message("opens_at", business.locale, open=open_time),
            open_time=open_time,
            close_time=close_time,
            rule=rule,
        )

    if local_end.date() != target_date or end_str > close_time:
        return HoursCheck(
            within_hours=False,
            message=message(
                "ends_after_close",
                business.locale,
                duration=requested.duration_minutes,
                end=end_str,
                close=close_time,
            ),
            open_time=open_time,
            close_time=close_time,
            rule=rule,
        )

    if business.shifts and find_shift(start_str, business.shifts) is None:
        return HoursCheck(
            within_hours=False,
            message=message("no_shift", business.locale, time=start_str),
            open_time=open_time,
            close_time=close_time,
            rule=rule,
        )

    return HoursCheck(
        within_hours=True,
        message=None,
        open_time=open_time,
        close_time=close_time,
        rule=rule,
    )
