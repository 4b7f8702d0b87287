# app/services/restriction_service.py
"""
Zone time restrictions (rush hour, street cleaning, permit-only, ...).

Zone.restrictions JSON:
    {"time_restrictions": [
        {"start_time": "07:00", "end_time": "09:00", "days_of_week": [1, 2, 3, 4, 5],
         "restriction_type": "RUSH_HOUR", "description": "Morning rush hour"}
    ]}

days_of_week uses 0 = Sunday … 6 = Saturday.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, time
from typing import Optional

from app.services.session_lifecycle import hours_to_timedelta

UPCOMING_WARNING_WINDOW = timedelta(minutes=30)

RESTRICTION_MESSAGES = {
    "RUSH_HOUR": "No parking during rush hour",
    "STREET_CLEANING": "Street cleaning in progress",
    "PERMIT_ONLY": "Permit holders only",
    "NO_PARKING": "No parking allowed",
    "LOADING_ZONE": "Loading zone active",
}


@dataclass
class ActiveRestriction:
    type: str
    description: str
    active_until: Optional[datetime] = None


@dataclass
class RestrictionWarning:
    type: str
    message: str
    warning_time: Optional[datetime] = None


@dataclass
class RestrictionCheckResult:
    can_park: bool = True
    restrictions: list[ActiveRestriction] = field(default_factory=list)
    warnings: list[RestrictionWarning] = field(default_factory=list)


def sunday_based_weekday(moment: datetime) -> int:
    return (moment.weekday() + 1) % 7


def _parse_hhmm(value: str) -> time:
    hour, minute = value.split(":")
    return time(int(hour), int(minute))


def _restriction_window(day: datetime, restriction: dict) -> tuple[datetime, datetime]:
    day_start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    start = datetime.combine(day_start.date(), _parse_hhmm(restriction["start_time"]))
    end = datetime.combine(day_start.date(), _parse_hhmm(restriction["end_time"]))
    if end < start:  # crosses midnight
        end += timedelta(days=1)
    return start, end


def _overlaps(requested_start, requested_end, window_start, window_end) -> bool:
    return (
        (window_start <= requested_start < window_end)
        or (window_start < requested_end <= window_end)
        or (requested_start < window_start and requested_end > window_end)
    )


def check_zone_restrictions(zone, requested_start: datetime, duration_hours) -> RestrictionCheckResult:
    """Can a vehicle park in `zone` from requested_start for duration_hours?"""
    result = RestrictionCheckResult()
    time_restrictions = (zone.restrictions or {}).get("time_restrictions") or []
    if not time_restrictions:
        return result

    requested_end = requested_start + hours_to_timedelta(duration_hours)
    weekday = sunday_based_weekday(requested_start)

    for restriction in time_restrictions:
        if weekday not in restriction.get("days_of_week", []):
            continue

        restriction_type = restriction.get("restriction_type") or "TIME_RESTRICTION"
        window_start, window_end = _restriction_window(requested_start, restriction)

        if _overlaps(requested_start, requested_end, window_start, window_end):
            result.can_park = False
            result.restrictions.append(ActiveRestriction(
                type=restriction_type,
                description=restriction.get("description")
                or f"Parking restricted {restriction['start_time']}-{restriction['end_time']}",
                active_until=window_end,
            ))

        until_start = window_start - requested_end
        if timedelta(0) < until_start <= UPCOMING_WARNING_WINDOW:
            result.warnings.append(RestrictionWarning(
                type=restriction_type,
                message=f"{restriction.get('description') or 'Parking restriction'} "
                        f"begins at {restriction['start_time']}",
                warning_time=window_start,
            ))

    return result


def format_restriction_message(restriction: ActiveRestriction) -> str:
    message = RESTRICTION_MESSAGES.get(restriction.type, restriction.description)
    if restriction.active_until:
        return f"{message} until {restriction.active_until.strftime('%I:%M %p').lstrip('0')}"
    return message
