"""
Duration bookkeeping helpers shared by the bank and hospital ticket services.

All durations are whole seconds.  Datetimes are expected to be timezone
aware; the local day boundaries follow ``settings.TIME_ZONE``.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple, Union

from django.utils import timezone
from rest_framework.exceptions import ValidationError


def duration_seconds(start: Optional[datetime], end: datetime) -> int:
    """Return the whole seconds elapsed between ``start`` and ``end``.

    A missing ``start`` counts as zero.  Clock skew between writers can
    produce an ``end`` before ``start``; such intervals count as zero too.
    """
    if start is None or end is None:
        return 0
    seconds = Decimal(str((end - start).total_seconds()))
    rounded = int(seconds.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    return max(0, rounded)


def format_duration(seconds: int) -> str:
    seconds = max(0, int(seconds or 0))
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m {secs}s"


def parse_day(value: Union[str, date, None]) -> date:
    if value is None or value == '':
        return timezone.localdate()
    if isinstance(value, datetime):
        return timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError({'date': 'expected YYYY-MM-DD'})


def day_bounds(value: Union[str, date, None] = None) -> Tuple[datetime, datetime]:
    """Return the aware ``[start, end)`` datetimes of a local day."""
    day = parse_day(value)
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(day, time.min), tz)
    end = timezone.make_aware(datetime.combine(day + timedelta(days=1), time.min), tz)
    return start, end


def parse_datetime_param(value: Optional[str], name: str) -> Optional[datetime]:
    """Parse a ``YYYY-MM-DD`` or ISO-8601 query parameter into an aware datetime."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError({name: 'expected an ISO-8601 date or datetime'})
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, timezone.get_current_timezone())
    return parsed
