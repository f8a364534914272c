"""
Daily ticket number generation.

Numbers run ``A01`` .. ``A99``, ``B01`` .. ``Z99`` and then wrap back to
``A01``.  The sequence restarts every local day.  Callers must run inside
``transaction.atomic``.  Allocation locks the day's
:class:`~queueing.models.TicketSequence` row of the numbering scope, so
two kiosks printing at the same moment queue up behind each other and the
second one reads the ticket the first one just committed.
"""
from __future__ import annotations

import logging
import string
from typing import Optional

from django.db.models import QuerySet

from queueing.models import TicketSequence

from .timing import day_bounds, parse_day

logger = logging.getLogger(__name__)

LETTERS = string.ascii_uppercase
MAX_NUMBER = 99

HOSPITAL_SCOPE = 'hospital'


def bank_scope(branch_id) -> str:
    return f'bank:{branch_id}'


def next_ticket_number(previous: Optional[str]) -> str:
    """Return the number that follows ``previous`` (``None`` starts the day)."""
    if not previous:
        return 'A01'
    prefix = previous[0].upper()
    try:
        number = int(previous[1:]) + 1
    except ValueError:
        return 'A01'
    if prefix not in LETTERS:
        return 'A01'
    if number > MAX_NUMBER:
        number = 1
        index = LETTERS.index(prefix) + 1
        prefix = LETTERS[index % len(LETTERS)]
    return f"{prefix}{number:02d}"


def lock_sequence(scope: str, day) -> TicketSequence:
    """Return the day's sequence row for ``scope``, locked until commit.

    The row is created on the first ticket of the day; the unique
    ``(scope, day)`` pair makes a concurrent creator fall back to the
    existing row.
    """
    sequence, _ = TicketSequence.objects.get_or_create(scope=scope, day=day)
    return TicketSequence.objects.select_for_update().get(pk=sequence.pk)


def allocate_ticket_number(scope: str, queryset: QuerySet, now=None) -> str:
    """Return the next number for today's tickets in ``queryset``.

    ``queryset`` holds the tickets of the numbering ``scope`` (a branch
    for bank tickets, the whole installation for hospital tickets).  The
    latest ticket is read only after the sequence row is locked.
    """
    day = parse_day(now)
    sequence = lock_sequence(scope, day)
    start, end = day_bounds(day)
    latest = (
        queryset.filter(created_at__gte=start, created_at__lt=end)
        .order_by('-created_at', '-id')
        .first()
    )
    number = next_ticket_number(latest.ticket_no if latest else None)
    sequence.last_number = number
    sequence.save(update_fields=['last_number', 'updated_at'])
    logger.debug("allocated %s in %s for %s", number, scope, day)
    return number
