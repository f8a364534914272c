"""
Bank ticket lifecycle.

A ticket moves through ``Not Served -> Serving -> Hold / Served``.  Each
status has an entry timestamp and an accumulator; leaving a status adds
the time spent in it to the accumulator so a ticket that is put on hold
and resumed several times reports the sum of its visits.  ``Served`` is
terminal.  Moving a ticket back to ``Not Served`` is only possible by
transferring it to another queue.

All mutations lock the ticket row and write a
:class:`~queueing.models.BankTicketTransition` per accepted status change.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from queueing.exceptions import InvalidTransition
from queueing.models import BankQueue, BankQueueSubItem, BankTicket, BankTicketTransition, Branch, User
from queueing.services.audit import log_action
from queueing.services.notify import broadcast_call
from queueing.services.numbering import allocate_ticket_number, bank_scope
from queueing.services.service_points import active_counter
from queueing.services.timing import duration_seconds

logger = logging.getLogger(__name__)

NOT_SERVED = BankTicket.NOT_SERVED
SERVING = BankTicket.SERVING
HOLD = BankTicket.HOLD
SERVED = BankTicket.SERVED

TRANSITIONS = {
    NOT_SERVED: {SERVING},
    SERVING: {HOLD, SERVED, NOT_SERVED},
    HOLD: {SERVING, SERVED, NOT_SERVED},
    SERVED: set(),
}
# Edges only reachable through transfer_ticket
TRANSFER_ONLY = {(SERVING, NOT_SERVED), (HOLD, NOT_SERVED)}

# status -> (entry timestamp field, accumulator field)
STATUS_FIELDS = {
    NOT_SERVED: ('not_served_at', 'not_served_duration'),
    SERVING: ('serving_at', 'serving_duration'),
    HOLD: ('hold_at', 'hold_duration'),
}


def can_transition(current: str, new: str, *, transfer: bool = False) -> bool:
    """Return True if a ticket may move from ``current`` to ``new``."""
    if new not in TRANSITIONS.get(current, set()):
        return False
    if (current, new) in TRANSFER_ONLY and not transfer:
        return False
    return True


def apply_status(ticket: BankTicket, new_status: str, now) -> None:
    """Move ``ticket`` to ``new_status`` updating timestamps and accumulators.

    The caller has already validated the transition.
    """
    left = STATUS_FIELDS.get(ticket.ticket_status)
    if left:
        at_field, acc_field = left
        elapsed = duration_seconds(getattr(ticket, at_field), now)
        setattr(ticket, acc_field, (getattr(ticket, acc_field) or 0) + elapsed)
    entered = STATUS_FIELDS.get(new_status)
    if entered:
        setattr(ticket, entered[0], now)
    if new_status == SERVED:
        ticket.served_at = now
        ticket.total_duration = duration_seconds(ticket.created_at, now)
    ticket.ticket_status = new_status


def _record(ticket: BankTicket, old: Optional[str], new: str, user, now, reason: str = '') -> BankTicketTransition:
    return BankTicketTransition.objects.create(
        ticket=ticket,
        from_status=old,
        to_status=new,
        operator=user if getattr(user, 'pk', None) else None,
        timestamp=now,
        reason=reason[:255],
    )


def _locked(ticket_id) -> BankTicket:
    ticket = (
        BankTicket.objects.select_for_update()
        .filter(pk=ticket_id)
        .first()
    )
    if not ticket:
        raise NotFound('ticket not found')
    return ticket


def _announce(ticket: BankTicket) -> None:
    location = f"Counter {ticket.counter.counter_number}" if ticket.counter_id else ''
    transaction.on_commit(lambda: broadcast_call(
        variant='bank',
        ticket_id=ticket.pk,
        ticket_no=ticket.ticket_no,
        location=location,
        language=ticket.language,
    ))


@transaction.atomic
def create_ticket(*, branch: Branch, queue: BankQueue, issue_description: str,
                  sub_item: Optional[BankQueueSubItem] = None, language: str = 'English',
                  now=None) -> BankTicket:
    """Issue a new ``Not Served`` ticket numbered within the branch's day."""
    now = now or timezone.now()
    if sub_item is not None and sub_item.queue_id != queue.pk:
        raise ValidationError({'subItemId': 'sub item does not belong to the queue'})
    ticket_no = allocate_ticket_number(bank_scope(branch.pk), BankTicket.objects.filter(branch=branch), now)
    ticket = BankTicket.objects.create(
        ticket_no=ticket_no,
        branch=branch,
        queue=queue,
        sub_item=sub_item,
        issue_description=issue_description,
        language=language or 'English',
        ticket_status=NOT_SERVED,
        not_served_at=now,
        created_at=now,
    )
    _record(ticket, None, NOT_SERVED, None, now, 'issued')
    logger.info("bank ticket %s issued at branch %s queue %s", ticket_no, branch.pk, queue.pk)
    return ticket


@transaction.atomic
def update_ticket(ticket_id, *, user: User, status: Optional[str] = None,
                  issue_description: Optional[str] = None, justify_reason: Optional[str] = None,
                  language: Optional[str] = None, call_again: Optional[bool] = None,
                  reason: str = '', now=None) -> BankTicket:
    """Apply a status change and/or field edits to a ticket.

    Raises :class:`InvalidTransition` before touching the row when the
    requested status cannot be reached from the current one.
    """
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    old = ticket.ticket_status

    counter = None
    if status is not None:
        if not can_transition(old, status):
            raise InvalidTransition(f'cannot move ticket from {old} to {status}')
        if status == SERVING:
            counter = active_counter(user)
            if counter is None:
                raise ValidationError({'detail': 'No active counter found for the user'})

    if status is not None:
        apply_status(ticket, status, now)
        if counter is not None:
            ticket.counter = counter
            ticket.call_again = False
        _record(ticket, old, status, user, now, reason)
        logger.info("bank ticket %s: %s -> %s by %s", ticket.ticket_no, old, status, getattr(user, 'username', '-'))

    if issue_description is not None:
        ticket.issue_description = issue_description
    if justify_reason is not None:
        ticket.justify_reason = justify_reason
    if language is not None:
        ticket.language = language

    recall = False
    if call_again is not None:
        if call_again and ticket.ticket_status != SERVING:
            raise InvalidTransition('only a ticket being served can be called again')
        ticket.call_again = bool(call_again)
        recall = bool(call_again)

    ticket.save()
    if status == SERVING or recall:
        _announce(ticket)
    return ticket


@transaction.atomic
def transfer_ticket(ticket_id, *, user: User, queue: BankQueue, sub_item: Optional[BankQueueSubItem] = None,
                    issue_description: Optional[str] = None, reason: str = '', now=None) -> BankTicket:
    """Send a Serving/Hold ticket back to ``Not Served`` on another queue."""
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    old = ticket.ticket_status
    if not can_transition(old, NOT_SERVED, transfer=True):
        raise InvalidTransition(f'cannot transfer a ticket in status {old}')
    if sub_item is not None and sub_item.queue_id != queue.pk:
        raise ValidationError({'subItemId': 'sub item does not belong to the queue'})

    apply_status(ticket, NOT_SERVED, now)
    from_queue = ticket.queue_id
    ticket.queue = queue
    ticket.sub_item = sub_item
    if issue_description:
        ticket.issue_description = issue_description
    ticket.counter = None
    ticket.call_again = False
    ticket.save()
    _record(ticket, old, NOT_SERVED, user, now, reason or 'transfer')
    log_action(user=user, action='ticket_transfer', object_type='bank_ticket', object_id=ticket.pk,
               detail={'fromQueue': from_queue, 'toQueue': queue.pk})
    logger.info("bank ticket %s transferred from queue %s to %s", ticket.ticket_no, from_queue, queue.pk)
    return ticket
