"""Bank ticket lifecycle: transitions, duration bookkeeping and transfers."""
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from queueing.exceptions import InvalidTransition
from queueing.models import ActivityLog, BankQueueSubItem, BankTicket
from queueing.services import bank_tickets as lifecycle
from queueing.services.service_points import take_counter

pytestmark = pytest.mark.django_db

NS, SERVING, HOLD, SERVED = BankTicket.NOT_SERVED, BankTicket.SERVING, BankTicket.HOLD, BankTicket.SERVED


@pytest.fixture
def counter(teller, queue):
    return take_counter(teller, 4, queue)


@pytest.fixture
def ticket(branch, queue):
    return lifecycle.create_ticket(branch=branch, queue=queue, issue_description='Deposit cash')


def test_create_ticket_records_issue(ticket):
    assert ticket.ticket_status == NS
    assert ticket.not_served_at == ticket.created_at
    assert list(ticket.transitions.values_list('from_status', 'to_status')) == [(None, NS)]


def test_durations_accumulate_over_hold_and_resume(branch, queue, teller, counter):
    t0 = timezone.now()
    ticket = lifecycle.create_ticket(branch=branch, queue=queue, issue_description='Loan query', now=t0)

    lifecycle.update_ticket(ticket.pk, user=teller, status=SERVING, now=t0 + timedelta(seconds=60))
    lifecycle.update_ticket(ticket.pk, user=teller, status=HOLD, now=t0 + timedelta(seconds=90))
    lifecycle.update_ticket(ticket.pk, user=teller, status=SERVING, now=t0 + timedelta(seconds=110))
    done = lifecycle.update_ticket(ticket.pk, user=teller, status=SERVED, now=t0 + timedelta(seconds=150))

    assert done.ticket_status == SERVED
    assert done.not_served_duration == 60
    assert done.serving_duration == 30 + 40
    assert done.hold_duration == 20
    assert done.total_duration == 150
    assert done.served_at == t0 + timedelta(seconds=150)
    assert done.counter_id == counter.pk
    assert done.transitions.count() == 5


def test_serving_requires_an_active_counter(ticket, teller):
    with pytest.raises(ValidationError):
        lifecycle.update_ticket(ticket.pk, user=teller, status=SERVING)
    ticket.refresh_from_db()
    assert ticket.ticket_status == NS


@pytest.mark.parametrize('path', [
    [HOLD],
    [SERVED],
    [SERVING, SERVING],
    [SERVING, SERVED, SERVING],
    [SERVING, NS],
])
def test_invalid_transitions_are_rejected(ticket, teller, counter, path):
    *allowed, refused = path
    for status in allowed:
        lifecycle.update_ticket(ticket.pk, user=teller, status=status)
    before = BankTicket.objects.get(pk=ticket.pk)
    with pytest.raises(InvalidTransition):
        lifecycle.update_ticket(ticket.pk, user=teller, status=refused)
    after = BankTicket.objects.get(pk=ticket.pk)
    assert after.ticket_status == before.ticket_status
    assert after.transitions.count() == before.transitions.count()


def test_call_again_only_while_serving(ticket, teller, counter):
    with pytest.raises(InvalidTransition):
        lifecycle.update_ticket(ticket.pk, user=teller, call_again=True)
    lifecycle.update_ticket(ticket.pk, user=teller, status=SERVING)
    recalled = lifecycle.update_ticket(ticket.pk, user=teller, call_again=True)
    assert recalled.call_again is True


def test_calls_are_broadcast_after_commit(ticket, teller, counter, monkeypatch, django_capture_on_commit_callbacks):
    calls = []
    monkeypatch.setattr(lifecycle, 'broadcast_call', lambda **kw: calls.append(kw))
    with django_capture_on_commit_callbacks(execute=True):
        lifecycle.update_ticket(ticket.pk, user=teller, status=SERVING)
    assert calls == [{
        'variant': 'bank',
        'ticket_id': ticket.pk,
        'ticket_no': 'A01',
        'location': 'Counter 4',
        'language': 'English',
    }]


def test_transfer_moves_ticket_back_to_waiting(ticket, teller, counter, loans_queue):
    t0 = timezone.now()
    lifecycle.update_ticket(ticket.pk, user=teller, status=SERVING, now=t0)
    moved = lifecycle.transfer_ticket(ticket.pk, user=teller, queue=loans_queue, reason='wrong queue',
                                      now=t0 + timedelta(seconds=45))
    assert moved.ticket_status == NS
    assert moved.queue_id == loans_queue.pk
    assert moved.counter_id is None
    assert moved.serving_duration == 45
    assert moved.not_served_at == t0 + timedelta(seconds=45)
    last = moved.transitions.order_by('-id').first()
    assert (last.from_status, last.to_status, last.reason) == (SERVING, NS, 'wrong queue')
    assert ActivityLog.objects.filter(action='ticket_transfer', object_id=str(ticket.pk)).exists()


def test_waiting_ticket_cannot_be_transferred(ticket, teller, loans_queue):
    with pytest.raises(InvalidTransition):
        lifecycle.transfer_ticket(ticket.pk, user=teller, queue=loans_queue)


def test_sub_item_must_belong_to_queue(branch, queue, loans_queue):
    foreign = BankQueueSubItem.objects.create(queue=loans_queue, name='Mortgage')
    with pytest.raises(ValidationError):
        lifecycle.create_ticket(branch=branch, queue=queue, sub_item=foreign, issue_description='x')


def test_can_transition_table():
    assert lifecycle.can_transition(NS, SERVING)
    assert not lifecycle.can_transition(SERVED, NS, transfer=True)
    assert not lifecycle.can_transition(HOLD, NS)
    assert lifecycle.can_transition(HOLD, NS, transfer=True)
