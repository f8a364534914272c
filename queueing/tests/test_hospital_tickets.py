"""Hospital routing: department history, holds, plans and cash clearance."""
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from queueing.models import HospitalTicket, Room
from queueing.services import hospital_tickets as routing
from queueing.services import stats
from queueing.services.timing import day_bounds

pytestmark = pytest.mark.django_db

CASH, INSURANCE = HospitalTicket.CASH, HospitalTicket.INSURANCE


@pytest.fixture
def ticket(reception):
    return routing.create_ticket()


@pytest.fixture
def lab_room(laboratory):
    return Room.objects.create(department=laboratory, room_number='1')


def _open(ticket):
    return list(ticket.department_history.filter(completed=False).values_list('department', flat=True))


def test_new_ticket_waits_at_reception(ticket):
    entries = list(ticket.department_history.all())
    assert ticket.ticket_no == 'A01'
    assert [(e.department, e.icon, e.completed) for e in entries] == [('Reception', '👋', False)]


def test_routing_completes_current_visit_and_opens_next(ticket, laboratory):
    ticket.call = True
    ticket.save()
    routing.next_step(ticket.pk, department_id=laboratory.pk, current_department='Reception',
                      note='fasting bloods', fields={'userType': INSURANCE, 'patientName': 'Nakato'})
    ticket.refresh_from_db()
    reception_visit, lab_visit = ticket.department_history.all()
    assert reception_visit.completed and reception_visit.note == 'fasting bloods'
    assert lab_visit.department == 'Laboratory' and not lab_visit.completed
    assert lab_visit.icon == '🧪'
    assert ticket.user_type == INSURANCE and ticket.patient_name == 'Nakato'
    assert ticket.call is False


def test_routing_without_an_open_visit_records_an_instant_one(ticket, laboratory, pharmacy):
    routing.next_step(ticket.pk, department_id=pharmacy.pk, current_department='Laboratory')
    visits = list(ticket.department_history.values_list('department', 'completed'))
    assert visits == [('Reception', False), ('Laboratory', True), ('Pharmacy', False)]


def test_unknown_department_is_not_found(ticket):
    with pytest.raises(NotFound):
        routing.next_step(ticket.pk, department_id=9999, current_department='Reception')
    with pytest.raises(ValidationError):
        routing.next_step(ticket.pk, current_department='Reception')


def test_assign_room_fixes_waiting_time(ticket, laboratory, lab_room):
    t0 = timezone.now()
    routing.next_step(ticket.pk, department_id=laboratory.pk, current_department='Reception', now=t0)
    routing.assign_room(ticket.pk, room_id=lab_room.pk, department='Laboratory', now=t0 + timedelta(seconds=300))
    visit = ticket.department_history.get(department='Laboratory')
    assert visit.room == lab_room
    assert visit.actually_started is True
    assert visit.waiting_duration == 300


def test_hold_time_is_not_processing_time(ticket, laboratory, lab_room):
    t0 = timezone.now()
    routing.next_step(ticket.pk, department_id=laboratory.pk, current_department='Reception', now=t0)
    routing.assign_room(ticket.pk, room_id=lab_room.pk, department='Laboratory', now=t0)
    routing.update_ticket(ticket.pk, changes={'held': True}, current_department='Laboratory',
                          now=t0 + timedelta(seconds=100))
    routing.update_ticket(ticket.pk, changes={'held': False}, current_department='Laboratory',
                          now=t0 + timedelta(seconds=160))
    done = routing.clear_ticket(ticket.pk, current_department='Laboratory', now=t0 + timedelta(seconds=200))

    visit = done.department_history.get(department='Laboratory')
    assert visit.hold_duration == 60
    assert visit.processing_duration == 140
    assert done.completed is True
    assert done.completed_at == t0 + timedelta(seconds=200)


def test_clear_ticket_completes_when_nothing_is_open(ticket):
    start = ticket.created_at
    done = routing.clear_ticket(ticket.pk, current_department='Reception', now=start + timedelta(minutes=5))
    assert done.completed is True
    assert done.total_duration == 300
    assert [t.pk for t in routing.completed_for()] == [ticket.pk]


def test_planned_queue_is_advanced_step_by_step(ticket, laboratory, pharmacy, lab_room):
    routing.next_step(
        ticket.pk,
        departments=[{'departmentId': laboratory.pk, 'roomId': lab_room.pk}, {'departmentId': pharmacy.pk}],
        current_department='Reception',
    )
    ticket.refresh_from_db()
    assert ticket.current_queue_index == 0
    assert list(ticket.department_queue.values_list('department_name', flat=True)) == ['Laboratory', 'Pharmacy']
    assert _open(ticket) == ['Laboratory']
    assert ticket.department_history.get(department='Laboratory').room == lab_room

    ticket, message = routing.advance_queue(ticket.pk, current_department='Laboratory')
    assert message is None
    assert ticket.current_queue_index == 1
    assert _open(ticket) == ['Pharmacy']

    ticket, message = routing.advance_queue(ticket.pk, current_department='Pharmacy')
    assert message == 'Department queue completed'
    assert ticket.current_queue_index == 2
    assert all(ticket.department_queue.values_list('processed', flat=True))


def test_advance_without_plan(ticket):
    with pytest.raises(ValidationError):
        routing.advance_queue(ticket.pk)


def test_cash_patient_waits_for_payment(ticket, laboratory):
    insured = routing.create_ticket()
    for t, kind in ((ticket, CASH), (insured, INSURANCE)):
        routing.next_step(t.pk, department_id=laboratory.pk, current_department='Reception',
                          fields={'userType': kind})

    listed = [t.pk for t in routing.queue_for(department='Laboratory')]
    assert listed == [insured.pk]

    _, cleared = routing.clear_payment(ticket.pk, department='Laboratory')
    assert cleared == ['Laboratory']
    listed = [t.pk for t in routing.queue_for(department='Laboratory')]
    assert set(listed) == {ticket.pk, insured.pk}

    with pytest.raises(ValidationError):
        routing.clear_payment(ticket.pk, department='Laboratory')
    with pytest.raises(ValidationError):
        routing.clear_payment(insured.pk, department='Laboratory')


def test_clear_all_payments(ticket, laboratory):
    routing.next_step(ticket.pk, department_id=laboratory.pk, current_department='Reception',
                      fields={'userType': CASH})
    _, cleared = routing.clear_payment(ticket.pk, clear_all=True)
    assert cleared == ['Laboratory']
    with pytest.raises(ValidationError):
        routing.clear_payment(ticket.pk, clear_all=True)


def test_prepaid_departments_are_appended(ticket, laboratory):
    ticket.user_type = CASH
    ticket.save()
    _, count = routing.clear_payment_for_departments(ticket.pk, departments=['Laboratory', 'Pharmacy'])
    assert count == 2
    visits = ticket.department_history.filter(department__in=['Laboratory', 'Pharmacy'])
    assert all(v.cash_cleared == 'Cleared' and v.paid_at for v in visits)


def test_cleared_plan_carries_payment_to_the_visit(ticket, laboratory, pharmacy):
    routing.next_step(ticket.pk, departments=[{'departmentId': laboratory.pk}, {'departmentId': pharmacy.pk}],
                      current_department='Reception', fields={'userType': CASH})
    _, count = routing.clear_queue_payment(ticket.pk)
    assert count == 2
    assert ticket.department_history.get(department='Laboratory').cash_cleared == 'Cleared'

    routing.advance_queue(ticket.pk, current_department='Laboratory')
    pharmacy_visit = ticket.department_history.get(department='Pharmacy')
    assert pharmacy_visit.cash_cleared == 'Cleared'

    with pytest.raises(ValidationError):
        routing.clear_queue_payment(ticket.pk)


def test_selective_payment(ticket, laboratory, pharmacy):
    routing.next_step(ticket.pk, departments=[{'departmentId': laboratory.pk}, {'departmentId': pharmacy.pk}],
                      current_department='Reception', fields={'userType': CASH})
    _, cleared = routing.clear_selective_payment(ticket.pk, selected=['Pharmacy'])
    assert cleared == ['Pharmacy']
    planned = dict(ticket.department_queue.values_list('department_name', 'clear_payment'))
    assert planned == {'Laboratory': None, 'Pharmacy': 'Cleared'}


def test_emergencies_jump_the_queue(reception):
    first = routing.create_ticket()
    second = routing.create_ticket()
    second.emergency = True
    second.save()
    assert [t.pk for t in routing.queue_for(department='Reception')] == [second.pk, first.pk]


def test_unassigned_and_held_listings(ticket, laboratory):
    other = routing.create_ticket()
    routing.next_step(other.pk, department_id=laboratory.pk, current_department='Reception')
    assert [t.pk for t in routing.queue_for(unassigned=True)] == [ticket.pk]

    routing.update_ticket(other.pk, changes={'held': True}, current_department='Laboratory')
    assert routing.queue_for(department='Laboratory') == []
    assert [t.pk for t in routing.queue_for(department='Laboratory', held=True)] == [other.pk]


def test_no_show_tickets_leave_the_queue(ticket):
    routing.update_ticket(ticket.pk, changes={'no_show': True})
    assert routing.queue_for(department='Reception') == []


def test_call_is_broadcast_after_commit(ticket, monkeypatch, django_capture_on_commit_callbacks):
    calls = []
    monkeypatch.setattr(routing, 'broadcast_call', lambda **kw: calls.append(kw))
    with django_capture_on_commit_callbacks(execute=True):
        routing.update_ticket(ticket.pk, changes={'call': True}, location='Reception room 1')
    assert [(c['ticket_no'], c['location'], c['variant']) for c in calls] == [('A01', 'Reception room 1', 'hospital')]


def test_next_step_needs_the_current_department(ticket, laboratory):
    with pytest.raises(ValidationError):
        routing.next_step(ticket.pk, department_id=laboratory.pk, current_department='')
    visits = list(ticket.department_history.values_list('department', 'completed'))
    assert visits == [('Reception', False)]


def test_completed_listing_is_newest_first(reception):
    t0 = day_bounds()[0] + timedelta(hours=9)
    early = routing.create_ticket(now=t0)
    late = routing.create_ticket(now=t0)
    routing.clear_ticket(early.pk, current_department='Reception', now=t0 + timedelta(minutes=5))
    routing.clear_ticket(late.pk, current_department='Reception', now=t0 + timedelta(minutes=20))
    assert [t.pk for t in routing.completed_for()] == [late.pk, early.pk]


def test_clear_payment_for_a_department_not_visited(ticket):
    ticket.user_type = CASH
    ticket.save()
    with pytest.raises(NotFound):
        routing.clear_payment(ticket.pk, department='Laboratory')


def test_prepaying_clears_an_open_visit_in_place(ticket, laboratory):
    routing.next_step(ticket.pk, department_id=laboratory.pk, current_department='Reception',
                      fields={'userType': CASH})
    _, count = routing.clear_payment_for_departments(ticket.pk, departments=['Laboratory'])
    assert count == 1
    visits = list(ticket.department_history.filter(department='Laboratory'))
    assert len(visits) == 1
    assert visits[0].cash_cleared == 'Cleared' and visits[0].paid_at is not None
    assert visits[0].completed is False


def test_hospital_dashboard_counts(reception):
    t0 = day_bounds()[0] + timedelta(hours=9)
    served = routing.create_ticket(now=t0)
    absent = routing.create_ticket(now=t0 + timedelta(minutes=30))
    routing.create_ticket(now=t0 + timedelta(hours=1))
    routing.clear_ticket(served.pk, current_department='Reception', now=t0 + timedelta(minutes=10))
    routing.update_ticket(absent.pk, changes={'no_show': True})

    data = stats.hospital_dashboard()
    assert (data['totalTickets'], data['ticketsServed'], data['waitingTickets'], data['cancelledTickets']) == (3, 1, 1, 1)
    assert data['ticketsPerHour'][9] == 2
    assert data['ticketsPerHour'][10] == 1
    assert sum(data['ticketsPerHour']) == 3
