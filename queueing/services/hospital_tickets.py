"""
Hospital ticket routing.

A hospital ticket carries an ordered department history.  Each entry is a
visit: it is *open* while ``completed`` is false and the first open entry
with a given department title is the ticket's current visit there.
Routing a patient completes the visit of the current department and
appends an open entry for the next one; clearing the ticket completes the
last visit and, once nothing is open, the ticket itself.

Cash patients are only listed in a department's queue (Reception aside)
after payment for that visit is cleared.  A ticket may also carry a
planned department queue which the serving screen advances step by step.

Every public function locks the ticket row, runs in one transaction and
takes an optional ``now`` so callers and tests control the clock.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from django.db import transaction
from django.db.models import Max, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from queueing.models import Department, DepartmentVisit, HospitalTicket, PlannedDepartment, Room
from queueing.services.notify import broadcast_call
from queueing.services.numbering import HOSPITAL_SCOPE, allocate_ticket_number
from queueing.services.timing import day_bounds, duration_seconds

logger = logging.getLogger(__name__)

RECEPTION = 'Reception'
DEFAULT_RECEPTION_ICON = '👋'
CLEARED = DepartmentVisit.CLEARED

# Reception fields editable from the routing endpoints
TICKET_TEXT_FIELDS = {
    'userType': 'user_type',
    'patientName': 'patient_name',
    'reasonForVisit': 'reason_for_visit',
    'receptionistNote': 'receptionist_note',
}


def _locked(ticket_id) -> HospitalTicket:
    ticket = HospitalTicket.objects.select_for_update().filter(pk=ticket_id).first()
    if not ticket:
        raise NotFound('ticket not found')
    return ticket


def _department_icon(title: str) -> str:
    dept = Department.objects.filter(title=title).only('icon').first()
    return dept.icon if dept else ''


def open_entry(ticket: HospitalTicket, department: str) -> Optional[DepartmentVisit]:
    """Return the first uncompleted history entry for ``department``."""
    if not department:
        return None
    return (
        ticket.department_history.filter(department=department, completed=False)
        .order_by('position', 'id')
        .first()
    )


def _append_entry(ticket: HospitalTicket, **fields) -> DepartmentVisit:
    last = ticket.department_history.aggregate(m=Max('position'))['m']
    fields.setdefault('position', 0 if last is None else last + 1)
    return DepartmentVisit.objects.create(ticket=ticket, **fields)


def _apply_ticket_fields(ticket: HospitalTicket, fields: Optional[dict]) -> None:
    """Copy non-empty reception fields onto the ticket."""
    for key, attr in TICKET_TEXT_FIELDS.items():
        value = (fields or {}).get(key)
        if value:
            setattr(ticket, attr, value)


def _resolve_room(room_id) -> Optional[Room]:
    if not room_id:
        return None
    room = Room.objects.filter(pk=room_id).first()
    if room is None:
        raise NotFound('room not found')
    return room


@transaction.atomic
def create_ticket(now=None) -> HospitalTicket:
    """Issue a ticket with a single open Reception visit."""
    now = now or timezone.now()
    ticket_no = allocate_ticket_number(HOSPITAL_SCOPE, HospitalTicket.objects.all(), now)
    ticket = HospitalTicket.objects.create(ticket_no=ticket_no, created_at=now)
    _append_entry(
        ticket,
        department=RECEPTION,
        icon=_department_icon(RECEPTION) or DEFAULT_RECEPTION_ICON,
        timestamp=now,
        position=0,
    )
    logger.info("hospital ticket %s issued", ticket_no)
    return ticket


@transaction.atomic
def assign_room(ticket_id, *, room_id, department: str, now=None) -> HospitalTicket:
    """Attach the serving room to the open visit and start it.

    The waiting time of the visit is fixed at this point.  A ticket
    without an open visit for ``department`` is left unchanged.
    """
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    room = _resolve_room(room_id)
    entry = open_entry(ticket, department)
    if entry is None:
        logger.warning("assign-room: ticket %s has no open %s visit", ticket.ticket_no, department)
        return ticket
    entry.room = room
    if not entry.started_at:
        entry.started_at = now
        entry.actually_started = True
        entry.waiting_duration = duration_seconds(entry.timestamp, now)
    entry.save()
    ticket.save(update_fields=['updated_at'])
    return ticket


def complete_current(ticket: HospitalTicket, *, department: str, note: str = '',
                     room: Optional[Room] = None, now=None) -> DepartmentVisit:
    """Close the ticket's visit to ``department``.

    When no visit is open one is recorded as an instant, already completed
    visit so the history still shows the patient passed through.
    """
    now = now or timezone.now()
    entry = open_entry(ticket, department)
    if entry is not None:
        entry.note = note or ''
        entry.completed = True
        entry.completed_at = now
        if entry.started_at:
            # Hold time is not processing time
            worked = duration_seconds(entry.started_at, now) - (entry.hold_duration or 0)
            entry.processing_duration = max(0, worked)
        if room is not None and not entry.room_id:
            entry.room = room
        entry.save()
        return entry
    return _append_entry(
        ticket,
        department=department,
        icon=_department_icon(department),
        timestamp=now,
        started_at=now,
        completed_at=now,
        processing_duration=0,
        note=note or '',
        completed=True,
        room=room,
    )


def _route_to(ticket: HospitalTicket, department: Department, room: Optional[Room], *,
              current_department: str, note: str = '', cash_cleared: Optional[str] = None,
              fields: Optional[dict] = None, current_room: Optional[Room] = None, now) -> DepartmentVisit:
    """Complete the current visit and open one at ``department``.

    ``room`` is where the patient goes next; ``current_room`` only fills
    the completed visit when it has no room yet.
    """
    complete_current(ticket, department=current_department, note=note, room=current_room, now=now)
    _apply_ticket_fields(ticket, fields)

    planned = ticket.department_queue.filter(department_name=department.title).order_by('order').first()
    queue_cleared = bool(planned and planned.clear_payment == CLEARED)

    entry_cash, paid_at = None, None
    if cash_cleared == CLEARED or queue_cleared:
        entry_cash, paid_at = CLEARED, now

    visit = _append_entry(
        ticket,
        department=department.title,
        icon=department.icon,
        timestamp=now,
        room=room,
        cash_cleared=entry_cash,
        paid_at=paid_at,
    )
    ticket.call = False
    ticket.held = False
    ticket.save()
    logger.info(
        "hospital ticket %s routed %s -> %s (cash %s)",
        ticket.ticket_no, current_department or '-', department.title, entry_cash or 'pending',
    )
    return visit


def _department(department_id) -> Department:
    dept = Department.objects.filter(pk=department_id).first()
    if dept is None:
        raise NotFound(f'Department not found: {department_id}')
    return dept


@transaction.atomic
def move_next(ticket_id, *, next_department_id, current_department: str, note: str = '',
              room_id=None, now=None) -> HospitalTicket:
    """Send the patient from ``current_department`` to another department."""
    if not next_department_id or not current_department:
        raise ValidationError({'detail': 'Missing required fields'})
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    target = _department(next_department_id)
    # The room given here is where the patient was seen
    _route_to(ticket, target, None, current_department=current_department, note=note,
              current_room=_resolve_room(room_id), now=now)
    return ticket


@transaction.atomic
def next_step(ticket_id, *, department_id=None, departments: Optional[Sequence[dict]] = None,
              room_id=None, current_department: str = '', note: str = '',
              cash_cleared: Optional[str] = None, fields: Optional[dict] = None, now=None) -> HospitalTicket:
    """Route a ticket to one department or install a multi-department plan.

    ``departments`` is a list of ``{"departmentId", "roomId"}`` dicts.  It
    replaces the ticket's planned queue and routes to its first entry.
    """
    if not current_department:
        raise ValidationError({'detail': 'Missing current department'})
    now = now or timezone.now()
    ticket = _locked(ticket_id)

    if departments:
        plan: List[Tuple[Department, Optional[Room]]] = []
        for item in departments:
            dept = _department(item.get('departmentId'))
            plan.append((dept, _resolve_room(item.get('roomId'))))
        ticket.department_queue.all().delete()
        for order, (dept, room) in enumerate(plan):
            PlannedDepartment.objects.create(
                ticket=ticket, department=dept, department_name=dept.title,
                room=room, processed=False, order=order,
            )
        ticket.current_queue_index = 0
        first_dept, first_room = plan[0]
        _route_to(ticket, first_dept, first_room, current_department=current_department,
                  note=note, cash_cleared=cash_cleared, fields=fields, now=now)
        logger.info("hospital ticket %s planned through %s", ticket.ticket_no, [d.title for d, _ in plan])
        return ticket

    if not department_id:
        raise ValidationError({'detail': 'Missing department ID'})
    target = _department(department_id)
    _route_to(ticket, target, _resolve_room(room_id), current_department=current_department,
              note=note, cash_cleared=cash_cleared, fields=fields, now=now)
    return ticket


@transaction.atomic
def advance_queue(ticket_id, *, current_department: str = '', note: str = '', now=None) -> Tuple[HospitalTicket, Optional[str]]:
    """Mark the current planned department processed and route to the next.

    Returns ``(ticket, message)``; the message is set once the plan is
    exhausted.
    """
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    plan = list(ticket.department_queue.select_related('department', 'room').order_by('order', 'id'))
    if not plan:
        raise ValidationError({'detail': 'No department queue found'})

    index = ticket.current_queue_index
    if index < len(plan):
        current = plan[index]
        current.processed = True
        current.save(update_fields=['processed'])
    ticket.current_queue_index = index + 1

    if ticket.current_queue_index < len(plan):
        if not current_department:
            raise ValidationError({'detail': 'Missing current department'})
        nxt = plan[ticket.current_queue_index]
        _route_to(ticket, nxt.department, nxt.room, current_department=current_department, note=note, now=now)
        return ticket, None

    ticket.save(update_fields=['current_queue_index', 'updated_at'])
    logger.info("hospital ticket %s finished its department queue", ticket.ticket_no)
    return ticket, 'Department queue completed'


@transaction.atomic
def clear_ticket(ticket_id, *, current_department: str, note: str = '', room_id=None,
                 fields: Optional[dict] = None, now=None) -> HospitalTicket:
    """Complete the current visit; complete the ticket once nothing is open."""
    if not current_department:
        raise ValidationError({'detail': 'Missing required fields'})
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    complete_current(ticket, department=current_department, note=note, room=_resolve_room(room_id), now=now)
    _apply_ticket_fields(ticket, fields)
    if not ticket.department_history.filter(completed=False).exists():
        ticket.completed = True
        ticket.completed_at = now
        ticket.total_duration = duration_seconds(ticket.created_at, now)
        logger.info("hospital ticket %s completed after %ss", ticket.ticket_no, ticket.total_duration)
    ticket.save()
    return ticket


@transaction.atomic
def update_ticket(ticket_id, *, changes: dict, current_department: str = '', note: Optional[str] = None,
                  room_id=None, location: str = '', now=None) -> HospitalTicket:
    """Edit ticket flags; ``held`` toggles the hold clock on the open visit.

    ``changes`` holds model field names.  Setting ``call`` broadcasts the
    call to hall displays after commit.
    """
    now = now or timezone.now()
    ticket = _locked(ticket_id)

    if 'held' in changes and bool(changes['held']) != ticket.held:
        entry = open_entry(ticket, current_department)
        if changes['held']:
            if entry is not None:
                entry.hold_started_at = now
                if note is not None:
                    entry.note = note
                entry.save()
            logger.info("hospital ticket %s held in %s", ticket.ticket_no, current_department or '-')
        else:
            if entry is not None:
                if entry.hold_started_at:
                    entry.hold_duration = (entry.hold_duration or 0) + duration_seconds(entry.hold_started_at, now)
                entry.hold_started_at = None
                room = _resolve_room(room_id)
                if room is not None:
                    entry.room = room
                entry.save()
            logger.info("hospital ticket %s released from hold in %s", ticket.ticket_no, current_department or '-')

    for attr, value in changes.items():
        setattr(ticket, attr, value)
    ticket.save()

    if changes.get('call'):
        transaction.on_commit(lambda: broadcast_call(
            variant='hospital',
            ticket_id=ticket.pk,
            ticket_no=ticket.ticket_no,
            location=location,
            language=ticket.language,
        ))
    return ticket


# ---------------------------------------------------------------------------
# Payment clearance
# ---------------------------------------------------------------------------

def _require_cash(ticket: HospitalTicket) -> None:
    if ticket.user_type != HospitalTicket.CASH:
        raise ValidationError({'detail': 'This ticket is not a cash payment ticket'})


def _clear(entry: DepartmentVisit, now) -> None:
    entry.cash_cleared = CLEARED
    entry.paid_at = now
    entry.save(update_fields=['cash_cleared', 'paid_at'])


def _pending_visits(ticket: HospitalTicket, titles: Optional[Iterable[str]] = None):
    qs = (
        ticket.department_history.filter(completed=False, cash_cleared__isnull=True)
        .exclude(department=RECEPTION)
        .order_by('position', 'id')
    )
    if titles is not None:
        qs = qs.filter(department__in=list(titles))
    return qs


@transaction.atomic
def clear_payment(ticket_id, *, department: Optional[str] = None, clear_all: bool = False,
                  now=None) -> Tuple[HospitalTicket, List[str]]:
    """Clear payment on one open visit, or on every pending one."""
    if not clear_all and not department:
        raise ValidationError({'detail': 'Department is required when not clearing all'})
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    _require_cash(ticket)

    if clear_all:
        cleared = []
        for entry in _pending_visits(ticket):
            _clear(entry, now)
            cleared.append(entry.department)
        if not cleared:
            raise ValidationError({'detail': 'No pending payments found for this ticket'})
    else:
        entry = open_entry(ticket, department)
        if entry is None:
            raise NotFound('Department not found in ticket history')
        if entry.cash_cleared == CLEARED:
            raise ValidationError({'detail': 'Payment already cleared for this department'})
        _clear(entry, now)
        cleared = [department]

    ticket.save(update_fields=['updated_at'])
    logger.info("payment cleared for ticket %s: %s", ticket.ticket_no, ', '.join(cleared))
    return ticket, cleared


@transaction.atomic
def clear_payment_for_departments(ticket_id, *, departments: Sequence[str], now=None) -> Tuple[HospitalTicket, int]:
    """Clear payment for each named department ahead of the patient's arrival.

    Departments without an open visit get a pre-paid open visit appended.
    """
    if not departments or not isinstance(departments, (list, tuple)):
        raise ValidationError({'detail': 'Departments array is required'})
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    _require_cash(ticket)

    count = 0
    for title in departments:
        entry = open_entry(ticket, title)
        if entry is not None:
            if entry.cash_cleared != CLEARED:
                _clear(entry, now)
                count += 1
        else:
            _append_entry(ticket, department=title, timestamp=now, cash_cleared=CLEARED, paid_at=now)
            count += 1
    ticket.save(update_fields=['updated_at'])
    logger.info("payment cleared for ticket %s in %s department(s)", ticket.ticket_no, count)
    return ticket, count


@transaction.atomic
def clear_queue_payment(ticket_id, *, now=None) -> Tuple[HospitalTicket, int]:
    """Clear payment for every unprocessed department of the planned queue."""
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    _require_cash(ticket)
    if not ticket.department_queue.exists():
        raise ValidationError({'detail': 'No department queue found for this ticket'})

    count = (
        ticket.department_queue.filter(processed=False)
        .filter(Q(clear_payment__isnull=True) | ~Q(clear_payment=CLEARED))
        .update(clear_payment=CLEARED)
    )
    if count == 0:
        raise ValidationError({'detail': 'No departments found that need payment clearance'})
    for entry in _pending_visits(ticket):
        _clear(entry, now)
    ticket.save(update_fields=['updated_at'])
    logger.info("queue payment cleared for ticket %s (%s planned)", ticket.ticket_no, count)
    return ticket, count


@transaction.atomic
def clear_selective_payment(ticket_id, *, selected: Sequence[str], now=None) -> Tuple[HospitalTicket, List[str]]:
    """Clear payment for the selected department titles only."""
    if not selected or not isinstance(selected, (list, tuple)):
        raise ValidationError({'detail': 'Selected departments array is required'})
    now = now or timezone.now()
    ticket = _locked(ticket_id)
    _require_cash(ticket)

    cleared: List[str] = []
    planned = (
        ticket.department_queue.filter(processed=False, department_name__in=list(selected))
        .filter(Q(clear_payment__isnull=True) | ~Q(clear_payment=CLEARED))
        .order_by('order', 'id')
    )
    for item in planned:
        item.clear_payment = CLEARED
        item.save(update_fields=['clear_payment'])
        cleared.append(item.department_name)
    for entry in _pending_visits(ticket, selected):
        _clear(entry, now)
        if entry.department not in cleared:
            cleared.append(entry.department)
    if not cleared:
        raise ValidationError({'detail': 'No departments found that need payment clearance'})
    ticket.save(update_fields=['updated_at'])
    logger.info("selective payment cleared for ticket %s: %s", ticket.ticket_no, ', '.join(cleared))
    return ticket, cleared


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

def _with_open_visit(department: str, **extra):
    return DepartmentVisit.objects.filter(department=department, completed=False, **extra).values('ticket_id')


def queue_for(*, department: Optional[str] = None, unassigned: bool = False, held: bool = False,
              day=None) -> List[HospitalTicket]:
    """Tickets waiting on a serving screen for ``day``.

    Emergencies come first, then cash patients in order of payment, then
    everyone else in arrival order.
    """
    start, end = day_bounds(day)
    qs = HospitalTicket.objects.filter(no_show=False, completed=False, created_at__gte=start, created_at__lt=end)

    if held and department:
        qs = qs.filter(held=True, pk__in=_with_open_visit(department))
    elif unassigned:
        has_history = DepartmentVisit.objects.values('ticket_id')
        qs = qs.filter(Q(pk__in=_with_open_visit(RECEPTION)) | ~Q(pk__in=has_history)).filter(held=held)
    elif department:
        qs = qs.filter(pk__in=_with_open_visit(department))
        if not held:
            qs = qs.filter(held=False)
        if department != RECEPTION:
            qs = qs.filter(
                ~Q(user_type=HospitalTicket.CASH)
                | Q(pk__in=_with_open_visit(department, cash_cleared=CLEARED))
            )

    tickets = list(qs.order_by('created_at', 'id').prefetch_related('department_history', 'department_queue'))
    return sort_queue(tickets, department)


def _paid_at(ticket: HospitalTicket, department: Optional[str]):
    for visit in ticket.department_history.all():
        if visit.department == department and not visit.completed:
            return visit.paid_at
    return None


def sort_queue(tickets: List[HospitalTicket], department: Optional[str]) -> List[HospitalTicket]:
    """Emergency first; cash tickets by payment time, others by creation time."""
    def key(t: HospitalTicket):
        when = t.created_at
        if t.user_type == HospitalTicket.CASH:
            when = _paid_at(t, department) or t.created_at
        return (not t.emergency, when, t.pk)
    return sorted(tickets, key=key)


def completed_for(day=None) -> List[HospitalTicket]:
    start, end = day_bounds(day)
    return list(
        HospitalTicket.objects.filter(completed=True, completed_at__gte=start, completed_at__lt=end)
        .order_by('-completed_at', '-id')
        .prefetch_related('department_history', 'department_queue')
    )
