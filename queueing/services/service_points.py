"""
Counters (bank) and rooms (hospital): the service points staff take for a day.

A user holds at most one active service point.  Taking a new one
deactivates the previous one.  Only active service points block others:
a counter number is held by one teller per branch and working day, a room
by one staff member per department and working day, until released.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from queueing.exceptions import Conflict
from queueing.models import BankQueue, Counter, Department, Room, User

logger = logging.getLogger(__name__)

UNSET = object()


def counter_pool() -> List[int]:
    return list(range(1, int(getattr(settings, 'COUNTER_POOL_SIZE', 50)) + 1))


def active_counter(user: User, day=None) -> Optional[Counter]:
    """Return the user's active counter for ``day`` (today by default)."""
    if not getattr(user, 'pk', None):
        return None
    day = day or timezone.localdate()
    return (
        Counter.objects.select_related('queue', 'branch')
        .filter(user=user, is_active=True, work_date=day)
        .order_by('-created_at', '-id')
        .first()
    )


def available_counters(branch_id, day=None) -> List[int]:
    day = day or timezone.localdate()
    taken = set(
        Counter.objects.filter(branch_id=branch_id, work_date=day, is_active=True)
        .values_list('counter_number', flat=True)
    )
    return [n for n in counter_pool() if n not in taken]


@transaction.atomic
def take_counter(user: User, counter_number: int, queue: Optional[BankQueue] = None, day=None) -> Counter:
    """Bind ``user`` to ``counter_number`` at their branch for the day.

    Re-selecting a counter the user already used today reactivates it.
    """
    day = day or timezone.localdate()
    if counter_number not in counter_pool():
        raise ValidationError({'counterNumber': f'counter number must be between 1 and {len(counter_pool())}'})
    branch_id = user.branch_id
    taken = (
        Counter.objects.select_for_update()
        .filter(branch_id=branch_id, work_date=day, counter_number=counter_number, is_active=True)
        .exclude(user=user)
        .exists()
    )
    if taken:
        raise Conflict(f'counter {counter_number} is already taken today')

    Counter.objects.filter(user=user, is_active=True).update(is_active=False)
    counter, created = Counter.objects.get_or_create(
        user=user,
        counter_number=counter_number,
        work_date=day,
        defaults={'branch_id': branch_id, 'queue': queue, 'is_active': True},
    )
    if not created:
        counter.is_active = True
        counter.queue = queue
        counter.branch_id = branch_id
        counter.save(update_fields=['is_active', 'queue', 'branch'])
    logger.info("user %s took counter %s at branch %s", user.username, counter_number, branch_id)
    return counter


def active_room(user: User, day=None) -> Optional[Room]:
    if not getattr(user, 'pk', None):
        return None
    day = day or timezone.localdate()
    return (
        Room.objects.select_related('department', 'current_ticket')
        .filter(staff=user, is_active=True, work_date=day)
        .order_by('-created_at', '-id')
        .first()
    )


@transaction.atomic
def take_room(user: User, department: Department, room_number: str, day=None) -> Room:
    """Assign ``user`` to a room of ``department`` for the day.

    The room is created on first use.  A room staffed today by someone
    else is a conflict.
    """
    day = day or timezone.localdate()
    room_number = str(room_number).strip()
    if not room_number:
        raise ValidationError({'roomNumber': 'required'})
    room = (
        Room.objects.select_for_update()
        .filter(department=department, room_number=room_number, work_date=day)
        .first()
    )
    if room and room.staff_id and room.staff_id != user.pk and room.is_active:
        raise Conflict(f'room {room_number} is already taken today')

    Room.objects.filter(staff=user, is_active=True).exclude(pk=getattr(room, 'pk', None)).update(is_active=False)
    if room is None:
        room = Room.objects.create(
            department=department, room_number=room_number, staff=user,
            work_date=day, is_active=True, available=True,
        )
    else:
        room.staff = user
        room.is_active = True
        room.available = True
        room.save(update_fields=['staff', 'is_active', 'available'])
    logger.info("user %s took room %s in %s", user.username, room_number, department.title)
    return room


@transaction.atomic
def add_room(department: Department, room_number: str, staff: Optional[User] = None, day=None) -> Room:
    """Administrator adds a room to a department; duplicate numbers conflict."""
    day = day or timezone.localdate()
    room_number = str(room_number or '').strip()
    if not room_number:
        raise ValidationError({'roomNumber': 'required'})
    if Room.objects.filter(department=department, room_number=room_number, work_date=day).exists():
        raise Conflict(f'room {room_number} already exists in {department.title}')
    return Room.objects.create(department=department, room_number=room_number, staff=staff, work_date=day)


@transaction.atomic
def update_room(room: Room, *, room_number=None, staff=UNSET, available=None, is_active=None) -> Room:
    """Edit a room; ``staff=None`` unassigns it, leaving it out keeps the current staff."""
    if room_number is not None:
        room_number = str(room_number).strip()
        clash = (
            Room.objects.filter(department=room.department, room_number=room_number, work_date=room.work_date)
            .exclude(pk=room.pk)
            .exists()
        )
        if clash:
            raise Conflict(f'room {room_number} already exists in {room.department.title}')
        room.room_number = room_number
    if staff is not UNSET:
        room.staff = staff
    if available is not None:
        room.available = bool(available)
    if is_active is not None:
        room.is_active = bool(is_active)
    room.save()
    return room
