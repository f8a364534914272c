"""
Database models for the QueueDesk backend.

Two tenant variants share one schema.  Bank branches issue tickets for
teller queues and serve them from counters; hospitals issue tickets at
reception and route patients through an ordered history of department
visits served from rooms.  Ticket state is only changed through the
service modules in :mod:`queueing.services` which keep the timestamp and
duration fields consistent.
"""
from __future__ import annotations

import os
import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


VARIANT_BANK = 'bank'
VARIANT_HOSPITAL = 'hospital'
VARIANT_CHOICES = [
    (VARIANT_BANK, 'Bank'),
    (VARIANT_HOSPITAL, 'Hospital'),
]

LANGUAGE_CHOICES = [
    ('English', 'English'),
    ('Luganda', 'Luganda'),
]


def _upload_to(instance, filename: str) -> str:
    ext = os.path.splitext(filename)[1]
    folder = instance.__class__.__name__.lower()
    return f"{folder}/{timezone.localdate().strftime('%Y/%m')}/{uuid.uuid4().hex}{ext}"


def _today():
    return timezone.localdate()


class Branch(models.Model):
    """A physical bank branch with its own kiosks, counters and tickets."""
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255)
    local_network_address = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class TicketSequence(models.Model):
    """Per-day numbering row; locked while a ticket number is allocated.

    ``scope`` is ``bank:<branch id>`` for bank tickets and ``hospital``
    for the installation wide hospital sequence.
    """
    scope = models.CharField(max_length=40)
    day = models.DateField()
    last_number = models.CharField(max_length=3, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [('scope', 'day')]

    def __str__(self) -> str:
        return f"{self.scope} {self.day}: {self.last_number or '-'}"


class Department(models.Model):
    """A hospital department patients are routed through (Reception, Laboratory, ...)."""
    title = models.CharField(max_length=100, unique=True)
    icon = models.CharField(max_length=16, blank=True)
    category = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.title


class Role(models.Model):
    """Named set of permission flags assigned to staff accounts.

    Bank roles use flags such as ``Branches`` or ``Serving``; hospital
    roles use ``viewX``/``manageX`` pairs.  Flags are stored as a JSON
    object so each variant keeps its own vocabulary.
    """
    name = models.CharField(max_length=100)
    variant = models.CharField(max_length=10, choices=VARIANT_CHOICES, default=VARIANT_BANK, db_index=True)
    permissions = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('variant', 'name')]

    def __str__(self) -> str:
        return f"{self.name} ({self.variant})"

    def allows(self, flag: str) -> bool:
        return bool((self.permissions or {}).get(flag))


class User(AbstractUser):
    """Account of an administrator, teller/serving staff, kiosk or display.

    ``account_type`` decides the coarse access level; fine-grained
    dashboard permissions come from the optional :class:`Role`.  Bank
    accounts are bound to a branch, hospital staff to a department.
    """
    ACCOUNT_TYPE_CHOICES = [
        ('admin', 'Administrator'),
        ('staff', 'Staff'),
        ('kiosk', 'Kiosk'),
        ('display', 'Hall display'),
    ]
    account_type = models.CharField(max_length=10, choices=ACCOUNT_TYPE_CHOICES, default='staff')
    variant = models.CharField(max_length=10, choices=VARIANT_CHOICES, default=VARIANT_BANK, db_index=True)
    role = models.ForeignKey(Role, null=True, blank=True, on_delete=models.SET_NULL, related_name='users')
    branch = models.ForeignKey(Branch, null=True, blank=True, on_delete=models.SET_NULL, related_name='users')
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='staff'
    )
    image = models.FileField(upload_to=_upload_to, blank=True, max_length=512)

    def __str__(self) -> str:
        return f"{self.username} ({self.account_type})"

    @property
    def is_admin(self) -> bool:
        return self.account_type == 'admin' or self.is_superuser


# ---------------------------------------------------------------------------
# Bank
# ---------------------------------------------------------------------------

class BankQueue(models.Model):
    """A teller queue shown as a kiosk menu item with optional sub-items."""
    name = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class BankQueueSubItem(models.Model):
    """An issue type listed under a queue's menu item."""
    queue = models.ForeignKey(BankQueue, related_name='sub_items', on_delete=models.CASCADE)
    name = models.CharField(max_length=255)

    def __str__(self) -> str:
        return f"{self.queue.name} / {self.name}"


class Counter(models.Model):
    """A numbered teller counter taken by one user for one working day."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='counters')
    branch = models.ForeignKey(Branch, null=True, blank=True, on_delete=models.CASCADE, related_name='counters')
    queue = models.ForeignKey(BankQueue, null=True, blank=True, on_delete=models.SET_NULL, related_name='counters')
    counter_number = models.PositiveIntegerField()
    work_date = models.DateField(default=_today, db_index=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('user', 'counter_number', 'work_date')]

    def __str__(self) -> str:
        return f"Counter {self.counter_number} ({self.user.username})"


class BankTicket(models.Model):
    NOT_SERVED = 'Not Served'
    SERVING = 'Serving'
    HOLD = 'Hold'
    SERVED = 'Served'
    STATUS_CHOICES = [
        (NOT_SERVED, NOT_SERVED),
        (SERVING, SERVING),
        (HOLD, HOLD),
        (SERVED, SERVED),
    ]
    ticket_no = models.CharField(max_length=8, db_index=True)
    queue = models.ForeignKey(BankQueue, related_name='tickets', on_delete=models.PROTECT)
    sub_item = models.ForeignKey(
        BankQueueSubItem, null=True, blank=True, on_delete=models.SET_NULL, related_name='tickets'
    )
    issue_description = models.TextField()
    justify_reason = models.TextField(blank=True, null=True)
    ticket_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=NOT_SERVED, db_index=True)
    counter = models.ForeignKey(Counter, null=True, blank=True, on_delete=models.SET_NULL, related_name='tickets')
    branch = models.ForeignKey(Branch, related_name='tickets', on_delete=models.PROTECT)
    call_again = models.BooleanField(default=False)
    language = models.CharField(max_length=10, choices=LANGUAGE_CHOICES, default='English')

    # Entry timestamp of each status
    not_served_at = models.DateTimeField(default=timezone.now)
    serving_at = models.DateTimeField(null=True, blank=True)
    hold_at = models.DateTimeField(null=True, blank=True)
    served_at = models.DateTimeField(null=True, blank=True, db_index=True)

    # Seconds accumulated in each status
    not_served_duration = models.PositiveIntegerField(default=0)
    serving_duration = models.PositiveIntegerField(default=0)
    hold_duration = models.PositiveIntegerField(default=0)
    total_duration = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['branch', 'created_at'], name='bankticket_branch_created_idx'),
            models.Index(fields=['branch', 'ticket_status'], name='bankticket_branch_status_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.ticket_no} ({self.ticket_status})"


class BankTicketTransition(models.Model):
    """Records a status transition for a bank ticket."""
    ticket = models.ForeignKey(BankTicket, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=20, null=True, blank=True)
    to_status = models.CharField(max_length=20)
    operator = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='ticket_transitions'
    )
    timestamp = models.DateTimeField(default=timezone.now)
    reason = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.ticket_id}: {self.from_status} → {self.to_status}"


class ExchangeRate(models.Model):
    country_name = models.CharField(max_length=100)
    country_code = models.CharField(max_length=8)
    currency_code = models.CharField(max_length=8)
    buying_rate = models.DecimalField(max_digits=14, decimal_places=4)
    selling_rate = models.DecimalField(max_digits=14, decimal_places=4)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.currency_code} {self.buying_rate}/{self.selling_rate}"


# ---------------------------------------------------------------------------
# Hospital
# ---------------------------------------------------------------------------

class Room(models.Model):
    """A numbered room inside a department staffed for one working day."""
    department = models.ForeignKey(Department, related_name='rooms', on_delete=models.CASCADE)
    room_number = models.CharField(max_length=20)
    staff = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='rooms')
    available = models.BooleanField(default=False)
    current_ticket = models.ForeignKey(
        'HospitalTicket', null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    is_active = models.BooleanField(default=True, db_index=True)
    work_date = models.DateField(default=_today, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('department', 'room_number', 'work_date')]

    def __str__(self) -> str:
        return f"{self.department.title} room {self.room_number}"


class HospitalTicket(models.Model):
    CASH = 'Cash'
    INSURANCE = 'Insurance'
    USER_TYPE_CHOICES = [
        (CASH, CASH),
        (INSURANCE, INSURANCE),
    ]
    ticket_no = models.CharField(max_length=8, db_index=True)
    patient_name = models.CharField(max_length=255, blank=True)
    reason_for_visit = models.TextField(blank=True)
    receptionist_note = models.TextField(blank=True)
    user_type = models.CharField(max_length=20, choices=USER_TYPE_CHOICES, blank=True)
    language = models.CharField(max_length=10, choices=LANGUAGE_CHOICES, default='English')
    call = models.BooleanField(default=False)
    no_show = models.BooleanField(default=False, db_index=True)
    held = models.BooleanField(default=False, db_index=True)
    emergency = models.BooleanField(default=False)
    completed = models.BooleanField(default=False, db_index=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    total_duration = models.PositiveIntegerField(default=0)
    current_queue_index = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.ticket_no


class DepartmentVisit(models.Model):
    """One entry of a ticket's department history.

    Entries are ordered by ``position``.  An entry with ``completed=False``
    is the ticket's open visit to that department.
    """
    CLEARED = 'Cleared'

    ticket = models.ForeignKey(HospitalTicket, related_name='department_history', on_delete=models.CASCADE)
    position = models.PositiveIntegerField(default=0)
    department = models.CharField(max_length=100, db_index=True)
    icon = models.CharField(max_length=16, blank=True)
    timestamp = models.DateTimeField(default=timezone.now)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    processing_duration = models.PositiveIntegerField(default=0)
    waiting_duration = models.PositiveIntegerField(default=0)
    hold_started_at = models.DateTimeField(null=True, blank=True)
    hold_duration = models.PositiveIntegerField(default=0)
    note = models.TextField(blank=True)
    completed = models.BooleanField(default=False, db_index=True)
    room = models.ForeignKey(Room, null=True, blank=True, on_delete=models.SET_NULL, related_name='visits')
    actually_started = models.BooleanField(default=False)
    cash_cleared = models.CharField(max_length=10, null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['position', 'id']

    def __str__(self) -> str:
        state = 'done' if self.completed else 'open'
        return f"{self.ticket_id}#{self.position} {self.department} ({state})"


class PlannedDepartment(models.Model):
    """An entry of a ticket's multi-department routing plan."""
    ticket = models.ForeignKey(HospitalTicket, related_name='department_queue', on_delete=models.CASCADE)
    department = models.ForeignKey(Department, on_delete=models.CASCADE, related_name='planned_visits')
    department_name = models.CharField(max_length=100)
    room = models.ForeignKey(Room, null=True, blank=True, on_delete=models.SET_NULL, related_name='planned_visits')
    processed = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)
    clear_payment = models.CharField(max_length=10, null=True, blank=True)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self) -> str:
        return f"{self.ticket_id} plan#{self.order} {self.department_name}"


class Event(models.Model):
    """An announcement shown on hospital hall displays."""
    title = models.CharField(max_length=255)
    date = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.title


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------

class Ad(models.Model):
    """An image advertisement rotated on hall displays."""
    variant = models.CharField(max_length=10, choices=VARIANT_CHOICES, default=VARIANT_BANK, db_index=True)
    name = models.CharField(max_length=255)
    image = models.FileField(upload_to=_upload_to, max_length=512)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.name


class SiteSettings(models.Model):
    """Company details and display notification text, one record per variant."""
    variant = models.CharField(max_length=10, choices=VARIANT_CHOICES, unique=True)
    company_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    contact = models.CharField(max_length=100, blank=True)
    address = models.CharField(max_length=255, blank=True)
    timezone = models.CharField(max_length=64, blank=True)
    default_language = models.CharField(max_length=32, blank=True)
    notification_text = models.TextField(blank=True)
    logo_image = models.FileField(upload_to=_upload_to, blank=True, max_length=512)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.variant} settings"


class ActivityLog(models.Model):
    """Staff activity and audit trail."""
    staff = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='activity')
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='activitylog_action_idx'),
            models.Index(fields=['staff', 'created_at'], name='activitylog_staff_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.staff_id}@{self.created_at:%F %T}"
