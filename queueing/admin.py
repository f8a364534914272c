"""
Django admin registrations for the queueing models.

Superusers can inspect tickets, service points and configuration via
``/admin/``.  Ticket status changes should go through the API so that
durations and transitions stay consistent; the admin is for inspection
and manual repair.
"""

from django.contrib import admin

from .models import (
    ActivityLog,
    Ad,
    BankQueue,
    BankQueueSubItem,
    BankTicket,
    BankTicketTransition,
    Branch,
    Counter,
    Department,
    DepartmentVisit,
    Event,
    ExchangeRate,
    HospitalTicket,
    PlannedDepartment,
    Role,
    Room,
    SiteSettings,
    TicketSequence,
    User,
)


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'address', 'local_network_address')
    search_fields = ('name',)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'variant', 'account_type', 'role', 'branch', 'department', 'is_active')
    list_filter = ('variant', 'account_type', 'branch')
    search_fields = ('username', 'first_name', 'last_name', 'email')


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'variant')
    list_filter = ('variant',)


class SubItemInline(admin.TabularInline):
    model = BankQueueSubItem
    extra = 0


@admin.register(BankQueue)
class BankQueueAdmin(admin.ModelAdmin):
    list_display = ('id', 'name')
    search_fields = ('name',)
    inlines = [SubItemInline]


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    list_display = ('id', 'counter_number', 'user', 'branch', 'queue', 'work_date', 'is_active')
    list_filter = ('branch', 'is_active', 'work_date')


@admin.register(BankTicket)
class BankTicketAdmin(admin.ModelAdmin):
    list_display = ('id', 'ticket_no', 'branch', 'queue', 'ticket_status', 'counter', 'created_at')
    list_filter = ('ticket_status', 'branch', 'queue')
    search_fields = ('ticket_no', 'issue_description')


@admin.register(BankTicketTransition)
class BankTicketTransitionAdmin(admin.ModelAdmin):
    list_display = ('ticket', 'from_status', 'to_status', 'operator', 'timestamp')
    list_filter = ('to_status',)
    search_fields = ('ticket__ticket_no', 'operator__username')


@admin.register(ExchangeRate)
class ExchangeRateAdmin(admin.ModelAdmin):
    list_display = ('id', 'country_name', 'currency_code', 'buying_rate', 'selling_rate')


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'icon', 'category')
    search_fields = ('title',)


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ('id', 'department', 'room_number', 'staff', 'available', 'is_active', 'work_date')
    list_filter = ('department', 'is_active', 'work_date')


class VisitInline(admin.TabularInline):
    model = DepartmentVisit
    extra = 0


class PlannedInline(admin.TabularInline):
    model = PlannedDepartment
    extra = 0


@admin.register(HospitalTicket)
class HospitalTicketAdmin(admin.ModelAdmin):
    list_display = ('id', 'ticket_no', 'patient_name', 'user_type', 'emergency', 'held', 'completed', 'created_at')
    list_filter = ('completed', 'emergency', 'user_type')
    search_fields = ('ticket_no', 'patient_name')
    inlines = [VisitInline, PlannedInline]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'date')


@admin.register(Ad)
class AdAdmin(admin.ModelAdmin):
    list_display = ('id', 'variant', 'name')
    list_filter = ('variant',)


@admin.register(SiteSettings)
class SiteSettingsAdmin(admin.ModelAdmin):
    list_display = ('variant', 'company_name', 'timezone', 'default_language')


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'staff', 'action', 'object_type', 'object_id', 'created_at')
    list_filter = ('action',)
    search_fields = ('staff__username', 'action')


@admin.register(TicketSequence)
class TicketSequenceAdmin(admin.ModelAdmin):
    list_display = ('id', 'scope', 'day', 'last_number', 'updated_at')
    list_filter = ('day',)
    search_fields = ('scope',)
