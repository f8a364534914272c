"""
URL mappings for the queue management API.

Bank endpoints live under ``/api/bank/``, hospital endpoints under
``/api/hospital/``.  Resources shared by both variants (ads, settings,
users, roles) are mounted twice with a ``variant`` keyword argument.
Paths carry no trailing slash.
"""
from django.urls import path
from django_prometheus import exports

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, permissions_view, session_view
from .views import (
    ads,
    bank_queues,
    bank_tickets,
    branches,
    counters,
    departments,
    events,
    exchange_rates,
    health,
    hospital_tickets,
    logs,
    roles,
    site_settings,
    users,
)

BANK = {'variant': 'bank'}
HOSPITAL = {'variant': 'hospital'}

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),
    path('metrics', exports.ExportToDjangoView, name='prometheus-django-metrics'),

    # Auth & session
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout'),
    path('api/session', session_view, name='session'),
    path('api/permissions', permissions_view, name='permissions'),

    # Bank
    path('api/bank/branches', branches.branches, name='bank_branches'),
    path('api/bank/branches/<int:branch_id>', branches.branch_detail, name='bank_branch_detail'),
    path('api/bank/queues', bank_queues.queues, name='bank_queues'),
    path('api/bank/queues/<int:queue_id>', bank_queues.queue_detail, name='bank_queue_detail'),
    path('api/bank/counter', counters.counter, name='bank_counter'),
    path('api/bank/counter/available', counters.available, name='bank_counter_available'),
    path('api/bank/counter/<int:counter_id>', counters.counter_detail, name='bank_counter_detail'),
    path('api/bank/ticket', bank_tickets.tickets, name='bank_tickets'),
    path('api/bank/ticket/stats', bank_tickets.waiting_stats, name='bank_ticket_stats'),
    path('api/bank/ticket/durationStats', bank_tickets.duration_stats, name='bank_ticket_duration_stats'),
    path('api/bank/ticket/<int:ticket_id>', bank_tickets.ticket_detail, name='bank_ticket_detail'),
    path('api/bank/ticket/<int:ticket_id>/transfer', bank_tickets.ticket_transfer, name='bank_ticket_transfer'),
    path('api/bank/dashboard', bank_tickets.dashboard, name='bank_dashboard'),
    path('api/bank/exchange-rates', exchange_rates.rates, name='bank_exchange_rates'),
    path('api/bank/exchange-rates/<int:rate_id>', exchange_rates.rate_detail, name='bank_exchange_rate_detail'),
    path('api/bank/ads', ads.ads, BANK, name='bank_ads'),
    path('api/bank/ads/<int:ad_id>', ads.ad_detail, BANK, name='bank_ad_detail'),
    path('api/bank/settings', site_settings.site_settings, BANK, name='bank_settings'),
    path('api/bank/users', users.users, BANK, name='bank_users'),
    path('api/bank/users/<int:user_id>', users.user_detail, BANK, name='bank_user_detail'),
    path('api/bank/roles', roles.roles, BANK, name='bank_roles'),
    path('api/bank/roles/<int:role_id>', roles.role_detail, BANK, name='bank_role_detail'),

    # Hospital
    path('api/hospital/ticket', hospital_tickets.tickets, name='hospital_tickets'),
    path('api/hospital/ticket/completed', hospital_tickets.completed, name='hospital_tickets_completed'),
    path('api/hospital/ticket/<int:ticket_id>', hospital_tickets.ticket_detail, name='hospital_ticket_detail'),
    path('api/hospital/ticket/<int:ticket_id>/assign-room', hospital_tickets.assign_room, name='hospital_ticket_assign_room'),
    path('api/hospital/ticket/<int:ticket_id>/next', hospital_tickets.move_next, name='hospital_ticket_next'),
    path('api/hospital/ticket/<int:ticket_id>/next-step', hospital_tickets.next_step, name='hospital_ticket_next_step'),
    path('api/hospital/ticket/<int:ticket_id>/clear', hospital_tickets.clear, name='hospital_ticket_clear'),
    path('api/hospital/ticket/<int:ticket_id>/clear-payment', hospital_tickets.clear_payment,
         name='hospital_ticket_clear_payment'),
    path('api/hospital/ticket/<int:ticket_id>/clear-payment-queue', hospital_tickets.clear_payment_queue,
         name='hospital_ticket_clear_payment_queue'),
    path('api/hospital/ticket/<int:ticket_id>/clear-queue-payment', hospital_tickets.clear_queue_payment,
         name='hospital_ticket_clear_queue_payment'),
    path('api/hospital/ticket/<int:ticket_id>/clear-selective-payment', hospital_tickets.clear_selective_payment,
         name='hospital_ticket_clear_selective_payment'),
    path('api/hospital/dashboard', hospital_tickets.dashboard, name='hospital_dashboard'),
    path('api/hospital/department', departments.departments, name='hospital_departments'),
    path('api/hospital/department/catalogue', departments.department_catalogue, name='hospital_department_catalogue'),
    path('api/hospital/department/<int:department_id>', departments.department_detail,
         name='hospital_department_detail'),
    path('api/hospital/department/<int:department_id>/rooms', departments.department_rooms,
         name='hospital_department_rooms'),
    path('api/hospital/room', departments.room, name='hospital_room'),
    path('api/hospital/room/<int:room_id>', departments.room_detail, name='hospital_room_detail'),
    path('api/hospital/staff', users.users, HOSPITAL, name='hospital_staff'),
    path('api/hospital/staff/<int:user_id>', users.user_detail, HOSPITAL, name='hospital_staff_detail'),
    path('api/hospital/staff/<int:user_id>/active-room', users.staff_active_room, HOSPITAL,
         name='hospital_staff_active_room'),
    path('api/hospital/roles', roles.roles, HOSPITAL, name='hospital_roles'),
    path('api/hospital/roles/<int:role_id>', roles.role_detail, HOSPITAL, name='hospital_role_detail'),
    path('api/hospital/permissions', permissions_view, name='hospital_permissions'),
    path('api/hospital/events', events.events, name='hospital_events'),
    path('api/hospital/events/<int:event_id>', events.event_detail, name='hospital_event_detail'),
    path('api/hospital/log', logs.logs, name='hospital_log'),
    path('api/hospital/ads', ads.ads, HOSPITAL, name='hospital_ads'),
    path('api/hospital/ads/<int:ad_id>', ads.ad_detail, HOSPITAL, name='hospital_ad_detail'),
    path('api/hospital/settings', site_settings.site_settings, HOSPITAL, name='hospital_settings'),
]
