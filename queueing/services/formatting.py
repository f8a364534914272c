"""Response payload builders (camelCase keys) shared by the views."""
from typing import Optional

from queueing.models import (
    Ad, ActivityLog, BankQueue, BankTicket, Branch, Counter, Department, DepartmentVisit, Event,
    ExchangeRate, HospitalTicket, PlannedDepartment, Role, Room, SiteSettings, User,
)


def _iso(dt) -> Optional[str]:
    return dt.isoformat() if dt else None


def _file_url(f) -> Optional[str]:
    return f.url if f else None


def format_branch(b: Branch) -> dict:
    return {
        'id': b.id,
        'name': b.name,
        'address': b.address,
        'localNetworkAddress': b.local_network_address,
        'createdAt': _iso(b.created_at),
    }


def format_queue(q: BankQueue) -> dict:
    return {
        'id': q.id,
        'name': q.name,
        'subItems': [{'id': s.id, 'name': s.name} for s in q.sub_items.all()],
    }


def format_counter(c: Optional[Counter]) -> Optional[dict]:
    if c is None:
        return None
    return {
        'id': c.id,
        'counterNumber': c.counter_number,
        'branchId': c.branch_id,
        'queueId': c.queue_id,
        'userId': c.user_id,
        'isActive': c.is_active,
        'workDate': c.work_date.isoformat(),
    }


def format_bank_ticket(t: BankTicket, with_transitions: bool = False) -> dict:
    data = {
        'id': t.id,
        'ticketNo': t.ticket_no,
        'queueId': t.queue_id,
        'queueName': t.queue.name if t.queue_id else None,
        'subItemId': t.sub_item_id,
        'subItemName': t.sub_item.name if t.sub_item_id else None,
        'issueDescription': t.issue_description,
        'justifyReason': t.justify_reason,
        'ticketStatus': t.ticket_status,
        'counterId': t.counter_id,
        'counterNumber': t.counter.counter_number if t.counter_id else None,
        'branchId': t.branch_id,
        'callAgain': t.call_again,
        'language': t.language,
        'notServedAt': _iso(t.not_served_at),
        'servingAt': _iso(t.serving_at),
        'holdAt': _iso(t.hold_at),
        'servedAt': _iso(t.served_at),
        'notServedDuration': t.not_served_duration,
        'servingDuration': t.serving_duration,
        'holdDuration': t.hold_duration,
        'totalDuration': t.total_duration,
        'createdAt': _iso(t.created_at),
        'updatedAt': _iso(t.updated_at),
    }
    if with_transitions:
        data['transitionHistory'] = [
            {
                'from': tr.from_status,
                'to': tr.to_status,
                'operator': tr.operator.username if tr.operator else '',
                'timestamp': tr.timestamp.isoformat(),
                'reason': tr.reason,
            }
            for tr in t.transitions.select_related('operator').order_by('timestamp', 'id')
        ]
    return data


def format_visit(v: DepartmentVisit) -> dict:
    return {
        'id': v.id,
        'department': v.department,
        'icon': v.icon,
        'timestamp': _iso(v.timestamp),
        'startedAt': _iso(v.started_at),
        'completedAt': _iso(v.completed_at),
        'processingDuration': v.processing_duration,
        'waitingDuration': v.waiting_duration,
        'holdStartedAt': _iso(v.hold_started_at),
        'holdDuration': v.hold_duration,
        'note': v.note,
        'completed': v.completed,
        'roomId': v.room_id,
        'actuallyStarted': v.actually_started,
        'cashCleared': v.cash_cleared,
        'paidAt': _iso(v.paid_at),
    }


def format_planned(p: PlannedDepartment) -> dict:
    return {
        'departmentId': p.department_id,
        'departmentName': p.department_name,
        'roomId': p.room_id,
        'processed': p.processed,
        'order': p.order,
        'clearPayment': p.clear_payment,
    }


def format_hospital_ticket(t: HospitalTicket) -> dict:
    return {
        'id': t.id,
        'ticketNo': t.ticket_no,
        'patientName': t.patient_name,
        'reasonForVisit': t.reason_for_visit,
        'receptionistNote': t.receptionist_note,
        'userType': t.user_type or None,
        'language': t.language,
        'call': t.call,
        'noShow': t.no_show,
        'held': t.held,
        'emergency': t.emergency,
        'completed': t.completed,
        'completedAt': _iso(t.completed_at),
        'totalDuration': t.total_duration,
        'currentQueueIndex': t.current_queue_index,
        'departmentHistory': [format_visit(v) for v in t.department_history.all()],
        'departmentQueue': [format_planned(p) for p in t.department_queue.all()],
        'createdAt': _iso(t.created_at),
        'updatedAt': _iso(t.updated_at),
    }


def format_department(d: Department, with_rooms: bool = False) -> dict:
    data = {'id': d.id, 'title': d.title, 'icon': d.icon, 'category': d.category}
    if with_rooms:
        data['rooms'] = [format_room(r) for r in d.rooms.select_related('staff').order_by('room_number')]
    return data


def format_room(r: Optional[Room]) -> Optional[dict]:
    if r is None:
        return None
    return {
        'id': r.id,
        'roomNumber': r.room_number,
        'departmentId': r.department_id,
        'staffId': r.staff_id,
        'staffName': (r.staff.get_full_name() or r.staff.username) if r.staff_id else None,
        'available': r.available,
        'isActive': r.is_active,
        'workDate': r.work_date.isoformat(),
        'currentTicketId': r.current_ticket_id,
    }


def format_rate(r: ExchangeRate) -> dict:
    return {
        'id': r.id,
        'countryName': r.country_name,
        'countryCode': r.country_code,
        'currencyCode': r.currency_code,
        'buyingRate': str(r.buying_rate),
        'sellingRate': str(r.selling_rate),
        'updatedAt': _iso(r.updated_at),
    }


def format_ad(a: Ad) -> dict:
    return {'id': a.id, 'name': a.name, 'image': _file_url(a.image), 'createdAt': _iso(a.created_at)}


def format_settings(s: SiteSettings) -> dict:
    return {
        'variant': s.variant,
        'companyName': s.company_name,
        'email': s.email,
        'contact': s.contact,
        'address': s.address,
        'timezone': s.timezone,
        'defaultLanguage': s.default_language,
        'notificationText': s.notification_text,
        'logoImage': _file_url(s.logo_image),
        'updatedAt': _iso(s.updated_at),
    }


def format_role(r: Role) -> dict:
    return {'id': r.id, 'name': r.name, 'variant': r.variant, 'permissions': r.permissions or {}}


def format_user(u: User) -> dict:
    return {
        'id': u.id,
        'username': u.username,
        'name': u.get_full_name() or u.username,
        'email': u.email,
        'accountType': u.account_type,
        'variant': u.variant,
        'isActive': u.is_active,
        'role': format_role(u.role) if u.role_id else None,
        'branchId': u.branch_id,
        'departmentId': u.department_id,
        'image': _file_url(u.image),
    }


def format_event(e: Event) -> dict:
    return {'id': e.id, 'title': e.title, 'date': _iso(e.date), 'createdAt': _iso(e.created_at)}


def format_log(entry: ActivityLog) -> dict:
    return {
        'id': entry.id,
        'staffId': entry.staff_id,
        'staffName': entry.staff.username if entry.staff_id else None,
        'action': entry.action,
        'objectType': entry.object_type,
        'objectId': entry.object_id,
        'details': entry.details,
        'createdAt': _iso(entry.created_at),
    }
