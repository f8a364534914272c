from typing import Dict, List, Optional

from django.db.models import Avg, Count
from django.utils import timezone

from queueing.models import BankQueue, BankTicket, HospitalTicket
from queueing.services.timing import day_bounds


def _per_hour(datetimes) -> List[int]:
    hours = [0] * 24
    for dt in datetimes:
        hours[timezone.localtime(dt).hour] += 1
    return hours


def bank_dashboard(branch_id, day=None) -> Dict[str, object]:
    start, end = day_bounds(day)
    qs = BankTicket.objects.filter(branch_id=branch_id, created_at__gte=start, created_at__lt=end)
    counts = dict(qs.values_list('ticket_status').annotate(n=Count('id')))
    return {
        'totalTickets': sum(counts.values()),
        'ticketsServed': counts.get(BankTicket.SERVED, 0),
        'waitingTickets': counts.get(BankTicket.NOT_SERVED, 0),
        'inProgressTickets': counts.get(BankTicket.SERVING, 0),
        'onHoldTickets': counts.get(BankTicket.HOLD, 0),
        'ticketsPerHour': _per_hour(qs.values_list('created_at', flat=True)),
    }


def bank_waiting_stats(branch_id) -> List[Dict[str, object]]:
    """Number of ``Not Served`` tickets per queue at a branch."""
    rows = (
        BankTicket.objects.filter(branch_id=branch_id, ticket_status=BankTicket.NOT_SERVED)
        .values('queue_id')
        .annotate(count=Count('id'))
        .order_by('queue_id')
    )
    names = dict(BankQueue.objects.filter(pk__in=[r['queue_id'] for r in rows]).values_list('id', 'name'))
    return [
        {'queueId': r['queue_id'], 'count': r['count'], 'queueName': names.get(r['queue_id'], 'Unknown Queue')}
        for r in rows
    ]


def bank_duration_stats(branch_id=None, start=None, end=None, include_tickets: bool = True) -> Dict[str, object]:
    """Average time per status over served tickets, optionally within a served-at range."""
    qs = BankTicket.objects.filter(ticket_status=BankTicket.SERVED)
    if branch_id:
        qs = qs.filter(branch_id=branch_id)
    if start:
        qs = qs.filter(served_at__gte=start)
    if end:
        qs = qs.filter(served_at__lte=end)
    agg = qs.aggregate(
        count=Count('id'),
        not_served=Avg('not_served_duration'),
        serving=Avg('serving_duration'),
        hold=Avg('hold_duration'),
        total=Avg('total_duration'),
    )
    data: Dict[str, object] = {
        'count': agg['count'],
        'averages': {
            'notServedDuration': round(agg['not_served'] or 0),
            'servingDuration': round(agg['serving'] or 0),
            'holdDuration': round(agg['hold'] or 0),
            'totalDuration': round(agg['total'] or 0),
        },
    }
    if include_tickets:
        data['tickets'] = [
            {
                'id': t.id,
                'ticketNo': t.ticket_no,
                'notServedDuration': t.not_served_duration,
                'servingDuration': t.serving_duration,
                'holdDuration': t.hold_duration,
                'totalDuration': t.total_duration,
                'createdAt': t.created_at.isoformat(),
                'servedAt': t.served_at.isoformat() if t.served_at else None,
            }
            for t in qs.order_by('served_at', 'id')
        ]
    return data


def hospital_dashboard(day=None) -> Dict[str, object]:
    start, end = day_bounds(day)
    qs = HospitalTicket.objects.filter(created_at__gte=start, created_at__lt=end)
    rows = list(qs.values_list('completed', 'no_show', 'created_at'))
    return {
        'totalTickets': len(rows),
        'ticketsServed': sum(1 for c, _, _ in rows if c),
        'waitingTickets': sum(1 for c, n, _ in rows if not c and not n),
        'cancelledTickets': sum(1 for _, n, _ in rows if n),
        'ticketsPerHour': _per_hour(created for _, _, created in rows),
    }
