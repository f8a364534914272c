"""
Bank ticket endpoints.

Kiosks create tickets without signing in (throttled).  Tellers list the
queue, call tickets to their counter, put them on hold, serve them or
transfer them to another queue.  Status changes go through
:mod:`queueing.services.bank_tickets` which validates the transition and
keeps the duration fields consistent.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..models import BankQueue, BankQueueSubItem, BankTicket, Branch, User
from ..permissions import IsBankAccount, IsStaffMember
from ..serializers.bank import TicketCreateSerializer, TicketTransferSerializer, TicketUpdateSerializer
from ..services import bank_tickets as lifecycle
from ..services import stats
from ..services.formatting import format_bank_ticket
from ..services.timing import day_bounds, parse_datetime_param
from ..throttles import TicketCreateThrottle


def _branch_param(request):
    user = getattr(request, 'user', None)
    return request.query_params.get('branchId') or getattr(user, 'branch_id', None)


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
@throttle_classes([TicketCreateThrottle])
def tickets(request):
    """GET: list tickets (signed-in bank accounts).  POST: issue a ticket from a kiosk."""
    if request.method == 'POST':
        return _create_ticket(request)
    if not (IsAuthenticated().has_permission(request, None) and IsBankAccount().has_permission(request, None)):
        return Response({'detail': 'authentication required'}, status=status.HTTP_401_UNAUTHORIZED)

    qs = BankTicket.objects.select_related('queue', 'sub_item', 'counter')
    branch_id = _branch_param(request)
    if branch_id:
        qs = qs.filter(branch_id=branch_id)
    queue_id = request.query_params.get('queueId')
    if queue_id:
        qs = qs.filter(queue_id=queue_id)
    ticket_status = request.query_params.get('status') or request.query_params.get('ticketStatus')
    if ticket_status:
        qs = qs.filter(ticket_status=ticket_status)
    counter_id = request.query_params.get('counterId')
    if counter_id:
        qs = qs.filter(counter_id=counter_id)
    day = request.query_params.get('date')
    if day:
        start, end = day_bounds(day)
        qs = qs.filter(created_at__gte=start, created_at__lt=end)
    data = [format_bank_ticket(t) for t in qs.order_by('created_at', 'id')]
    return Response({'success': True, 'data': data})


def _create_ticket(request):
    s = TicketCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    queue = BankQueue.objects.filter(id=vd['queueId']).first()
    if not queue:
        return Response({'detail': 'queue not found'}, status=status.HTTP_404_NOT_FOUND)
    branch = Branch.objects.filter(id=vd['branchId']).first()
    if not branch:
        return Response({'detail': 'branch not found'}, status=status.HTTP_404_NOT_FOUND)
    sub_item = None
    if vd.get('subItemId'):
        sub_item = BankQueueSubItem.objects.filter(id=vd['subItemId']).first()
        if not sub_item:
            return Response({'detail': 'sub item not found'}, status=status.HTTP_404_NOT_FOUND)
    ticket = lifecycle.create_ticket(
        branch=branch,
        queue=queue,
        sub_item=sub_item,
        issue_description=vd['issueDescription'],
        language=vd.get('language') or 'English',
    )
    return Response({'success': True, 'data': format_bank_ticket(ticket)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsBankAccount])
def ticket_detail(request, ticket_id: int):
    """GET: ticket with its transition history.  PUT: status change and field edits (staff)."""
    if request.method == 'GET':
        ticket = BankTicket.objects.select_related('queue', 'sub_item', 'counter').filter(id=ticket_id).first()
        if not ticket:
            return Response({'success': False, 'detail': 'Ticket not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'success': True, 'data': format_bank_ticket(ticket, with_transitions=True)})

    if not IsStaffMember().has_permission(request, None):
        return Response({'detail': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
    s = TicketUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    user: User = request.user  # type: ignore[assignment]
    ticket = lifecycle.update_ticket(
        ticket_id,
        user=user,
        status=vd.get('ticketStatus'),
        issue_description=vd.get('issueDescription'),
        justify_reason=vd.get('justifyReason'),
        language=vd.get('language'),
        call_again=vd.get('callAgain'),
        reason=vd.get('reason') or '',
    )
    return Response({'success': True, 'data': format_bank_ticket(ticket)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsBankAccount, IsStaffMember])
def ticket_transfer(request, ticket_id: int):
    """Move a ticket being served (or on hold) to another queue."""
    s = TicketTransferSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    queue = BankQueue.objects.filter(id=vd['queueId']).first()
    if not queue:
        return Response({'detail': 'queue not found'}, status=status.HTTP_404_NOT_FOUND)
    sub_item = None
    if vd.get('subItemId'):
        sub_item = BankQueueSubItem.objects.filter(id=vd['subItemId']).first()
        if not sub_item:
            return Response({'detail': 'sub item not found'}, status=status.HTTP_404_NOT_FOUND)
    ticket = lifecycle.transfer_ticket(
        ticket_id,
        user=request.user,
        queue=queue,
        sub_item=sub_item,
        issue_description=vd.get('issueDescription'),
        reason=vd.get('reason') or '',
    )
    return Response({'success': True, 'data': format_bank_ticket(ticket)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBankAccount])
def waiting_stats(request):
    """Waiting tickets per queue at a branch."""
    branch_id = _branch_param(request)
    if not branch_id:
        return Response({'detail': 'Branch ID is required'}, status=status.HTTP_400_BAD_REQUEST)
    return Response({'stats': stats.bank_waiting_stats(branch_id)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBankAccount])
def duration_stats(request):
    """Average time spent per status by served tickets."""
    start = parse_datetime_param(request.query_params.get('startDate'), 'startDate')
    end = parse_datetime_param(request.query_params.get('endDate'), 'endDate')
    include = request.query_params.get('includeTickets', 'true').lower() != 'false'
    data = stats.bank_duration_stats(request.query_params.get('branchId'), start, end, include_tickets=include)
    return Response({'success': True, 'data': data})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBankAccount])
def dashboard(request):
    """Today's ticket counts and hourly histogram for a branch."""
    branch_id = _branch_param(request)
    if not branch_id:
        return Response({'detail': 'Branch ID is required'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(stats.bank_dashboard(branch_id, request.query_params.get('date')))
