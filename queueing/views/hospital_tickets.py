"""
Hospital ticket endpoints.

Reception kiosks issue tickets without signing in (throttled).  Serving
screens list the queue of their department, start a visit by assigning
their room, then route the patient onwards (``next``/``next-step``) or
clear the ticket.  Cashiers clear payment for cash patients.  The routing
rules live in :mod:`queueing.services.hospital_tickets`.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..models import HospitalTicket
from ..permissions import IsHospitalAccount, IsStaffMember
from ..serializers.hospital import (
    AdvanceQueueSerializer,
    AssignRoomSerializer,
    ClearPaymentSerializer,
    ClearSerializer,
    DepartmentTitlesSerializer,
    NextSerializer,
    NextStepSerializer,
    SelectedDepartmentsSerializer,
    TicketUpdateSerializer,
)
from ..services import hospital_tickets as routing
from ..services import stats
from ..services.audit import log_action
from ..services.formatting import format_hospital_ticket
from ..services.service_points import active_room
from ..throttles import TicketCreateThrottle

SERVING = [IsAuthenticated, IsHospitalAccount, IsStaffMember]


def _flag(request, name: str) -> bool:
    return request.query_params.get(name) == 'true'


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
@throttle_classes([TicketCreateThrottle])
def tickets(request):
    """POST: issue a ticket at reception.  GET: a serving screen's queue for the day.

    Query parameters: ``department``, ``unassigned``, ``held``, ``date``.
    """
    if request.method == 'POST':
        ticket = routing.create_ticket()
        return Response({'ticketNo': ticket.ticket_no, 'id': ticket.id}, status=status.HTTP_201_CREATED)
    if not (IsAuthenticated().has_permission(request, None) and IsHospitalAccount().has_permission(request, None)):
        return Response({'detail': 'authentication required'}, status=status.HTTP_401_UNAUTHORIZED)
    items = routing.queue_for(
        department=request.query_params.get('department') or None,
        unassigned=_flag(request, 'unassigned'),
        held=_flag(request, 'held'),
        day=request.query_params.get('date'),
    )
    return Response([format_hospital_ticket(t) for t in items])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsHospitalAccount])
def completed(request):
    """Tickets completed on a day, newest first."""
    items = routing.completed_for(request.query_params.get('date'))
    return Response([format_hospital_ticket(t) for t in items])


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsHospitalAccount])
def ticket_detail(request, ticket_id: int):
    """GET a ticket.  PUT flags (call, noShow, held, emergency) and reception fields."""
    if request.method == 'GET':
        ticket = HospitalTicket.objects.filter(id=ticket_id).first()
        if not ticket:
            return Response({'error': 'Ticket not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(format_hospital_ticket(ticket))

    if not IsStaffMember().has_permission(request, None):
        return Response({'detail': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
    s = TicketUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    changes = s.model_changes()
    if not changes:
        return Response({'detail': 'nothing to update'}, status=status.HTTP_400_BAD_REQUEST)
    location = ''
    if changes.get('call'):
        location = _room_label(request.user, vd.get('currentDepartment'))
    ticket = routing.update_ticket(
        ticket_id,
        changes=changes,
        current_department=vd.get('currentDepartment') or '',
        note=vd.get('departmentNote'),
        room_id=vd.get('roomId'),
        location=location,
    )
    return Response(format_hospital_ticket(ticket))


def _room_label(user, department) -> str:
    current = active_room(user)
    if current:
        return f"{current.department.title} room {current.room_number}"
    return department or ''


@api_view(['POST'])
@permission_classes(SERVING)
def assign_room(request, ticket_id: int):
    s = AssignRoomSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    ticket = routing.assign_room(ticket_id, room_id=vd['roomId'], department=vd['department'])
    return Response({'success': True, 'ticket': format_hospital_ticket(ticket)})


@api_view(['POST'])
@permission_classes(SERVING)
def move_next(request, ticket_id: int):
    s = NextSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    ticket = routing.move_next(
        ticket_id,
        next_department_id=vd['nextDepartmentId'],
        current_department=vd['currentDepartment'],
        note=vd.get('departmentNote') or '',
        room_id=vd.get('roomId'),
    )
    return Response({'success': True, 'ticket': format_hospital_ticket(ticket)})


@api_view(['POST', 'PUT'])
@permission_classes(SERVING)
def next_step(request, ticket_id: int):
    """POST routes to one department or a planned list; PUT advances the plan."""
    if request.method == 'PUT':
        s = AdvanceQueueSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        ticket, message = routing.advance_queue(
            ticket_id,
            current_department=vd.get('currentDepartment') or '',
            note=vd.get('departmentNote') or '',
        )
        payload = {'success': True, 'ticket': format_hospital_ticket(ticket)}
        if message:
            payload['message'] = message
        return Response(payload)

    s = NextStepSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    ticket = routing.next_step(
        ticket_id,
        department_id=vd.get('departmentId'),
        departments=vd.get('departments'),
        room_id=vd.get('roomId'),
        current_department=vd.get('currentDepartment') or '',
        note=vd.get('departmentNote') or '',
        cash_cleared=vd.get('cashCleared'),
        fields=s.reception_fields(),
    )
    return Response({'success': True, 'ticket': format_hospital_ticket(ticket)})


@api_view(['POST'])
@permission_classes(SERVING)
def clear(request, ticket_id: int):
    s = ClearSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    ticket = routing.clear_ticket(
        ticket_id,
        current_department=vd['currentDepartment'],
        note=vd.get('departmentNote') or '',
        room_id=vd.get('roomId'),
        fields=s.reception_fields(),
    )
    return Response({'success': True, 'ticket': format_hospital_ticket(ticket)})


@api_view(['POST'])
@permission_classes(SERVING)
def clear_payment(request, ticket_id: int):
    s = ClearPaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    ticket, cleared = routing.clear_payment(ticket_id, department=vd.get('department'), clear_all=vd['clearAll'])
    log_action(user=request.user, action='payment_clear', object_type='hospital_ticket', object_id=ticket.id,
               detail={'departments': cleared})
    payload = {'success': True, 'ticket': format_hospital_ticket(ticket)}
    if vd['clearAll']:
        payload['clearedDepartments'] = cleared
        payload['message'] = f"Payment cleared for {len(cleared)} department{'s' if len(cleared) > 1 else ''}"
    return Response(payload)


@api_view(['POST'])
@permission_classes(SERVING)
def clear_payment_queue(request, ticket_id: int):
    s = DepartmentTitlesSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    ticket, count = routing.clear_payment_for_departments(ticket_id, departments=s.validated_data['departments'])
    log_action(user=request.user, action='payment_clear', object_type='hospital_ticket', object_id=ticket.id,
               detail={'departments': s.validated_data['departments']})
    return Response({
        'success': True,
        'ticket': format_hospital_ticket(ticket),
        'clearedCount': count,
        'message': f'Payment cleared for {count} departments',
    })


@api_view(['POST'])
@permission_classes(SERVING)
def clear_queue_payment(request, ticket_id: int):
    ticket, count = routing.clear_queue_payment(ticket_id)
    log_action(user=request.user, action='payment_clear', object_type='hospital_ticket', object_id=ticket.id,
               detail={'queue': count})
    return Response({
        'success': True,
        'ticket': format_hospital_ticket(ticket),
        'clearedCount': count,
        'message': f"Payment cleared for {count} department{'s' if count > 1 else ''} in queue",
    })


@api_view(['POST'])
@permission_classes(SERVING)
def clear_selective_payment(request, ticket_id: int):
    s = SelectedDepartmentsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    ticket, cleared = routing.clear_selective_payment(ticket_id, selected=s.validated_data['selectedDepartments'])
    log_action(user=request.user, action='payment_clear', object_type='hospital_ticket', object_id=ticket.id,
               detail={'departments': cleared})
    return Response({
        'success': True,
        'ticket': format_hospital_ticket(ticket),
        'clearedDepartments': cleared,
        'message': f"Payment cleared for {len(cleared)} selected department{'s' if len(cleared) > 1 else ''}",
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsHospitalAccount])
def dashboard(request):
    return Response(stats.hospital_dashboard(request.query_params.get('date')))
