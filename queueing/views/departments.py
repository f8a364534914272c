"""
Hospital departments and their rooms.

Departments are enabled from the built-in catalogue.  Administrators
manage rooms through ``PATCH`` actions on the department; serving staff
take a room for the day through the room endpoints and flag it available
or busy with the ticket they are serving.
"""
from __future__ import annotations

from django.db import transaction
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..models import Department, HospitalTicket, Room, User
from ..permissions import IsAdminRole, IsHospitalAccount, IsStaffMember, manage_or_read
from ..serializers.hospital import (
    DepartmentCreateSerializer,
    RoomActionSerializer,
    RoomSelectSerializer,
    RoomUpdateSerializer,
)
from ..services import catalogue, service_points
from ..services.audit import log_action
from ..services.formatting import format_department, format_room

ManageDepartments = manage_or_read('manageQueues')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsHospitalAccount])
def department_catalogue(request):
    """The departments that can be enabled, marking the ones already enabled."""
    enabled = set(Department.objects.values_list('title', flat=True))
    data = catalogue.as_dicts()
    for item in data:
        item['enabled'] = item['title'] in enabled
    return Response(data)


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalAccount, ManageDepartments])
def departments(request):
    if request.method == 'GET':
        with_rooms = request.query_params.get('rooms') == 'true'
        qs = Department.objects.order_by('title')
        return Response([format_department(d, with_rooms=with_rooms) for d in qs])

    s = DepartmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    entry = catalogue.lookup(vd['title'])
    if entry is None and not (vd.get('icon') and vd.get('category')):
        return Response({'detail': 'unknown department; give icon and category for custom ones'},
                        status=status.HTTP_400_BAD_REQUEST)
    title, icon, category = entry or (vd['title'], vd['icon'], vd['category'])
    if Department.objects.filter(title=title).exists():
        return Response({'detail': f'{title} already exists'}, status=status.HTTP_409_CONFLICT)
    dept = Department.objects.create(
        title=title,
        icon=vd.get('icon') or icon,
        category=vd.get('category') or category,
    )
    log_action(user=request.user, action='department_create', object_type='department', object_id=dept.id)
    return Response(format_department(dept, with_rooms=True), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsHospitalAccount, ManageDepartments])
def department_detail(request, department_id: int):
    dept = Department.objects.filter(id=department_id).first()
    if not dept:
        return Response({'detail': 'Department not found'}, status=status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return Response(format_department(dept, with_rooms=True))
    if request.method == 'DELETE':
        dept.delete()
        log_action(user=request.user, action='department_delete', object_type='department', object_id=department_id)
        return Response({'success': True})

    s = RoomActionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    action = vd['action']
    staff = None
    if vd.get('staffId'):
        staff = User.objects.filter(id=vd['staffId'], variant='hospital').first()
        if not staff:
            return Response({'detail': 'staff not found'}, status=status.HTTP_404_NOT_FOUND)

    if action == 'addRoom':
        service_points.add_room(dept, vd.get('roomNumber'), staff)
    else:
        room = dept.rooms.filter(id=vd.get('roomId')).first() if vd.get('roomId') else None
        if room is None:
            return Response({'detail': 'Room not found'}, status=status.HTTP_404_NOT_FOUND)
        if action == 'deleteRoom':
            room.delete()
        else:
            service_points.update_room(
                room,
                room_number=vd.get('roomNumber') or None,
                staff=staff if 'staffId' in vd else service_points.UNSET,
                available=vd.get('available'),
                is_active=vd.get('isActive'),
            )
    log_action(user=request.user, action=f'department_{action}', object_type='department', object_id=dept.id)
    return Response(format_department(dept, with_rooms=True))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsHospitalAccount])
def department_rooms(request, department_id: int):
    dept = Department.objects.filter(id=department_id).first()
    if not dept:
        return Response({'detail': 'Department not found'}, status=status.HTTP_404_NOT_FOUND)
    qs = dept.rooms.select_related('staff').order_by('room_number')
    if request.query_params.get('today') == 'true':
        qs = qs.filter(work_date=timezone.localdate())
    return Response([format_room(r) for r in qs])


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsHospitalAccount, IsStaffMember])
def room(request):
    """GET: the caller's active room.  POST: take a room of a department for today."""
    user: User = request.user  # type: ignore[assignment]
    if request.method == 'GET':
        current = service_points.active_room(user)
        payload = {'room': format_room(current)}
        if current:
            payload['department'] = format_department(current.department)
        return Response(payload)
    s = RoomSelectSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    dept = Department.objects.filter(id=vd['departmentId']).first()
    if not dept:
        return Response({'detail': 'Department not found'}, status=status.HTTP_404_NOT_FOUND)
    taken = service_points.take_room(user, dept, vd['roomNumber'])
    log_action(user=user, action='room_select', object_type='room', object_id=taken.id,
               detail={'department': dept.title, 'roomNumber': taken.room_number})
    return Response({'success': True, 'room': format_room(taken), 'department': format_department(dept)})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsHospitalAccount, IsStaffMember])
def room_detail(request, room_id: int):
    """PUT: the serving screen flags availability and the ticket in the room."""
    item = Room.objects.select_related('department', 'staff').filter(id=room_id).first()
    if not item:
        return Response({'detail': 'Room not found'}, status=status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return Response(format_room(item))
    user: User = request.user  # type: ignore[assignment]
    if item.staff_id != user.id and not IsAdminRole().has_permission(request, None):
        return Response({'detail': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
    s = RoomUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    with transaction.atomic():
        if 'currentTicketId' in vd:
            ticket = None
            if vd['currentTicketId']:
                ticket = HospitalTicket.objects.filter(id=vd['currentTicketId']).first()
                if not ticket:
                    return Response({'detail': 'Ticket not found'}, status=status.HTTP_404_NOT_FOUND)
            item.current_ticket = ticket
            item.save(update_fields=['current_ticket'])
        service_points.update_room(item, available=vd.get('available'), is_active=vd.get('isActive'))
    return Response(format_room(item))
