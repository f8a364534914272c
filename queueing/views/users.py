"""
Staff account endpoints shared by both variants.

Bank users belong to a branch; hospital staff to a department.  When an
administrator creates an account without a password a random one is
generated and returned once as ``initialPassword``.
"""
from __future__ import annotations

import secrets

from django.db import transaction
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..models import Branch, Department, Role, User
from ..permissions import IsStaffMember, IsVariantAccount, role_permission
from ..serializers.common import UserSerializer
from ..services.audit import log_action
from ..services.formatting import format_room, format_user
from ..services.service_points import active_room

ManageUsers = role_permission({'bank': 'Users', 'hospital': 'manageUsers'})
ViewUsers = role_permission({'bank': 'Users', 'hospital': 'viewUsers'})


def _apply(user: User, vd: dict, variant: str):
    """Copy validated fields onto ``user``; returns an error Response or None."""
    if 'name' in vd:
        first, _, last = (vd['name'] or '').strip().partition(' ')
        user.first_name, user.last_name = first, last
    if 'email' in vd:
        user.email = vd['email'] or ''
    if 'accountType' in vd:
        user.account_type = vd['accountType']
    if 'isActive' in vd:
        user.is_active = vd['isActive']
    if 'roleId' in vd:
        role = None
        if vd['roleId']:
            role = Role.objects.filter(id=vd['roleId'], variant=variant).first()
            if not role:
                return Response({'detail': 'role not found'}, status=status.HTTP_404_NOT_FOUND)
        user.role = role
    if 'branchId' in vd:
        branch = None
        if vd['branchId']:
            branch = Branch.objects.filter(id=vd['branchId']).first()
            if not branch:
                return Response({'detail': 'branch not found'}, status=status.HTTP_404_NOT_FOUND)
        user.branch = branch
    if 'departmentId' in vd:
        department = None
        if vd['departmentId']:
            department = Department.objects.filter(id=vd['departmentId']).first()
            if not department:
                return Response({'detail': 'department not found'}, status=status.HTTP_404_NOT_FOUND)
        user.department = department
    return None


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsVariantAccount, IsStaffMember])
def users(request, variant: str):
    if request.method == 'GET':
        if not ViewUsers().has_permission(request, request.parser_context['view']):
            return Response({'detail': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
        qs = User.objects.filter(variant=variant).select_related('role').order_by('username')
        branch_id = request.query_params.get('branchId')
        if branch_id:
            qs = qs.filter(branch_id=branch_id)
        return Response([format_user(u) for u in qs])

    if not ManageUsers().has_permission(request, request.parser_context['view']):
        return Response({'detail': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
    s = UserSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if User.objects.filter(username=vd['username']).exists():
        return Response({'detail': 'username already exists'}, status=status.HTTP_409_CONFLICT)
    if vd.get('accountType') == 'admin' and not request.user.is_admin:
        return Response({'detail': 'only administrators can create administrators'}, status=status.HTTP_403_FORBIDDEN)
    initial_password = vd.get('password') or secrets.token_urlsafe(12)
    with transaction.atomic():
        user = User(username=vd['username'], variant=variant)
        error = _apply(user, vd, variant)
        if error is not None:
            return error
        user.set_password(initial_password)
        user.save()
    log_action(user=request.user, action='user_create', object_type='user', object_id=user.id,
               detail={'variant': variant, 'accountType': user.account_type})
    payload = format_user(user)
    if not vd.get('password'):
        payload['initialPassword'] = initial_password
    return Response(payload, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsVariantAccount, IsStaffMember])
def user_detail(request, variant: str, user_id: int):
    target = User.objects.select_related('role').filter(id=user_id, variant=variant).first()
    if not target:
        return Response({'detail': 'User not found'}, status=status.HTTP_404_NOT_FOUND)
    is_self = target.id == request.user.id
    if request.method == 'GET':
        if not is_self and not ViewUsers().has_permission(request, request.parser_context['view']):
            return Response({'detail': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
        return Response(format_user(target))

    if not ManageUsers().has_permission(request, request.parser_context['view']):
        return Response({'detail': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
    if request.method == 'DELETE':
        if is_self:
            return Response({'detail': 'cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        target.delete()
        log_action(user=request.user, action='user_delete', object_type='user', object_id=user_id)
        return Response({'success': True})

    s = UserSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if vd.get('accountType') == 'admin' and not request.user.is_admin:
        return Response({'detail': 'only administrators can grant administrator access'}, status=status.HTTP_403_FORBIDDEN)
    if 'username' in vd and vd['username'] != target.username:
        if User.objects.filter(username=vd['username']).exclude(id=target.id).exists():
            return Response({'detail': 'username already exists'}, status=status.HTTP_409_CONFLICT)
        target.username = vd['username']
    error = _apply(target, vd, variant)
    if error is not None:
        return error
    if vd.get('password'):
        target.set_password(vd['password'])
    target.save()
    return Response(format_user(target))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsVariantAccount])
def staff_active_room(request, variant: str, user_id: int):
    """Today's room of a staff member, with its department."""
    target = User.objects.filter(id=user_id, variant=variant).first()
    if not target:
        return Response({'detail': 'User not found'}, status=status.HTTP_404_NOT_FOUND)
    room = active_room(target)
    if not room:
        return Response({'detail': 'No active room for this staff member'}, status=status.HTTP_404_NOT_FOUND)
    data = format_room(room)
    data['department'] = {'id': room.department_id, 'title': room.department.title, 'icon': room.department.icon}
    return Response(data)
