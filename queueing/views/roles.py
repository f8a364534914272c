"""Roles and their permission flags, kept per variant."""
from __future__ import annotations

from django.db import IntegrityError, transaction
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..models import Role
from ..permissions import IsStaffMember, IsVariantAccount, manage_or_read
from ..serializers.common import RoleSerializer
from ..services.formatting import format_role

ManageRoles = manage_or_read({'bank': 'Roles', 'hospital': 'manageRoles'})

BANK_FLAGS = ['Branches', 'Users', 'Roles', 'Serving', 'Queues', 'ExchangeRates', 'Ads', 'Settings']
HOSPITAL_FLAGS = [
    f'{verb}{area}'
    for area in ('Users', 'Roles', 'Serving', 'Queues', 'Ads', 'Settings')
    for verb in ('view', 'manage')
]


def known_flags(variant: str):
    return BANK_FLAGS if variant == 'bank' else HOSPITAL_FLAGS


def _clean_permissions(variant: str, permissions: dict) -> dict:
    flags = known_flags(variant)
    return {flag: bool((permissions or {}).get(flag)) for flag in flags}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsVariantAccount, IsStaffMember, ManageRoles])
def roles(request, variant: str):
    if request.method == 'GET':
        data = [format_role(r) for r in Role.objects.filter(variant=variant).order_by('name')]
        return Response({'roles': data, 'flags': known_flags(variant)})
    s = RoleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        with transaction.atomic():
            role = Role.objects.create(
                name=vd['name'], variant=variant,
                permissions=_clean_permissions(variant, vd.get('permissions')),
            )
    except IntegrityError:
        return Response({'detail': 'role already exists'}, status=status.HTTP_409_CONFLICT)
    return Response(format_role(role), status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsVariantAccount, IsStaffMember, ManageRoles])
def role_detail(request, variant: str, role_id: int):
    role = Role.objects.filter(id=role_id, variant=variant).first()
    if not role:
        return Response({'detail': 'Role not found'}, status=status.HTTP_404_NOT_FOUND)
    if request.method == 'DELETE':
        role.delete()
        return Response({'success': True})
    s = RoleSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if 'name' in vd:
        role.name = vd['name']
    if 'permissions' in vd:
        role.permissions = _clean_permissions(variant, vd['permissions'])
    try:
        with transaction.atomic():
            role.save()
    except IntegrityError:
        return Response({'detail': 'role already exists'}, status=status.HTTP_409_CONFLICT)
    return Response(format_role(role))
