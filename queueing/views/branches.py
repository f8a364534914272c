"""
Bank branch endpoints.

Every signed-in bank account may list branches (kiosks need them to pick
their branch); creating, editing and deleting needs the ``Branches`` role
flag or an administrator.
"""
from __future__ import annotations

from django.db.models import ProtectedError
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status

from ..models import Branch
from ..permissions import IsBankAccount, manage_or_read
from ..serializers.bank import BranchSerializer
from ..services.audit import log_action
from ..services.formatting import format_branch

ManageBranches = manage_or_read('Branches')


@api_view(['GET', 'POST'])
@permission_classes([IsBankAccount, ManageBranches])
def branches(request):
    if request.method == 'GET':
        return Response([format_branch(b) for b in Branch.objects.order_by('name')])
    s = BranchSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    branch = Branch.objects.create(
        name=vd['name'],
        address=vd['address'],
        local_network_address=vd.get('localNetworkAddress', ''),
    )
    log_action(user=request.user, action='branch_create', object_type='branch', object_id=branch.id)
    return Response(format_branch(branch), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsBankAccount, ManageBranches])
def branch_detail(request, branch_id: int):
    branch = Branch.objects.filter(id=branch_id).first()
    if not branch:
        return Response({'detail': 'Branch not found'}, status=status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return Response(format_branch(branch))
    if request.method == 'DELETE':
        try:
            branch.delete()
        except ProtectedError:
            return Response({'detail': 'branch still has tickets'}, status=status.HTTP_409_CONFLICT)
        log_action(user=request.user, action='branch_delete', object_type='branch', object_id=branch_id)
        return Response({'success': True})
    s = BranchSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if 'name' in vd:
        branch.name = vd['name']
    if 'address' in vd:
        branch.address = vd['address']
    if 'localNetworkAddress' in vd:
        branch.local_network_address = vd['localNetworkAddress']
    branch.save()
    return Response(format_branch(branch))
