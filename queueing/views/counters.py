"""
Teller counter endpoints.

A teller picks a counter number for the day before calling tickets; the
available list excludes numbers held by an active teller at the branch
today.  Releasing a counter frees its number.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..models import BankQueue, Counter, User
from ..permissions import IsBankAccount, IsStaffMember
from ..serializers.bank import CounterSelectSerializer
from ..services import service_points
from ..services.audit import log_action
from ..services.formatting import format_counter


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsBankAccount, IsStaffMember])
def counter(request):
    """GET: the caller's active counter.  POST: take a counter for today."""
    user: User = request.user  # type: ignore[assignment]
    if request.method == 'GET':
        return Response({'counter': format_counter(service_points.active_counter(user))})
    if not user.branch_id:
        return Response({'detail': 'user is not assigned to a branch'}, status=status.HTTP_400_BAD_REQUEST)
    s = CounterSelectSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    queue = None
    if vd.get('queueId'):
        queue = BankQueue.objects.filter(id=vd['queueId']).first()
        if not queue:
            return Response({'detail': 'queue not found'}, status=status.HTTP_404_NOT_FOUND)
    taken = service_points.take_counter(user, vd['counterNumber'], queue)
    log_action(user=user, action='counter_select', object_type='counter', object_id=taken.id,
               detail={'counterNumber': taken.counter_number})
    return Response({'success': True, 'counter': format_counter(taken)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBankAccount])
def available(request):
    """Counter numbers still free today at a branch."""
    branch_id = request.query_params.get('branchId') or request.user.branch_id
    if not branch_id:
        return Response({'detail': 'Branch ID is required'}, status=status.HTTP_400_BAD_REQUEST)
    return Response({'availableCounters': service_points.available_counters(branch_id)})


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsBankAccount, IsStaffMember])
def counter_detail(request, counter_id: int):
    """GET a counter; DELETE releases it (the caller's own, or any for admins)."""
    item = Counter.objects.filter(id=counter_id).first()
    if not item:
        return Response({'detail': 'Counter not found'}, status=status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return Response({'counter': format_counter(item)})
    user: User = request.user  # type: ignore[assignment]
    if item.user_id != user.id and not user.is_admin:
        return Response({'detail': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
    item.is_active = False
    item.save(update_fields=['is_active'])
    return Response({'success': True})
