"""Staff activity log: clients append entries, administrators browse them."""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ..models import ActivityLog
from ..permissions import IsAdminRole
from ..serializers.common import ActivityLogSerializer
from ..services.audit import log_action
from ..services.formatting import format_log
from ..services.timing import parse_datetime_param


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def logs(request):
    if request.method == 'POST':
        s = ActivityLogSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        entry = log_action(
            user=request.user,
            action=vd['action'],
            object_type=vd.get('objectType') or None,
            object_id=vd.get('objectId') or None,
            detail=vd.get('details') or {},
        )
        return Response(format_log(entry), status=status.HTTP_201_CREATED)

    if not IsAdminRole().has_permission(request, None):
        return Response({'detail': 'forbidden'}, status=status.HTTP_403_FORBIDDEN)
    qs = ActivityLog.objects.select_related('staff')
    staff_id = request.query_params.get('staffId')
    if staff_id:
        qs = qs.filter(staff_id=staff_id)
    action = request.query_params.get('action')
    if action:
        qs = qs.filter(action=action)
    start = parse_datetime_param(request.query_params.get('startDate'), 'startDate')
    if start:
        qs = qs.filter(created_at__gte=start)
    end = parse_datetime_param(request.query_params.get('endDate'), 'endDate')
    if end:
        qs = qs.filter(created_at__lte=end)
    try:
        limit = min(500, max(1, int(request.query_params.get('limit') or 100)))
    except ValueError:
        return Response({'detail': 'limit must be a number'}, status=status.HTTP_400_BAD_REQUEST)
    return Response([format_log(e) for e in qs.order_by('-created_at', '-id')[:limit]])
