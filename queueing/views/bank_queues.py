"""Bank queue (kiosk menu item) endpoints with their sub-items."""
from __future__ import annotations

from django.db import transaction
from django.db.models import ProtectedError
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status

from ..models import BankQueue, BankQueueSubItem
from ..permissions import IsBankAccount, manage_or_read
from ..serializers.bank import BankQueueSerializer
from ..services.formatting import format_queue

ManageQueues = manage_or_read('Queues')


def _sync_sub_items(queue: BankQueue, items) -> None:
    """Replace the queue's sub-items, keeping ids of the ones sent back."""
    keep = []
    for item in items:
        sub = None
        if item.get('id'):
            sub = queue.sub_items.filter(id=item['id']).first()
        if sub:
            sub.name = item['name']
            sub.save(update_fields=['name'])
        else:
            sub = BankQueueSubItem.objects.create(queue=queue, name=item['name'])
        keep.append(sub.id)
    queue.sub_items.exclude(id__in=keep).delete()


@api_view(['GET', 'POST'])
@permission_classes([IsBankAccount, ManageQueues])
def queues(request):
    if request.method == 'GET':
        qs = BankQueue.objects.prefetch_related('sub_items').order_by('name')
        return Response([format_queue(q) for q in qs])
    s = BankQueueSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    with transaction.atomic():
        queue = BankQueue.objects.create(name=vd['name'])
        _sync_sub_items(queue, vd.get('subItems') or [])
    return Response(format_queue(queue), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsBankAccount, ManageQueues])
def queue_detail(request, queue_id: int):
    queue = BankQueue.objects.filter(id=queue_id).first()
    if not queue:
        return Response({'detail': 'Queue not found'}, status=status.HTTP_404_NOT_FOUND)
    if request.method == 'GET':
        return Response(format_queue(queue))
    if request.method == 'DELETE':
        try:
            queue.delete()
        except ProtectedError:
            return Response({'detail': 'queue still has tickets'}, status=status.HTTP_409_CONFLICT)
        return Response({'message': 'Queue deleted successfully'})
    s = BankQueueSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    with transaction.atomic():
        if 'name' in vd:
            queue.name = vd['name']
            queue.save()
        if 'subItems' in vd:
            _sync_sub_items(queue, vd['subItems'])
    return Response(format_queue(queue))
