"""Hospital announcements shown on hall displays."""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework import status

from ..models import Event
from ..permissions import IsHospitalAccount, manage_or_read
from ..serializers.hospital import EventSerializer
from ..services.formatting import format_event

ManageEvents = manage_or_read('manageSettings')


@api_view(['GET', 'POST'])
@permission_classes([IsHospitalAccount, ManageEvents])
def events(request):
    if request.method == 'GET':
        return Response([format_event(e) for e in Event.objects.order_by('date')])
    s = EventSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    event = Event.objects.create(**s.validated_data)
    return Response(format_event(event), status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsHospitalAccount, ManageEvents])
def event_detail(request, event_id: int):
    event = Event.objects.filter(id=event_id).first()
    if not event:
        return Response({'detail': 'Event not found'}, status=status.HTTP_404_NOT_FOUND)
    if request.method == 'DELETE':
        event.delete()
        return Response({'success': True})
    s = EventSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    for key, value in s.validated_data.items():
        setattr(event, key, value)
    event.save()
    return Response(format_event(event))
