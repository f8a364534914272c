"""
Hall display notifications over the channel layer.

Every display joins the ``display`` group (see
:class:`queueing.realtime.consumers.HallDisplayConsumer`).  Sending is
best effort: a missing channel layer only disables live updates.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)

DISPLAY_GROUP = "display"


def broadcast_call(*, variant: str, ticket_no: str, ticket_id, location: str = "", language: str = "English") -> bool:
    """Announce that ``ticket_no`` is called to ``location`` (counter or room)."""
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False
    payload = {
        "type": "ticket.called",
        "variant": variant,
        "ticketId": ticket_id,
        "ticketNo": ticket_no,
        "location": location,
        "language": language,
        "ts": timezone.now().isoformat(),
    }
    async_to_sync(channel_layer.group_send)(DISPLAY_GROUP, payload)
    logger.info("call broadcast %s %s -> %s", variant, ticket_no, location or "-")
    return True
