import json
from channels.generic.websocket import AsyncWebsocketConsumer

from queueing.services.notify import DISPLAY_GROUP


class HallDisplayConsumer(AsyncWebsocketConsumer):
    """Pushes ticket calls to hall display screens and counter/room screens."""
    GROUP = DISPLAY_GROUP

    async def connect(self):
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def ticket_called(self, event):
        # event: {"type": "ticket.called", "variant", "ticketId", "ticketNo", "location", "language", "ts"}
        await self.send(json.dumps(event))
