import json
from channels.generic.websocket import AsyncWebsocketConsumer
from django.utils import timezone
import logging

from .websocket_utils import NOTIFICATIONS_GROUP

logger = logging.getLogger(__name__)


class NotificationConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for reception live notifications.
    Pushes check-in and check-out events and answers client heartbeats.
    """

    async def connect(self):
        await self.channel_layer.group_add(
            NOTIFICATIONS_GROUP,
            self.channel_name
        )
        await self.accept()
        logger.info(f"Notification client connected: {self.channel_name}")

        await self.send(text_data=json.dumps({
            'type': 'connection',
            'message': 'Connected to visitor management system notifications'
        }))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(
            NOTIFICATIONS_GROUP,
            self.channel_name
        )
        logger.info(f"Notification client disconnected: {self.channel_name} (code {close_code})")

    async def receive(self, text_data=None, bytes_data=None):
        """Handle incoming WebSocket messages"""
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError:
            await self.send_error('Invalid JSON format')
            return

        message_type = data.get('type') if isinstance(data, dict) else None

        if message_type == 'heartbeat':
            await self.send(text_data=json.dumps({
                'type': 'heartbeat_ack',
                'timestamp': timezone.now().isoformat()
            }))
        else:
            logger.debug(f"Ignoring client message of type {message_type!r}")

    async def check_in(self, event):
        """Relay a check-in broadcast to the client"""
        await self.send(text_data=json.dumps({
            'type': 'check-in',
            'visitor': event['visitor'],
            'purpose': event['purpose'],
            'timestamp': event['timestamp']
        }))

    async def check_out(self, event):
        """Relay a check-out broadcast to the client"""
        await self.send(text_data=json.dumps({
            'type': 'check-out',
            'visitId': event['visitId'],
            'visitorId': event['visitorId'],
            'timestamp': event['timestamp']
        }))

    async def send_error(self, error_message):
        """Send error message to client"""
        await self.send(text_data=json.dumps({
            'type': 'error',
            'message': error_message
        }))
