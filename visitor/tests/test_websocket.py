"""
Tests for the live notification websocket.
"""

import json

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.test import TransactionTestCase

from visitor.consumers import NotificationConsumer
from visitor.models import Visitor, Visit
from visitor.websocket_utils import broadcast_check_in, broadcast_check_out


class TestNotificationConsumer(TransactionTestCase):

    def setUp(self):
        self.visitor = Visitor.objects.create(
            full_name="Marie Kabila", year_of_birth=1990, phone_number="0808123456"
        )

    async def _connect(self):
        communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
        connected, _ = await communicator.connect()
        self.assertTrue(connected)
        message = await communicator.receive_json_from()
        self.assertEqual(message['type'], 'connection')
        return communicator

    def test_connect_and_heartbeat(self):
        async def scenario():
            communicator = await self._connect()
            await communicator.send_json_to({'type': 'heartbeat'})
            reply = await communicator.receive_json_from()
            self.assertEqual(reply['type'], 'heartbeat_ack')
            self.assertIn('timestamp', reply)
            await communicator.disconnect()

        async_to_sync(scenario)()

    def test_invalid_json(self):
        async def scenario():
            communicator = await self._connect()
            await communicator.send_to(text_data="not json")
            reply = await communicator.receive_json_from()
            self.assertEqual(reply, {'type': 'error', 'message': 'Invalid JSON format'})
            await communicator.disconnect()

        async_to_sync(scenario)()

    def test_check_in_and_check_out_broadcasts(self):
        visit = Visit.objects.create(visitor=self.visitor)
        channel_layer = get_channel_layer()

        async def scenario():
            communicator = await self._connect()

            await channel_layer.group_send("visitor_notifications", {
                "type": "check_in",
                "visitor": {"id": self.visitor.id, "fullName": "Marie Kabila",
                            "phoneNumber": "0808123456", "verified": False},
                "purpose": "Not specified",
                "timestamp": "2026-01-01T08:00:00+00:00",
            })
            message = await communicator.receive_json_from()
            self.assertEqual(message['type'], 'check-in')
            self.assertEqual(message['visitor']['fullName'], "Marie Kabila")
            self.assertEqual(message['purpose'], "Not specified")

            await channel_layer.group_send("visitor_notifications", {
                "type": "check_out",
                "visitId": visit.id,
                "visitorId": self.visitor.id,
                "timestamp": "2026-01-01T17:00:00+00:00",
            })
            message = await communicator.receive_json_from()
            self.assertEqual(message['type'], 'check-out')
            self.assertEqual(message['visitId'], visit.id)
            await communicator.disconnect()

        async_to_sync(scenario)()


class TestBroadcastHelpers(TransactionTestCase):

    def setUp(self):
        self.visitor = Visitor.objects.create(
            full_name="Marie Kabila", year_of_birth=1990, phone_number="0808123456"
        )
        self.channel_layer = get_channel_layer()
        self.channel_name = async_to_sync(self.channel_layer.new_channel)()
        async_to_sync(self.channel_layer.group_add)("visitor_notifications", self.channel_name)

    def tearDown(self):
        async_to_sync(self.channel_layer.group_discard)("visitor_notifications", self.channel_name)

    def receive(self):
        return async_to_sync(self.channel_layer.receive)(self.channel_name)

    def test_broadcast_check_in(self):
        broadcast_check_in(self.visitor)
        event = self.receive()
        self.assertEqual(event['type'], 'check_in')
        self.assertEqual(event['visitor'], {
            'id': self.visitor.id,
            'fullName': "Marie Kabila",
            'phoneNumber': "0808123456",
            'verified': False,
        })
        self.assertEqual(event['purpose'], "Not specified")
        json.dumps(event)

    def test_broadcast_check_out(self):
        visit = Visit.objects.create(visitor=self.visitor)
        visit.check_out()
        broadcast_check_out(visit)
        event = self.receive()
        self.assertEqual(event['type'], 'check_out')
        self.assertEqual(event['visitId'], visit.id)
        self.assertEqual(event['visitorId'], self.visitor.id)
