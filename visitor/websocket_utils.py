from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)

# Every reception screen joins this group on connect
NOTIFICATIONS_GROUP = "visitor_notifications"


def _group_send(payload):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning("No channel layer configured, skipping notification")
        return
    async_to_sync(channel_layer.group_send)(NOTIFICATIONS_GROUP, payload)


def broadcast_check_in(visitor, purpose=None):
    """Send a WebSocket notification to reception screens when a visitor checks in."""
    _group_send({
        "type": "check_in",
        "visitor": {
            "id": visitor.id,
            "fullName": visitor.full_name,
            "phoneNumber": visitor.phone_number,
            "verified": visitor.verified,
        },
        "purpose": purpose or "Not specified",
        "timestamp": timezone.now().isoformat(),
    })


def broadcast_check_out(visit):
    """Send a WebSocket notification to reception screens when a visit ends."""
    _group_send({
        "type": "check_out",
        "visitId": visit.id,
        "visitorId": visit.visitor_id,
        "timestamp": (visit.check_out_time or timezone.now()).isoformat(),
    })
