import copy
import logging

from django.utils import timezone

logger = logging.getLogger(__name__)


def is_well_formed_visit(visit):
    """A usable active visit has an id and a check-in time."""
    if not isinstance(visit, dict):
        return False
    return visit.get('id') is not None and bool(visit.get('checkInTime'))


def placeholder_visit(visitor, now=None):
    """Stand-in visit for a visitor reported active without a readable visit."""
    visitor_id = visitor.get('id') if isinstance(visitor, dict) else None
    return {
        'id': None,
        'visitorId': visitor_id,
        'checkInTime': (now or timezone.now()).isoformat(),
        'checkOutTime': None,
        'active': True,
        'placeholder': True,
    }


def resolve_active_visit(visitor, visit, now=None):
    """
    Return a copy of the active visit, or a placeholder when the directory
    payload is missing or malformed.
    """
    if is_well_formed_visit(visit):
        return copy.deepcopy(visit)

    visitor_id = visitor.get('id') if isinstance(visitor, dict) else None
    logger.warning(f"Malformed active visit payload for visitor {visitor_id}: {visit!r}; using placeholder")
    return placeholder_visit(visitor, now=now)
