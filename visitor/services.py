from django.db import IntegrityError, transaction
from django.utils import timezone
import logging

from vms.utils.phone_utils import normalize_phone_number
from .models import Visitor, Visit, SystemLog
from .websocket_utils import broadcast_check_in, broadcast_check_out

logger = logging.getLogger(__name__)


class VisitorDirectoryError(Exception):
    """Base class for directory rule violations surfaced to API callers."""


class ActiveVisitExists(VisitorDirectoryError):
    """Raised when a check-in would open a second active visit for a visitor."""

    def __init__(self, visitor, visit):
        self.visitor = visitor
        self.visit = visit
        super().__init__(f"Visitor {visitor.id} already has active visit {visit.id}")


class VisitAlreadyCheckedOut(VisitorDirectoryError):
    def __init__(self, visit):
        self.visit = visit
        super().__init__(f"Visit {visit.id} is already checked out")


def log_action(action, details):
    """Write a SystemLog entry and mirror it to the application log."""
    logger.info(f"[{action}] {details}")
    return SystemLog.objects.create(action=action, details=details)


def find_visitor_by_phone(phone_number):
    """
    Find a visitor by phone number, ignoring soft-deleted records.

    The number is normalized first, so '808 123 456' and '0808123456'
    resolve to the same visitor.
    """
    normalized = normalize_phone_number(phone_number)
    if not normalized:
        return None
    return Visitor.objects.filter(phone_number=normalized, deleted=False).first()


def get_active_visit(visitor):
    return Visit.objects.filter(visitor=visitor, active=True).order_by('-check_in_time').first()


def check_in_visitor(visitor, purpose=None, action='VISITOR_CHECK_IN', details=None):
    """
    Open a new visit for a visitor.

    Args:
        visitor: Visitor instance (must not be soft-deleted)
        purpose: Optional purpose of the visit
        action: SystemLog action recorded for this check-in
        details: SystemLog details, defaults to a generic message

    Returns:
        Visit: The created visit

    Raises:
        ActiveVisitExists: If the visitor is already on the premises
    """
    try:
        with transaction.atomic():
            active_visit = (
                Visit.objects.select_for_update()
                .filter(visitor=visitor, active=True)
                .first()
            )
            if active_visit:
                raise ActiveVisitExists(visitor, active_visit)

            visit = Visit.objects.create(visitor=visitor, purpose=purpose or None)
            log_action(
                action,
                details or f'Visitor "{visitor.full_name}" (ID: {visitor.id}) checked in.'
            )
            transaction.on_commit(lambda: broadcast_check_in(visitor, purpose))
    except IntegrityError:
        # Lost a race with a concurrent check-in; the constraint kept the invariant
        active_visit = get_active_visit(visitor)
        if active_visit is None:
            raise
        raise ActiveVisitExists(visitor, active_visit)

    return visit


def check_out_visit(visit):
    """
    Close an active visit.

    Raises:
        VisitAlreadyCheckedOut: If the visit was already closed
    """
    if not visit.active:
        raise VisitAlreadyCheckedOut(visit)

    with transaction.atomic():
        visit.check_out()
        log_action(
            'VISITOR_CHECK_OUT',
            f'Visitor "{visit.visitor.full_name}" (ID: {visit.visitor_id}) checked out of visit {visit.id}.'
        )
        transaction.on_commit(lambda: broadcast_check_out(visit))

    return visit


def check_out_all_active_visits():
    """
    Check out every active visit at once (midnight auto-checkout).

    Returns:
        int: Number of visits checked out
    """
    now = timezone.now()
    with transaction.atomic():
        checked_out = Visit.objects.filter(active=True).update(check_out_time=now, active=False)
        log_action(
            'AUTO_CHECKOUT',
            f'{checked_out} active visits were automatically checked out.'
        )

    logger.info(f"Auto-checkout completed: {checked_out} active visits checked out")
    return checked_out
