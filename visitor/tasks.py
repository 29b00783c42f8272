from celery import shared_task
from django.db import DatabaseError
import logging

from .services import check_out_all_active_visits

logger = logging.getLogger(__name__)


@shared_task
def auto_checkout_active_visits():
    """
    Check out every visitor still on the premises.

    Scheduled by Celery beat at midnight (see CELERY_BEAT_SCHEDULE).
    """
    try:
        checked_out = check_out_all_active_visits()
    except DatabaseError as e:
        logger.error(f"Error during automatic checkout: {str(e)}")
        return {'status': 'error', 'reason': str(e)}

    return {'status': 'success', 'checked_out': checked_out}
