from unittest.mock import patch

from django.conf import settings
from django.db import DatabaseError
from django.test import TestCase

from visitor.models import Visitor, Visit
from visitor.tasks import auto_checkout_active_visits


class TestAutoCheckoutTask(TestCase):

    def test_checks_out_active_visits(self):
        visitor = Visitor.objects.create(full_name="Marie Kabila", year_of_birth=1990, phone_number="0808123456")
        Visit.objects.create(visitor=visitor)

        result = auto_checkout_active_visits.delay().get()

        self.assertEqual(result, {'status': 'success', 'checked_out': 1})
        self.assertFalse(Visit.objects.filter(active=True).exists())

    def test_nothing_to_check_out(self):
        self.assertEqual(auto_checkout_active_visits(), {'status': 'success', 'checked_out': 0})

    @patch('visitor.tasks.check_out_all_active_visits', side_effect=DatabaseError("db down"))
    def test_database_error(self, mock_checkout):
        result = auto_checkout_active_visits()
        self.assertEqual(result['status'], 'error')
        self.assertIn('db down', result['reason'])

    def test_scheduled_at_midnight(self):
        entry = settings.CELERY_BEAT_SCHEDULE['midnight-auto-checkout']
        self.assertEqual(entry['task'], 'visitor.tasks.auto_checkout_active_visits')
        self.assertEqual(entry['schedule'].hour, {0})
        self.assertEqual(entry['schedule'].minute, {0})
