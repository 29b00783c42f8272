"""
Tests for directory services and the one-active-visit rule.
"""

from unittest.mock import patch
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from visitor.models import Visitor, Visit, SystemLog
from visitor.services import (
    ActiveVisitExists, VisitAlreadyCheckedOut, find_visitor_by_phone, get_active_visit,
    check_in_visitor, check_out_visit, check_out_all_active_visits
)


class TestVisitorServices(TestCase):

    def setUp(self):
        self.visitor = Visitor.objects.create(
            full_name="Marie Kabila", year_of_birth=1990, phone_number="808 123 456"
        )

    def test_phone_number_is_stored_normalized(self):
        self.visitor.refresh_from_db()
        self.assertEqual(self.visitor.phone_number, "0808123456")

    def test_find_visitor_by_phone(self):
        self.assertEqual(find_visitor_by_phone("0808-123-456"), self.visitor)
        self.assertIsNone(find_visitor_by_phone("0999999999"))
        self.assertIsNone(find_visitor_by_phone(""))

        self.visitor.deleted = True
        self.visitor.save()
        self.assertIsNone(find_visitor_by_phone("0808123456"))

    @patch('visitor.services.broadcast_check_in')
    def test_check_in_broadcasts_after_commit(self, mock_broadcast):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            visit = check_in_visitor(self.visitor, "Meeting")
        self.assertEqual(len(callbacks), 1)
        mock_broadcast.assert_called_once_with(self.visitor, "Meeting")
        self.assertTrue(visit.active)
        self.assertEqual(get_active_visit(self.visitor), visit)
        self.assertEqual(SystemLog.objects.get().action, 'VISITOR_CHECK_IN')

    @patch('visitor.services.broadcast_check_in')
    def test_second_check_in_is_rejected(self, mock_broadcast):
        first = check_in_visitor(self.visitor)
        with self.assertRaises(ActiveVisitExists) as ctx:
            check_in_visitor(self.visitor)
        self.assertEqual(ctx.exception.visit, first)
        self.assertEqual(Visit.objects.filter(visitor=self.visitor, active=True).count(), 1)

    def test_database_enforces_one_active_visit(self):
        Visit.objects.create(visitor=self.visitor)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Visit.objects.create(visitor=self.visitor)

    def test_completed_visits_do_not_conflict(self):
        Visit.objects.create(visitor=self.visitor, active=False)
        Visit.objects.create(visitor=self.visitor, active=False)
        Visit.objects.create(visitor=self.visitor)
        self.assertEqual(self.visitor.visits.count(), 3)

    @patch('visitor.services.broadcast_check_out')
    def test_check_out(self, mock_broadcast):
        visit = Visit.objects.create(visitor=self.visitor)
        with self.captureOnCommitCallbacks(execute=True):
            check_out_visit(visit)
        visit.refresh_from_db()
        self.assertFalse(visit.active)
        self.assertIsNotNone(visit.check_out_time)
        mock_broadcast.assert_called_once_with(visit)

        with self.assertRaises(VisitAlreadyCheckedOut):
            check_out_visit(visit)

    def test_check_out_all_active_visits(self):
        other = Visitor.objects.create(full_name="Paul Mbuyi", year_of_birth=1975, phone_number="0899000111")
        first = Visit.objects.create(visitor=self.visitor)
        second = Visit.objects.create(visitor=other)
        earlier = timezone.now() - timedelta(days=1)
        completed = Visit.objects.create(visitor=other, active=False, check_out_time=earlier)

        self.assertEqual(check_out_all_active_visits(), 2)
        self.assertFalse(Visit.objects.filter(active=True).exists())
        for visit in (first, second):
            visit.refresh_from_db()
            self.assertIsNotNone(visit.check_out_time)
        completed.refresh_from_db()
        self.assertEqual(completed.check_out_time, earlier)
        log = SystemLog.objects.get(action='AUTO_CHECKOUT')
        self.assertIn('2', log.details)
