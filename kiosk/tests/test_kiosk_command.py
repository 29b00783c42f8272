from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import SimpleTestCase

from kiosk.directory_client import DirectoryError, Found, FoundWithActiveVisit, NotFound

VISITOR = {'id': 7, 'fullName': 'Marie Kabila', 'yearOfBirth': 1990, 'phoneNumber': '0808123456'}
VISIT = {'id': 3, 'visitorId': 7, 'checkInTime': '2026-01-01T08:00:00Z', 'checkOutTime': None, 'active': True}


@patch('kiosk.management.commands.kiosk.time.sleep')
@patch('kiosk.management.commands.kiosk.DirectoryClient')
class TestKioskCommand(SimpleTestCase):

    def run_kiosk(self, answers):
        out = StringIO()
        with patch('builtins.input', side_effect=answers):
            call_command('kiosk', '--once', stdout=out)
        return out.getvalue()

    def test_returning_visitor_checks_in(self, mock_client_class, mock_sleep):
        client = mock_client_class.return_value
        client.base_url = 'http://directory.test'
        client.lookup.return_value = Found(VISITOR)
        client.check_in_returning.return_value = {'visitor': VISITOR, 'visit': VISIT}

        output = self.run_kiosk(['r', '808 123 456', 'c', 'Meeting'])

        client.lookup.assert_called_once_with('0808123456', None)
        client.check_in_returning.assert_called_once_with(7, 'Meeting')
        mock_sleep.assert_called_once_with(0.15)
        self.assertIn('Welcome back, Marie Kabila!', output)

    def test_already_checked_in_can_check_out(self, mock_client_class, mock_sleep):
        client = mock_client_class.return_value
        client.base_url = 'http://directory.test'
        client.lookup.return_value = FoundWithActiveVisit(VISITOR, VISIT)

        output = self.run_kiosk(['r', '0808123456', 'y'])

        self.assertIn('already checked in', output)
        client.check_out.assert_called_once_with(3)
        client.check_in_returning.assert_not_called()

    def test_escalation_registers_new_visitor_with_prefill(self, mock_client_class, mock_sleep):
        client = mock_client_class.return_value
        client.base_url = 'http://directory.test'
        client.lookup.return_value = NotFound()
        client.check_in.return_value = {'visitor': dict(VISITOR, fullName='Jean Mukendi'), 'visit': VISIT}

        output = self.run_kiosk([
            'r', '0811111111', '0811111111', 'n',
            'Jean', '', 'Mukendi', '1988', '', '', 'Gombe', '',
        ])

        form = client.check_in.call_args.args[0]
        self.assertEqual(form['phoneNumber'], '0811111111')
        self.assertEqual(form['firstName'], 'Jean')
        self.assertEqual(form['municipality'], 'Gombe')
        self.assertIn('Jean Mukendi checked in', output)

    def test_new_visitor_conflict_is_reported(self, mock_client_class, mock_sleep):
        client = mock_client_class.return_value
        client.base_url = 'http://directory.test'
        client.check_in.side_effect = DirectoryError(
            'Visitor already has an active visit', status_code=409,
            payload={'alreadyCheckedIn': True}
        )

        output = self.run_kiosk(['n', 'Jean', '', 'Mukendi', '1988', '0811111111', '', '', ''])

        self.assertIn('Visitor already has an active visit', output)
        client.lookup.assert_not_called()

    def test_quit(self, mock_client_class, mock_sleep):
        client = mock_client_class.return_value
        client.base_url = 'http://directory.test'
        output = self.run_kiosk(['q'])
        self.assertIn('Goodbye', output)
