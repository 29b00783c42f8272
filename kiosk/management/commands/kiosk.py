import time

from django.core.management.base import BaseCommand

from kiosk.directory_client import DirectoryClient, DirectoryError
from kiosk.flows.outcomes import AlreadyCheckedIn, ContinueAsNewVisitor
from kiosk.flows.returning_visitor_flow import ReturningVisitorWizard, WizardStep


def _run_after(delay, callback, *args):
    # The terminal is single-threaded: wait out the delay, then continue
    time.sleep(delay)
    callback(*args)


class Command(BaseCommand):
    help = 'Run the visitor check-in kiosk in the terminal'

    def add_arguments(self, parser):
        parser.add_argument(
            '--directory-url',
            type=str,
            default=None,
            help='Visitor directory root (default: VMS_DIRECTORY_URL)'
        )
        parser.add_argument(
            '--once',
            action='store_true',
            help='Handle a single visitor and exit'
        )

    def handle(self, *args, **options):
        self.client = DirectoryClient(base_url=options['directory_url'])
        self.wizard = ReturningVisitorWizard(
            client=self.client,
            on_new_visitor_selected=lambda: self.register_new_visitor(),
            on_returning_visitor_confirmed=self.handle_outcome,
            scheduler=_run_after,
        )
        self.quit = False

        self.stdout.write(self.style.SUCCESS(f'Visitor kiosk connected to {self.client.base_url}'))
        while not self.quit:
            self.wizard.open()
            while self.wizard.is_open and not self.quit:
                self.run_step()
            if options['once']:
                break

        self.stdout.write('Goodbye')

    def prompt(self, text):
        try:
            return input(text).strip()
        except EOFError:
            self.quit = True
            return 'q'

    def run_step(self):
        state = self.wizard.state
        if state.error_message:
            self.stdout.write(self.style.WARNING(state.error_message))

        if state.step == WizardStep.SELECTION:
            choice = self.prompt('[r] returning visitor  [n] new visitor  [q] quit: ').lower()
            if choice == 'r':
                self.wizard.select_returning_visitor()
            elif choice == 'n':
                self.wizard.select_new_visitor()
            elif choice == 'q':
                self.quit = True
                self.wizard.close()

        elif state.step == WizardStep.PHONE_INPUT:
            options = '[b] back  [y] verify with year of birth'
            if state.is_escalated:
                options += '  [n] register as new visitor'
            value = self.prompt(f'Phone number ({options}): ')
            if value.lower() == 'b':
                self.wizard.back()
            elif value.lower() == 'y':
                self.wizard.request_year_verification()
            elif value.lower() == 'n' and state.is_escalated:
                self.wizard.continue_with_no_match()
            elif value.lower() == 'q':
                self.quit = True
                self.wizard.close()
            else:
                self.wizard.enter_phone_number(value)
                if self.wizard.submit_lookup() is None:
                    self.stdout.write(self.style.WARNING('Please enter 9 or 10 digits'))

        elif state.step == WizardStep.YEAR_INPUT:
            options = '[b] back'
            if state.is_escalated:
                options += '  [n] register as new visitor'
            value = self.prompt(f'Year of birth for {state.formatted_phone_number} ({options}): ')
            if value.lower() == 'b':
                self.wizard.back()
            elif value.lower() == 'n' and state.is_escalated:
                self.wizard.continue_with_no_match()
            else:
                self.wizard.enter_year_of_birth(value)
                if self.wizard.submit_lookup() is None:
                    self.stdout.write(self.style.WARNING('Please enter a valid year'))

        elif state.step == WizardStep.REVIEW:
            visitor = state.visitor
            self.stdout.write(f"  Name: {visitor.get('fullName')}")
            self.stdout.write(f"  Phone: {state.formatted_phone_number}")
            self.stdout.write(f"  Year of birth: {visitor.get('yearOfBirth')}")
            choice = self.prompt('[c] confirm  [b] back: ').lower()
            if choice == 'c':
                self.wizard.confirm()
            elif choice == 'b':
                self.wizard.back()

    def handle_outcome(self, outcome):
        if isinstance(outcome, AlreadyCheckedIn):
            visit = outcome.active_visit
            self.stdout.write(self.style.WARNING(
                f"{outcome.visitor.get('fullName')} is already checked in since {visit.get('checkInTime')}"
            ))
            if visit.get('id') is not None and self.prompt('Check out now? [y/N]: ').lower() == 'y':
                self.check_out(visit['id'])
        elif isinstance(outcome, ContinueAsNewVisitor):
            self.register_new_visitor(outcome.prefill)
        else:
            purpose = self.prompt('Purpose of visit (optional): ')
            try:
                response = self.client.check_in_returning(outcome.visitor['id'], purpose or None)
            except DirectoryError as e:
                self.stdout.write(self.style.ERROR(f'Check-in failed: {e.message}'))
                return
            self.stdout.write(self.style.SUCCESS(
                f"Welcome back, {response['visitor']['fullName']}! Checked in (visit {response['visit']['id']})"
            ))

    def register_new_visitor(self, prefill=None):
        self.stdout.write('New visitor registration')
        form = {
            'firstName': self.prompt('First name: '),
            'middleName': self.prompt('Middle name (optional): '),
            'lastName': self.prompt('Last name: '),
            'yearOfBirth': self.prompt(
                f'Year of birth [{prefill.year_of_birth}]: ' if prefill and prefill.year_of_birth
                else 'Year of birth: '
            ),
        }
        if prefill and prefill.year_of_birth and not form['yearOfBirth']:
            form['yearOfBirth'] = prefill.year_of_birth

        phone_number = self.prompt(
            f'Phone number [{prefill.phone_number}]: ' if prefill else 'Phone number: '
        )
        form['phoneNumber'] = phone_number or (prefill.phone_number if prefill else '')
        form['email'] = self.prompt('Email (optional): ') or None
        form['municipality'] = self.prompt('Municipality (optional): ')
        form['purpose'] = self.prompt('Purpose of visit (optional): ') or None

        try:
            response = self.client.check_in(form)
        except DirectoryError as e:
            if e.already_checked_in:
                self.stdout.write(self.style.WARNING(f'{e.message}'))
            else:
                self.stdout.write(self.style.ERROR(f'Registration failed: {e.message}'))
            return

        self.stdout.write(self.style.SUCCESS(
            f"{response['visitor']['fullName']} checked in (visit {response['visit']['id']})"
        ))

    def check_out(self, visit_id):
        try:
            self.client.check_out(visit_id)
        except DirectoryError as e:
            self.stdout.write(self.style.ERROR(f'Check-out failed: {e.message}'))
            return
        self.stdout.write(self.style.SUCCESS('Checked out'))
