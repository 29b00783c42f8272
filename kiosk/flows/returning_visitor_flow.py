# flows/returning_visitor_flow.py

import copy
import logging
import threading

from django.conf import settings

from vms.utils.phone_utils import (
    normalize_phone_number, format_phone_number_for_display, is_lookup_ready
)
from kiosk.directory_client import (
    DirectoryClient, Found, FoundWithActiveVisit, NotFound, LookupFailed
)
from kiosk.utils.boundary import error_boundary
from kiosk.utils.debounce import Debouncer
from .active_visit_guard import resolve_active_visit
from .outcomes import Prefill, ReturningVisitorConfirmed, AlreadyCheckedIn, ContinueAsNewVisitor
from .retry_policy import on_not_found, on_lookup_failed, LOOKUP_ERROR_MESSAGE, YEAR_MISMATCH_MESSAGE

logger = logging.getLogger(__name__)


class WizardStep:
    """Constants for returning-visitor wizard steps."""
    SELECTION = 'selection'
    PHONE_INPUT = 'phone-input'
    YEAR_INPUT = 'year-input'
    REVIEW = 'review'


class InvalidTransition(Exception):
    """Raised when an action is not allowed from the current step."""

    def __init__(self, action, step):
        self.action = action
        self.step = step
        super().__init__(f"Cannot {action} from step {step!r}")


class WizardState:
    """Everything the dialog renders. A fresh instance is the reset state."""

    def __init__(self):
        self.step = WizardStep.SELECTION
        self.phone_number = ''
        self.formatted_phone_number = ''
        self.year_of_birth = None
        self.is_loading = False
        self.is_found = False
        self.error_message = None
        self.retry_count = 0
        self.is_escalated = False
        self.visitor = None

    def as_dict(self):
        return copy.deepcopy(vars(self))

    def __eq__(self, other):
        return isinstance(other, WizardState) and vars(self) == vars(other)

    def __repr__(self):
        return f"WizardState(step={self.step!r}, phone_number={self.phone_number!r}, retry_count={self.retry_count})"


def _default_scheduler(delay, callback, *args):
    timer = threading.Timer(delay, callback, args=args)
    timer.daemon = True
    timer.start()
    return timer


class ReturningVisitorWizard:
    """
    Returning-visitor check-in dialog.

    Steps: selection -> phone-input [-> year-input] -> review.

    A lookup is split into begin_lookup() and complete_lookup() so results can
    arrive from another thread; only the completion matching the latest
    request id is applied. Results arriving after close, back or a newer
    request are dropped.

    Host callbacks:
        on_new_visitor_selected(): the visitor chose "new visitor"
        on_returning_visitor_confirmed(outcome): ReturningVisitorConfirmed,
            AlreadyCheckedIn or ContinueAsNewVisitor, delivered through
            `scheduler` after `continuation_delay` seconds
        on_close(): the dialog was closed
    """

    def __init__(self, client=None, on_new_visitor_selected=None,
                 on_returning_visitor_confirmed=None, on_close=None,
                 scheduler=None, continuation_delay=None, debounce_delay=None,
                 live_lookup=False, timer_factory=threading.Timer):
        self.client = client or DirectoryClient()
        self.on_new_visitor_selected = on_new_visitor_selected
        self.on_returning_visitor_confirmed = on_returning_visitor_confirmed
        self.on_close = on_close
        self.scheduler = scheduler or _default_scheduler
        self.continuation_delay = (
            continuation_delay if continuation_delay is not None
            else settings.VMS_CONTINUATION_DELAY
        )
        self.live_lookup = live_lookup
        self._debouncer = Debouncer(
            debounce_delay if debounce_delay is not None else settings.VMS_LOOKUP_DEBOUNCE,
            timer_factory=timer_factory
        )

        self._lock = threading.RLock()
        self._request_seq = 0
        self._latest_request = None
        self.is_open = False
        self.state = WizardState()

    # Dialog lifecycle

    def open(self):
        with self._lock:
            self._reset()
            self.is_open = True
            logger.info("Returning visitor dialog opened")

    def close(self):
        """Close from any step, discarding everything typed so far."""
        with self._lock:
            self._reset()
            self._close_dialog()

    def _reset(self):
        self._debouncer.cancel()
        self._latest_request = None
        self.state = WizardState()

    def _close_dialog(self):
        was_open = self.is_open
        self.is_open = False
        if was_open:
            logger.info("Returning visitor dialog closed")
            if self.on_close:
                self.on_close()

    def _require(self, action, *steps):
        if not self.is_open or self.state.step not in steps:
            step = self.state.step if self.is_open else 'closed'
            raise InvalidTransition(action, step)

    # Selection

    def select_new_visitor(self):
        with self._lock:
            self._require('select new visitor', WizardStep.SELECTION)
            self._reset()
            self._close_dialog()
        if self.on_new_visitor_selected:
            self.on_new_visitor_selected()

    def select_returning_visitor(self):
        with self._lock:
            self._require('select returning visitor', WizardStep.SELECTION)
            self.state.step = WizardStep.PHONE_INPUT

    # Input

    def enter_phone_number(self, raw):
        """Store the typed number in normalized and display form."""
        with self._lock:
            self._require('enter phone number', WizardStep.PHONE_INPUT)
            if self.state.is_loading:
                # The in-flight result belongs to the previous number
                self._latest_request = None
                self.state.is_loading = False
            self.state.phone_number = normalize_phone_number(raw)
            self.state.formatted_phone_number = format_phone_number_for_display(self.state.phone_number)
            self.state.error_message = None

            if self.live_lookup and is_lookup_ready(self.state.phone_number):
                self._debouncer.call(self.submit_lookup)
            else:
                self._debouncer.cancel()

    def request_year_verification(self):
        """Ask for the year of birth to disambiguate a shared phone number."""
        with self._lock:
            self._require('verify year of birth', WizardStep.PHONE_INPUT)
            if not is_lookup_ready(self.state.phone_number):
                raise InvalidTransition('verify year of birth without a complete phone number', self.state.step)
            self._debouncer.cancel()
            self._latest_request = None
            self.state.is_loading = False
            self.state.error_message = None
            self.state.step = WizardStep.YEAR_INPUT

    def enter_year_of_birth(self, value):
        with self._lock:
            self._require('enter year of birth', WizardStep.YEAR_INPUT)
            try:
                self.state.year_of_birth = int(str(value).strip())
            except (TypeError, ValueError):
                self.state.year_of_birth = None
            self.state.error_message = None

    @property
    def can_lookup(self):
        state = self.state
        if not self.is_open or state.is_loading or not is_lookup_ready(state.phone_number):
            return False
        if state.step == WizardStep.PHONE_INPUT:
            return True
        return state.step == WizardStep.YEAR_INPUT and state.year_of_birth is not None

    # Lookup

    def begin_lookup(self):
        """
        Start a lookup.

        Returns:
            int: request id to pass to complete_lookup, or None when the input
            is incomplete (the lookup is suppressed without a message)
        """
        with self._lock:
            if not self.can_lookup:
                return None
            self._request_seq += 1
            self._latest_request = self._request_seq
            self.state.is_loading = True
            self.state.error_message = None
            return self._request_seq

    def complete_lookup(self, request_id, result):
        """
        Apply a lookup result.

        Returns:
            bool: False when the result was stale and discarded
        """
        with self._lock:
            if not self.is_open or request_id is None or request_id != self._latest_request:
                logger.warning(f"Discarding stale lookup response for request {request_id}")
                return False

            self._latest_request = None
            self.state.is_loading = False

            if isinstance(result, FoundWithActiveVisit):
                visitor = copy.deepcopy(result.visitor)
                active_visit = resolve_active_visit(visitor, result.visit)
                logger.info(f"Visitor {visitor.get('id')} is already checked in")
                self._finish(AlreadyCheckedIn(visitor, active_visit))
            elif isinstance(result, Found):
                self.state.visitor = copy.deepcopy(result.visitor)
                self.state.is_found = True
                self.state.error_message = None
                self.state.step = WizardStep.REVIEW
                logger.info(f"Returning visitor {self.state.visitor.get('id')} found")
            elif isinstance(result, NotFound):
                self._apply_not_found()
            else:
                if isinstance(result, LookupFailed):
                    logger.error(f"Visitor lookup failed: {result.reason}")
                self.state.retry_count, self.state.error_message, self.state.is_escalated = on_lookup_failed(
                    self.state.retry_count, self.state.is_escalated
                )
            return True

    def _apply_not_found(self):
        state = self.state
        if state.step == WizardStep.YEAR_INPUT:
            state.error_message = YEAR_MISMATCH_MESSAGE
            return
        state.retry_count, state.error_message, state.is_escalated = on_not_found(state.retry_count)
        logger.info(f"No visitor for {state.phone_number} (retry {state.retry_count}, escalated {state.is_escalated})")

    @error_boundary(lambda exc: LookupFailed(str(exc) or LOOKUP_ERROR_MESSAGE))
    def _lookup(self, phone_number, year_of_birth):
        return self.client.lookup(phone_number, year_of_birth)

    def submit_lookup(self):
        """
        Run a lookup synchronously with the current input.

        Returns:
            The LookupResult, or None when the lookup was suppressed
        """
        with self._lock:
            request_id = self.begin_lookup()
            if request_id is None:
                return None
            phone_number = self.state.phone_number
            year_of_birth = self.state.year_of_birth if self.state.step == WizardStep.YEAR_INPUT else None

        result = self._lookup(phone_number, year_of_birth)
        self.complete_lookup(request_id, result)
        return result

    # Navigation

    def back(self):
        with self._lock:
            step = self.state.step
            self._require('go back', WizardStep.PHONE_INPUT, WizardStep.YEAR_INPUT, WizardStep.REVIEW)
            self._debouncer.cancel()
            self._latest_request = None
            self.state.is_loading = False
            self.state.error_message = None

            if step == WizardStep.PHONE_INPUT:
                self.state = WizardState()
            elif step == WizardStep.YEAR_INPUT:
                self.state.year_of_birth = None
                self.state.step = WizardStep.PHONE_INPUT
            else:
                self.state.visitor = None
                self.state.is_found = False
                self.state.step = WizardStep.PHONE_INPUT

    def confirm(self):
        """Hand the reviewed visitor to the host."""
        with self._lock:
            self._require('confirm', WizardStep.REVIEW)
            if not self.state.is_found or self.state.visitor is None:
                raise InvalidTransition('confirm without a visitor', self.state.step)
            self._finish(ReturningVisitorConfirmed(copy.deepcopy(self.state.visitor)))

    def continue_with_no_match(self):
        """Register as a new visitor with the typed phone number as prefill."""
        with self._lock:
            self._require('continue as new visitor', WizardStep.PHONE_INPUT, WizardStep.YEAR_INPUT)
            if not self.state.is_escalated:
                raise InvalidTransition('continue as new visitor before escalation', self.state.step)
            prefill = Prefill(self.state.phone_number, self.state.year_of_birth)
            self._finish(ContinueAsNewVisitor(prefill))

    def _finish(self, outcome):
        self._reset()
        self._close_dialog()
        self.scheduler(self.continuation_delay, self._deliver, outcome)

    def _deliver(self, outcome):
        logger.info(f"Delivering check-in outcome {outcome.__class__.__name__}")
        if self.on_returning_visitor_confirmed:
            self.on_returning_visitor_confirmed(outcome)
