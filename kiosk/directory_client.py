"""
HTTP client for the Visitor Directory API.

The lookup call never raises: every response is classified into one of the
LookupResult variants the check-in wizard understands. The submission calls
(check-in, check-out) raise DirectoryError so the caller can show the
directory's message.
"""

import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class LookupResult:
    """Base class for the outcome of a returning-visitor lookup."""
    found = False

    def __repr__(self):
        fields = ', '.join(f'{key}={value!r}' for key, value in vars(self).items())
        return f'{self.__class__.__name__}({fields})'

    def __eq__(self, other):
        return type(self) is type(other) and vars(self) == vars(other)


class Found(LookupResult):
    """A visitor matched and has no open visit."""
    found = True

    def __init__(self, visitor):
        self.visitor = visitor


class FoundWithActiveVisit(LookupResult):
    """
    A visitor matched and is already checked in.

    `visit` is the raw payload from the directory and may be missing or
    malformed; the active-visit guard deals with that.
    """
    found = True

    def __init__(self, visitor, visit=None):
        self.visitor = visitor
        self.visit = visit


class NotFound(LookupResult):
    def __init__(self, message="No visitor found with this phone number"):
        self.message = message


class LookupFailed(LookupResult):
    """Transport error, timeout, server error or unreadable body."""

    def __init__(self, reason):
        self.reason = reason


class DirectoryError(Exception):
    """Raised when a directory submission call fails."""

    def __init__(self, message, status_code=None, payload=None):
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}
        super().__init__(message)

    @property
    def already_checked_in(self):
        return self.status_code == 409 and bool(self.payload.get('alreadyCheckedIn'))


class DirectoryClient:
    """
    Thin requests-based client for /api/visitors/*.

    Args:
        base_url: Directory root, defaults to settings.VMS_DIRECTORY_URL
        timeout: Per-request timeout in seconds, defaults to settings.VMS_DIRECTORY_TIMEOUT
        session: Optional requests.Session (injected in tests)
    """

    def __init__(self, base_url=None, timeout=None, session=None):
        self.base_url = (base_url or settings.VMS_DIRECTORY_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else settings.VMS_DIRECTORY_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/visitors/{path}"

    def lookup(self, phone_number: str, year_of_birth=None) -> LookupResult:
        """
        Look up a returning visitor.

        Returns:
            Found, FoundWithActiveVisit, NotFound or LookupFailed
        """
        payload = {"phoneNumber": phone_number}
        if year_of_birth is not None:
            payload["yearOfBirth"] = year_of_birth

        try:
            response = self.session.post(self._url("lookup"), json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Directory lookup failed: {str(e)}")
            return LookupFailed(str(e))

        status_code = response.status_code
        if not (200 <= status_code < 300 or 400 <= status_code < 500):
            logger.error(f"Directory lookup returned HTTP {status_code}")
            return LookupFailed(f"Directory returned HTTP {status_code}")

        try:
            body = response.json()
        except ValueError:
            logger.error(f"Directory lookup returned an unreadable body (HTTP {status_code})")
            return LookupFailed("Malformed directory response")

        if not isinstance(body, dict):
            return LookupFailed("Malformed directory response")

        if status_code >= 400 or not body.get('found'):
            return NotFound(body.get('message') or "No visitor found with this phone number")

        visitor = body.get('visitor')
        if not isinstance(visitor, dict):
            logger.error("Directory lookup reported a match without a visitor payload")
            return LookupFailed("Malformed visitor payload")

        if body.get('hasActiveVisit'):
            active_visit = body.get('activeVisit')
            visit = active_visit.get('visit') if isinstance(active_visit, dict) else None
            return FoundWithActiveVisit(visitor, visit)

        return Found(visitor)

    def _request(self, method, path, payload=None):
        try:
            response = self.session.request(method, self._url(path), json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Directory request {method} {path} failed: {str(e)}")
            raise DirectoryError(f"Could not reach the visitor directory: {str(e)}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.status_code >= 400:
            message = body.get('message') or f"Directory returned HTTP {response.status_code}"
            logger.warning(f"Directory request {method} {path} rejected: {message}")
            raise DirectoryError(message, status_code=response.status_code, payload=body)

        return body

    def check_in(self, form):
        """
        Submit the new-visitor form.

        Args:
            form: dict with fullName (or firstName/lastName), yearOfBirth,
                phoneNumber and the optional email, purpose, municipality

        Returns:
            dict: {visitor, visit, isReturningVisitor}
        """
        return self._request('POST', 'check-in', form)

    def check_in_returning(self, visitor_id, purpose=None):
        payload = {"visitorId": visitor_id}
        if purpose:
            payload["purpose"] = purpose
        return self._request('POST', 'check-in/returning', payload)

    def check_out(self, visit_id):
        return self._request('POST', 'check-out', {"visitId": visit_id})

    def get_active_visit(self, visitor_id):
        """Return {visitor, visit} for a visitor on the premises, or None."""
        try:
            return self._request('GET', f'{visitor_id}/active-visit')
        except DirectoryError as e:
            if e.status_code == 404:
                return None
            raise
