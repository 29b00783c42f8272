"""
Outcomes handed to the host when the returning-visitor wizard finishes.

Every variant answers the same four questions (visitor, prefill,
active_visit, already_checked_in) so the host can handle them uniformly.
"""


class Prefill:
    """Data typed during a failed lookup, carried into new-visitor registration."""

    def __init__(self, phone_number, year_of_birth=None):
        self.phone_number = phone_number
        self.year_of_birth = year_of_birth

    def as_dict(self):
        data = {'phoneNumber': self.phone_number}
        if self.year_of_birth is not None:
            data['yearOfBirth'] = self.year_of_birth
        return data

    def __eq__(self, other):
        return (
            isinstance(other, Prefill)
            and self.phone_number == other.phone_number
            and self.year_of_birth == other.year_of_birth
        )

    def __repr__(self):
        return f'Prefill(phone_number={self.phone_number!r}, year_of_birth={self.year_of_birth!r})'


class CheckInOutcome:
    visitor = None
    prefill = None
    active_visit = None
    already_checked_in = False

    def __repr__(self):
        return (
            f'{self.__class__.__name__}(visitor={self.visitor!r}, prefill={self.prefill!r}, '
            f'active_visit={self.active_visit!r})'
        )


class ReturningVisitorConfirmed(CheckInOutcome):
    """The receptionist confirmed the looked-up visitor."""

    def __init__(self, visitor):
        self.visitor = visitor


class AlreadyCheckedIn(CheckInOutcome):
    """The looked-up visitor is still on the premises."""
    already_checked_in = True

    def __init__(self, visitor, active_visit):
        self.visitor = visitor
        self.active_visit = active_visit


class ContinueAsNewVisitor(CheckInOutcome):
    """No match after escalation; register a new visitor with the typed data."""

    def __init__(self, prefill):
        self.prefill = prefill
