"""
Retry/escalation rules for returning-visitor lookups.

The first miss invites the visitor to check the number and try again. Every
later miss keeps the counter at its ceiling and offers registration as a new
visitor instead.
"""

MAX_RETRY_COUNT = 1

NOT_FOUND_MESSAGE = "No visitor found with this phone number. Please check the number and try again."
ESCALATED_MESSAGE = "We still could not find you. You can register as a new visitor instead."
LOOKUP_ERROR_MESSAGE = "An error occurred while searching. Please try again."
YEAR_MISMATCH_MESSAGE = "The year of birth doesn't match our records for this phone number."


def on_not_found(retry_count):
    """
    Returns:
        tuple: (retry_count, message, escalated)
    """
    if retry_count < MAX_RETRY_COUNT:
        return retry_count + 1, NOT_FOUND_MESSAGE, False
    return MAX_RETRY_COUNT, ESCALATED_MESSAGE, True


def on_lookup_failed(retry_count, escalated):
    """Transport failures leave the counter and escalation untouched."""
    return retry_count, LOOKUP_ERROR_MESSAGE, escalated
