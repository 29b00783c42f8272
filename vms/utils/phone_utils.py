import re
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, models, transaction


# Local numbers are at most 10 digits, e.g. 0808123456
PHONE_MAX_DIGITS = 10
# Shortest input the lookup will accept: the 9 digits after the leading 0
PHONE_MIN_LOOKUP_DIGITS = 9


def _leading_zero_enabled(leading_zero: Optional[bool]) -> bool:
    if leading_zero is None:
        return getattr(settings, 'VMS_PHONE_LEADING_ZERO', True)
    return leading_zero


def strip_phone_input(phone_number: str) -> str:
    """
    Remove every non-digit character and cap the result at 10 digits.

    Extra trailing digits are dropped silently, the same way the kiosk input
    field refuses keystrokes past the tenth digit.
    """
    if not phone_number:
        return ""
    return re.sub(r'[^\d]', '', str(phone_number))[:PHONE_MAX_DIGITS]


def normalize_phone_number(phone_number: str, leading_zero: Optional[bool] = None) -> str:
    """
    Normalize a typed phone number into the directory lookup key.

    Policy:
    - strip all non-digit characters (spaces, dashes, parentheses, '+')
    - cap the result at 10 digits
    - when the local leading-zero convention is on, prepend '0' only if the
      value is exactly 9 digits and does not already start with '0'

    The function is pure and idempotent: normalizing a normalized number
    returns it unchanged.

    Args:
        phone_number (str): The raw phone number as typed
        leading_zero (bool): Override for the VMS_PHONE_LEADING_ZERO setting

    Returns:
        str: The normalized digit string ('' for empty input)

    Examples:
        >>> normalize_phone_number("0808123456")
        '0808123456'
        >>> normalize_phone_number("808123456")
        '0808123456'
        >>> normalize_phone_number("0808 123 456")
        '0808123456'
        >>> normalize_phone_number("0808-123-456-99")
        '0808123456'
        >>> normalize_phone_number("80812")
        '80812'
    """
    digits_only = strip_phone_input(phone_number)

    if (
        _leading_zero_enabled(leading_zero)
        and len(digits_only) == PHONE_MAX_DIGITS - 1
        and not digits_only.startswith('0')
    ):
        digits_only = f'0{digits_only}'

    return digits_only


def is_lookup_ready(phone_digits: str) -> bool:
    """Whether enough digits were typed to enable the lookup button (9 or 10)."""
    return PHONE_MIN_LOOKUP_DIGITS <= len(strip_phone_input(phone_digits)) <= PHONE_MAX_DIGITS


def is_valid_local_number(phone_number: str, leading_zero: Optional[bool] = None) -> bool:
    """
    Validate a number the way the directory expects it: 10 digits after
    normalization, starting with '0' when the leading-zero convention is on.
    """
    normalized = normalize_phone_number(phone_number, leading_zero=leading_zero)
    if len(normalized) != PHONE_MAX_DIGITS:
        return False
    if _leading_zero_enabled(leading_zero):
        return normalized.startswith('0')
    return True


def format_phone_number_for_display(phone_number: str) -> str:
    """
    Group digits for display while they are typed.

    Numbers with the leading zero are grouped 4-3-3, bare 9-digit numbers 3-3-3.

    Examples:
        >>> format_phone_number_for_display("0808123456")
        '0808 123 456'
        >>> format_phone_number_for_display("080812")
        '0808 12'
        >>> format_phone_number_for_display("808123456")
        '808 123 456'
    """
    digits_only = strip_phone_input(phone_number)
    if not digits_only:
        return ""

    first_group = 4 if digits_only.startswith('0') else 3
    groups = [digits_only[:first_group], digits_only[first_group:first_group + 3], digits_only[first_group + 3:]]
    return ' '.join(group for group in groups if group)


class NormalizedPhoneNumberField(models.CharField):
    """
    A Django model field that normalizes phone numbers before saving.

    Every visitor phone number is stored in the lookup-key form produced by
    normalize_phone_number, regardless of how it was typed at the kiosk.

    Usage:
        class Visitor(models.Model):
            phone_number = NormalizedPhoneNumberField(unique=True)
    """

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('max_length', 20)
        super().__init__(*args, **kwargs)

    def pre_save(self, model_instance, add):
        raw_phone = getattr(model_instance, self.attname)

        if raw_phone:
            normalized = normalize_phone_number(str(raw_phone))
            setattr(model_instance, self.attname, normalized)
            return normalized

        return raw_phone

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        if kwargs.get('max_length') == 20:
            kwargs.pop('max_length')
        return name, path, args, kwargs


def migrate_existing_phone_numbers(app_label, model_name, field_name, dry_run=False):
    """
    Re-normalize the phone numbers already stored on a model.

    Args:
        app_label (str): Django app label (e.g., 'visitor')
        model_name (str): Model name (e.g., 'Visitor')
        field_name (str): Field name to migrate (e.g., 'phone_number')
        dry_run (bool): Report the changes without saving them

    Returns:
        dict: Migration statistics, with a 'changes' list of (pk, old, new)
    """
    from django.apps import apps

    try:
        model = apps.get_model(app_label, model_name)
    except LookupError:
        return {'error': f'Model {app_label}.{model_name} not found'}

    stats = {
        'total': 0,
        'normalized': 0,
        'failed': 0,
        'failed_numbers': [],
        'changes': [],
    }

    instances = model.objects.exclude(**{f'{field_name}__in': ['', None]})
    stats['total'] = instances.count()

    for instance in instances:
        current_number = getattr(instance, field_name)
        normalized = normalize_phone_number(str(current_number))
        if normalized == current_number:
            continue
        if not normalized:
            stats['failed'] += 1
            stats['failed_numbers'].append({
                'id': instance.pk,
                'number': current_number,
                'error': 'no digits'
            })
            continue
        stats['changes'].append((instance.pk, current_number, normalized))
        if dry_run:
            continue
        try:
            # Savepoint per row so one duplicate does not poison the outer transaction
            with transaction.atomic():
                setattr(instance, field_name, normalized)
                instance.save(update_fields=[field_name])
            stats['normalized'] += 1
        except IntegrityError as e:
            stats['failed'] += 1
            stats['failed_numbers'].append({
                'id': instance.pk,
                'number': current_number,
                'error': str(e)
            })

    return stats
