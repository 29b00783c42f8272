from django.utils import timezone
from rest_framework import serializers
from vms.utils.phone_utils import normalize_phone_number, is_valid_local_number
from django.conf import settings
from .models import Visitor, Visit
import logging

logger = logging.getLogger(__name__)

NAME_EXTRA_CHARACTERS = set(".-' ")


def _validate_name_part(value, label):
    value = (value or '').strip()
    if len(value) < 2:
        raise serializers.ValidationError(f"{label} is required")
    if not all(ch.isalpha() or ch in NAME_EXTRA_CHARACTERS for ch in value):
        raise serializers.ValidationError("Name should contain only letters and basic characters")
    return value


def _validate_year_of_birth(value):
    if value is None:
        return value
    if value < 1900:
        raise serializers.ValidationError("Please enter a valid year")
    if value > timezone.now().year:
        raise serializers.ValidationError("Year cannot be in the future")
    return value


def _phone_format_message():
    if getattr(settings, 'VMS_PHONE_LEADING_ZERO', True):
        return "Phone number must be 10 digits starting with 0"
    return "Phone number must be exactly 10 digits"


# Response serializers
class VisitorSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source='full_name')
    yearOfBirth = serializers.IntegerField(source='year_of_birth')
    phoneNumber = serializers.CharField(source='phone_number')
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Visitor
        fields = [
            "id", "fullName", "yearOfBirth", "email", "phoneNumber",
            "municipality", "verified", "createdAt"
        ]


class VisitSerializer(serializers.ModelSerializer):
    visitorId = serializers.IntegerField(source='visitor_id', read_only=True)
    checkInTime = serializers.DateTimeField(source='check_in_time', read_only=True)
    checkOutTime = serializers.DateTimeField(source='check_out_time', read_only=True, allow_null=True)

    class Meta:
        model = Visit
        fields = ["id", "visitorId", "purpose", "checkInTime", "checkOutTime", "active"]


# Request serializers
class LookupRequestSerializer(serializers.Serializer):
    phoneNumber = serializers.CharField(
        error_messages={
            'required': "Phone number is required",
            'blank': "Phone number is required",
            'null': "Phone number is required",
        }
    )
    yearOfBirth = serializers.IntegerField(required=False, allow_null=True)

    def validate_phoneNumber(self, value):
        if not is_valid_local_number(value):
            raise serializers.ValidationError(_phone_format_message())
        return normalize_phone_number(value)

    def validate_yearOfBirth(self, value):
        return _validate_year_of_birth(value)


class CheckInSerializer(serializers.Serializer):
    """New-visitor registration form submitted by the kiosk."""
    firstName = serializers.CharField(required=False, allow_blank=True)
    middleName = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    lastName = serializers.CharField(required=False, allow_blank=True)
    fullName = serializers.CharField(required=False, allow_blank=True, max_length=255)
    yearOfBirth = serializers.IntegerField()
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    phoneNumber = serializers.CharField()
    purpose = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    municipality = serializers.CharField(required=False, allow_blank=True, max_length=100)

    def validate_yearOfBirth(self, value):
        return _validate_year_of_birth(value)

    def validate_phoneNumber(self, value):
        if not is_valid_local_number(value):
            raise serializers.ValidationError(_phone_format_message())
        return normalize_phone_number(value)

    def validate(self, attrs):
        full_name = (attrs.get('fullName') or '').strip()
        if not full_name:
            first_name = _validate_name_part(attrs.get('firstName'), "First name")
            last_name = _validate_name_part(attrs.get('lastName'), "Last name")
            middle_name = (attrs.get('middleName') or '').strip()
            full_name = ' '.join(part for part in (first_name, middle_name, last_name) if part)
        elif len(full_name) < 2:
            raise serializers.ValidationError({'fullName': "Full name must be at least 2 characters"})

        attrs['full_name'] = full_name
        return attrs


class ReturningCheckInSerializer(serializers.Serializer):
    visitorId = serializers.IntegerField(error_messages={'required': "Visitor ID is required"})
    purpose = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)


class CheckOutSerializer(serializers.Serializer):
    visitId = serializers.IntegerField(error_messages={'required': "Visit ID is required"})
