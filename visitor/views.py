from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django.db import DatabaseError, transaction
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend

from vms.utils.responses import (
    success_response, error_response, not_found_response,
    conflict_response, server_error_response
)
from .models import Visitor, Visit
from .serializers import (
    VisitorSerializer, VisitSerializer, LookupRequestSerializer,
    CheckInSerializer, ReturningCheckInSerializer, CheckOutSerializer
)
from .filters import VisitorFilter, VisitFilter
from .services import (
    ActiveVisitExists, VisitAlreadyCheckedOut, log_action,
    find_visitor_by_phone, get_active_visit, check_in_visitor, check_out_visit
)
import logging

logger = logging.getLogger(__name__)


def _first_error(errors):
    for messages in errors.values():
        if isinstance(messages, (list, tuple)) and messages:
            return str(messages[0])
        return str(messages)
    return "Invalid request"


def _already_checked_in_response(exc):
    return conflict_response(
        "Visitor already has an active visit",
        extra={
            'visitor': VisitorSerializer(exc.visitor).data,
            'visit': VisitSerializer(exc.visit).data,
            'alreadyCheckedIn': True,
        }
    )


class VisitorDirectoryViewSet(viewsets.GenericViewSet):
    """
    Kiosk-facing directory endpoints: returning-visitor lookup, check-in and check-out.

    Responses keep the flat shapes the check-in wizard reads
    ({found, visitor, hasActiveVisit, activeVisit} for lookups).
    """
    serializer_class = VisitorSerializer

    def get_queryset(self):
        return Visitor.objects.filter(deleted=False)

    @action(detail=False, methods=['post'], url_path='lookup')
    def lookup(self, request):
        """
        Look up a returning visitor by phone number, optionally narrowed by year of birth.
        """
        serializer = LookupRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(_first_error(serializer.errors), extra={'found': False})

        phone_number = serializer.validated_data['phoneNumber']
        year_of_birth = serializer.validated_data.get('yearOfBirth')

        try:
            visitor = find_visitor_by_phone(phone_number)
            if visitor is None:
                return not_found_response(
                    "No visitor found with this phone number",
                    extra={'found': False}
                )

            if year_of_birth is not None and visitor.year_of_birth != year_of_birth:
                return error_response(
                    "Year of birth does not match our records",
                    extra={'found': False}
                )

            active_visit = get_active_visit(visitor)
            log_action(
                'RETURNING_VISITOR_LOOKUP',
                f'Returning visitor "{visitor.full_name}" (ID: {visitor.id}) looked up by phone.'
            )

            response_data = {
                'found': True,
                'visitor': VisitorSerializer(visitor).data,
                'hasActiveVisit': active_visit is not None,
            }
            if active_visit is not None:
                response_data['activeVisit'] = {'visit': VisitSerializer(active_visit).data}

            return Response(response_data, status=status.HTTP_200_OK)

        except DatabaseError as e:
            logger.error(f"Error looking up visitor: {str(e)}")
            return server_error_response(
                "An error occurred while looking up the visitor",
                extra={'found': False}
            )

    @action(detail=False, methods=['post'], url_path='check-in')
    def check_in(self, request):
        """
        Register and check in a visitor from the new-visitor form.
        A visitor already known by phone number is reused as-is.
        """
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            visitor, created = Visitor.objects.get_or_create(
                phone_number=data['phoneNumber'],
                defaults={
                    'full_name': data['full_name'],
                    'year_of_birth': data['yearOfBirth'],
                    'email': data.get('email') or None,
                    'municipality': data.get('municipality') or '',
                }
            )
            if visitor.deleted:
                visitor.deleted = False
                visitor.save(update_fields=['deleted'])
                logger.info(f"Restored soft-deleted visitor {visitor.id} on check-in")

        if created:
            action_name = 'VISITOR_CHECK_IN'
            details = f'New visitor "{visitor.full_name}" (ID: {visitor.id}) registered and checked in.'
        else:
            action_name = 'RETURNING_VISITOR'
            details = f'Returning visitor "{visitor.full_name}" (ID: {visitor.id}) checked in.'

        try:
            visit = check_in_visitor(visitor, data.get('purpose'), action=action_name, details=details)
        except ActiveVisitExists as exc:
            return _already_checked_in_response(exc)

        return Response({
            'visitor': VisitorSerializer(visitor).data,
            'visit': VisitSerializer(visit).data,
            'isReturningVisitor': not created,
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='check-in/returning')
    def check_in_returning(self, request):
        """Check in a visitor already identified by the wizard."""
        serializer = ReturningCheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        visitor = self.get_queryset().filter(pk=serializer.validated_data['visitorId']).first()
        if visitor is None:
            return not_found_response("Visitor not found")

        try:
            visit = check_in_visitor(
                visitor,
                serializer.validated_data.get('purpose'),
                action='RETURNING_VISITOR_DIRECT',
                details=f'Returning visitor "{visitor.full_name}" (ID: {visitor.id}) checked in directly.'
            )
        except ActiveVisitExists as exc:
            return _already_checked_in_response(exc)

        return Response({
            'visitor': VisitorSerializer(visitor).data,
            'visit': VisitSerializer(visit).data,
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'], url_path='check-out')
    def check_out(self, request):
        serializer = CheckOutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        visit = (
            Visit.objects.select_related('visitor')
            .filter(pk=serializer.validated_data['visitId'])
            .first()
        )
        if visit is None:
            return not_found_response("Visit not found")

        try:
            check_out_visit(visit)
        except VisitAlreadyCheckedOut:
            return error_response("Visit is already checked out")

        return Response(VisitSerializer(visit).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=['get'], url_path='active-visit')
    def active_visit(self, request, pk=None):
        visitor = self.get_object()
        visit = get_active_visit(visitor)
        if visit is None:
            return not_found_response("No active visit found for this visitor")

        return Response({
            'visitor': VisitorSerializer(visitor).data,
            'visit': VisitSerializer(visit).data,
        })


class IntegrationVisitorViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only visitor listings for external integrations.
    Wrapped in the standardized {success, message, data} envelope.
    """
    serializer_class = VisitorSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = VisitorFilter

    def get_queryset(self):
        return Visitor.objects.filter(deleted=False)

    def retrieve(self, request, *args, **kwargs):
        visitor = self.get_object()
        return success_response(data=self.get_serializer(visitor).data)

    @action(detail=True, methods=['get'], url_path='visits')
    def visits(self, request, pk=None):
        """List a visitor's visits, newest first."""
        visitor = get_object_or_404(self.get_queryset(), pk=pk)
        queryset = VisitFilter(request.GET, queryset=visitor.visits.all()).qs

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(VisitSerializer(page, many=True).data)
        return success_response(data=VisitSerializer(queryset, many=True).data)
