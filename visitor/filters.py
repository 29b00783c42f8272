from django_filters import rest_framework as filters
from vms.utils.phone_utils import normalize_phone_number
from .models import Visitor, Visit


class VisitorFilter(filters.FilterSet):
    phone = filters.CharFilter(method='filter_by_phone')
    name = filters.CharFilter(field_name='full_name', lookup_expr='icontains')
    active = filters.BooleanFilter(method='filter_active')

    class Meta:
        model = Visitor
        fields = ['verified', 'year_of_birth']

    def filter_by_phone(self, queryset, name, value):
        normalized = normalize_phone_number(value)
        if normalized:
            return queryset.filter(phone_number=normalized)
        return queryset

    def filter_active(self, queryset, name, value):
        if value is True:
            return queryset.filter(visits__active=True).distinct()
        elif value is False:
            return queryset.exclude(visits__active=True)
        return queryset


class VisitFilter(filters.FilterSet):
    checked_in_after = filters.IsoDateTimeFilter(field_name='check_in_time', lookup_expr='gte')
    checked_in_before = filters.IsoDateTimeFilter(field_name='check_in_time', lookup_expr='lte')

    class Meta:
        model = Visit
        fields = ['active']
