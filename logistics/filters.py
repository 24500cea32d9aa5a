"""
Query-string filters for the customer shipment list.

GET /api/shipments/?status=in_transit&service_type=express&created_after=2025-01-01
"""

import django_filters

from .models import Shipment, ServiceType


class ShipmentFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name='status', method='filter_status')
    service_type = django_filters.ChoiceFilter(choices=ServiceType.choices)
    created_after = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_before = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='lt')
    tracking_number = django_filters.CharFilter(field_name='tracking_number', lookup_expr='icontains')

    class Meta:
        model = Shipment
        fields = ['status', 'service_type', 'created_after', 'created_before', 'tracking_number']

    def filter_status(self, queryset, name, value):
        return queryset.filter(**{name: value.strip().lower()})
