"""
Django Admin configuration for LOGISTICS app.
"""

import csv

from django.contrib import admin
from django.http import HttpResponse

from .models import Customer, Courier, Shipment, TrackingEvent, ShipmentStatus
from .repositories import ShipmentRepository
from .store import get_store_client


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'email', 'phone', 'user', 'created_at')
    search_fields = ('full_name', 'email', 'phone', 'user__email')
    readonly_fields = ('id', 'created_at')
    ordering = ('-created_at',)


@admin.register(Courier)
class CourierAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'phone', 'vehicle_type', 'status', 'created_at')
    list_filter = ('status', 'vehicle_type')
    search_fields = ('full_name', 'phone', 'license_number')
    readonly_fields = ('id', 'created_at')


class TrackingEventInline(admin.TabularInline):
    model = TrackingEvent
    extra = 0
    fields = ('status', 'location', 'description', 'created_at')
    readonly_fields = ('created_at',)
    ordering = ('-created_at',)

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    """Admin for Shipment with its tracking history inline."""

    list_display = (
        'tracking_number',
        'status',
        'service_type',
        'sender_name',
        'recipient_name',
        'courier',
        'price',
        'estimated_delivery',
        'created_at'
    )
    list_filter = ('status', 'service_type', 'created_at')
    search_fields = (
        'tracking_number',
        'sender_name',
        'recipient_name',
        'recipient_phone',
        'customer__email',
    )
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'
    list_select_related = ('courier', 'customer')
    inlines = [TrackingEventInline]

    readonly_fields = (
        'id',
        'tracking_number',
        'status',
        'customer',
        'price',
        'estimated_delivery',
        'actual_delivery',
        'created_at',
        'updated_at'
    )

    fieldsets = (
        ('Identification', {
            'fields': ('id', 'tracking_number', 'status', 'customer', 'courier')
        }),
        ('Sender', {
            'fields': ('sender_name', 'sender_phone', 'sender_address')
        }),
        ('Recipient', {
            'fields': ('recipient_name', 'recipient_phone', 'recipient_address')
        }),
        ('Package', {
            'fields': ('package_weight', 'package_dimensions', 'service_type', 'notes')
        }),
        ('Pricing & delivery', {
            'fields': ('price', 'estimated_delivery', 'actual_delivery')
        }),
        ('History', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['mark_in_transit', 'mark_as_delivered', 'export_shipments_csv']

    def has_add_permission(self, request):
        return False

    def _record(self, request, queryset, status, description):
        repository = ShipmentRepository(get_store_client())
        for shipment in queryset:
            repository.record_status_change(shipment, status, description=description)
        self.message_user(request, f"{queryset.count()} shipment(s) marked as {status}.")

    @admin.action(description="Mark as in transit")
    def mark_in_transit(self, request, queryset):
        self._record(request, queryset, ShipmentStatus.IN_TRANSIT, "Package is on its way")

    @admin.action(description="Mark as delivered")
    def mark_as_delivered(self, request, queryset):
        self._record(request, queryset, ShipmentStatus.DELIVERED, "Package delivered")

    @admin.action(description="Export to CSV")
    def export_shipments_csv(self, request, queryset):
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = 'attachment; filename="swiftship_shipments.csv"'

        writer = csv.writer(response)
        writer.writerow([
            'Tracking number', 'Status', 'Service', 'Sender', 'Recipient',
            'Weight (kg)', 'Price', 'Created', 'Estimated delivery', 'Delivered',
        ])

        for s in queryset:
            writer.writerow([
                s.tracking_number,
                s.status,
                s.get_service_type_display(),
                s.sender_name,
                s.recipient_name,
                s.package_weight,
                s.price,
                s.created_at.strftime('%Y-%m-%d %H:%M') if s.created_at else '',
                s.estimated_delivery.strftime('%Y-%m-%d') if s.estimated_delivery else '',
                s.actual_delivery.strftime('%Y-%m-%d %H:%M') if s.actual_delivery else '',
            ])
        return response


@admin.register(TrackingEvent)
class TrackingEventAdmin(admin.ModelAdmin):
    list_display = ('shipment', 'status', 'location', 'created_at')
    list_filter = ('status',)
    search_fields = ('shipment__tracking_number', 'location')
    readonly_fields = ('id', 'created_at')
    ordering = ('-created_at',)
