"""
SWIFTSHIP Repository Tests
============================

Tests for:
1. Customer profile linkage (lazy create, one per account)
2. Shipment creation (derived fields, validation, tracking-number collisions)
3. Listing and tracking lookup
4. Status changes and tracking events
"""

from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase, override_settings

from core.models import User
from logistics.exceptions import NotFound, StorageFailure, ValidationFailure
from logistics.models import Courier, Customer, Shipment, ShipmentStatus, TrackingEvent, TRACKING_NUMBER_REGEX
from logistics.repositories import (
    ContactInfo, PackageInfo, ShipmentRepository, TrackingEventRepository, parse_weight,
)
from logistics.services import shipment_rules
from logistics.services.identity import CustomerProfileService
from logistics.store import StoreClient

NOW = datetime(2025, 5, 20, 10, 0, tzinfo=dt_timezone.utc)


def fixed_clock(*moments):
    """Clock returning each moment in turn, then repeating the last one."""
    remaining = list(moments)

    def clock():
        return remaining.pop(0) if len(remaining) > 1 else remaining[0]
    return clock


class RepositoryTestMixin:

    def setUp(self):
        self.client_store = StoreClient()
        self.user = User.objects.create_user(email='ada@example.com', password='testpass123')
        self.profiles = CustomerProfileService(self.client_store)
        self.customer_id = self.profiles.ensure_customer_profile(
            self.user.pk,
            defaults={'full_name': 'Ada Lovelace', 'phone': '+15550001', 'address': '1 Main St'},
        )
        self.repo = ShipmentRepository(self.client_store, clock=fixed_clock(NOW))

    def create(self, repo=None, **overrides):
        values = {
            'sender': ContactInfo('Ada Lovelace', '+15550001', '1 Main St'),
            'recipient': ContactInfo('Charles Babbage', '+15550002', '2 High St'),
            'package': PackageInfo(weight='2.5', dimensions='30x20x15'),
            'service_type': 'express',
            'notes': None,
        }
        values.update(overrides)
        return (repo or self.repo).create_shipment(customer_id=self.customer_id, **values)


class TestCustomerProfileService(RepositoryTestMixin, TestCase):

    def test_sequential_calls_return_same_id(self):
        again = self.profiles.ensure_customer_profile(self.user.pk, defaults={'full_name': 'Other'})
        self.assertEqual(again, self.customer_id)
        self.assertEqual(Customer.objects.filter(user=self.user).count(), 1)

    def test_defaults_used_only_on_creation(self):
        self.profiles.ensure_customer_profile(self.user.pk, defaults={'full_name': 'Renamed'})
        customer = Customer.objects.get(pk=self.customer_id)
        self.assertEqual(customer.full_name, 'Ada Lovelace')
        self.assertEqual(customer.email, '')

    def test_find_customer_id(self):
        other = User.objects.create_user(email='grace@example.com', password='testpass123')
        self.assertEqual(self.profiles.find_customer_id(self.user.pk), self.customer_id)
        self.assertIsNone(self.profiles.find_customer_id(other.pk))

    def test_store_error_becomes_storage_failure(self):
        with patch.object(self.client_store, 'table', side_effect=DatabaseError('connection refused')):
            with self.assertRaises(StorageFailure) as ctx:
                self.profiles.ensure_customer_profile(self.user.pk, defaults={})
        self.assertEqual(ctx.exception.operation, 'ensure_customer_profile')


class TestCreateShipment(RepositoryTestMixin, TestCase):

    def test_express_shipment_derived_fields(self):
        """Express 2.5 kg -> 25.00, ETA one day after creation, pending."""
        shipment = self.create()

        self.assertRegex(shipment.tracking_number, TRACKING_NUMBER_REGEX)
        self.assertEqual(shipment.tracking_number, shipment_rules.generate_tracking_number(NOW))
        self.assertEqual(shipment.price, Decimal('25.00'))
        self.assertEqual(shipment.status, ShipmentStatus.PENDING)
        self.assertIsNone(shipment.actual_delivery)
        self.assertEqual(shipment.created_at, NOW)
        self.assertEqual(shipment.estimated_delivery, shipment.created_at + timedelta(days=1))

        stored = Shipment.objects.get(pk=shipment.pk)
        self.assertEqual(stored.package_weight, Decimal('2.50'))
        self.assertEqual(stored.package_dimensions, '30x20x15')
        self.assertEqual(stored.customer_id, self.customer_id)

    def test_service_type_is_normalised(self):
        shipment = self.create(service_type='  Overnight ')
        self.assertEqual(shipment.service_type, 'overnight')
        self.assertEqual(shipment.price, Decimal('40.00'))
        self.assertEqual(shipment.estimated_delivery, shipment.created_at)

    def test_blank_notes_stored_as_null(self):
        shipment = self.create(notes='   ')
        self.assertIsNone(shipment.notes)

    def test_invalid_weight_rejected_without_writes(self):
        with self.assertRaises(ValidationFailure) as ctx:
            self.create(package=PackageInfo(weight='abc', dimensions='30x20x15'))

        self.assertIn('package_weight', ctx.exception.errors)
        self.assertEqual(Shipment.objects.count(), 0)

    def test_zero_and_negative_weight_rejected(self):
        for weight in ('0', '-1', '0.001', 'NaN', 'Infinity', ''):
            with self.subTest(weight=weight):
                with self.assertRaises(ValidationFailure):
                    self.create(package=PackageInfo(weight=weight, dimensions='10x10x10'))
        self.assertEqual(Shipment.objects.count(), 0)

    def test_blank_required_fields_reported(self):
        with self.assertRaises(ValidationFailure) as ctx:
            self.create(
                recipient=ContactInfo('', '  ', '2 High St'),
                package=PackageInfo(weight='1', dimensions=''),
            )
        self.assertEqual(
            set(ctx.exception.errors),
            {'recipient_name', 'recipient_phone', 'package_dimensions'}
        )

    def test_unknown_service_type_rejected(self):
        with self.assertRaises(ValidationFailure) as ctx:
            self.create(service_type='teleport')
        self.assertIn('service_type', ctx.exception.errors)

    def test_tracking_number_collision_regenerates(self):
        first = self.create()
        second = self.create()

        self.assertNotEqual(first.tracking_number, second.tracking_number)
        millis = shipment_rules.epoch_millis(NOW)
        self.assertEqual(second.tracking_number, shipment_rules.generate_tracking_number(millis + 1))
        self.assertEqual(Shipment.objects.count(), 2)

    @override_settings(SHIPMENT_TRACKING_NUMBER_ATTEMPTS=1)
    def test_collision_gives_up_after_configured_attempts(self):
        self.create()
        with self.assertRaises(StorageFailure):
            self.create()
        self.assertEqual(Shipment.objects.count(), 1)

    def test_frozen_fields_cannot_change(self):
        shipment = Shipment.objects.get(pk=self.create().pk)
        shipment.price = Decimal('1.00')
        with self.assertRaises(ValueError):
            shipment.save()

        shipment = Shipment.objects.get(pk=shipment.pk)
        shipment.notes = 'Leave at the door'
        shipment.save()
        self.assertEqual(Shipment.objects.get(pk=shipment.pk).notes, 'Leave at the door')


class TestParseWeight(TestCase):

    def test_parse_weight(self):
        self.assertEqual(parse_weight('2.5'), Decimal('2.50'))
        self.assertEqual(parse_weight(' 1.005 '), Decimal('1.01'))
        self.assertEqual(parse_weight(3), Decimal('3.00'))
        self.assertIsNone(parse_weight('abc'))
        self.assertIsNone(parse_weight(None))
        self.assertIsNone(parse_weight(True))


class TestShipmentQueries(RepositoryTestMixin, TestCase):

    def test_list_newest_first(self):
        repo = ShipmentRepository(
            self.client_store,
            clock=fixed_clock(NOW, NOW + timedelta(hours=1), NOW + timedelta(hours=2)),
        )
        created = [self.create(repo=repo) for _ in range(3)]

        listed = repo.list_shipments_for_customer(self.customer_id)

        self.assertEqual([s.pk for s in listed], [s.pk for s in reversed(created)])

    def test_list_empty_for_new_customer(self):
        other = User.objects.create_user(email='grace@example.com', password='testpass123')
        other_id = self.profiles.ensure_customer_profile(other.pk, defaults={'full_name': 'Grace'})
        self.create()

        self.assertEqual(self.repo.list_shipments_for_customer(other_id), [])

    def test_find_is_case_insensitive(self):
        shipment = self.create()
        found = self.repo.find_by_tracking_number(f"  {shipment.tracking_number.lower()} ")
        self.assertEqual(found.pk, shipment.pk)

    def test_find_unknown_raises_not_found(self):
        with self.assertRaises(NotFound):
            self.repo.find_by_tracking_number('SW999999999')

    def test_find_blank_rejected(self):
        with self.assertRaises(ValidationFailure):
            self.repo.find_by_tracking_number('   ')

    def test_lookup_failure_is_not_not_found(self):
        with patch.object(self.client_store, 'table', side_effect=DatabaseError('timeout')):
            with self.assertRaises(StorageFailure):
                self.repo.find_by_tracking_number('SW000000001')

    def test_shipment_stats(self):
        repo = ShipmentRepository(
            self.client_store,
            clock=fixed_clock(NOW, NOW + timedelta(seconds=1), NOW + timedelta(seconds=2)),
        )
        first, second, _ = [self.create(repo=repo) for _ in range(3)]
        repo.record_status_change(first, 'in_transit')
        repo.record_status_change(second, 'delivered')

        self.assertEqual(
            repo.shipment_stats(self.customer_id),
            {'total': 3, 'in_transit': 1, 'delivered': 1, 'pending': 1}
        )


class TestStatusChanges(RepositoryTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.shipment = self.create()
        self.events = TrackingEventRepository(self.client_store)

    def test_no_events_gives_empty_list(self):
        self.assertEqual(self.events.list_events_for_shipment(self.shipment.pk), [])

    def test_status_change_appends_event_and_updates_shipment(self):
        repo = ShipmentRepository(self.client_store, clock=fixed_clock(NOW + timedelta(hours=3)))
        event = repo.record_status_change(self.shipment, 'In Transit', location='Lyon hub')

        stored = Shipment.objects.get(pk=self.shipment.pk)
        self.assertEqual(stored.status, 'in_transit')
        self.assertIsNone(stored.actual_delivery)
        self.assertEqual(event.location, 'Lyon hub')
        self.assertEqual(TrackingEvent.objects.filter(shipment=self.shipment).count(), 1)

    def test_delivered_sets_actual_delivery(self):
        delivered_at = NOW + timedelta(days=1, hours=2)
        repo = ShipmentRepository(self.client_store, clock=fixed_clock(delivered_at))
        repo.record_status_change(self.shipment, 'delivered', description='Signed by recipient')

        stored = Shipment.objects.get(pk=self.shipment.pk)
        self.assertTrue(stored.is_delivered)
        self.assertEqual(stored.actual_delivery, delivered_at)
        self.assertEqual(stored.price, Decimal('25.00'))

    def test_events_listed_newest_first(self):
        repo = ShipmentRepository(
            self.client_store,
            clock=fixed_clock(NOW + timedelta(hours=1), NOW + timedelta(hours=5), NOW + timedelta(hours=9)),
        )
        for status in ('in_transit', 'out_for_delivery', 'delivered'):
            repo.record_status_change(self.shipment, status)

        listed = self.events.list_events_for_shipment(self.shipment.pk)
        self.assertEqual([e.status for e in listed], ['delivered', 'out_for_delivery', 'in_transit'])

    def test_blank_status_rejected(self):
        with self.assertRaises(ValidationFailure):
            self.repo.record_status_change(self.shipment, '  ')
        self.assertEqual(TrackingEvent.objects.count(), 0)

    def test_assign_courier(self):
        courier = Courier.objects.create(full_name='Marie Curie', phone='+15550009')
        self.repo.assign_courier(self.shipment, courier.pk)
        self.assertEqual(Shipment.objects.get(pk=self.shipment.pk).courier_id, courier.pk)

    def test_assign_unknown_courier(self):
        with self.assertRaises(NotFound):
            self.repo.assign_courier(self.shipment, '00000000-0000-0000-0000-000000000000')

    def test_status_change_with_courier(self):
        courier = Courier.objects.create(full_name='Marie Curie', phone='+15550009')
        self.repo.record_status_change(self.shipment, 'out_for_delivery', courier_id=courier.pk)

        stored = Shipment.objects.get(pk=self.shipment.pk)
        self.assertEqual(stored.courier_id, courier.pk)
        self.assertEqual(stored.status, 'out_for_delivery')

    def test_failed_event_insert_rolls_back_courier_and_status(self):
        courier = Courier.objects.create(full_name='Marie Curie', phone='+15550009')
        table = self.client_store.table

        def events_unwritable(model):
            if model is TrackingEvent:
                raise DatabaseError('disk full')
            return table(model)

        with patch.object(self.client_store, 'table', side_effect=events_unwritable):
            with self.assertRaises(StorageFailure):
                self.repo.record_status_change(self.shipment, 'in_transit', courier_id=courier.pk)

        stored = Shipment.objects.get(pk=self.shipment.pk)
        self.assertIsNone(stored.courier_id)
        self.assertEqual(stored.status, 'pending')
        self.assertEqual(TrackingEvent.objects.count(), 0)

    def test_status_change_unknown_courier(self):
        with self.assertRaises(NotFound):
            self.repo.record_status_change(
                self.shipment, 'in_transit', courier_id='00000000-0000-0000-0000-000000000000'
            )
        self.assertEqual(Shipment.objects.get(pk=self.shipment.pk).status, 'pending')
        self.assertEqual(TrackingEvent.objects.count(), 0)


class TestValidateShipment(RepositoryTestMixin, TestCase):

    def test_validate_normalises(self):
        weight, service_type = self.repo.validate(
            ContactInfo('Ada', '+15550001', '1 Main St'),
            ContactInfo('Charles', '+15550002', '2 High St'),
            PackageInfo(weight=' 2.499 ', dimensions='30x20x15'),
            ' EXPRESS ',
        )
        self.assertEqual(weight, Decimal('2.50'))
        self.assertEqual(service_type, 'express')

    def test_validate_writes_nothing(self):
        customers = Customer.objects.count()
        with self.assertRaises(ValidationFailure) as ctx:
            self.repo.validate(
                ContactInfo('Ada', '', '1 Main St'),
                ContactInfo('Charles', '+15550002', '2 High St'),
                PackageInfo(weight='abc', dimensions='30x20x15'),
                'express',
            )
        self.assertEqual(set(ctx.exception.errors), {'sender_phone', 'package_weight'})
        self.assertEqual(Customer.objects.count(), customers)
        self.assertEqual(Shipment.objects.count(), 0)

    def test_create_requires_customer(self):
        with self.assertRaises(ValidationFailure) as ctx:
            self.repo.create_shipment(
                customer_id=None,
                sender=ContactInfo('Ada', '+15550001', '1 Main St'),
                recipient=ContactInfo('Charles', '+15550002', '2 High St'),
                package=PackageInfo(weight='1', dimensions='10x10x10'),
                service_type='standard',
            )
        self.assertIn('customer_id', ctx.exception.errors)


class TestShipmentListFilters(RepositoryTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        repo = ShipmentRepository(
            self.client_store,
            clock=fixed_clock(NOW, NOW + timedelta(days=1), NOW + timedelta(days=2)),
        )
        self.first = self.create(repo=repo, service_type='standard')
        self.second = self.create(repo=repo)
        self.third = self.create(repo=repo)
        repo.record_status_change(self.third, 'delivered')

    def test_filter_by_service_type(self):
        listed = self.repo.list_shipments_for_customer(self.customer_id, filters={'service_type': 'standard'})
        self.assertEqual([s.pk for s in listed], [self.first.pk])

    def test_filter_by_status_keeps_order(self):
        listed = self.repo.list_shipments_for_customer(self.customer_id, filters={'status': 'Pending'})
        self.assertEqual([s.pk for s in listed], [self.second.pk, self.first.pk])

    def test_filter_by_creation_window(self):
        listed = self.repo.list_shipments_for_customer(
            self.customer_id,
            filters={'created_after': (NOW + timedelta(hours=12)).isoformat()},
        )
        self.assertEqual([s.pk for s in listed], [self.third.pk, self.second.pk])

    def test_invalid_filter_value(self):
        with self.assertRaises(ValidationFailure) as ctx:
            self.repo.list_shipments_for_customer(self.customer_id, filters={'service_type': 'teleport'})
        self.assertIn('service_type', ctx.exception.errors)
