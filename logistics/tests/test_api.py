"""
SWIFTSHIP Shipment API Tests
==============================

Tests for:
1. Customer dashboard (list / create / stats)
2. Public tracking lookup
3. Staff status updates
4. Service catalogue
"""

from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from core.models import User
from logistics.models import Courier, Customer, Shipment, TrackingEvent, TRACKING_NUMBER_REGEX
from logistics.store import StoreClient


SHIPMENT_FORM = {
    'sender_name': 'Ada Lovelace',
    'sender_phone': '+15550001',
    'sender_address': '1 Main St',
    'recipient_name': 'Charles Babbage',
    'recipient_phone': '+15550002',
    'recipient_address': '2 High St',
    'package_weight': '2.5',
    'package_dimensions': '30x20x15',
    'service_type': 'express',
    'notes': '',
}


class BrokenStoreClient(StoreClient):
    """Store client whose every query fails like an unreachable database."""

    def table(self, model):
        raise DatabaseError("could not connect to server")


class ShipmentAPITestCase(TestCase):

    def setUp(self):
        self.api = APIClient()
        self.user = User.objects.create_user(email='ada@example.com', password='testpass123')
        self.api.force_authenticate(user=self.user)

    def create_shipment(self, **overrides):
        response = self.api.post('/api/shipments/', {**SHIPMENT_FORM, **overrides}, format='json')
        self.assertEqual(response.status_code, 201, response.content)
        return response.json()


class TestShipmentDashboard(ShipmentAPITestCase):

    def test_requires_authentication(self):
        anonymous = APIClient()
        self.assertEqual(anonymous.get('/api/shipments/').status_code, 401)
        self.assertEqual(anonymous.post('/api/shipments/', SHIPMENT_FORM, format='json').status_code, 401)

    def test_list_without_profile_is_empty(self):
        response = self.api.get('/api/shipments/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])
        self.assertFalse(Customer.objects.filter(user=self.user).exists())

    def test_create_shipment(self):
        data = self.create_shipment()

        self.assertRegex(data['tracking_number'], TRACKING_NUMBER_REGEX)
        self.assertEqual(data['price'], '25.00')
        self.assertEqual(data['status'], 'pending')
        self.assertEqual(data['status_label'], 'Pending')
        self.assertEqual(data['status_icon'], 'clock')
        self.assertIn('amber', data['status_color'])
        self.assertEqual(data['service_label'], 'Express')
        self.assertIsNone(data['actual_delivery'])
        self.assertIsNone(data['notes'])

    def test_first_shipment_creates_profile_from_sender(self):
        self.create_shipment()
        self.create_shipment(sender_name='Someone Else')

        customer = Customer.objects.get(user=self.user)
        self.assertEqual(customer.full_name, 'Ada Lovelace')
        self.assertEqual(customer.email, 'ada@example.com')
        self.assertEqual(customer.phone, '+15550001')
        self.assertEqual(Customer.objects.count(), 1)
        self.assertEqual(customer.shipments.count(), 2)

    def test_invalid_weight_returns_field_errors(self):
        response = self.api.post(
            '/api/shipments/', {**SHIPMENT_FORM, 'package_weight': 'abc'}, format='json'
        )

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertIn('package_weight', body['errors'])
        self.assertEqual(Shipment.objects.count(), 0)
        self.assertEqual(Customer.objects.count(), 0)

    def test_rejected_first_submission_leaves_no_profile(self):
        response = self.api.post(
            '/api/shipments/',
            {**SHIPMENT_FORM, 'sender_phone': '', 'sender_address': '  ', 'service_type': 'teleport'},
            format='json'
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            set(response.json()['errors']),
            {'sender_phone', 'sender_address', 'service_type'}
        )
        self.assertFalse(Customer.objects.filter(user=self.user).exists())

        # A later valid submission builds the profile from its own sender details
        self.create_shipment()
        customer = Customer.objects.get(user=self.user)
        self.assertEqual(customer.phone, '+15550001')
        self.assertEqual(customer.address, '1 Main St')

    def test_form_field_limits(self):
        response = self.api.post(
            '/api/shipments/',
            {**SHIPMENT_FORM, 'recipient_name': 'x' * 151, 'package_weight': '1000000'},
            format='json'
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()['errors']), {'recipient_name', 'package_weight'})

    def test_service_type_any_case(self):
        data = self.create_shipment(service_type=' Overnight ')
        self.assertEqual(data['service_type'], 'overnight')
        self.assertEqual(data['price'], '40.00')

    def test_list_filters(self):
        express = self.create_shipment()
        self.create_shipment(service_type='standard')

        listed = self.api.get('/api/shipments/', {'service_type': 'express'}).json()
        self.assertEqual([s['tracking_number'] for s in listed], [express['tracking_number']])

        self.assertEqual(len(self.api.get('/api/shipments/', {'status': 'PENDING'}).json()), 2)
        self.assertEqual(self.api.get('/api/shipments/', {'status': 'delivered'}).json(), [])

    def test_list_invalid_filter(self):
        self.create_shipment()
        response = self.api.get('/api/shipments/', {'created_after': 'yesterday'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('created_after', response.json()['errors'])

    def test_list_only_own_shipments(self):
        mine = self.create_shipment()

        other = User.objects.create_user(email='grace@example.com', password='testpass123')
        self.api.force_authenticate(user=other)
        self.create_shipment(sender_name='Grace Hopper')

        self.api.force_authenticate(user=self.user)
        listed = self.api.get('/api/shipments/').json()
        self.assertEqual([s['tracking_number'] for s in listed], [mine['tracking_number']])

    def test_storage_failure_on_create(self):
        with patch('logistics.views.get_store_client', return_value=BrokenStoreClient()):
            response = self.api.post('/api/shipments/', SHIPMENT_FORM, format='json')

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['message'], "Failed to create shipment. Please try again.")

    def test_stats(self):
        self.assertEqual(
            self.api.get('/api/shipments/stats/').json(),
            {'total': 0, 'in_transit': 0, 'delivered': 0, 'pending': 0}
        )
        self.create_shipment()
        self.assertEqual(self.api.get('/api/shipments/stats/').json()['pending'], 1)


class TestTrackingAPI(ShipmentAPITestCase):

    def setUp(self):
        super().setUp()
        self.shipment = self.create_shipment()
        self.public = APIClient()

    def test_track_is_public_and_case_insensitive(self):
        response = self.public.get(f"/api/track/{self.shipment['tracking_number'].lower()}/")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['shipment']['tracking_number'], self.shipment['tracking_number'])
        self.assertEqual(body['events'], [])

    def test_unknown_tracking_number(self):
        response = self.public.get('/api/track/SW000000000/')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json()['message'],
            "Tracking number not found. Please check and try again."
        )

    def test_storage_failure_is_not_reported_as_not_found(self):
        with patch('logistics.views.get_store_client', return_value=BrokenStoreClient()):
            response = self.public.get(f"/api/track/{self.shipment['tracking_number']}/")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()['message'], "An error occurred while tracking your shipment.")


class TestStatusUpdateAPI(ShipmentAPITestCase):

    def setUp(self):
        super().setUp()
        self.shipment = self.create_shipment()
        self.url = f"/api/shipments/{self.shipment['tracking_number']}/events/"
        self.staff = User.objects.create_user(email='ops@example.com', password='testpass123', is_staff=True)

    def test_customer_cannot_record_events(self):
        response = self.api.post(self.url, {'status': 'in_transit'}, format='json')
        self.assertEqual(response.status_code, 403)

    def test_staff_records_event(self):
        self.api.force_authenticate(user=self.staff)
        response = self.api.post(
            self.url,
            {'status': 'delivered', 'location': 'Front door', 'description': 'Signed by recipient'},
            format='json'
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['shipment']['status_label'], 'Delivered')
        self.assertEqual(body['shipment']['status_icon'], 'check-circle')
        self.assertIsNotNone(body['shipment']['actual_delivery'])
        self.assertEqual(body['event']['location'], 'Front door')
        self.assertEqual(TrackingEvent.objects.count(), 1)

        tracked = APIClient().get(f"/api/track/{self.shipment['tracking_number']}/").json()
        self.assertEqual([e['status'] for e in tracked['events']], ['delivered'])

    def test_unknown_shipment(self):
        self.api.force_authenticate(user=self.staff)
        response = self.api.post('/api/shipments/SW000000000/events/', {'status': 'in_transit'}, format='json')
        self.assertEqual(response.status_code, 404)

    def test_staff_assigns_courier_with_status(self):
        courier = Courier.objects.create(full_name='Marie Curie', phone='+15550009')
        self.api.force_authenticate(user=self.staff)

        response = self.api.post(
            self.url, {'status': 'out_for_delivery', 'courier_id': str(courier.pk)}, format='json'
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['shipment']['courier']['full_name'], 'Marie Curie')
        self.assertEqual(Shipment.objects.get().courier_id, courier.pk)

    def test_unknown_courier_changes_nothing(self):
        self.api.force_authenticate(user=self.staff)

        response = self.api.post(
            self.url,
            {'status': 'in_transit', 'courier_id': '00000000-0000-0000-0000-000000000000'},
            format='json'
        )

        self.assertEqual(response.status_code, 404)
        shipment = Shipment.objects.get()
        self.assertEqual(shipment.status, 'pending')
        self.assertIsNone(shipment.courier_id)
        self.assertEqual(TrackingEvent.objects.count(), 0)



class TestServiceCatalogueAPI(TestCase):

    def test_catalogue(self):
        response = APIClient().get('/api/services/')

        self.assertEqual(response.status_code, 200)
        tiers = response.json()
        self.assertEqual([t['code'] for t in tiers], ['standard', 'express', 'overnight'])
        self.assertEqual([t['price'] for t in tiers], ['10.00', '25.00', '40.00'])
        self.assertEqual([t['eta_days'] for t in tiers], [5, 1, 0])
