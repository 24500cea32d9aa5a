"""
SWIFTSHIP Support Tests
========================

Tests for:
1. ContactService (validation, default status)
2. Contact form API
"""

from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from logistics.exceptions import StorageFailure, ValidationFailure
from logistics.store import StoreClient
from support.models import ContactMessage, ContactMessageStatus
from support.services import ContactService

CONTACT_FORM = {
    'name': 'Ada Lovelace',
    'email': 'Ada@Example.com',
    'phone': '',
    'subject': 'Missed delivery',
    'message': 'Nobody was home, can the courier come back tomorrow?',
}


class TestContactService(TestCase):

    def setUp(self):
        self.store = StoreClient()
        self.service = ContactService(self.store)

    def test_submit_stores_new_message(self):
        message = self.service.submit_contact_message(CONTACT_FORM)

        self.assertEqual(message.status, ContactMessageStatus.NEW)
        self.assertEqual(message.email, 'ada@example.com')
        self.assertIsNone(message.phone)
        self.assertEqual(ContactMessage.objects.count(), 1)

    def test_required_fields(self):
        with self.assertRaises(ValidationFailure) as ctx:
            self.service.submit_contact_message({'name': 'Ada', 'phone': '+15550001'})

        self.assertEqual(set(ctx.exception.errors), {'email', 'subject', 'message'})
        self.assertEqual(ContactMessage.objects.count(), 0)

    def test_malformed_email(self):
        with self.assertRaises(ValidationFailure) as ctx:
            self.service.submit_contact_message({**CONTACT_FORM, 'email': 'not-an-email'})
        self.assertIn('email', ctx.exception.errors)

    def test_field_limits(self):
        with self.assertRaises(ValidationFailure) as ctx:
            self.service.submit_contact_message({**CONTACT_FORM, 'phone': '1' * 31, 'subject': 'x' * 201})

        self.assertEqual(set(ctx.exception.errors), {'phone', 'subject'})
        self.assertEqual(ContactMessage.objects.count(), 0)

    def test_store_failure(self):
        with patch.object(self.store, 'table', side_effect=DatabaseError('read-only transaction')):
            with self.assertRaises(StorageFailure):
                self.service.submit_contact_message(CONTACT_FORM)

    def test_set_status(self):
        message = self.service.submit_contact_message(CONTACT_FORM)

        updated = self.service.set_status([message.pk], ContactMessageStatus.ANSWERED)

        self.assertEqual(updated, 1)
        message.refresh_from_db()
        self.assertEqual(message.status, ContactMessageStatus.ANSWERED)

    def test_set_unknown_status(self):
        with self.assertRaises(ValidationFailure):
            self.service.set_status([], 'spam')


class TestContactAPI(TestCase):

    def setUp(self):
        self.api = APIClient()

    def test_submit(self):
        response = self.api.post('/api/contact/', CONTACT_FORM, format='json')

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['contact']['status'], 'new')

    def test_missing_fields(self):
        response = self.api.post('/api/contact/', {'name': 'Ada'}, format='json')

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertIn('message', body['errors'])
