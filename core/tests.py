"""
SWIFTSHIP Core Tests
=====================

Tests for:
1. Custom User Model (e-mail login, superuser)
2. Account API (register, JWT, profile)
3. Health checks
4. Security Middleware (rate limiting, headers)
"""

from django.core.cache import cache
from django.db import IntegrityError
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.models import User

STRONG_PASSWORD = 'Parcel-Route-2048'


class TestUserModel(TestCase):
    """Tests for the custom User model."""

    def test_user_creation_with_email(self):
        user = User.objects.create_user(email='Ada@Example.COM', password='testpass123')
        self.assertEqual(user.email, 'ada@example.com')
        self.assertTrue(user.check_password('testpass123'))
        self.assertFalse(user.is_staff)

    def test_email_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_user_without_password_cannot_log_in(self):
        user = User.objects.create_user(email='nopass@example.com')
        self.assertFalse(user.has_usable_password())

    def test_superuser_creation(self):
        admin = User.objects.create_superuser(email='root@example.com', password='testpass123')
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_superuser)

    def test_duplicate_email_rejected(self):
        User.objects.create_user(email='dup@example.com', password='testpass123')
        with self.assertRaises(IntegrityError):
            User.objects.create_user(email='dup@example.com', password='testpass123')


class TestAccountAPI(TestCase):

    def setUp(self):
        self.api = APIClient()

    def register(self, **overrides):
        payload = {'email': 'grace@example.com', 'password': STRONG_PASSWORD, 'full_name': 'Grace Hopper'}
        payload.update(overrides)
        return self.api.post('/api/auth/register/', payload, format='json')

    def test_register(self):
        response = self.register()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['email'], 'grace@example.com')
        self.assertNotIn('password', response.json())

    def test_register_duplicate_email_case_insensitive(self):
        self.register()
        response = self.register(email='GRACE@example.com')
        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.json())

    def test_register_weak_password(self):
        response = self.register(password='123')
        self.assertEqual(response.status_code, 400)
        self.assertIn('password', response.json())

    def test_token_and_me(self):
        self.register()
        token = self.api.post(
            '/api/auth/token/',
            {'email': 'grace@example.com', 'password': STRONG_PASSWORD},
            format='json'
        )
        self.assertEqual(token.status_code, 200)

        self.api.credentials(HTTP_AUTHORIZATION=f"Bearer {token.json()['access']}")
        me = self.api.get('/api/users/me/')
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()['full_name'], 'Grace Hopper')

    def test_update_full_name(self):
        user = User.objects.create_user(email='ada@example.com', password='testpass123')
        self.api.force_authenticate(user=user)

        response = self.api.patch('/api/users/me/', {'full_name': 'Ada King', 'email': 'x@y.z'}, format='json')

        self.assertEqual(response.status_code, 200)
        user.refresh_from_db()
        self.assertEqual(user.full_name, 'Ada King')
        self.assertEqual(user.email, 'ada@example.com')

    def test_me_requires_authentication(self):
        self.assertEqual(self.api.get('/api/users/me/').status_code, 401)


class TestHealthChecks(TestCase):

    def test_health_endpoint_accessible(self):
        """Health check should be accessible without auth."""
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'ok')
        self.assertEqual(data['service'], 'swiftship')

    def test_readiness_reports_store_and_cache(self):
        response = self.client.get('/health/ready/')
        self.assertEqual(response.status_code, 200)
        checks = response.json()['checks']
        self.assertEqual(checks['database']['status'], 'healthy')
        self.assertEqual(checks['cache']['status'], 'healthy')


class TestSecurityMiddleware(TestCase):
    """Tests for security middleware behavior."""

    def setUp(self):
        cache.clear()

    def test_security_headers_present(self):
        response = self.client.get('/health/')
        self.assertEqual(response['X-Content-Type-Options'], 'nosniff')
        self.assertEqual(response['X-Frame-Options'], 'DENY')
        self.assertIn('Referrer-Policy', response)
        self.assertIn('Strict-Transport-Security', response)

    @override_settings(RATE_LIMIT_ENABLED=True)
    def test_contact_form_rate_limited(self):
        for _ in range(5):
            self.client.post('/api/contact/', {}, content_type='application/json')

        response = self.client.post('/api/contact/', {}, content_type='application/json')

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response['Retry-After'], '60')
        self.assertFalse(response.json()['success'])

    @override_settings(RATE_LIMIT_ENABLED=True)
    def test_rate_limit_headers(self):
        response = self.client.get('/api/services/')
        self.assertEqual(response['X-RateLimit-Limit'], '100')
        self.assertEqual(response['X-RateLimit-Remaining'], '99')
