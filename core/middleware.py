"""
SWIFTSHIP Security Middleware
=============================

Provides:
1. Per-IP rate limiting backed by the Django cache (Redis in production)
2. Response security headers
3. Audit log lines for account and shipment write traffic
"""

import logging
import hashlib
from django.conf import settings
from django.core.cache import cache
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger('swiftship.security')


def client_ip(request):
    """First hop of X-Forwarded-For, else REMOTE_ADDR."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '0.0.0.0')


class RateLimitMiddleware(MiddlewareMixin):
    """
    Fixed-window request counter per (IP, path).

    Rules are matched by path prefix, first match wins:
    - sign-in / sign-up: 10 per minute (credential stuffing)
    - public tracking: 30 per minute (tracking-number enumeration)
    - contact form: 5 per minute
    - any other /api/ path: 100 per minute
    """

    # (path prefix, max requests, window seconds)
    RULES = (
        ('/api/auth/token/refresh/', 20, 60),
        ('/api/auth/token/', 10, 60),
        ('/api/auth/register/', 10, 60),
        ('/api/track/', 30, 60),
        ('/api/contact/', 5, 60),
        ('/api/', 100, 60),
    )

    def _rule_for(self, path):
        for prefix, max_requests, window in self.RULES:
            if path.startswith(prefix):
                return max_requests, window
        return None

    def _enabled(self):
        if not getattr(settings, 'RATE_LIMIT_ENABLED', True):
            return False
        return not settings.DEBUG or getattr(settings, 'RATE_LIMIT_IN_DEBUG', False)

    def process_request(self, request):
        if not self._enabled():
            return None

        rule = self._rule_for(request.path)
        if rule is None:
            return None
        max_requests, window = rule

        ip = client_ip(request)
        key = f"rl:{ip}:{hashlib.md5(request.path.encode()).hexdigest()[:8]}"
        seen = cache.get(key, 0)

        if seen >= max_requests:
            logger.warning(f"Rate limit hit: ip={ip} path={request.path} {seen}/{max_requests} per {window}s")
            return JsonResponse(
                {
                    'success': False,
                    'message': 'Too many requests. Please try again later.',
                    'retry_after': window,
                },
                status=429,
                headers={
                    'Retry-After': str(window),
                    'X-RateLimit-Limit': str(max_requests),
                    'X-RateLimit-Remaining': '0',
                },
            )

        try:
            seen = cache.incr(key)
        except ValueError:
            # First hit in this window
            cache.set(key, 1, window)
            seen = 1

        request._rate_limit = (max_requests, max(0, max_requests - seen))
        return None

    def process_response(self, request, response):
        rate = getattr(request, '_rate_limit', None)
        if rate:
            response['X-RateLimit-Limit'] = str(rate[0])
            response['X-RateLimit-Remaining'] = str(rate[1])
        return response


class SecurityHeadersMiddleware(MiddlewareMixin):
    """Hardening headers on every response."""

    def process_response(self, request, response):
        response['X-Content-Type-Options'] = 'nosniff'
        response['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # Admin change forms open popups in frames
        if not request.path.startswith('/admin/'):
            response['X-Frame-Options'] = 'DENY'

        if not settings.DEBUG:
            response['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        if 'Server' in response:
            del response['Server']
        return response


class RequestAuditMiddleware(MiddlewareMixin):
    """
    One log line per audited request: any auth call, writes on accounts,
    shipments and the admin, and every failed API response.
    """

    WRITE_METHODS = frozenset({'POST', 'PUT', 'PATCH', 'DELETE'})
    AUDITED_WRITE_PREFIXES = ('/api/users/', '/api/shipments/', '/admin/')

    def _audited(self, request, response):
        path = request.path
        if path.startswith('/api/auth/'):
            return True
        if request.method in self.WRITE_METHODS and path.startswith(self.AUDITED_WRITE_PREFIXES):
            return True
        if response.status_code >= 500:
            return True
        return response.status_code >= 400 and path.startswith('/api/')

    def process_response(self, request, response):
        if not self._audited(request, response):
            return response

        user = getattr(request, 'user', None)
        actor = str(user.pk) if user is not None and user.is_authenticated else 'anonymous'
        line = (
            f"AUDIT {request.method} {request.path} -> {response.status_code} "
            f"user={actor} ip={client_ip(request)}"
        )

        if response.status_code >= 500:
            logger.error(line)
        elif response.status_code >= 400:
            logger.warning(line)
        else:
            logger.info(line)
        return response
