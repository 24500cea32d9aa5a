"""
SWIFTSHIP Health Probes
========================

1. /health/       - liveness: the process answers
2. /health/ready/ - readiness: the shipment store and the cache answer
"""

import time
import logging
from django.conf import settings
from django.core.cache import cache
from django.db import DEFAULT_DB_ALIAS, DatabaseError, connections
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET

logger = logging.getLogger('swiftship.monitoring')


def _elapsed_ms(start):
    return round((time.monotonic() - start) * 1000, 2)


def _check_store():
    alias = getattr(settings, 'SWIFTSHIP_STORE_ALIAS', DEFAULT_DB_ALIAS)
    connection = connections[alias]
    start = time.monotonic()
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as e:
        logger.error(f"Readiness: store '{alias}' unreachable: {e}")
        return {'status': 'unhealthy', 'alias': alias, 'error': str(e)}
    return {
        'status': 'healthy',
        'alias': alias,
        'engine': connection.vendor,
        'response_time_ms': _elapsed_ms(start),
    }


def _check_cache():
    start = time.monotonic()
    try:
        cache.set('_healthcheck_ping', 'pong', 10)
        ok = cache.get('_healthcheck_ping') == 'pong'
    except Exception as e:
        # Cache backends raise their own client errors (redis.ConnectionError, ...)
        logger.error(f"Readiness: cache unreachable: {e}")
        return {'status': 'unhealthy', 'error': str(e)}
    if not ok:
        return {'status': 'unhealthy', 'error': 'Cache read/write mismatch'}
    return {'status': 'healthy', 'response_time_ms': _elapsed_ms(start)}


@csrf_exempt
@require_GET
def health_check(request):
    return JsonResponse({
        'status': 'ok',
        'service': 'swiftship',
        'timestamp': timezone.now().isoformat(),
    })


@csrf_exempt
@require_GET
def readiness_check(request):
    """200 when every dependency is healthy, 503 otherwise."""
    checks = {
        'database': _check_store(),
        'cache': _check_cache(),
    }
    healthy = all(check['status'] == 'healthy' for check in checks.values())

    return JsonResponse({
        'status': 'healthy' if healthy else 'unhealthy',
        'service': 'swiftship',
        'timestamp': timezone.now().isoformat(),
        'checks': checks,
    }, status=200 if healthy else 503)
