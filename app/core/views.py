"""
Core views providing infrastructure endpoints.

Nothing here belongs to the marketplace domain; these endpoints exist so
container orchestration and load balancers can probe the service.
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.views.decorators.http import require_GET

logger = logging.getLogger(__name__)

CACHE_PROBE_KEY = "health_check"


def _database_status() -> str:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.exception("Health check: database unreachable")
        return "disconnected"
    return "connected"


def _cache_status() -> str:
    # django-redis is configured with IGNORE_EXCEPTIONS, so an unreachable
    # Redis shows up as a miss rather than an exception.
    cache.set(CACHE_PROBE_KEY, "ok", timeout=1)
    if cache.get(CACHE_PROBE_KEY) == "ok":
        return "connected"
    return "disconnected"


@require_GET
def health_check(request):
    """
    Report database and cache connectivity.

    The database is required: if it is unreachable the endpoint answers 503.
    The cache is advisory; a cache outage is reported but the service stays
    healthy because webhook processing never depends on it.

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "cache": "disconnected"
        }
    """
    database = _database_status()
    healthy = database == "connected"

    body = {
        "status": "healthy" if healthy else "unhealthy",
        "database": database,
        "cache": _cache_status(),
    }
    return JsonResponse(body, status=200 if healthy else 503)
