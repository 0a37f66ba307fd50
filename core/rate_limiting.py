"""
Redis-based rate limiting for API endpoints.
Fixed-window counter per client IP and view; fails open when Redis is down.
"""
import logging
from functools import lru_cache, wraps

import redis
from django.conf import settings
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_redis_client():
    """Connect once per process; None means rate limiting is unavailable."""
    try:
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5
        )
        client.ping()
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.warning(f"Redis connection failed: {e}. Rate limiting will be disabled.")
        return None
    return client


def get_client_ip(request):
    """Extract client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


def _limits(max_requests, window_seconds):
    # Settings are resolved per call so tests and deployments can override them
    if max_requests is None:
        max_requests = getattr(settings, 'ORDER_RATE_LIMIT', 30)
    if window_seconds is None:
        window_seconds = getattr(settings, 'ORDER_RATE_LIMIT_WINDOW', 60)
    return max_requests, window_seconds


def rate_limit(max_requests=None, window_seconds=None):
    """
    Rate limiting decorator for DRF view methods.

    Defaults come from ORDER_RATE_LIMIT / ORDER_RATE_LIMIT_WINDOW.

    Usage:
        @rate_limit()
        def create(self, request, *args, **kwargs):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(self, request, *args, **kwargs):
            if not getattr(settings, 'RATE_LIMIT_ENABLED', True):
                return view_func(self, request, *args, **kwargs)

            client = get_redis_client()
            if client is None:
                return view_func(self, request, *args, **kwargs)

            limit, window = _limits(max_requests, window_seconds)
            key = f"rate_limit:{type(self).__name__}.{view_func.__name__}:{get_client_ip(request)}"

            try:
                current_count = client.incr(key)
                if current_count == 1:
                    client.expire(key, window)
                ttl = client.ttl(key)
            except redis.RedisError as e:
                logger.error(f"Redis error in rate limiting: {e}")
                return view_func(self, request, *args, **kwargs)

            if current_count > limit:
                logger.warning(f"Rate limit exceeded for {key}")
                return Response(
                    {
                        'message': f'Rate limit exceeded: maximum {limit} requests per {window} seconds',
                        'retryAfter': ttl
                    },
                    status=status.HTTP_429_TOO_MANY_REQUESTS,
                    headers={
                        'X-RateLimit-Limit': str(limit),
                        'X-RateLimit-Remaining': '0',
                        'X-RateLimit-Reset': str(ttl),
                        'Retry-After': str(ttl)
                    }
                )

            response = view_func(self, request, *args, **kwargs)
            response['X-RateLimit-Limit'] = str(limit)
            response['X-RateLimit-Remaining'] = str(max(0, limit - current_count))
            response['X-RateLimit-Reset'] = str(ttl)
            return response

        return wrapper
    return decorator
