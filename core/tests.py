"""
Tests for shared API plumbing: error envelope and rate limiting.
"""
from unittest.mock import MagicMock, patch

import redis
from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import ErrorDetail
from rest_framework.test import APITestCase

from core import rate_limiting
from core.exceptions import first_error


class FirstErrorTestCase(SimpleTestCase):

    def test_nested_detail(self):
        detail = {
            'items': [{}, {'quantity': [ErrorDetail('Too small', code='min_value')]}],
            'email': [ErrorDetail('Bad email', code='invalid')],
        }

        error = first_error(detail)

        self.assertEqual(str(error), 'Too small')
        self.assertEqual(error.code, 'min_value')

    def test_empty_detail(self):
        self.assertIsNone(first_error({'items': []}))


class RedisClientTestCase(SimpleTestCase):

    def setUp(self):
        rate_limiting.get_redis_client.cache_clear()
        self.addCleanup(rate_limiting.get_redis_client.cache_clear)

    def test_unreachable_redis_disables_limiting(self):
        with patch.object(rate_limiting.redis.Redis, 'from_url') as from_url:
            from_url.return_value.ping.side_effect = redis.ConnectionError('refused')
            self.assertIsNone(rate_limiting.get_redis_client())

    def test_client_ip_prefers_forwarded_header(self):
        request = MagicMock()
        request.META = {'HTTP_X_FORWARDED_FOR': '10.0.0.7, 172.16.0.1', 'REMOTE_ADDR': '127.0.0.1'}
        self.assertEqual(rate_limiting.get_client_ip(request), '10.0.0.7')


@override_settings(RATE_LIMIT_ENABLED=True, ORDER_RATE_LIMIT=3, ORDER_RATE_LIMIT_WINDOW=60)
class OrderRateLimitTestCase(APITestCase):
    """Order creation is throttled per client IP."""

    def setUp(self):
        self.url = reverse('orders:order-list')
        self.client_mock = MagicMock()
        self.client_mock.ttl.return_value = 42
        patcher = patch('core.rate_limiting.get_redis_client', return_value=self.client_mock)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_under_limit_passes_through(self):
        self.client_mock.incr.return_value = 1

        response = self.client.post(self.url, {})

        # Reaches the view, which rejects the empty body
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response['X-RateLimit-Limit'], '3')
        self.assertEqual(response['X-RateLimit-Remaining'], '2')
        self.client_mock.expire.assert_called_once()

    def test_over_limit_rejected(self):
        self.client_mock.incr.return_value = 4

        response = self.client.post(self.url, {})

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response.data['retryAfter'], 42)
        self.assertEqual(response['Retry-After'], '42')

    def test_redis_error_fails_open(self):
        self.client_mock.incr.side_effect = redis.RedisError('gone')

        response = self.client.post(self.url, {})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_listing_is_not_limited(self):
        self.client_mock.incr.return_value = 100

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
