"""
Tests for the catalog: stock primitives and product endpoints.
"""
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from catalog.models import Product
from catalog.services import (
    release_stock,
    reserve_stock,
    restock_cancelled,
    resync_product_status,
)


class ProductModelTestCase(TestCase):

    def test_status_follows_quantity_on_save(self):
        product = Product.objects.create(
            name='Resin Frame', quantity=0, price=Decimal('120.00'),
            category=Product.Category.FRAMES, status=Product.Status.AVAILABLE
        )
        self.assertEqual(product.status, Product.Status.NOT_AVAILABLE)

        product.quantity = 3
        product.save(update_fields=['quantity'])
        product.refresh_from_db()
        self.assertEqual(product.status, Product.Status.AVAILABLE)
        self.assertTrue(product.is_available)


class StockServiceTestCase(TestCase):
    """Conditional stock updates."""

    def setUp(self):
        self.product = Product.objects.create(
            name='Thread Bangles', quantity=5, price=Decimal('60.00'),
            category=Product.Category.JEWELLERY
        )

    def test_reserve_within_stock(self):
        self.assertTrue(reserve_stock(self.product.id, 3))

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 2)
        self.assertEqual(self.product.status, Product.Status.AVAILABLE)

    def test_reserve_never_goes_negative(self):
        """
        Given: 5 units in stock
        When: Two reservations of 4 units each
        Then: Only the first applies; stock stays at 1
        """
        self.assertTrue(reserve_stock(self.product.id, 4))
        self.assertFalse(reserve_stock(self.product.id, 4))

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 1)

    def test_reserve_last_unit_marks_not_available(self):
        reserve_stock(self.product.id, 5)

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 0)
        self.assertEqual(self.product.status, Product.Status.NOT_AVAILABLE)
        self.assertFalse(reserve_stock(self.product.id, 1))

    def test_reserve_refuses_unavailable_product(self):
        Product.objects.filter(pk=self.product.pk).update(status=Product.Status.NOT_AVAILABLE)

        self.assertFalse(reserve_stock(self.product.id, 1))

    def test_release_restores_availability(self):
        reserve_stock(self.product.id, 5)

        self.assertTrue(release_stock(self.product.id, 5))

        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)
        self.assertEqual(self.product.status, Product.Status.AVAILABLE)

    def test_release_and_restock_differ_at_zero(self):
        """Release only marks Available with stock; cancellation restock always does."""
        reserve_stock(self.product.id, 5)

        release_stock(self.product.id, 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.status, Product.Status.NOT_AVAILABLE)

        restock_cancelled(self.product.id, 0)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 0)
        self.assertEqual(self.product.status, Product.Status.AVAILABLE)

        self.assertEqual(resync_product_status(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.status, Product.Status.NOT_AVAILABLE)

    def test_missing_product(self):
        self.assertFalse(reserve_stock(99999, 1))
        self.assertFalse(release_stock(99999, 1))
        self.assertFalse(restock_cancelled(99999, 1))


class ProductAPITestCase(APITestCase):
    """Product endpoints."""

    def setUp(self):
        self.diya = Product.objects.create(
            name='Clay Diya', quantity=40, price=Decimal('25.00'),
            category=Product.Category.DIYAS
        )
        self.frame = Product.objects.create(
            name='Collage Frame', quantity=0, price=Decimal('450.00'),
            offer=Decimal('15'), category=Product.Category.FRAMES
        )
        self.bottle = Product.objects.create(
            name='Lippan Bottle', quantity=6, price=Decimal('300.00'),
            category=Product.Category.BOTTLE_ART
        )
        self.list_url = reverse('catalog:product-list')

    def test_create_product(self):
        payload = {
            'name': '  Bamboo Pen Stand ',
            'price': 149.5,
            'quantity': 12,
            'category': 'Pen Stand',
            'offer': 5,
            'status': 'Not Available',
        }

        response = self.client.post(self.list_url, payload)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Product created successfully')
        product = Product.objects.get(pk=response.data['product']['id'])
        self.assertEqual(product.name, 'Bamboo Pen Stand')
        self.assertEqual(product.status, Product.Status.AVAILABLE)
        self.assertEqual(product.offer, Decimal('5'))

    def test_create_product_validation(self):
        base = {'name': 'Toran', 'price': 99, 'quantity': 1, 'category': 'Wall Hanging'}
        cases = [
            ({'name': ' '}, 'Product name is required'),
            ({'price': 0}, 'Price must be a positive number'),
            ({'quantity': -1}, 'Quantity must be a non-negative number'),
            ({'category': 'Lamps'}, 'Invalid product category'),
            ({'offer': 120}, 'Offer must be a number between 0 and 100'),
        ]
        for overrides, message in cases:
            with self.subTest(message=message):
                response = self.client.post(self.list_url, {**base, **overrides})
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data['message'], message)

    def test_list_products(self):
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalProducts'], 3)
        self.assertEqual(
            [p['name'] for p in response.data['products']],
            ['Clay Diya', 'Collage Frame', 'Lippan Bottle']
        )
        stats = {row['_id']: row for row in response.data['categoryStats']}
        self.assertEqual(stats['Frames']['inStock'], 0)
        self.assertEqual(stats['Diyas']['totalValue'], Decimal('1000.00'))

    def test_list_filters_and_sorting(self):
        response = self.client.get(self.list_url, {'inStock': 'true', 'sortBy': 'price', 'sortOrder': 'desc'})
        self.assertEqual([p['name'] for p in response.data['products']], ['Lippan Bottle', 'Clay Diya'])

        response = self.client.get(self.list_url, {'minPrice': '100', 'maxPrice': '400'})
        self.assertEqual([p['name'] for p in response.data['products']], ['Lippan Bottle'])

        response = self.client.get(self.list_url, {'search': 'DIYA'})
        self.assertEqual(response.data['totalProducts'], 1)

        response = self.client.get(self.list_url, {'status': 'Not Available'})
        self.assertEqual([p['name'] for p in response.data['products']], ['Collage Frame'])

        response = self.client.get(self.list_url, {'minPrice': 'cheap'})
        self.assertEqual(response.data['totalProducts'], 3)

    def test_list_pagination(self):
        response = self.client.get(self.list_url, {'limit': 2, 'page': 2})

        self.assertEqual(response.data['currentPage'], 2)
        self.assertEqual(response.data['totalPages'], 2)
        self.assertEqual(len(response.data['products']), 1)

    def test_detail_update_delete(self):
        url = reverse('catalog:product-detail', args=[self.bottle.id])

        response = self.client.get(url)
        self.assertEqual(response.data['name'], 'Lippan Bottle')

        response = self.client.put(url, {
            'name': 'Lippan Bottle XL', 'price': 320, 'quantity': 0, 'category': 'Bottle Art'
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['product']['status'], 'Not Available')

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deletedProduct']['name'], 'Lippan Bottle XL')
        self.assertFalse(Product.objects.filter(pk=self.bottle.id).exists())

    def test_detail_not_found(self):
        url = reverse('catalog:product-detail', args=[99999])

        for method in (self.client.get, self.client.delete):
            response = method(url)
            self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
            self.assertEqual(response.data, {'message': 'Product not found'})

    def test_stock_update(self):
        url = reverse('catalog:product-stock', args=[self.frame.id])

        response = self.client.patch(url, {'quantity': 7})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['product']['quantity'], 7)
        self.assertEqual(response.data['product']['status'], 'Available')

        response = self.client.patch(url, {'quantity': -2})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid quantity value')

    def test_statistics(self):
        response = self.client.get(reverse('catalog:product-statistics'))

        overview = response.data['overview']
        self.assertEqual(overview['totalProducts'], 3)
        self.assertEqual(overview['outOfStock'], 1)
        self.assertEqual(overview['totalValue'], Decimal('2800.00'))
        self.assertEqual(len(response.data['categoryDistribution']), 3)
