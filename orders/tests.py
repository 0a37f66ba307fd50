"""
Tests for the order workflow.

Test Cases:
1. Successful checkout deducts stock and stores a PENDING order
2. Total verification with a one-cent tolerance
3. Failed checkouts leave stock untouched (transactional and compensating modes)
4. Status transitions, cancellation restock and terminality
5. HTTP surface: create, detail round-trip, list, customer orders, status
6. Housekeeping tasks
"""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError
from django.db.models import QuerySet
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from catalog import services as stock
from catalog.models import Product
from orders.models import Order
from orders.services import (
    CancelledOrderError,
    InsufficientStockError,
    InvalidStatusError,
    OrderNotFoundError,
    PriceMismatchError,
    ProductNotFoundError,
    ProductUnavailableError,
    TotalMismatchError,
    calculate_total,
    create_order,
    update_order_status,
)
from orders.tasks import generate_daily_order_report, reconcile_product_status

CUSTOMER = {
    'username': 'asha',
    'full_name': 'Asha Rao',
    'email': 'Asha.Rao@Example.com',
    'phone': '+91 98765 43210',
}

ADDRESS = {
    'street': '12 MG Road',
    'city': 'Pune',
    'state': 'Maharashtra',
    'postal_code': '411001',
}


def make_product(name, quantity, price, offer='0', category=Product.Category.DIYAS):
    return Product.objects.create(
        name=name,
        quantity=quantity,
        price=Decimal(price),
        offer=Decimal(offer),
        category=category,
    )


def cart_item(product, quantity, price=None, offer=None):
    return {
        'product_id': product.id,
        'name': product.name,
        'quantity': quantity,
        'price': Decimal(price) if price is not None else product.price,
        'offer': Decimal(offer) if offer is not None else product.offer,
    }


def place(items, total, payment_method='COD'):
    return create_order(
        customer=dict(CUSTOMER),
        items=items,
        total_amount=Decimal(total),
        address=dict(ADDRESS),
        payment_method=payment_method,
    )


class CheckoutTestCase(TestCase):
    """Checkout against live product state."""

    def setUp(self):
        self.diya = make_product('Brass Diya', 10, '100.00', '10')
        self.frame = make_product('Photo Frame', 5, '50.00', category=Product.Category.FRAMES)

    def test_order_created_and_stock_deducted(self):
        """
        Given: Products with sufficient stock
        When: Placing an order within stock limits
        Then: Order is PENDING, stock is deducted by the ordered quantity
        """
        items = [cart_item(self.diya, 2), cart_item(self.frame, 3)]

        order = place(items, '330.00')  # 100*2*0.9 + 50*3

        self.assertEqual(order.status, Order.Status.PENDING)
        self.assertEqual(order.total_amount, Decimal('330.00'))
        self.assertEqual(order.items.count(), 2)

        self.diya.refresh_from_db()
        self.frame.refresh_from_db()
        self.assertEqual(self.diya.quantity, 8)
        self.assertEqual(self.frame.quantity, 2)
        self.assertEqual(self.diya.status, Product.Status.AVAILABLE)

    def test_order_snapshot_and_customer_fields(self):
        order = place([cart_item(self.diya, 1)], '90')

        self.assertEqual(order.email, 'asha.rao@example.com')
        self.assertEqual(order.username, 'asha')
        self.assertEqual(order.postal_code, '411001')
        self.assertEqual(order.payment_method, Order.PaymentMethod.COD)

        item = order.items.get()
        self.assertEqual(item.product_id, self.diya.id)
        self.assertEqual(item.name, 'Brass Diya')
        self.assertEqual(item.price, Decimal('100.00'))
        self.assertEqual(item.offer, Decimal('10.00'))

    def test_delivery_estimate_is_five_days_out(self):
        order = place([cart_item(self.frame, 1)], '50')

        self.assertEqual(order.delivery_date - order.order_date, timedelta(days=5))

    def test_exact_stock_marks_product_not_available(self):
        """
        Given: 5 frames in stock
        When: Ordering exactly 5
        Then: Quantity is 0 and status flips to Not Available
        """
        place([cart_item(self.frame, 5)], '250')

        self.frame.refresh_from_db()
        self.assertEqual(self.frame.quantity, 0)
        self.assertEqual(self.frame.status, Product.Status.NOT_AVAILABLE)

    def test_total_within_tolerance(self):
        """100 * 2 * 0.9 = 180; 180.00 and 180.005 pass."""
        place([cart_item(self.diya, 1)], '90.00')
        order = place([cart_item(self.diya, 2)], '180.005')

        self.assertEqual(order.status, Order.Status.PENDING)
        self.assertEqual(order.total_amount, Decimal('180.01'))

    def test_total_outside_tolerance_rejected(self):
        """|180 - 179.98| = 0.02 exceeds the one-cent tolerance."""
        with self.assertRaises(TotalMismatchError):
            place([cart_item(self.diya, 2)], '179.98')

        self.diya.refresh_from_db()
        self.assertEqual(self.diya.quantity, 10)
        self.assertFalse(Order.objects.exists())

    def test_calculate_total(self):
        items = [cart_item(self.diya, 2), cart_item(self.frame, 1)]
        self.assertEqual(calculate_total(items), Decimal('230'))

    def test_product_not_found(self):
        items = [{
            'product_id': 99999, 'name': 'Ghost Lamp', 'quantity': 1,
            'price': Decimal('10'), 'offer': Decimal('0'),
        }]

        with self.assertRaises(ProductNotFoundError) as context:
            place(items, '10')

        self.assertIn('Product not found: Ghost Lamp', str(context.exception))

    def test_unavailable_product_rejected(self):
        Product.objects.filter(pk=self.frame.pk).update(status=Product.Status.NOT_AVAILABLE)

        with self.assertRaises(ProductUnavailableError) as context:
            place([cart_item(self.frame, 1)], '50')

        self.assertIn('currently not available', str(context.exception))

    def test_insufficient_stock_reports_remaining(self):
        with self.assertRaises(InsufficientStockError) as context:
            place([cart_item(self.frame, 6)], '300')

        self.assertEqual(context.exception.available, 5)
        self.assertIn('Insufficient stock for Photo Frame. Available: 5', str(context.exception))

    def test_stale_price_rejected(self):
        with self.assertRaises(PriceMismatchError):
            place([cart_item(self.frame, 1, price='45.00')], '45')

    def test_stale_offer_rejected(self):
        with self.assertRaises(PriceMismatchError):
            place([cart_item(self.diya, 1, offer='20')], '80')

    def test_lost_race_reported_as_insufficient_stock(self):
        """The conditional update fails when another checkout took the stock first."""
        with patch('orders.services.reserve_stock', return_value=False):
            with self.assertRaises(InsufficientStockError):
                place([cart_item(self.frame, 2)], '100')

    def test_partial_failure_restores_stock(self):
        """
        Given: Item 1 in stock, item 2 short
        When: Placing the order
        Then: Checkout fails and item 1's stock is back at its original value
        """
        items = [cart_item(self.diya, 3), cart_item(self.frame, 9)]

        with self.assertRaises(InsufficientStockError):
            place(items, '720')

        self.diya.refresh_from_db()
        self.frame.refresh_from_db()
        self.assertEqual(self.diya.quantity, 10)
        self.assertEqual(self.diya.status, Product.Status.AVAILABLE)
        self.assertEqual(self.frame.quantity, 5)
        self.assertFalse(Order.objects.exists())


@override_settings(ORDER_ATOMIC_CHECKOUT=False)
class CompensatingCheckoutTestCase(TestCase):
    """Checkout without a surrounding transaction falls back to compensation."""

    def setUp(self):
        self.diya = make_product('Clay Diya', 4, '20.00')
        self.bag = make_product('Jute Tote', 2, '300.00', '5', category=Product.Category.BAG)

    def test_partial_failure_restores_reserved_items(self):
        items = [cart_item(self.diya, 4), cart_item(self.bag, 3)]

        with self.assertRaises(InsufficientStockError):
            place(items, '935')

        self.diya.refresh_from_db()
        self.assertEqual(self.diya.quantity, 4)
        self.assertEqual(self.diya.status, Product.Status.AVAILABLE)

    def test_total_mismatch_restores_every_item(self):
        items = [cart_item(self.diya, 1), cart_item(self.bag, 2)]

        with self.assertRaises(TotalMismatchError):
            place(items, '1.00')

        self.diya.refresh_from_db()
        self.bag.refresh_from_db()
        self.assertEqual(self.diya.quantity, 4)
        self.assertEqual(self.bag.quantity, 2)
        self.assertEqual(self.bag.status, Product.Status.AVAILABLE)

    def test_restore_failure_does_not_block_other_items(self):
        """
        Given: Restoring the first item fails at the storage layer
        When: Compensation runs
        Then: The second item is still restored and the original error surfaces
        """
        real_release = stock.release_stock
        diya_id = self.diya.id

        def flaky_release(product_id, quantity):
            if product_id == diya_id:
                raise DatabaseError('write failed')
            return real_release(product_id, quantity)

        items = [cart_item(self.diya, 1), cart_item(self.bag, 1)]

        with patch('orders.services.release_stock', side_effect=flaky_release):
            with self.assertRaises(TotalMismatchError):
                place(items, '1.00')

        self.diya.refresh_from_db()
        self.bag.refresh_from_db()
        self.assertEqual(self.diya.quantity, 3)
        self.assertEqual(self.bag.quantity, 2)

    def test_items_never_reserved_are_not_restocked(self):
        items = [cart_item(self.diya, 1), cart_item(self.bag, 1, price='1.00')]

        with self.assertRaises(PriceMismatchError):
            place(items, '21')

        self.bag.refresh_from_db()
        self.assertEqual(self.bag.quantity, 2)

    def test_status_write_failure_keeps_stock(self):
        """
        Given: The sold-out status write fails after the last units are taken
        When: Compensation runs
        Then: The failed item's decrement is undone along with the earlier reservations
        """
        real_update = QuerySet.update
        diya_id = self.diya.id

        def failing_sold_out_update(queryset, **kwargs):
            if kwargs.get('status') == Product.Status.NOT_AVAILABLE and queryset.filter(pk=diya_id).exists():
                raise DatabaseError('status write failed')
            return real_update(queryset, **kwargs)

        items = [cart_item(self.bag, 1), cart_item(self.diya, 4)]

        with patch.object(QuerySet, 'update', autospec=True, side_effect=failing_sold_out_update):
            with self.assertRaises(DatabaseError):
                place(items, '365')

        self.diya.refresh_from_db()
        self.bag.refresh_from_db()
        self.assertEqual(self.diya.quantity, 4)
        self.assertEqual(self.diya.status, Product.Status.AVAILABLE)
        self.assertEqual(self.bag.quantity, 2)


class OrderStatusTestCase(TestCase):
    """Status transitions and their side effects."""

    def setUp(self):
        self.diya = make_product('Floating Diya', 6, '40.00')
        self.bottle = make_product('Mandala Bottle', 2, '250.00', category=Product.Category.BOTTLE_ART)
        self.order = place(
            [cart_item(self.diya, 2), cart_item(self.bottle, 2)],
            '580'
        )

    def test_cancellation_restores_stock(self):
        self.bottle.refresh_from_db()
        self.assertEqual(self.bottle.status, Product.Status.NOT_AVAILABLE)

        order = update_order_status(self.order.id, Order.Status.CANCELLED)

        self.assertEqual(order.status, Order.Status.CANCELLED)
        self.diya.refresh_from_db()
        self.bottle.refresh_from_db()
        self.assertEqual(self.diya.quantity, 6)
        self.assertEqual(self.bottle.quantity, 2)
        self.assertEqual(self.bottle.status, Product.Status.AVAILABLE)

    def test_cancellation_forces_available(self):
        """Cancellation sets Available regardless of the product's previous status."""
        Product.objects.filter(pk=self.diya.pk).update(status=Product.Status.NOT_AVAILABLE)

        update_order_status(self.order.id, Order.Status.CANCELLED)

        self.diya.refresh_from_db()
        self.assertEqual(self.diya.status, Product.Status.AVAILABLE)

    def test_cancellation_skips_deleted_products(self):
        self.bottle.delete()

        update_order_status(self.order.id, Order.Status.CANCELLED)

        self.diya.refresh_from_db()
        self.assertEqual(self.diya.quantity, 6)
        self.assertEqual(self.order.items.filter(product__isnull=True).count(), 1)

    def test_cancelled_order_is_terminal(self):
        update_order_status(self.order.id, Order.Status.CANCELLED)

        for target in Order.Status.values:
            with self.subTest(target=target):
                with self.assertRaises(CancelledOrderError):
                    update_order_status(self.order.id, target)

        self.diya.refresh_from_db()
        self.assertEqual(self.diya.quantity, 6)

    def test_invalid_status_rejected_before_lookup(self):
        with self.assertNumQueries(0):
            with self.assertRaises(InvalidStatusError):
                update_order_status(self.order.id, 'Lost')

    def test_unknown_order(self):
        with self.assertRaises(OrderNotFoundError):
            update_order_status('6f1c4b7e-0000-4000-8000-000000000000', Order.Status.SHIPPED)

    def test_malformed_order_id_is_not_found(self):
        with self.assertRaises(OrderNotFoundError):
            update_order_status('not-a-uuid', Order.Status.SHIPPED)

    def test_any_non_cancelled_transition_allowed(self):
        update_order_status(self.order.id, Order.Status.SHIPPED)
        order = update_order_status(self.order.id, Order.Status.PENDING)

        self.assertEqual(order.status, Order.Status.PENDING)

    def test_delivered_overwrites_estimate(self):
        estimate = self.order.delivery_date

        order = update_order_status(self.order.id, Order.Status.DELIVERED)

        self.assertLess(order.delivery_date, estimate)
        self.assertLessEqual(order.delivery_date, timezone.now())

    def test_tracking_and_notes_trimmed(self):
        order = update_order_status(
            self.order.id, Order.Status.SHIPPED,
            tracking_number='  TRK-991  ', notes=' fragile '
        )

        order.refresh_from_db()
        self.assertEqual(order.tracking_number, 'TRK-991')
        self.assertEqual(order.notes, 'fragile')

    def test_stock_untouched_by_non_cancel_transitions(self):
        update_order_status(self.order.id, Order.Status.PROCESSING)

        self.diya.refresh_from_db()
        self.assertEqual(self.diya.quantity, 4)


@override_settings(RATE_LIMIT_ENABLED=False)
class OrderAPITestCase(APITestCase):
    """HTTP surface of the order endpoints."""

    def setUp(self):
        self.diya = make_product('Painted Diya Set', 10, '100', '10')
        self.pouch = make_product('Potli Bag', 3, '75.50', category=Product.Category.BAG)
        self.url = reverse('orders:order-list')

    def payload(self, **overrides):
        data = {
            'username': 'asha',
            'fullName': 'Asha Rao',
            'email': 'asha@example.com',
            'phone': '+91 98765 43210',
            'items': [
                {'productId': self.diya.id, 'name': self.diya.name, 'quantity': 2, 'price': 100, 'offer': 10},
                {'productId': self.pouch.id, 'name': self.pouch.name, 'quantity': 1, 'price': 75.5},
            ],
            'totalAmount': 255.5,
            'address': {'street': '4 Lake View', 'city': 'Pune', 'state': 'MH', 'postalCode': '411002'},
            'paymentMethod': 'Online',
        }
        data.update(overrides)
        return data

    def test_create_order(self):
        response = self.client.post(self.url, self.payload())

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Order created successfully')
        self.assertIn('orderId', response.data)
        self.assertIn('estimatedDelivery', response.data)

        self.pouch.refresh_from_db()
        self.assertEqual(self.pouch.quantity, 2)

    def test_round_trip(self):
        """Fetching a created order returns the submitted items and customer fields."""
        payload = self.payload()
        created = self.client.post(self.url, payload)
        detail_url = reverse('orders:order-detail', args=[created.data['orderId']])

        response = self.client.get(detail_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'Pending')
        for key in ('username', 'fullName', 'email', 'phone', 'paymentMethod', 'address'):
            self.assertEqual(response.data[key], payload[key])

        items = response.data['items']
        self.assertEqual(len(items), 2)
        for returned, submitted in zip(items, payload['items']):
            self.assertEqual(returned['productId'], submitted['productId'])
            self.assertEqual(returned['name'], submitted['name'])
            self.assertEqual(returned['quantity'], submitted['quantity'])
            self.assertEqual(returned['price'], Decimal(str(submitted['price'])))
            self.assertEqual(returned['offer'], Decimal(str(submitted.get('offer', 0))))

    def assertRejected(self, payload, message, code):
        response = self.client.post(self.url, payload)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], message)
        self.assertEqual(response.data['code'], code)

    def test_validation_rejections(self):
        cases = [
            ({'fullName': '   '}, 'Customer information is incomplete', 'incomplete_customer'),
            ({'items': []}, 'Order must contain at least one item', 'empty_cart'),
            ({'items': [{'productId': self.diya.id, 'name': 'x', 'quantity': 0, 'price': 1}]},
             'Order contains an invalid item', 'invalid_item'),
            ({'totalAmount': 0}, 'Invalid total amount', 'invalid_total'),
            ({'items': 'two diyas'}, 'Order contains an invalid item', 'invalid_item'),
            ({'totalAmount': 'lots'}, 'Invalid total amount', 'invalid_total'),
            ({'totalAmount': True}, 'Invalid total amount', 'invalid_total'),
            ({'address': {'street': '4 Lake View', 'city': 'Pune'}},
             'Shipping address is incomplete', 'incomplete_address'),
            ({'address': None}, 'Shipping address is incomplete', 'incomplete_address'),
            ({'paymentMethod': 'Card'}, 'Invalid payment method', 'invalid_payment_method'),
            ({'paymentMethod': {'type': 'COD'}}, 'Invalid payment method', 'invalid_payment_method'),
            ({'email': 'asha.example.com'}, 'Invalid email format', 'invalid_email'),
            ({'phone': '12-34'}, 'Invalid phone number format', 'invalid_phone'),
        ]
        for overrides, message, code in cases:
            with self.subTest(message=message, code=code):
                self.assertRejected(self.payload(**overrides), message, code)

        self.diya.refresh_from_db()
        self.assertEqual(self.diya.quantity, 10)

    def test_customer_checked_before_items(self):
        self.assertRejected(
            self.payload(username='', items=[]),
            'Customer information is incomplete', 'incomplete_customer'
        )

    def test_customer_checked_before_malformed_total(self):
        self.assertRejected(
            self.payload(username='', totalAmount='lots'),
            'Customer information is incomplete', 'incomplete_customer'
        )

    def test_numeric_string_total_accepted(self):
        response = self.client.post(self.url, self.payload(totalAmount='255.50'))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Order.objects.get().total_amount, Decimal('255.50'))

    def test_overlong_address_rejected(self):
        """
        Given: A postal code longer than the stored column allows
        When: Placing the order
        Then: 400 with no order stored and stock untouched
        """
        address = {'street': '4 Lake View', 'city': 'Pune', 'state': 'MH', 'postalCode': '9' * 40}

        self.assertRejected(
            self.payload(address=address),
            'Shipping address is incomplete', 'incomplete_address'
        )

        self.assertFalse(Order.objects.exists())
        self.diya.refresh_from_db()
        self.pouch.refresh_from_db()
        self.assertEqual(self.diya.quantity, 10)
        self.assertEqual(self.pouch.quantity, 3)

    def test_overlong_customer_field_rejected(self):
        self.assertRejected(
            self.payload(username='a' * 151),
            'Customer information is incomplete', 'incomplete_customer'
        )

    def test_business_rule_failure_returns_400(self):
        response = self.client.post(self.url, self.payload(totalAmount=255.0))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'message': 'Total amount calculation mismatch'})
        self.diya.refresh_from_db()
        self.assertEqual(self.diya.quantity, 10)

    def test_storage_failure_returns_500(self):
        with patch('orders.views.create_order', side_effect=DatabaseError('disk full')):
            response = self.client.post(self.url, self.payload())

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['message'], 'Error creating order')

    def test_status_update(self):
        created = self.client.post(self.url, self.payload())
        url = reverse('orders:order-status', args=[created.data['orderId']])

        response = self.client.patch(url, {'status': 'Shipped', 'trackingNumber': ' TRK1 '})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Order status updated successfully')
        self.assertEqual(response.data['order']['status'], 'Shipped')
        self.assertEqual(response.data['order']['trackingNumber'], 'TRK1')

    def test_status_update_errors(self):
        created = self.client.post(self.url, self.payload())
        url = reverse('orders:order-status', args=[created.data['orderId']])
        missing = reverse('orders:order-status', args=['6f1c4b7e-0000-4000-8000-000000000000'])

        response = self.client.patch(url, {'status': 'Lost'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid order status')

        response = self.client.patch(missing, {'status': 'Shipped'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Order not found')

        self.client.patch(url, {'status': 'Cancelled'})
        response = self.client.patch(url, {'status': 'Cancelled'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Cannot update status of cancelled order')

        self.diya.refresh_from_db()
        self.assertEqual(self.diya.quantity, 10)

    def test_status_update_malformed_order_id(self):
        url = reverse('orders:order-status', args=['not-a-uuid'])

        response = self.client.patch(url, {'status': 'Shipped'})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'message': 'Order not found'})

    def test_status_update_tracking_number_too_long(self):
        created = self.client.post(self.url, self.payload())
        url = reverse('orders:order-status', args=[created.data['orderId']])

        response = self.client.patch(url, {'status': 'Shipped', 'trackingNumber': 'T' * 101})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'max_length')
        self.assertEqual(Order.objects.get().status, Order.Status.PENDING)

    def test_order_detail_not_found(self):
        url = reverse('orders:order-detail', args=['6f1c4b7e-0000-4000-8000-000000000000'])

        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'message': 'Order not found'})

    def test_list_orders_with_stats(self):
        first = self.client.post(self.url, self.payload()).data['orderId']
        self.client.post(self.url, self.payload(paymentMethod='COD', username='ravi'))
        update_order_status(first, Order.Status.CANCELLED)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalOrders'], 2)
        self.assertEqual(response.data['currentPage'], 1)
        self.assertEqual(response.data['totalPages'], 1)
        by_status = {row['_id']: row['count'] for row in response.data['orderStats']}
        self.assertEqual(by_status, {'Cancelled': 1, 'Pending': 1})
        by_payment = {row['_id']: row['totalAmount'] for row in response.data['paymentStats']}
        self.assertEqual(by_payment, {'COD': Decimal('255.50'), 'Online': Decimal('255.50')})

        response = self.client.get(self.url, {'status': 'Pending'})
        self.assertEqual(response.data['totalOrders'], 1)
        self.assertEqual(response.data['orders'][0]['username'], 'ravi')

    def test_list_orders_pagination_and_date_filter(self):
        for _ in range(3):
            self.client.post(self.url, self.payload(items=[self.payload()['items'][0]], totalAmount=180))

        response = self.client.get(self.url, {'limit': 2, 'page': 2})
        self.assertEqual(response.data['totalPages'], 2)
        self.assertEqual(len(response.data['orders']), 1)

        tomorrow = (timezone.localdate() + timedelta(days=1)).isoformat()
        response = self.client.get(self.url, {'startDate': tomorrow})
        self.assertEqual(response.data['totalOrders'], 0)

        response = self.client.get(self.url, {'startDate': 'not-a-date'})
        self.assertEqual(response.data['totalOrders'], 3)

    def test_customer_orders(self):
        self.client.post(self.url, self.payload())
        self.client.post(self.url, self.payload(items=[self.payload()['items'][0]], totalAmount=180))
        self.client.post(self.url, self.payload(username='ravi', items=[self.payload()['items'][0]], totalAmount=180))

        response = self.client.get(reverse('orders:customer-orders', args=['asha']))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        self.assertGreaterEqual(response.data[0]['orderDate'], response.data[1]['orderDate'])
        self.assertTrue(all(order['username'] == 'asha' for order in response.data))


class OrderTasksTestCase(TestCase):
    """Celery housekeeping tasks, run synchronously."""

    def test_reconcile_product_status(self):
        lamp = make_product('Clay Lamp', 0, '30')
        tote = make_product('Canvas Tote', 4, '90', category=Product.Category.BAG)
        Product.objects.filter(pk=lamp.pk).update(status=Product.Status.AVAILABLE)
        Product.objects.filter(pk=tote.pk).update(status=Product.Status.NOT_AVAILABLE)

        result = reconcile_product_status()

        self.assertEqual(result, {'fixed': 2})
        lamp.refresh_from_db()
        tote.refresh_from_db()
        self.assertEqual(lamp.status, Product.Status.NOT_AVAILABLE)
        self.assertEqual(tote.status, Product.Status.AVAILABLE)

    def test_daily_order_report(self):
        diya = make_product('Report Diya', 10, '10')
        order = place([cart_item(diya, 2)], '20')
        cancelled = place([cart_item(diya, 1)], '10')
        update_order_status(cancelled.id, Order.Status.CANCELLED)
        Order.objects.filter(pk__in=[order.pk, cancelled.pk]).update(
            order_date=timezone.now() - timedelta(days=1)
        )

        stats = generate_daily_order_report()

        self.assertEqual(stats['total_orders'], 2)
        self.assertEqual(stats['cancelled_orders'], 1)
        self.assertEqual(stats['pending_orders'], 1)
        self.assertEqual(stats['total_revenue'], '20.00')
