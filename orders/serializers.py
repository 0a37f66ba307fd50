"""
Serializers for order models.

The checkout payload is validated once here. Each failed precondition maps to
one ``CheckoutRejection`` whose value becomes the error ``code`` and whose
label is the client-facing message.
"""
import re
from decimal import Decimal, InvalidOperation

from django.db import models
from rest_framework import serializers

from .models import Order, OrderItem

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PHONE_RE = re.compile(r'^\+?[\d\s\-()]{8,}$')


class CheckoutRejection(models.TextChoices):
    INCOMPLETE_CUSTOMER = 'incomplete_customer', 'Customer information is incomplete'
    EMPTY_CART = 'empty_cart', 'Order must contain at least one item'
    INVALID_ITEM = 'invalid_item', 'Order contains an invalid item'
    INVALID_TOTAL = 'invalid_total', 'Invalid total amount'
    INCOMPLETE_ADDRESS = 'incomplete_address', 'Shipping address is incomplete'
    INVALID_PAYMENT_METHOD = 'invalid_payment_method', 'Invalid payment method'
    INVALID_EMAIL = 'invalid_email', 'Invalid email format'
    INVALID_PHONE = 'invalid_phone', 'Invalid phone number format'


def reject(rejection: CheckoutRejection):
    return serializers.ValidationError(rejection.label, code=rejection.value)


def fits_column(model, field_name, value):
    return len(value) <= model._meta.get_field(field_name).max_length


def parse_amount(value):
    """Decimal for a numeric JSON value or numeric string, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


class LenientCharField(serializers.CharField):
    """Text field that turns non-text input into a blank value.

    Lets ``validate()`` report the payload's problems in checkout order
    instead of failing early on a field type.
    """

    def to_internal_value(self, data):
        if isinstance(data, bool) or not isinstance(data, (str, int, float)):
            return ''
        return super().to_internal_value(data)


def _text(**kwargs):
    return LenientCharField(required=False, allow_blank=True, allow_null=True, default='', **kwargs)


class OrderItemInputSerializer(serializers.Serializer):
    """One cart line as submitted by the client."""
    productId = serializers.IntegerField(min_value=1, source='product_id')
    name = serializers.CharField(max_length=200)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=None, decimal_places=None, min_value=Decimal('0.01'))
    offer = serializers.DecimalField(
        max_digits=None,
        decimal_places=None,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False,
        default=Decimal('0'),
    )


class AddressSerializer(serializers.Serializer):
    street = _text(max_length=255)
    city = _text(max_length=100)
    state = _text(max_length=100)
    postalCode = _text(max_length=20, source='postal_code')


class OrderCreateSerializer(serializers.Serializer):
    """
    Serializer for creating orders via POST /orders/

    Request format:
    {
        "username": "asha",
        "fullName": "Asha Rao",
        "email": "asha@example.com",
        "phone": "+91 98765 43210",
        "items": [
            {"productId": 1, "name": "Brass Diya", "quantity": 2, "price": 100, "offer": 10}
        ],
        "totalAmount": 180,
        "address": {"street": "1 Main Rd", "city": "Pune", "state": "MH", "postalCode": "411001"},
        "paymentMethod": "COD"
    }

    Only the top-level shape is parsed by the fields; every rule runs in
    ``validate()`` so the first failing check decides the rejection.
    """
    username = _text()
    fullName = _text(source='full_name')
    email = _text()
    phone = _text()
    items = serializers.JSONField(required=False, allow_null=True, default=list)
    totalAmount = serializers.JSONField(required=False, allow_null=True, default=None, source='total_amount')
    address = serializers.JSONField(required=False, allow_null=True, default=dict)
    paymentMethod = _text(source='payment_method')

    def validate(self, attrs):
        customer_fields = ('username', 'full_name', 'email', 'phone')
        if not all(attrs.get(key) for key in customer_fields):
            raise reject(CheckoutRejection.INCOMPLETE_CUSTOMER)
        if not all(fits_column(Order, key, attrs[key]) for key in customer_fields):
            raise reject(CheckoutRejection.INCOMPLETE_CUSTOMER)

        if not attrs['items']:
            raise reject(CheckoutRejection.EMPTY_CART)

        items = OrderItemInputSerializer(data=attrs['items'], many=True)
        if not isinstance(attrs['items'], list) or not items.is_valid():
            raise reject(CheckoutRejection.INVALID_ITEM)
        attrs['items'] = [dict(item) for item in items.validated_data]

        total = parse_amount(attrs.get('total_amount'))
        if total is None or total <= 0:
            raise reject(CheckoutRejection.INVALID_TOTAL)
        attrs['total_amount'] = total

        raw_address = attrs.get('address')
        address = AddressSerializer(data=raw_address if isinstance(raw_address, dict) else {})
        if not address.is_valid():
            raise reject(CheckoutRejection.INCOMPLETE_ADDRESS)
        attrs['address'] = dict(address.validated_data)
        if not all(attrs['address'].get(key) for key in ('street', 'city', 'state', 'postal_code')):
            raise reject(CheckoutRejection.INCOMPLETE_ADDRESS)

        if attrs.get('payment_method') not in Order.PaymentMethod.values:
            raise reject(CheckoutRejection.INVALID_PAYMENT_METHOD)

        if not EMAIL_RE.match(attrs['email']):
            raise reject(CheckoutRejection.INVALID_EMAIL)

        if not PHONE_RE.match(attrs['phone']):
            raise reject(CheckoutRejection.INVALID_PHONE)

        return attrs


class OrderStatusUpdateSerializer(serializers.Serializer):
    """
    Payload for PATCH /orders/{id}/status/. The status value itself is checked
    by the service so an unknown status is rejected before any lookup.
    """
    status = _text()
    trackingNumber = serializers.CharField(
        max_length=100, required=False, allow_blank=True, allow_null=True,
        trim_whitespace=False, source='tracking_number'
    )
    notes = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, trim_whitespace=False
    )


class OrderItemSerializer(serializers.ModelSerializer):
    productId = serializers.IntegerField(source='product_id', read_only=True, allow_null=True)
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ['productId', 'name', 'quantity', 'price', 'offer', 'subtotal']


class OrderSerializer(serializers.ModelSerializer):
    """Full order representation."""
    fullName = serializers.CharField(source='full_name', read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    totalAmount = serializers.DecimalField(
        source='total_amount', max_digits=12, decimal_places=2, read_only=True
    )
    address = serializers.DictField(read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)
    trackingNumber = serializers.CharField(source='tracking_number', read_only=True)
    orderDate = serializers.DateTimeField(source='order_date', read_only=True)
    deliveryDate = serializers.DateTimeField(source='delivery_date', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'username', 'fullName', 'email', 'phone',
            'items', 'totalAmount', 'address', 'paymentMethod',
            'status', 'trackingNumber', 'notes',
            'orderDate', 'deliveryDate', 'updatedAt'
        ]
        read_only_fields = fields
