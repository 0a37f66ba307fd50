"""
Serializers for catalog models.
Provides data validation and JSON conversion for product endpoints.
"""
from decimal import Decimal

from rest_framework import serializers

from .models import Product


def _same_message(message, *keys):
    """Map several DRF error keys onto one client-facing message."""
    return {key: message for key in keys}


NUMBER_ERRORS = (
    'required', 'null', 'invalid', 'min_value', 'max_value',
    'max_digits', 'max_decimal_places', 'max_whole_digits', 'max_string_length',
)


class ProductSerializer(serializers.ModelSerializer):
    """Serializer for Product create/update/read. Status is derived, never written."""
    name = serializers.CharField(
        max_length=200,
        error_messages=_same_message(
            'Product name is required', 'required', 'blank', 'null'
        ),
    )
    price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.01'),
        error_messages=_same_message('Price must be a positive number', *NUMBER_ERRORS),
    )
    quantity = serializers.IntegerField(
        min_value=0,
        error_messages=_same_message('Quantity must be a non-negative number', *NUMBER_ERRORS),
    )
    category = serializers.ChoiceField(
        choices=Product.Category.choices,
        error_messages=_same_message(
            'Invalid product category', 'required', 'null', 'invalid_choice'
        ),
    )
    offer = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False,
        default=Decimal('0'),
        error_messages=_same_message('Offer must be a number between 0 and 100', *NUMBER_ERRORS),
    )
    image = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'quantity', 'price', 'offer', 'category',
            'image', 'status', 'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id', 'status']


class ProductStockSerializer(serializers.Serializer):
    """Payload for PATCH /products/{id}/stock/."""
    quantity = serializers.IntegerField(
        min_value=0,
        error_messages=_same_message('Invalid quantity value', *NUMBER_ERRORS),
    )
