"""
Order Models - Order and OrderItem entities with status tracking.

Order Status Flow:
    PENDING -> PROCESSING / SHIPPED / DELIVERED / CANCELLED (any order)
    CANCELLED is terminal; cancelling returns the items to stock.
"""
import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from catalog.models import Product


class Order(models.Model):
    """
    Customer order. Customer, address and items are fixed at creation;
    only status, tracking number, notes and delivery date change afterwards.
    """

    class Status(models.TextChoices):
        PENDING = 'Pending', 'Pending'
        PROCESSING = 'Processing', 'Processing'
        SHIPPED = 'Shipped', 'Shipped'
        DELIVERED = 'Delivered', 'Delivered'
        CANCELLED = 'Cancelled', 'Cancelled'

    class PaymentMethod(models.TextChoices):
        ONLINE = 'Online', 'Online'
        COD = 'COD', 'Cash on delivery'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    username = models.CharField(max_length=150, db_index=True)
    full_name = models.CharField(max_length=200)
    email = models.EmailField(max_length=254)
    phone = models.CharField(max_length=30)

    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)

    payment_method = models.CharField(
        max_length=10,
        choices=PaymentMethod.choices,
        help_text="How the customer pays"
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Total order amount"
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
        help_text="Current order status"
    )
    tracking_number = models.CharField(max_length=100, blank=True, default='')
    notes = models.TextField(blank=True, default='')
    order_date = models.DateTimeField(default=timezone.now, db_index=True)
    delivery_date = models.DateTimeField(help_text="Estimated, then actual, delivery time")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        ordering = ['-order_date']
        indexes = [
            models.Index(fields=['username', 'order_date'], name='orders_order_user_date_idx'),
            models.Index(fields=['status', 'order_date'], name='orders_order_status_date_idx'),
        ]

    def __str__(self):
        return f"Order {self.id} - {self.username} ({self.status})"

    @property
    def is_cancelled(self) -> bool:
        return self.status == self.Status.CANCELLED

    @property
    def address(self) -> dict:
        return {
            'street': self.street,
            'city': self.city,
            'state': self.state,
            'postalCode': self.postal_code,
        }


class OrderItem(models.Model):
    """
    Snapshot of one cart line. Name, price and offer are copied at order time
    so later catalog changes do not alter the order.
    """
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='items',
        help_text="Parent order"
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name='order_items',
        help_text="Ordered product; cleared if the product is deleted"
    )
    position = models.PositiveIntegerField(default=0, help_text="Index in the submitted cart")
    name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Quantity ordered"
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Unit price at time of order"
    )
    offer = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Percentage discount at time of order"
    )

    class Meta:
        verbose_name = 'Order Item'
        verbose_name_plural = 'Order Items'
        ordering = ['order', 'position']

    def __str__(self):
        return f"{self.quantity}x {self.name} @ ${self.price} (-{self.offer}%)"

    @property
    def subtotal(self) -> Decimal:
        """Discounted line total."""
        return line_total(self.price, self.quantity, self.offer)


def line_total(price: Decimal, quantity: int, offer: Decimal) -> Decimal:
    return price * quantity * (1 - offer / Decimal('100'))
