"""
Order Service Layer - Checkout and status transitions.

Checkout, per cart item and in cart order:
1. Product must exist and be AVAILABLE
2. Requested quantity must be in stock
3. Submitted price and offer must equal the catalog's current values
4. Stock is taken with a conditional UPDATE (never below zero)
Then the claimed total is checked against the recomputed one and the order
is stored as PENDING.

With ORDER_ATOMIC_CHECKOUT (default) all of this runs in one transaction and
any failure rolls every stock change back. Without it, each reservation
commits on its own and a failure releases the reservations already made.
"""
import logging
import uuid
from contextlib import nullcontext
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from catalog.models import Product
from catalog.services import release_stock, reserve_stock, restock_cancelled
from .models import Order, OrderItem, line_total

logger = logging.getLogger(__name__)

TOTAL_TOLERANCE = Decimal('0.01')
CENTS = Decimal('0.01')


class OrderError(Exception):
    """Base class for checkout and status-transition failures."""
    status_code = 400


class ProductNotFoundError(OrderError):
    """A cart item references a product that does not exist."""


class ProductUnavailableError(OrderError):
    """The product is marked Not Available."""


class InsufficientStockError(OrderError):
    """Raised when there's not enough stock for an order item."""
    def __init__(self, name: str, requested: int, available: int):
        self.name = name
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for {name}. Available: {available}")


class PriceMismatchError(OrderError):
    """The cart was priced against stale catalog values."""


class TotalMismatchError(OrderError):
    """The claimed total differs from the recomputed one by more than a cent."""


class InvalidStatusError(OrderError):
    pass


class OrderNotFoundError(OrderError):
    status_code = 404


class CancelledOrderError(OrderError):
    """Cancelled orders accept no further transitions."""


def calculate_total(items: List[Dict]) -> Decimal:
    """Sum of discounted line totals: price * quantity * (1 - offer / 100)."""
    return sum(
        (line_total(item['price'], item['quantity'], item['offer']) for item in items),
        Decimal('0')
    )


def verify_total(items: List[Dict], claimed: Decimal) -> Decimal:
    expected = calculate_total(items)
    if abs(expected - claimed) > TOTAL_TOLERANCE:
        raise TotalMismatchError("Total amount calculation mismatch")
    return expected


def reserve_item(item: Dict) -> None:
    """
    Validate one cart item against the live product and take its stock.

    Raises:
        ProductNotFoundError, ProductUnavailableError,
        InsufficientStockError, PriceMismatchError
    """
    name = item['name']
    product = Product.objects.filter(pk=item['product_id']).first()

    if product is None:
        raise ProductNotFoundError(f"Product not found: {name}")

    if not product.is_available:
        raise ProductUnavailableError(f"Product {name} is currently not available")

    if product.quantity < item['quantity']:
        raise InsufficientStockError(name, item['quantity'], product.quantity)

    if product.price != item['price'] or product.offer != item['offer']:
        raise PriceMismatchError(f"Price or offer mismatch for {name}")

    if not reserve_stock(product.pk, item['quantity']):
        # Lost a race with a concurrent checkout between the read and the update
        available = Product.objects.filter(pk=product.pk).values_list(
            'quantity', flat=True
        ).first()
        raise InsufficientStockError(name, item['quantity'], available or 0)


def release_reserved(items: List[Dict]) -> None:
    """
    Best-effort compensation: give back stock for each reserved item.

    Every item is attempted independently; failures are logged and skipped.
    """
    for item in items:
        try:
            if not release_stock(item['product_id'], item['quantity']):
                logger.warning(
                    f"Could not restore stock for product {item['product_id']}: product missing"
                )
        except Exception:
            logger.exception(f"Error restoring stock for product {item['product_id']}")


def create_order(
    customer: Dict,
    items: List[Dict],
    total_amount: Decimal,
    address: Dict,
    payment_method: str,
) -> Order:
    """
    Place an order: reserve stock for every item, verify the total, persist.

    Args:
        customer: username, full_name, email, phone (already trimmed)
        items: dicts with product_id, name, quantity, price, offer
        total_amount: Total claimed by the client
        address: street, city, state, postal_code
        payment_method: One of Order.PaymentMethod

    Returns:
        The new PENDING order

    Raises:
        OrderError subclasses for business-rule failures; storage errors propagate.
        Either way product stock is left as it was before the call.
    """
    atomic = getattr(settings, 'ORDER_ATOMIC_CHECKOUT', True)
    reserved = []

    try:
        with transaction.atomic() if atomic else nullcontext():
            for item in items:
                reserve_item(item)
                reserved.append(item)

            verify_total(items, total_amount)
            order = _persist_order(customer, items, total_amount, address, payment_method)
    except Exception as e:
        if not atomic and reserved:
            release_reserved(reserved)
        logger.warning(f"Order creation failed for {customer['username']}: {e}")
        raise

    logger.info(
        f"Order {order.id} created for {order.username}: "
        f"{len(items)} items, total ${order.total_amount}"
    )
    return order


@transaction.atomic
def _persist_order(customer, items, total_amount, address, payment_method) -> Order:
    now = timezone.now()
    order = Order.objects.create(
        username=customer['username'],
        full_name=customer['full_name'],
        email=customer['email'].lower(),
        phone=customer['phone'],
        street=address['street'],
        city=address['city'],
        state=address['state'],
        postal_code=address['postal_code'],
        payment_method=payment_method,
        total_amount=total_amount.quantize(CENTS, rounding=ROUND_HALF_UP),
        status=Order.Status.PENDING,
        order_date=now,
        delivery_date=now + timedelta(days=getattr(settings, 'ORDER_DELIVERY_DAYS', 5)),
    )
    OrderItem.objects.bulk_create([
        OrderItem(
            order=order,
            product_id=item['product_id'],
            position=position,
            name=item['name'],
            quantity=item['quantity'],
            price=item['price'],
            offer=item['offer'],
        )
        for position, item in enumerate(items)
    ])
    return order


def update_order_status(
    order_id,
    status: str,
    tracking_number: Optional[str] = None,
    notes: Optional[str] = None,
) -> Order:
    """
    Move an order to ``status``.

    Cancelling returns every item to stock. Delivering stamps the delivery
    date. A cancelled order rejects every further update.
    """
    if status not in Order.Status.values:
        raise InvalidStatusError("Invalid order status")

    try:
        order_id = uuid.UUID(str(order_id))
    except ValueError:
        raise OrderNotFoundError("Order not found")

    with transaction.atomic():
        # Row lock keeps two concurrent cancellations from restocking twice
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        if order is None:
            raise OrderNotFoundError("Order not found")

        if order.is_cancelled:
            raise CancelledOrderError("Cannot update status of cancelled order")

        if status == Order.Status.CANCELLED:
            _restock_order(order)

        previous = order.status
        order.status = status
        if tracking_number:
            order.tracking_number = tracking_number.strip()
        if notes:
            order.notes = notes.strip()
        if status == Order.Status.DELIVERED:
            order.delivery_date = timezone.now()
        order.save()

    logger.info(f"Order {order.id} status {previous} -> {status}")
    return order


def _restock_order(order: Order) -> None:
    for item in order.items.all():
        if item.product_id is None or not restock_cancelled(item.product_id, item.quantity):
            logger.info(f"Order {order.id}: product for '{item.name}' no longer exists, not restocked")
