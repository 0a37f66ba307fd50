"""
Stock Service Layer - Row-level stock primitives used by the order workflow.

Stock changes are conditional UPDATEs so concurrent checkouts cannot
oversell: a decrement only applies while the row still holds enough stock.
"""
import logging

from django.db import transaction
from django.db.models import F, Q

from .models import Product

logger = logging.getLogger(__name__)


def reserve_stock(product_id: int, quantity: int) -> bool:
    """
    Atomically take ``quantity`` units from an available product.

    The decrement and the sold-out status flip commit together. Returns False
    when the row no longer satisfies the condition (another checkout got there
    first); the caller decides how to report it.
    """
    with transaction.atomic():
        updated = Product.objects.filter(
            pk=product_id,
            status=Product.Status.AVAILABLE,
            quantity__gte=quantity,
        ).update(quantity=F('quantity') - quantity)

        if not updated:
            return False

        Product.objects.filter(pk=product_id, quantity=0).update(
            status=Product.Status.NOT_AVAILABLE
        )
    logger.debug(f"Reserved {quantity} of product {product_id}")
    return True


def release_stock(product_id: int, quantity: int) -> bool:
    """
    Give back ``quantity`` units after a failed checkout.

    The product becomes available again only if it ends up with stock.
    """
    with transaction.atomic():
        updated = Product.objects.filter(pk=product_id).update(
            quantity=F('quantity') + quantity
        )
        if not updated:
            return False

        Product.objects.filter(pk=product_id, quantity__gt=0).update(
            status=Product.Status.AVAILABLE
        )
    logger.debug(f"Released {quantity} of product {product_id}")
    return True


def restock_cancelled(product_id: int, quantity: int) -> bool:
    """
    Return stock from a cancelled order.

    Unlike ``release_stock`` the product is forced back to AVAILABLE even if
    its quantity is still zero; ``resync_product_status`` clears that later.
    """
    updated = Product.objects.filter(pk=product_id).update(
        quantity=F('quantity') + quantity,
        status=Product.Status.AVAILABLE,
    )
    return bool(updated)


def resync_product_status() -> int:
    """Align status with quantity for every drifted product. Returns rows fixed."""
    to_unavailable = Product.objects.filter(
        quantity=0, status=Product.Status.AVAILABLE
    ).update(status=Product.Status.NOT_AVAILABLE)
    to_available = Product.objects.filter(
        ~Q(status=Product.Status.AVAILABLE), quantity__gt=0
    ).update(status=Product.Status.AVAILABLE)
    return to_unavailable + to_available
