"""
Celery tasks for order housekeeping.

Tasks:
    - reconcile_product_status: Realign product status with stock
    - generate_daily_order_report: Yesterday's order statistics
"""
import logging
from datetime import timedelta

from celery import shared_task
from django.db.models import Count, Q, Sum
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task
def reconcile_product_status():
    """
    Periodic task fixing products whose status disagrees with their quantity.

    Cancelling an order forces its products to Available even when they hold
    no stock; this task settles that transient state.
    """
    from catalog.services import resync_product_status

    fixed = resync_product_status()
    if fixed:
        logger.warning(f"Reconciled status of {fixed} products")
    return {'fixed': fixed}


@shared_task
def generate_daily_order_report():
    """
    Generate daily order statistics report.

    Scheduled via Celery Beat (see CELERY_BEAT_SCHEDULE).
    """
    from orders.models import Order

    yesterday = timezone.localdate() - timedelta(days=1)

    orders = Order.objects.filter(order_date__date=yesterday)

    stats = orders.aggregate(
        total_orders=Count('id'),
        pending_orders=Count('id', filter=Q(status=Order.Status.PENDING)),
        delivered_orders=Count('id', filter=Q(status=Order.Status.DELIVERED)),
        cancelled_orders=Count('id', filter=Q(status=Order.Status.CANCELLED)),
        total_revenue=Sum('total_amount', filter=~Q(status=Order.Status.CANCELLED)),
    )
    stats['total_revenue'] = str(stats['total_revenue'] or '0.00')

    report = f"""
    ===============================================
    DAILY ORDER REPORT - {yesterday}
    ===============================================
    Total Orders: {stats['total_orders']}
    Pending: {stats['pending_orders']}
    Delivered: {stats['delivered_orders']}
    Cancelled: {stats['cancelled_orders']}
    Total Revenue: ${stats['total_revenue']}
    ===============================================
    """

    logger.info(report)

    stats['date'] = yesterday.isoformat()
    return stats
