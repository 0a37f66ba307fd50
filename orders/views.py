"""
Order API Views.

Implements:
- GET /orders/ - Filtered, paginated list with status and payment stats
- POST /orders/ - Place an order (stock reservation + total check)
- GET /orders/{id}/ - Order detail with items
- GET /orders/{username}/ - Orders of one customer
- PATCH /orders/{id}/status/ - Status transition
"""
import logging
from datetime import datetime, time

from django.db.models import Count, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import generics, status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import PageLimitPagination
from core.rate_limiting import rate_limit
from .models import Order
from .serializers import (
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
)
from .services import OrderError, create_order, update_order_status

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    'orderDate': 'order_date',
    'totalAmount': 'total_amount',
    'status': 'status',
}


def _parse_bound(value, end_of_day=False):
    """Accept an ISO datetime or a bare date; anything else is ignored."""
    if not value:
        return None
    try:
        moment = parse_datetime(value)
        if moment is None:
            day = parse_date(value)
            if day is None:
                return None
            moment = datetime.combine(day, time.max if end_of_day else time.min)
    except ValueError:
        return None
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def _sort_order(value):
    descending = value.startswith('-')
    field = SORTABLE_FIELDS.get(value.lstrip('-'), 'order_date')
    return f'-{field}' if descending else field


def grouped_stats(queryset, field):
    """Order count and revenue grouped by ``field``."""
    rows = queryset.order_by().values(field).annotate(
        count=Count('id'),
        totalAmount=Sum('total_amount'),
    ).order_by(field)
    return [
        {'_id': row[field], 'count': row['count'], 'totalAmount': row['totalAmount']}
        for row in rows
    ]


class OrderListCreateView(generics.ListCreateAPIView):
    """
    GET: List orders with aggregate stats

    Query Parameters (GET):
        - status: Filter by status
        - startDate, endDate: Order date range (ISO date or datetime)
        - sortBy: orderDate, totalAmount, status; "-" prefix for descending
          (default -orderDate)
        - page, limit: Pagination

    POST: Place a new order. See OrderCreateSerializer for the body.
    """
    serializer_class = OrderSerializer
    pagination_class = PageLimitPagination

    def get_queryset(self):
        params = self.request.query_params
        queryset = Order.objects.all()

        status_filter = params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        start = _parse_bound(params.get('startDate'))
        if start:
            queryset = queryset.filter(order_date__gte=start)

        end = _parse_bound(params.get('endDate'), end_of_day=True)
        if end:
            queryset = queryset.filter(order_date__lte=end)

        return queryset

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        ordered = queryset.prefetch_related('items').order_by(
            _sort_order(request.query_params.get('sortBy', '-orderDate')), 'id'
        )
        page = self.paginate_queryset(ordered)
        meta = self.paginator.page_meta()

        return Response({
            'orders': OrderSerializer(page, many=True).data,
            'totalPages': meta['totalPages'],
            'currentPage': meta['currentPage'],
            'totalOrders': meta['total'],
            'orderStats': grouped_stats(queryset, 'status'),
            'paymentStats': grouped_stats(queryset, 'payment_method'),
        })

    @rate_limit()
    def create(self, request, *args, **kwargs):
        """
        Place an order.

        Returns:
            - 201: {message, orderId, estimatedDelivery}
            - 400: Validation or business-rule failure
            - 429: Rate limit exceeded
            - 500: Storage failure
        """
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = create_order(
                customer={
                    'username': data['username'],
                    'full_name': data['full_name'],
                    'email': data['email'],
                    'phone': data['phone'],
                },
                items=data['items'],
                total_amount=data['total_amount'],
                address=data['address'],
                payment_method=data['payment_method'],
            )
        except OrderError as e:
            return Response({'message': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except Exception as e:
            logger.exception(f"Unexpected error creating order: {e}")
            return Response(
                {'message': 'Error creating order'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(
            {
                'message': 'Order created successfully',
                'orderId': order.id,
                'estimatedDelivery': order.delivery_date,
            },
            status=status.HTTP_201_CREATED
        )


class OrderDetailView(generics.RetrieveAPIView):
    """
    GET: Retrieve one order with its items.
    """
    serializer_class = OrderSerializer
    queryset = Order.objects.prefetch_related('items')

    def get_object(self):
        order = self.get_queryset().filter(pk=self.kwargs['pk']).first()
        if order is None:
            raise NotFound('Order not found')
        return order


class CustomerOrderListView(generics.ListAPIView):
    """
    GET: All orders placed by ``username``, newest first. Not paginated.
    """
    serializer_class = OrderSerializer
    pagination_class = None

    def get_queryset(self):
        return Order.objects.filter(
            username=self.kwargs['username']
        ).prefetch_related('items').order_by('-order_date')


class OrderStatusView(APIView):
    """
    PATCH: Change order status.

    Request Body:
    {
        "status": "Shipped",
        "trackingNumber": "TRK123",   (optional)
        "notes": "Left at door"       (optional)
    }
    """

    def patch(self, request, pk):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = update_order_status(
                pk,
                data['status'],
                tracking_number=data.get('tracking_number'),
                notes=data.get('notes'),
            )
        except OrderError as e:
            return Response({'message': str(e)}, status=e.status_code)
        except Exception as e:
            logger.exception(f"Unexpected error updating order {pk}: {e}")
            return Response(
                {'message': 'Error updating order status'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        order = Order.objects.prefetch_related('items').get(pk=order.pk)
        return Response({
            'message': 'Order status updated successfully',
            'order': OrderSerializer(order).data,
        })
