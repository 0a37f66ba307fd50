"""
Catalog API Views.

Implements:
- GET/POST /products/ - Filtered, sorted, paginated list with category stats
- GET/PUT/DELETE /products/{id}/ - Product detail
- PATCH /products/{id}/stock/ - Stock adjustment
- GET /products/statistics/ - Catalog-wide overview
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db.models import Avg, Count, DecimalField, ExpressionWrapper, F, Q, Sum
from django.http import Http404
from rest_framework import generics, status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
from rest_framework.views import APIView

from core.pagination import PageLimitPagination
from .models import Product
from .serializers import ProductSerializer, ProductStockSerializer

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = 'Product not found'

SORTABLE_FIELDS = {
    'name': 'name',
    'price': 'price',
    'quantity': 'quantity',
    'offer': 'offer',
    'createdAt': 'created_at',
}

STOCK_VALUE = ExpressionWrapper(
    F('price') * F('quantity'),
    output_field=DecimalField(max_digits=20, decimal_places=2)
)


def _decimal_param(value):
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError):
        return None


def category_stats(queryset):
    """Per-category count, stock value, average price and in-stock count."""
    rows = queryset.order_by().values('category').annotate(
        count=Count('id'),
        totalValue=Sum(STOCK_VALUE),
        averagePrice=Avg('price'),
        inStock=Count('id', filter=Q(quantity__gt=0)),
    ).order_by('category')
    return [
        {
            '_id': row['category'],
            'count': row['count'],
            'totalValue': row['totalValue'] or Decimal('0'),
            'averagePrice': round(row['averagePrice'] or 0, 2),
            'inStock': row['inStock'],
        }
        for row in rows
    ]


class ProductListCreateView(generics.ListCreateAPIView):
    """
    GET: List products.

    Query Parameters:
        - category: Exact category
        - status: Available / Not Available
        - minPrice, maxPrice: Price range
        - inStock: "true" for quantity > 0 only
        - search: Case-insensitive name match
        - sortBy: name, price, quantity, offer, createdAt (default name)
        - sortOrder: asc / desc
        - page, limit: Pagination

    POST: Create a product.
    """
    serializer_class = ProductSerializer
    pagination_class = PageLimitPagination

    def get_queryset(self):
        params = self.request.query_params
        queryset = Product.objects.all()

        category = params.get('category')
        if category:
            queryset = queryset.filter(category=category)

        status_filter = params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        min_price = _decimal_param(params.get('minPrice'))
        if min_price is not None:
            queryset = queryset.filter(price__gte=min_price)

        max_price = _decimal_param(params.get('maxPrice'))
        if max_price is not None:
            queryset = queryset.filter(price__lte=max_price)

        if params.get('inStock', '').lower() == 'true':
            queryset = queryset.filter(quantity__gt=0)

        search = params.get('search', '').strip()
        if search:
            queryset = queryset.filter(name__icontains=search)

        sort_field = SORTABLE_FIELDS.get(params.get('sortBy', 'name'), 'name')
        if params.get('sortOrder', 'asc').lower() == 'desc':
            sort_field = f'-{sort_field}'
        return queryset.order_by(sort_field, 'id')

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        meta = self.paginator.page_meta()

        return Response({
            'products': self.get_serializer(page, many=True).data,
            'currentPage': meta['currentPage'],
            'totalPages': meta['totalPages'],
            'totalProducts': meta['total'],
            'categoryStats': category_stats(Product.objects.all()),
        })

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = serializer.save()
        logger.info(f"Created product #{product.id} {product.name}")
        return Response(
            {'message': 'Product created successfully', 'product': serializer.data},
            status=status.HTTP_201_CREATED
        )


class ProductDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve a product
    PUT: Replace a product
    DELETE: Delete a product
    """
    serializer_class = ProductSerializer
    queryset = Product.objects.all()
    http_method_names = ['get', 'put', 'delete', 'head', 'options']

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound(PRODUCT_NOT_FOUND)

    def update(self, request, *args, **kwargs):
        product = self.get_object()
        serializer = self.get_serializer(product, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({'message': 'Product updated successfully', 'product': serializer.data})

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        data = self.get_serializer(product).data
        product.delete()
        logger.info(f"Deleted product #{data['id']}")
        return Response({'message': 'Product deleted successfully', 'deletedProduct': data})


class ProductStockView(APIView):
    """
    PATCH: Set the stock level of a product. Status follows the new quantity.
    """

    def patch(self, request, pk):
        serializer = ProductStockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = Product.objects.filter(pk=pk).first()
        if product is None:
            raise NotFound(PRODUCT_NOT_FOUND)

        product.quantity = serializer.validated_data['quantity']
        product.save(update_fields=['quantity', 'updated_at'])

        return Response({
            'message': 'Product stock updated successfully',
            'product': ProductSerializer(product).data,
        })


class ProductStatisticsView(APIView):
    """
    GET: Catalog overview and per-category distribution.
    """

    def get(self, request):
        overview = Product.objects.aggregate(
            totalProducts=Count('id'),
            totalValue=Sum(STOCK_VALUE),
            averagePrice=Avg('price'),
            outOfStock=Count('id', filter=Q(quantity=0)),
        )
        overview['totalValue'] = overview['totalValue'] or Decimal('0')
        overview['averagePrice'] = round(overview['averagePrice'] or 0, 2)

        distribution = [
            {'_id': row['_id'], 'count': row['count'], 'totalValue': row['totalValue']}
            for row in category_stats(Product.objects.all())
        ]

        return Response({
            'overview': overview,
            'categoryDistribution': distribution,
        })
