"""
URL routing for order API endpoints.
"""
from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    path('orders/', views.OrderListCreateView.as_view(), name='order-list'),
    path('orders/<uuid:pk>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('orders/<str:pk>/status/', views.OrderStatusView.as_view(), name='order-status'),
    path('orders/<str:username>/', views.CustomerOrderListView.as_view(), name='customer-orders'),
]
