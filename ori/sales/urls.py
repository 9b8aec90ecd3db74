from django.urls import path
from .views import (
    quote_list_create, quote_detail, quote_move, quote_pipeline, quote_convert,
    sample_list_create, sample_detail, sample_move, sample_pipeline,
    order_list_create, order_detail, order_move, order_pipeline, order_delivery_progress
)

urlpatterns = [
    # Quote endpoints
    path('quotes/', quote_list_create, name='quote-list-create'),
    path('quotes/pipeline/', quote_pipeline, name='quote-pipeline'),
    path('quotes/<int:pk>/', quote_detail, name='quote-detail'),
    path('quotes/<int:pk>/move/', quote_move, name='quote-move'),
    path('quotes/<int:pk>/convert/', quote_convert, name='quote-convert'),

    # Sample endpoints
    path('samples/', sample_list_create, name='sample-list-create'),
    path('samples/pipeline/', sample_pipeline, name='sample-pipeline'),
    path('samples/<int:pk>/', sample_detail, name='sample-detail'),
    path('samples/<int:pk>/move/', sample_move, name='sample-move'),

    # Sales order endpoints
    path('sales-orders/', order_list_create, name='sales-order-list-create'),
    path('sales-orders/pipeline/', order_pipeline, name='sales-order-pipeline'),
    path('sales-orders/<int:pk>/', order_detail, name='sales-order-detail'),
    path('sales-orders/<int:pk>/move/', order_move, name='sales-order-move'),
    path('sales-orders/<int:pk>/delivery-progress/', order_delivery_progress, name='sales-order-delivery-progress'),
]
