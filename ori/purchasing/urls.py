from django.urls import path
from .views import (
    supplier_list_create, supplier_detail,
    purchase_order_list_create, purchase_order_detail, purchase_order_move,
    purchase_order_pipeline, purchase_order_receive
)

urlpatterns = [
    # Supplier endpoints
    path('suppliers/', supplier_list_create, name='supplier-list-create'),
    path('suppliers/<int:pk>/', supplier_detail, name='supplier-detail'),

    # Purchase order endpoints
    path('purchase-orders/', purchase_order_list_create, name='purchase-order-list-create'),
    path('purchase-orders/pipeline/', purchase_order_pipeline, name='purchase-order-pipeline'),
    path('purchase-orders/<int:pk>/', purchase_order_detail, name='purchase-order-detail'),
    path('purchase-orders/<int:pk>/move/', purchase_order_move, name='purchase-order-move'),
    path('purchase-orders/<int:pk>/receive/', purchase_order_receive, name='purchase-order-receive'),
]
