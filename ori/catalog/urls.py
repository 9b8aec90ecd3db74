from django.urls import path
from .views import (
    category_list_create, category_detail,
    product_list_create, product_detail, product_convert_price,
    lot_list_create, lot_detail
)

urlpatterns = [
    # Category endpoints
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', category_detail, name='category-detail'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/convert-price/', product_convert_price, name='product-convert-price'),
    path('products/<int:pk>/', product_detail, name='product-detail'),

    # Lot endpoints
    path('lots/', lot_list_create, name='lot-list-create'),
    path('lots/<int:pk>/', lot_detail, name='lot-detail'),
]
