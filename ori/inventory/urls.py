from django.urls import path
from .views import (
    location_list_create, location_detail,
    stock_list, stock_summary, inventory_alerts,
    move_list_create, move_detail
)

urlpatterns = [
    # Location endpoints
    path('locations/', location_list_create, name='location-list-create'),
    path('locations/<int:pk>/', location_detail, name='location-detail'),

    # Stock endpoints
    path('stock/', stock_list, name='stock-list'),
    path('stock/summary/', stock_summary, name='stock-summary'),
    path('stock/alerts/', inventory_alerts, name='stock-alerts'),

    # Inventory move endpoints
    path('inventory-moves/', move_list_create, name='inventory-move-list-create'),
    path('inventory-moves/<int:pk>/', move_detail, name='inventory-move-detail'),
]
