from django.urls import path
from .views import (
    carrier_list_create, carrier_detail,
    pricing_rule_list_create, pricing_rule_detail, freight_quote,
    delivery_list_create, delivery_detail, delivery_move, delivery_add_note,
    logistics_dashboard
)

urlpatterns = [
    path('carriers/', carrier_list_create, name='carrier-list-create'),
    path('carriers/<int:pk>/', carrier_detail, name='carrier-detail'),

    path('freight-rules/', pricing_rule_list_create, name='freight-rule-list-create'),
    path('freight-rules/<int:pk>/', pricing_rule_detail, name='freight-rule-detail'),
    path('freight-quote/', freight_quote, name='freight-quote'),

    path('deliveries/', delivery_list_create, name='delivery-list-create'),
    path('deliveries/<int:pk>/', delivery_detail, name='delivery-detail'),
    path('deliveries/<int:pk>/move/', delivery_move, name='delivery-move'),
    path('deliveries/<int:pk>/notes/', delivery_add_note, name='delivery-add-note'),

    path('logistics/dashboard/', logistics_dashboard, name='logistics-dashboard'),
]
