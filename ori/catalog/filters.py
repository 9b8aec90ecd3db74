import django_filters
from django.db.models import Q
from .models import Product, ProductLot


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.NumberFilter(field_name='category_id', lookup_expr='exact')
    active = django_filters.CharFilter(method='filter_active', label='Active')
    currency = django_filters.CharFilter(field_name='currency')
    unit = django_filters.CharFilter(field_name='unit_default')

    class Meta:
        model = Product
        fields = ['search', 'category', 'active', 'currency', 'unit']

    def filter_search(self, queryset, name, value):
        """Match every word against name, SKU, description or category"""
        if not value:
            return queryset
        for word in value.split():
            queryset = queryset.filter(
                Q(name__icontains=word) |
                Q(sku__icontains=word) |
                Q(description__icontains=word) |
                Q(category__name__icontains=word)
            )
        return queryset

    def filter_active(self, queryset, name, value):
        """Filter by active status (handles string 'true'/'false')"""
        if value is None or value == '':
            return queryset
        if isinstance(value, str):
            is_active = value.lower() == 'true'
        else:
            is_active = bool(value)
        return queryset.filter(is_active=is_active)


class ProductLotFilter(django_filters.FilterSet):
    product = django_filters.NumberFilter(field_name='product_id')
    supplier = django_filters.NumberFilter(field_name='supplier_id')
    status = django_filters.CharFilter(field_name='status')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = ProductLot
        fields = ['product', 'supplier', 'status', 'search']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(Q(code__icontains=value) | Q(product__name__icontains=value) | Q(product__sku__icontains=value))
