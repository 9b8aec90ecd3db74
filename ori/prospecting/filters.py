import django_filters
from django.db.models import Q
from .models import Candidate


class CandidateFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    status = django_filters.CharFilter(field_name='status')
    state = django_filters.CharFilter(field_name='state', lookup_expr='iexact')
    city = django_filters.CharFilter(field_name='city', lookup_expr='iexact')
    brand = django_filters.NumberFilter(field_name='brand_id')
    import_history = django_filters.NumberFilter(field_name='import_history_id')
    assigned_to = django_filters.NumberFilter(field_name='assigned_to_id')
    min_rating = django_filters.NumberFilter(field_name='average_rating', lookup_expr='gte')

    class Meta:
        model = Candidate
        fields = ['search', 'status', 'state', 'city', 'brand', 'import_history', 'assigned_to', 'min_rating']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(address__icontains=value) | Q(email__icontains=value)
            | Q(website__icontains=value)
        )
