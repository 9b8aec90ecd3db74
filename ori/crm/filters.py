import django_filters
from django.db.models import Q
from .models import Company, Contact, Prospect


class CompanyFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    stage = django_filters.CharFilter(field_name='stage')
    priority = django_filters.CharFilter(field_name='priority')
    owner = django_filters.NumberFilter(field_name='owner_id')
    industry = django_filters.CharFilter(field_name='industry', lookup_expr='iexact')

    class Meta:
        model = Company
        fields = ['search', 'stage', 'priority', 'owner', 'industry']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(short_name__icontains=value) | Q(rfc__icontains=value)
        )


class ContactFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    company = django_filters.NumberFilter(field_name='company_id')

    class Meta:
        model = Contact
        fields = ['search', 'company']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(email__icontains=value) | Q(phone__icontains=value))


class ProspectFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')
    stage = django_filters.CharFilter(field_name='stage')
    priority = django_filters.CharFilter(field_name='priority')
    owner = django_filters.NumberFilter(field_name='owner_id')
    origin = django_filters.CharFilter(field_name='origin', lookup_expr='iexact')
    min_value = django_filters.NumberFilter(field_name='est_value', lookup_expr='gte')

    class Meta:
        model = Prospect
        fields = ['search', 'stage', 'priority', 'owner', 'origin', 'min_value']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(contact_name__icontains=value) | Q(email__icontains=value)
        )
