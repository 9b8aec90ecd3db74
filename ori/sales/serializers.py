from decimal import Decimal, InvalidOperation

from rest_framework import serializers
from .models import Quote, Sample, SalesOrder
from .services import COMMISSION_TYPES
from ori.core.models import UNIT_CHOICES

UNITS = [code for code, _ in UNIT_CHOICES]


def _positive_number(value, label):
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise serializers.ValidationError(f"{label} must be a number.")
    if number < 0:
        raise serializers.ValidationError(f"{label} cannot be negative.")
    return number


class QuoteSerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source='company.name', read_only=True)
    prospect_name = serializers.CharField(source='prospect.name', read_only=True)
    salesperson_name = serializers.CharField(source='salesperson.username', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    folio = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = Quote
        fields = ['id', 'folio', 'company', 'company_name', 'prospect', 'prospect_name', 'status', 'status_display',
                  'currency', 'tax_rate', 'valid_until', 'items', 'commissions', 'handling',
                  'freight_rate', 'insurance_enabled', 'insurance_cost',
                  'storage_enabled', 'storage_cost', 'totals', 'change_log', 'notes',
                  'salesperson', 'salesperson_name', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['totals', 'change_log', 'created_by', 'created_at', 'updated_at']

    def validate_folio(self, value):
        if value:
            queryset = Quote.objects.filter(folio=value)
            if self.instance:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError("A quote with this folio already exists.")
        return value

    def validate_items(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of items.")
        for item in value:
            if not isinstance(item, dict):
                raise serializers.ValidationError("Each item must be an object.")
            if not item.get('product') and not item.get('product_name'):
                raise serializers.ValidationError("Each item needs a product.")
            if item.get('unit') and item['unit'] not in UNITS:
                raise serializers.ValidationError(f"Invalid unit: {item['unit']}")
            if _positive_number(item.get('qty', 0), 'qty') == 0:
                raise serializers.ValidationError("Item quantity must be greater than 0.")
            _positive_number(item.get('unit_price', 0), 'unit_price')
        return value

    def validate_commissions(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of commissions.")
        for commission in value:
            if commission.get('type') not in COMMISSION_TYPES:
                raise serializers.ValidationError(f"Invalid commission type: {commission.get('type')}")
            _positive_number(commission.get('value', 0), 'value')
        return value

    def validate_handling(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of handling items.")
        for handling in value:
            _positive_number(handling.get('cost_per_unit', 0), 'cost_per_unit')
        return value

    def validate(self, attrs):
        company = attrs.get('company', getattr(self.instance, 'company', None))
        prospect = attrs.get('prospect', getattr(self.instance, 'prospect', None))
        if not company and not prospect:
            raise serializers.ValidationError("A quote needs a company or a prospect.")
        return attrs


class StatusMoveSerializer(serializers.Serializer):
    status = serializers.CharField()


class SampleSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    company_name = serializers.CharField(source='company.name', read_only=True)
    prospect_name = serializers.CharField(source='prospect.name', read_only=True)

    class Meta:
        model = Sample
        fields = ['id', 'company', 'company_name', 'prospect', 'prospect_name', 'product', 'product_name',
                  'quantity', 'unit', 'status', 'requested_at', 'sent_at', 'feedback', 'owner',
                  'created_at', 'updated_at']
        read_only_fields = ['owner', 'created_at', 'updated_at']

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than 0.")
        return value

    def validate(self, attrs):
        company = attrs.get('company', getattr(self.instance, 'company', None))
        prospect = attrs.get('prospect', getattr(self.instance, 'prospect', None))
        if not company and not prospect:
            raise serializers.ValidationError("A sample needs a company or a prospect.")
        return attrs


class SalesOrderSerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source='company.name', read_only=True)
    quote_folio = serializers.CharField(source='quote.folio', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = SalesOrder
        fields = ['id', 'folio', 'quote', 'quote_folio', 'company', 'company_name', 'salesperson', 'status',
                  'status_display', 'items', 'total', 'currency', 'tax_rate', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
