from rest_framework import serializers
from .models import Carrier, FreightPricingRule, Delivery


class CarrierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Carrier
        fields = ['id', 'name', 'contact_name', 'phone', 'email', 'rating', 'service_types',
                  'tracking_url_template', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_service_types(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of service types.")
        invalid = [v for v in value if v not in Carrier.SERVICE_TYPES]
        if invalid:
            raise serializers.ValidationError(f"Invalid service types: {', '.join(invalid)}")
        return value

    def validate_tracking_url_template(self, value):
        if value and '{tracking}' not in value:
            raise serializers.ValidationError("The template must contain the {tracking} placeholder.")
        return value


class FreightPricingRuleSerializer(serializers.ModelSerializer):
    carrier_name = serializers.CharField(source='carrier.name', read_only=True)

    class Meta:
        model = FreightPricingRule
        fields = ['id', 'carrier', 'carrier_name', 'origin', 'destination', 'min_weight_kg', 'max_weight_kg',
                  'price_per_kg', 'flat_rate', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        origin = attrs.get('origin', getattr(self.instance, 'origin', ''))
        destination = attrs.get('destination', getattr(self.instance, 'destination', ''))
        if not origin or not destination:
            raise serializers.ValidationError("Origin and destination are required.")
        min_weight = attrs.get('min_weight_kg', getattr(self.instance, 'min_weight_kg', 0))
        max_weight = attrs.get('max_weight_kg', getattr(self.instance, 'max_weight_kg', None))
        if max_weight is None or max_weight <= min_weight:
            raise serializers.ValidationError({'max_weight_kg': 'Max weight must be greater than min weight.'})
        return attrs


class DeliverySerializer(serializers.ModelSerializer):
    carrier_name = serializers.CharField(source='carrier.name', read_only=True)
    company_name = serializers.CharField(source='company.name', read_only=True)
    sales_order_folio = serializers.CharField(source='sales_order.folio', read_only=True)
    tracking_url = serializers.CharField(read_only=True)
    delivery_number = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = Delivery
        fields = ['id', 'delivery_number', 'sales_order', 'sales_order_folio', 'company', 'company_name',
                  'carrier', 'carrier_name', 'destination', 'status', 'scheduled_date', 'delivered_at',
                  'tracking_number', 'tracking_url', 'qty', 'items', 'notes', 'created_by',
                  'created_at', 'updated_at']
        read_only_fields = ['status', 'delivered_at', 'created_by', 'created_at', 'updated_at']

    def validate_qty(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than 0.")
        return value


class FreightQuoteSerializer(serializers.Serializer):
    origin = serializers.CharField()
    destination = serializers.CharField()
    weight_kg = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
