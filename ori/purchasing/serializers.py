from decimal import Decimal

from rest_framework import serializers
from .models import Supplier, PurchaseOrder, PurchaseOrderItem
from .services import generate_po_folio


class SupplierSerializer(serializers.ModelSerializer):
    purchase_order_count = serializers.SerializerMethodField()

    class Meta:
        model = Supplier
        fields = ['id', 'name', 'rfc', 'rating', 'industry', 'address', 'contact_person', 'email', 'phone',
                  'bank_info', 'notes', 'purchase_order_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_purchase_order_count(self, obj):
        return obj.purchase_orders.count()

    def validate_bank_info(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Expected an object with bank details.")
        return value


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    line_total = serializers.SerializerMethodField()
    pending_qty = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseOrderItem
        fields = ['id', 'product', 'product_name', 'product_sku', 'custom_name', 'qty', 'unit', 'unit_cost',
                  'line_total', 'received_qty', 'pending_qty']

    def get_line_total(self, obj):
        return str(obj.get_line_total().quantize(Decimal('0.01')))

    def get_pending_qty(self, obj):
        return str(obj.get_pending_qty())


class PurchaseOrderSerializer(serializers.ModelSerializer):
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    responsible_name = serializers.CharField(source='responsible.username', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    folio = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = PurchaseOrder
        fields = ['id', 'folio', 'supplier', 'supplier_name', 'status', 'status_display', 'responsible',
                  'responsible_name', 'currency', 'tax_rate', 'expected_delivery_date', 'notes',
                  'subtotal', 'tax', 'total', 'items', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['subtotal', 'tax', 'total', 'created_by', 'created_at', 'updated_at']

    def validate_folio(self, value):
        if value:
            queryset = PurchaseOrder.objects.filter(folio=value)
            if self.instance:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError("A purchase order with this folio already exists.")
        return value

    def create(self, validated_data):
        if not validated_data.get('folio'):
            validated_data['folio'] = generate_po_folio()
        return super().create(validated_data)

    def update(self, instance, validated_data):
        if not validated_data.get('folio', instance.folio):
            validated_data.pop('folio', None)
        return super().update(instance, validated_data)


class ReceiveItemsSerializer(serializers.Serializer):
    location = serializers.IntegerField()
    items = serializers.ListField(child=serializers.DictField(), allow_empty=False)
