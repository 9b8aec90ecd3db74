from rest_framework import serializers
from ori.catalog.models import Product, ProductLot
from ori.core.models import UNIT_CHOICES
from .models import Location, LotStock, InventoryMove


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = ['id', 'name', 'code', 'type', 'address', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class LotStockSerializer(serializers.ModelSerializer):
    lot_code = serializers.CharField(source='lot.code', read_only=True)
    product_id = serializers.IntegerField(source='lot.product_id', read_only=True)
    product_name = serializers.CharField(source='lot.product.name', read_only=True)
    location_name = serializers.CharField(source='location.name', read_only=True)

    class Meta:
        model = LotStock
        fields = ['id', 'lot', 'lot_code', 'product_id', 'product_name', 'location', 'location_name', 'quantity', 'updated_at']


class InventoryMoveSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    lot_code = serializers.CharField(source='lot.code', read_only=True)
    from_location_name = serializers.CharField(source='from_location.name', read_only=True)
    to_location_name = serializers.CharField(source='to_location.name', read_only=True)
    user_name = serializers.CharField(source='user.username', read_only=True)

    class Meta:
        model = InventoryMove
        fields = ['id', 'type', 'product', 'product_name', 'lot', 'lot_code', 'qty', 'unit',
                  'from_location', 'from_location_name', 'to_location', 'to_location_name',
                  'reference', 'note', 'user', 'user_name', 'created_at']
        read_only_fields = fields


class InventoryMoveCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=InventoryMove.MOVE_TYPE_CHOICES)
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    lot = serializers.PrimaryKeyRelatedField(queryset=ProductLot.objects.all())
    qty = serializers.DecimalField(max_digits=14, decimal_places=3)
    unit = serializers.ChoiceField(choices=UNIT_CHOICES, required=False)
    from_location = serializers.PrimaryKeyRelatedField(queryset=Location.objects.all(), required=False, allow_null=True)
    to_location = serializers.PrimaryKeyRelatedField(queryset=Location.objects.all(), required=False, allow_null=True)
    reference = serializers.CharField(required=False, allow_blank=True, max_length=200)
    note = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs['lot'].product_id != attrs['product'].id:
            raise serializers.ValidationError({'lot': 'El lote no pertenece al producto.'})
        return attrs
