from rest_framework import serializers
from .models import Category, Product, ProductLot
from .utils import generate_sku, get_stock_by_location


class CategorySerializer(serializers.ModelSerializer):
    parent_name = serializers.CharField(source='parent.name', read_only=True)
    product_count = serializers.IntegerField(source='products.count', read_only=True)

    class Meta:
        model = Category
        fields = ['id', 'name', 'code', 'parent', 'parent_name', 'description', 'is_active',
                  'product_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_code(self, value):
        code = value.strip().upper()
        if not code.isalnum():
            raise serializers.ValidationError("Code must be alphanumeric.")
        return code

    def validate(self, attrs):
        parent = attrs.get('parent')
        if parent and self.instance and parent.pk == self.instance.pk:
            raise serializers.ValidationError({'parent': 'A category cannot be its own parent.'})
        return attrs


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True)
    sku = serializers.CharField(max_length=50, required=False, allow_blank=True)

    class Meta:
        model = Product
        fields = ['id', 'sku', 'name', 'category', 'category_name', 'description', 'unit_default',
                  'currency', 'min_price', 'reorder_point', 'max_stock', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_sku(self, value):
        value = (value or '').strip().upper()
        if value:
            queryset = Product.objects.filter(sku=value)
            if self.instance:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError("A product with this SKU already exists.")
        return value

    def validate(self, attrs):
        reorder_point = attrs.get('reorder_point', getattr(self.instance, 'reorder_point', None))
        max_stock = attrs.get('max_stock', getattr(self.instance, 'max_stock', None))
        if max_stock is not None and reorder_point is not None and max_stock < reorder_point:
            raise serializers.ValidationError({'max_stock': 'Max stock must be greater than the reorder point.'})
        return attrs

    def create(self, validated_data):
        if not validated_data.get('sku'):
            validated_data['sku'] = generate_sku(validated_data['category'])
        return super().create(validated_data)

    def update(self, instance, validated_data):
        if 'sku' in validated_data and not validated_data['sku']:
            validated_data.pop('sku')
        return super().update(instance, validated_data)


class ProductDetailSerializer(ProductSerializer):
    total_stock = serializers.SerializerMethodField()
    stock_by_location = serializers.SerializerMethodField()

    class Meta(ProductSerializer.Meta):
        fields = ProductSerializer.Meta.fields + ['total_stock', 'stock_by_location']

    def get_total_stock(self, obj):
        return str(obj.get_total_stock())

    def get_stock_by_location(self, obj):
        return [
            {**row, 'quantity': str(row['quantity'])}
            for row in get_stock_by_location(obj)
        ]


class ProductLotSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    total_stock = serializers.SerializerMethodField()

    class Meta:
        model = ProductLot
        fields = ['id', 'code', 'product', 'product_name', 'product_sku', 'supplier', 'supplier_name',
                  'purchase_order', 'unit_cost', 'min_price', 'reception_date', 'initial_qty', 'unit',
                  'status', 'notes', 'total_stock', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_total_stock(self, obj):
        return str(obj.get_total_stock())
