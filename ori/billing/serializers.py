from rest_framework import serializers
from .models import Invoice, Payment, Expense, Commission


class PaymentSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source='invoice.number', read_only=True)

    class Meta:
        model = Payment
        fields = ['id', 'invoice', 'invoice_number', 'amount', 'date', 'method', 'reference', 'created_by', 'created_at']
        read_only_fields = ['invoice', 'created_by', 'created_at']


class InvoiceSerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source='company.name', read_only=True)
    sales_order_folio = serializers.CharField(source='sales_order.folio', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    balance = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    is_overdue = serializers.SerializerMethodField()
    number = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = Invoice
        fields = ['id', 'number', 'sales_order', 'sales_order_folio', 'company', 'company_name', 'status',
                  'status_display', 'issue_date', 'due_date', 'items', 'subtotal', 'tax', 'total', 'paid_amount',
                  'balance', 'is_overdue', 'currency', 'notes', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['paid_amount', 'created_by', 'created_at', 'updated_at']

    def get_is_overdue(self, obj):
        return obj.is_overdue()

    def validate_number(self, value):
        if value:
            queryset = Invoice.objects.filter(number=value)
            if self.instance:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError("An invoice with this number already exists.")
        return value

    def validate(self, attrs):
        issue_date = attrs.get('issue_date', getattr(self.instance, 'issue_date', None))
        due_date = attrs.get('due_date', getattr(self.instance, 'due_date', None))
        if issue_date and due_date and due_date < issue_date:
            raise serializers.ValidationError({'due_date': 'Due date cannot be before the issue date.'})
        subtotal = attrs.get('subtotal', getattr(self.instance, 'subtotal', None))
        tax = attrs.get('tax', getattr(self.instance, 'tax', None))
        if 'total' not in attrs and subtotal is not None and tax is not None and ('subtotal' in attrs or 'tax' in attrs):
            attrs['total'] = subtotal + tax
        return attrs


class InvoiceFromOrderSerializer(serializers.Serializer):
    sales_order = serializers.IntegerField()
    due_days = serializers.IntegerField(required=False, min_value=0, default=30)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    date = serializers.DateField(required=False)
    method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES, default='transferencia')
    reference = serializers.CharField(required=False, allow_blank=True, default='')


class ExpenseSerializer(serializers.ModelSerializer):
    category_display = serializers.CharField(source='get_category_display', read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)

    class Meta:
        model = Expense
        fields = ['id', 'description', 'category', 'category_display', 'amount', 'date', 'supplier', 'supplier_name',
                  'purchase_order', 'created_by', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than 0.")
        return value


class CommissionSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.username', read_only=True)
    sales_order_folio = serializers.CharField(source='sales_order.folio', read_only=True)

    class Meta:
        model = Commission
        fields = ['id', 'sales_order', 'sales_order_folio', 'quote', 'user', 'user_name', 'type', 'amount',
                  'status', 'paid_at', 'created_at']
        read_only_fields = ['status', 'paid_at', 'created_at']
