import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from .models import Invoice, Expense, Commission
from .serializers import (
    InvoiceSerializer, InvoiceFromOrderSerializer, PaymentSerializer, PaymentCreateSerializer,
    ExpenseSerializer, CommissionSerializer
)
from .services import (
    BillingError, generate_invoice_number, create_invoice_from_order, register_payment,
    get_pending_payments, mark_commission_paid, mark_overdue_invoices, get_billing_summary
)
from ori.core.utils import create_audit_log, paginated_response
from ori.sales.models import SalesOrder

logger = logging.getLogger(__name__)


# Invoice views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def invoice_list_create(request):
    """List invoices or create one manually"""
    if request.method == 'GET':
        invoices = Invoice.objects.select_related('company', 'sales_order')
        status_filter = request.query_params.get('status')
        company_id = request.query_params.get('company')
        search = request.query_params.get('search')
        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')
        if status_filter:
            invoices = invoices.filter(status=status_filter)
        if company_id:
            invoices = invoices.filter(company_id=company_id)
        if search:
            invoices = invoices.filter(Q(number__icontains=search) | Q(company__name__icontains=search))
        if date_from:
            invoices = invoices.filter(issue_date__gte=date_from)
        if date_to:
            invoices = invoices.filter(issue_date__lte=date_to)
        return paginated_response(request, invoices.order_by('-issue_date', '-id'), InvoiceSerializer, default_limit=25)

    serializer = InvoiceSerializer(data=request.data)
    if serializer.is_valid():
        invoice = serializer.save(
            number=serializer.validated_data.get('number') or generate_invoice_number(),
            created_by=request.user,
        )
        create_audit_log(request=request, action='invoice_create', model_name='Invoice', object_id=invoice.id,
                         object_name=invoice.number, object_reference=invoice.number)
        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk):
    invoice = get_object_or_404(Invoice.objects.select_related('company'), pk=pk)
    if request.method == 'GET':
        data = InvoiceSerializer(invoice).data
        data['payments'] = PaymentSerializer(invoice.payments.all(), many=True).data
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = InvoiceSerializer(invoice, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            if not serializer.validated_data.get('number', invoice.number):
                serializer.validated_data.pop('number', None)
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if invoice.payments.exists():
        return Response({'error': 'La factura tiene pagos registrados; cancélala en su lugar.'},
                        status=status.HTTP_400_BAD_REQUEST)
    invoice.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invoice_from_order(request):
    """Create an invoice from a sales order and move the order to Facturada"""
    serializer = InvoiceFromOrderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    order = get_object_or_404(SalesOrder, pk=serializer.validated_data['sales_order'])
    try:
        invoice = create_invoice_from_order(order, user=request.user, due_days=serializer.validated_data['due_days'])
    except BillingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='invoice_create', model_name='Invoice', object_id=invoice.id,
                     object_name=invoice.number, object_reference=order.folio)
    return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def invoice_payments(request, pk):
    """List or register payments for an invoice"""
    invoice = get_object_or_404(Invoice, pk=pk)
    if request.method == 'GET':
        return Response(PaymentSerializer(invoice.payments.all(), many=True).data)

    serializer = PaymentCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        invoice, payment = register_payment(
            invoice, data['amount'], user=request.user, date=data.get('date'),
            method=data['method'], reference=data['reference'],
        )
    except BillingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='payment_add', model_name='Invoice', object_id=invoice.id,
                     object_name=invoice.number, changes={'amount': str(payment.amount), 'status': invoice.status})
    return Response({
        'invoice': InvoiceSerializer(invoice).data,
        'payment': PaymentSerializer(payment).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pending_payments(request):
    rows = get_pending_payments()
    return Response({'results': rows, 'count': len(rows), 'total_balance': sum(row['balance'] for row in rows)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def invoices_mark_overdue(request):
    return Response({'updated': mark_overdue_invoices()})


# Expense views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def expense_list_create(request):
    if request.method == 'GET':
        expenses = Expense.objects.select_related('supplier')
        category = request.query_params.get('category')
        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')
        if category:
            expenses = expenses.filter(category=category)
        if date_from:
            expenses = expenses.filter(date__gte=date_from)
        if date_to:
            expenses = expenses.filter(date__lte=date_to)
        return paginated_response(request, expenses.order_by('-date', '-id'), ExpenseSerializer, default_limit=25)
    serializer = ExpenseSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(created_by=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def expense_detail(request, pk):
    expense = get_object_or_404(Expense, pk=pk)
    if request.method == 'GET':
        return Response(ExpenseSerializer(expense).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    expense.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Commission views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def commission_list(request):
    commissions = Commission.objects.select_related('user', 'sales_order')
    if not request.user.is_staff:
        commissions = commissions.filter(user=request.user)
    user_id = request.query_params.get('user')
    status_filter = request.query_params.get('status')
    if user_id:
        commissions = commissions.filter(user_id=user_id)
    if status_filter:
        commissions = commissions.filter(status=status_filter)
    return paginated_response(request, commissions.order_by('-created_at'), CommissionSerializer, default_limit=25)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def commission_mark_paid(request, pk):
    if not request.user.is_staff:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    commission = get_object_or_404(Commission, pk=pk)
    try:
        mark_commission_paid(commission)
    except BillingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='commission_paid', model_name='Commission', object_id=commission.id,
                     changes={'amount': str(commission.amount)})
    return Response(CommissionSerializer(commission).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def billing_summary(request):
    return Response(get_billing_summary(
        date_from=request.query_params.get('date_from'),
        date_to=request.query_params.get('date_to'),
    ))
