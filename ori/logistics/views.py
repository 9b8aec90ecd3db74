from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone
from .models import Carrier, FreightPricingRule, Delivery
from .serializers import CarrierSerializer, FreightPricingRuleSerializer, DeliverySerializer, FreightQuoteSerializer
from .services import LogisticsError, next_delivery_number, quote_freight, move_delivery_status, get_logistics_dashboard
from ori.core.utils import create_audit_log, paginated_response


# Carrier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def carrier_list_create(request):
    if request.method == 'GET':
        carriers = Carrier.objects.all()
        if request.query_params.get('active') == 'true':
            carriers = carriers.filter(is_active=True)
        return Response(CarrierSerializer(carriers, many=True).data)
    serializer = CarrierSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def carrier_detail(request, pk):
    carrier = get_object_or_404(Carrier, pk=pk)
    if request.method == 'GET':
        return Response(CarrierSerializer(carrier).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CarrierSerializer(carrier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if carrier.deliveries.exists():
        carrier.is_active = False
        carrier.save(update_fields=['is_active'])
        return Response({'message': 'Carrier has deliveries; it was deactivated instead.'})
    carrier.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Freight pricing views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def pricing_rule_list_create(request):
    if request.method == 'GET':
        rules = FreightPricingRule.objects.select_related('carrier')
        for field in ('origin', 'destination'):
            value = request.query_params.get(field)
            if value:
                rules = rules.filter(**{f'{field}__icontains': value})
        carrier_id = request.query_params.get('carrier')
        if carrier_id:
            rules = rules.filter(carrier_id=carrier_id)
        return Response(FreightPricingRuleSerializer(rules, many=True).data)
    serializer = FreightPricingRuleSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def pricing_rule_detail(request, pk):
    rule = get_object_or_404(FreightPricingRule, pk=pk)
    if request.method == 'GET':
        return Response(FreightPricingRuleSerializer(rule).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = FreightPricingRuleSerializer(rule, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    rule.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def freight_quote(request):
    """Price a shipment from the matching active pricing rule"""
    serializer = FreightQuoteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    result = quote_freight(data['origin'], data['destination'], data['weight_kg'])
    if result is None:
        return Response({'error': 'No hay una tarifa activa para esa ruta y peso.'}, status=status.HTTP_404_NOT_FOUND)
    return Response(result)


# Delivery views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def delivery_list_create(request):
    if request.method == 'GET':
        deliveries = Delivery.objects.select_related('carrier', 'company', 'sales_order')
        for field in ('status', 'carrier', 'sales_order', 'company'):
            value = request.query_params.get(field)
            if value:
                deliveries = deliveries.filter(**{field: value})
        date_from = request.query_params.get('date_from')
        date_to = request.query_params.get('date_to')
        if date_from:
            deliveries = deliveries.filter(scheduled_date__gte=date_from)
        if date_to:
            deliveries = deliveries.filter(scheduled_date__lte=date_to)
        return paginated_response(request, deliveries.order_by('scheduled_date', 'id'), DeliverySerializer,
                                  default_limit=50)

    serializer = DeliverySerializer(data=request.data)
    if serializer.is_valid():
        order = serializer.validated_data['sales_order']
        if order.status in ('cancelada', 'facturada'):
            return Response({'error': f'La orden {order.folio} no admite nuevas entregas.'},
                            status=status.HTTP_400_BAD_REQUEST)
        delivery = serializer.save(
            delivery_number=serializer.validated_data.get('delivery_number') or next_delivery_number(order),
            company=serializer.validated_data.get('company') or order.company,
            created_by=request.user,
        )
        create_audit_log(request=request, action='create', model_name='Delivery', object_id=delivery.id,
                         object_name=delivery.delivery_number, object_reference=order.folio)
        return Response(DeliverySerializer(delivery).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def delivery_detail(request, pk):
    delivery = get_object_or_404(Delivery, pk=pk)
    if request.method == 'GET':
        return Response(DeliverySerializer(delivery).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = DeliverySerializer(delivery, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if delivery.status == 'entregada':
        return Response({'error': 'No se puede eliminar una entrega completada.'}, status=status.HTTP_400_BAD_REQUEST)
    delivery.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def delivery_move(request, pk):
    delivery = get_object_or_404(Delivery, pk=pk)
    old_status = delivery.status
    try:
        moved = move_delivery_status(delivery, request.data.get('status'), user=request.user)
    except LogisticsError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if moved:
        create_audit_log(request=request, action='status_change', model_name='Delivery', object_id=delivery.id,
                         object_name=delivery.delivery_number,
                         changes={'status': {'old': old_status, 'new': delivery.status}})
    return Response(DeliverySerializer(delivery).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def delivery_add_note(request, pk):
    delivery = get_object_or_404(Delivery, pk=pk)
    text = (request.data.get('text') or '').strip()
    if not text:
        return Response({'error': 'text is required'}, status=status.HTTP_400_BAD_REQUEST)
    delivery.notes = list(delivery.notes or []) + [{
        'text': text,
        'user': request.user.id,
        'created_at': timezone.now().isoformat(),
    }]
    delivery.save(update_fields=['notes', 'updated_at'])
    return Response(DeliverySerializer(delivery).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def logistics_dashboard(request):
    return Response(get_logistics_dashboard())
