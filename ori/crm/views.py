from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.utils import timezone
from .models import Company, Contact, Prospect, ActivityLog, Note, SupportTicket
from .serializers import (
    CompanySerializer, ContactSerializer, ProspectSerializer, StageMoveSerializer,
    ActivityLogSerializer, NoteSerializer, SupportTicketSerializer
)
from .filters import CompanyFilter, ContactFilter, ProspectFilter
from .services import (
    PipelineError, move_prospect_stage, move_company_stage, build_pipeline_board,
    compute_health_score, convert_prospect_to_company
)
from ori.core.utils import create_audit_log, paginated_response, scope_queryset


def _save_detail(instance, serializer_class, request):
    serializer = serializer_class(instance, data=request.data, partial=request.method == 'PATCH')
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Company views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def company_list_create(request):
    """List companies visible to the user or create a new company"""
    if request.method == 'GET':
        queryset = scope_queryset(request.user, Company.objects.select_related('owner', 'primary_contact'))
        queryset = CompanyFilter(request.query_params, queryset=queryset).qs
        return paginated_response(request, queryset.order_by('name'), CompanySerializer, default_limit=25)
    else:  # POST
        serializer = CompanySerializer(data=request.data)
        if serializer.is_valid():
            company = serializer.save(owner=serializer.validated_data.get('owner') or request.user)
            create_audit_log(request=request, action='create', model_name='Company', object_id=company.id,
                             object_name=company.name, object_reference=company.rfc or None)
            return Response(CompanySerializer(company).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def company_detail(request, pk):
    """Retrieve (with health score), update or delete a company"""
    company = get_object_or_404(scope_queryset(request.user, Company.objects.all()), pk=pk)

    if request.method == 'GET':
        data = CompanySerializer(company).data
        data['contacts'] = ContactSerializer(company.contacts.all(), many=True).data
        data['health'] = compute_health_score(company)
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        return _save_detail(company, CompanySerializer, request)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Company', object_id=company.id,
                         object_name=company.name)
        company.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def company_move(request, pk):
    """Kanban move for the companies pipeline"""
    company = get_object_or_404(scope_queryset(request.user, Company.objects.all()), pk=pk)
    old_stage = company.stage
    try:
        moved = move_company_stage(company, request.data.get('stage'), user=request.user)
    except PipelineError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if moved:
        create_audit_log(request=request, action='status_change', model_name='Company', object_id=company.id,
                         object_name=company.name, changes={'stage': {'old': old_stage, 'new': company.stage}})
    return Response(CompanySerializer(company).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def company_pipeline(request):
    queryset = scope_queryset(request.user, Company.objects.all())
    columns = build_pipeline_board(queryset, Company.STAGE_CHOICES)
    for column in columns:
        items = queryset.filter(stage=column['stage']).order_by('name')[:100]
        column['items'] = CompanySerializer(items, many=True).data
    return Response({'columns': columns})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def company_health(request, pk):
    company = get_object_or_404(scope_queryset(request.user, Company.objects.all()), pk=pk)
    return Response(compute_health_score(company))


# Contact views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def contact_list_create(request):
    if request.method == 'GET':
        queryset = ContactFilter(request.query_params, queryset=Contact.objects.select_related('company')).qs
        return paginated_response(request, queryset.order_by('name'), ContactSerializer, default_limit=25)
    serializer = ContactSerializer(data=request.data)
    if serializer.is_valid():
        contact = serializer.save(owner=request.user)
        if contact.is_primary and contact.company_id:
            Contact.objects.filter(company_id=contact.company_id).exclude(pk=contact.pk).update(is_primary=False)
            Company.objects.filter(pk=contact.company_id).update(primary_contact=contact)
        return Response(ContactSerializer(contact).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def contact_detail(request, pk):
    contact = get_object_or_404(Contact, pk=pk)
    if request.method == 'GET':
        data = ContactSerializer(contact).data
        data['activities'] = ActivityLogSerializer(contact.activities.all()[:50], many=True).data
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        return _save_detail(contact, ContactSerializer, request)
    contact.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Prospect views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def prospect_list_create(request):
    """List prospects visible to the user or create a new prospect"""
    if request.method == 'GET':
        queryset = scope_queryset(request.user, Prospect.objects.select_related('owner', 'company'))
        queryset = ProspectFilter(request.query_params, queryset=queryset).qs
        return paginated_response(request, queryset.order_by('-created_at'), ProspectSerializer, default_limit=25)
    serializer = ProspectSerializer(data=request.data)
    if serializer.is_valid():
        prospect = serializer.save(
            created_by=request.user,
            owner=serializer.validated_data.get('owner') or request.user,
        )
        create_audit_log(request=request, action='create', model_name='Prospect', object_id=prospect.id,
                         object_name=prospect.name)
        return Response(ProspectSerializer(prospect).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def prospect_detail(request, pk):
    prospect = get_object_or_404(scope_queryset(request.user, Prospect.objects.all()), pk=pk)
    if request.method == 'GET':
        data = ProspectSerializer(prospect).data
        data['activities'] = ActivityLogSerializer(prospect.activities.all()[:50], many=True).data
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        data = request.data.copy()
        # stage changes go through the move endpoint so they are logged
        data.pop('stage', None)
        serializer = ProspectSerializer(prospect, data=data, partial=True if request.method == 'PATCH' else False)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='delete', model_name='Prospect', object_id=prospect.id,
                     object_name=prospect.name)
    prospect.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def prospect_move(request, pk):
    """Kanban move for the prospects pipeline"""
    prospect = get_object_or_404(scope_queryset(request.user, Prospect.objects.all()), pk=pk)
    serializer = StageMoveSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_stage = prospect.stage
    data = serializer.validated_data
    try:
        moved = move_prospect_stage(
            prospect,
            data['stage'],
            user=request.user,
            lost_reason=data.get('lost_reason', ''),
            lost_notes=data.get('lost_notes', ''),
            paused_reason=data.get('paused_reason', ''),
            paused_until=data.get('paused_until'),
        )
    except PipelineError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    if moved:
        create_audit_log(request=request, action='status_change', model_name='Prospect', object_id=prospect.id,
                         object_name=prospect.name, changes={'stage': {'old': old_stage, 'new': prospect.stage}})
    return Response(ProspectSerializer(prospect).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def prospect_pipeline(request):
    queryset = scope_queryset(request.user, Prospect.objects.select_related('owner', 'company'))
    queryset = ProspectFilter(request.query_params, queryset=queryset).qs
    columns = build_pipeline_board(queryset, Prospect.STAGE_CHOICES, value_field='est_value')
    for column in columns:
        items = queryset.filter(stage=column['stage']).order_by('-updated_at')[:100]
        column['items'] = ProspectSerializer(items, many=True).data
    return Response({'columns': columns})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def prospect_convert(request, pk):
    """Convert a prospect into an active client company"""
    prospect = get_object_or_404(scope_queryset(request.user, Prospect.objects.all()), pk=pk)
    try:
        company = convert_prospect_to_company(prospect, user=request.user)
    except PipelineError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='create', model_name='Company', object_id=company.id,
                     object_name=company.name, changes={'from_prospect': prospect.id})
    return Response(CompanySerializer(company).data, status=status.HTTP_201_CREATED)


# Activity views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def activity_list_create(request):
    if request.method == 'GET':
        queryset = ActivityLog.objects.select_related('user')
        for field in ('company', 'prospect', 'contact', 'candidate'):
            value = request.query_params.get(field)
            if value:
                queryset = queryset.filter(**{f'{field}_id': value})
        type_filter = request.query_params.get('type')
        if type_filter:
            queryset = queryset.filter(type=type_filter)
        return paginated_response(request, queryset.order_by('-created_at', '-id'), ActivityLogSerializer, default_limit=50)
    serializer = ActivityLogSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Note views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def note_list_create(request):
    if request.method == 'GET':
        entity_type = request.query_params.get('entity_type')
        entity_id = request.query_params.get('entity_id')
        if not entity_type or not entity_id:
            return Response({'error': 'entity_type and entity_id are required'}, status=status.HTTP_400_BAD_REQUEST)
        notes = Note.objects.filter(entity_type=entity_type, entity_id=entity_id).select_related('user')
        return Response(NoteSerializer(notes, many=True).data)
    serializer = NoteSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def note_detail(request, pk):
    note = get_object_or_404(Note, pk=pk)
    if request.method == 'GET':
        return Response(NoteSerializer(note).data)
    if note.user_id != request.user.id and not request.user.is_staff:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    if request.method in ('PUT', 'PATCH'):
        return _save_detail(note, NoteSerializer, request)
    note.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Support ticket views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def ticket_list_create(request):
    if request.method == 'GET':
        queryset = SupportTicket.objects.select_related('company')
        company_id = request.query_params.get('company')
        status_filter = request.query_params.get('status')
        if company_id:
            queryset = queryset.filter(company_id=company_id)
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return paginated_response(request, queryset.order_by('-created_at'), SupportTicketSerializer)
    serializer = SupportTicketSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(created_by=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def ticket_detail(request, pk):
    ticket = get_object_or_404(SupportTicket, pk=pk)
    if request.method == 'GET':
        return Response(SupportTicketSerializer(ticket).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupportTicketSerializer(ticket, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            ticket = serializer.save()
            if ticket.status == 'cerrado' and ticket.closed_at is None:
                ticket.closed_at = timezone.now()
                ticket.save(update_fields=['closed_at'])
            elif ticket.status != 'cerrado' and ticket.closed_at is not None:
                ticket.closed_at = None
                ticket.save(update_fields=['closed_at'])
            return Response(SupportTicketSerializer(ticket).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    ticket.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
