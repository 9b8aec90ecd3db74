from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count
from django.shortcuts import get_object_or_404
from .models import Brand, ImportSource, ImportHistory, Candidate
from .serializers import (
    BrandSerializer, ImportSourceSerializer, ImportHistorySerializer, CandidateSerializer,
    CandidateMapPointSerializer, ImportRequestSerializer, RejectSerializer, CandidateStatusSerializer
)
from .filters import CandidateFilter
from .services import (
    CandidateImportError, CandidateError, import_candidates, fetch_dataset, find_duplicates,
    approve_candidate, reject_candidate, set_candidate_status, record_profile_view
)
from ori.core.utils import create_audit_log, paginated_response
from ori.crm.serializers import ProspectSerializer, ActivityLogSerializer


# Brand views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def brand_list_create(request):
    if request.method == 'GET':
        return Response(BrandSerializer(Brand.objects.all(), many=True).data)
    serializer = BrandSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def brand_detail(request, pk):
    brand = get_object_or_404(Brand, pk=pk)
    if request.method == 'GET':
        return Response(BrandSerializer(brand).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = BrandSerializer(brand, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    brand.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Import source views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def source_list_create(request):
    if request.method == 'GET':
        return Response(ImportSourceSerializer(ImportSource.objects.all(), many=True).data)
    serializer = ImportSourceSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def source_detail(request, pk):
    source = get_object_or_404(ImportSource, pk=pk)
    if request.method == 'GET':
        return Response(ImportSourceSerializer(source).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ImportSourceSerializer(source, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    source.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Import views
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def candidate_import(request):
    """
    Import a places dataset from a URL.

    Body: url, search_terms, location, criteria (brand, language, ...),
    import_duplicates (placeIds to refresh), brand_associations (placeId -> brand).
    """
    serializer = ImportRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        history = import_candidates(
            data['url'],
            request.user,
            search_terms=data['search_terms'],
            location=data['location'],
            criteria=data['criteria'],
            import_duplicates=data['import_duplicates'],
            brand_associations=data['brand_associations'],
            source=data.get('source'),
        )
    except CandidateImportError as e:
        history = ImportHistory.objects.filter(imported_by=request.user).order_by('-created_at', '-id').first()
        return Response({
            'error': str(e),
            'history': ImportHistorySerializer(history).data if history else None,
        }, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='candidate_import',
        model_name='ImportHistory',
        object_id=history.id,
        object_name=history.source_url,
        changes={'new_candidates': history.new_candidates, 'duplicates_skipped': history.duplicates_skipped},
    )
    return Response(ImportHistorySerializer(history).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def candidate_check_duplicates(request):
    """Preview which places of a dataset already exist before importing it"""
    url = request.data.get('url')
    if not url:
        return Response({'error': 'url is required'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        places = fetch_dataset(url)
    except CandidateImportError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    duplicates = find_duplicates(places)
    return Response({'total': len(places), 'duplicates': duplicates, 'duplicate_count': len(duplicates)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def import_history_list(request):
    history = ImportHistory.objects.select_related('source', 'imported_by')
    status_filter = request.query_params.get('status')
    if status_filter:
        history = history.filter(status=status_filter)
    return paginated_response(request, history, ImportHistorySerializer, default_limit=20)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def import_history_detail(request, pk):
    history = get_object_or_404(ImportHistory, pk=pk)
    data = ImportHistorySerializer(history).data
    data['status_breakdown'] = list(
        history.candidates.order_by().values('status').annotate(count=Count('id'))
    )
    return Response(data)


# Candidate views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def candidate_list_create(request):
    if request.method == 'GET':
        queryset = Candidate.objects.select_related('brand', 'assigned_to')
        queryset = CandidateFilter(request.query_params, queryset=queryset).qs
        return paginated_response(request, queryset, CandidateSerializer, default_limit=25)
    serializer = CandidateSerializer(data=request.data)
    if serializer.is_valid():
        candidate = serializer.save(imported_by=request.user)
        return Response(CandidateSerializer(candidate).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def candidate_detail(request, pk):
    """Retrieving a candidate counts as a profile view (once per user)"""
    candidate = get_object_or_404(Candidate.objects.select_related('brand', 'assigned_to'), pk=pk)
    if request.method == 'GET':
        record_profile_view(candidate, request.user)
        data = CandidateSerializer(candidate).data
        data['activities'] = ActivityLogSerializer(candidate.activities.select_related('user')[:50], many=True).data
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CandidateSerializer(candidate, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='delete', model_name='Candidate', object_id=candidate.id,
                     object_name=candidate.name)
    candidate.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def candidate_approve(request, pk):
    candidate = get_object_or_404(Candidate, pk=pk)
    try:
        prospect = approve_candidate(candidate, request.user)
    except CandidateError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='candidate_approve', model_name='Candidate', object_id=candidate.id,
                     object_name=candidate.name, changes={'status': {'new': 'aprobado'}, 'prospect': prospect.id})
    return Response({
        'candidate': CandidateSerializer(candidate).data,
        'prospect': ProspectSerializer(prospect).data,
    }, status=status.HTTP_201_CREATED)


def _reject(request, pk, blacklist):
    candidate = get_object_or_404(Candidate, pk=pk)
    serializer = RejectSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    old_status = candidate.status
    try:
        reject_candidate(candidate, request.user, serializer.validated_data['reason'],
                         notes=serializer.validated_data['notes'], blacklist=blacklist)
    except CandidateError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='candidate_reject', model_name='Candidate', object_id=candidate.id,
                     object_name=candidate.name, changes={'status': {'old': old_status, 'new': candidate.status}})
    return Response(CandidateSerializer(candidate).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def candidate_reject(request, pk):
    return _reject(request, pk, blacklist=False)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def candidate_blacklist(request, pk):
    return _reject(request, pk, blacklist=True)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def candidate_set_status(request, pk):
    candidate = get_object_or_404(Candidate, pk=pk)
    serializer = CandidateStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        set_candidate_status(candidate, serializer.validated_data['status'], request.user)
    except CandidateError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(CandidateSerializer(candidate).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def candidate_map(request):
    """Geolocated candidates for the map view"""
    queryset = Candidate.objects.filter(lat__isnull=False, lng__isnull=False)
    for param in ('status', 'state', 'brand'):
        value = request.query_params.get(param)
        if value:
            queryset = queryset.filter(**{f"{param}_id" if param == 'brand' else param: value})
    return Response(CandidateMapPointSerializer(queryset[:2000], many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def candidate_stats(request):
    counts = {row['status']: row['count'] for row in Candidate.objects.order_by().values('status').annotate(count=Count('id'))}
    by_state = list(
        Candidate.objects.exclude(state='').order_by().values('state').annotate(count=Count('id')).order_by('-count')[:10]
    )
    return Response({
        'by_status': [
            {'status': code, 'label': label, 'count': counts.get(code, 0)} for code, label in Candidate.STATUS_CHOICES
        ],
        'total': sum(counts.values()),
        'top_states': by_state,
    })
