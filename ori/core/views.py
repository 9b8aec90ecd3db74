from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from .models import Role, Team, Invitation, Setting, AuditLog, Notification
from .serializers import (
    UserSerializer, UserCreateSerializer, RoleSerializer, TeamSerializer,
    InvitationSerializer, InvitationAcceptSerializer,
    SettingSerializer, AuditLogSerializer, NotificationSerializer
)
from .utils import create_audit_log, paginated_response

User = get_user_model()

SEARCH_LIMIT = 20


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role.name if user.role_id else None
        token['data_scope'] = user.data_scope
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that rejects tokens of deleted users"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def _issue_tokens(user):
    token = CustomTokenObtainPairSerializer.get_token(user)
    return {
        'user': UserSerializer(user).data,
        'access': str(token.access_token),
        'refresh': str(token),
    }


def _detail_update(instance, serializer_class, request):
    partial = request.method == 'PATCH'
    serializer = serializer_class(instance, data=request.data, partial=partial)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        return Response(_issue_tokens(user), status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get or update the current user"""
    user = request.user
    if request.method == 'PATCH':
        data = request.data.copy()
        # Users cannot promote themselves
        for field in ('role', 'team', 'is_staff', 'is_active'):
            data.pop(field, None)
        serializer = UserSerializer(user, data=data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        return Response(serializer.data)

    user_data = UserSerializer(user).data
    user_data['permissions'] = user.role.permissions if user.role_id else {}
    user_data['is_admin'] = user.is_superuser or user.is_staff
    return Response(user_data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def complete_onboarding(request):
    user = request.user
    user.has_completed_onboarding = True
    user.save(update_fields=['has_completed_onboarding', 'updated_at'])
    return Response(UserSerializer(user).data)


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.select_related('role', 'team').order_by('username')
        team_id = request.query_params.get('team')
        role_id = request.query_params.get('role')
        if team_id:
            users = users.filter(team_id=team_id)
        if role_id:
            users = users.filter(role_id=role_id)
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            # Admin-created accounts go through onboarding on first login
            user.has_completed_onboarding = False
            user.save(update_fields=['has_completed_onboarding'])
            create_audit_log(request=request, action='create', model_name='User',
                             object_id=user.id, object_name=user.username)
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        return Response(UserSerializer(user).data)
    elif request.method in ('PUT', 'PATCH'):
        return _detail_update(user, UserSerializer, request)
    else:  # DELETE
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Role views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def role_list_create(request):
    if request.method == 'GET':
        return Response(RoleSerializer(Role.objects.all(), many=True).data)
    if not request.user.is_staff:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    serializer = RoleSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def role_detail(request, pk):
    role = get_object_or_404(Role, pk=pk)
    if request.method == 'GET':
        return Response(RoleSerializer(role).data)
    elif request.method in ('PUT', 'PATCH'):
        return _detail_update(role, RoleSerializer, request)
    role.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Team views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def team_list_create(request):
    if request.method == 'GET':
        return Response(TeamSerializer(Team.objects.all(), many=True).data)
    if not request.user.is_staff:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    serializer = TeamSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def team_detail(request, pk):
    team = get_object_or_404(Team, pk=pk)
    if request.method == 'GET':
        data = TeamSerializer(team).data
        data['members'] = UserSerializer(team.members.all(), many=True).data
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        return _detail_update(team, TeamSerializer, request)
    team.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Invitation views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def invitation_list_create(request):
    """List invitations or invite a new user"""
    if request.method == 'GET':
        invitations = Invitation.objects.select_related('role', 'team')
        status_filter = request.query_params.get('status')
        if status_filter:
            invitations = invitations.filter(status=status_filter)
        return Response(InvitationSerializer(invitations, many=True).data)

    serializer = InvitationSerializer(data=request.data)
    if serializer.is_valid():
        invitation = serializer.save(created_by=request.user, status='pending')
        create_audit_log(request=request, action='create', model_name='Invitation',
                         object_id=invitation.id, object_name=invitation.email)
        return Response(InvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def invitation_detail(request, pk):
    invitation = get_object_or_404(Invitation, pk=pk)
    if request.method == 'GET':
        return Response(InvitationSerializer(invitation).data)
    invitation.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def invitation_lookup(request, token):
    """Public lookup used by the accept-invitation page"""
    invitation = get_object_or_404(Invitation, token=token)
    if invitation.status != 'pending':
        return Response({'error': 'Invitation has already been used'}, status=status.HTTP_400_BAD_REQUEST)
    return Response({
        'email': invitation.email,
        'name': invitation.name,
        'role_name': invitation.role.name if invitation.role_id else None,
        'team_name': invitation.team.name if invitation.team_id else None,
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def invitation_accept(request, token):
    """Create the invited user and mark the invitation as used"""
    serializer = InvitationAcceptSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        invitation = get_object_or_404(Invitation.objects.select_for_update(), token=token)
        if invitation.status != 'pending':
            return Response({'error': 'Invitation has already been used'}, status=status.HTTP_400_BAD_REQUEST)

        first_name, _, last_name = (invitation.name or '').partition(' ')
        user = User(
            username=serializer.validated_data['username'],
            email=invitation.email,
            first_name=first_name,
            last_name=last_name,
            role=invitation.role,
            team=invitation.team,
            is_active=True,
            has_completed_onboarding=False,
        )
        user.set_password(serializer.validated_data['password'])
        user.save()

        invitation.status = 'used'
        invitation.used_by = user
        invitation.used_at = timezone.now()
        invitation.save(update_fields=['status', 'used_by', 'used_at'])

    create_audit_log(action='invitation_accept', model_name='Invitation', object_id=invitation.id,
                     user=user, object_name=invitation.email, request=request)
    return Response(_issue_tokens(user), status=status.HTTP_201_CREATED)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def setting_list_create(request):
    """List all settings or create a new setting"""
    if request.method == 'GET':
        settings = Setting.objects.all().order_by('key')
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)
    else:
        serializer = SettingSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminUser])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        return Response(SettingSerializer(setting).data)
    elif request.method in ('PUT', 'PATCH'):
        return _detail_update(setting, SettingSerializer, request)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    if not request.user.is_staff:
        queryset = queryset.filter(user=request.user)

    user_filter = request.query_params.get('user', None)
    if user_filter:
        queryset = queryset.filter(user_id=user_filter)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')
    return paginated_response(request, queryset, AuditLogSerializer, default_limit=50)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not request.user.is_staff and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    return Response(AuditLogSerializer(audit_log).data)


# Notification views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    queryset = Notification.objects.filter(user=request.user)
    if request.query_params.get('unread') in ('1', 'true', 'True'):
        queryset = queryset.filter(is_read=False)
    type_filter = request.query_params.get('type')
    if type_filter:
        queryset = queryset.filter(type=type_filter)
    return paginated_response(request, queryset.order_by('-created_at'), NotificationSerializer, default_limit=30)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_unread_count(request):
    count = Notification.objects.filter(user=request.user, is_read=False).count()
    return Response({'unread': count})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    notification.is_read = True
    notification.save(update_fields=['is_read'])
    return Response(NotificationSerializer(notification).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    updated = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
    return Response({'updated': updated})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Global search across the main business entities"""
    query = request.query_params.get('q', '').strip()

    from ori.crm.models import Company, Contact, Prospect
    from ori.catalog.models import Product
    from ori.sales.models import Quote
    from ori.prospecting.models import Candidate
    from .utils import scope_queryset

    if not query:
        return Response({
            'companies': [],
            'contacts': [],
            'prospects': [],
            'products': [],
            'quotes': [],
            'candidates': [],
        })

    results = {}

    companies = scope_queryset(request.user, Company.objects.all()).filter(
        Q(name__icontains=query) | Q(short_name__icontains=query) | Q(rfc__icontains=query)
    )
    results['companies'] = list(companies.values('id', 'name', 'short_name', 'stage')[:SEARCH_LIMIT])

    contacts = Contact.objects.filter(
        Q(name__icontains=query) | Q(email__icontains=query) | Q(phone__icontains=query)
    )
    results['contacts'] = list(contacts.values('id', 'name', 'email', 'company_id')[:SEARCH_LIMIT])

    prospects = scope_queryset(request.user, Prospect.objects.all()).filter(
        Q(name__icontains=query) | Q(contact_name__icontains=query) | Q(email__icontains=query)
    )
    results['prospects'] = list(prospects.values('id', 'name', 'stage')[:SEARCH_LIMIT])

    products = Product.objects.filter(Q(name__icontains=query) | Q(sku__icontains=query))
    results['products'] = list(products.values('id', 'name', 'sku')[:SEARCH_LIMIT])

    quotes = scope_queryset(request.user, Quote.objects.all(), owner_fields=('salesperson',)).filter(
        folio__icontains=query
    )
    results['quotes'] = list(quotes.values('id', 'folio', 'status')[:SEARCH_LIMIT])

    candidates = Candidate.objects.filter(Q(name__icontains=query) | Q(city__icontains=query))
    results['candidates'] = list(candidates.values('id', 'name', 'city', 'status')[:SEARCH_LIMIT])

    return Response(results)
