from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from .models import EmailAccount, Email, SignatureTemplate, ChatGroup, ChatMessage
from .serializers import (
    EmailAccountSerializer, EmailSerializer, EmailUpdateSerializer, ComposeSerializer,
    SignatureTemplateSerializer, ChatGroupSerializer, ChatMessageSerializer
)
from .services import (
    EmailError, compose_email, send_draft, retry_email, move_to_trash, set_read, request_sync,
    resolve_signature
)
from ori.core.utils import create_audit_log, paginated_response
from ori.crm.models import Company, Contact, Prospect


def _visible_accounts(user):
    accounts = EmailAccount.objects.select_related('user')
    if user.is_staff:
        return accounts
    return accounts.filter(user=user)


def _visible_emails(user):
    return Email.objects.filter(account__in=_visible_accounts(user)).select_related('account')


# Email account views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def account_list_create(request):
    if request.method == 'GET':
        return Response(EmailAccountSerializer(_visible_accounts(request.user), many=True).data)
    data = request.data.copy()
    if not request.user.is_staff or not data.get('user'):
        data['user'] = request.user.id
    serializer = EmailAccountSerializer(data=data)
    if serializer.is_valid():
        account = serializer.save()
        create_audit_log(request=request, action='create', model_name='EmailAccount', object_id=account.id,
                         object_name=account.email)
        return Response(EmailAccountSerializer(account).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def account_detail(request, pk):
    account = get_object_or_404(_visible_accounts(request.user), pk=pk)
    if request.method == 'GET':
        return Response(EmailAccountSerializer(account).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = EmailAccountSerializer(account, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='delete', model_name='EmailAccount', object_id=account.id,
                     object_name=account.email)
    account.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Email views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def email_list(request):
    """Emails of one folder (default inbox), newest first"""
    folder = request.query_params.get('folder', 'inbox')
    if folder not in dict(Email.FOLDER_CHOICES):
        return Response({'error': f'Unknown folder: {folder}'}, status=status.HTTP_400_BAD_REQUEST)
    emails = _visible_emails(request.user).filter(folder=folder)

    account_id = request.query_params.get('account')
    if account_id:
        emails = emails.filter(account_id=account_id)
    status_filter = request.query_params.get('status')
    if status_filter:
        emails = emails.filter(status=status_filter)
    search = request.query_params.get('search')
    if search:
        emails = emails.filter(
            Q(subject__icontains=search) | Q(from_email__icontains=search) | Q(from_name__icontains=search)
        )
    for link in ('company', 'contact', 'prospect'):
        value = request.query_params.get(link)
        if value:
            emails = emails.filter(**{f'{link}_id': value})
    return paginated_response(request, emails.order_by('-timestamp'), EmailSerializer, default_limit=50)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def email_folder_counts(request):
    emails = _visible_emails(request.user)
    return Response({
        'inbox_unread': emails.filter(folder='inbox', status='unread').count(),
        'drafts': emails.filter(folder='drafts').count(),
        'errors': emails.filter(delivery_status='error').count(),
        'pending': emails.filter(delivery_status='pending').count(),
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def email_compose(request):
    """Queue an email for sending (send=true, default) or save a draft"""
    serializer = ComposeSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    signature = resolve_signature(request.user, data.get('signature'))
    try:
        email = compose_email(
            data['account'],
            request.user,
            to=data['to'],
            cc=data['cc'],
            subject=data['subject'],
            body=data['body'],
            send=data['send'],
            signature=signature,
            attachments=data['attachments'],
            company=Company.objects.filter(pk=data.get('company')).first() if data.get('company') else None,
            contact=Contact.objects.filter(pk=data.get('contact')).first() if data.get('contact') else None,
            prospect=Prospect.objects.filter(pk=data.get('prospect')).first() if data.get('prospect') else None,
        )
    except EmailError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if data['send']:
        create_audit_log(request=request, action='email_send', model_name='Email', object_id=email.id,
                         object_name=email.subject, changes={'to': [r['email'] for r in email.to]})
    return Response(EmailSerializer(email).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def email_detail(request, pk):
    """Opening an email marks it read; DELETE removes it from the trash for good"""
    email = get_object_or_404(_visible_emails(request.user), pk=pk)
    if request.method == 'GET':
        if email.status == 'unread':
            set_read(email, True)
        return Response(EmailSerializer(email).data)
    elif request.method == 'PATCH':
        serializer = EmailUpdateSerializer(email, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(EmailSerializer(email).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if email.folder != 'trash':
        return Response({'error': 'Move the email to the trash first.'}, status=status.HTTP_400_BAD_REQUEST)
    email.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def email_trash(request, pk):
    email = get_object_or_404(_visible_emails(request.user), pk=pk)
    move_to_trash(email)
    return Response(EmailSerializer(email).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def email_mark_read(request, pk):
    email = get_object_or_404(_visible_emails(request.user), pk=pk)
    read = request.data.get('read', True)
    if isinstance(read, str):
        read = read.lower() in ('1', 'true', 'yes')
    set_read(email, bool(read))
    return Response(EmailSerializer(email).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def email_send_draft(request, pk):
    email = get_object_or_404(_visible_emails(request.user), pk=pk)
    try:
        send_draft(email)
    except EmailError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(EmailSerializer(email).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def email_retry(request, pk):
    email = get_object_or_404(_visible_emails(request.user), pk=pk)
    try:
        retry_email(email)
    except EmailError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(EmailSerializer(email).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def email_request_sync(request):
    requested_at = request_sync(request.user)
    return Response({'last_sync_request': requested_at}, status=status.HTTP_202_ACCEPTED)


# Signature views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def signature_list_create(request):
    if request.method == 'GET':
        signatures = SignatureTemplate.objects.filter(owner=request.user)
        return Response(SignatureTemplateSerializer(signatures, many=True).data)
    serializer = SignatureTemplateSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(owner=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def signature_detail(request, pk):
    signature = get_object_or_404(SignatureTemplate, pk=pk, owner=request.user)
    if request.method == 'GET':
        return Response(SignatureTemplateSerializer(signature).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SignatureTemplateSerializer(signature, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    signature.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Chat views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def chat_group_list_create(request):
    if request.method == 'GET':
        groups = ChatGroup.objects.filter(members=request.user).prefetch_related('members').distinct()
        return Response(ChatGroupSerializer(groups, many=True, context={'request': request}).data)
    serializer = ChatGroupSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        group = serializer.save(created_by=request.user)
        group.members.add(request.user)
        return Response(ChatGroupSerializer(group, context={'request': request}).data,
                        status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def chat_group_detail(request, pk):
    group = get_object_or_404(ChatGroup.objects.filter(members=request.user).distinct(), pk=pk)
    if request.method == 'GET':
        return Response(ChatGroupSerializer(group, context={'request': request}).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ChatGroupSerializer(group, data=request.data, partial=request.method == 'PATCH',
                                         context={'request': request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if group.created_by_id != request.user.id and not request.user.is_staff:
        return Response({'error': 'Only the creator can delete this chat.'}, status=status.HTTP_403_FORBIDDEN)
    group.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def chat_messages(request, pk):
    group = get_object_or_404(ChatGroup.objects.filter(members=request.user).distinct(), pk=pk)
    if request.method == 'GET':
        messages = group.messages.select_related('sender').prefetch_related('read_by')
        after = request.query_params.get('after')
        if after:
            messages = messages.filter(id__gt=after)
        return Response(ChatMessageSerializer(messages, many=True).data)
    serializer = ChatMessageSerializer(data=request.data)
    if serializer.is_valid():
        message = serializer.save(group=group, sender=request.user)
        message.read_by.add(request.user)
        return Response(ChatMessageSerializer(message).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def chat_mark_read(request, pk):
    group = get_object_or_404(ChatGroup.objects.filter(members=request.user).distinct(), pk=pk)
    unread = ChatMessage.objects.filter(group=group).exclude(read_by=request.user)
    count = 0
    for message in unread:
        message.read_by.add(request.user)
        count += 1
    return Response({'marked': count})
