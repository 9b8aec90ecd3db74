from rest_framework import serializers
from .models import EmailAccount, Email, SignatureTemplate, ChatGroup, ChatMessage


class EmailAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailAccount
        fields = ['id', 'user', 'email', 'display_name', 'provider', 'password', 'api_key', 'grant_id',
                  'imap_host', 'imap_port', 'smtp_host', 'smtp_port', 'is_active', 'last_sync_at',
                  'sync_status', 'sync_error', 'created_at']
        read_only_fields = ['last_sync_at', 'sync_status', 'sync_error', 'created_at']
        extra_kwargs = {
            'password': {'write_only': True, 'required': False},
            'api_key': {'write_only': True, 'required': False},
            'user': {'required': False},
        }

    def validate(self, data):
        provider = data.get('provider', getattr(self.instance, 'provider', 'imap_smtp'))
        if provider == 'imap_smtp' and not (data.get('imap_host') or getattr(self.instance, 'imap_host', '')):
            raise serializers.ValidationError({'imap_host': 'Required for IMAP/SMTP accounts.'})
        if provider == 'nylas' and not (data.get('grant_id') or getattr(self.instance, 'grant_id', '')):
            raise serializers.ValidationError({'grant_id': 'Required for Nylas accounts.'})
        return data


class EmailSerializer(serializers.ModelSerializer):
    account_email = serializers.EmailField(source='account.email', read_only=True)

    class Meta:
        model = Email
        fields = ['id', 'account', 'account_email', 'provider_message_id', 'thread_id', 'from_name', 'from_email',
                  'to', 'cc', 'subject', 'body', 'timestamp', 'folder', 'status', 'delivery_status',
                  'delivery_error', 'attachments', 'company', 'contact', 'prospect', 'created_at']
        read_only_fields = fields


class EmailUpdateSerializer(serializers.ModelSerializer):
    """Drafts stay editable; everything else only accepts CRM links"""

    class Meta:
        model = Email
        fields = ['to', 'cc', 'subject', 'body', 'attachments', 'company', 'contact', 'prospect']

    def validate(self, data):
        if self.instance.status != 'draft':
            locked = set(data) - {'company', 'contact', 'prospect'}
            if locked:
                raise serializers.ValidationError(f"Only drafts can change: {', '.join(sorted(locked))}")
        return data


class RecipientField(serializers.Field):
    """Accepts 'a@b.com' or {'name': ..., 'email': ...}"""

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = {'email': data}
        if not isinstance(data, dict):
            raise serializers.ValidationError("Invalid recipient.")
        address = serializers.EmailField().run_validation(data.get('email'))
        return {'name': data.get('name') or '', 'email': address}

    def to_representation(self, value):
        return value


class ComposeSerializer(serializers.Serializer):
    account = serializers.PrimaryKeyRelatedField(queryset=EmailAccount.objects.filter(is_active=True))
    to = serializers.ListField(child=RecipientField(), required=False, default=list)
    cc = serializers.ListField(child=RecipientField(), required=False, default=list)
    subject = serializers.CharField(required=False, allow_blank=True, default='')
    body = serializers.CharField(required=False, allow_blank=True, default='')
    send = serializers.BooleanField(required=False, default=True)
    signature = serializers.IntegerField(required=False, allow_null=True)
    attachments = serializers.ListField(child=serializers.DictField(), required=False, default=list)
    company = serializers.IntegerField(required=False, allow_null=True)
    contact = serializers.IntegerField(required=False, allow_null=True)
    prospect = serializers.IntegerField(required=False, allow_null=True)

    def validate_account(self, value):
        user = self.context['request'].user
        if value.user_id != user.id and not user.is_staff:
            raise serializers.ValidationError("You cannot send from this account.")
        return value


class SignatureTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = SignatureTemplate
        fields = ['id', 'name', 'html', 'is_default', 'owner', 'created_at']
        read_only_fields = ['owner', 'created_at']


class ChatMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.username', read_only=True)
    read_by = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = ChatMessage
        fields = ['id', 'group', 'sender', 'sender_name', 'text', 'read_by', 'created_at']
        read_only_fields = ['group', 'sender', 'created_at']


class ChatGroupSerializer(serializers.ModelSerializer):
    unread_count = serializers.SerializerMethodField()
    last_message = serializers.SerializerMethodField()

    class Meta:
        model = ChatGroup
        fields = ['id', 'name', 'is_direct', 'members', 'created_by', 'unread_count', 'last_message', 'created_at']
        read_only_fields = ['created_by', 'created_at']

    def get_unread_count(self, obj):
        request = self.context.get('request')
        if not request:
            return 0
        return obj.messages.exclude(read_by=request.user).exclude(sender=request.user).count()

    def get_last_message(self, obj):
        message = obj.messages.order_by('-created_at').first()
        return ChatMessageSerializer(message).data if message else None

    def validate(self, data):
        if data.get('is_direct') and len(data.get('members') or []) > 2:
            raise serializers.ValidationError("Direct chats have two members.")
        return data
