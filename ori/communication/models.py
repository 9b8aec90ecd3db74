from django.db import models

from ori.core.models import User


class EmailAccount(models.Model):
    """A mailbox connected for inbound sync and outbound sending"""
    PROVIDER_CHOICES = [
        ('imap_smtp', 'IMAP / SMTP'),
        ('nylas', 'Nylas'),
        ('mailersend', 'MailerSend'),
    ]
    SYNC_STATUS_CHOICES = [
        ('never', 'Never'),
        ('ok', 'OK'),
        ('error', 'Error'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='email_accounts')
    email = models.EmailField()
    display_name = models.CharField(max_length=255, blank=True)
    provider = models.CharField(max_length=20, choices=PROVIDER_CHOICES, default='imap_smtp')
    password = models.CharField(max_length=255, blank=True)
    api_key = models.CharField(max_length=255, blank=True)
    grant_id = models.CharField(max_length=255, blank=True)
    imap_host = models.CharField(max_length=255, blank=True)
    imap_port = models.PositiveIntegerField(default=993)
    smtp_host = models.CharField(max_length=255, blank=True)
    smtp_port = models.PositiveIntegerField(default=465)
    is_active = models.BooleanField(default=True)
    last_sync_at = models.DateTimeField(null=True, blank=True)
    sync_status = models.CharField(max_length=10, choices=SYNC_STATUS_CHOICES, default='never')
    sync_error = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.email} ({self.get_provider_display()})"

    @property
    def sender(self):
        name = self.display_name or self.user.get_display_name()
        return f'"{name}" <{self.email}>'

    class Meta:
        db_table = 'email_accounts'
        ordering = ['email']
        unique_together = ['user', 'email']


class Email(models.Model):
    FOLDER_CHOICES = [
        ('inbox', 'Inbox'),
        ('sent', 'Sent'),
        ('drafts', 'Drafts'),
        ('trash', 'Trash'),
    ]
    STATUS_CHOICES = [
        ('read', 'Read'),
        ('unread', 'Unread'),
        ('draft', 'Draft'),
    ]
    DELIVERY_CHOICES = [
        ('pending', 'Pending'),
        ('sent', 'Sent'),
        ('error', 'Error'),
        ('received', 'Received'),
    ]

    account = models.ForeignKey(EmailAccount, on_delete=models.CASCADE, related_name='emails')
    provider_message_id = models.CharField(max_length=500, null=True, blank=True)
    thread_id = models.CharField(max_length=255, blank=True)
    from_name = models.CharField(max_length=255, blank=True)
    from_email = models.EmailField(blank=True)
    to = models.JSONField(default=list, blank=True)
    cc = models.JSONField(default=list, blank=True)
    subject = models.CharField(max_length=998, blank=True)
    body = models.TextField(blank=True)
    timestamp = models.DateTimeField(db_index=True)
    folder = models.CharField(max_length=10, choices=FOLDER_CHOICES, default='inbox')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='unread')
    delivery_status = models.CharField(max_length=10, choices=DELIVERY_CHOICES, default='received', blank=True)
    delivery_error = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)
    company = models.ForeignKey('crm.Company', on_delete=models.SET_NULL, null=True, blank=True, related_name='emails')
    contact = models.ForeignKey('crm.Contact', on_delete=models.SET_NULL, null=True, blank=True, related_name='emails')
    prospect = models.ForeignKey('crm.Prospect', on_delete=models.SET_NULL, null=True, blank=True, related_name='emails')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.subject or '(Sin asunto)'

    class Meta:
        db_table = 'emails'
        ordering = ['-timestamp']
        unique_together = ['account', 'provider_message_id']
        indexes = [
            models.Index(fields=['account', 'folder'], name='idx_email_account_folder'),
            models.Index(fields=['delivery_status'], name='idx_email_delivery'),
        ]


class SignatureTemplate(models.Model):
    name = models.CharField(max_length=255)
    html = models.TextField()
    is_default = models.BooleanField(default=False)
    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='signatures')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        # one default per owner
        if self.is_default:
            SignatureTemplate.objects.filter(owner=self.owner, is_default=True).exclude(pk=self.pk).update(is_default=False)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'signature_templates'
        ordering = ['name']


class ChatGroup(models.Model):
    name = models.CharField(max_length=255)
    is_direct = models.BooleanField(default=False)
    members = models.ManyToManyField(User, related_name='chat_groups')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_chat_groups')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'chat_groups'
        ordering = ['name']


class ChatMessage(models.Model):
    group = models.ForeignKey(ChatGroup, on_delete=models.CASCADE, related_name='messages')
    sender = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='chat_messages')
    text = models.TextField()
    read_by = models.ManyToManyField(User, blank=True, related_name='read_chat_messages')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.sender} @ {self.group}: {self.text[:40]}"

    class Meta:
        db_table = 'chat_messages'
        ordering = ['created_at']
