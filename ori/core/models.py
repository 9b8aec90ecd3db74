import json
import secrets

from django.contrib.auth.models import AbstractUser
from django.db import models


PRIORITY_CHOICES = [
    ('alta', 'Alta'),
    ('media', 'Media'),
    ('baja', 'Baja'),
]

UNIT_CHOICES = [
    ('ton', 'ton'),
    ('kg', 'kg'),
    ('L', 'L'),
    ('unidad', 'unidad'),
]

CURRENCY_CHOICES = [
    ('MXN', 'MXN'),
    ('USD', 'USD'),
]

# shared by suppliers and carriers
RATING_CHOICES = [
    ('excelente', 'Excelente'),
    ('bueno', 'Bueno'),
    ('regular', 'Regular'),
    ('lista_negra', 'Lista Negra'),
]


class Role(models.Model):
    """Permission profile assigned to users"""
    DATA_SCOPE_CHOICES = [
        ('own', 'Ver solo datos propios'),
        ('team', 'Ver datos del equipo'),
        ('all', 'Ver todos los datos'),
    ]

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    data_scope = models.CharField(max_length=10, choices=DATA_SCOPE_CHOICES, default='own')
    # pages, action permissions and ai access flags
    permissions = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'roles'
        ordering = ['name']


class Team(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'teams'
        ordering = ['name']


class User(AbstractUser):
    """Extended user model with additional fields"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.ForeignKey(Role, on_delete=models.SET_NULL, null=True, blank=True, related_name='users')
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, null=True, blank=True, related_name='members')
    avatar_url = models.URLField(max_length=500, blank=True)
    signature = models.TextField(blank=True)
    has_completed_onboarding = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        if not self.avatar_url:
            self.avatar_url = f'https://i.pravatar.cc/150?u={self.pk}'
            User.objects.filter(pk=self.pk).update(avatar_url=self.avatar_url)

    @property
    def data_scope(self):
        if self.is_superuser:
            return 'all'
        if self.role_id:
            return self.role.data_scope
        return 'all'

    def get_display_name(self):
        return self.get_full_name() or self.username


class Invitation(models.Model):
    """Pending invitation to join the workspace"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('used', 'Used'),
    ]

    email = models.EmailField()
    name = models.CharField(max_length=255, blank=True)
    role = models.ForeignKey(Role, on_delete=models.SET_NULL, null=True, blank=True, related_name='invitations')
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, null=True, blank=True, related_name='invitations')
    token = models.CharField(max_length=64, unique=True, editable=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='sent_invitations')
    used_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='accepted_invitation')
    created_at = models.DateTimeField(auto_now_add=True)
    used_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.email} ({self.status})"

    def save(self, *args, **kwargs):
        if not self.token:
            self.token = secrets.token_urlsafe(32)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'invitations'
        ordering = ['-created_at']


class Setting(models.Model):
    """System settings"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    def get_json(self, default=None):
        try:
            return json.loads(self.value)
        except (TypeError, ValueError):
            return default

    class Meta:
        db_table = 'settings'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('view', 'View'),
        ('status_change', 'Status Changed'),
        ('stock_move', 'Inventory Move'),
        ('stock_receive', 'Stock Received (Purchase)'),
        ('quote_convert', 'Quote Converted'),
        ('invoice_create', 'Invoice Created'),
        ('payment_add', 'Payment Added'),
        ('commission_paid', 'Commission Paid'),
        ('candidate_import', 'Candidates Imported'),
        ('candidate_approve', 'Candidate Approved'),
        ('candidate_reject', 'Candidate Rejected'),
        ('invitation_accept', 'Invitation Accepted'),
        ('email_send', 'Email Queued'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., company name, quote folio)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., folio, invoice number, SKU)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_audit_created'),
            models.Index(fields=['action'], name='idx_audit_action'),
            models.Index(fields=['model_name'], name='idx_audit_model'),
            models.Index(fields=['object_reference'], name='idx_audit_reference'),
        ]


class Notification(models.Model):
    TYPE_CHOICES = [
        ('task', 'Task'),
        ('message', 'Message'),
        ('system', 'System'),
        ('email', 'Email'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=255)
    message = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='system')
    link = models.CharField(max_length=500, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user} - {self.title}"

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='idx_notification_user_read'),
        ]
