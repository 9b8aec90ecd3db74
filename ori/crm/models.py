from django.db import models
from decimal import Decimal

from ori.core.models import User, PRIORITY_CHOICES, CURRENCY_CHOICES


class Company(models.Model):
    """Client company tracked through the companies pipeline"""
    STAGE_CHOICES = [
        ('investigacion', 'Investigación'),
        ('primer_contacto', 'Primer Contacto'),
        ('calificada', 'Calificada'),
        ('cliente_activo', 'Cliente Activo'),
        ('cliente_inactivo', 'Cliente Inactivo'),
        ('alianza_estrategica', 'Alianza Estratégica'),
    ]

    name = models.CharField(max_length=255, db_index=True)
    short_name = models.CharField(max_length=100, blank=True)
    rfc = models.CharField(max_length=20, blank=True, db_index=True)
    industry = models.CharField(max_length=100, blank=True)
    stage = models.CharField(max_length=30, choices=STAGE_CHOICES, default='investigacion')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='media')
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='companies')
    website = models.URLField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    email = models.EmailField(blank=True)
    products_of_interest = models.ManyToManyField('catalog.Product', blank=True, related_name='interested_companies')
    primary_contact = models.ForeignKey('Contact', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    delivery_addresses = models.JSONField(default=list, blank=True)
    # purchase profile: type, frequency, volumes, payment terms
    profile = models.JSONField(default=dict, blank=True)
    is_supplier_too = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.short_name or self.name

    class Meta:
        db_table = 'companies'
        verbose_name_plural = 'companies'
        ordering = ['name']
        indexes = [
            models.Index(fields=['stage'], name='idx_company_stage'),
        ]


class Contact(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE, null=True, blank=True, related_name='contacts')
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    role_title = models.CharField(max_length=100, blank=True)
    is_primary = models.BooleanField(default=False)
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='contacts')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'contacts'
        ordering = ['name']


class Prospect(models.Model):
    """Sales lead moving through the prospects pipeline"""
    STAGE_CHOICES = [
        ('nuevo_lead', 'Nuevo Lead'),
        ('contactado', 'Contactado'),
        ('calificado', 'Calificado'),
        ('propuesta', 'Propuesta'),
        ('negociacion', 'Negociación'),
        ('ganado', 'Ganado'),
        ('perdido', 'Perdido'),
        ('pausado', 'Pausado'),
    ]

    name = models.CharField(max_length=255, db_index=True)
    company = models.ForeignKey(Company, on_delete=models.SET_NULL, null=True, blank=True, related_name='prospects')
    stage = models.CharField(max_length=20, choices=STAGE_CHOICES, default='nuevo_lead')
    est_value = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='MXN')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='media')
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='prospects')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_prospects')
    origin = models.CharField(max_length=100, blank=True)
    industry = models.CharField(max_length=100, blank=True)
    contact_name = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    website = models.URLField(blank=True)
    address = models.TextField(blank=True)
    next_action = models.CharField(max_length=255, blank=True)
    next_action_date = models.DateField(null=True, blank=True)
    lost_reason = models.CharField(max_length=255, blank=True)
    lost_notes = models.TextField(blank=True)
    paused_reason = models.CharField(max_length=255, blank=True)
    paused_until = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    candidate = models.ForeignKey('prospecting.Candidate', on_delete=models.SET_NULL, null=True, blank=True, related_name='prospects')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'prospects'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['stage'], name='idx_prospect_stage'),
        ]


class ActivityLog(models.Model):
    """Timeline entry attached to a company, prospect, contact or candidate"""
    TYPE_CHOICES = [
        ('llamada', 'Llamada'),
        ('email', 'Email'),
        ('reunion', 'Reunión'),
        ('nota', 'Nota'),
        ('vista_perfil', 'Vista de Perfil'),
        ('analisis_ia', 'Análisis IA'),
        ('cambio_estado', 'Cambio de Estado'),
        ('sistema', 'Sistema'),
    ]

    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    description = models.TextField()
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='activities')
    company = models.ForeignKey(Company, on_delete=models.CASCADE, null=True, blank=True, related_name='activities')
    prospect = models.ForeignKey(Prospect, on_delete=models.CASCADE, null=True, blank=True, related_name='activities')
    contact = models.ForeignKey(Contact, on_delete=models.CASCADE, null=True, blank=True, related_name='activities')
    candidate = models.ForeignKey('prospecting.Candidate', on_delete=models.CASCADE, null=True, blank=True, related_name='activities')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.get_type_display()}: {self.description[:50]}"

    class Meta:
        db_table = 'activity_logs'
        ordering = ['-created_at', '-id']


class Note(models.Model):
    """Free-text note attached to any entity by type and id"""
    ENTITY_CHOICES = [
        ('company', 'Company'),
        ('contact', 'Contact'),
        ('prospect', 'Prospect'),
        ('candidate', 'Candidate'),
        ('quote', 'Quote'),
        ('sample', 'Sample'),
        ('sales_order', 'Sales Order'),
        ('purchase_order', 'Purchase Order'),
        ('supplier', 'Supplier'),
        ('delivery', 'Delivery'),
        ('task', 'Task'),
    ]

    entity_type = models.CharField(max_length=30, choices=ENTITY_CHOICES)
    entity_id = models.PositiveBigIntegerField()
    text = models.TextField()
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='notes')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.entity_type}#{self.entity_id}: {self.text[:40]}"

    class Meta:
        db_table = 'notes'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='idx_note_entity'),
        ]


class SupportTicket(models.Model):
    STATUS_CHOICES = [
        ('abierto', 'Abierto'),
        ('en_progreso', 'En Progreso'),
        ('cerrado', 'Cerrado'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='tickets')
    subject = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='abierto')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='media')
    assigned_to = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='tickets')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_tickets')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return self.subject

    class Meta:
        db_table = 'support_tickets'
        ordering = ['-created_at']
