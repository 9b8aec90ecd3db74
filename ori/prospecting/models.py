from django.db import models

from ori.core.models import User


class Brand(models.Model):
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    website = models.URLField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'brands'
        ordering = ['name']


class ImportSource(models.Model):
    name = models.CharField(max_length=255, unique=True)
    type = models.CharField(max_length=50, default='apify')
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'import_sources'
        ordering = ['name']


class ImportHistory(models.Model):
    STATUS_CHOICES = [
        ('in_progress', 'In Progress'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
    ]

    source = models.ForeignKey(ImportSource, on_delete=models.SET_NULL, null=True, blank=True, related_name='imports')
    source_url = models.URLField(max_length=1000)
    search_terms = models.JSONField(default=list, blank=True)
    location = models.CharField(max_length=255, blank=True)
    # brand, language, results_count, ...
    criteria = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='in_progress')
    total_processed = models.PositiveIntegerField(default=0)
    new_candidates = models.PositiveIntegerField(default=0)
    duplicates_skipped = models.PositiveIntegerField(default=0)
    error = models.TextField(blank=True)
    imported_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='imports')
    created_at = models.DateTimeField(auto_now_add=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Import {self.id} ({self.get_status_display()})"

    class Meta:
        db_table = 'import_history'
        verbose_name_plural = 'import history'
        ordering = ['-created_at']


class Candidate(models.Model):
    """A business found by a places import, reviewed before becoming a prospect"""
    STATUS_CHOICES = [
        ('pendiente', 'Pendiente'),
        ('en_revision', 'En Revisión'),
        ('aprobado', 'Aprobado'),
        ('rechazado', 'Rechazado'),
        ('lista_negra', 'Lista Negra'),
    ]

    name = models.CharField(max_length=255, db_index=True)
    google_place_id = models.CharField(max_length=255, null=True, blank=True, unique=True)
    description = models.TextField(blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=120, blank=True, db_index=True)
    state = models.CharField(max_length=120, blank=True, db_index=True)
    phone = models.CharField(max_length=50, blank=True)
    phones = models.JSONField(default=list, blank=True)
    email = models.EmailField(blank=True)
    emails = models.JSONField(default=list, blank=True)
    website = models.URLField(max_length=500, blank=True)
    linkedins = models.JSONField(default=list, blank=True)
    facebooks = models.JSONField(default=list, blank=True)
    instagrams = models.JSONField(default=list, blank=True)
    twitters = models.JSONField(default=list, blank=True)
    google_maps_url = models.URLField(max_length=1000, blank=True)
    raw_categories = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    average_rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    reviews_count = models.PositiveIntegerField(default=0)
    image_urls = models.JSONField(default=list, blank=True)
    opening_hours = models.JSONField(default=list, blank=True)
    lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    lng = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pendiente')
    rejection_reason = models.CharField(max_length=255, blank=True)
    rejection_notes = models.TextField(blank=True)
    blacklist_reason = models.CharField(max_length=255, blank=True)
    blacklist_notes = models.TextField(blank=True)
    brand = models.ForeignKey(Brand, on_delete=models.SET_NULL, null=True, blank=True, related_name='candidates')
    assigned_to = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_candidates')
    ai_analysis = models.JSONField(null=True, blank=True)
    profile_views = models.PositiveIntegerField(default=0)
    import_history = models.ForeignKey(ImportHistory, on_delete=models.SET_NULL, null=True, blank=True, related_name='candidates')
    imported_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='imported_candidates')
    prospect = models.ForeignKey('crm.Prospect', on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def get_completeness(self):
        score = 0
        if self.email or self.emails:
            score += 20
        if self.phone or self.phones:
            score += 20
        if self.website:
            score += 20
        if self.linkedins or self.facebooks or self.instagrams:
            score += 10
        if self.ai_analysis:
            score += 30
        return min(100, score)

    class Meta:
        db_table = 'candidates'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_candidate_status'),
            models.Index(fields=['state', 'city'], name='idx_candidate_location'),
        ]
