from django.db import models

from ori.core.models import User, PRIORITY_CHOICES


class Project(models.Model):
    STATUS_CHOICES = [
        ('activo', 'Activo'),
        ('en_pausa', 'En Pausa'),
        ('completado', 'Completado'),
    ]

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='activo')
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='owned_projects')
    members = models.ManyToManyField(User, blank=True, related_name='projects')
    start_date = models.DateField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def get_progress(self):
        """Percentage of the project's tasks that are done"""
        total = self.tasks.count()
        if total == 0:
            return 0
        done = self.tasks.filter(status='hecho').count()
        return round(done * 100 / total)

    class Meta:
        db_table = 'projects'
        ordering = ['name']


class Task(models.Model):
    STATUS_CHOICES = [
        ('por_hacer', 'Por Hacer'),
        ('en_progreso', 'En Progreso'),
        ('hecho', 'Hecho'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='por_hacer')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='media')
    project = models.ForeignKey(Project, on_delete=models.SET_NULL, null=True, blank=True, related_name='tasks')
    assignees = models.ManyToManyField(User, blank=True, related_name='assigned_tasks')
    watchers = models.ManyToManyField(User, blank=True, related_name='watched_tasks')
    due_at = models.DateTimeField(null=True, blank=True)
    start_date = models.DateField(null=True, blank=True)
    estimation_hours = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)
    # {company, prospect, quote, sales_order} ids
    links = models.JSONField(default=dict, blank=True)
    # [{id, text, is_completed, notes}]
    subtasks = models.JSONField(default=list, blank=True)
    # [{name, size, url}]
    attachments = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_tasks')
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'tasks'
        ordering = ['due_at', '-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_task_status'),
            models.Index(fields=['due_at'], name='idx_task_due_at'),
        ]


class TaskComment(models.Model):
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='comments')
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='task_comments')
    text = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.user}: {self.text[:40]}"

    class Meta:
        db_table = 'task_comments'
        ordering = ['created_at']
