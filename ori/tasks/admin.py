from django.contrib import admin
from .models import Project, Task, TaskComment


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'status', 'owner', 'due_date']
    list_filter = ['status']
    filter_horizontal = ['members']


class TaskCommentInline(admin.TabularInline):
    model = TaskComment
    extra = 0


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'status', 'priority', 'project', 'due_at', 'completed_at']
    list_filter = ['status', 'priority', 'project']
    search_fields = ['title', 'description']
    filter_horizontal = ['assignees', 'watchers']
    inlines = [TaskCommentInline]
