from rest_framework import serializers
from .models import Project, Task, TaskComment
from .services import get_overdue_status, normalize_subtasks

LINK_KEYS = {'company', 'prospect', 'quote', 'sales_order', 'purchase_order', 'candidate'}


class ProjectSerializer(serializers.ModelSerializer):
    progress = serializers.SerializerMethodField()
    task_count = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = ['id', 'name', 'description', 'status', 'owner', 'members', 'start_date', 'due_date',
                  'progress', 'task_count', 'created_at', 'updated_at']
        read_only_fields = ['owner', 'created_at', 'updated_at']

    def get_progress(self, obj):
        return obj.get_progress()

    def get_task_count(self, obj):
        return obj.tasks.count()


class TaskCommentSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.username', read_only=True)

    class Meta:
        model = TaskComment
        fields = ['id', 'task', 'user', 'user_name', 'text', 'created_at']
        read_only_fields = ['task', 'user', 'created_at']


class TaskSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    is_overdue = serializers.SerializerMethodField()
    overdue_text = serializers.SerializerMethodField()
    comment_count = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = ['id', 'title', 'description', 'status', 'priority', 'project', 'project_name', 'assignees',
                  'watchers', 'due_at', 'start_date', 'estimation_hours', 'tags', 'links', 'subtasks',
                  'attachments', 'created_by', 'completed_at', 'is_overdue', 'overdue_text', 'comment_count',
                  'created_at', 'updated_at']
        read_only_fields = ['created_by', 'completed_at', 'created_at', 'updated_at']

    def get_is_overdue(self, obj):
        return get_overdue_status(obj.due_at, obj.status)['is_overdue']

    def get_overdue_text(self, obj):
        return get_overdue_status(obj.due_at, obj.status)['overdue_text']

    def get_comment_count(self, obj):
        return obj.comments.count()

    def validate_tags(self, value):
        if not isinstance(value, list) or not all(isinstance(tag, str) for tag in value):
            raise serializers.ValidationError("Tags must be a list of strings.")
        return value

    def validate_links(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Links must be an object.")
        unknown = set(value) - LINK_KEYS
        if unknown:
            raise serializers.ValidationError(f"Unknown link types: {', '.join(sorted(unknown))}")
        return value

    def validate_subtasks(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Subtasks must be a list.")
        for subtask in value:
            if not isinstance(subtask, dict) or not subtask.get('text'):
                raise serializers.ValidationError("Each subtask needs a text.")
        return normalize_subtasks(value)

    def validate_estimation_hours(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Estimation cannot be negative.")
        return value
