import logging
import uuid
from datetime import timedelta

from django.db.models import Count, Q
from django.utils import timezone

from .models import Task
from ori.core.utils import notify, scope_queryset

logger = logging.getLogger(__name__)


TASK_OWNER_FIELDS = ('assignees', 'created_by')


class TaskError(Exception):
    pass


def visible_tasks(user):
    return scope_queryset(user, Task.objects.select_related('project'), owner_fields=TASK_OWNER_FIELDS)


def get_overdue_status(due_at, status, today=None):
    """Compare calendar dates only; done tasks and tasks without due date are never overdue"""
    if not due_at or status == 'hecho':
        return {'is_overdue': False, 'overdue_text': ''}

    today = today or timezone.localdate()
    due_day = timezone.localtime(due_at).date() if timezone.is_aware(due_at) else due_at.date()
    if due_day >= today:
        return {'is_overdue': False, 'overdue_text': ''}

    days = (today - due_day).days
    text = 'Vencida ayer' if days == 1 else f"Vencida hace {days} días"
    return {'is_overdue': True, 'overdue_text': text}


def notify_assignees(task, users, actor=None):
    for user in users:
        if actor is not None and user.pk == actor.pk:
            continue
        notify(
            user,
            'Nueva tarea asignada',
            f"Se te asignó la tarea \"{task.title}\"",
            type='task',
            link=f"/tasks/{task.id}",
        )


def move_task(task, new_status, user=None):
    valid = dict(Task.STATUS_CHOICES)
    if new_status not in valid:
        raise TaskError(f"Estado inválido: {new_status}")
    if task.status == new_status:
        return False

    task.status = new_status
    if new_status == 'hecho':
        task.completed_at = timezone.now()
    else:
        task.completed_at = None
    task.save(update_fields=['status', 'completed_at', 'updated_at'])
    return True


def toggle_subtask(task, subtask_id):
    subtasks = list(task.subtasks or [])
    for subtask in subtasks:
        if str(subtask.get('id')) == str(subtask_id):
            subtask['is_completed'] = not subtask.get('is_completed', False)
            break
    else:
        raise TaskError(f"Subtarea no encontrada: {subtask_id}")
    task.subtasks = subtasks
    task.save(update_fields=['subtasks', 'updated_at'])
    return task


def normalize_subtasks(subtasks):
    """Give every subtask an id and a completion flag"""
    normalized = []
    for subtask in subtasks or []:
        item = dict(subtask)
        item.setdefault('id', uuid.uuid4().hex[:12])
        item['is_completed'] = bool(item.get('is_completed', False))
        normalized.append(item)
    return normalized


def get_tasks_dashboard(user, queryset=None):
    tasks = queryset if queryset is not None else Task.objects.all()
    counts = {row['status']: row['count'] for row in tasks.order_by().values('status').annotate(count=Count('id'))}
    now = timezone.now()
    today_start = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    open_tasks = tasks.exclude(status='hecho')
    mine = open_tasks.filter(assignees=user)

    return {
        'by_status': [
            {'status': code, 'label': label, 'count': counts.get(code, 0)} for code, label in Task.STATUS_CHOICES
        ],
        'total': sum(counts.values()),
        'overdue': open_tasks.filter(due_at__lt=today_start).count(),
        'due_today': open_tasks.filter(due_at__gte=today_start, due_at__lt=today_start + timedelta(days=1)).count(),
        'my_open_tasks': mine.count(),
        'my_overdue': mine.filter(due_at__lt=today_start).count(),
        'completed_this_week': tasks.filter(
            Q(status='hecho') & Q(completed_at__gte=now - timedelta(days=7))
        ).count(),
    }
