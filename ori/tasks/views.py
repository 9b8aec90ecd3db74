from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from .models import Project, Task
from .serializers import ProjectSerializer, TaskSerializer, TaskCommentSerializer
from .services import TaskError, move_task, notify_assignees, toggle_subtask, get_tasks_dashboard, visible_tasks
from ori.core.utils import create_audit_log, paginated_response


# Project views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_list_create(request):
    if request.method == 'GET':
        projects = Project.objects.prefetch_related('members')
        status_filter = request.query_params.get('status')
        if status_filter:
            projects = projects.filter(status=status_filter)
        if request.query_params.get('mine') == 'true':
            projects = projects.filter(Q(owner=request.user) | Q(members=request.user)).distinct()
        return Response(ProjectSerializer(projects, many=True).data)
    serializer = ProjectSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(owner=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_detail(request, pk):
    project = get_object_or_404(Project, pk=pk)
    if request.method == 'GET':
        data = ProjectSerializer(project).data
        data['tasks'] = TaskSerializer(project.tasks.all(), many=True).data
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProjectSerializer(project, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    project.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


# Task views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def task_list_create(request):
    """List tasks visible to the user or create a task (assignees are notified)"""
    if request.method == 'GET':
        tasks = visible_tasks(request.user).prefetch_related('assignees')
        status_filter = request.query_params.get('status')
        project_id = request.query_params.get('project')
        assignee = request.query_params.get('assignee')
        priority = request.query_params.get('priority')
        search = request.query_params.get('search')
        if status_filter:
            tasks = tasks.filter(status=status_filter)
        if project_id:
            tasks = tasks.filter(project_id=project_id)
        if assignee == 'me':
            tasks = tasks.filter(assignees=request.user)
        elif assignee:
            tasks = tasks.filter(assignees__id=assignee)
        if priority:
            tasks = tasks.filter(priority=priority)
        if search:
            tasks = tasks.filter(Q(title__icontains=search) | Q(description__icontains=search))
        if request.query_params.get('overdue') == 'true':
            today_start = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
            tasks = tasks.exclude(status='hecho').filter(due_at__lt=today_start)
        return paginated_response(request, tasks.order_by('due_at', '-created_at'), TaskSerializer, default_limit=50)

    serializer = TaskSerializer(data=request.data)
    if serializer.is_valid():
        task = serializer.save(created_by=request.user)
        if task.status == 'hecho':
            task.completed_at = timezone.now()
            task.save(update_fields=['completed_at'])
        notify_assignees(task, task.assignees.all(), actor=request.user)
        create_audit_log(request=request, action='create', model_name='Task', object_id=task.id, object_name=task.title)
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def task_detail(request, pk):
    task = get_object_or_404(visible_tasks(request.user), pk=pk)
    if request.method == 'GET':
        data = TaskSerializer(task).data
        data['comments'] = TaskCommentSerializer(task.comments.select_related('user'), many=True).data
        return Response(data)
    elif request.method in ('PUT', 'PATCH'):
        previous_assignees = set(task.assignees.values_list('id', flat=True))
        data = request.data.copy()
        new_status = data.pop('status', None)
        serializer = TaskSerializer(task, data=data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            task = serializer.save()
            if new_status:
                try:
                    move_task(task, new_status[0] if isinstance(new_status, list) else new_status, user=request.user)
                except TaskError as e:
                    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
            added = task.assignees.exclude(id__in=previous_assignees)
            notify_assignees(task, added, actor=request.user)
            return Response(TaskSerializer(task).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='delete', model_name='Task', object_id=task.id, object_name=task.title)
    task.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def task_move(request, pk):
    """Kanban move; entering Hecho stamps completed_at, leaving it clears it"""
    task = get_object_or_404(visible_tasks(request.user), pk=pk)
    old_status = task.status
    try:
        moved = move_task(task, request.data.get('status'), user=request.user)
    except TaskError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    if moved:
        create_audit_log(request=request, action='status_change', model_name='Task', object_id=task.id,
                         object_name=task.title, changes={'status': {'old': old_status, 'new': task.status}})
    return Response(TaskSerializer(task).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def task_toggle_subtask(request, pk, subtask_id):
    task = get_object_or_404(visible_tasks(request.user), pk=pk)
    try:
        toggle_subtask(task, subtask_id)
    except TaskError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    return Response(TaskSerializer(task).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def task_comments(request, pk):
    task = get_object_or_404(visible_tasks(request.user), pk=pk)
    if request.method == 'GET':
        return Response(TaskCommentSerializer(task.comments.select_related('user'), many=True).data)
    serializer = TaskCommentSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(task=task, user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def task_board(request):
    tasks = visible_tasks(request.user).prefetch_related('assignees')
    project_id = request.query_params.get('project')
    if project_id:
        tasks = tasks.filter(project_id=project_id)
    columns = []
    for code, label in Task.STATUS_CHOICES:
        in_column = tasks.filter(status=code)
        columns.append({
            'stage': code,
            'label': label,
            'count': in_column.count(),
            'items': TaskSerializer(in_column.order_by('due_at', '-created_at')[:100], many=True).data,
        })
    return Response({'columns': columns})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def tasks_dashboard(request):
    return Response(get_tasks_dashboard(request.user, visible_tasks(request.user)))
