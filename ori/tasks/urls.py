from django.urls import path
from .views import (
    project_list_create, project_detail,
    task_list_create, task_detail, task_move, task_toggle_subtask, task_comments,
    task_board, tasks_dashboard
)

urlpatterns = [
    path('projects/', project_list_create, name='project-list-create'),
    path('projects/<int:pk>/', project_detail, name='project-detail'),

    path('tasks/', task_list_create, name='task-list-create'),
    path('tasks/board/', task_board, name='task-board'),
    path('tasks/dashboard/', tasks_dashboard, name='tasks-dashboard'),
    path('tasks/<int:pk>/', task_detail, name='task-detail'),
    path('tasks/<int:pk>/move/', task_move, name='task-move'),
    path('tasks/<int:pk>/subtasks/<str:subtask_id>/toggle/', task_toggle_subtask, name='task-toggle-subtask'),
    path('tasks/<int:pk>/comments/', task_comments, name='task-comments'),
]
