"""
Test suite for the tasks module
Tests: overdue text, kanban moves, subtasks, assignee notifications, visibility, projects
"""
from datetime import date, datetime, timedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.core.models import Notification
from ori.tasks.models import Project
from ori.tasks.services import TaskError, get_overdue_status, move_task, toggle_subtask, normalize_subtasks


class OverdueStatusTests(TestCase):
    def setUp(self):
        self.today = date(2025, 3, 10)

    def due(self, day, hour=12):
        return timezone.make_aware(datetime(2025, 3, day, hour, 0))

    def test_due_today_is_not_overdue(self):
        result = get_overdue_status(self.due(10, hour=0), 'por_hacer', today=self.today)
        self.assertFalse(result['is_overdue'])
        self.assertEqual(result['overdue_text'], '')

    def test_yesterday(self):
        result = get_overdue_status(self.due(9, hour=23), 'en_progreso', today=self.today)
        self.assertTrue(result['is_overdue'])
        self.assertEqual(result['overdue_text'], 'Vencida ayer')

    def test_days_ago(self):
        result = get_overdue_status(self.due(3), 'por_hacer', today=self.today)
        self.assertEqual(result['overdue_text'], 'Vencida hace 7 días')

    def test_done_and_undated_never_overdue(self):
        self.assertFalse(get_overdue_status(self.due(1), 'hecho', today=self.today)['is_overdue'])
        self.assertFalse(get_overdue_status(None, 'por_hacer', today=self.today)['is_overdue'])


class TaskServiceTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.task = TestDataFactory.create_task(created_by=self.user)

    def test_move_to_done_stamps_completion(self):
        self.assertTrue(move_task(self.task, 'hecho'))
        self.assertIsNotNone(self.task.completed_at)
        move_task(self.task, 'en_progreso')
        self.assertIsNone(self.task.completed_at)

    def test_move_same_status(self):
        self.assertFalse(move_task(self.task, 'por_hacer'))

    def test_move_invalid(self):
        with self.assertRaises(TaskError):
            move_task(self.task, 'archivada')

    def test_normalize_subtasks(self):
        subtasks = normalize_subtasks([{'text': 'Cotizar flete'}, {'id': 'abc', 'text': 'Llamar', 'is_completed': 1}])
        self.assertEqual(len(subtasks[0]['id']), 12)
        self.assertFalse(subtasks[0]['is_completed'])
        self.assertEqual(subtasks[1]['id'], 'abc')
        self.assertTrue(subtasks[1]['is_completed'])

    def test_toggle_subtask(self):
        self.task.subtasks = [{'id': 'a1', 'text': 'Revisar', 'is_completed': False}]
        self.task.save()
        toggle_subtask(self.task, 'a1')
        self.task.refresh_from_db()
        self.assertTrue(self.task.subtasks[0]['is_completed'])
        with self.assertRaises(TaskError):
            toggle_subtask(self.task, 'zz')


class TaskAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.assignee = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_notifies_assignees_but_not_actor(self):
        response = self.client.post('/api/v1/tasks/', {
            'title': 'Enviar muestra',
            'assignees': [self.user.id, self.assignee.id],
            'subtasks': [{'text': 'Empacar'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], self.user.id)
        self.assertTrue(response.data['subtasks'][0]['id'])
        self.assertEqual(Notification.objects.filter(user=self.assignee, type='task').count(), 1)
        self.assertFalse(Notification.objects.filter(user=self.user).exists())

    def test_create_rejects_unknown_links(self):
        response = self.client.post('/api/v1/tasks/', {'title': 'X', 'links': {'factura': 1}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_notifies_only_new_assignees(self):
        task = TestDataFactory.create_task(created_by=self.user, assignees=[self.assignee])
        newcomer = TestDataFactory.create_user()
        response = self.client.patch(f'/api/v1/tasks/{task.id}/', {
            'assignees': [self.assignee.id, newcomer.id],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Notification.objects.filter(user=newcomer).count(), 1)
        self.assertFalse(Notification.objects.filter(user=self.assignee).exists())

    def test_move_endpoint(self):
        task = TestDataFactory.create_task(created_by=self.user)
        response = self.client.post(f'/api/v1/tasks/{task.id}/move/', {'status': 'hecho'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['completed_at'])

    def test_overdue_filter(self):
        TestDataFactory.create_task(created_by=self.user, due_at=timezone.now() - timedelta(days=3))
        TestDataFactory.create_task(created_by=self.user, due_at=timezone.now() + timedelta(days=3))
        TestDataFactory.create_task(created_by=self.user, due_at=timezone.now() - timedelta(days=3), status='hecho')
        response = self.client.get('/api/v1/tasks/?overdue=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertTrue(response.data['results'][0]['is_overdue'])

    def test_own_scope_sees_assigned_and_created(self):
        role = TestDataFactory.create_role(data_scope='own')
        seller = TestDataFactory.create_user(role=role)
        TestDataFactory.create_task(created_by=seller)
        TestDataFactory.create_task(created_by=self.user, assignees=[seller])
        hidden = TestDataFactory.create_task(created_by=self.user)
        self.client.authenticate_user(seller)
        response = self.client.get('/api/v1/tasks/')
        self.assertEqual(response.data['count'], 2)
        response = self.client.get(f'/api/v1/tasks/{hidden.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_toggle_subtask_endpoint(self):
        task = TestDataFactory.create_task(created_by=self.user,
                                           subtasks=[{'id': 's1', 'text': 'Firmar', 'is_completed': False}])
        response = self.client.post(f'/api/v1/tasks/{task.id}/subtasks/s1/toggle/', format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['subtasks'][0]['is_completed'])
        response = self.client.post(f'/api/v1/tasks/{task.id}/subtasks/nope/toggle/', format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_board_columns(self):
        TestDataFactory.create_task(created_by=self.user)
        TestDataFactory.create_task(created_by=self.user, status='en_progreso')
        response = self.client.get('/api/v1/tasks/board/')
        counts = {column['stage']: column['count'] for column in response.data['columns']}
        self.assertEqual(counts, {'por_hacer': 1, 'en_progreso': 1, 'hecho': 0})

    def test_project_progress(self):
        project = Project.objects.create(name='Expansión Bajío', owner=self.user)
        TestDataFactory.create_task(created_by=self.user, project=project, status='hecho')
        TestDataFactory.create_task(created_by=self.user, project=project)
        TestDataFactory.create_task(created_by=self.user, project=project)
        response = self.client.get(f'/api/v1/projects/{project.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['progress'], 33)
        self.assertEqual(len(response.data['tasks']), 3)

    def test_comments(self):
        task = TestDataFactory.create_task(created_by=self.user)
        response = self.client.post(f'/api/v1/tasks/{task.id}/comments/', {'text': 'Listo el flete'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get(f'/api/v1/tasks/{task.id}/')
        self.assertEqual(len(response.data['comments']), 1)
