"""
Test suite for the core module
Tests: auth, data scope, invitations, notifications, settings helpers, global search
"""
from django.test import TestCase
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.core.models import AuditLog, Invitation, Notification
from ori.core.utils import scope_queryset, notify, get_setting_json, set_setting_json, create_audit_log
from ori.crm.models import Company


class AuthTests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens(self):
        TestDataFactory.create_user(username='ventas', password='Str0ngPass!2024')
        response = self.client.post('/api/v1/auth/login/', {'username': 'ventas', 'password': 'Str0ngPass!2024'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_cannot_promote_self(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.patch('/api/v1/auth/me/', {'is_staff': True, 'first_name': 'Ana'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertFalse(user.is_staff)
        self.assertEqual(user.first_name, 'Ana')


class DataScopeTests(TestCase):
    """scope_queryset restricts rows by role data scope"""

    def setUp(self):
        self.team = TestDataFactory.create_team()
        self.own_role = TestDataFactory.create_role(data_scope='own')
        self.team_role = TestDataFactory.create_role(data_scope='team')
        self.user = TestDataFactory.create_user(role=self.own_role, team=self.team)
        self.teammate = TestDataFactory.create_user(team=self.team)
        self.stranger = TestDataFactory.create_user()
        self.mine = TestDataFactory.create_company(owner=self.user)
        self.teams = TestDataFactory.create_company(owner=self.teammate)
        self.other = TestDataFactory.create_company(owner=self.stranger)

    def test_own_scope(self):
        visible = scope_queryset(self.user, Company.objects.all())
        self.assertEqual(list(visible), [self.mine])

    def test_team_scope(self):
        self.user.role = self.team_role
        self.user.save()
        visible = set(scope_queryset(self.user, Company.objects.all()))
        self.assertEqual(visible, {self.mine, self.teams})

    def test_user_without_role_sees_all(self):
        visible = scope_queryset(self.stranger, Company.objects.all())
        self.assertEqual(visible.count(), 3)


class InvitationTests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_invite_and_accept(self):
        role = TestDataFactory.create_role(data_scope='own')
        response = self.client.post('/api/v1/invitations/', {
            'email': 'nuevo@test.com', 'name': 'Luis Pérez', 'role': role.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        invitation = Invitation.objects.get(email='nuevo@test.com')

        public = AuthenticatedAPIClient()
        response = public.post(f'/api/v1/invitations/token/{invitation.token}/accept/', {
            'username': 'luis', 'password': 'Str0ngPass!2024', 'password_confirm': 'Str0ngPass!2024'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        invitation.refresh_from_db()
        self.assertEqual(invitation.status, 'used')
        self.assertEqual(invitation.used_by.username, 'luis')
        self.assertEqual(invitation.used_by.role, role)
        self.assertEqual(invitation.used_by.last_name, 'Pérez')

        response = public.post(f'/api/v1/invitations/token/{invitation.token}/accept/', {
            'username': 'otro', 'password': 'Str0ngPass!2024', 'password_confirm': 'Str0ngPass!2024'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_admin_cannot_list_invitations(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/invitations/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class NotificationTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_unread_count_and_mark_all(self):
        notify(self.user, 'Uno', type='task')
        notify(self.user, 'Dos', type='system')
        notify(TestDataFactory.create_user(), 'Ajena')

        response = self.client.get('/api/v1/notifications/unread-count/')
        self.assertEqual(response.data['unread'], 2)

        response = self.client.post('/api/v1/notifications/read-all/')
        self.assertEqual(response.data['updated'], 2)
        self.assertFalse(Notification.objects.filter(user=self.user, is_read=False).exists())

    def test_notify_without_user_is_noop(self):
        self.assertIsNone(notify(None, 'Nada'))


class UtilsTests(TestCase):
    def test_setting_json_round_trip(self):
        self.assertEqual(get_setting_json('mail_sync', {}), {})
        set_setting_json('mail_sync', {'last_sync_request': '2026-01-01T00:00:00'})
        self.assertEqual(get_setting_json('mail_sync')['last_sync_request'], '2026-01-01T00:00:00')

    def test_audit_log_records_user(self):
        user = TestDataFactory.create_user()
        create_audit_log(action='create', model_name='Company', object_id=1, user=user, object_name='ACME')
        log = AuditLog.objects.get()
        self.assertEqual(log.user, user)
        self.assertEqual(log.object_name, 'ACME')


class GlobalSearchTests(TestCase):
    def test_search_across_entities(self):
        user = TestDataFactory.create_user()
        client = AuthenticatedAPIClient()
        client.authenticate_user(user)
        TestDataFactory.create_company(name='Polímeros del Norte')
        TestDataFactory.create_product(name='Polímero PET')

        response = client.get('/api/v1/search/?q=Polím')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['companies']), 1)
        self.assertEqual(len(response.data['products']), 1)
        self.assertEqual(response.data['quotes'], [])
