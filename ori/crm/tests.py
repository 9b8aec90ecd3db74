"""
Test suite for the crm module
Tests: pipeline moves, health score, prospect conversion, timeline, notes, scoping
"""
from datetime import timedelta
from decimal import Decimal
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.crm.models import ActivityLog, Contact, Note, SupportTicket
from ori.crm.services import (
    PipelineError, move_prospect_stage, compute_health_score, convert_prospect_to_company, log_activity
)


class ProspectPipelineTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.prospect = TestDataFactory.create_prospect(owner=self.user)

    def test_move_logs_stage_change(self):
        moved = move_prospect_stage(self.prospect, 'contactado', user=self.user)
        self.assertTrue(moved)
        self.prospect.refresh_from_db()
        self.assertEqual(self.prospect.stage, 'contactado')
        activity = ActivityLog.objects.get(prospect=self.prospect)
        self.assertEqual(activity.type, 'cambio_estado')
        self.assertEqual(activity.description, 'Etapa cambiada de Nuevo Lead a Contactado')

    def test_same_stage_is_noop(self):
        self.assertFalse(move_prospect_stage(self.prospect, 'nuevo_lead'))
        self.assertFalse(ActivityLog.objects.filter(prospect=self.prospect).exists())

    def test_lost_requires_reason(self):
        with self.assertRaises(PipelineError):
            move_prospect_stage(self.prospect, 'perdido')
        self.prospect.refresh_from_db()
        self.assertEqual(self.prospect.stage, 'nuevo_lead')

    def test_lost_stores_reason(self):
        move_prospect_stage(self.prospect, 'perdido', lost_reason='Precio', lost_notes='Eligió otro proveedor')
        self.prospect.refresh_from_db()
        self.assertEqual(self.prospect.lost_reason, 'Precio')
        self.assertEqual(self.prospect.lost_notes, 'Eligió otro proveedor')

    def test_unknown_stage_rejected(self):
        with self.assertRaises(PipelineError):
            move_prospect_stage(self.prospect, 'archivado')


class HealthScoreTests(TestCase):
    def setUp(self):
        self.company = TestDataFactory.create_company()

    def test_no_activity_is_at_risk(self):
        health = compute_health_score(self.company)
        self.assertEqual(health['score'], 0)
        self.assertEqual(health['label'], 'En Riesgo')
        self.assertEqual(health['days_since_last_activity'], 999)
        self.assertEqual(len(health['alerts']), 1)

    def test_recent_activity_is_healthy(self):
        log_activity('llamada', 'Seguimiento', company=self.company)
        health = compute_health_score(self.company)
        self.assertEqual(health['score'], 100)
        self.assertEqual(health['label'], 'Saludable')
        self.assertEqual(health['alerts'], [])

    def test_open_tickets_lower_score(self):
        log_activity('llamada', 'Seguimiento', company=self.company)
        SupportTicket.objects.create(company=self.company, subject='Entrega tardía')
        SupportTicket.objects.create(company=self.company, subject='Factura errónea')
        SupportTicket.objects.create(company=self.company, subject='Resuelto', status='cerrado')
        health = compute_health_score(self.company)
        self.assertEqual(health['open_tickets'], 2)
        self.assertEqual(health['score'], 60)
        self.assertEqual(health['label'], 'Estable')

    def test_sales_orders_add_to_score(self):
        log_activity('llamada', 'Seguimiento', company=self.company)
        TestDataFactory.create_sales_order(company=self.company, total=Decimal('500.00'))
        TestDataFactory.create_sales_order(company=self.company, total=Decimal('1500.00'))
        SupportTicket.objects.create(company=self.company, subject='Entrega tardía')
        health = compute_health_score(self.company, now=timezone.now() + timedelta(days=10))
        # 100 - 10 * 2 - 20 + 2 * 5
        self.assertEqual(health['score'], 70)
        self.assertEqual(health['lifetime_sales'], Decimal('2000.00'))
        self.assertEqual(health['avg_ticket'], Decimal('1000.00'))

    def test_label_uses_unrounded_score(self):
        activity = log_activity('llamada', 'Seguimiento', company=self.company)
        # 100 - 12.3 * 2 = 75.4
        health = compute_health_score(self.company, now=activity.created_at + timedelta(days=12.3))
        self.assertEqual(health['score'], 75)
        self.assertEqual(health['label'], 'Saludable')

        health = compute_health_score(self.company, now=activity.created_at + timedelta(days=12.5))
        self.assertEqual(health['score'], 75)
        self.assertEqual(health['label'], 'Estable')

    def test_cancelled_orders_count(self):
        activity = log_activity('llamada', 'Seguimiento', company=self.company)
        TestDataFactory.create_sales_order(company=self.company, total=Decimal('800.00'), status='cancelada')
        health = compute_health_score(self.company, now=activity.created_at + timedelta(days=20))
        # 100 - 20 * 2 + 1 * 5
        self.assertEqual(health['score'], 65)
        self.assertEqual(health['sales_count'], 1)
        self.assertEqual(health['lifetime_sales'], Decimal('800.00'))


class ProspectConversionTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_convert_creates_company_and_contact(self):
        prospect = TestDataFactory.create_prospect(owner=self.user, stage='negociacion', contact_name='Laura Ruiz',
                                                   email='laura@plasticos.mx')
        company = convert_prospect_to_company(prospect, user=self.user)
        self.assertEqual(company.stage, 'cliente_activo')
        self.assertEqual(company.owner, self.user)
        self.assertEqual(company.primary_contact.name, 'Laura Ruiz')
        self.assertTrue(company.primary_contact.is_primary)
        prospect.refresh_from_db()
        self.assertEqual(prospect.company, company)
        self.assertEqual(prospect.stage, 'ganado')

    def test_convert_without_contact_data(self):
        prospect = TestDataFactory.create_prospect(owner=self.user)
        company = convert_prospect_to_company(prospect)
        self.assertIsNone(company.primary_contact)
        self.assertFalse(Contact.objects.filter(company=company).exists())

    def test_convert_twice_fails(self):
        prospect = TestDataFactory.create_prospect(owner=self.user)
        convert_prospect_to_company(prospect)
        with self.assertRaises(PipelineError):
            convert_prospect_to_company(prospect)

    def test_convert_endpoint(self):
        prospect = TestDataFactory.create_prospect(owner=self.user, name='Polímeros del Norte')
        response = self.client.post(f'/api/v1/prospects/{prospect.id}/convert/', format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Polímeros del Norte')
        response = self.client.post(f'/api/v1/prospects/{prospect.id}/convert/', format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class CrmAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_company_defaults_owner(self):
        response = self.client.post('/api/v1/companies/', {'name': 'Envases Sol'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['owner'], self.user.id)

    def test_prospect_move_lost_without_reason(self):
        prospect = TestDataFactory.create_prospect(owner=self.user)
        response = self.client.post(f'/api/v1/prospects/{prospect.id}/move/', {'stage': 'perdido'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_prospect_move(self):
        prospect = TestDataFactory.create_prospect(owner=self.user)
        response = self.client.post(f'/api/v1/prospects/{prospect.id}/move/', {'stage': 'calificado'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stage'], 'calificado')

    def test_prospect_pipeline_columns(self):
        TestDataFactory.create_prospect(owner=self.user, est_value=Decimal('1000'))
        TestDataFactory.create_prospect(owner=self.user, est_value=Decimal('2500'))
        TestDataFactory.create_prospect(owner=self.user, stage='propuesta', est_value=Decimal('400'))
        response = self.client.get('/api/v1/prospects/pipeline/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        columns = {column['stage']: column for column in response.data['columns']}
        self.assertEqual(len(columns), 8)
        self.assertEqual(columns['nuevo_lead']['count'], 2)
        self.assertEqual(Decimal(str(columns['nuevo_lead']['value'])), Decimal('3500'))
        self.assertEqual(columns['ganado']['count'], 0)

    def test_company_detail_includes_health(self):
        company = TestDataFactory.create_company(owner=self.user)
        response = self.client.get(f'/api/v1/companies/{company.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('health', response.data)
        self.assertEqual(response.data['health']['label'], 'En Riesgo')

    def test_activity_requires_link(self):
        response = self.client.post('/api/v1/activities/', {'type': 'llamada', 'description': 'Sin vínculo'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_activity_create(self):
        company = TestDataFactory.create_company(owner=self.user)
        response = self.client.post('/api/v1/activities/', {
            'type': 'reunion', 'description': 'Visita a planta', 'company': company.id
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user'], self.user.id)

    def test_note_edit_by_other_user_forbidden(self):
        other = TestDataFactory.create_user()
        note = Note.objects.create(entity_type='company', entity_id=1, text='Original', user=other)
        response = self.client.patch(f'/api/v1/notes/{note.id}/', {'text': 'Cambio'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_notes_list_requires_entity(self):
        response = self.client.get('/api/v1/notes/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_ticket_close_sets_closed_at(self):
        company = TestDataFactory.create_company(owner=self.user)
        ticket = SupportTicket.objects.create(company=company, subject='Fuga en tambo')
        response = self.client.patch(f'/api/v1/tickets/{ticket.id}/', {'status': 'cerrado'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['closed_at'])

    def test_own_scope_hides_other_companies(self):
        role = TestDataFactory.create_role(data_scope='own')
        seller = TestDataFactory.create_user(role=role)
        other = TestDataFactory.create_company(owner=self.user)
        self.client.authenticate_user(seller)
        response = self.client.get(f'/api/v1/companies/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
