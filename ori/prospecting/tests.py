"""
Test suite for the prospecting module
Tests: location normalization, dataset import, duplicates, candidate review workflow, profile views
"""
from decimal import Decimal
from unittest.mock import patch, MagicMock

import requests
from django.test import TestCase
from rest_framework import status
from ori.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from ori.core.models import Notification
from ori.crm.models import ActivityLog, Note, Prospect
from ori.prospecting.models import Brand, Candidate, ImportHistory
from ori.prospecting.services import (
    CandidateError, CandidateImportError, normalize_location, import_candidates, find_duplicates,
    approve_candidate, reject_candidate, set_candidate_status, record_profile_view
)

DATASET_URL = 'https://api.apify.com/v2/datasets/abc123/items?format=json'


def fake_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f'{status_code} Error')
    return response


def place(place_id, title, **extra):
    data = {
        'placeId': place_id,
        'title': title,
        'address': 'Av. Constitución 100, Centro, Monterrey, Nuevo León, 64000',
        'phone': '+52 81 1234 5678',
        'website': 'https://example.mx',
        'url': f'https://maps.google.com/?cid={place_id}',
        'categoryName': 'Distribuidor de plásticos',
        'totalScore': 4.6,
        'reviewsCount': 38,
        'location': {'lat': 25.6866142, 'lng': -100.3161126},
    }
    data.update(extra)
    return data


class NormalizeLocationTests(TestCase):
    def test_explicit_fields(self):
        self.assertEqual(normalize_location({'city': 'León', 'state': 'Guanajuato'}), ('León', 'Guanajuato'))

    def test_mexico_city_collapses(self):
        self.assertEqual(normalize_location({'city': 'Mexico City', 'state': 'Ciudad de México'}), ('CDMX', 'CDMX'))

    def test_state_from_address(self):
        city, state = normalize_location({'address': 'Calle 5 123, San Nicolás, Monterrey, Nuevo León, 64000'})
        self.assertEqual((city, state), ('Monterrey', 'Nuevo León'))

    def test_mexico_city_in_address(self):
        city, state = normalize_location({'address': 'Reforma 222, Juárez, Ciudad de México, 06600'})
        self.assertEqual((city, state), ('CDMX', 'CDMX'))

    def test_unknown_address(self):
        self.assertEqual(normalize_location({'address': 'Somewhere, Texas'}), ('', ''))


class ImportCandidatesTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.existing = TestDataFactory.create_candidate(name='Viejo Nombre', place_id='p2')

    @patch('ori.prospecting.services.requests.get')
    def test_import_skips_duplicates(self, mock_get):
        mock_get.return_value = fake_response([
            place('p1', 'Plásticos del Norte', emails=['ventas@pn.mx']),
            place('p2', 'Ya Existe'),
            place('p1', 'Repetido en el dataset'),
            'no es un lugar',
        ])
        history = import_candidates(DATASET_URL, self.user, search_terms=['plásticos'], location='Monterrey')

        self.assertEqual(history.status, 'completed')
        self.assertEqual(history.total_processed, 4)
        self.assertEqual(history.new_candidates, 1)
        self.assertEqual(history.duplicates_skipped, 2)
        self.assertIsNotNone(history.finished_at)

        candidate = Candidate.objects.get(google_place_id='p1')
        self.assertEqual(candidate.name, 'Plásticos del Norte')
        self.assertEqual(candidate.city, 'Monterrey')
        self.assertEqual(candidate.state, 'Nuevo León')
        self.assertEqual(candidate.email, 'ventas@pn.mx')
        self.assertEqual(candidate.raw_categories, ['Distribuidor de plásticos'])
        self.assertEqual(candidate.tags, ['plásticos'])
        self.assertEqual(candidate.average_rating, Decimal('4.60'))
        self.assertEqual(candidate.lat, Decimal('25.686614'))
        self.assertEqual(candidate.import_history, history)
        self.existing.refresh_from_db()
        self.assertEqual(self.existing.name, 'Viejo Nombre')

        notification = Notification.objects.get(user=self.user)
        self.assertEqual(notification.title, 'Importación Finalizada')
        mock_get.assert_called_once()

    @patch('ori.prospecting.services.requests.get')
    def test_loose_numeric_fields(self, mock_get):
        mock_get.return_value = fake_response([
            place('r1', 'Decimal', reviewsCount='12.0'),
            place('r2', 'Texto', reviewsCount='muchas', totalScore='N/A'),
            place('r3', 'Negativo', reviewsCount=-4, location={'lat': 'NaN', 'lng': None}),
        ])
        history = import_candidates(DATASET_URL, self.user)
        self.assertEqual(history.status, 'completed')
        self.assertEqual(history.new_candidates, 3)
        self.assertEqual(Candidate.objects.get(google_place_id='r1').reviews_count, 12)
        second = Candidate.objects.get(google_place_id='r2')
        self.assertEqual(second.reviews_count, 0)
        self.assertEqual(second.average_rating, Decimal('0'))
        third = Candidate.objects.get(google_place_id='r3')
        self.assertEqual(third.reviews_count, 0)
        self.assertIsNone(third.lat)

    @patch('ori.prospecting.services.requests.get')
    def test_forced_duplicate_refreshes_existing(self, mock_get):
        mock_get.return_value = fake_response([place('p2', 'Nombre Actualizado')])
        history = import_candidates(DATASET_URL, self.user, import_duplicates=['p2'])
        self.assertEqual(history.new_candidates, 1)
        self.assertEqual(history.duplicates_skipped, 0)
        self.existing.refresh_from_db()
        self.assertEqual(self.existing.name, 'Nombre Actualizado')
        self.assertEqual(self.existing.import_history, history)
        self.assertEqual(Candidate.objects.count(), 1)

    @patch('ori.prospecting.services.requests.get')
    def test_brand_criteria_and_associations(self, mock_get):
        default_brand = Brand.objects.create(name='Marca General')
        special_brand = Brand.objects.create(name='Marca Especial')
        mock_get.return_value = fake_response([place('a', 'Uno'), place('b', 'Dos')])
        import_candidates(DATASET_URL, self.user, criteria={'brand': default_brand.id},
                          brand_associations={'b': special_brand.id})
        self.assertEqual(Candidate.objects.get(google_place_id='a').brand, default_brand)
        self.assertEqual(Candidate.objects.get(google_place_id='b').brand, special_brand)

    @patch('ori.prospecting.services.requests.get')
    def test_network_error_marks_history_failed(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError('connection refused')
        with self.assertRaises(CandidateImportError):
            import_candidates(DATASET_URL, self.user)
        history = ImportHistory.objects.get()
        self.assertEqual(history.status, 'failed')
        self.assertIn('connection refused', history.error)

    @patch('ori.prospecting.services.requests.get')
    def test_non_list_payload_rejected(self, mock_get):
        mock_get.return_value = fake_response({'error': 'dataset not found'})
        with self.assertRaises(CandidateImportError):
            import_candidates(DATASET_URL, self.user)
        self.assertEqual(ImportHistory.objects.get().status, 'failed')

    def test_find_duplicates(self):
        duplicates = find_duplicates([place('p2', 'X'), place('nuevo', 'Y'), {'title': 'Sin id'}])
        self.assertEqual(len(duplicates), 1)
        self.assertEqual(duplicates[0]['candidate_id'], self.existing.id)


class CandidateWorkflowTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user(username='revisora')
        self.candidate = TestDataFactory.create_candidate(
            name='Envases Bajío', email='contacto@envases.mx', phones=['4421112233'],
            website='https://envases.mx', ai_analysis={'suggested_category': 'Envases'},
        )

    def test_completeness(self):
        self.assertEqual(self.candidate.get_completeness(), 90)
        bare = TestDataFactory.create_candidate()
        self.assertEqual(bare.get_completeness(), 0)
        bare.website = 'https://x.mx'
        bare.instagrams = ['@x']
        self.assertEqual(bare.get_completeness(), 30)

    def test_approve_creates_prospect(self):
        Note.objects.create(entity_type='candidate', entity_id=self.candidate.id, text='Buen volumen',
                            user=self.user)
        prospect = approve_candidate(self.candidate, self.user)

        self.assertEqual(prospect.stage, 'nuevo_lead')
        self.assertEqual(prospect.origin, 'Prospección IA')
        self.assertEqual(prospect.industry, 'Envases')
        self.assertEqual(prospect.phone, '4421112233')
        self.assertEqual(prospect.email, 'contacto@envases.mx')
        self.assertEqual(prospect.candidate, self.candidate)
        self.assertIn('Buen volumen', prospect.notes)
        self.candidate.refresh_from_db()
        self.assertEqual(self.candidate.status, 'aprobado')
        self.assertEqual(self.candidate.prospect, prospect)
        self.assertTrue(ActivityLog.objects.filter(candidate=self.candidate, prospect=prospect).exists())

    def test_approve_twice_or_blacklisted_fails(self):
        approve_candidate(self.candidate, self.user)
        with self.assertRaises(CandidateError):
            approve_candidate(self.candidate, self.user)
        blocked = TestDataFactory.create_candidate(status='lista_negra')
        with self.assertRaises(CandidateError):
            approve_candidate(blocked, self.user)
        self.assertEqual(Prospect.objects.count(), 1)

    def test_reject_and_blacklist(self):
        reject_candidate(self.candidate, self.user, 'Fuera de zona', notes='Solo entrega local')
        self.assertEqual(self.candidate.status, 'rechazado')
        self.assertEqual(self.candidate.rejection_reason, 'Fuera de zona')
        activity = ActivityLog.objects.get(candidate=self.candidate)
        self.assertIn('Rechazado (Motivo: Fuera de zona) - Solo entrega local', activity.description)

        reject_candidate(self.candidate, self.user, 'Competidor', blacklist=True)
        self.assertEqual(self.candidate.status, 'lista_negra')
        self.assertEqual(self.candidate.blacklist_reason, 'Competidor')

    def test_reject_requires_reason(self):
        with self.assertRaises(CandidateError):
            reject_candidate(self.candidate, self.user, '')

    def test_set_status_limited(self):
        self.assertTrue(set_candidate_status(self.candidate, 'en_revision', self.user))
        self.assertFalse(set_candidate_status(self.candidate, 'en_revision', self.user))
        with self.assertRaises(CandidateError):
            set_candidate_status(self.candidate, 'aprobado', self.user)

    def test_profile_view_counted_once_per_user(self):
        other = TestDataFactory.create_user()
        self.assertTrue(record_profile_view(self.candidate, self.user))
        self.assertFalse(record_profile_view(self.candidate, self.user))
        self.assertTrue(record_profile_view(self.candidate, other))
        self.assertEqual(self.candidate.profile_views, 2)


class ProspectingAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    @patch('ori.prospecting.services.requests.get')
    def test_import_endpoint(self, mock_get):
        mock_get.return_value = fake_response([place('x1', 'Uno'), place('x2', 'Dos')])
        response = self.client.post('/api/v1/candidates/import/', {
            'url': DATASET_URL,
            'search_terms': ['resinas'],
            'location': 'Monterrey',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['new_candidates'], 2)
        self.assertEqual(response.data['status'], 'completed')

    @patch('ori.prospecting.services.requests.get')
    def test_import_endpoint_reports_failure(self, mock_get):
        mock_get.return_value = fake_response([], status_code=404)
        response = self.client.post('/api/v1/candidates/import/', {'url': DATASET_URL}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['history']['status'], 'failed')

    def test_import_rejects_unknown_brand(self):
        response = self.client.post('/api/v1/candidates/import/', {
            'url': DATASET_URL, 'criteria': {'brand': 9999}
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('ori.prospecting.services.requests.get')
    def test_check_duplicates(self, mock_get):
        TestDataFactory.create_candidate(place_id='dup')
        mock_get.return_value = fake_response([place('dup', 'A'), place('new', 'B')])
        response = self.client.post('/api/v1/candidates/check-duplicates/', {'url': DATASET_URL}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(response.data['duplicate_count'], 1)

    def test_detail_records_single_view(self):
        candidate = TestDataFactory.create_candidate()
        self.client.get(f'/api/v1/candidates/{candidate.id}/')
        response = self.client.get(f'/api/v1/candidates/{candidate.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['profile_views'], 1)
        self.assertEqual(len(response.data['activities']), 1)

    def test_approve_endpoint(self):
        candidate = TestDataFactory.create_candidate(name='Resinas MX')
        response = self.client.post(f'/api/v1/candidates/{candidate.id}/approve/', format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['candidate']['status'], 'aprobado')
        self.assertEqual(response.data['prospect']['name'], 'Resinas MX')

    def test_blacklist_endpoint_requires_reason(self):
        candidate = TestDataFactory.create_candidate()
        response = self.client.post(f'/api/v1/candidates/{candidate.id}/blacklist/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/v1/candidates/{candidate.id}/blacklist/', {'reason': 'Spam'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'lista_negra')

    def test_status_endpoint_rejects_workflow_states(self):
        candidate = TestDataFactory.create_candidate()
        response = self.client.post(f'/api/v1/candidates/{candidate.id}/status/', {'status': 'aprobado'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_map_only_geolocated(self):
        TestDataFactory.create_candidate(lat=Decimal('20.588793'), lng=Decimal('-100.389888'))
        TestDataFactory.create_candidate()
        response = self.client.get('/api/v1/candidates/map/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_list_filters_by_status(self):
        TestDataFactory.create_candidate(status='pendiente')
        TestDataFactory.create_candidate(status='rechazado')
        response = self.client.get('/api/v1/candidates/?status=rechazado')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
