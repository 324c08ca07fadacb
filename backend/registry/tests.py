"""
Tests for death registrations, the status workflow and admin overrides
"""
import shutil
import tempfile
from datetime import date, timedelta
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status

from backend.core.exceptions import ServiceError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.registry.models import DeceasedRecord, DeathRegistration, compute_age
from backend.registry.workflow import (
    apply_status, apply_override, can_transition, registration_fee, processing_due_date
)


class WorkflowTests(TestCase):
    def setUp(self):
        self.employee = TestDataFactory.create_employee()

    def test_fees_and_due_dates(self):
        self.assertEqual(registration_fee('REGULAR'), Decimal('50.00'))
        self.assertEqual(registration_fee('DELAYED'), Decimal('150.00'))
        today = timezone.localdate()
        self.assertEqual(processing_due_date('REGULAR', start=today), today + timedelta(days=3))
        self.assertEqual(processing_due_date('DELAYED', start=today), today + timedelta(days=10))

    def test_compute_age(self):
        self.assertEqual(compute_age(date(1950, 1, 15), date(2024, 3, 10)), 74)
        self.assertEqual(compute_age(date(2000, 5, 1), date(2000, 5, 1)), 0)
        self.assertIsNone(compute_age(None, date(2024, 1, 1)))

    def test_full_lifecycle(self):
        registration = TestDataFactory.create_registration()
        for next_status in ['PENDING_VERIFICATION', 'FOR_PAYMENT', 'PAID', 'REGISTERED', 'FOR_PICKUP', 'CLAIMED']:
            apply_status(registration, next_status, user=self.employee)
        registration.refresh_from_db()
        self.assertEqual(registration.status, 'CLAIMED')
        self.assertEqual(registration.pickup_status, 'CLAIMED')
        self.assertEqual(registration.verified_by, self.employee)
        self.assertIsNotNone(registration.verified_at)
        self.assertIsNotNone(registration.registered_at)

    def test_transition_table(self):
        expected = {
            ('DRAFT', 'SUBMITTED'),
            ('SUBMITTED', 'PENDING_VERIFICATION'), ('SUBMITTED', 'PROCESSING'),
            ('SUBMITTED', 'REJECTED'), ('SUBMITTED', 'RETURNED'),
            ('PENDING_VERIFICATION', 'PROCESSING'), ('PENDING_VERIFICATION', 'FOR_PAYMENT'),
            ('PENDING_VERIFICATION', 'REJECTED'), ('PENDING_VERIFICATION', 'RETURNED'),
            ('FOR_PAYMENT', 'PAID'), ('FOR_PAYMENT', 'EXPIRED'),
            ('PROCESSING', 'PAID'), ('PROCESSING', 'FOR_PAYMENT'), ('PROCESSING', 'REJECTED'),
            ('PAID', 'REGISTERED'),
            ('REGISTERED', 'FOR_PICKUP'),
            ('FOR_PICKUP', 'CLAIMED'),
            ('RETURNED', 'SUBMITTED'),
        }
        statuses = [code for code, _ in DeathRegistration.STATUS_CHOICES]
        registration = TestDataFactory.create_registration()
        for current in statuses:
            for new_status in statuses:
                with self.subTest(current=current, new_status=new_status):
                    allowed = (current, new_status) in expected
                    self.assertEqual(can_transition(current, new_status), allowed)
                    registration.status = current
                    if allowed:
                        self.assertEqual(apply_status(registration, new_status, user=self.employee), current)
                        self.assertEqual(registration.status, new_status)
                    else:
                        with self.assertRaises(ServiceError):
                            apply_status(registration, new_status, user=self.employee)
                        self.assertEqual(registration.status, current)

    def test_invalid_transition(self):
        registration = TestDataFactory.create_registration()
        with self.assertRaises(ServiceError) as ctx:
            apply_status(registration, 'REGISTERED')
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.details['from'], 'SUBMITTED')
        self.assertIn('PROCESSING', ctx.exception.details['allowed'])

    def test_terminal_status_has_no_transitions(self):
        registration = TestDataFactory.create_registration(status='REJECTED')
        with self.assertRaises(ServiceError):
            apply_status(registration, 'SUBMITTED')

    def test_unknown_status(self):
        registration = TestDataFactory.create_registration()
        with self.assertRaises(ServiceError):
            apply_status(registration, 'ARCHIVED')

    def test_override_requires_reason(self):
        registration = TestDataFactory.create_registration()
        with self.assertRaises(ServiceError):
            apply_override(registration, 'approve', '  ')

    def test_override_approve_bypasses_table(self):
        registration = TestDataFactory.create_registration()
        message = apply_override(registration, 'approve', 'Walk-in with complete documents')
        registration.refresh_from_db()
        self.assertEqual(registration.status, 'REGISTERED')
        self.assertEqual(registration.pickup_status, 'READY_FOR_PICKUP')
        self.assertIn('Walk-in with complete documents', message)
        self.assertIn('ADMIN OVERRIDE', registration.notes)

    def test_override_adjust_fee(self):
        registration = TestDataFactory.create_registration()
        apply_override(registration, 'adjust_fee', 'Senior citizen discount', new_amount='25.5')
        registration.refresh_from_db()
        self.assertEqual(registration.amount_due, Decimal('25.50'))
        with self.assertRaises(ServiceError):
            apply_override(registration, 'adjust_fee', 'oops', new_amount='-1')

    def test_override_edit_rejects_unknown_fields(self):
        registration = TestDataFactory.create_registration()
        with self.assertRaises(ServiceError):
            apply_override(registration, 'edit', 'typo', changes={'status': 'CLAIMED'})
        apply_override(registration, 'edit', 'typo', changes={'informantName': 'Pedro Cruz'})
        registration.refresh_from_db()
        self.assertEqual(registration.informant_name, 'Pedro Cruz')

    def test_override_reset_status(self):
        registration = TestDataFactory.create_registration(status='REGISTERED', pickup_status='READY_FOR_PICKUP')
        apply_override(registration, 'reset_status', 'Registered by mistake')
        registration.refresh_from_db()
        self.assertEqual(registration.status, 'SUBMITTED')
        self.assertEqual(registration.pickup_status, 'NOT_READY')


class RegistrationAPITests(TestCase):
    def setUp(self):
        self.citizen = TestDataFactory.create_user()
        self.employee = TestDataFactory.create_employee()
        self.admin = TestDataFactory.create_admin()
        self.citizen_client = AuthenticatedAPIClient().authenticate_user(self.citizen)
        self.employee_client = AuthenticatedAPIClient().authenticate_user(self.employee)
        self.admin_client = AuthenticatedAPIClient().authenticate_user(self.admin)

    def payload(self, registration_type='regular'):
        return {
            'registrationType': registration_type,
            'deceased': {
                'firstName': 'Lola',
                'lastName': 'Basyang',
                'sex': 'female',
                'dateOfBirth': '1940-02-01',
                'dateOfDeath': '2024-02-01',
            },
            'informantName': 'Maria Basyang',
            'informantRelationship': 'Daughter',
        }

    def test_citizen_files_registration(self):
        response = self.citizen_client.post('/api/v1/death-registrations/', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        year = timezone.now().year
        self.assertEqual(response.data['registrationNumber'], f'DR-{year}-000001')
        self.assertEqual(response.data['status'], 'SUBMITTED')
        self.assertEqual(response.data['amountDue'], '50.00')
        self.assertEqual(response.data['deceased']['sex'], 'FEMALE')
        self.assertEqual(response.data['deceased']['age'], 84)
        self.assertEqual(response.data['submittedBy']['id'], self.citizen.id)
        self.assertTrue(AuditLog.objects.filter(action='DEATH_REGISTRATION_CREATED').exists())

        response = self.citizen_client.post('/api/v1/death-registrations/', self.payload('DELAYED'), format='json')
        self.assertEqual(response.data['registrationNumber'], f'DR-{year}-000002')
        self.assertEqual(response.data['amountDue'], '150.00')

    def test_registration_rejects_death_before_birth(self):
        payload = self.payload()
        payload['deceased']['dateOfDeath'] = '1930-01-01'
        response = self.citizen_client.post('/api/v1/death-registrations/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(DeceasedRecord.objects.exists())

    def test_citizen_cannot_list_all(self):
        response = self.citizen_client.get('/api/v1/death-registrations/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_employee_list_filters(self):
        TestDataFactory.create_registration(status='SUBMITTED')
        TestDataFactory.create_registration(status='PROCESSING',
                                            deceased=TestDataFactory.create_deceased(last_name='Santos'))
        TestDataFactory.create_registration(registration_type='DELAYED', status='REJECTED')

        response = self.employee_client.get('/api/v1/death-registrations/?status=submitted,processing')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.employee_client.get('/api/v1/death-registrations/?search=santos')
        self.assertEqual(len(response.data['registrations']), 1)

        response = self.employee_client.get('/api/v1/death-registrations/?type=delayed')
        self.assertEqual(response.data['registrations'][0]['status'], 'REJECTED')

    def test_detail_visibility(self):
        own = TestDataFactory.create_registration(user=self.citizen)
        other = TestDataFactory.create_registration(user=TestDataFactory.create_user())
        self.assertEqual(self.citizen_client.get(f'/api/v1/death-registrations/{own.id}/').status_code,
                         status.HTTP_200_OK)
        self.assertEqual(self.citizen_client.get(f'/api/v1/death-registrations/{other.id}/').status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.employee_client.get(f'/api/v1/death-registrations/{other.id}/').status_code,
                         status.HTTP_200_OK)

    def test_status_update(self):
        registration = TestDataFactory.create_registration()
        response = self.employee_client.patch(f'/api/v1/death-registrations/{registration.id}/status/',
                                              {'status': 'processing', 'remarks': 'Documents complete'},
                                              format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'PROCESSING')
        self.assertEqual(response.data['remarks'], 'Documents complete')
        log = AuditLog.objects.get(action='DEATH_REGISTRATION_STATUS_CHANGED')
        self.assertEqual(log.changes, {'from': 'SUBMITTED', 'to': 'PROCESSING'})

    def test_status_update_invalid_transition(self):
        registration = TestDataFactory.create_registration()
        response = self.employee_client.patch(f'/api/v1/death-registrations/{registration.id}/status/',
                                              {'status': 'CLAIMED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details']['allowed'],
                         ['PENDING_VERIFICATION', 'PROCESSING', 'REJECTED', 'RETURNED'])

    def test_status_update_requires_employee(self):
        registration = TestDataFactory.create_registration(user=self.citizen)
        response = self.citizen_client.patch(f'/api/v1/death-registrations/{registration.id}/status/',
                                             {'status': 'PROCESSING'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_override_is_admin_only(self):
        registration = TestDataFactory.create_registration()
        body = {'action': 'waive_fee', 'reason': 'Indigent family'}
        response = self.employee_client.post(f'/api/v1/death-registrations/{registration.id}/override/', body,
                                             format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.admin_client.post(f'/api/v1/death-registrations/{registration.id}/override/', body,
                                          format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['registration']['amountDue'], '0.00')
        self.assertIn('Fee waived', response.data['message'])

    def test_override_invalid_action(self):
        registration = TestDataFactory.create_registration()
        response = self.admin_client.post(f'/api/v1/death-registrations/{registration.id}/override/',
                                          {'action': 'teleport', 'reason': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_delete_removes_orphan_deceased(self):
        registration = TestDataFactory.create_registration()
        response = self.employee_client.delete(f'/api/v1/death-registrations/{registration.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.admin_client.delete(f'/api/v1/death-registrations/{registration.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(DeathRegistration.objects.exists())
        self.assertFalse(DeceasedRecord.objects.exists())

    def test_delete_keeps_deceased_with_plot(self):
        registration = TestDataFactory.create_registration()
        TestDataFactory.create_assignment(TestDataFactory.create_plot(), deceased=registration.deceased)
        self.admin_client.delete(f'/api/v1/death-registrations/{registration.id}/')
        self.assertTrue(DeceasedRecord.objects.filter(pk=registration.deceased_id).exists())

    def test_citizen_dashboard_counts(self):
        TestDataFactory.create_registration(user=self.citizen, status='PROCESSING')
        TestDataFactory.create_registration(user=self.citizen, status='CLAIMED')
        TestDataFactory.create_registration(user=TestDataFactory.create_user())

        response = self.citizen_client.get('/api/v1/citizen/death-registrations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        counts = response.data['statusCounts']
        self.assertEqual(counts['total'], 2)
        self.assertEqual(counts['PROCESSING'], 1)
        self.assertEqual(counts['CLAIMED'], 1)
        self.assertEqual(counts['REJECTED'], 0)

    def test_citizen_deceased_only_completed(self):
        done = TestDataFactory.create_registration(user=self.citizen, status='REGISTERED')
        TestDataFactory.create_registration(user=self.citizen, status='SUBMITTED')
        response = self.citizen_client.get('/api/v1/citizen/deceased/')
        self.assertEqual([d['id'] for d in response.data['deceased']], [done.deceased_id])


class RegistrationDocumentTests(TestCase):
    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.settings_override = override_settings(MEDIA_ROOT=self.media_root)
        self.settings_override.enable()
        self.citizen = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.citizen)
        self.registration = TestDataFactory.create_registration(user=self.citizen)

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def url(self):
        return f'/api/v1/death-registrations/{self.registration.id}/documents/'

    def test_upload_pdf(self):
        upload = SimpleUploadedFile('certificate.pdf', b'%PDF-1.4 test', content_type='application/pdf')
        response = self.client.post(self.url(), {'file': upload, 'docType': 'DEATH_CERTIFICATE'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['originalName'], 'certificate.pdf')
        self.assertEqual(self.registration.documents.count(), 1)

    def test_rejects_other_types(self):
        upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
        response = self.client.post(self.url(), {'file': upload, 'docType': 'OTHER'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(MAX_UPLOAD_SIZE=4)
    def test_rejects_large_files(self):
        upload = SimpleUploadedFile('big.png', b'0123456789', content_type='image/png')
        response = self.client.post(self.url(), {'file': upload, 'docType': 'ID'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_citizen_cannot_upload(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        upload = SimpleUploadedFile('certificate.pdf', b'%PDF', content_type='application/pdf')
        response = client.post(self.url(), {'file': upload, 'docType': 'ID'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class DeceasedAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())

    def test_create_and_search(self):
        response = self.client.post('/api/v1/deceased/', {
            'firstName': 'Gabriela', 'lastName': 'Silang', 'dateOfBirth': '1731-03-19', 'dateOfDeath': '1763-09-20',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['age'], 32)
        TestDataFactory.create_deceased()

        response = self.client.get('/api/v1/deceased/?search=silang')
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_delete_in_use_blocked(self):
        registration = TestDataFactory.create_registration()
        response = self.client.delete(f'/api/v1/deceased/{registration.deceased_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        unused = TestDataFactory.create_deceased()
        response = self.client.delete(f'/api/v1/deceased/{unused.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
