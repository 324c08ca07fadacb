"""
Tests for permit requests, the permit workflow and admin overrides
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.exceptions import ServiceError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.permits.models import Permit
from backend.permits.workflow import (
    apply_status, apply_override, can_transition, permit_fee, next_permit_number, PERMIT_VALIDITY_DAYS
)


class PermitWorkflowTests(TestCase):
    def test_fees(self):
        self.assertEqual(permit_fee(Permit.TYPE_BURIAL), Decimal('500.00'))
        self.assertEqual(permit_fee(Permit.TYPE_EXHUMATION), Decimal('1000.00'))
        self.assertEqual(permit_fee(Permit.TYPE_CREMATION), Decimal('750.00'))
        self.assertEqual(permit_fee('UNKNOWN'), Decimal('500.00'))

    def test_numbering_per_type(self):
        year = timezone.now().year
        self.assertEqual(next_permit_number(Permit.TYPE_EXHUMATION), f'EP-{year}-000001')
        TestDataFactory.create_permit(permit_type=Permit.TYPE_BURIAL)
        TestDataFactory.create_permit(permit_type=Permit.TYPE_BURIAL)
        self.assertEqual(next_permit_number(Permit.TYPE_BURIAL), f'BP-{year}-000003')
        self.assertEqual(next_permit_number(Permit.TYPE_CREMATION), f'CP-{year}-000001')

    def test_issue_sets_pickup_and_expiry(self):
        permit = TestDataFactory.create_permit()
        for next_status in ['FOR_PAYMENT', 'PAID', 'ISSUED']:
            apply_status(permit, next_status)
        permit.refresh_from_db()
        self.assertEqual(permit.pickup_status, 'READY')
        self.assertIsNotNone(permit.issued_at)
        self.assertEqual(permit.expiry_date, timezone.localdate() + timedelta(days=PERMIT_VALIDITY_DAYS))

        apply_status(permit, 'claimed')
        permit.refresh_from_db()
        self.assertEqual(permit.status, 'CLAIMED')
        self.assertEqual(permit.pickup_status, 'CLAIMED')

    def test_transition_table(self):
        expected = {
            ('DRAFT', 'SUBMITTED'), ('DRAFT', 'CANCELLED'),
            ('SUBMITTED', 'PENDING_VERIFICATION'), ('SUBMITTED', 'FOR_PAYMENT'),
            ('SUBMITTED', 'REJECTED'), ('SUBMITTED', 'CANCELLED'),
            ('PENDING_VERIFICATION', 'FOR_PAYMENT'), ('PENDING_VERIFICATION', 'REJECTED'),
            ('PENDING_VERIFICATION', 'CANCELLED'),
            ('FOR_PAYMENT', 'PAID'), ('FOR_PAYMENT', 'CANCELLED'),
            ('PAID', 'ISSUED'),
            ('ISSUED', 'FOR_PICKUP'), ('ISSUED', 'CLAIMED'),
            ('FOR_PICKUP', 'CLAIMED'),
        }
        statuses = [code for code, _ in Permit.STATUS_CHOICES]
        permit = TestDataFactory.create_permit()
        for current in statuses:
            for new_status in statuses:
                with self.subTest(current=current, new_status=new_status):
                    allowed = (current, new_status) in expected
                    self.assertEqual(can_transition(current, new_status), allowed)
                    permit.status = current
                    if allowed:
                        self.assertEqual(apply_status(permit, new_status), current)
                        self.assertEqual(permit.status, new_status)
                    else:
                        with self.assertRaises(ServiceError):
                            apply_status(permit, new_status)
                        self.assertEqual(permit.status, current)

    def test_cannot_skip_payment(self):
        permit = TestDataFactory.create_permit()
        with self.assertRaises(ServiceError):
            apply_status(permit, 'ISSUED')
        with self.assertRaises(ServiceError):
            apply_status(TestDataFactory.create_permit(status='CANCELLED'), 'SUBMITTED')

    def test_remarks_are_appended(self):
        permit = TestDataFactory.create_permit(remarks='Requested Date: 2025-01-10')
        apply_status(permit, 'PENDING_VERIFICATION', remarks='Checking documents')
        self.assertEqual(permit.remarks, 'Requested Date: 2025-01-10\nChecking documents')

    def test_override_actions(self):
        permit = TestDataFactory.create_permit()
        apply_override(permit, 'approve', 'Urgent burial')
        self.assertEqual(permit.status, 'ISSUED')
        self.assertEqual(permit.pickup_status, 'READY')

        apply_override(permit, 'reset_status', 'Issued in error')
        self.assertEqual(permit.status, 'SUBMITTED')
        self.assertIsNone(permit.issued_at)
        self.assertIsNone(permit.expiry_date)
        self.assertEqual(permit.pickup_status, 'NOT_READY')
        permit.refresh_from_db()
        self.assertIsNone(permit.expiry_date)

        apply_override(permit, 'adjust_fee', 'Discount', new_amount='250')
        self.assertEqual(permit.amount_due, Decimal('250.00'))
        self.assertEqual(permit.notes.count('ADMIN OVERRIDE'), 3)

    def test_override_validation(self):
        permit = TestDataFactory.create_permit()
        with self.assertRaises(ServiceError):
            apply_override(permit, 'approve', '')
        with self.assertRaises(ServiceError):
            apply_override(permit, 'adjust_fee', 'Discount')
        with self.assertRaises(ServiceError):
            apply_override(permit, 'adjust_fee', 'Discount', new_amount=-5)
        with self.assertRaises(ServiceError):
            apply_override(permit, 'archive', 'No such action')


class PermitAPITests(TestCase):
    def setUp(self):
        self.citizen = TestDataFactory.create_user()
        self.citizen_client = AuthenticatedAPIClient().authenticate_user(self.citizen)
        self.employee_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        self.registration = TestDataFactory.create_registration(user=self.citizen, status='REGISTERED')

    def test_citizen_requests_permit(self):
        response = self.citizen_client.post('/api/v1/permits/', {
            'permitType': 'burial',
            'deathId': self.registration.id,
            'requestedDate': '2025-01-10',
            'contactPerson': 'Maria',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['permitType'], 'burial')
        self.assertEqual(response.data['status'], 'submitted')
        self.assertEqual(response.data['amountDue'], '500.00')
        self.assertEqual(response.data['registrationNumber'], self.registration.registration_number)
        self.assertEqual(response.data['deceased']['id'], self.registration.deceased_id)
        self.assertEqual(response.data['requester']['email'], self.citizen.email)
        self.assertEqual(response.data['remarks'], 'Requested Date: 2025-01-10\nContact Person: Maria')
        self.assertTrue(AuditLog.objects.filter(action='PERMIT_CREATED').exists())

    def test_unknown_death_registration(self):
        response = self.citizen_client.post('/api/v1/permits/', {'permitType': 'BURIAL', 'deathId': 99999},
                                            format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_cannot_reference_another_citizens_registration(self):
        other = TestDataFactory.create_registration(user=TestDataFactory.create_user())
        response = self.citizen_client.post('/api/v1/permits/', {'permitType': 'CREMATION', 'deathId': other.id},
                                            format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Permit.objects.exists())

    def test_invalid_permit_type(self):
        response = self.citizen_client.post('/api/v1/permits/', {'permitType': 'WEDDING'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_scoping(self):
        TestDataFactory.create_permit(user=self.citizen)
        TestDataFactory.create_permit(user=TestDataFactory.create_user(), permit_type=Permit.TYPE_EXHUMATION)

        response = self.citizen_client.get('/api/v1/permits/')
        self.assertEqual(response.data['pagination']['total'], 1)

        response = self.employee_client.get('/api/v1/permits/')
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.employee_client.get('/api/v1/permits/?type=exhumation')
        self.assertEqual([p['permitType'] for p in response.data['permits']], ['exhumation'])

    def test_detail_visibility(self):
        other = TestDataFactory.create_permit(user=TestDataFactory.create_user())
        response = self.citizen_client.get(f'/api/v1/permits/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.employee_client.get(f'/api/v1/permits/{other.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_status_change(self):
        permit = TestDataFactory.create_permit(user=self.citizen)
        response = self.employee_client.patch(f'/api/v1/permits/{permit.id}/status/',
                                              {'status': 'FOR_PAYMENT'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'for_payment')

        response = self.employee_client.patch(f'/api/v1/permits/{permit.id}/status/',
                                              {'status': 'ISSUED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.citizen_client.patch(f'/api/v1/permits/{permit.id}/status/',
                                             {'status': 'PAID'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_override_audit_action(self):
        permit = TestDataFactory.create_permit()
        response = self.admin_client.post(f'/api/v1/permits/{permit.id}/override/',
                                          {'action': 'waive_fee', 'reason': 'Indigent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['permit']['amountDue'], '0.00')
        self.assertTrue(AuditLog.objects.filter(action='PERMIT_OVERRIDE_WAIVE_FEE').exists())

    def test_delete_admin_only(self):
        permit = TestDataFactory.create_permit()
        self.assertEqual(self.employee_client.delete(f'/api/v1/permits/{permit.id}/').status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.admin_client.delete(f'/api/v1/permits/{permit.id}/').status_code,
                         status.HTTP_204_NO_CONTENT)
        self.assertFalse(Permit.objects.exists())
