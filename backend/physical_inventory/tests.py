"""
Tests for physical count sessions and stock adjustments
"""
from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.exceptions import ServiceError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import StockMovement
from backend.inventory.services import current_stock
from backend.physical_inventory import services
from backend.physical_inventory.models import PhysicalCountSession, PhysicalCountEntry


class CountSessionServiceTests(TestCase):
    def setUp(self):
        self.paper = TestDataFactory.create_item(item_code='PAPER', unit_cost=Decimal('200.00'), stock=10)
        self.pens = TestDataFactory.create_item(item_code='PENS', unit_cost=Decimal('8.00'), stock=50)
        self.session = services.create_session(date(2025, 6, 30), 'Audit Team')

    def test_session_numbering(self):
        year = timezone.now().year
        self.assertEqual(self.session.session_number, f'PC-{year}-00001')
        second = services.create_session(date(2025, 6, 30), 'Audit Team')
        self.assertEqual(second.session_number, f'PC-{year}-00002')

    def test_entry_computes_variance(self):
        entry = services.add_entry(self.session, self.paper, 7)
        self.assertEqual(entry.system_quantity, 10)
        self.assertEqual(entry.variance, -3)
        self.assertEqual(entry.discrepancy_value, Decimal('-600.00'))

    def test_duplicate_entry_conflicts(self):
        services.add_entry(self.session, self.paper, 10)
        with self.assertRaises(ServiceError) as ctx:
            services.add_entry(self.session, self.paper, 9)
        self.assertEqual(ctx.exception.status_code, 409)

    def test_complete_balanced(self):
        services.add_entry(self.session, self.paper, 10)
        services.complete_session(self.session)
        self.assertEqual(self.session.status, PhysicalCountSession.STATUS_BALANCED)
        self.assertEqual(self.session.items_counted, 1)
        self.assertEqual(self.session.discrepancies, 0)
        self.assertIsNotNone(self.session.completed_at)

        with self.assertRaises(ServiceError):
            services.add_entry(self.session, self.pens, 50)
        with self.assertRaises(ServiceError):
            services.adjust_session(self.session)

    def test_complete_requires_entries(self):
        with self.assertRaises(ServiceError):
            services.complete_session(self.session)

    def test_adjust_posts_variances(self):
        services.add_entry(self.session, self.paper, 7)
        services.add_entry(self.session, self.pens, 52)
        services.complete_session(self.session)
        self.assertEqual(self.session.status, PhysicalCountSession.STATUS_DISCREPANCY)
        self.assertEqual(self.session.discrepancies, 2)

        movements = services.adjust_session(self.session)
        self.assertEqual(len(movements), 2)
        self.assertEqual(current_stock(self.paper), 7)
        self.assertEqual(current_stock(self.pens), 52)
        self.assertTrue(self.session.adjustment_made)
        self.assertEqual(self.session.status, PhysicalCountSession.STATUS_COMPLETED)
        self.assertEqual(
            StockMovement.objects.filter(reference_type='PHYSICAL_COUNT',
                                         reference_id=self.session.session_number).count(),
            2,
        )

        with self.assertRaises(ServiceError):
            services.adjust_session(self.session)

    def test_adjust_can_go_negative(self):
        services.add_entry(self.session, self.paper, 0)
        services.complete_session(self.session)
        services.adjust_session(self.session)
        self.assertEqual(current_stock(self.paper), 0)

    def test_adjust_twice_from_stale_copy_posts_once(self):
        services.add_entry(self.session, self.paper, 7)
        services.complete_session(self.session)
        stale = PhysicalCountSession.objects.get(pk=self.session.pk)

        services.adjust_session(self.session)
        with self.assertRaises(ServiceError):
            services.adjust_session(stale)
        self.assertEqual(current_stock(self.paper), 7)
        self.assertEqual(StockMovement.objects.filter(reference_type='PHYSICAL_COUNT').count(), 1)

    def test_adjust_before_completion(self):
        services.add_entry(self.session, self.paper, 1)
        with self.assertRaises(ServiceError):
            services.adjust_session(self.session)


class CountSessionAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.item = TestDataFactory.create_item(item_code='PAPER', unit_cost=Decimal('200.00'), stock=10)

    def create_session(self):
        response = self.client.post('/api/v1/physical-inventory/sessions/', {'conductedBy': 'Audit Team'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data

    def test_create_defaults_count_date(self):
        data = self.create_session()
        self.assertEqual(data['countDate'], timezone.localdate().isoformat())
        self.assertEqual(data['status'], 'IN_PROGRESS')

    def test_create_requires_conductor(self):
        response = self.client.post('/api/v1/physical-inventory/sessions/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_entries(self):
        session_id = self.create_session()['id']
        url = f'/api/v1/physical-inventory/sessions/{session_id}/entries/'

        response = self.client.post(url, {'itemId': self.item.id, 'actualQuantity': 8}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['variance'], -2)
        self.assertEqual(response.data['discrepancyValue'], '-400.00')

        response = self.client.post(url, {'itemId': self.item.id, 'actualQuantity': 8}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        response = self.client.post(url, {'itemId': 99999, 'actualQuantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.post(url, {'itemId': self.item.id, 'actualQuantity': 'many'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {'itemId': self.item.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get(url)
        self.assertEqual(len(response.data), 1)

    def test_complete_and_adjust(self):
        session_id = self.create_session()['id']
        base = f'/api/v1/physical-inventory/sessions/{session_id}'

        response = self.client.post(f'{base}/complete/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.post(f'{base}/entries/', {'itemId': self.item.id, 'actualQuantity': 12}, format='json')
        response = self.client.post(f'{base}/complete/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'DISCREPANCY_FOUND')
        self.assertEqual(len(response.data['entries']), 1)

        response = self.client.post(f'{base}/adjust/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['adjustments'], 1)
        self.assertEqual(response.data['session']['status'], 'COMPLETED')
        self.assertTrue(response.data['session']['adjustmentMade'])
        self.assertEqual(current_stock(self.item), 12)
        log = AuditLog.objects.get(action='INVENTORY_ADJUSTED')
        self.assertEqual(log.changes['adjustments'], [{'item': 'PAPER', 'quantity': 2}])

    def test_delete_only_in_progress(self):
        session_id = self.create_session()['id']
        self.client.post(f'/api/v1/physical-inventory/sessions/{session_id}/entries/',
                         {'itemId': self.item.id, 'actualQuantity': 10}, format='json')
        response = self.client.delete(f'/api/v1/physical-inventory/sessions/{session_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PhysicalCountEntry.objects.exists())

        session = services.create_session(date(2025, 1, 1), 'Audit Team')
        services.add_entry(session, self.item, 10)
        services.complete_session(session)
        response = self.client.delete(f'/api/v1/physical-inventory/sessions/{session.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_by_status(self):
        self.create_session()
        session = services.create_session(date(2025, 1, 1), 'Audit Team')
        services.add_entry(session, self.item, 10)
        services.complete_session(session)
        response = self.client.get('/api/v1/physical-inventory/sessions/?status=BALANCED')
        self.assertEqual([s['id'] for s in response.data['sessions']], [session.id])
