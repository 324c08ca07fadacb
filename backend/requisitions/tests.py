"""
Tests for RIS approval, issuance and acknowledgement
"""
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.exceptions import ServiceError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import StockMovement
from backend.inventory.services import current_stock, record_movement
from backend.requisitions import services
from backend.requisitions.models import RISRequest, Issuance


class RISServiceTests(TestCase):
    def setUp(self):
        self.paper = TestDataFactory.create_item(item_code='PAPER', unit_cost=Decimal('200.00'), stock=10)
        self.pens = TestDataFactory.create_item(item_code='PENS', unit_cost=Decimal('8.00'), stock=3)

    def test_numbers_are_sequential(self):
        year = timezone.now().year
        first = services.create_ris('Engineering', 'Pedro', 'Plans', [{'item': self.paper, 'quantity_requested': 1}])
        second = services.create_ris('Engineering', 'Pedro', 'Plans', [{'item': self.paper, 'quantity_requested': 1}])
        self.assertEqual(first.ris_number, f'RIS-{year}-00001')
        self.assertEqual(second.ris_number, f'RIS-{year}-00002')
        self.assertEqual(first.status, RISRequest.STATUS_PENDING)

    def test_approve_in_full(self):
        ris = TestDataFactory.create_ris([(self.paper, 4), (self.pens, 3)])
        self.assertTrue(services.approve_ris(ris, 'Supply Officer'))
        self.assertEqual(ris.status, RISRequest.STATUS_APPROVED)
        self.assertEqual([line.quantity_approved for line in ris.items.all()], [4, 3])

    def test_approve_short_stock(self):
        ris = TestDataFactory.create_ris([(self.paper, 4), (self.pens, 5)])
        self.assertFalse(services.approve_ris(ris, 'Supply Officer'))
        self.assertEqual(ris.status, RISRequest.STATUS_NO_STOCK)
        short = ris.items.get(item=self.pens)
        self.assertEqual(short.quantity_approved, 3)
        self.assertEqual(short.remarks, 'Insufficient stock. Only 3 available.')

    def test_negative_stock_approves_nothing(self):
        empty = TestDataFactory.create_item()
        record_movement(empty, StockMovement.TYPE_ADJUSTMENT, -2, allow_negative=True)
        ris = TestDataFactory.create_ris([(empty, 1)])
        services.approve_ris(ris, 'Supply Officer')
        self.assertEqual(ris.items.get().quantity_approved, 0)

    def test_only_pending_can_be_decided(self):
        ris = TestDataFactory.create_ris([(self.paper, 1)], status=RISRequest.STATUS_REJECTED)
        with self.assertRaises(ServiceError):
            services.approve_ris(ris, 'Supply Officer')
        with self.assertRaises(ServiceError):
            services.reject_ris(ris, 'Supply Officer', 'Duplicate')

    def test_issue_writes_ledger_and_issuance(self):
        ris = TestDataFactory.create_ris([(self.paper, 4), (self.pens, 5)])
        services.approve_ris(ris, 'Supply Officer')
        issuance = services.issue_ris(ris, 'Storekeeper')

        self.assertEqual(ris.status, RISRequest.STATUS_ISSUED)
        self.assertEqual(issuance.issued_to, 'Pedro Reyes')
        self.assertEqual(current_stock(self.paper), 6)
        self.assertEqual(current_stock(self.pens), 0)
        line = issuance.items.get(item=self.paper)
        self.assertEqual(line.total_cost, Decimal('800.00'))
        movement = StockMovement.objects.filter(reference_type='RIS', item=self.paper).get()
        self.assertEqual(movement.reference_id, ris.ris_number)

    def test_issue_requires_approval(self):
        ris = TestDataFactory.create_ris([(self.paper, 1)])
        with self.assertRaises(ServiceError):
            services.issue_ris(ris, 'Storekeeper')

    def test_issue_with_nothing_approved(self):
        empty = TestDataFactory.create_item()
        ris = TestDataFactory.create_ris([(empty, 2)])
        services.approve_ris(ris, 'Supply Officer')
        with self.assertRaises(ServiceError) as ctx:
            services.issue_ris(ris, 'Storekeeper')
        self.assertEqual(ctx.exception.status_code, 400)

    def test_issue_after_stock_dropped(self):
        ris = TestDataFactory.create_ris([(self.paper, 8)])
        services.approve_ris(ris, 'Supply Officer')
        record_movement(self.paper, StockMovement.TYPE_OUT, 5)
        with self.assertRaises(ServiceError) as ctx:
            services.issue_ris(ris, 'Storekeeper')
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertFalse(Issuance.objects.exists())
        self.assertEqual(current_stock(self.paper), 5)

    def test_acknowledge_once(self):
        ris = TestDataFactory.create_ris([(self.paper, 1)])
        services.approve_ris(ris, 'Supply Officer')
        issuance = services.issue_ris(ris, 'Storekeeper')
        services.acknowledge_issuance(issuance, 'Pedro Reyes')
        self.assertTrue(issuance.is_acknowledged)
        with self.assertRaises(ServiceError):
            services.acknowledge_issuance(issuance, 'Pedro Reyes')

    def test_statistics(self):
        for department, quantity in [('Engineering', 2), ('Engineering', 1), ('Health', 3)]:
            ris = TestDataFactory.create_ris([(self.paper, quantity)], department=department)
            services.approve_ris(ris, 'Supply Officer')
            issuance = services.issue_ris(ris, 'Storekeeper')
        services.acknowledge_issuance(issuance, 'Nurse')

        summary = services.issuance_summary()
        self.assertEqual(summary['total'], 3)
        self.assertEqual(summary['acknowledged'], 1)
        self.assertEqual(summary['pending'], 2)
        self.assertEqual(summary['totalItemsIssued'], 6)
        self.assertEqual(summary['acknowledgementRate'], 33.3)
        self.assertEqual(summary['topItems'][0]['itemCode'], 'PAPER')
        self.assertEqual(summary['topItems'][0]['timesIssued'], 3)

        by_department = services.issuances_by_department()
        self.assertEqual(by_department[0], {'department': 'Engineering', 'totalIssuances': 2, 'totalItems': 3})
        self.assertEqual(by_department[1], {'department': 'Health', 'totalIssuances': 1, 'totalItems': 3})

    def test_empty_statistics(self):
        summary = services.issuance_summary()
        self.assertEqual(summary['acknowledgementRate'], 0)
        self.assertEqual(summary['topItems'], [])

    def test_issue_twice_from_stale_copy_posts_once(self):
        ris = TestDataFactory.create_ris([(self.paper, 4)])
        services.approve_ris(ris, 'Supply Officer')
        stale = RISRequest.objects.get(pk=ris.pk)

        services.issue_ris(ris, 'Storekeeper')
        with self.assertRaises(ServiceError):
            services.issue_ris(stale, 'Storekeeper')
        self.assertEqual(current_stock(self.paper), 6)
        self.assertEqual(Issuance.objects.count(), 1)

    def test_approve_from_stale_copy_after_reject(self):
        ris = TestDataFactory.create_ris([(self.paper, 4)])
        stale = RISRequest.objects.get(pk=ris.pk)
        services.reject_ris(ris, 'Supply Officer', 'Duplicate request')
        with self.assertRaises(ServiceError):
            services.approve_ris(stale, 'Supply Officer')
        self.assertEqual(RISRequest.objects.get(pk=ris.pk).status, RISRequest.STATUS_REJECTED)


class RISAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.item = TestDataFactory.create_item(item_code='PAPER', stock=10)

    def test_create_ris(self):
        response = self.client.post('/api/v1/ris/', {
            'department': 'Treasury',
            'requestedBy': 'Liza Cruz',
            'purpose': 'Quarterly reports',
            'items': [{'itemId': self.item.id, 'quantityRequested': 2}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'PENDING_APPROVAL')
        self.assertEqual(response.data['items'][0]['itemCode'], 'PAPER')
        self.assertIsNone(response.data['items'][0]['quantityApproved'])

    def test_create_validation(self):
        response = self.client.post('/api/v1/ris/', {
            'department': 'Treasury', 'requestedBy': 'Liza', 'purpose': 'x',
            'items': [{'itemId': 99999, 'quantityRequested': 1}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post('/api/v1/ris/', {
            'department': 'Treasury', 'requestedBy': 'Liza', 'purpose': 'x',
            'items': [{'itemId': self.item.id, 'quantityRequested': 0}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post('/api/v1/ris/', {'department': 'Treasury', 'requestedBy': 'Liza',
                                                     'purpose': 'x', 'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_approve_and_issue_flow(self):
        ris = TestDataFactory.create_ris([(self.item, 12)])

        response = self.client.post(f'/api/v1/ris/{ris.id}/approve/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/ris/{ris.id}/approve/', {'approvedBy': 'Supply Officer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'RIS approved with stock limitations')
        self.assertEqual(response.data['request']['status'], 'NO_STOCK')
        self.assertEqual(response.data['request']['items'][0]['quantityApproved'], 10)

        response = self.client.post(f'/api/v1/ris/{ris.id}/issue/', {'issuedBy': 'Storekeeper'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ISSUED')
        self.assertEqual(response.data['risNumber'], ris.ris_number)
        self.assertEqual(response.data['items'][0]['quantity'], 10)
        self.assertEqual(current_stock(self.item), 0)
        for action in ('RIS_APPROVED', 'RIS_ISSUED'):
            self.assertTrue(AuditLog.objects.filter(action=action).exists())

    def test_reject(self):
        ris = TestDataFactory.create_ris([(self.item, 1)])
        response = self.client.post(f'/api/v1/ris/{ris.id}/reject/', {'rejectedBy': 'Supply Officer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'/api/v1/ris/{ris.id}/reject/',
                                    {'rejectedBy': 'Supply Officer', 'reason': 'Not in budget'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'REJECTED')
        self.assertEqual(response.data['rejectionReason'], 'Not in budget')

    def test_delete_only_pending(self):
        pending = TestDataFactory.create_ris([(self.item, 1)])
        approved = TestDataFactory.create_ris([(self.item, 1)], status=RISRequest.STATUS_APPROVED)
        self.assertEqual(self.client.delete(f'/api/v1/ris/{approved.id}/').status_code,
                         status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.delete(f'/api/v1/ris/{pending.id}/').status_code,
                         status.HTTP_204_NO_CONTENT)

    def test_list_filters(self):
        TestDataFactory.create_ris([(self.item, 1)], department='Engineering')
        TestDataFactory.create_ris([(self.item, 1)], department='Health', status=RISRequest.STATUS_REJECTED)
        response = self.client.get('/api/v1/ris/?department=engin')
        self.assertEqual(response.data['pagination']['total'], 1)
        response = self.client.get('/api/v1/ris/?status=REJECTED')
        self.assertEqual(response.data['requests'][0]['department'], 'Health')


class IssuanceAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        item = TestDataFactory.create_item(stock=10)
        ris = TestDataFactory.create_ris([(item, 2)], department='Health')
        services.approve_ris(ris, 'Supply Officer')
        self.issuance = services.issue_ris(ris, 'Storekeeper')

    def test_list_and_search(self):
        response = self.client.get('/api/v1/issuances/?search=pedro')
        self.assertEqual(response.data['pagination']['total'], 1)
        self.assertEqual(response.data['issuances'][0]['status'], 'ISSUED')

        today = timezone.localdate().isoformat()
        response = self.client.get(f'/api/v1/issuances/?dateFrom={today}&dateTo={today}')
        self.assertEqual(response.data['pagination']['total'], 1)
        response = self.client.get('/api/v1/issuances/?dateTo=2000-01-01')
        self.assertEqual(response.data['pagination']['total'], 0)

    def test_acknowledge(self):
        url = f'/api/v1/issuances/{self.issuance.id}/acknowledge/'
        response = self.client.post(url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {'acknowledgedBy': 'Head Nurse'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ACKNOWLEDGED')
        self.assertEqual(response.data['acknowledgedBy'], 'Head Nurse')

        response = self.client.patch(url, {'acknowledgedBy': 'Head Nurse'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stats_endpoints(self):
        response = self.client.get('/api/v1/issuances/stats/summary/')
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['totalItemsIssued'], 2)

        response = self.client.get('/api/v1/issuances/stats/by-department/')
        self.assertEqual(response.data, [{'department': 'Health', 'totalIssuances': 1, 'totalItems': 2}])

    def test_detail(self):
        response = self.client.get(f'/api/v1/issuances/{self.issuance.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['department'], 'Health')
