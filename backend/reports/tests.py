"""
Tests for the burial and inventory dashboards
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status

from backend.cemetery.models import CemeteryPlot
from backend.core.cache_utils import make_cache_key
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log
from backend.permits.models import Permit
from backend.purchasing.models import DeliveryReceipt
from backend.reports.services import burial_dashboard, inventory_dashboard


class CacheKeyTests(TestCase):
    def test_keys_are_prefixed_and_stable(self):
        key = make_cache_key('dashboard_burial', 1, scope='all')
        self.assertTrue(key.startswith('dashboard_burial:'))
        self.assertEqual(key, make_cache_key('dashboard_burial', 1, scope='all'))
        self.assertNotEqual(key, make_cache_key('dashboard_burial', 2, scope='all'))


class BurialDashboardTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_counts(self):
        TestDataFactory.create_registration(status='SUBMITTED')
        TestDataFactory.create_registration(status='PENDING_VERIFICATION')
        TestDataFactory.create_registration(status='REGISTERED')
        TestDataFactory.create_permit(status='SUBMITTED')
        TestDataFactory.create_permit(permit_type=Permit.TYPE_CREMATION, status='FOR_PICKUP')
        cemetery = TestDataFactory.create_cemetery()
        TestDataFactory.create_plot(cemetery=cemetery)
        TestDataFactory.create_plot(cemetery=cemetery, status=CemeteryPlot.STATUS_RESERVED)
        TestDataFactory.create_assignment(TestDataFactory.create_plot(cemetery=cemetery))
        admin = TestDataFactory.create_admin()
        create_audit_log(action='PLOT_ASSIGNED', model_name='CemeteryPlot', object_id=1, user=admin)

        data = burial_dashboard()
        self.assertEqual(data['registrations']['total'], 3)
        self.assertEqual(data['registrations']['pending'], 2)
        self.assertEqual(data['registrations']['registered'], 1)
        self.assertEqual(data['registrations']['byStatus']['REGISTERED'], 1)
        self.assertEqual(data['permits']['total'], 2)
        self.assertEqual(data['permits']['pending'], 1)
        self.assertEqual(data['permits']['issued'], 1)
        self.assertEqual(data['permits']['byType'], {'BURIAL': 1, 'CREMATION': 1})
        self.assertEqual(data['cemeteries'], 1)
        self.assertEqual(data['plots'], {'total': 3, 'vacant': 1, 'occupied': 1, 'reserved': 1})
        self.assertEqual(data['recentActivities'][0]['action'], 'PLOT_ASSIGNED')
        self.assertEqual(data['recentActivities'][0]['user'], admin.email)

    def test_payload_is_cached(self):
        self.assertEqual(burial_dashboard()['cemeteries'], 0)
        TestDataFactory.create_cemetery()
        self.assertEqual(burial_dashboard()['cemeteries'], 0)
        cache.clear()
        self.assertEqual(burial_dashboard()['cemeteries'], 1)


class InventoryDashboardTests(TestCase):
    def setUp(self):
        cache.clear()

    def test_alerts_and_stock(self):
        TestDataFactory.create_item(item_code='EMPTY', category='Printer')
        TestDataFactory.create_item(item_code='LOW', category='Printer', stock=4)
        TestDataFactory.create_item(item_code='FULL', category='Office Supplies', stock=40)
        TestDataFactory.create_item(item_code='RETIRED', stock=0, is_active=False)
        TestDataFactory.create_delivery()
        TestDataFactory.create_delivery(status=DeliveryReceipt.STATUS_STORED)
        TestDataFactory.create_ris([(TestDataFactory.create_item(item_code='ANY', stock=50), 1)])

        data = inventory_dashboard()
        self.assertEqual(data['counts']['items'], 5)
        self.assertEqual(data['counts']['deliveries'], 2)
        self.assertEqual(data['counts']['risRequests'], 1)
        self.assertEqual(data['counts']['issuances'], 0)
        self.assertEqual([row['itemCode'] for row in data['lowStockItems']], ['EMPTY', 'LOW'])
        self.assertEqual(data['stockByCategory'], [
            {'category': 'Office Supplies', 'totalStock': 90},
            {'category': 'Printer', 'totalStock': 4},
        ])
        alerts = {alert['type']: alert for alert in data['alerts']}
        self.assertEqual(alerts['OUT_OF_STOCK']['severity'], 'critical')
        self.assertEqual(alerts['OUT_OF_STOCK']['count'], 1)
        self.assertEqual(alerts['LOW_STOCK']['severity'], 'warning')
        self.assertEqual(alerts['PENDING_VERIFICATION']['count'], 1)
        self.assertEqual(alerts['PENDING_APPROVAL']['count'], 1)
        self.assertEqual(data['recentMovements'][0]['itemCode'], 'ANY')

    def test_no_alerts_when_quiet(self):
        TestDataFactory.create_item(stock=100)
        self.assertEqual(inventory_dashboard()['alerts'], [])


class DashboardAPITests(TestCase):
    def setUp(self):
        cache.clear()

    def test_employee_access(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.assertEqual(client.get('/api/v1/dashboard/burial/').status_code, status.HTTP_200_OK)
        response = client.get('/api/v1/dashboard/inventory/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('alerts', response.data)

    def test_citizen_forbidden(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(client.get('/api/v1/dashboard/burial/').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(client.get('/api/v1/dashboard/inventory/').status_code, status.HTTP_403_FORBIDDEN)

    def test_requires_authentication(self):
        client = AuthenticatedAPIClient()
        self.assertEqual(client.get('/api/v1/dashboard/inventory/').status_code, status.HTTP_401_UNAUTHORIZED)
