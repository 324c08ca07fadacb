"""
Tests for delivery receipts: recording, the verification workflow and stock posting
"""
import json
import shutil
import tempfile
from datetime import date
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status

from backend.core.exceptions import ServiceError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import Item, StockMovement
from backend.inventory.services import current_stock
from backend.purchasing.models import PurchaseOrder, DeliveryReceipt, DeliveryItem
from backend.purchasing.services import create_delivery, change_delivery_status


def delivery_line(item_code='BOND-A4', **overrides):
    line = {
        'item_code': item_code,
        'item_name': 'Bond paper A4',
        'unit_of_measure': 'ream',
        'quantity_ordered': 10,
        'quantity_delivered': 10,
        'unit_cost': Decimal('210.00'),
    }
    line.update(overrides)
    return line


class DeliveryServiceTests(TestCase):
    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.employee = TestDataFactory.create_employee()

    def test_create_delivery_creates_po_and_items(self):
        delivery = create_delivery(self.supplier, 'PO-1001', 'DR-5001', date(2025, 3, 1), 'Clerk',
                                   [delivery_line(quantity_rejected=2)])
        self.assertEqual(delivery.status, DeliveryReceipt.STATUS_PENDING)
        purchase_order = PurchaseOrder.objects.get(po_number='PO-1001')
        self.assertEqual(purchase_order.total_amount, Decimal('2100.00'))
        item = Item.objects.get(item_code='BOND-A4')
        self.assertEqual(item.category, 'Uncategorized')
        line = delivery.items.get()
        self.assertEqual((line.quantity_accepted, line.quantity_rejected), (8, 2))
        self.assertEqual(delivery.get_total(), Decimal('2100.00'))

    def test_existing_po_and_item_are_reused(self):
        item = TestDataFactory.create_item(item_code='BOND-A4', unit_cost=Decimal('199.00'))
        PurchaseOrder.objects.create(po_number='PO-1001', supplier=self.supplier, po_date=date(2025, 2, 1))
        delivery = create_delivery(self.supplier, 'PO-1001', 'DR-5001', date(2025, 3, 1), 'Clerk',
                                   [delivery_line(unit_cost=None)])
        self.assertEqual(PurchaseOrder.objects.count(), 1)
        line = delivery.items.get()
        self.assertEqual(line.item, item)
        self.assertEqual(line.unit_cost, Decimal('199.00'))

    def test_over_accepted_line_rolls_back(self):
        with self.assertRaises(ServiceError):
            create_delivery(self.supplier, 'PO-1001', 'DR-5001', date(2025, 3, 1), 'Clerk',
                            [delivery_line(quantity_accepted=9, quantity_rejected=2)])
        self.assertFalse(DeliveryReceipt.objects.exists())
        self.assertFalse(PurchaseOrder.objects.exists())

    def test_store_posts_accepted_quantities(self):
        item = TestDataFactory.create_item(stock=5)
        empty = TestDataFactory.create_item()
        delivery = TestDataFactory.create_delivery(supplier=self.supplier, items=[(item, 10, 7), (empty, 3, 0)])

        change_delivery_status(delivery, DeliveryReceipt.STATUS_VERIFIED, self.employee)
        self.assertEqual(current_stock(item), 5)
        self.assertEqual(delivery.verified_by, self.employee)
        verified_at = delivery.verified_at

        change_delivery_status(delivery, DeliveryReceipt.STATUS_STORED, self.employee)
        self.assertEqual(delivery.verified_at, verified_at)
        self.assertEqual(current_stock(item), 12)
        self.assertEqual(current_stock(empty), 0)
        movement = StockMovement.objects.get(reference_type='DELIVERY')
        self.assertEqual(movement.reference_id, str(delivery.id))
        self.assertEqual(movement.quantity, 7)

    def test_invalid_transitions(self):
        delivery = TestDataFactory.create_delivery()
        with self.assertRaises(ServiceError):
            change_delivery_status(delivery, DeliveryReceipt.STATUS_STORED, self.employee)
        change_delivery_status(delivery, DeliveryReceipt.STATUS_REJECTED, self.employee)
        with self.assertRaises(ServiceError):
            change_delivery_status(delivery, DeliveryReceipt.STATUS_VERIFIED, self.employee)

    def test_store_twice_from_stale_copy_posts_once(self):
        item = TestDataFactory.create_item()
        delivery = TestDataFactory.create_delivery(items=[(item, 6, 6)], status=DeliveryReceipt.STATUS_VERIFIED)
        stale = DeliveryReceipt.objects.get(pk=delivery.pk)

        change_delivery_status(delivery, DeliveryReceipt.STATUS_STORED, self.employee)
        with self.assertRaises(ServiceError):
            change_delivery_status(stale, DeliveryReceipt.STATUS_STORED, self.employee)
        self.assertEqual(stale.status, DeliveryReceipt.STATUS_STORED)
        self.assertEqual(current_stock(item), 6)
        self.assertEqual(StockMovement.objects.filter(reference_type='DELIVERY').count(), 1)


class DeliveryAPITests(TestCase):
    def setUp(self):
        self.employee = TestDataFactory.create_employee()
        self.client = AuthenticatedAPIClient().authenticate_user(self.employee)
        self.supplier = TestDataFactory.create_supplier()

    def payload(self, **overrides):
        body = {
            'supplierId': self.supplier.id,
            'poNumber': 'PO-2025-001',
            'drNumber': 'DR-88001',
            'deliveryDate': '2025-03-01',
            'receivedBy': 'Warehouse Clerk',
            'items': [{
                'itemCode': 'TONER-85A',
                'itemName': 'Toner cartridge 85A',
                'category': 'Printer',
                'unitOfMeasure': 'pcs',
                'quantityOrdered': 5,
                'quantityDelivered': 5,
                'quantityRejected': 1,
                'unitCost': '1500.00',
            }],
        }
        body.update(overrides)
        return body

    def test_create_delivery(self):
        response = self.client.post('/api/v1/deliveries/', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'PENDING_VERIFICATION')
        self.assertEqual(response.data['poNumber'], 'PO-2025-001')
        self.assertEqual(response.data['supplier']['id'], self.supplier.id)
        self.assertIsNone(response.data['drFileUrl'])
        line = response.data['items'][0]
        self.assertEqual(line['quantityAccepted'], 4)
        self.assertEqual(line['totalAmount'], '7500.00')
        self.assertTrue(AuditLog.objects.filter(action='DELIVERY_CREATED').exists())

    def test_duplicate_dr_number_conflicts(self):
        TestDataFactory.create_delivery(dr_number='DR-88001')
        response = self.client.post('/api/v1/deliveries/', self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_empty_items_rejected(self):
        response = self.client.post('/api/v1/deliveries/', self.payload(items=[]), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_over_accepted_line_rejected(self):
        payload = self.payload()
        payload['items'][0]['quantityAccepted'] = 5
        response = self.client.post('/api/v1/deliveries/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(DeliveryItem.objects.exists())

    def test_list_filters(self):
        TestDataFactory.create_delivery(supplier=self.supplier, dr_number='DR-1')
        TestDataFactory.create_delivery(dr_number='DR-2', status=DeliveryReceipt.STATUS_STORED)

        response = self.client.get(f'/api/v1/deliveries/?supplierId={self.supplier.id}')
        self.assertEqual([d['drNumber'] for d in response.data['deliveries']], ['DR-1'])

        response = self.client.get('/api/v1/deliveries/?status=STORED')
        self.assertEqual(response.data['pagination']['total'], 1)

        response = self.client.get('/api/v1/deliveries/?search=dr-2')
        self.assertEqual(response.data['deliveries'][0]['status'], 'STORED')

    def test_status_workflow(self):
        item = TestDataFactory.create_item()
        delivery = TestDataFactory.create_delivery(items=[(item, 4, 4)])
        url = f'/api/v1/deliveries/{delivery.id}/status/'

        response = self.client.patch(url, {'status': 'STORED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.patch(url, {'status': 'VERIFIED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['verifiedBy'], self.employee.email)

        response = self.client.patch(url, {'status': 'STORED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(current_stock(item), 4)
        self.assertEqual(AuditLog.objects.filter(action='DELIVERY_STATUS_CHANGED').count(), 2)

    def test_unknown_status(self):
        delivery = TestDataFactory.create_delivery()
        response = self.client.patch(f'/api/v1/deliveries/{delivery.id}/status/', {'status': 'LOST'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_rules(self):
        admin_client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_admin())
        pending = TestDataFactory.create_delivery(items=[(TestDataFactory.create_item(), 1, 1)])
        stored = TestDataFactory.create_delivery(status=DeliveryReceipt.STATUS_STORED)

        self.assertEqual(self.client.delete(f'/api/v1/deliveries/{pending.id}/').status_code,
                         status.HTTP_403_FORBIDDEN)
        self.assertEqual(admin_client.delete(f'/api/v1/deliveries/{stored.id}/').status_code,
                         status.HTTP_400_BAD_REQUEST)
        self.assertEqual(admin_client.delete(f'/api/v1/deliveries/{pending.id}/').status_code,
                         status.HTTP_204_NO_CONTENT)
        self.assertFalse(DeliveryItem.objects.exists())


class DeliveryUploadTests(TestCase):
    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.settings_override = override_settings(MEDIA_ROOT=self.media_root)
        self.settings_override.enable()
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.supplier = TestDataFactory.create_supplier()

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def form(self, upload):
        return {
            'supplierId': self.supplier.id,
            'poNumber': 'PO-7',
            'drNumber': 'DR-7',
            'deliveryDate': '2025-03-01',
            'receivedBy': 'Clerk',
            'drFile': upload,
            'items': json.dumps([{
                'itemCode': 'MOP', 'itemName': 'Mop', 'unitOfMeasure': 'pcs',
                'quantityOrdered': 2, 'quantityDelivered': 2,
            }]),
        }

    def test_multipart_with_pdf(self):
        upload = SimpleUploadedFile('dr.pdf', b'%PDF-1.4', content_type='application/pdf')
        response = self.client.post('/api/v1/deliveries/', self.form(upload), format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('deliveries/', response.data['drFileUrl'])
        self.assertEqual(response.data['items'][0]['quantityAccepted'], 2)

    def test_non_pdf_rejected(self):
        upload = SimpleUploadedFile('dr.png', b'\x89PNG', content_type='image/png')
        response = self.client.post('/api/v1/deliveries/', self.form(upload), format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(DeliveryReceipt.objects.exists())

    def test_multipart_without_file(self):
        form = self.form(None)
        del form['drFile']
        response = self.client.post('/api/v1/deliveries/', form, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['drFileUrl'])
        self.assertEqual(response.data['items'][0]['itemCode'], 'MOP')

    def test_multipart_items_not_json(self):
        form = self.form(None)
        del form['drFile']
        form['items'] = 'not json'
        response = self.client.post('/api/v1/deliveries/', form, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data['details'])
