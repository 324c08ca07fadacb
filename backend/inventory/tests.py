"""
Tests for suppliers, catalog items and the stock ledger
"""
from django.test import TestCase
from rest_framework import status

from backend.core.exceptions import ServiceError
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import Item, StockMovement, Supplier
from backend.inventory.services import current_stock, record_movement, with_current_stock


class StockLedgerTests(TestCase):
    def setUp(self):
        self.item = TestDataFactory.create_item(item_code='BOND-A4')

    def test_new_item_has_no_stock(self):
        self.assertEqual(current_stock(self.item), 0)

    def test_movements_chain_balances(self):
        received = record_movement(self.item, StockMovement.TYPE_RECEIVED, 100)
        issued = record_movement(self.item, StockMovement.TYPE_OUT, 30)
        adjusted = record_movement(self.item, StockMovement.TYPE_ADJUSTMENT, -5)
        returned = record_movement(self.item, StockMovement.TYPE_RETURN, 2)

        self.assertEqual((received.balance_before, received.balance_after), (0, 100))
        self.assertEqual(issued.quantity, -30)
        self.assertEqual((issued.balance_before, issued.balance_after), (100, 70))
        self.assertEqual(adjusted.balance_after, 65)
        self.assertEqual(returned.balance_after, 67)
        self.assertEqual(current_stock(self.item), 67)
        self.assertEqual(current_stock(self.item.pk), 67)

    def test_out_quantity_sign_is_ignored(self):
        record_movement(self.item, StockMovement.TYPE_RECEIVED, 10)
        movement = record_movement(self.item, StockMovement.TYPE_OUT, -4)
        self.assertEqual(movement.quantity, -4)
        self.assertEqual(movement.balance_after, 6)

    def test_insufficient_stock(self):
        record_movement(self.item, StockMovement.TYPE_RECEIVED, 5)
        with self.assertRaises(ServiceError) as ctx:
            record_movement(self.item, StockMovement.TYPE_OUT, 6)
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(current_stock(self.item), 5)
        self.assertEqual(self.item.movements.count(), 1)

    def test_allow_negative(self):
        movement = record_movement(self.item, StockMovement.TYPE_ADJUSTMENT, -3, allow_negative=True)
        self.assertEqual(movement.balance_after, -3)

    def test_unit_cost_defaults_to_item_cost(self):
        movement = record_movement(self.item, StockMovement.TYPE_RECEIVED, 1, reference_type='DELIVERY',
                                   reference_id=42)
        self.assertEqual(movement.unit_cost, self.item.unit_cost)
        self.assertEqual(movement.reference_id, '42')

    def test_with_current_stock_annotation(self):
        other = TestDataFactory.create_item(stock=12)
        record_movement(self.item, StockMovement.TYPE_RECEIVED, 3)
        stocks = dict(with_current_stock(Item.objects.all()).values_list('item_code', 'current_stock'))
        self.assertEqual(stocks, {'BOND-A4': 3, other.item_code: 12})


class SupplierAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())

    def test_create_supplier(self):
        response = self.client.post('/api/v1/suppliers/', {
            'name': 'Acme Office Supply',
            'contactPerson': 'Rosa Reyes',
            'contactNumber': '09181234567',
            'tinNumber': '123-456-789',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['tinNumber'], '123-456-789')
        self.assertTrue(response.data['isActive'])

    def test_required_fields(self):
        response = self.client.post('/api/v1/suppliers/', {'name': 'No Contact'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('contactPerson', response.data['details'])
        self.assertIn('contactNumber', response.data['details'])

    def test_search(self):
        TestDataFactory.create_supplier(name='Acme Office Supply')
        TestDataFactory.create_supplier(name='Metro Hardware')
        response = self.client.get('/api/v1/suppliers/?search=acme')
        self.assertEqual([s['name'] for s in response.data], ['Acme Office Supply'])

    def test_delete_with_deliveries_blocked(self):
        supplier = TestDataFactory.create_supplier()
        TestDataFactory.create_delivery(supplier=supplier)
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        unused = TestDataFactory.create_supplier()
        response = self.client.delete(f'/api/v1/suppliers/{unused.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Supplier.objects.filter(pk=unused.id).exists())

    def test_citizen_forbidden(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(client.get('/api/v1/suppliers/').status_code, status.HTTP_403_FORBIDDEN)


class ItemAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())

    def test_create_item(self):
        response = self.client.post('/api/v1/items/', {
            'itemCode': 'PEN-BLK',
            'itemName': 'Ballpen, black',
            'category': 'Office Supplies',
            'unitOfMeasure': 'pcs',
            'unitCost': '8.50',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['currentStock'], 0)
        self.assertEqual(response.data['reorderLevel'], 10)
        self.assertTrue(response.data['isLowStock'])

    def test_duplicate_code_conflicts(self):
        TestDataFactory.create_item(item_code='PEN-BLK')
        response = self.client.post('/api/v1/items/', {'itemCode': 'PEN-BLK', 'itemName': 'Pen', 'category': 'X',
                                                       'unitOfMeasure': 'pcs'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_required_fields(self):
        response = self.client.post('/api/v1/items/', {'itemCode': 'X-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('itemName', 'category', 'unitOfMeasure'):
            self.assertIn(field, response.data['details'])

    def test_list_filters(self):
        TestDataFactory.create_item(item_code='PAPER', item_name='Bond paper', stock=50)
        TestDataFactory.create_item(item_code='TONER', item_name='Toner', category='Printer', stock=2)
        TestDataFactory.create_item(item_code='OLD', item_name='Carbon paper', stock=100, is_active=False)

        response = self.client.get('/api/v1/items/?search=paper')
        self.assertEqual(response.data['pagination']['total'], 2)

        response = self.client.get('/api/v1/items/?lowStock=true')
        self.assertEqual([i['itemCode'] for i in response.data['items']], ['TONER'])
        self.assertEqual(response.data['items'][0]['currentStock'], 2)

        response = self.client.get('/api/v1/items/?category=Printer')
        self.assertEqual(len(response.data['items']), 1)

        response = self.client.get('/api/v1/items/?isActive=false')
        self.assertEqual([i['itemCode'] for i in response.data['items']], ['OLD'])

    def test_update_to_taken_code_conflicts(self):
        TestDataFactory.create_item(item_code='A')
        item = TestDataFactory.create_item(item_code='B')
        response = self.client.patch(f'/api/v1/items/{item.id}/', {'itemCode': 'A'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        response = self.client.patch(f'/api/v1/items/{item.id}/', {'reorderLevel': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['reorderLevel'], 3)

    def test_delete_with_movements_blocked(self):
        item = TestDataFactory.create_item(stock=1)
        response = self.client.delete(f'/api/v1/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        unused = TestDataFactory.create_item()
        response = self.client.delete(f'/api/v1/items/{unused.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_history_newest_first(self):
        item = TestDataFactory.create_item(stock=10)
        record_movement(item, StockMovement.TYPE_OUT, 4, reference_type='RIS', reference_id='7')
        response = self.client.get(f'/api/v1/items/{item.id}/history/?limit=1')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['item']['currentStock'], 6)
        self.assertEqual(len(response.data['movements']), 1)
        self.assertEqual(response.data['movements'][0]['movementType'], 'OUT')
        self.assertEqual(response.data['movements'][0]['referenceId'], '7')

    def test_categories(self):
        TestDataFactory.create_item(category='Printer')
        TestDataFactory.create_item(category='Janitorial')
        TestDataFactory.create_item(category='Printer')
        response = self.client.get('/api/v1/items/categories/')
        self.assertEqual(response.data, ['Janitorial', 'Printer'])

    def test_stock_movement_list(self):
        item = TestDataFactory.create_item(stock=10)
        record_movement(item, StockMovement.TYPE_OUT, 1)
        TestDataFactory.create_item(stock=5)
        response = self.client.get(f'/api/v1/stock-movements/?itemId={item.id}&type=out')
        self.assertEqual(response.data['pagination']['total'], 1)
