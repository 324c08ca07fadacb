"""
Tests for storage zones, racks and stock locations
"""
from django.test import TestCase
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.locations.models import StorageZone, StorageRack, StockLocation


class StorageZoneAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())

    def test_create_zone(self):
        response = self.client.post('/api/v1/storage/zones/', {'zoneName': 'Main Warehouse', 'capacity': 500},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['rackCount'], 0)
        self.assertTrue(response.data['isActive'])

    def test_duplicate_zone_name_conflicts(self):
        TestDataFactory.create_zone(zone_name='Main Warehouse')
        response = self.client.post('/api/v1/storage/zones/', {'zoneName': 'Main Warehouse'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_rename_to_taken_name_conflicts(self):
        TestDataFactory.create_zone(zone_name='A')
        zone = TestDataFactory.create_zone(zone_name='B')
        response = self.client.patch(f'/api/v1/storage/zones/{zone.id}/', {'zoneName': 'A'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        response = self.client.patch(f'/api/v1/storage/zones/{zone.id}/', {'zoneName': 'B'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_list_counts_racks(self):
        zone = TestDataFactory.create_zone(zone_name='Annex')
        TestDataFactory.create_rack(zone=zone)
        TestDataFactory.create_rack(zone=zone)
        response = self.client.get('/api/v1/storage/zones/')
        self.assertEqual(response.data[0]['rackCount'], 2)

    def test_delete_zone_with_racks_blocked(self):
        zone = TestDataFactory.create_zone()
        TestDataFactory.create_rack(zone=zone)
        response = self.client.delete(f'/api/v1/storage/zones/{zone.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        empty = TestDataFactory.create_zone()
        response = self.client.delete(f'/api/v1/storage/zones/{empty.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(StorageZone.objects.filter(pk=empty.id).exists())

    def test_citizen_forbidden(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(client.get('/api/v1/storage/zones/').status_code, status.HTTP_403_FORBIDDEN)


class StorageRackAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.zone = TestDataFactory.create_zone(zone_name='Main')

    def test_create_and_filter_by_zone(self):
        response = self.client.post('/api/v1/storage/racks/', {'rackCode': 'R-01', 'zoneId': self.zone.id,
                                                               'level': 2, 'position': 'Left'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['zoneName'], 'Main')
        TestDataFactory.create_rack(rack_code='R-99')

        response = self.client.get(f'/api/v1/storage/racks/?zoneId={self.zone.id}')
        self.assertEqual([r['rackCode'] for r in response.data], ['R-01'])

    def test_duplicate_rack_code_conflicts(self):
        TestDataFactory.create_rack(rack_code='R-01')
        response = self.client.post('/api/v1/storage/racks/', {'rackCode': 'R-01', 'zoneId': self.zone.id},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_delete_rack_with_locations_blocked(self):
        rack = TestDataFactory.create_rack(zone=self.zone)
        StockLocation.objects.create(rack=rack, item=TestDataFactory.create_item(), quantity=5)
        response = self.client.delete(f'/api/v1/storage/racks/{rack.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(StorageRack.objects.filter(pk=rack.id).exists())


class StockLocationAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.rack = TestDataFactory.create_rack(rack_code='R-01')
        self.item = TestDataFactory.create_item(item_code='BOND-A4')

    def test_create_location(self):
        response = self.client.post('/api/v1/storage/locations/', {
            'tagCode': 'TAG-0001',
            'rackId': self.rack.id,
            'itemId': self.item.id,
            'quantity': 20,
            'batchNumber': 'B-2025-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['rackCode'], 'R-01')
        self.assertEqual(response.data['itemCode'], 'BOND-A4')
        self.assertEqual(response.data['status'], 'IN_STOCK')

    def test_untagged_locations_coexist(self):
        for _ in range(2):
            response = self.client.post('/api/v1/storage/locations/', {
                'tagCode': '', 'rackId': self.rack.id, 'itemId': self.item.id,
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)
            self.assertIsNone(response.data['tagCode'])
        self.assertEqual(StockLocation.objects.filter(tag_code__isnull=True).count(), 2)

    def test_duplicate_tag_conflicts(self):
        StockLocation.objects.create(tag_code='TAG-1', rack=self.rack, item=self.item)
        response = self.client.post('/api/v1/storage/locations/', {
            'tagCode': 'TAG-1', 'rackId': self.rack.id, 'itemId': self.item.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_filters(self):
        other_item = TestDataFactory.create_item()
        other_rack = TestDataFactory.create_rack()
        StockLocation.objects.create(rack=self.rack, item=self.item, quantity=1)
        StockLocation.objects.create(rack=self.rack, item=other_item, quantity=2)
        StockLocation.objects.create(rack=other_rack, item=self.item, quantity=3)

        response = self.client.get(f'/api/v1/storage/locations/?rackId={self.rack.id}')
        self.assertEqual(len(response.data), 2)
        response = self.client.get(f'/api/v1/storage/locations/?itemId={self.item.id}')
        self.assertEqual(sorted(loc['quantity'] for loc in response.data), [1, 3])

    def test_update_status(self):
        location = StockLocation.objects.create(rack=self.rack, item=self.item, quantity=0)
        response = self.client.patch(f'/api/v1/storage/locations/{location.id}/', {'status': 'DEPLETED'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'DEPLETED')

        response = self.client.delete(f'/api/v1/storage/locations/{location.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
