"""
Tests for the cemetery hierarchy: geometry helpers, plot occupancy and the API
"""
from django.db import transaction
from django.test import TestCase
from rest_framework import status

from backend.cemetery.geometry import (
    polygon_area, cemetery_center, plot_boundary, polygon_area_sq_meters, is_valid_boundary, DEFAULT_CENTER
)
from backend.cemetery.models import Cemetery, CemeterySection, CemeteryBlock, CemeteryPlot, PlotAssignment
from backend.cemetery.services import cemetery_statistics, assign_occupant, release_layer
from backend.core.exceptions import ServiceError
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.registry.models import DeceasedRecord


class GeometryTests(TestCase):
    def test_polygon_area_unit_square(self):
        self.assertEqual(polygon_area([[0, 0], [0, 1], [1, 1], [1, 0]]), 1.0)

    def test_polygon_area_triangle_is_orientation_independent(self):
        self.assertEqual(polygon_area([[0, 0], [4, 0], [0, 3]]), 6.0)
        self.assertEqual(polygon_area([[0, 3], [4, 0], [0, 0]]), 6.0)

    def test_polygon_area_degenerate(self):
        self.assertEqual(polygon_area([]), 0.0)
        self.assertEqual(polygon_area([[0, 0], [1, 1]]), 0.0)

    def test_cemetery_center(self):
        self.assertEqual(cemetery_center([]), DEFAULT_CENTER)
        self.assertEqual(cemetery_center([[10, 20], [12, 24], [11, 21]]), (11, 22))

    def test_plot_boundary_corner_order(self):
        corners = plot_boundary(14.6, 121.0, length=2, width=1)
        top_left, top_right, bottom_right, bottom_left = corners
        self.assertEqual(len(corners), 4)
        self.assertGreater(top_left[0], 14.6)
        self.assertLess(top_left[1], 121.0)
        self.assertEqual(top_left[0], top_right[0])
        self.assertGreater(top_right[1], 121.0)
        self.assertLess(bottom_right[0], 14.6)
        self.assertEqual(bottom_left[1], top_left[1])
        self.assertAlmostEqual(top_left[0] - 14.6, 1 / 111000)

    def test_area_in_square_meters_matches_plot_size(self):
        corners = plot_boundary(14.6, 121.0, length=2, width=1)
        self.assertAlmostEqual(polygon_area_sq_meters(corners), 2.0, places=6)

    def test_is_valid_boundary(self):
        self.assertTrue(is_valid_boundary([[14.6, 121.0], [14.7, 121.1]]))
        self.assertTrue(is_valid_boundary([]))
        self.assertFalse(is_valid_boundary([[14.6]]))
        self.assertFalse(is_valid_boundary([[95, 121.0]]))
        self.assertFalse(is_valid_boundary([['a', 'b']]))
        self.assertFalse(is_valid_boundary('not a list'))


class CemeteryStatisticsTests(TestCase):
    def test_statistics(self):
        cemetery = TestDataFactory.create_cemetery()
        section = TestDataFactory.create_section(cemetery=cemetery)
        TestDataFactory.create_block(section=section)
        occupied = TestDataFactory.create_plot(cemetery=cemetery)
        TestDataFactory.create_assignment(occupied)
        TestDataFactory.create_plot(cemetery=cemetery, status=CemeteryPlot.STATUS_RESERVED)
        TestDataFactory.create_plot(cemetery=cemetery, status=CemeteryPlot.STATUS_BLOCKED)
        TestDataFactory.create_plot(cemetery=cemetery)

        stats = cemetery_statistics(cemetery)
        self.assertEqual(stats['totalPlots'], 4)
        self.assertEqual(stats['vacantPlots'], 1)
        self.assertEqual(stats['reservedPlots'], 1)
        self.assertEqual(stats['occupiedPlots'], 1)
        self.assertEqual(stats['blockedPlots'], 1)
        self.assertEqual(stats['totalAssignments'], 1)
        self.assertEqual(stats['occupancyRate'], 25.0)
        self.assertEqual(stats['totalSections'], 1)
        self.assertEqual(stats['totalBlocks'], 1)

    def test_statistics_without_plots(self):
        stats = cemetery_statistics(TestDataFactory.create_cemetery())
        self.assertEqual(stats['totalPlots'], 0)
        self.assertEqual(stats['occupancyRate'], 0)

    def test_plot_code_defaults_to_plot_number(self):
        plot = TestDataFactory.create_plot(plot_number='A-01')
        self.assertEqual(plot.plot_code, 'A-01')


class PlotOccupancyAuditTests(TestCase):
    def setUp(self):
        self.employee = TestDataFactory.create_employee()
        self.plot = TestDataFactory.create_plot()
        self.occupant = {'firstName': 'Ana', 'lastName': 'Reyes',
                         'dateOfBirth': '1940-02-01', 'dateOfDeath': '2024-05-05'}

    def test_assignment_is_audited(self):
        assignment = assign_occupant(self.plot, self.occupant, user=self.employee)
        log = AuditLog.objects.get(action='PLOT_ASSIGNED')
        self.assertEqual(log.user, self.employee)
        self.assertEqual(log.object_id, str(self.plot.id))
        self.assertEqual(log.changes, {'deceasedId': assignment.deceased_id, 'layer': 1})

    def test_audit_rolls_back_with_assignment(self):
        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                assign_occupant(self.plot, self.occupant, user=self.employee)
                raise RuntimeError('abort')
        self.assertFalse(PlotAssignment.objects.exists())
        self.assertFalse(AuditLog.objects.filter(action='PLOT_ASSIGNED').exists())

    def test_rejected_assignment_is_not_audited(self):
        assign_occupant(self.plot, self.occupant, user=self.employee)
        with self.assertRaises(ServiceError):
            assign_occupant(self.plot, {**self.occupant, 'layer': 1}, user=self.employee)
        self.assertEqual(AuditLog.objects.filter(action='PLOT_ASSIGNED').count(), 1)

    def test_release_is_audited(self):
        assign_occupant(self.plot, self.occupant, user=self.employee)
        release_layer(self.plot, 1, user=self.employee)
        log = AuditLog.objects.get(action='PLOT_RELEASED')
        self.assertEqual(log.changes, {'layer': 1, 'status': PlotAssignment.STATUS_EXHUMED})

class CemeteryAPITests(TestCase):
    def setUp(self):
        self.employee = TestDataFactory.create_employee()
        self.client = AuthenticatedAPIClient().authenticate_user(self.employee)

    def test_create_cemetery_computes_area(self):
        boundary = plot_boundary(14.6760, 121.0437, length=100, width=50)
        response = self.client.post('/api/v1/cemeteries/', {'name': 'Bagbag Public Cemetery', 'boundary': boundary},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['city'], 'Quezon City')
        self.assertAlmostEqual(response.data['totalArea'], 5000.0, places=0)
        self.assertEqual(response.data['_count'], {'plots': 0, 'sections': 0})
        self.assertTrue(AuditLog.objects.filter(action='CEMETERY_CREATED').exists())

    def test_create_cemetery_rejects_bad_boundary(self):
        response = self.client.post('/api/v1/cemeteries/', {'name': 'X', 'boundary': [[200, 0]]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_citizen_can_read_but_not_write(self):
        TestDataFactory.create_cemetery()
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        self.assertEqual(client.get('/api/v1/cemeteries/').status_code, status.HTTP_200_OK)
        response = client.post('/api/v1/cemeteries/', {'name': 'Nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_counts(self):
        cemetery = TestDataFactory.create_cemetery()
        section = TestDataFactory.create_section(cemetery=cemetery)
        TestDataFactory.create_plot(cemetery=cemetery, section=section)
        TestDataFactory.create_plot(cemetery=cemetery)
        response = self.client.get('/api/v1/cemeteries/')
        self.assertEqual(response.data[0]['_count'], {'plots': 2, 'sections': 1})

    def test_detail_includes_sections_and_blocks(self):
        cemetery = TestDataFactory.create_cemetery()
        section = TestDataFactory.create_section(cemetery=cemetery, name='Garden')
        TestDataFactory.create_block(section=section, name='B1')
        response = self.client.get(f'/api/v1/cemeteries/{cemetery.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sections'][0]['name'], 'Garden')
        self.assertEqual(response.data['sections'][0]['blocks'][0]['name'], 'B1')

    def test_delete_without_cascade_blocked(self):
        cemetery = TestDataFactory.create_cemetery()
        TestDataFactory.create_section(cemetery=cemetery)
        response = self.client.delete(f'/api/v1/cemeteries/{cemetery.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Cemetery.objects.filter(pk=cemetery.id).exists())

    def test_cascade_delete_removes_tree(self):
        cemetery = TestDataFactory.create_cemetery()
        section = TestDataFactory.create_section(cemetery=cemetery)
        block = TestDataFactory.create_block(section=section)
        plot = TestDataFactory.create_plot(block=block)
        TestDataFactory.create_assignment(plot)
        TestDataFactory.create_gravestone(plot)

        response = self.client.delete(f'/api/v1/cemeteries/{cemetery.id}/?cascade=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deleted']['plots'], 1)
        self.assertFalse(Cemetery.objects.filter(pk=cemetery.id).exists())
        self.assertFalse(CemeteryBlock.objects.exists())
        self.assertFalse(PlotAssignment.objects.exists())
        # The deceased record outlives the burial tree
        self.assertEqual(DeceasedRecord.objects.count(), 1)

    def test_statistics_endpoint(self):
        cemetery = TestDataFactory.create_cemetery()
        TestDataFactory.create_plot(cemetery=cemetery)
        response = self.client.get(f'/api/v1/cemeteries/{cemetery.id}/statistics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalPlots'], 1)
        self.assertEqual(response.data['vacantPlots'], 1)


class SectionBlockAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.cemetery = TestDataFactory.create_cemetery()

    def test_section_crud_and_delete_guard(self):
        response = self.client.post('/api/v1/cemetery-sections/', {'cemeteryId': self.cemetery.id, 'name': 'North'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        section = CemeterySection.objects.get(pk=response.data['id'])
        self.assertEqual(section.capacity, 100)

        TestDataFactory.create_block(section=section)
        response = self.client.delete(f'/api/v1/cemetery-sections/{section.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_section_list_filters_by_cemetery(self):
        TestDataFactory.create_section(cemetery=self.cemetery, name='B')
        TestDataFactory.create_section(cemetery=self.cemetery, name='A')
        TestDataFactory.create_section(name='Elsewhere')
        response = self.client.get(f'/api/v1/cemetery-sections/?cemeteryId={self.cemetery.id}')
        self.assertEqual([s['name'] for s in response.data], ['A', 'B'])

    def test_block_type_is_uppercased(self):
        section = TestDataFactory.create_section(cemetery=self.cemetery)
        response = self.client.post('/api/v1/cemetery-blocks/', {'sectionId': section.id, 'name': 'P1',
                                                                 'blockType': 'premium'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['blockType'], 'PREMIUM')

    def test_block_delete_guard(self):
        block = TestDataFactory.create_block(section=TestDataFactory.create_section(cemetery=self.cemetery))
        TestDataFactory.create_plot(block=block)
        response = self.client.delete(f'/api/v1/cemetery-blocks/{block.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PlotAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.cemetery = TestDataFactory.create_cemetery()
        self.section = TestDataFactory.create_section(cemetery=self.cemetery)
        self.block = TestDataFactory.create_block(section=self.section)

    def occupant(self, **overrides):
        payload = {'firstName': 'Jose', 'lastName': 'Rizal', 'dateOfBirth': '1861-06-19',
                   'dateOfDeath': '1896-12-30'}
        payload.update(overrides)
        return payload

    def test_create_plot_generates_boundary(self):
        response = self.client.post('/api/v1/plots/', {
            'cemeteryId': self.cemetery.id,
            'blockId': self.block.id,
            'plotNumber': 'A-001',
            'latitude': 14.676,
            'longitude': 121.0437,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['plotCode'], 'A-001')
        self.assertEqual(response.data['sectionId'], self.section.id)
        self.assertEqual(len(response.data['boundary']), 4)

    def test_duplicate_plot_number_conflicts(self):
        TestDataFactory.create_plot(cemetery=self.cemetery, plot_number='A-001')
        response = self.client.post('/api/v1/plots/', {'cemeteryId': self.cemetery.id, 'plotNumber': 'A-001'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_section_must_belong_to_cemetery(self):
        other_section = TestDataFactory.create_section()
        response = self.client.post('/api/v1/plots/', {'cemeteryId': self.cemetery.id, 'sectionId': other_section.id,
                                                       'plotNumber': 'X-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_plots(self):
        TestDataFactory.create_plot(cemetery=self.cemetery, plot_number='A-1')
        TestDataFactory.create_plot(cemetery=self.cemetery, plot_number='A-2', status=CemeteryPlot.STATUS_RESERVED)
        TestDataFactory.create_plot(plot_number='B-1')
        response = self.client.get(f'/api/v1/plots/?cemeteryId={self.cemetery.id}&status=reserved,occupied')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['plotNumber'] for p in response.data], ['A-2'])

    def test_assign_occupant(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery, max_layers=2)
        response = self.client.put(f'/api/v1/plots/{plot.id}/', {'occupantDetails': self.occupant()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], CemeteryPlot.STATUS_OCCUPIED)
        self.assertEqual(response.data['occupiedLayers'], [1])
        self.assertEqual(DeceasedRecord.objects.get().age, 35)
        self.assertTrue(AuditLog.objects.filter(action='PLOT_ASSIGNED').exists())

        response = self.client.put(f'/api/v1/plots/{plot.id}/', {'occupantDetails': self.occupant(layer=2)},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['occupiedLayers'], [1, 2])

    def test_assign_occupied_layer_conflicts(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery)
        TestDataFactory.create_assignment(plot, layer=1)
        response = self.client.put(f'/api/v1/plots/{plot.id}/', {'occupantDetails': self.occupant(layer=1)},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(DeceasedRecord.objects.count(), 1)

    def test_assign_layer_beyond_max(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery, max_layers=3)
        response = self.client.put(f'/api/v1/plots/{plot.id}/', {'occupantDetails': self.occupant(layer=4)},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_blocked_plot(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery, status=CemeteryPlot.STATUS_BLOCKED)
        response = self.client.put(f'/api/v1/plots/{plot.id}/', {'occupantDetails': self.occupant()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_assign_invalid_occupant_dates(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery)
        response = self.client.put(f'/api/v1/plots/{plot.id}/', {
            'occupantDetails': self.occupant(dateOfBirth='2000-01-01', dateOfDeath='1990-01-01')
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(PlotAssignment.objects.exists())

    def test_reserve_plot(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery)
        response = self.client.put(f'/api/v1/plots/{plot.id}/', {'reservationDetails': {'reservedFor': 'Reyes family'}},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        plot.refresh_from_db()
        self.assertEqual(plot.status, CemeteryPlot.STATUS_RESERVED)
        self.assertIn('RESERVATION: Reserved for Reyes family', plot.notes)

        response = self.client.put(f'/api/v1/plots/{plot.id}/', {'reservationDetails': {'reservedFor': 'Other'}},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_release_layer_vacates_plot(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery)
        assignment = TestDataFactory.create_assignment(plot, layer=1)
        response = self.client.post(f'/api/v1/plots/{plot.id}/release/', {'layer': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        assignment.refresh_from_db()
        plot.refresh_from_db()
        self.assertEqual(assignment.status, PlotAssignment.STATUS_EXHUMED)
        self.assertIsNotNone(assignment.released_at)
        self.assertEqual(plot.status, CemeteryPlot.STATUS_VACANT)

    def test_release_keeps_plot_occupied_while_layers_remain(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery)
        TestDataFactory.create_assignment(plot, layer=1)
        TestDataFactory.create_assignment(plot, layer=2)
        self.client.post(f'/api/v1/plots/{plot.id}/release/', {'layer': 2}, format='json')
        plot.refresh_from_db()
        self.assertEqual(plot.status, CemeteryPlot.STATUS_OCCUPIED)

    def test_release_empty_layer(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery)
        response = self.client.post(f'/api/v1/plots/{plot.id}/release/', {'layer': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_plot_with_assignment_blocked(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery)
        TestDataFactory.create_assignment(plot)
        response = self.client.delete(f'/api/v1/plots/{plot.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_plot_removes_gravestones(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery)
        TestDataFactory.create_gravestone(plot)
        response = self.client.delete(f'/api/v1/plots/{plot.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(CemeteryPlot.objects.filter(pk=plot.id).exists())

    def test_search_occupants(self):
        plot = TestDataFactory.create_plot(cemetery=self.cemetery, block=self.block, section=self.section,
                                           latitude=14.6, longitude=121.0)
        deceased = TestDataFactory.create_deceased(first_name='Andres', last_name='Bonifacio')
        TestDataFactory.create_assignment(plot, deceased=deceased)
        TestDataFactory.create_gravestone(plot, material='MARBLE')

        response = self.client.get('/api/v1/plots/search/?name=bonif')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        result = response.data['results'][0]
        self.assertEqual(result['plotLocation']['block'], self.block.name)
        self.assertEqual(result['plotLocation']['coordinates'], [14.6, 121.0])
        self.assertEqual(result['gravestone']['material'], 'MARBLE')

    def test_search_requires_two_characters(self):
        response = self.client.get('/api/v1/plots/search/?name=a')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class GravestoneAPITests(TestCase):
    def setUp(self):
        self.client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        self.plot = TestDataFactory.create_plot()

    def test_create_and_filter(self):
        response = self.client.post('/api/v1/gravestones/', {'plotId': self.plot.id, 'material': 'GRANITE',
                                                             'inscription': 'Rest in peace'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        TestDataFactory.create_gravestone(TestDataFactory.create_plot())

        response = self.client.get(f'/api/v1/gravestones/?plotId={self.plot.id}')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['inscription'], 'Rest in peace')

    def test_update_condition(self):
        gravestone = TestDataFactory.create_gravestone(self.plot)
        response = self.client.patch(f'/api/v1/gravestones/{gravestone.id}/', {'condition': 'DAMAGED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['condition'], 'DAMAGED')
