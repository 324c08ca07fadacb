"""
Test utilities and factories for creating test data
"""
from datetime import date
from decimal import Decimal
import random
import string

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from backend.cemetery.models import Cemetery, CemeterySection, CemeteryBlock, CemeteryPlot, PlotAssignment, Gravestone
from backend.core.utils import next_sequence_number
from backend.inventory.models import Supplier, Item, StockMovement
from backend.inventory.services import record_movement
from backend.locations.models import StorageZone, StorageRack
from backend.permits.models import Permit
from backend.permits.workflow import next_permit_number, permit_fee
from backend.purchasing.models import PurchaseOrder, DeliveryReceipt, DeliveryItem
from backend.registry.models import DeceasedRecord, DeathRegistration
from backend.registry.workflow import registration_fee, processing_due_date
from backend.requisitions.models import RISRequest, RISItem

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', role=User.ROLE_CITIZEN, first_name='Test',
                    last_name='User', is_superuser=False, **extra):
        """Create a test user"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6).lower()}@test.com'
        if is_superuser:
            return User.objects.create_superuser(email=email, password=password, first_name=first_name,
                                                 last_name=last_name, **extra)
        return User.objects.create_user(email=email, password=password, role=role, first_name=first_name,
                                        last_name=last_name, **extra)

    @staticmethod
    def create_admin(**kwargs):
        return TestDataFactory.create_user(role=User.ROLE_ADMIN, **kwargs)

    @staticmethod
    def create_employee(**kwargs):
        return TestDataFactory.create_user(role=User.ROLE_EMPLOYEE, **kwargs)

    # Cemetery

    @staticmethod
    def create_cemetery(name=None, **kwargs):
        if not name:
            name = f'Cemetery {TestDataFactory.random_string(6)}'
        return Cemetery.objects.create(name=name, address='Test Address', **kwargs)

    @staticmethod
    def create_section(cemetery=None, name=None, **kwargs):
        cemetery = cemetery or TestDataFactory.create_cemetery()
        return CemeterySection.objects.create(cemetery=cemetery, name=name or 'Section A', **kwargs)

    @staticmethod
    def create_block(section=None, name=None, **kwargs):
        section = section or TestDataFactory.create_section()
        return CemeteryBlock.objects.create(section=section, name=name or 'Block 1', **kwargs)

    @staticmethod
    def create_plot(cemetery=None, plot_number=None, section=None, block=None, **kwargs):
        if block is not None:
            section = section or block.section
        if section is not None:
            cemetery = cemetery or section.cemetery
        cemetery = cemetery or TestDataFactory.create_cemetery()
        if not plot_number:
            plot_number = f'P-{TestDataFactory.random_string(5).upper()}'
        return CemeteryPlot.objects.create(cemetery=cemetery, section=section, block=block,
                                           plot_number=plot_number, **kwargs)

    @staticmethod
    def create_assignment(plot, deceased=None, layer=1, user=None):
        deceased = deceased or TestDataFactory.create_deceased()
        assignment = PlotAssignment.objects.create(plot=plot, deceased=deceased, layer=layer, assigned_by=user)
        plot.status = CemeteryPlot.STATUS_OCCUPIED
        plot.save()
        return assignment

    @staticmethod
    def create_gravestone(plot, **kwargs):
        kwargs.setdefault('inscription', 'In loving memory')
        return Gravestone.objects.create(plot=plot, **kwargs)

    # Registry and permits

    @staticmethod
    def create_deceased(first_name='Juan', last_name='Dela Cruz', date_of_birth=None, date_of_death=None, **kwargs):
        return DeceasedRecord.objects.create(
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth or date(1950, 1, 15),
            date_of_death=date_of_death or date(2024, 3, 10),
            **kwargs
        )

    @staticmethod
    def create_registration(user=None, deceased=None, registration_type=DeathRegistration.TYPE_REGULAR,
                            status='SUBMITTED', **kwargs):
        number = kwargs.pop('registration_number', None) or next_sequence_number(
            DeathRegistration, 'registration_number', 'DR', width=6
        )
        return DeathRegistration.objects.create(
            registration_number=number,
            registration_type=registration_type,
            deceased=deceased or TestDataFactory.create_deceased(),
            submitted_by=user,
            informant_name=kwargs.pop('informant_name', 'Maria Dela Cruz'),
            status=status,
            amount_due=registration_fee(registration_type),
            processing_due_date=processing_due_date(registration_type),
            **kwargs
        )

    @staticmethod
    def create_permit(user=None, permit_type=Permit.TYPE_BURIAL, status='SUBMITTED', registration=None, **kwargs):
        return Permit.objects.create(
            permit_number=next_permit_number(permit_type),
            permit_type=permit_type,
            requested_by=user,
            death_registration=registration,
            deceased=registration.deceased if registration else None,
            status=status,
            amount_due=permit_fee(permit_type),
            **kwargs
        )

    # Supplies

    @staticmethod
    def create_supplier(name=None, **kwargs):
        if not name:
            name = f'Supplier {TestDataFactory.random_string(6)}'
        return Supplier.objects.create(
            name=name,
            contact_person=kwargs.pop('contact_person', 'Ana Santos'),
            contact_number=kwargs.pop('contact_number', '09171234567'),
            **kwargs
        )

    @staticmethod
    def create_item(item_code=None, item_name=None, category='Office Supplies', unit_cost=None, stock=0,
                    **kwargs):
        """Create a catalog item, optionally seeding stock with a RECEIVED movement"""
        if not item_code:
            item_code = f'ITM-{TestDataFactory.random_string(6).upper()}'
        item = Item.objects.create(
            item_code=item_code,
            item_name=item_name or f'Item {item_code}',
            category=category,
            unit_of_measure=kwargs.pop('unit_of_measure', 'pcs'),
            unit_cost=unit_cost if unit_cost is not None else Decimal('25.00'),
            **kwargs
        )
        if stock:
            record_movement(item, StockMovement.TYPE_RECEIVED, stock, reference_type='SEED')
        return item

    @staticmethod
    def create_zone(zone_name=None, **kwargs):
        return StorageZone.objects.create(zone_name=zone_name or f'Zone {TestDataFactory.random_string(4)}',
                                          **kwargs)

    @staticmethod
    def create_rack(zone=None, rack_code=None, **kwargs):
        zone = zone or TestDataFactory.create_zone()
        return StorageRack.objects.create(zone=zone, rack_code=rack_code or f'R-{TestDataFactory.random_string(4)}',
                                          **kwargs)

    @staticmethod
    def create_delivery(supplier=None, items=None, dr_number=None, status=DeliveryReceipt.STATUS_PENDING):
        """
        Create a delivery receipt; items is a list of (item, delivered, accepted)
        """
        supplier = supplier or TestDataFactory.create_supplier()
        purchase_order = PurchaseOrder.objects.create(
            po_number=f'PO-{TestDataFactory.random_string(6).upper()}',
            supplier=supplier,
            po_date=date.today(),
        )
        delivery = DeliveryReceipt.objects.create(
            dr_number=dr_number or f'DR-{TestDataFactory.random_string(6).upper()}',
            purchase_order=purchase_order,
            supplier=supplier,
            delivery_date=date.today(),
            received_by='Warehouse Clerk',
            status=status,
        )
        for item, delivered, accepted in items or []:
            DeliveryItem.objects.create(
                delivery=delivery,
                item=item,
                quantity_ordered=delivered,
                quantity_delivered=delivered,
                quantity_accepted=accepted,
                quantity_rejected=delivered - accepted,
                unit_cost=item.unit_cost,
            )
        return delivery

    @staticmethod
    def create_ris(lines, department='General Services', status=RISRequest.STATUS_PENDING):
        """Create a RIS; lines is a list of (item, quantity_requested)"""
        ris = RISRequest.objects.create(
            ris_number=next_sequence_number(RISRequest, 'ris_number', 'RIS'),
            department=department,
            requested_by='Pedro Reyes',
            purpose='Office use',
            status=status,
        )
        for item, quantity in lines:
            RISItem.objects.create(ris=ris, item=item, quantity_requested=quantity)
        return ris


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
