"""
Tests for users, authentication, audit logging and the shared helpers
"""
from io import StringIO

from django.core.management import call_command
from django.db import IntegrityError, connection
from django.db.migrations.loader import MigrationLoader
from django.test import TestCase, RequestFactory
from rest_framework import status
from rest_framework.test import APIClient

from backend.core.exceptions import ServiceError, api_exception_handler
from backend.core.models import User, AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import append_note, next_sequence_number, parse_bool, get_client_ip
from backend.registry.models import DeathRegistration


class UserModelTests(TestCase):
    def test_email_is_lowercased(self):
        user = User.objects.create_user(email='Juan.Cruz@Example.COM', password='secret123')
        self.assertEqual(user.email, 'juan.cruz@example.com')

    def test_full_name_skips_empty_parts(self):
        user = TestDataFactory.create_user(first_name='Juan', last_name='Cruz', middle_name='', name_suffix='Jr.')
        self.assertEqual(user.full_name, 'Juan Cruz Jr.')

    def test_role_properties(self):
        citizen = TestDataFactory.create_user()
        employee = TestDataFactory.create_employee()
        admin = TestDataFactory.create_admin()
        superuser = TestDataFactory.create_user(is_superuser=True)

        self.assertFalse(citizen.is_employee)
        self.assertTrue(employee.is_employee)
        self.assertFalse(employee.is_admin)
        self.assertTrue(admin.is_admin)
        self.assertTrue(admin.is_employee)
        self.assertTrue(superuser.is_admin)

    def test_create_superuser_defaults_to_admin_role(self):
        user = User.objects.create_superuser(email='root@example.com', password='secret123')
        self.assertEqual(user.role, User.ROLE_ADMIN)
        self.assertTrue(user.is_staff)


class UtilsTests(TestCase):
    def test_parse_bool(self):
        self.assertIsNone(parse_bool(None))
        self.assertIsNone(parse_bool(''))
        self.assertTrue(parse_bool('true'))
        self.assertTrue(parse_bool('1'))
        self.assertFalse(parse_bool('false'))

    def test_append_note(self):
        first = append_note('', 'approved')
        self.assertRegex(first, r'^\[.+\] ADMIN OVERRIDE: approved$')
        second = append_note(first, 'fee waived')
        self.assertEqual(len(second.splitlines()), 2)
        self.assertTrue(second.splitlines()[1].endswith('ADMIN OVERRIDE: fee waived'))

    def test_next_sequence_number_increments_within_year(self):
        self.assertEqual(
            next_sequence_number(DeathRegistration, 'registration_number', 'DR', width=6, year=2025),
            'DR-2025-000001',
        )
        TestDataFactory.create_registration(registration_number='DR-2025-000007')
        self.assertEqual(
            next_sequence_number(DeathRegistration, 'registration_number', 'DR', width=6, year=2025),
            'DR-2025-000008',
        )
        self.assertEqual(
            next_sequence_number(DeathRegistration, 'registration_number', 'DR', width=6, year=2026),
            'DR-2026-000001',
        )

    def test_get_client_ip_prefers_forwarded_header(self):
        request = RequestFactory().get('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2', REMOTE_ADDR='127.0.0.1')
        self.assertEqual(get_client_ip(request), '10.0.0.1')


class ExceptionHandlerTests(TestCase):
    def test_service_error(self):
        response = api_exception_handler(ServiceError('Plot is blocked', status_code=409), {})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data, {'error': 'Plot is blocked'})

    def test_unique_violation_maps_to_conflict(self):
        response = api_exception_handler(IntegrityError('UNIQUE constraint failed: items.item_code'), {})
        self.assertEqual(response.status_code, 409)

    def test_other_integrity_error_maps_to_bad_request(self):
        response = api_exception_handler(IntegrityError('FOREIGN KEY constraint failed'), {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Foreign key constraint failed')

    def test_unhandled_error_is_500(self):
        response = api_exception_handler(RuntimeError('boom'), {})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['error'], 'Internal Server Error')


class AuthAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def register_payload(self, **overrides):
        payload = {
            'email': 'Citizen@Example.com',
            'password': 'password123',
            'firstName': 'Ana',
            'lastName': 'Santos',
        }
        payload.update(overrides)
        return payload

    def test_register_citizen(self):
        response = self.client.post('/api/v1/auth/register/', self.register_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('token', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['email'], 'citizen@example.com')
        self.assertEqual(response.data['user']['role'], User.ROLE_CITIZEN)
        self.assertTrue(AuditLog.objects.filter(action='USER_REGISTERED').exists())

    def test_register_duplicate_email(self):
        TestDataFactory.create_user(email='citizen@example.com')
        response = self.client.post('/api/v1/auth/register/', self.register_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_register_short_password(self):
        response = self.client.post('/api/v1/auth/register/', self.register_payload(password='short'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation Error')

    def test_register_staff_role_requires_admin(self):
        response = self.client.post('/api/v1/auth/register/', self.register_payload(role='EMPLOYEE'), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin = TestDataFactory.create_admin()
        client = AuthenticatedAPIClient().authenticate_user(admin)
        response = client.post('/api/v1/auth/register/', self.register_payload(role='EMPLOYEE'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], User.ROLE_EMPLOYEE)

    def test_login(self):
        TestDataFactory.create_user(email='ana@example.com', password='password123')
        response = self.client.post('/api/v1/auth/login/', {'email': 'ANA@example.com', 'password': 'password123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('token', response.data)
        self.assertTrue(AuditLog.objects.filter(action='USER_LOGIN').exists())

    def test_login_bad_credentials(self):
        TestDataFactory.create_user(email='ana@example.com', password='password123')
        response = self.client.post('/api/v1/auth/login/', {'email': 'ana@example.com', 'password': 'wrong-pass'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid credentials')

    def test_login_disabled_account(self):
        TestDataFactory.create_user(email='ana@example.com', password='password123', is_active=False)
        response = self.client.post('/api/v1/auth/login/', {'email': 'ana@example.com', 'password': 'password123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Account is disabled')

    def test_social_login_creates_then_links(self):
        payload = {'email': 'social@example.com', 'providerId': 'g-123', 'provider': 'google', 'name': 'Lito Lapid'}
        response = self.client.post('/api/v1/auth/social-login/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email='social@example.com')
        self.assertEqual(user.google_id, 'g-123')
        self.assertEqual(user.first_name, 'Lito')
        self.assertFalse(user.has_usable_password())

        response = self.client.post('/api/v1/auth/social-login/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(AuditLog.objects.filter(action='SOCIAL_USER_LOGIN').exists())

    def test_social_login_links_existing_email(self):
        user = TestDataFactory.create_user(email='existing@example.com')
        payload = {'email': 'existing@example.com', 'providerId': 'fb-9', 'provider': 'facebook'}
        response = self.client.post('/api/v1/auth/social-login/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.facebook_id, 'fb-9')

    def test_social_login_validation(self):
        response = self.client.post('/api/v1/auth/social-login/', {'email': 'x@example.com', 'provider': 'google'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/auth/social-login/',
                                    {'email': 'x@example.com', 'providerId': '1', 'provider': 'myspace'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_verify_and_me(self):
        user = TestDataFactory.create_user(first_name='Ana', last_name='Santos')
        client = AuthenticatedAPIClient().authenticate_user(user)
        response = client.get('/api/v1/auth/verify/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['valid'])

        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.data['fullName'], 'Ana Santos')

        response = client.patch('/api/v1/auth/me/', {'contactNo': '09170000000', 'role': 'ADMIN'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.contact_no, '09170000000')
        self.assertEqual(user.role, User.ROLE_CITIZEN)

    def test_unauthenticated_request_rejected(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UserAdministrationAPITests(TestCase):
    def setUp(self):
        self.admin = TestDataFactory.create_admin(email='admin@example.com')
        self.client = AuthenticatedAPIClient().authenticate_user(self.admin)

    def test_list_users_with_filters(self):
        TestDataFactory.create_employee(email='emp@example.com')
        TestDataFactory.create_user(email='cit@example.com')
        response = self.client.get('/api/v1/users/?role=employee')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['email'] for u in response.data['users']], ['emp@example.com'])
        self.assertEqual(response.data['pagination']['total'], 1)

    def test_list_users_requires_admin(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_employee())
        response = client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_employee_can_read_only_self(self):
        employee = TestDataFactory.create_employee()
        other = TestDataFactory.create_user()
        client = AuthenticatedAPIClient().authenticate_user(employee)
        self.assertEqual(client.get(f'/api/v1/users/{employee.id}/').status_code, status.HTTP_200_OK)
        self.assertEqual(client.get(f'/api/v1/users/{other.id}/').status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_cannot_delete_self(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_user(self):
        user = TestDataFactory.create_user()
        response = self.client.delete(f'/api/v1/users/{user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=user.id).exists())
        self.assertTrue(AuditLog.objects.filter(action='USER_DELETED').exists())

    def test_user_stats(self):
        TestDataFactory.create_employee()
        TestDataFactory.create_user(is_active=False)
        response = self.client.get('/api/v1/users/stats/overview/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['inactive'], 1)
        self.assertEqual(response.data['byRole']['EMPLOYEE'], 1)

    def test_audit_logs(self):
        log = AuditLog.objects.create(user=self.admin, action='PLOT_ASSIGNED', model_name='CemeteryPlot',
                                      object_id='1')
        AuditLog.objects.create(action='USER_LOGIN', model_name='User', object_id='2')
        response = self.client.get('/api/v1/audit-logs/?action=PLOT_ASSIGNED')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['logs']), 1)

        response = self.client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.data['user']['email'], 'admin@example.com')


class HealthAPITests(TestCase):
    def test_health(self):
        response = APIClient().get('/api/v1/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'OK')
        self.assertEqual(response.data['service'], 'municipal-services')

    def test_health_db(self):
        response = APIClient().get('/api/v1/health/db/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['database'], 'connected')


class MigrationTests(TestCase):
    APPS = [
        'core', 'inventory', 'locations', 'purchasing', 'requisitions',
        'physical_inventory', 'registry', 'cemetery', 'permits',
    ]

    def test_every_app_has_an_initial_migration(self):
        loader = MigrationLoader(None, ignore_no_migrations=True)
        for app in self.APPS:
            with self.subTest(app=app):
                self.assertIn((app, '0001_initial'), loader.disk_migrations)
                self.assertTrue(loader.disk_migrations[(app, '0001_initial')].initial)

    def test_user_model_migrates_first(self):
        loader = MigrationLoader(None, ignore_no_migrations=True)
        plan = loader.graph.forwards_plan(('permits', '0001_initial'))
        self.assertLess(plan.index(('core', '0001_initial')), plan.index(('registry', '0001_initial')))
        self.assertLess(plan.index(('registry', '0001_initial')), plan.index(('cemetery', '0001_initial')))

    def test_migrated_tables_exist(self):
        tables = connection.introspection.table_names()
        for table in ['users', 'audit_logs', 'items', 'stock_movements', 'delivery_receipts',
                      'ris_requests', 'physical_count_sessions', 'death_registrations',
                      'cemetery_plots', 'permits']:
            with self.subTest(table=table):
                self.assertIn(table, tables)

    def test_models_match_migrations(self):
        out = StringIO()
        try:
            call_command('makemigrations', '--check', '--dry-run', stdout=out)
        except SystemExit:
            self.fail(f'Model changes without a migration:\n{out.getvalue()}')
