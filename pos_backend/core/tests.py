"""
Test suite for the core module
Tests: Authentication, Users, Roles, Profile, Audit logs
"""
import io
import os
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from pos_backend.core.models import User, AuditLog
from pos_backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, TEST_PASSWORD


def make_image_file(name='photo.png', size=(20, 20)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color=(200, 30, 30)).save(buffer, format='PNG')
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


class AuthenticationTests(TestCase):
    """Test register, login, refresh and logout"""

    def setUp(self):
        self.client = APIClient()
        self.user = TestDataFactory.create_user(email='cashier@test.com', name='Cashier', role='staff')

    def test_register_creates_user_role_account(self):
        response = self.client.post('/api/v1/auth/register/', {
            'email': 'newbie@test.com',
            'name': 'Newbie',
            'password': TEST_PASSWORD,
            'password_confirm': TEST_PASSWORD,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], 'user')
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'email': 'newbie@test.com',
            'name': 'Newbie',
            'password': TEST_PASSWORD,
            'password_confirm': 'Different#2025',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password_confirm', response.data)

    def test_register_duplicate_email(self):
        response = self.client.post('/api/v1/auth/register/', {
            'email': 'cashier@test.com',
            'name': 'Other',
            'password': TEST_PASSWORD,
            'password_confirm': TEST_PASSWORD,
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_login_returns_tokens_with_role_claim(self):
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'cashier@test.com',
            'password': TEST_PASSWORD,
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['email'], 'cashier@test.com')
        token = AccessToken(response.data['access'])
        self.assertEqual(token['role'], 'staff')
        self.assertEqual(token['name'], 'Cashier')
        self.assertTrue(AuditLog.objects.filter(user=self.user, action='login').exists())

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'cashier@test.com',
            'password': 'wrong-password',
        })
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_suspended_user_cannot_login(self):
        TestDataFactory.create_user(email='blocked@test.com', status='suspended')
        response = self.client.post('/api/v1/auth/login/', {
            'email': 'blocked@test.com',
            'password': TEST_PASSWORD,
        })
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        login = self.client.post('/api/v1/auth/login/', {
            'email': 'cashier@test.com',
            'password': TEST_PASSWORD,
        })
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_token_of_deleted_user(self):
        login = self.client.post('/api/v1/auth/login/', {
            'email': 'cashier@test.com',
            'password': TEST_PASSWORD,
        })
        self.user.delete()
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token_issued_directly_for_deleted_user(self):
        other = TestDataFactory.create_user(email='temp@test.com')
        refresh = str(RefreshToken.for_user(other))
        other.delete()
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': refresh})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertNotIn('access', response.data)

    def test_logout_blacklists_refresh_token(self):
        login = self.client.post('/api/v1/auth/login/', {
            'email': 'cashier@test.com',
            'password': TEST_PASSWORD,
        })
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")
        response = self.client.post('/api/v1/auth/logout/', {'refresh': login.data['refresh']})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_requires_refresh_token(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.post('/api/v1/auth/logout/', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'cashier@test.com')

    def test_unauthenticated_request(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


@override_settings(DEFAULT_ADMIN_EMAIL='owner@test.com', DEFAULT_ADMIN_PASSWORD='Owner#Pass2025',
                   DEFAULT_ADMIN_NAME='Owner')
class DefaultAdminTests(TestCase):
    """Test default admin bootstrap"""

    def test_add_default_user_endpoint(self):
        admin = TestDataFactory.create_admin(email='boss@test.com')
        client = AuthenticatedAPIClient()
        client.authenticate_user(admin)

        response = client.post('/api/v1/auth/add-default-user/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], 'admin')

        response = client.post('/api/v1/auth/add-default-user/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(User.objects.filter(email='owner@test.com').count(), 1)

    def test_add_default_user_requires_admin_role(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(TestDataFactory.create_user())
        response = client.post('/api/v1/auth/add-default-user/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_default_admin_command(self):
        call_command('create_default_admin', stdout=io.StringIO())
        user = User.objects.get(email='owner@test.com')
        self.assertTrue(user.check_password('Owner#Pass2025'))
        self.assertTrue(user.is_staff)


class UserManagementTests(TestCase):
    """Test user CRUD, roles and status"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(email='boss@test.com')
        self.user = TestDataFactory.create_user(email='clerk@test.com')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.media_root = tempfile.mkdtemp()
        self.media_override = override_settings(MEDIA_ROOT=self.media_root)
        self.media_override.enable()

    def tearDown(self):
        self.media_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_list_users(self):
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    def test_list_users_paginated(self):
        for _ in range(12):
            TestDataFactory.create_user()
        response = self.client.get('/api/v1/users/')
        self.assertEqual(len(response.data['results']), 10)
        self.assertIsNotNone(response.data['next'])

    def test_filter_users_by_role(self):
        response = self.client.get('/api/v1/users/?role=admin')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['email'], 'boss@test.com')

    def test_create_user(self):
        response = self.client.post('/api/v1/users/', {
            'email': 'keeper@test.com',
            'name': 'Keeper',
            'password': TEST_PASSWORD,
            'password_confirm': TEST_PASSWORD,
            'role': 'storekeeper',
            'status': 'active',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'storekeeper')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='User').exists())

    def test_create_user_with_photo(self):
        response = self.client.post('/api/v1/users/', {
            'email': 'photo@test.com',
            'name': 'Photo',
            'password': TEST_PASSWORD,
            'password_confirm': TEST_PASSWORD,
            'role': 'staff',
            'status': 'active',
            'photo': make_image_file(),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.get(email='photo@test.com').photo)

    def test_create_user_rejects_unsupported_photo_type(self):
        response = self.client.post('/api/v1/users/', {
            'email': 'photo@test.com',
            'name': 'Photo',
            'password': TEST_PASSWORD,
            'password_confirm': TEST_PASSWORD,
            'role': 'staff',
            'status': 'active',
            'photo': make_image_file(name='photo.bmp'),
        }, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('photo', response.data)

    def test_create_user_short_password(self):
        response = self.client.post('/api/v1/users/', {
            'email': 'short@test.com',
            'name': 'Short',
            'password': 'abc',
            'password_confirm': 'abc',
            'role': 'staff',
            'status': 'active',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_create_user_requires_admin_role(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.post('/api/v1/users/', {
            'email': 'x@test.com',
            'name': 'X',
            'password': TEST_PASSWORD,
            'password_confirm': TEST_PASSWORD,
            'role': 'admin',
            'status': 'active',
        })
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_get_user(self):
        response = self.client.get(f'/api/v1/users/{self.user.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'clerk@test.com')

    def test_get_missing_user(self):
        response = self.client.get('/api/v1/users/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_role(self):
        response = self.client.put(f'/api/v1/users/{self.user.id}/role/', {'role': 'storekeeper'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, 'storekeeper')
        log = AuditLog.objects.get(action='role_change')
        self.assertEqual(log.changes['role'], {'old': 'user', 'new': 'storekeeper'})

    def test_update_role_rejects_unknown_role(self):
        response = self.client.put(f'/api/v1/users/{self.user.id}/role/', {'role': 'owner'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_role_requires_admin_role(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.put(f'/api/v1/users/{self.admin.id}/role/', {'role': 'user'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_suspend_user(self):
        response = self.client.put(f'/api/v1/users/{self.user.id}/status/', {'status': 'suspended'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.status, 'suspended')
        self.assertFalse(self.user.is_active)

    def test_delete_user(self):
        response = self.client.delete(f'/api/v1/users/{self.user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(id=self.user.id).exists())

    def test_cannot_delete_own_account(self):
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(User.objects.filter(id=self.admin.id).exists())

    def test_delete_user_requires_admin_role(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ProfileTests(TestCase):
    """Test password change and profile update"""

    def setUp(self):
        self.user = TestDataFactory.create_user(email='clerk@test.com', name='Clerk')
        self.other = TestDataFactory.create_user(email='taken@test.com')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.media_root = tempfile.mkdtemp()
        self.media_override = override_settings(MEDIA_ROOT=self.media_root)
        self.media_override.enable()

    def tearDown(self):
        self.media_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_change_password(self):
        response = self.client.post('/api/v1/users/change-password/', {
            'current_password': TEST_PASSWORD,
            'new_password': 'Brand#New2025pw',
            'new_password_confirm': 'Brand#New2025pw',
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Brand#New2025pw'))

    def test_change_password_wrong_current(self):
        response = self.client.post('/api/v1/users/change-password/', {
            'current_password': 'Not#TheRight1',
            'new_password': 'Brand#New2025pw',
            'new_password_confirm': 'Brand#New2025pw',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_password', response.data)

    def test_change_password_mismatch(self):
        response = self.client.post('/api/v1/users/change-password/', {
            'current_password': TEST_PASSWORD,
            'new_password': 'Brand#New2025pw',
            'new_password_confirm': 'Other#New2025pw',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_profile(self):
        response = self.client.put('/api/v1/users/update-profile/', {'name': 'Head Clerk', 'phone': '5550100'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Head Clerk')
        self.assertEqual(response.data['email'], 'clerk@test.com')

    def test_update_profile_keeps_own_email(self):
        response = self.client.put('/api/v1/users/update-profile/', {'email': 'clerk@test.com'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_update_profile_rejects_taken_email(self):
        response = self.client.put('/api/v1/users/update-profile/', {'email': 'taken@test.com'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_update_profile_replaces_photo(self):
        self.client.patch('/api/v1/users/update-profile/', {'photo': make_image_file('first.png')},
                          format='multipart')
        self.user.refresh_from_db()
        first_path = self.user.photo.path

        response = self.client.patch('/api/v1/users/update-profile/', {'photo': make_image_file('second.png')},
                                     format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertNotEqual(self.user.photo.path, first_path)
        self.assertFalse(os.path.exists(first_path))


class AuditLogTests(TestCase):
    """Test audit log and activity log endpoints"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin(email='boss@test.com')
        self.user = TestDataFactory.create_user(email='clerk@test.com')
        AuditLog.objects.create(user=self.admin, action='create', model_name='Product', object_id='1')
        AuditLog.objects.create(user=self.user, action='update', model_name='Product', object_id='1')
        self.client = AuthenticatedAPIClient()

    def test_admin_sees_all_logs(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_user_sees_own_logs(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['user_email'], 'clerk@test.com')

    def test_filter_logs_by_action(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/?action=create')
        self.assertEqual(len(response.data), 1)

    def test_invalid_date_filter(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/?date_from=not-a-date')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_log_detail_of_other_user_forbidden(self):
        log = AuditLog.objects.get(user=self.admin)
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/audit-logs/{log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_activity_log(self):
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/users/{self.user.id}/activity-log/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['activity']), 1)

    def test_activity_log_of_other_user_forbidden(self):
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/users/{self.admin.id}/activity-log/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_activity_log_visible_to_admin(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get(f'/api/v1/users/{self.user.id}/activity-log/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
