"""
Test suite for the locations module
"""
from django.test import TestCase
from rest_framework import status

from pos_backend.core.models import AuditLog
from pos_backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from pos_backend.locations.models import StoreLocation


class StoreLocationTests(TestCase):
    """Test store location endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_create_store_location(self):
        response = self.client.post('/api/v1/store-locations/', {'location_name': 'Back Room', 'address': 'Ground floor'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['location_name'], 'Back Room')

    def test_duplicate_location_name(self):
        TestDataFactory.create_store_location(location_name='Back Room')
        response = self.client.post('/api/v1/store-locations/', {'location_name': 'Back Room'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_active_locations(self):
        TestDataFactory.create_store_location(location_name='Shop Floor')
        closed = TestDataFactory.create_store_location(location_name='Old Godown')
        closed.is_active = False
        closed.save()
        response = self.client.get('/api/v1/store-locations/?is_active=true')
        self.assertEqual([loc['location_name'] for loc in response.data], ['Shop Floor'])

    def test_update_and_delete_location(self):
        location = TestDataFactory.create_store_location()
        response = self.client.patch(f'/api/v1/store-locations/{location.id}/', {'description': 'Cold storage'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['description'], 'Cold storage')

        response = self.client.delete(f'/api/v1/store-locations/{location.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(StoreLocation.objects.filter(id=location.id).exists())

    def test_location_changes_are_audited(self):
        response = self.client.post('/api/v1/store-locations/', {'location_name': 'Back Room'})
        location_id = response.data['id']
        self.client.patch(f'/api/v1/store-locations/{location_id}/', {'address': 'First floor'})
        self.client.delete(f'/api/v1/store-locations/{location_id}/')

        logs = AuditLog.objects.filter(model_name='StoreLocation', object_id=str(location_id))
        self.assertEqual(sorted(logs.values_list('action', flat=True)), ['create', 'delete', 'update'])
        self.assertTrue(all(log.object_name == 'Back Room' for log in logs))
