"""
Test suite for the parties module
Tests: Customers, Suppliers
"""
from django.test import TestCase
from rest_framework import status

from pos_backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from pos_backend.parties.models import Customer, Supplier


class CustomerTests(TestCase):
    """Test customer endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        response = self.client.post('/api/v1/customers/', {
            'name': 'Asha Traders',
            'phone': '9800000001',
            'email': 'asha@traders.test',
            'address': 'Market Road',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Asha Traders')

    def test_create_customer_duplicate_phone(self):
        TestDataFactory.create_customer(phone='9800000001')
        response = self.client.post('/api/v1/customers/', {'name': 'Other', 'phone': '9800000001'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('phone', response.data)

    def test_customers_without_phone(self):
        first = self.client.post('/api/v1/customers/', {'name': 'Walk-in A', 'phone': ''})
        second = self.client.post('/api/v1/customers/', {'name': 'Walk-in B', 'phone': ''})
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(second.data['phone'])

    def test_create_customer_invalid_email(self):
        response = self.client.post('/api/v1/customers/', {'name': 'Bad Mail', 'email': 'not-an-email'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_customers(self):
        TestDataFactory.create_customer(name='Asha', phone='9800000001')
        TestDataFactory.create_customer(name='Ravi', phone='9700000002')
        response = self.client.get('/api/v1/customers/?search=98000')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], ['Asha'])

    def test_update_customer(self):
        customer = TestDataFactory.create_customer()
        response = self.client.patch(f'/api/v1/customers/{customer.id}/', {'address': 'New Street'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['address'], 'New Street')

    def test_delete_customer_keeps_sales(self):
        customer = TestDataFactory.create_customer(name='Asha')
        product = TestDataFactory.create_product()
        sale = TestDataFactory.create_sale(self.user, [(product, 1, '80.00')], customer=customer)
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Customer.objects.filter(id=customer.id).exists())
        sale.refresh_from_db()
        self.assertIsNone(sale.customer)
        self.assertEqual(sale.customer_name, 'Asha')

    def test_get_missing_customer(self):
        response = self.client.get('/api/v1/customers/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class SupplierTests(TestCase):
    """Test supplier endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_create_supplier(self):
        response = self.client.post('/api/v1/suppliers/', {
            'supplier_name': 'Tea House',
            'contact': '0484 200300',
            'address': 'Warehouse Lane',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['supplier_name'], 'Tea House')

    def test_create_supplier_missing_fields(self):
        response = self.client.post('/api/v1/suppliers/', {'supplier_name': 'Tea House'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('contact', response.data)
        self.assertIn('address', response.data)

    def test_list_and_search_suppliers(self):
        TestDataFactory.create_supplier(supplier_name='Tea House')
        TestDataFactory.create_supplier(supplier_name='Spice Mart')
        response = self.client.get('/api/v1/suppliers/')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/suppliers/?search=spice')
        self.assertEqual([s['supplier_name'] for s in response.data], ['Spice Mart'])

    def test_update_supplier(self):
        supplier = TestDataFactory.create_supplier()
        response = self.client.put(f'/api/v1/suppliers/{supplier.id}/', {
            'supplier_name': 'Renamed',
            'contact': '123',
            'address': 'Somewhere',
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['supplier_name'], 'Renamed')

    def test_delete_supplier(self):
        supplier = TestDataFactory.create_supplier()
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Supplier.objects.filter(id=supplier.id).exists())
