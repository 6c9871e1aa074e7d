"""
Test suite for the sales module
Tests: Bills, Stock checks, Bill numbers, Profit reports
"""
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from pos_backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from pos_backend.sales.models import Sale, SaleItem


class SaleCreateTests(TestCase):
    """Test bill creation"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(product_name='Green Tea', opening_stock_quantity=10)

    def test_create_sale(self):
        response = self.client.post('/api/v1/sales/', {
            'payment_type': 'cash',
            'received_amount': '200.00',
            'items': [{'product': self.product.id, 'quantity': 2, 'unit_price': '80.00'}],
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['bill_number'], 1)
        self.assertEqual(response.data['subtotal'], '160.00')
        self.assertEqual(response.data['total'], '160.00')
        self.assertEqual(response.data['balance_amount'], '40.00')
        self.assertEqual(response.data['created_by'], self.user.id)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['product_name'], 'Green Tea')
        self.assertEqual(response.data['items'][0]['buying_cost'], '50.00')
        self.assertEqual(response.data['profit'], 60.0)
        self.assertEqual(self.product.get_current_stock(), 8)

    def test_unit_price_defaults_to_sales_price(self):
        response = self.client.post('/api/v1/sales/', {
            'items': [{'product': self.product.id, 'quantity': 1}],
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['items'][0]['unit_price'], '80.00')

    def test_customer_name_copied_from_customer(self):
        customer = TestDataFactory.create_customer(name='Asha')
        response = self.client.post('/api/v1/sales/', {
            'customer': customer.id,
            'items': [{'product': self.product.id, 'quantity': 1}],
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['customer_name'], 'Asha')

    def test_bill_numbers_increase(self):
        TestDataFactory.create_sale(self.user, [(self.product, 1, '80.00')], bill_number=41)
        response = self.client.post('/api/v1/sales/', {
            'items': [{'product': self.product.id, 'quantity': 1}],
        })
        self.assertEqual(response.data['bill_number'], 42)

    def test_duplicate_bill_number(self):
        TestDataFactory.create_sale(self.user, [(self.product, 1, '80.00')], bill_number=7)
        response = self.client.post('/api/v1/sales/', {
            'bill_number': 7,
            'items': [{'product': self.product.id, 'quantity': 1}],
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('bill_number', response.data)

    def test_bill_number_must_be_positive(self):
        response = self.client.post('/api/v1/sales/', {
            'bill_number': 0,
            'items': [{'product': self.product.id, 'quantity': 1}],
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('bill_number', response.data)
        self.assertFalse(Sale.objects.exists())

    def test_insufficient_stock(self):
        TestDataFactory.create_sale(self.user, [(self.product, 8, '80.00')])
        response = self.client.post('/api/v1/sales/', {
            'items': [{'product': self.product.id, 'quantity': 3}],
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)
        self.assertIn('Insufficient stock for Green Tea', str(response.data['items']))
        self.assertEqual(Sale.objects.count(), 1)

    def test_repeated_product_lines_share_stock(self):
        response = self.client.post('/api/v1/sales/', {
            'items': [
                {'product': self.product.id, 'quantity': 6},
                {'product': self.product.id, 'quantity': 6},
            ],
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_below_minimum_price(self):
        product = TestDataFactory.create_product(minimum_price='70.00')
        response = self.client.post('/api/v1/sales/', {
            'items': [{'product': product.id, 'quantity': 1, 'unit_price': '65.00'}],
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_deleted_product_cannot_be_sold(self):
        self.product.soft_delete()
        response = self.client.post('/api/v1/sales/', {
            'items': [{'product': self.product.id, 'quantity': 1}],
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sale_without_items(self):
        response = self.client.post('/api/v1/sales/', {'payment_type': 'cash', 'items': []})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/sales/', {'payment_type': 'cash'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_discount_above_subtotal(self):
        response = self.client.post('/api/v1/sales/', {
            'discount_amount': '100.00',
            'items': [{'product': self.product.id, 'quantity': 1}],
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('discount_amount', response.data)

    def test_discount_and_tax_in_total(self):
        response = self.client.post('/api/v1/sales/', {
            'discount_amount': '10.00',
            'tax_amount': '5.00',
            'items': [{'product': self.product.id, 'quantity': 2, 'discount_amount': '4.00'}],
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['items'][0]['line_total'], '156.00')
        self.assertEqual(response.data['subtotal'], '156.00')
        self.assertEqual(response.data['total'], '151.00')

    def test_sale_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/sales/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class SaleManagementTests(TestCase):
    """Test listing, editing and deleting bills"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(product_name='Green Tea', opening_stock_quantity=10)

    def test_list_filters(self):
        customer = TestDataFactory.create_customer(name='Asha')
        TestDataFactory.create_sale(self.user, [(self.product, 1, '80.00')], customer=customer, payment_type='upi')
        TestDataFactory.create_sale(self.user, [(self.product, 1, '80.00')],
                                    sale_date=timezone.now() - timedelta(days=40))

        response = self.client.get('/api/v1/sales/')
        self.assertEqual(len(response.data), 2)

        response = self.client.get(f'/api/v1/sales/?customer={customer.id}')
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/v1/sales/?payment_type=upi')
        self.assertEqual(len(response.data), 1)

        date_from = (timezone.localdate() - timedelta(days=7)).isoformat()
        response = self.client.get(f'/api/v1/sales/?date_from={date_from}')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['customer_name'], 'Asha')

    def test_list_invalid_date(self):
        response = self.client.get('/api/v1/sales/?date_from=yesterday')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_next_bill_number(self):
        response = self.client.get('/api/v1/next-bill-number/')
        self.assertEqual(response.data, {'next_bill_number': 1})
        TestDataFactory.create_sale(self.user, [(self.product, 1, '80.00')], bill_number=12)
        response = self.client.get('/api/v1/next-bill-number/')
        self.assertEqual(response.data, {'next_bill_number': 13})

    def test_update_replaces_items(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 8, '80.00')])
        # The bill's own 8 units are available to it again
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {
            'items': [{'product': self.product.id, 'quantity': 10, 'unit_price': '75.00'}],
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['subtotal'], '750.00')
        self.assertEqual(SaleItem.objects.filter(sale=sale).count(), 1)
        self.assertEqual(self.product.get_current_stock(), 0)

    def test_update_over_stock(self):
        other = TestDataFactory.create_sale(self.user, [(self.product, 5, '80.00')])
        sale = TestDataFactory.create_sale(self.user, [(self.product, 2, '80.00')])
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {
            'items': [{'product': self.product.id, 'quantity': 6}],
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(sale.items.get().quantity, 2)
        self.assertTrue(Sale.objects.filter(id=other.id).exists())

    def test_update_header_only(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 2, '80.00')])
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'discount_amount': '20.00', 'notes': 'Regular'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], '140.00')
        self.assertEqual(response.data['notes'], 'Regular')

    def test_update_bill_number_to_zero(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1, '80.00')], bill_number=5)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'bill_number': 0})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('bill_number', response.data)
        sale.refresh_from_db()
        self.assertEqual(sale.bill_number, 5)

    def test_changing_customer_updates_name(self):
        first = TestDataFactory.create_customer(name='Asha')
        second = TestDataFactory.create_customer(name='Ravi')
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1, '80.00')], customer=first)
        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'customer': second.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['customer_name'], 'Ravi')

        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'customer': first.id, 'customer_name': 'Asha (shop)'})
        self.assertEqual(response.data['customer_name'], 'Asha (shop)')

        response = self.client.patch(f'/api/v1/sales/{sale.id}/', {'notes': 'Paid later'})
        self.assertEqual(response.data['customer_name'], 'Asha (shop)')

    def test_delete_sale_restores_stock(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 4, '80.00')])
        self.assertEqual(self.product.get_current_stock(), 6)
        response = self.client.delete(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(SaleItem.objects.filter(sale_id=sale.id).exists())
        self.assertEqual(self.product.get_current_stock(), 10)

    def test_permanently_deleted_product_keeps_line(self):
        sale = TestDataFactory.create_sale(self.user, [(self.product, 1, '80.00')])
        self.product.delete()
        response = self.client.get(f'/api/v1/sales/{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['items'][0]['product'])
        self.assertEqual(response.data['items'][0]['product_name'], 'Green Tea')


class ProfitReportTests(TestCase):
    """Test daily and bill-wise profit reports"""

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.product = TestDataFactory.create_product(buying_cost='50.00', opening_stock_quantity=100)

    def test_reports_require_admin(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/sales/daily-profit-report/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get('/api/v1/sales/bill-wise-profit-report/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_daily_profit_report(self):
        TestDataFactory.create_sale(self.admin, [(self.product, 2, '80.00')])
        TestDataFactory.create_sale(self.admin, [(self.product, 1, '90.00')], discount_amount='10.00')
        TestDataFactory.create_sale(self.admin, [(self.product, 5, '80.00')],
                                    sale_date=timezone.now() - timedelta(days=45))

        response = self.client.get('/api/v1/sales/daily-profit-report/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['days']), 1)
        day = response.data['days'][0]
        self.assertEqual(day['date'], timezone.localdate().isoformat())
        self.assertEqual(day['bills'], 2)
        self.assertEqual(day['gross_sales'], 250.0)
        self.assertEqual(day['discount'], 10.0)
        self.assertEqual(day['net_sales'], 240.0)
        self.assertEqual(day['cost'], 150.0)
        self.assertEqual(day['profit'], 90.0)
        self.assertEqual(response.data['totals']['bills'], 2)
        self.assertEqual(response.data['totals']['profit'], 90.0)

    def test_daily_profit_report_date_range(self):
        old_date = timezone.now() - timedelta(days=45)
        TestDataFactory.create_sale(self.admin, [(self.product, 5, '80.00')], sale_date=old_date)
        day = timezone.localtime(old_date).date().isoformat()
        response = self.client.get(f'/api/v1/sales/daily-profit-report/?date_from={day}&date_to={day}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['date_from'], day)
        self.assertEqual(response.data['totals']['net_sales'], 400.0)
        self.assertEqual(response.data['totals']['cost'], 250.0)

    def test_daily_profit_report_reversed_range(self):
        response = self.client.get('/api/v1/sales/daily-profit-report/?date_from=2025-02-01&date_to=2025-01-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bill_wise_profit_report(self):
        customer = TestDataFactory.create_customer(name='Asha')
        first = TestDataFactory.create_sale(self.admin, [(self.product, 2, '80.00')], customer=customer)
        TestDataFactory.create_sale(self.admin, [(self.product, 1, '60.00')], discount_amount='15.00')

        response = self.client.get('/api/v1/sales/bill-wise-profit-report/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        bills = response.data['bills']
        self.assertEqual(len(bills), 2)
        self.assertEqual(bills[0]['bill_number'], first.bill_number)
        self.assertEqual(bills[0]['customer_name'], 'Asha')
        self.assertEqual(bills[0]['profit'], 60.0)
        self.assertEqual(bills[1]['net_sales'], 45.0)
        self.assertEqual(bills[1]['profit'], -5.0)
        self.assertEqual(response.data['totals'], {'net_sales': 205.0, 'cost': 150.0, 'profit': 55.0})
