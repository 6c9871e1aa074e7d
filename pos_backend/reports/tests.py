"""
Test suite for the reports module
Tests: Stock report, Detailed stock report
"""
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from pos_backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class StockReportTests(TestCase):
    """Test the stock report"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.tea = TestDataFactory.create_product(
            product_name='Green Tea', category='Beverages', supplier='Tea House',
            opening_stock_quantity=10, minimum_stock_quantity=2,
        )
        self.rice = TestDataFactory.create_product(
            product_name='Rice', category='Grocery', buying_cost='40.00', sales_price='55.00',
            opening_stock_quantity=5, minimum_stock_quantity=5,
        )

    def test_stock_report(self):
        TestDataFactory.create_sale(self.user, [(self.tea, 3, '80.00')])
        response = self.client.get('/api/v1/stock-reports/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        rows = {row['product_name']: row for row in response.data['products']}
        tea = rows['Green Tea']
        self.assertEqual(tea['opening_stock'], 10)
        self.assertEqual(tea['sold_quantity'], 3.0)
        self.assertEqual(tea['current_stock'], 7.0)
        self.assertEqual(tea['stock_value'], 350.0)
        self.assertEqual(tea['retail_value'], 560.0)
        self.assertFalse(tea['is_low_stock'])
        self.assertTrue(rows['Rice']['is_low_stock'])

        summary = response.data['summary']
        self.assertEqual(summary['total_products'], 2)
        self.assertEqual(summary['total_stock_quantity'], 12.0)
        self.assertEqual(summary['total_stock_value'], 550.0)
        self.assertEqual(summary['low_stock_count'], 1)
        self.assertEqual(summary['out_of_stock_count'], 0)

    def test_deleted_products_excluded(self):
        self.rice.soft_delete()
        response = self.client.get('/api/v1/stock-reports/')
        self.assertEqual([row['product_name'] for row in response.data['products']], ['Green Tea'])

    def test_filters(self):
        response = self.client.get('/api/v1/stock-reports/?category=beverages')
        self.assertEqual([row['product_name'] for row in response.data['products']], ['Green Tea'])

        response = self.client.get('/api/v1/stock-reports/?supplier=Tea%20House')
        self.assertEqual(len(response.data['products']), 1)

        response = self.client.get('/api/v1/stock-reports/?low_stock=true')
        self.assertEqual([row['product_name'] for row in response.data['products']], ['Rice'])

    def test_out_of_stock(self):
        TestDataFactory.create_sale(self.user, [(self.rice, 5, '55.00')])
        response = self.client.get('/api/v1/stock-reports/?category=Grocery')
        row = response.data['products'][0]
        self.assertEqual(row['current_stock'], 0.0)
        self.assertTrue(row['is_out_of_stock'])
        self.assertEqual(response.data['summary']['out_of_stock_count'], 1)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/stock-reports/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class DetailedStockReportTests(TestCase):
    """Test the detailed stock report"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.today = timezone.localdate()
        self.tea = TestDataFactory.create_product(
            product_name='Green Tea', batch_number='B-01', opening_stock_quantity=20,
            expiry_date=self.today + timedelta(days=10),
        )
        self.milk = TestDataFactory.create_product(
            product_name='Milk', opening_stock_quantity=5,
            expiry_date=self.today - timedelta(days=1),
        )

    def test_period_movement(self):
        TestDataFactory.create_sale(self.user, [(self.tea, 3, '80.00')])
        TestDataFactory.create_sale(self.user, [(self.tea, 4, '80.00')],
                                    sale_date=timezone.now() - timedelta(days=60))

        response = self.client.get('/api/v1/detailed-stock-reports/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = {row['product_name']: row for row in response.data['products']}
        tea = rows['Green Tea']
        self.assertEqual(tea['sold_quantity'], 7.0)
        self.assertEqual(tea['current_stock'], 13.0)
        self.assertEqual(tea['period_sold_quantity'], 3.0)
        self.assertEqual(tea['period_revenue'], 240.0)
        self.assertEqual(tea['period_cost'], 150.0)
        self.assertEqual(tea['period_profit'], 90.0)
        self.assertIsNotNone(tea['last_sold_at'])
        self.assertEqual(rows['Milk']['period_sold_quantity'], 0.0)
        self.assertIsNone(rows['Milk']['last_sold_at'])

        summary = response.data['summary']
        self.assertEqual(summary['period_revenue'], 240.0)
        self.assertEqual(summary['period_profit'], 90.0)

    def test_custom_period(self):
        old_date = timezone.now() - timedelta(days=60)
        TestDataFactory.create_sale(self.user, [(self.tea, 4, '80.00')], sale_date=old_date)
        day = timezone.localtime(old_date).date().isoformat()
        response = self.client.get(f'/api/v1/detailed-stock-reports/?date_from={day}&date_to={day}')
        self.assertEqual(response.data['date_from'], day)
        rows = {row['product_name']: row for row in response.data['products']}
        self.assertEqual(rows['Green Tea']['period_sold_quantity'], 4.0)

    def test_expiry(self):
        response = self.client.get('/api/v1/detailed-stock-reports/')
        rows = {row['product_name']: row for row in response.data['products']}
        self.assertEqual(rows['Green Tea']['batch_number'], 'B-01')
        self.assertFalse(rows['Green Tea']['is_expired'])
        self.assertEqual(rows['Green Tea']['days_to_expiry'], 10)
        self.assertTrue(rows['Milk']['is_expired'])
        self.assertEqual(rows['Milk']['days_to_expiry'], -1)
        self.assertEqual(response.data['summary']['expired_count'], 1)

    def test_invalid_dates(self):
        response = self.client.get('/api/v1/detailed-stock-reports/?date_from=2025-13-40')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
