"""
Test utilities and factories for creating test data
"""
import random
import string
from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from pos_backend.catalog.models import Category, Unit, Product
from pos_backend.locations.models import StoreLocation
from pos_backend.parties.models import Customer, Supplier
from pos_backend.sales.models import Sale, SaleItem

User = get_user_model()

TEST_PASSWORD = 'Counter#Pass2025'


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, name=None, password=TEST_PASSWORD, role='user', status='active'):
        """Create a test user"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6).lower()}@test.com'
        return User.objects.create_user(
            email=email,
            password=password,
            name=name or 'Test User',
            role=role,
            status=status,
        )

    @staticmethod
    def create_admin(email=None, role='admin'):
        """Create a user holding an admin role"""
        return TestDataFactory.create_user(email=email, name='Test Admin', role=role)

    @staticmethod
    def create_category(name=None, description=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(
            name=name,
            description=description or f'Test category {name}'
        )

    @staticmethod
    def create_unit(name=None, short_name='pcs'):
        """Create a test unit"""
        if not name:
            name = f'Unit_{TestDataFactory.random_string(6)}'
        return Unit.objects.create(name=name, short_name=short_name)

    @staticmethod
    def create_product(product_name=None, item_code=None, barcode=None, buying_cost='50.00',
                       sales_price='80.00', mrp='100.00', minimum_price='0.00',
                       opening_stock_quantity=10, minimum_stock_quantity=2, **extra):
        """Create a test product"""
        if not product_name:
            product_name = f'Product_{TestDataFactory.random_string(6)}'
        if item_code is None:
            item_code = f'IC_{TestDataFactory.random_string(8)}'
        return Product.objects.create(
            product_name=product_name,
            item_code=item_code,
            barcode=barcode,
            buying_cost=Decimal(buying_cost),
            sales_price=Decimal(sales_price),
            mrp=Decimal(mrp),
            minimum_price=Decimal(minimum_price),
            opening_stock_quantity=opening_stock_quantity,
            minimum_stock_quantity=minimum_stock_quantity,
            **extra
        )

    @staticmethod
    def create_customer(name=None, phone=None, email=None):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'9{random.randint(100000000, 999999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Customer.objects.create(name=name, phone=phone, email=email)

    @staticmethod
    def create_supplier(supplier_name=None, contact=None, address=None):
        """Create a test supplier"""
        if not supplier_name:
            supplier_name = f'Supplier_{TestDataFactory.random_string(6)}'
        return Supplier.objects.create(
            supplier_name=supplier_name,
            contact=contact or f'9{random.randint(100000000, 999999999)}',
            address=address or f'Test Address {supplier_name}'
        )

    @staticmethod
    def create_store_location(location_name=None):
        """Create a test store location"""
        if not location_name:
            location_name = f'Location_{TestDataFactory.random_string(6)}'
        return StoreLocation.objects.create(location_name=location_name, address='Main street')

    @staticmethod
    def create_sale(user, items, bill_number=None, customer=None, discount_amount='0.00',
                    sale_date=None, payment_type='cash'):
        """
        Create a sale directly through the ORM.

        `items` is a list of (product, quantity, unit_price) tuples.
        """
        if bill_number is None:
            bill_number = Sale.next_bill_number()
        sale_kwargs = {
            'bill_number': bill_number,
            'customer': customer,
            'customer_name': customer.name if customer else '',
            'payment_type': payment_type,
            'discount_amount': Decimal(discount_amount),
            'created_by': user,
        }
        if sale_date is not None:
            sale_kwargs['sale_date'] = sale_date
        sale = Sale.objects.create(**sale_kwargs)
        for product, quantity, unit_price in items:
            quantity = Decimal(str(quantity))
            unit_price = Decimal(str(unit_price))
            SaleItem.objects.create(
                sale=sale,
                product=product,
                product_name=product.product_name,
                item_code=product.item_code,
                quantity=quantity,
                unit_price=unit_price,
                buying_cost=product.buying_cost,
                line_total=quantity * unit_price,
            )
        sale.recalculate_totals()
        sale.save()
        return sale


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
