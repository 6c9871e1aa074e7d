"""
Test suite for the catalog module
Tests: Categories, Units, Products, Deleted bin, Import, Barcode labels
"""
import io
import os
import tempfile
from unittest import mock
from urllib.parse import quote

import pandas as pd
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework import status

from pos_backend.catalog.importers import clean_cell, map_row
from pos_backend.catalog.models import Category, Product
from pos_backend.catalog.serializers import ProductSerializer
from pos_backend.core.models import AuditLog
from pos_backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient

IMPORT_HEADER = (
    'Product Name,Item Code,Batch,Expiry,Buying Cost,Sales Price,Minimum Price,Wholesale Price,'
    'Barcode,MRP,Min Stock,Opening Qty,Opening Value,Category,Supplier,Unit,Location,Cabinet,Row,'
    'Extra Name,Extra Value'
)


def make_csv(*lines, name='products.csv'):
    content = '\n'.join((IMPORT_HEADER,) + lines) + '\n'
    return SimpleUploadedFile(name, content.encode('utf-8'), content_type='text/csv')


class CategoryTests(TestCase):
    """Test category endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_categories(self):
        TestDataFactory.create_category(name='Beverages')
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_create_category(self):
        response = self.client.post('/api/v1/categories/', {'name': 'Snacks', 'description': 'Chips and more'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Snacks')

    def test_create_duplicate_category(self):
        TestDataFactory.create_category(name='Snacks')
        response = self.client.post('/api/v1/categories/', {'name': 'Snacks'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_category(self):
        category = TestDataFactory.create_category()
        response = self.client.patch(f'/api/v1/categories/{category.id}/', {'is_active': False})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])

    def test_delete_category(self):
        category = TestDataFactory.create_category()
        response = self.client.delete(f'/api/v1/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Category.objects.filter(id=category.id).exists())

    def test_category_changes_are_audited(self):
        response = self.client.post('/api/v1/categories/', {'name': 'Snacks'})
        category_id = response.data['id']
        self.client.patch(f'/api/v1/categories/{category_id}/', {'name': 'Savoury Snacks'})
        self.client.delete(f'/api/v1/categories/{category_id}/')

        logs = AuditLog.objects.filter(model_name='Category', object_id=str(category_id))
        self.assertEqual(sorted(logs.values_list('action', flat=True)), ['create', 'delete', 'update'])
        update = logs.get(action='update')
        self.assertEqual(update.changes, {'name': {'old': 'Snacks', 'new': 'Savoury Snacks'}})
        self.assertEqual(update.user, self.user)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class UnitTests(TestCase):
    """Test unit endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_create_and_get_unit(self):
        response = self.client.post('/api/v1/units/', {'name': 'Kilogram', 'short_name': 'kg'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get(f"/api/v1/units/{response.data['id']}/")
        self.assertEqual(response.data['short_name'], 'kg')

    def test_update_unit(self):
        unit = TestDataFactory.create_unit(name='Box')
        response = self.client.put(f'/api/v1/units/{unit.id}/', {'name': 'Carton', 'short_name': 'ctn'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Carton')

    def test_unit_changes_are_audited(self):
        unit = TestDataFactory.create_unit(name='Box')
        self.client.patch(f'/api/v1/units/{unit.id}/', {'short_name': 'bx'})
        response = self.client.delete(f'/api/v1/units/{unit.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        actions = AuditLog.objects.filter(model_name='Unit', object_id=str(unit.id)).values_list('action', flat=True)
        self.assertEqual(sorted(actions), ['delete', 'update'])


class ProductTests(TestCase):
    """Test product CRUD and listing"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def product_payload(self, **overrides):
        payload = {
            'product_name': 'Green Tea',
            'item_code': 'GT-001',
            'buying_cost': '40.00',
            'sales_price': '55.00',
            'mrp': '60.00',
            'minimum_price': '50.00',
            'opening_stock_quantity': 24,
            'minimum_stock_quantity': 5,
            'category': 'Beverages',
            'supplier': 'Tea House',
            'extra_fields': {'flavour': 'jasmine'},
        }
        payload.update(overrides)
        return payload

    def test_create_product(self):
        response = self.client.post('/api/v1/products/', self.product_payload())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product_name'], 'Green Tea')
        self.assertEqual(response.data['current_stock'], 24.0)
        self.assertEqual(response.data['extra_fields'], {'flavour': 'jasmine'})
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Product').exists())

    def test_create_product_missing_required_fields(self):
        response = self.client.post('/api/v1/products/', {'product_name': 'Incomplete'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('buying_cost', 'sales_price', 'mrp'):
            self.assertIn(field, response.data)

    def test_create_product_negative_price(self):
        response = self.client.post('/api/v1/products/', self.product_payload(sales_price='-1'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sales_price', response.data)

    def test_create_product_null_stock_quantities(self):
        response = self.client.post('/api/v1/products/', self.product_payload(
            opening_stock_quantity=None, minimum_stock_quantity=None,
        ))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['opening_stock_quantity'], 0)
        self.assertEqual(response.data['minimum_stock_quantity'], 0)
        product = Product.objects.get(id=response.data['id'])
        self.assertEqual(product.opening_stock_quantity, 0)

    def test_create_product_negative_stock_quantity(self):
        response = self.client.post('/api/v1/products/', self.product_payload(opening_stock_quantity=-1))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('opening_stock_quantity', response.data)

    def test_create_product_duplicate_item_code(self):
        TestDataFactory.create_product(item_code='GT-001')
        response = self.client.post('/api/v1/products/', self.product_payload())
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('item_code', response.data)

    def test_create_product_duplicate_barcode(self):
        TestDataFactory.create_product(barcode='8901234567890')
        response = self.client.post('/api/v1/products/', self.product_payload(barcode='8901234567890'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('barcode', response.data)

    def test_blank_codes_do_not_collide(self):
        first = self.client.post('/api/v1/products/', self.product_payload(item_code='', barcode=''))
        second = self.client.post('/api/v1/products/', self.product_payload(item_code='', barcode=''))
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(second.data['item_code'])

    def test_create_product_invalid_extra_fields(self):
        response = self.client.post('/api/v1/products/', self.product_payload(extra_fields=['not', 'an', 'object']))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('extra_fields', response.data)

    def test_update_product_keeps_own_item_code(self):
        product = TestDataFactory.create_product(item_code='GT-001')
        response = self.client.put(f'/api/v1/products/{product.id}/', self.product_payload(sales_price='58.00'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sales_price'], '58.00')

    def test_patch_product(self):
        product = TestDataFactory.create_product()
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'cabinet': 'C2', 'row': '4'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cabinet'], 'C2')
        # Untracked fields leave no audit entry
        self.assertFalse(AuditLog.objects.filter(action='update', model_name='Product').exists())

    def test_update_tracks_changes(self):
        product = TestDataFactory.create_product(sales_price='80.00')
        self.client.patch(f'/api/v1/products/{product.id}/', {'sales_price': '85.00'})
        log = AuditLog.objects.get(action='update', model_name='Product')
        self.assertEqual(log.changes['sales_price'], {'old': '80.00', 'new': '85.00'})

    def test_list_products_excludes_deleted(self):
        TestDataFactory.create_product(product_name='Visible')
        hidden = TestDataFactory.create_product(product_name='Hidden')
        hidden.soft_delete()
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['product_name'] for p in response.data], ['Visible'])

    def test_list_products_shows_current_stock(self):
        product = TestDataFactory.create_product(opening_stock_quantity=10)
        TestDataFactory.create_sale(self.user, [(product, 3, '80.00')])
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.data[0]['sold_quantity'], 3.0)
        self.assertEqual(response.data[0]['current_stock'], 7.0)

    def test_search_products(self):
        TestDataFactory.create_product(product_name='Green Tea', item_code='GT-001')
        TestDataFactory.create_product(product_name='Coffee Beans', item_code='CB-001', barcode='555000')
        response = self.client.get('/api/v1/products/?search=tea')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/products/?search=555000')
        self.assertEqual(response.data[0]['product_name'], 'Coffee Beans')

    def test_filter_products_by_category(self):
        TestDataFactory.create_product(category='Beverages')
        TestDataFactory.create_product(category='Snacks')
        response = self.client.get('/api/v1/products/?category=beverages')
        self.assertEqual(len(response.data), 1)

    def test_filter_low_stock(self):
        low = TestDataFactory.create_product(opening_stock_quantity=5, minimum_stock_quantity=3)
        TestDataFactory.create_product(opening_stock_quantity=50, minimum_stock_quantity=3)
        TestDataFactory.create_sale(self.user, [(low, 2, '80.00')])
        response = self.client.get('/api/v1/products/?low_stock=true')
        self.assertEqual([p['id'] for p in response.data], [low.id])
        self.assertTrue(response.data[0]['is_low_stock'])

    def test_filter_expiring_before(self):
        TestDataFactory.create_product(product_name='Milk', expiry_date='2026-01-10')
        TestDataFactory.create_product(product_name='Rice', expiry_date='2027-06-01')
        response = self.client.get('/api/v1/products/?expiring_before=2026-12-31')
        self.assertEqual([p['product_name'] for p in response.data], ['Milk'])

    def test_invalid_filter_value(self):
        response = self.client.get('/api/v1/products/?expiring_before=soon')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_get_missing_product(self):
        response = self.client.get('/api/v1/products/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class DeletedBinTests(TestCase):
    """Test soft delete, restore and permanent delete"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_delete_moves_product_to_bin(self):
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        product.refresh_from_db()
        self.assertIsNotNone(product.deleted_at)
        response = self.client.get(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_by_name(self):
        TestDataFactory.create_product(product_name='Green Tea')
        TestDataFactory.create_product(product_name='Green Tea')
        TestDataFactory.create_product(product_name='Black Tea')
        response = self.client.post(f"/api/v1/products/delete/{quote('Green Tea')}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(Product.objects.active().count(), 1)

    def test_delete_by_unknown_name(self):
        response = self.client.post('/api/v1/products/delete/Nothing/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_restore_by_name(self):
        product = TestDataFactory.create_product(product_name='Green Tea')
        product.soft_delete()
        response = self.client.post(f"/api/v1/products/restore/{quote('Green Tea')}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertIsNone(product.deleted_at)
        self.assertTrue(AuditLog.objects.filter(action='restore').exists())

    def test_restore_live_product_not_found(self):
        TestDataFactory.create_product(product_name='Green Tea')
        response = self.client.post(f"/api/v1/products/restore/{quote('Green Tea')}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_deleted_items_requires_admin_role(self):
        response = self.client.get('/api/v1/deleted-items/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_deleted_items(self):
        TestDataFactory.create_product()
        binned = TestDataFactory.create_product()
        binned.soft_delete()
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/deleted-items/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in response.data], [binned.id])

    def test_permanent_delete_keeps_sale_snapshot(self):
        product = TestDataFactory.create_product(product_name='Green Tea', item_code='GT-001')
        sale = TestDataFactory.create_sale(self.user, [(product, 1, '80.00')])
        product.soft_delete()

        self.client.authenticate_user(self.admin)
        response = self.client.delete(f"/api/v1/products/permanent-delete/{quote('Green Tea')}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Product.objects.filter(id=product.id).exists())
        line = sale.items.get()
        self.assertIsNone(line.product)
        self.assertEqual(line.product_name, 'Green Tea')
        self.assertEqual(line.item_code, 'GT-001')

    def test_permanent_delete_ignores_live_products(self):
        TestDataFactory.create_product(product_name='Green Tea')
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f"/api/v1/products/permanent-delete/{quote('Green Tea')}/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_permanent_delete_requires_admin_role(self):
        product = TestDataFactory.create_product(product_name='Green Tea')
        product.soft_delete()
        response = self.client.delete(f"/api/v1/products/permanent-delete/{quote('Green Tea')}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ProductImportTests(TestCase):
    """Test spreadsheet import"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def upload(self, uploaded_file):
        return self.client.post('/api/v1/products/import/', {'file': uploaded_file}, format='multipart')

    def test_import_csv(self):
        response = self.upload(make_csv(
            'Green Tea,GT-001,B1,2026-12-31,40,55,50,52,8901,60,5,24,960,Beverages,Tea House,pcs,Shelf A,C1,2,flavour,jasmine',
            'Black Tea,BT-001,,,30,45,,,,50,,,,Beverages,,,,,,,',
        ))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['imported_count'], 2)
        self.assertEqual(response.data['skipped_count'], 0)

        green = Product.objects.get(item_code='GT-001')
        self.assertEqual(str(green.expiry_date), '2026-12-31')
        self.assertEqual(green.batch_number, 'B1')
        self.assertEqual(green.opening_stock_quantity, 24)
        self.assertEqual(green.extra_fields, {'extra_field_name': 'flavour', 'extra_field_value': 'jasmine'})

        black = Product.objects.get(item_code='BT-001')
        self.assertEqual(black.minimum_price, 0)
        self.assertEqual(black.opening_stock_quantity, 0)
        self.assertEqual(black.extra_fields, {})
        self.assertTrue(AuditLog.objects.filter(action='import').exists())

    def test_import_csv_with_extra_columns(self):
        content = '\n'.join([
            IMPORT_HEADER + ',Notes',
            'Green Tea,GT-001,B1,,40,55,,,,60,,24,,Beverages,,,,,,flavour,jasmine,restock monthly',
            'Black Tea,BT-001,,,30,45,,,,50,,,,,,,,,,,,',
        ]) + '\n'
        response = self.upload(SimpleUploadedFile('products.csv', content.encode('utf-8'), content_type='text/csv'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['imported_count'], 2)

        green = Product.objects.get(item_code='GT-001')
        self.assertEqual(green.product_name, 'Green Tea')
        self.assertEqual(green.batch_number, 'B1')
        self.assertEqual(green.opening_stock_quantity, 24)
        self.assertEqual(green.extra_fields, {'extra_field_name': 'flavour', 'extra_field_value': 'jasmine'})
        self.assertEqual(Product.objects.get(item_code='BT-001').product_name, 'Black Tea')

    def test_import_failure_rolls_back_saved_rows(self):
        original_save = ProductSerializer.save
        saved = []

        def save_then_fail(serializer, **kwargs):
            if saved:
                raise RuntimeError('database unavailable')
            saved.append(original_save(serializer, **kwargs))
            return saved[-1]

        with mock.patch.object(ProductSerializer, 'save', save_then_fail):
            response = self.upload(make_csv(
                'Green Tea,GT-001,,,40,55,,,,60,,,,,,,,,,,',
                'Black Tea,BT-001,,,30,45,,,,50,,,,,,,,,,,',
            ))
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(len(saved), 1)
        self.assertEqual(Product.objects.count(), 0)
        self.assertFalse(AuditLog.objects.filter(action='import').exists())

    def test_import_skips_rows_without_name(self):
        response = self.upload(make_csv(
            ',NONAME,,,10,12,,,,15,,,,,,,,,,,',
            'Green Tea,GT-001,,,40,55,,,,60,,,,,,,,,,,',
        ))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['imported_count'], 1)
        self.assertEqual(response.data['skipped_rows'][0]['row'], 2)

    def test_import_reports_invalid_rows(self):
        TestDataFactory.create_product(item_code='GT-001')
        response = self.upload(make_csv(
            'Green Tea,GT-001,,,40,55,,,,60,,,,,,,,,,,',
            'Black Tea,BT-001,,,abc,45,,,,50,,,,,,,,,,,',
            'Oolong,OO-001,,,35,50,,,,55,,,,,,,,,,,',
        ))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['imported_count'], 1)
        skipped = {row['row']: row['errors'] for row in response.data['skipped_rows']}
        self.assertIn('item_code', skipped[2])
        self.assertIn('buying_cost', skipped[3])

    def test_import_duplicate_codes_within_file(self):
        response = self.upload(make_csv(
            'Green Tea,GT-001,,,40,55,,,,60,,,,,,,,,,,',
            'Green Tea Copy,GT-001,,,40,55,,,,60,,,,,,,,,,,',
        ))
        self.assertEqual(response.data['imported_count'], 1)
        self.assertEqual(response.data['skipped_rows'][0]['row'], 3)

    def test_import_xlsx(self):
        frame = pd.DataFrame([
            ['Product Name', 'Item Code', 'Batch', 'Expiry', 'Buying Cost', 'Sales Price', 'Minimum Price',
             'Wholesale Price', 'Barcode', 'MRP', 'Min Stock', 'Opening Qty'],
            ['Green Tea', 1001, 'B1', pd.Timestamp('2026-12-31'), 40.5, 55, None, None, 8901234, 60, 5, 24],
        ])
        buffer = io.BytesIO()
        frame.to_excel(buffer, index=False, header=False, engine='openpyxl')
        uploaded = SimpleUploadedFile(
            'products.xlsx', buffer.getvalue(),
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        )
        response = self.upload(uploaded)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['imported_count'], 1)

        product = Product.objects.get()
        self.assertEqual(product.item_code, '1001')
        self.assertEqual(product.barcode, '8901234')
        self.assertEqual(str(product.buying_cost), '40.50')
        self.assertEqual(str(product.expiry_date), '2026-12-31')

    def test_import_without_file(self):
        response = self.client.post('/api/v1/products/import/', {}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_import_unsupported_type(self):
        uploaded = SimpleUploadedFile('products.txt', b'hello', content_type='text/plain')
        response = self.upload(uploaded)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_import_unreadable_xlsx(self):
        uploaded = SimpleUploadedFile('products.xlsx', b'not a spreadsheet', content_type='application/octet-stream')
        response = self.upload(uploaded)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(PRODUCT_IMPORT_MAX_ROWS=1)
    def test_import_row_limit(self):
        response = self.upload(make_csv(
            'Green Tea,GT-001,,,40,55,,,,60,,,,,,,,,,,',
            'Black Tea,BT-001,,,30,45,,,,50,,,,,,,,,,,',
        ))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Product.objects.count(), 0)

    def test_import_command(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'products.csv')
            with open(path, 'w', encoding='utf-8') as handle:
                handle.write(IMPORT_HEADER + '\nGreen Tea,GT-001,,,40,55,,,,60,,,,,,,,,,,\n')
            out = io.StringIO()
            call_command('import_products', path, stdout=out)
        self.assertIn('Imported 1 product(s)', out.getvalue())
        self.assertTrue(Product.objects.filter(item_code='GT-001').exists())


class ImportHelperTests(TestCase):
    """Test cell cleaning and column mapping"""

    def test_clean_cell(self):
        self.assertIsNone(clean_cell(float('nan')))
        self.assertIsNone(clean_cell('   '))
        self.assertEqual(clean_cell(12.0), '12')
        self.assertEqual(clean_cell(12.5), '12.5')
        self.assertEqual(clean_cell(pd.Timestamp('2026-03-01 10:30')), '2026-03-01')
        self.assertEqual(clean_cell(' Tea '), 'Tea')

    def test_map_row_pads_short_rows(self):
        data = map_row(['Green Tea', 'GT-001'])
        self.assertEqual(data['product_name'], 'Green Tea')
        self.assertEqual(data['mrp'], 0)
        self.assertIsNone(data['category'])
        self.assertEqual(data['extra_fields'], {})


class BarcodeLabelTests(TestCase):
    """Test product barcode label"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

    def test_label_uses_barcode(self):
        product = TestDataFactory.create_product(barcode='8901234567890')
        response = self.client.get(f'/api/v1/products/{product.id}/barcode/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['barcode'], '8901234567890')
        self.assertTrue(response.data['label_image'].startswith('data:image/png;base64,'))

    def test_label_falls_back_to_item_code(self):
        product = TestDataFactory.create_product(item_code='GT-001')
        response = self.client.get(f'/api/v1/products/{product.id}/barcode/')
        self.assertEqual(response.data['barcode'], 'GT-001')

    def test_label_generated_code(self):
        product = TestDataFactory.create_product(item_code='')
        product.item_code = None
        product.save()
        response = self.client.get(f'/api/v1/products/{product.id}/barcode/')
        self.assertEqual(response.data['barcode'], f'P{product.id:06d}')
