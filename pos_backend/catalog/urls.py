from django.urls import path
from .views import (
    category_list_create, category_detail, unit_list_create, unit_detail,
    product_list_create, product_detail, product_delete_by_name, product_restore,
    product_permanent_delete, deleted_items, product_import, product_barcode
)

urlpatterns = [
    # Category endpoints
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', category_detail, name='category-detail'),

    # Unit endpoints
    path('units/', unit_list_create, name='unit-list-create'),
    path('units/<int:pk>/', unit_detail, name='unit-detail'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/import/', product_import, name='product-import'),
    path('products/delete/<str:product_name>/', product_delete_by_name, name='product-delete-by-name'),
    path('products/restore/<str:product_name>/', product_restore, name='product-restore'),
    path('products/permanent-delete/<str:product_name>/', product_permanent_delete, name='product-permanent-delete'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/<int:pk>/barcode/', product_barcode, name='product-barcode'),
    path('deleted-items/', deleted_items, name='deleted-items'),
]
