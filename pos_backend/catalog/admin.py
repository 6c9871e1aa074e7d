from django.contrib import admin
from django.utils import timezone

from .models import Category, Unit, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name']
    ordering = ['name']


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ['name', 'short_name', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'short_name']
    ordering = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['product_name', 'item_code', 'barcode', 'category', 'supplier', 'sales_price',
                    'opening_stock_quantity', 'is_in_bin', 'created_at']
    list_filter = ['category', 'supplier', 'store_location', 'deleted_at', 'created_at']
    search_fields = ['product_name', 'item_code', 'barcode']
    ordering = ['product_name']
    readonly_fields = ['deleted_at', 'created_at', 'updated_at']
    actions = ['move_to_bin', 'restore_from_bin']

    def is_in_bin(self, obj):
        return obj.is_deleted
    is_in_bin.boolean = True
    is_in_bin.short_description = 'Deleted'

    @admin.action(description='Move selected products to the deleted bin')
    def move_to_bin(self, request, queryset):
        updated = queryset.filter(deleted_at__isnull=True).update(deleted_at=timezone.now())
        self.message_user(request, f'{updated} product(s) moved to the deleted bin.')

    @admin.action(description='Restore selected products from the deleted bin')
    def restore_from_bin(self, request, queryset):
        updated = queryset.filter(deleted_at__isnull=False).update(deleted_at=None)
        self.message_user(request, f'{updated} product(s) restored.')
