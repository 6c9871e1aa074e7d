from django.contrib import admin

from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    fields = ['product', 'product_name', 'item_code', 'quantity', 'unit_price', 'buying_cost',
              'discount_amount', 'line_total']
    readonly_fields = ['product_name', 'item_code', 'buying_cost', 'line_total']


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['bill_number', 'sale_date', 'customer_name', 'payment_type', 'total', 'created_by']
    list_filter = ['payment_type', 'sale_date']
    search_fields = ['bill_number', 'customer_name', 'customer__name', 'customer__phone']
    ordering = ['-sale_date']
    readonly_fields = ['subtotal', 'total', 'balance_amount', 'created_at', 'updated_at']
    inlines = [SaleItemInline]
