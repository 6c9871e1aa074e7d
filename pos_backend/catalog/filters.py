import django_filters
from django.db.models import F, Q

from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for the product listing using django-filter"""

    # Search across product name, item code and barcode
    search = django_filters.CharFilter(method='filter_search', label='Search')

    # Free-text references are matched case-insensitively
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    supplier = django_filters.CharFilter(field_name='supplier', lookup_expr='iexact')
    store_location = django_filters.CharFilter(field_name='store_location', lookup_expr='iexact')
    unit_type = django_filters.CharFilter(field_name='unit_type', lookup_expr='iexact')

    expiring_before = django_filters.DateFilter(field_name='expiry_date', lookup_expr='lte')
    low_stock = django_filters.CharFilter(method='filter_low_stock', label='Low Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'supplier', 'store_location', 'unit_type',
                  'expiring_before', 'low_stock']

    def filter_search(self, queryset, name, value):
        search = value.strip() if value else ''
        if not search:
            return queryset
        return queryset.filter(
            Q(product_name__icontains=search) |
            Q(item_code__iexact=search) |
            Q(barcode__iexact=search)
        )

    def filter_low_stock(self, queryset, name, value):
        """Products at or below their minimum stock quantity; expects a with_stock() queryset"""
        if value and value.lower() in ('true', '1', 'yes'):
            return queryset.filter(current_stock__lte=F('minimum_stock_quantity'))
        return queryset
