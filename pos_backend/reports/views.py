import logging
from decimal import Decimal

from django.db.models import DecimalField, ExpressionWrapper, F, Max, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from pos_backend.catalog.models import Product
from pos_backend.core.utils import parse_date_range

logger = logging.getLogger('pos_backend.reports')

PERIOD_DEFAULT_DAYS = 30
ZERO = Decimal('0')
AMOUNT_FIELD = DecimalField(max_digits=20, decimal_places=5)


def _is_true(value):
    return bool(value) and value.lower() in ('true', '1', 'yes')


def _filtered_products(query_params):
    """Live products with stock annotations, narrowed by the report filters"""
    queryset = Product.objects.active().with_stock()

    for name in ('category', 'supplier', 'store_location'):
        value = query_params.get(name, None)
        if value:
            queryset = queryset.filter(**{f'{name}__iexact': value})

    if _is_true(query_params.get('low_stock', None)):
        queryset = queryset.filter(current_stock__lte=F('minimum_stock_quantity'))
    return queryset.order_by('product_name', 'id')


def _stock_row(product):
    current = product.current_stock
    return {
        'product_id': product.id,
        'product_name': product.product_name,
        'item_code': product.item_code,
        'barcode': product.barcode,
        'category': product.category,
        'supplier': product.supplier,
        'store_location': product.store_location,
        'unit_type': product.unit_type,
        'opening_stock': product.opening_stock_quantity,
        'sold_quantity': float(product.sold_quantity),
        'current_stock': float(current),
        'minimum_stock': product.minimum_stock_quantity,
        'buying_cost': float(product.buying_cost),
        'sales_price': float(product.sales_price),
        'stock_value': float(current * product.buying_cost),
        'retail_value': float(current * product.sales_price),
        'is_low_stock': current <= product.minimum_stock_quantity,
        'is_out_of_stock': current <= 0,
    }


def _summary(rows):
    return {
        'total_products': len(rows),
        'total_stock_quantity': sum(row['current_stock'] for row in rows),
        'total_stock_value': round(sum(row['stock_value'] for row in rows), 2),
        'total_retail_value': round(sum(row['retail_value'] for row in rows), 2),
        'low_stock_count': sum(1 for row in rows if row['is_low_stock']),
        'out_of_stock_count': sum(1 for row in rows if row['is_out_of_stock']),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_report(request):
    """Current stock and stock value per product"""
    rows = [_stock_row(product) for product in _filtered_products(request.query_params)]
    return Response({
        'summary': _summary(rows),
        'products': rows,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def detailed_stock_report(request):
    """Stock report with sales movement for a period and expiry information"""
    date_from, date_to = parse_date_range(request.query_params, default_days=PERIOD_DEFAULT_DAYS)
    in_period = Q(
        sale_items__sale__sale_date__date__gte=date_from,
        sale_items__sale__sale_date__date__lte=date_to,
    )

    queryset = _filtered_products(request.query_params).annotate(
        period_sold=Coalesce(Sum('sale_items__quantity', filter=in_period), Value(ZERO),
                             output_field=AMOUNT_FIELD),
        period_revenue=Coalesce(Sum('sale_items__line_total', filter=in_period), Value(ZERO),
                                output_field=AMOUNT_FIELD),
        period_cost=Coalesce(
            Sum(ExpressionWrapper(F('sale_items__quantity') * F('sale_items__buying_cost'),
                                  output_field=AMOUNT_FIELD), filter=in_period),
            Value(ZERO), output_field=AMOUNT_FIELD,
        ),
        last_sold_at=Max('sale_items__sale__sale_date'),
    )

    today = timezone.localdate()
    rows = []
    for product in queryset:
        row = _stock_row(product)
        row.update({
            'period_sold_quantity': float(product.period_sold),
            'period_revenue': float(product.period_revenue),
            'period_cost': float(product.period_cost),
            'period_profit': float(product.period_revenue - product.period_cost),
            'last_sold_at': product.last_sold_at,
            'batch_number': product.batch_number,
            'expiry_date': product.expiry_date,
            'is_expired': bool(product.expiry_date and product.expiry_date < today),
            'days_to_expiry': (product.expiry_date - today).days if product.expiry_date else None,
        })
        rows.append(row)

    summary = _summary(rows)
    summary.update({
        'period_sold_quantity': sum(row['period_sold_quantity'] for row in rows),
        'period_revenue': round(sum(row['period_revenue'] for row in rows), 2),
        'period_cost': round(sum(row['period_cost'] for row in rows), 2),
        'period_profit': round(sum(row['period_profit'] for row in rows), 2),
        'expired_count': sum(1 for row in rows if row['is_expired']),
    })
    logger.debug(f"Detailed stock report {date_from}..{date_to}: {len(rows)} products")

    return Response({
        'date_from': date_from.isoformat(),
        'date_to': date_to.isoformat(),
        'summary': summary,
        'products': rows,
    })
