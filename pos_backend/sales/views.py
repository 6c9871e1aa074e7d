import logging
from decimal import Decimal

from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import TruncDate
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from pos_backend.core.permissions import IsAdminRole
from pos_backend.core.utils import create_audit_log, parse_date_range
from .models import Sale, SaleItem
from .serializers import SaleSerializer

logger = logging.getLogger('pos_backend.sales')

REPORT_DEFAULT_DAYS = 30
ZERO = Decimal('0')


def _sales_queryset():
    return Sale.objects.select_related('customer', 'created_by').prefetch_related('items')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sale_list_create(request):
    """List sales with filtering or create a new sale"""
    if request.method == 'GET':
        queryset = _sales_queryset()

        date_from, date_to = parse_date_range(request.query_params)
        if date_from:
            queryset = queryset.filter(sale_date__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(sale_date__date__lte=date_to)

        customer = request.query_params.get('customer', None)
        if customer:
            queryset = queryset.filter(customer_id=customer)

        payment_type = request.query_params.get('payment_type', None)
        if payment_type:
            queryset = queryset.filter(payment_type=payment_type)

        bill_number = request.query_params.get('bill_number', None)
        if bill_number:
            queryset = queryset.filter(bill_number=bill_number)

        serializer = SaleSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = SaleSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        sale = serializer.save(created_by=request.user)
        create_audit_log(request=request, action='create', model_name='Sale', object_id=sale.id,
                         object_name=f"Bill #{sale.bill_number}",
                         changes={'total': str(sale.total), 'items': sale.items.count()})
        logger.info(f"User {request.user.email} created bill #{sale.bill_number} (total={sale.total})")
        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def sale_detail(request, pk):
    """Retrieve, update or delete a sale"""
    sale = get_object_or_404(_sales_queryset(), pk=pk)

    if request.method == 'GET':
        serializer = SaleSerializer(sale)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SaleSerializer(sale, data=request.data, partial=request.method == 'PATCH',
                                    context={'request': request})
        if serializer.is_valid():
            old_total = sale.total
            sale = serializer.save()
            create_audit_log(request=request, action='update', model_name='Sale', object_id=sale.id,
                             object_name=f"Bill #{sale.bill_number}",
                             changes={'total': {'old': str(old_total), 'new': str(sale.total)}})
            logger.info(f"User {request.user.email} updated bill #{sale.bill_number}")
            refreshed = _sales_queryset().get(pk=sale.pk)
            return Response(SaleSerializer(refreshed).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        sale_id, bill_number = sale.id, sale.bill_number
        sale.delete()
        create_audit_log(request=request, action='delete', model_name='Sale', object_id=sale_id,
                         object_name=f"Bill #{bill_number}")
        logger.info(f"User {request.user.email} deleted bill #{bill_number}")
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def next_bill_number(request):
    """Bill number the next sale will get"""
    return Response({'next_bill_number': Sale.next_bill_number()})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def daily_profit_report(request):
    """Per-day bills, sales, cost and profit"""
    date_from, date_to = parse_date_range(request.query_params, default_days=REPORT_DEFAULT_DAYS)
    sales = Sale.objects.filter(sale_date__date__gte=date_from, sale_date__date__lte=date_to)

    # Sales and costs are aggregated separately so joined lines don't repeat bill amounts
    per_day = (
        sales.annotate(day=TruncDate('sale_date'))
        .values('day')
        .annotate(bills=Count('id'), gross=Sum('subtotal'), discount=Sum('discount_amount'), tax=Sum('tax_amount'))
        .order_by('day')
    )
    cost_per_day = dict(
        SaleItem.objects.filter(sale__in=sales)
        .annotate(day=TruncDate('sale__sale_date'))
        .values('day')
        .annotate(cost=Sum(ExpressionWrapper(
            F('quantity') * F('buying_cost'), output_field=DecimalField(max_digits=20, decimal_places=5)
        )))
        .values_list('day', 'cost')
    )

    rows = []
    totals = {'bills': 0, 'gross_sales': ZERO, 'discount': ZERO, 'net_sales': ZERO, 'cost': ZERO, 'profit': ZERO}
    for entry in per_day:
        gross = entry['gross'] or ZERO
        discount = entry['discount'] or ZERO
        net_sales = gross - discount
        cost = cost_per_day.get(entry['day']) or ZERO
        profit = net_sales - cost
        rows.append({
            'date': entry['day'].isoformat(),
            'bills': entry['bills'],
            'gross_sales': float(gross),
            'discount': float(discount),
            'net_sales': float(net_sales),
            'cost': float(cost),
            'profit': float(profit),
        })
        totals['bills'] += entry['bills']
        totals['gross_sales'] += gross
        totals['discount'] += discount
        totals['net_sales'] += net_sales
        totals['cost'] += cost
        totals['profit'] += profit

    return Response({
        'date_from': date_from.isoformat(),
        'date_to': date_to.isoformat(),
        'days': rows,
        'totals': {key: value if key == 'bills' else float(value) for key, value in totals.items()},
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def bill_wise_profit_report(request):
    """Per-bill sales, cost and profit"""
    date_from, date_to = parse_date_range(request.query_params, default_days=REPORT_DEFAULT_DAYS)
    sales = (
        Sale.objects.filter(sale_date__date__gte=date_from, sale_date__date__lte=date_to)
        .prefetch_related('items')
        .order_by('sale_date', 'bill_number')
    )

    rows = []
    totals = {'net_sales': ZERO, 'cost': ZERO, 'profit': ZERO}
    for sale in sales:
        cost = sale.get_cost()
        profit = sale.net_sales - cost
        rows.append({
            'sale_id': sale.id,
            'bill_number': sale.bill_number,
            'sale_date': sale.sale_date,
            'customer_name': sale.customer_name,
            'payment_type': sale.payment_type,
            'net_sales': float(sale.net_sales),
            'cost': float(cost),
            'profit': float(profit),
        })
        totals['net_sales'] += sale.net_sales
        totals['cost'] += cost
        totals['profit'] += profit

    return Response({
        'date_from': date_from.isoformat(),
        'date_to': date_to.isoformat(),
        'bills': rows,
        'totals': {key: float(value) for key, value in totals.items()},
    })
