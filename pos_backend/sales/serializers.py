from collections import defaultdict
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from rest_framework import serializers

from pos_backend.catalog.models import Product
from .models import Sale, SaleItem

CENT = Decimal('0.01')


class SaleItemSerializer(serializers.ModelSerializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    cost = serializers.SerializerMethodField()
    profit = serializers.SerializerMethodField()

    class Meta:
        model = SaleItem
        fields = ['id', 'product', 'product_name', 'item_code', 'quantity', 'unit_price', 'buying_cost',
                  'discount_amount', 'line_total', 'cost', 'profit']
        read_only_fields = ['product_name', 'item_code', 'buying_cost', 'line_total']
        extra_kwargs = {
            'unit_price': {'required': False},
            'discount_amount': {'required': False},
        }

    def get_cost(self, obj):
        return float(obj.get_cost())

    def get_profit(self, obj):
        return float(obj.get_profit())

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('Quantity must be greater than zero.')
        return value

    def validate_discount_amount(self, value):
        if value < 0:
            raise serializers.ValidationError('Discount may not be negative.')
        return value

    def validate(self, attrs):
        product = attrs['product']
        if product.is_deleted:
            raise serializers.ValidationError({'product': f'{product.product_name} is in the deleted bin and cannot be sold.'})

        unit_price = attrs.get('unit_price')
        if unit_price is None:
            unit_price = product.sales_price
        if unit_price < 0:
            raise serializers.ValidationError({'unit_price': 'Unit price may not be negative.'})
        if product.minimum_price and unit_price < product.minimum_price:
            raise serializers.ValidationError({
                'unit_price': f'{product.product_name} cannot be sold below its minimum price of {product.minimum_price}.'
            })

        discount = attrs.get('discount_amount') or Decimal('0')
        line_total = (attrs['quantity'] * unit_price - discount).quantize(CENT)
        if line_total < 0:
            raise serializers.ValidationError({'discount_amount': 'Line discount may not exceed the line amount.'})

        attrs['unit_price'] = unit_price
        attrs['discount_amount'] = discount
        attrs['line_total'] = line_total
        return attrs


class SaleSerializer(serializers.ModelSerializer):
    """Bill with its lines; lines are written together with the bill"""
    items = SaleItemSerializer(many=True, required=False)
    created_by_email = serializers.CharField(source='created_by.email', read_only=True, default=None)
    cost = serializers.SerializerMethodField()
    profit = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = ['id', 'bill_number', 'customer', 'customer_name', 'sale_date', 'payment_type',
                  'subtotal', 'discount_amount', 'tax_amount', 'total', 'received_amount', 'balance_amount',
                  'notes', 'items', 'cost', 'profit', 'created_by', 'created_by_email', 'created_at', 'updated_at']
        read_only_fields = ['subtotal', 'total', 'balance_amount', 'created_by', 'created_at', 'updated_at']
        extra_kwargs = {
            'bill_number': {'required': False, 'min_value': 1},
            'sale_date': {'required': False},
        }

    def get_cost(self, obj):
        return float(obj.get_cost())

    def get_profit(self, obj):
        return float(obj.get_profit())

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('A sale needs at least one item.')
        return value

    def validate(self, attrs):
        items = attrs.get('items')
        if items is None:
            if self.instance is None:
                raise serializers.ValidationError({'items': 'A sale needs at least one item.'})
            subtotal = self.instance.subtotal
        else:
            subtotal = sum((item['line_total'] for item in items), Decimal('0'))

        discount = attrs.get('discount_amount', self.instance.discount_amount if self.instance else Decimal('0'))
        if discount < 0:
            raise serializers.ValidationError({'discount_amount': 'Discount may not be negative.'})
        if discount > subtotal:
            raise serializers.ValidationError({'discount_amount': 'Discount may not exceed the subtotal.'})
        if attrs.get('tax_amount', Decimal('0')) < 0:
            raise serializers.ValidationError({'tax_amount': 'Tax may not be negative.'})
        if attrs.get('received_amount', Decimal('0')) < 0:
            raise serializers.ValidationError({'received_amount': 'Received amount may not be negative.'})
        return attrs

    def _check_stock(self, items_data, sale=None):
        """Lock the products being sold and make sure the requested quantities are in stock"""
        requested = defaultdict(Decimal)
        for item in items_data:
            requested[item['product'].pk] += item['quantity']

        products = {p.pk: p for p in Product.objects.select_for_update().filter(pk__in=requested.keys())}
        sold_lines = SaleItem.objects.filter(product_id__in=requested.keys())
        if sale is not None:
            # The bill being edited does not count against itself
            sold_lines = sold_lines.exclude(sale=sale)
        sold = dict(sold_lines.values('product_id').annotate(total=Sum('quantity')).values_list('product_id', 'total'))

        errors = []
        for product_id, quantity in requested.items():
            product = products[product_id]
            available = Decimal(product.opening_stock_quantity) - (sold.get(product_id) or Decimal('0'))
            if quantity > available:
                errors.append(
                    f'Insufficient stock for {product.product_name}: available {available.normalize():f}, '
                    f'requested {quantity.normalize():f}.'
                )
        if errors:
            raise serializers.ValidationError({'items': errors})

    def _create_items(self, sale, items_data):
        SaleItem.objects.bulk_create([
            SaleItem(
                sale=sale,
                product=item['product'],
                product_name=item['product'].product_name,
                item_code=item['product'].item_code,
                quantity=item['quantity'],
                unit_price=item['unit_price'],
                buying_cost=item['product'].buying_cost,
                discount_amount=item['discount_amount'],
                line_total=item['line_total'],
            )
            for item in items_data
        ])

    def create(self, validated_data):
        items_data = validated_data.pop('items')
        with transaction.atomic():
            self._check_stock(items_data)
            if validated_data.get('bill_number') is None:
                validated_data['bill_number'] = Sale.next_bill_number()
            customer = validated_data.get('customer')
            if customer and not validated_data.get('customer_name'):
                validated_data['customer_name'] = customer.name
            sale = Sale.objects.create(**validated_data)
            self._create_items(sale, items_data)
            sale.recalculate_totals()
            sale.save()
        return sale

    def update(self, instance, validated_data):
        items_data = validated_data.pop('items', None)
        with transaction.atomic():
            if items_data is not None:
                self._check_stock(items_data, sale=instance)
            customer_changed = 'customer' in validated_data and validated_data['customer'] != instance.customer
            for attr, value in validated_data.items():
                setattr(instance, attr, value)
            if 'customer_name' not in validated_data and (customer_changed or not instance.customer_name):
                instance.customer_name = instance.customer.name if instance.customer else ''
            if items_data is not None:
                instance.items.all().delete()
                self._create_items(instance, items_data)
            instance.recalculate_totals()
            instance.save()
        return instance
