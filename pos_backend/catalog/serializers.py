import json

from rest_framework import serializers

from .models import Category, Unit, Product


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'is_active', 'created_at', 'updated_at']


class UnitSerializer(serializers.ModelSerializer):
    class Meta:
        model = Unit
        fields = ['id', 'name', 'short_name', 'description', 'is_active', 'created_at', 'updated_at']


class ProductSerializer(serializers.ModelSerializer):
    """Product with the validation rules shared by the API and the spreadsheet import"""
    sold_quantity = serializers.SerializerMethodField()
    current_stock = serializers.SerializerMethodField()
    is_low_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'product_name', 'item_code', 'batch_number', 'expiry_date',
            'buying_cost', 'sales_price', 'minimum_price', 'wholesale_price', 'barcode', 'mrp',
            'minimum_stock_quantity', 'opening_stock_quantity', 'opening_stock_value',
            'category', 'supplier', 'unit_type', 'store_location', 'cabinet', 'row', 'extra_fields',
            'sold_quantity', 'current_stock', 'is_low_stock',
            'deleted_at', 'created_at', 'updated_at',
        ]
        read_only_fields = ['deleted_at', 'created_at', 'updated_at']
        extra_kwargs = {
            'minimum_stock_quantity': {'allow_null': True},
            'opening_stock_quantity': {'allow_null': True},
        }

    def _stock(self, obj):
        # Querysets built with with_stock() already carry the annotation
        current = getattr(obj, 'current_stock', None)
        if current is None:
            current = obj.get_current_stock()
        return current

    def get_sold_quantity(self, obj):
        sold = getattr(obj, 'sold_quantity', None)
        if sold is None:
            sold = obj.get_sold_quantity()
        return float(sold)

    def get_current_stock(self, obj):
        return float(self._stock(obj))

    def get_is_low_stock(self, obj):
        return self._stock(obj) <= obj.minimum_stock_quantity

    def validate_item_code(self, value):
        return value.strip() or None if value else None

    def validate_barcode(self, value):
        return value.strip() or None if value else None

    def validate_minimum_stock_quantity(self, value):
        return 0 if value is None else value

    def validate_opening_stock_quantity(self, value):
        return 0 if value is None else value

    def validate_extra_fields(self, value):
        if isinstance(value, str):
            try:
                value = json.loads(value) if value.strip() else None
            except ValueError:
                raise serializers.ValidationError('Extra fields must be a valid JSON object.')
        if value is not None and not isinstance(value, dict):
            raise serializers.ValidationError('Extra fields must be a JSON object.')
        return value


class DeletedProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ['id', 'product_name', 'item_code', 'barcode', 'category', 'supplier',
                  'sales_price', 'deleted_at']
