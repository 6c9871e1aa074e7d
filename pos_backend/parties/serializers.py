from rest_framework import serializers

from .models import Customer, Supplier


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ['id', 'name', 'phone', 'email', 'address', 'is_active', 'created_at', 'updated_at']

    def validate_phone(self, value):
        # Blank phones are stored as NULL so they don't collide on the unique index
        return value.strip() or None if value else None


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ['id', 'supplier_name', 'contact', 'address', 'email', 'is_active', 'created_at', 'updated_at']
