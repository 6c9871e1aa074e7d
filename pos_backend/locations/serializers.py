from rest_framework import serializers

from .models import StoreLocation


class StoreLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = StoreLocation
        fields = ['id', 'location_name', 'address', 'description', 'is_active', 'created_at', 'updated_at']
