from django.contrib import admin

from .models import StoreLocation


@admin.register(StoreLocation)
class StoreLocationAdmin(admin.ModelAdmin):
    list_display = ['location_name', 'address', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['location_name', 'address']
    ordering = ['location_name']
