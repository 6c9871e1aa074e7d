from django.db import models


class StoreLocation(models.Model):
    """Places where stock is kept (shop floor, back room, godown, ...)"""
    location_name = models.CharField(max_length=200, unique=True)
    address = models.TextField(blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.location_name

    class Meta:
        db_table = 'store_locations'
        ordering = ['location_name']
