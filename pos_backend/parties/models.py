from django.db import models


class Customer(models.Model):
    """Customers"""
    name = models.CharField(max_length=200, db_index=True)
    phone = models.CharField(max_length=20, unique=True, blank=True, null=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'customers'
        ordering = ['name', 'id']


class Supplier(models.Model):
    """Suppliers"""
    supplier_name = models.CharField(max_length=255, db_index=True)
    contact = models.CharField(max_length=255)
    address = models.TextField()
    email = models.EmailField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.supplier_name

    class Meta:
        db_table = 'suppliers'
        ordering = ['supplier_name', 'id']
