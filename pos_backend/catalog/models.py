from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import DecimalField, ExpressionWrapper, F, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

QUANTITY_FIELD = DecimalField(max_digits=14, decimal_places=3)
MONEY_VALIDATORS = [MinValueValidator(Decimal('0'))]


class Category(models.Model):
    """Product categories"""
    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Unit(models.Model):
    """Units of measure (pieces, kilograms, boxes, ...)"""
    name = models.CharField(max_length=100, unique=True)
    short_name = models.CharField(max_length=20, blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.short_name})" if self.short_name else self.name

    class Meta:
        db_table = 'units'
        ordering = ['name']


class ProductQuerySet(models.QuerySet):
    def active(self):
        return self.filter(deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)

    def with_stock(self):
        """Annotate sold_quantity and current_stock (opening stock minus quantities sold)"""
        return self.annotate(
            sold_quantity=Coalesce(
                Sum('sale_items__quantity'), Value(Decimal('0')), output_field=QUANTITY_FIELD
            ),
        ).annotate(
            current_stock=ExpressionWrapper(
                F('opening_stock_quantity') - F('sold_quantity'), output_field=QUANTITY_FIELD
            ),
        )

    def low_stock(self):
        return self.with_stock().filter(current_stock__lte=F('minimum_stock_quantity'))


class Product(models.Model):
    """Product master"""
    product_name = models.CharField(max_length=255, db_index=True)
    item_code = models.CharField(max_length=100, unique=True, blank=True, null=True)
    batch_number = models.CharField(max_length=100, blank=True, null=True)
    expiry_date = models.DateField(blank=True, null=True)
    buying_cost = models.DecimalField(max_digits=12, decimal_places=2, validators=MONEY_VALIDATORS)
    sales_price = models.DecimalField(max_digits=12, decimal_places=2, validators=MONEY_VALIDATORS)
    minimum_price = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True,
                                        validators=MONEY_VALIDATORS)
    wholesale_price = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True,
                                          validators=MONEY_VALIDATORS)
    barcode = models.CharField(max_length=100, unique=True, blank=True, null=True)
    mrp = models.DecimalField(max_digits=12, decimal_places=2, validators=MONEY_VALIDATORS)
    minimum_stock_quantity = models.PositiveIntegerField(default=0)
    opening_stock_quantity = models.PositiveIntegerField(default=0)
    opening_stock_value = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'),
                                              validators=MONEY_VALIDATORS)
    # Free-text references, as they arrive from spreadsheets
    category = models.CharField(max_length=200, blank=True, null=True)
    supplier = models.CharField(max_length=200, blank=True, null=True)
    unit_type = models.CharField(max_length=100, blank=True, null=True)
    store_location = models.CharField(max_length=200, blank=True, null=True)
    cabinet = models.CharField(max_length=100, blank=True, null=True)
    row = models.CharField(max_length=100, blank=True, null=True)
    extra_fields = models.JSONField(default=dict, blank=True, null=True)
    deleted_at = models.DateTimeField(blank=True, null=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    def __str__(self):
        return f"{self.product_name} ({self.item_code or 'NO-CODE'})"

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def get_sold_quantity(self):
        """Total quantity sold across all sale lines"""
        total = self.sale_items.aggregate(total=Sum('quantity'))['total']
        return total or Decimal('0')

    def get_current_stock(self):
        return Decimal(self.opening_stock_quantity) - self.get_sold_quantity()

    def get_label_value(self):
        """Value encoded on the printed barcode label"""
        return self.barcode or self.item_code or f"P{self.pk:06d}"

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at', 'updated_at'])

    def restore(self):
        self.deleted_at = None
        self.save(update_fields=['deleted_at', 'updated_at'])

    class Meta:
        db_table = 'products'
        ordering = ['product_name', 'id']
