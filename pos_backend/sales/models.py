from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Max
from django.utils import timezone

ZERO = Decimal('0.00')


class Sale(models.Model):
    """A bill"""
    PAYMENT_TYPE_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('upi', 'UPI'),
        ('credit', 'Credit'),
        ('cheque', 'Cheque'),
    ]

    bill_number = models.PositiveIntegerField(unique=True, validators=[MinValueValidator(1)])
    customer = models.ForeignKey('parties.Customer', on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name='sales')
    customer_name = models.CharField(max_length=200, blank=True)
    sale_date = models.DateTimeField(default=timezone.now, db_index=True)
    payment_type = models.CharField(max_length=20, choices=PAYMENT_TYPE_CHOICES, default='cash')
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    received_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    balance_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='sales')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Bill #{self.bill_number}"

    @classmethod
    def next_bill_number(cls):
        current = cls.objects.aggregate(current=Max('bill_number'))['current']
        return (current or 0) + 1

    def recalculate_totals(self):
        """Recompute subtotal, total and balance from the saved lines (does not save)"""
        self.subtotal = sum((item.line_total for item in self.items.all()), ZERO)
        self.total = self.subtotal - self.discount_amount + self.tax_amount
        self.balance_amount = self.received_amount - self.total

    @property
    def net_sales(self):
        return self.subtotal - self.discount_amount

    def get_cost(self):
        return sum((item.get_cost() for item in self.items.all()), ZERO)

    def get_profit(self):
        return self.net_sales - self.get_cost()

    class Meta:
        db_table = 'sales'
        ordering = ['-sale_date', '-id']


class SaleItem(models.Model):
    """Bill lines; product name, item code and buying cost are copied at sale time"""
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='sale_items')
    product_name = models.CharField(max_length=255)
    item_code = models.CharField(max_length=100, blank=True, null=True)
    quantity = models.DecimalField(max_digits=10, decimal_places=3)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    buying_cost = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    line_total = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"

    def get_cost(self):
        return self.quantity * self.buying_cost

    def get_profit(self):
        return self.line_total - self.get_cost()

    class Meta:
        db_table = 'sale_items'
        ordering = ['id']
