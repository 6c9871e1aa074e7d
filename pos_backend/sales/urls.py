from django.urls import path
from .views import (
    sale_list_create, sale_detail, next_bill_number, daily_profit_report, bill_wise_profit_report
)

urlpatterns = [
    path('sales/', sale_list_create, name='sale-list-create'),
    path('sales/daily-profit-report/', daily_profit_report, name='daily-profit-report'),
    path('sales/bill-wise-profit-report/', bill_wise_profit_report, name='bill-wise-profit-report'),
    path('sales/<int:pk>/', sale_detail, name='sale-detail'),
    path('next-bill-number/', next_bill_number, name='next-bill-number'),
]
