from django.urls import path
from . import views

urlpatterns = [
    path('stock-reports/', views.stock_report, name='stock-report'),
    path('detailed-stock-reports/', views.detailed_stock_report, name='detailed-stock-report'),
]
