from django.urls import path
from .views import store_location_list_create, store_location_detail

urlpatterns = [
    path('store-locations/', store_location_list_create, name='store-location-list-create'),
    path('store-locations/<int:pk>/', store_location_detail, name='store-location-detail'),
]
