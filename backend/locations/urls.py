from django.urls import path
from .views import (
    zone_list_create, zone_detail,
    rack_list_create, rack_detail,
    location_list_create, location_detail
)

urlpatterns = [
    path('storage/zones/', zone_list_create, name='storage-zone-list-create'),
    path('storage/zones/<int:pk>/', zone_detail, name='storage-zone-detail'),
    path('storage/racks/', rack_list_create, name='storage-rack-list-create'),
    path('storage/racks/<int:pk>/', rack_detail, name='storage-rack-detail'),
    path('storage/locations/', location_list_create, name='storage-location-list-create'),
    path('storage/locations/<int:pk>/', location_detail, name='storage-location-detail'),
]
