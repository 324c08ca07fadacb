from django.urls import path
from .views import delivery_list_create, delivery_detail, delivery_status

urlpatterns = [
    path('deliveries/', delivery_list_create, name='delivery-list-create'),
    path('deliveries/<int:pk>/', delivery_detail, name='delivery-detail'),
    path('deliveries/<int:pk>/status/', delivery_status, name='delivery-status'),
]
