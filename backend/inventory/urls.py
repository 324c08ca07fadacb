from django.urls import path
from .views import (
    supplier_list_create, supplier_detail,
    item_list_create, item_detail, item_history, item_categories,
    stock_movement_list
)

urlpatterns = [
    path('suppliers/', supplier_list_create, name='supplier-list-create'),
    path('suppliers/<int:pk>/', supplier_detail, name='supplier-detail'),
    path('items/', item_list_create, name='item-list-create'),
    path('items/categories/', item_categories, name='item-categories'),
    path('items/<int:pk>/', item_detail, name='item-detail'),
    path('items/<int:pk>/history/', item_history, name='item-history'),
    path('stock-movements/', stock_movement_list, name='stock-movement-list'),
]
