from django.urls import path
from . import views

urlpatterns = [
    path('dashboard/burial/', views.burial_dashboard_view, name='dashboard-burial'),
    path('dashboard/inventory/', views.inventory_dashboard_view, name='dashboard-inventory'),
]
