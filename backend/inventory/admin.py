from django.contrib import admin
from .models import Supplier, Item, StockMovement


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_person', 'contact_number', 'email', 'is_active']
    list_filter = ['is_active', 'business_type']
    search_fields = ['name', 'contact_person', 'email', 'tin_number']
    ordering = ['name']


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ['item_code', 'item_name', 'category', 'unit_of_measure', 'unit_cost', 'reorder_level', 'is_active']
    list_filter = ['category', 'is_active']
    search_fields = ['item_code', 'item_name', 'description']
    ordering = ['item_name']


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ['item', 'movement_type', 'quantity', 'balance_before', 'balance_after', 'reference_type', 'created_at']
    list_filter = ['movement_type', 'reference_type', 'created_at']
    search_fields = ['item__item_code', 'item__item_name', 'reference_id']
    readonly_fields = ['item', 'movement_type', 'quantity', 'balance_before', 'balance_after', 'unit_cost',
                       'reference_type', 'reference_id', 'performed_by', 'created_at']
