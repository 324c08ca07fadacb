from django.contrib import admin
from .models import StorageZone, StorageRack, StockLocation


@admin.register(StorageZone)
class StorageZoneAdmin(admin.ModelAdmin):
    list_display = ['zone_name', 'capacity', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['zone_name', 'description']
    ordering = ['zone_name']


@admin.register(StorageRack)
class StorageRackAdmin(admin.ModelAdmin):
    list_display = ['rack_code', 'zone', 'level', 'position', 'capacity']
    list_filter = ['zone']
    search_fields = ['rack_code']
    ordering = ['rack_code']


@admin.register(StockLocation)
class StockLocationAdmin(admin.ModelAdmin):
    list_display = ['tag_code', 'rack', 'item', 'quantity', 'batch_number', 'expiry_date', 'status']
    list_filter = ['status', 'rack__zone']
    search_fields = ['tag_code', 'item__item_code', 'batch_number']
