from django.contrib import admin
from .models import PurchaseOrder, DeliveryReceipt, DeliveryItem


class DeliveryItemInline(admin.TabularInline):
    model = DeliveryItem
    extra = 0
    fields = ['item', 'quantity_ordered', 'quantity_delivered', 'quantity_accepted', 'quantity_rejected', 'unit_cost']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['po_number', 'supplier', 'po_date', 'total_amount']
    search_fields = ['po_number']
    ordering = ['-po_date']


@admin.register(DeliveryReceipt)
class DeliveryReceiptAdmin(admin.ModelAdmin):
    list_display = ['dr_number', 'supplier', 'delivery_date', 'received_by', 'status', 'get_total', 'created_at']
    list_filter = ['status', 'supplier', 'delivery_date']
    search_fields = ['dr_number', 'purchase_order__po_number', 'received_by']
    ordering = ['-created_at']
    inlines = [DeliveryItemInline]
    readonly_fields = ['verified_at', 'created_at', 'updated_at']

    def get_total(self, obj):
        return f"₱{obj.get_total():.2f}"
    get_total.short_description = 'Total'
